"""
Tryptic cleavage state (NTT) of a peptide given its prefix and suffix residues.
"""

from __future__ import annotations

from enum import IntEnum

from .constants import (
    C_TERMINAL_PROTEIN_SYMBOL, N_TERMINAL_PROTEIN_SYMBOL, TERMINUS_SYMBOL,
)
from .utils import clean_sequence, is_letter, split_prefix_and_suffix

PROTEIN_TERMINUS_SYMBOLS = frozenset({TERMINUS_SYMBOL, N_TERMINAL_PROTEIN_SYMBOL,
                                      C_TERMINAL_PROTEIN_SYMBOL})


class CleavageState(IntEnum):
    UNKNOWN = -1
    NON_SPECIFIC = 0
    PARTIAL = 1
    FULL = 2


class TerminusState(IntEnum):
    NONE = 0
    PROTEIN_N_TERMINUS = 1
    PROTEIN_C_TERMINUS = 2
    PROTEIN_N_AND_C_TERMINUS = 3


def matches_cleavage_rule(left: str, right: str) -> bool:
    """Trypsin: cleave after K or R, except before P."""
    return left in ('K', 'R') and right != 'P'


def _letter_nearest_end(text: str) -> str:
    for char in reversed(text):
        if is_letter(char) or char in PROTEIN_TERMINUS_SYMBOLS:
            return char
    return TERMINUS_SYMBOL if not text else text[0]


def _letter_nearest_start(text: str) -> str:
    for char in text:
        if is_letter(char) or char in PROTEIN_TERMINUS_SYMBOLS:
            return char
    return TERMINUS_SYMBOL if not text else text[-1]


def compute_terminus_state(prefix: str, suffix: str) -> TerminusState:
    at_n = prefix in PROTEIN_TERMINUS_SYMBOLS
    at_c = suffix in PROTEIN_TERMINUS_SYMBOLS
    if at_n and at_c:
        return TerminusState.PROTEIN_N_AND_C_TERMINUS
    if at_n:
        return TerminusState.PROTEIN_N_TERMINUS
    if at_c:
        return TerminusState.PROTEIN_C_TERMINUS
    return TerminusState.NONE


def compute_cleavage_state(sequence: str, prefix: str = None, suffix: str = None) -> CleavageState:
    """
    Number of tryptic termini of a peptide.

    Args:
        sequence: Either ``K.PEPTIDE.G`` (prefix and suffix given inline) or a
            clean sequence with *prefix* and *suffix* passed separately.
        prefix: Residue(s) before the peptide, ``-`` at the protein N-terminus.
        suffix: Residue(s) after the peptide, ``-`` at the protein C-terminus.

    Returns:
        FULL (2), PARTIAL (1) or NON_SPECIFIC (0). Peptides at a protein
        terminus are never PARTIAL.
    """
    if prefix is None and suffix is None:
        primary, prefix, suffix = split_prefix_and_suffix(sequence)
        sequence = primary
    clean = clean_sequence(sequence, strip_prefix_and_suffix=False)
    if not clean:
        return CleavageState.NON_SPECIFIC

    prefix_char = _letter_nearest_end(prefix or '')
    suffix_char = _letter_nearest_start(suffix or '')
    start, end = clean[0], clean[-1]

    terminus = compute_terminus_state(prefix_char, suffix_char)
    if terminus is TerminusState.PROTEIN_N_AND_C_TERMINUS:
        return CleavageState.FULL
    if terminus is TerminusState.PROTEIN_N_TERMINUS:
        return CleavageState.FULL if matches_cleavage_rule(end, suffix_char) else CleavageState.NON_SPECIFIC
    if terminus is TerminusState.PROTEIN_C_TERMINUS:
        return CleavageState.FULL if matches_cleavage_rule(prefix_char, start) else CleavageState.NON_SPECIFIC

    rule_start = matches_cleavage_rule(prefix_char, start)
    rule_end = matches_cleavage_rule(end, suffix_char)
    if rule_start and rule_end:
        return CleavageState.FULL
    if rule_start or rule_end:
        return CleavageState.PARTIAL
    return CleavageState.NON_SPECIFIC


def count_missed_cleavages(sequence: str) -> int:
    """Internal K/R not followed by P, e.g. ``R.PEPKTIDER.A`` has 1."""
    clean = clean_sequence(sequence)
    return sum(1 for left, right in zip(clean, clean[1:]) if matches_cleavage_rule(left, right))
