"""
Utility functions for peptide sequence notation, protein lists, number
parsing and formatting, and bounded error bookkeeping.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from .constants import MAX_ERROR_LOG_LENGTH, TERMINUS_SYMBOL

_NOT_LETTER = re.compile(r'[^A-Za-z]')
_PROTEIN_AND_TERMINI = re.compile(r'([^;]+)\(pre=(.),post=(.)\)', re.IGNORECASE)


def is_letter(char: str) -> bool:
    """True for A-Z or a-z only (no other unicode letters)."""
    return ('A' <= char <= 'Z') or ('a' <= char <= 'z')


def split_prefix_and_suffix(sequence: str) -> Tuple[str, str, str]:
    """
    Split a peptide of the form ``R.PEPTIDEK.L`` into its parts.

    Args:
        sequence: Peptide, optionally with prefix and suffix residues.

    Returns:
        Tuple of (primary_sequence, prefix, suffix). Prefix and suffix are
        empty strings when the sequence does not carry them.
    """
    if not sequence:
        return '', '', ''

    if sequence.startswith('..') and len(sequence) > 2:
        sequence = '.' + sequence[2:]
    if sequence.endswith('..') and len(sequence) > 2:
        sequence = sequence[:-2] + '.'

    first = sequence.find('.')
    if first < 0:
        return sequence, '', ''
    last = sequence.rfind('.')

    if last > first + 1:
        return sequence[first + 1:last], sequence[:first], sequence[last + 1:]

    if last == first + 1:
        if first <= 1:
            return '', sequence[:first], sequence[last + 1:]
        return sequence, '', ''

    # Only one period
    if first == 0:
        return sequence[1:], '', ''
    if first == len(sequence) - 1:
        return sequence[:first], '', ''
    if first == 1 and len(sequence) > 2:
        return sequence[2:], sequence[:1], ''
    if first == len(sequence) - 2:
        return sequence[:first], '', sequence[first + 1:]
    return sequence, '', ''


def clean_sequence(sequence_with_mods: str, strip_prefix_and_suffix: bool = True) -> str:
    """Return only the residue letters of a peptide, without prefix/suffix."""
    if sequence_with_mods is None:
        return ''
    if strip_prefix_and_suffix:
        sequence_with_mods, _, _ = split_prefix_and_suffix(sequence_with_mods)
    return _NOT_LETTER.sub('', sequence_with_mods)


def parse_spec_index(spec_id: str) -> Optional[int]:
    """
    Parse an MS-GF+ SpecID value into an integer index.

    Accepts plain integers and ``index=123``. Native ids such as
    ``controllerType=0 controllerNumber=1 scan=6390`` return None so that the
    caller can number them in order of appearance.
    """
    text = spec_id.strip()
    if text.startswith('index='):
        text = text[len('index='):]
    try:
        return int(text)
    except ValueError:
        return None


def parse_int(value: str, default: int = 0) -> int:
    """Parse an integer, rounding decimal text such as ``"8.000"``."""
    try:
        return int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return default


def parse_float(value: str, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def dbl_to_string(value: float, digits: int, zero_threshold: float = 0.0) -> str:
    """
    Format a number with at most *digits* decimals, trimming trailing zeros.

    Values whose magnitude is below *zero_threshold* are written as ``0``.
    """
    if abs(value) < zero_threshold:
        return '0'
    text = f"{value:.{digits}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        text = '0'
    return text


def mass_error_to_string(mass_error_da: float) -> str:
    """Format a Da mass error with precision that depends on its magnitude."""
    if abs(mass_error_da) < 0.000001:
        return '0'
    if abs(mass_error_da) < 0.0001:
        return dbl_to_string(mass_error_da, 6, 0.0000001)
    return dbl_to_string(mass_error_da, 5, 0.000001)


def trim_zero_if_not_first(result_id: int, value_text: str) -> str:
    """Write ``0.0`` as ``0`` for every result except the first one."""
    if result_id > 1 and value_text == '0.0':
        return '0'
    return value_text


def truncate_protein_name(name_and_description: str) -> str:
    """Return the text before the first space."""
    index = name_and_description.find(' ')
    if index > 0:
        return name_and_description[:index]
    return name_and_description


def split_protein_list(protein_list: str) -> Tuple[str, Dict[str, Tuple[str, str]]]:
    """
    Split a semicolon separated MS-GF+ protein list.

    Format: ``"AT1G26570.1(pre=K,post=N);AT3G29360.1(pre=K,post=N)"``

    Returns:
        Tuple of (first_protein_name, {protein: (pre, post)}). The dict is
        empty when the text is a single protein without terminus info.
    """
    proteins: Dict[str, Tuple[str, str]] = {}
    for match in _PROTEIN_AND_TERMINI.finditer(protein_list):
        name = truncate_protein_name(match.group(1))
        if name not in proteins:
            proteins[name] = (match.group(2), match.group(3))

    if not proteins:
        return truncate_protein_name(protein_list), proteins
    return next(iter(proteins)), proteins


def add_update_prefix_and_suffix(peptide: str, prefix: str, suffix: str) -> str:
    """Add, or replace, the prefix and suffix residues of a peptide."""
    if '.' not in peptide:
        return f"{prefix}.{peptide}.{suffix}"

    if len(peptide) >= 2:
        if peptide[1] == '.':
            updated = prefix + '.' + peptide[2:]
        elif peptide[0] == '.':
            updated = prefix + peptide
        else:
            updated = prefix + '.' + peptide
    else:
        updated = peptide

    if len(updated) >= 4:
        if updated[-2] == '.':
            updated = updated[:-2] + '.' + suffix
        elif updated[-1] == '.':
            updated += suffix
        else:
            updated = updated + '.' + suffix

    return updated


def replace_engine_terminus(peptide: str, n_terminus: str = '_.', c_terminus: str = '._') -> str:
    """Replace engine protein-terminus markers with the canonical ``-``."""
    if peptide.startswith(n_terminus):
        peptide = TERMINUS_SYMBOL + '.' + peptide[len(n_terminus):]
    if peptide.endswith(c_terminus):
        peptide = peptide[:-len(c_terminus)] + '.' + TERMINUS_SYMBOL
    return peptide


def should_show_warning(warning_count: int, always_show: int = 10) -> bool:
    """
    Decide whether the *warning_count*-th occurrence of a warning is shown.

    The first *always_show* occurrences are shown, then every 100th below
    1000, every 1000th below 10000, and so on.
    """
    if warning_count <= always_show:
        return True
    step = 100
    while step <= 100000:
        if warning_count < step * 10:
            return warning_count % step == 0
        step *= 10
    return False


class ErrorLog:
    """
    Accumulate per-line error messages up to a fixed character budget.

    Messages added after the budget is reached are dropped.
    """

    def __init__(self, max_length: int = MAX_ERROR_LOG_LENGTH):
        self.max_length = max_length
        self._messages: List[str] = []
        self._length = 0
        self.dropped = 0

    def add(self, message: str) -> bool:
        if self._length >= self.max_length:
            self.dropped += 1
            return False
        self._messages.append(message)
        self._length += len(message) + 1
        return True

    @property
    def messages(self) -> List[str]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __bool__(self) -> bool:
        return bool(self._messages)

    def __str__(self) -> str:
        return '\n'.join(self._messages)
