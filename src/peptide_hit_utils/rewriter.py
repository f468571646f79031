"""
Rewrite engine peptide annotations into canonical symbol notation.

``_.+42.011MDHTPQSQLK.L`` becomes ``-.M#DHTPQSQLK.L`` given a catalog with a
DynNTermPeptide mod of 42.0106 Da using symbol ``#``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import (
    C_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL, ENGINE_C_TERMINUS,
    ENGINE_N_TERMINUS, N_TERMINAL_PEPTIDE_SYMBOL, N_TERMINAL_PROTEIN_SYMBOL,
    TERMINUS_SYMBOL,
)
from .modifications import ModificationCatalog, ModificationDefinition
from .resolver import MassShiftResolution, MassShiftResolver, TieBreakPolicy
from .utils import clean_sequence, is_letter, replace_engine_terminus

logger = logging.getLogger(__name__)

_N_TERMINAL_MOD_MASS = re.compile(r'^([0-9.+\-]+)')
_MOD_MASS_RUN = re.compile(r'[0-9.+\-]+')


@dataclass
class RewrittenPeptide:
    """A peptide in symbol notation plus its total modification mass."""
    sequence: str
    mod_mass: float = 0.0
    unresolved: List[str] = field(default_factory=list)

    @property
    def clean_sequence(self) -> str:
        return clean_sequence(self.sequence)


def replace_terminus(peptide: str) -> str:
    """Convert MS-GF+ protein terminus markers: ``_.`` to ``-.`` and ``._`` to ``.-``."""
    return replace_engine_terminus(peptide, ENGINE_N_TERMINUS, ENGINE_C_TERMINUS)


def relocate_leading_symbols(peptide: str) -> str:
    """Move symbols before the first residue to just after it (``#*MNDR`` -> ``M#*NDR``)."""
    first = 0
    while first < len(peptide) and not is_letter(peptide[first]):
        first += 1
    if first == 0 or first >= len(peptide):
        return peptide
    return peptide[first] + peptide[:first] + peptide[first + 1:]


class PeptideAnnotationRewriter:
    """
    Replace inline mass shifts with catalog symbols.

    Args:
        catalog: Known modifications.
        static_mods_explicit: The engine prints static mod masses inline
            (MS-GF+). When False (MSGFDB) static residue and terminus mods
            are folded into the mod mass per residue.
        relocate_nterm_symbols: Move N-terminal symbols after the first residue.
        tie_policy: Tie-break rule passed to the resolver.
    """

    def __init__(self, catalog: ModificationCatalog,
                 static_mods_explicit: bool = True,
                 relocate_nterm_symbols: bool = True,
                 tie_policy: TieBreakPolicy = TieBreakPolicy.RESIDUE,
                 resolver: Optional[MassShiftResolver] = None):
        self.catalog = catalog
        self.static_mods_explicit = static_mods_explicit
        self.relocate_nterm_symbols = relocate_nterm_symbols
        self.resolver = resolver or MassShiftResolver(catalog, tie_policy)
        self._static_mods: List[ModificationDefinition] = catalog.static_mods()

    def _static_mass(self, residue: str, first: bool, last: bool,
                     prefix: str, suffix: str) -> float:
        mass = 0.0
        for mod in self._static_mods:
            targets = mod.target_residues
            if residue in targets:
                mass += mod.mass
            if first and N_TERMINAL_PEPTIDE_SYMBOL in targets:
                mass += mod.mass
            if first and N_TERMINAL_PROTEIN_SYMBOL in targets and prefix.startswith(TERMINUS_SYMBOL):
                mass += mod.mass
            if last and C_TERMINAL_PEPTIDE_SYMBOL in targets:
                mass += mod.mass
            if last and C_TERMINAL_PROTEIN_SYMBOL in targets and suffix.endswith(TERMINUS_SYMBOL):
                mass += mod.mass
        return mass

    @staticmethod
    def _apply(run_text: str, resolution: MassShiftResolution) -> str:
        if not resolution.matched and not resolution.unresolved:
            # Not a parsable mass; keep as-is
            return run_text
        return resolution.symbols

    def rewrite(self, peptide: str) -> RewrittenPeptide:
        """
        Rewrite one peptide.

        Args:
            peptide: Engine peptide such as ``K.M+15.995PEPC+57.021K.L``.

        Returns:
            :class:`RewrittenPeptide` with the canonical sequence, the total
            modification mass and any tokens that matched no catalog entry.
        """
        peptide = replace_terminus(peptide)

        prefix = suffix = ''
        if len(peptide) >= 4 and peptide[1] == '.' and peptide[-2] == '.':
            prefix, suffix = peptide[:2], peptide[-2:]
            peptide = peptide[2:-2]

        residue_positions = [i for i, char in enumerate(peptide) if is_letter(char)]
        if not residue_positions:
            return RewrittenPeptide(prefix + peptide + suffix)
        first_residue, last_residue = residue_positions[0], residue_positions[-1]

        mod_mass = 0.0
        unresolved: List[str] = []
        parts: List[str] = []
        index = 0

        n_match = _N_TERMINAL_MOD_MASS.match(peptide)
        if n_match:
            run_text = n_match.group(1)
            resolution = self.resolver.resolve(
                run_text, n_terminal=True,
                possible_c_terminal=len(residue_positions) == 1,
                residue=peptide[first_residue])
            parts.append(self._apply(run_text, resolution))
            mod_mass += resolution.mass
            unresolved.extend(resolution.unresolved)
            index = n_match.end()

        current_residue = TERMINUS_SYMBOL
        while index < len(peptide):
            char = peptide[index]
            if is_letter(char):
                current_residue = char
                parts.append(char)
                if not self.static_mods_explicit:
                    mod_mass += self._static_mass(char, index == first_residue,
                                                  index == last_residue, prefix, suffix)
                index += 1
                continue

            run = _MOD_MASS_RUN.match(peptide, index)
            if run is None:
                # Existing modification symbol
                parts.append(char)
                index += 1
                continue

            run_text = run.group()
            resolution = self.resolver.resolve(
                run_text, n_terminal=False,
                possible_c_terminal=index > last_residue,
                residue=current_residue)
            parts.append(self._apply(run_text, resolution))
            mod_mass += resolution.mass
            unresolved.extend(resolution.unresolved)
            index = run.end()

        sequence = ''.join(parts)
        if self.relocate_nterm_symbols:
            sequence = relocate_leading_symbols(sequence)

        if unresolved:
            logger.debug("Unresolved mass shifts %s in %s", unresolved, peptide)

        return RewrittenPeptide(prefix + sequence + suffix, mod_mass, unresolved)


def rewrite_peptide(peptide: str, catalog: ModificationCatalog,
                    static_mods_explicit: bool = True,
                    relocate_nterm_symbols: bool = True,
                    tie_policy: TieBreakPolicy = TieBreakPolicy.RESIDUE) -> RewrittenPeptide:
    """One-off convenience wrapper around :class:`PeptideAnnotationRewriter`."""
    rewriter = PeptideAnnotationRewriter(catalog, static_mods_explicit,
                                         relocate_nterm_symbols, tie_policy)
    return rewriter.rewrite(peptide)
