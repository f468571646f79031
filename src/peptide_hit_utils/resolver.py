"""
Resolve runs of inline signed mass shifts (``+79.966+14.016``) into
modification symbols.

Each token is matched to the nearest catalog mass within 0.25 Da. Terminal
positions first search the matching terminal classes and then fall back to
less restricted candidate sets; ties are broken by :class:`TieBreakPolicy`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from .constants import MOD_MASS_MATCH_TOLERANCE
from .modifications import (
    C_TERMINAL_TYPES, N_TERMINAL_TYPES, SEARCHABLE_TYPES,
    ModificationCatalog, ModificationDefinition,
)
from .utils import should_show_warning

logger = logging.getLogger(__name__)

MOD_MASS_TOKEN = re.compile(r'[+-][0-9.]+')
TIE_TOLERANCE = 1e-9


class TieBreakPolicy(Enum):
    """How to choose between candidates whose mass differences are equal."""
    RESIDUE = 'residue'     # prefer a residue-specific match, else catalog order
    DYNAMIC = 'dynamic'     # prefer dynamic over static, then residue match
    STATIC = 'static'       # prefer static over dynamic, then residue match


@dataclass
class MassShiftResolution:
    """Outcome of resolving one run of mass tokens."""
    symbols: str = ''
    mass: float = 0.0
    matched: int = 0
    unresolved: List[str] = field(default_factory=list)
    contains_static: bool = False
    residual: float = 0.0

    @property
    def success(self) -> bool:
        return self.matched > 0


def _names_residue(definition: ModificationDefinition, residue: str) -> bool:
    return bool(definition.target_residues) and residue in definition.target_residues


def candidate_phases(n_terminal: bool, possible_c_terminal: bool) -> List[FrozenSet]:
    """
    Ordered candidate type sets to search for one token.

    N-terminal runs try N-terminal classes first; runs that may be C-terminal
    try C-terminal classes; internal runs skip C-terminal classes before
    falling back to every searchable class.
    """
    phases: List[FrozenSet] = []
    if n_terminal:
        phases.append(N_TERMINAL_TYPES)
    if possible_c_terminal:
        phases.append(C_TERMINAL_TYPES)
    else:
        phases.append(SEARCHABLE_TYPES - C_TERMINAL_TYPES)
    phases.append(SEARCHABLE_TYPES)
    return phases


class MassShiftResolver:
    """
    Convert signed mass tokens into catalog symbols.

    Args:
        catalog: Known modifications.
        tie_policy: Tie-break rule for equally close candidates.
        tolerance: Maximum accepted ``|candidate - observed|`` (strict).
    """

    def __init__(self, catalog: ModificationCatalog,
                 tie_policy: TieBreakPolicy = TieBreakPolicy.RESIDUE,
                 tolerance: float = MOD_MASS_MATCH_TOLERANCE):
        self.catalog = catalog
        self.tie_policy = tie_policy
        self.tolerance = tolerance
        self.unresolved_count = 0

    def _prefer(self, candidate: ModificationDefinition, best: ModificationDefinition,
                residue: str) -> bool:
        """True if *candidate* should replace an equally close *best*."""
        if self.tie_policy is TieBreakPolicy.DYNAMIC and candidate.is_static != best.is_static:
            return not candidate.is_static
        if self.tie_policy is TieBreakPolicy.STATIC and candidate.is_static != best.is_static:
            return candidate.is_static
        return _names_residue(candidate, residue) and not _names_residue(best, residue)

    def best_match(self, mass: float, n_terminal: bool = False,
                   possible_c_terminal: bool = False,
                   residue: str = '-') -> Optional[Tuple[ModificationDefinition, float]]:
        """
        Closest catalog entry for one mass, searching phases in order.

        Returns:
            (definition, mass - definition.mass), or None if nothing is within
            tolerance in any phase.
        """
        for allowed in candidate_phases(n_terminal, possible_c_terminal):
            best: Optional[ModificationDefinition] = None
            best_diff = 0.0
            for index in self.catalog.candidates(mass, self.tolerance, allowed):
                candidate = self.catalog[index]
                diff = abs(candidate.mass - mass)
                if best is None or diff < best_diff - TIE_TOLERANCE:
                    best, best_diff = candidate, diff
                elif abs(diff - best_diff) <= TIE_TOLERANCE and self._prefer(candidate, best, residue):
                    best, best_diff = candidate, diff
            if best is not None:
                return best, mass - best.mass
        return None

    def resolve(self, mod_text: str, n_terminal: bool = False,
                possible_c_terminal: bool = False,
                residue: str = '-') -> MassShiftResolution:
        """
        Resolve a run of concatenated tokens such as ``+42.011+57.021``.

        Args:
            mod_text: The run of signed decimal tokens.
            n_terminal: The run precedes the first residue.
            possible_c_terminal: The run follows the last residue.
            residue: Adjacent residue used for tie-breaking.

        Returns:
            A :class:`MassShiftResolution`. Matched static mods add mass but
            no symbol; unmatched tokens keep their literal text and still add
            their mass.
        """
        result = MassShiftResolution()

        for match in MOD_MASS_TOKEN.finditer(mod_text):
            token = match.group()
            try:
                mass = float(token)
            except ValueError:
                result.symbols += token
                result.unresolved.append(token)
                continue

            result.mass += mass
            found = self.best_match(mass, n_terminal, possible_c_terminal, residue)

            if found is None:
                result.symbols += token
                result.unresolved.append(token)
                self.unresolved_count += 1
                if should_show_warning(self.unresolved_count):
                    logger.warning("No modification within %.2f Da of %s (residue %s)",
                                   self.tolerance, token, residue)
                continue

            definition, residual = found
            result.matched += 1
            result.residual += residual
            if definition.is_static:
                result.contains_static = True
            elif definition.emits_symbol:
                result.symbols += definition.symbol

        return result
