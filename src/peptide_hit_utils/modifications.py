"""
Modification definitions and the catalog used to look them up by mass.

The catalog is populated from an external parameter source (YAML options,
or a search-engine parameter file parsed elsewhere) and offers nearest-mass
candidate lookup backed by a numpy mass array.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set

import numpy as np

from .constants import (
    DEFAULT_MODIFICATION_SYMBOLS, MOD_MASS_MATCH_TOLERANCE,
    NO_AFFECTED_ATOM_SYMBOL, NO_SYMBOL_MODIFICATION_SYMBOL,
)
from .exceptions import ModificationDefinitionError

logger = logging.getLogger(__name__)


class ModificationType(Enum):
    STATIC = 'StaticMod'
    DYNAMIC = 'DynamicMod'
    DYN_NTERM_PEPTIDE = 'DynNTermPeptide'
    DYN_CTERM_PEPTIDE = 'DynCTermPeptide'
    DYN_NTERM_PROTEIN = 'DynNTermProtein'
    DYN_CTERM_PROTEIN = 'DynCTermProtein'
    CUSTOM_AA = 'CustomAA'

    @classmethod
    def parse(cls, text: str) -> 'ModificationType':
        """Look up a type by value (``DynNTermPeptide``) or name (``DYN_NTERM_PEPTIDE``)."""
        key = text.strip()
        for member in cls:
            if key.lower() in (member.value.lower(), member.name.lower()):
                return member
        # Short aliases used in MS-GF+ parameter files
        aliases = {'fix': cls.STATIC, 'opt': cls.DYNAMIC, 'static': cls.STATIC, 'dynamic': cls.DYNAMIC}
        if key.lower() in aliases:
            return aliases[key.lower()]
        raise ModificationDefinitionError(f"Unknown modification type '{text}'")


N_TERMINAL_TYPES = frozenset({ModificationType.DYN_NTERM_PEPTIDE, ModificationType.DYN_NTERM_PROTEIN})
C_TERMINAL_TYPES = frozenset({ModificationType.DYN_CTERM_PEPTIDE, ModificationType.DYN_CTERM_PROTEIN})
SEARCHABLE_TYPES = frozenset(t for t in ModificationType if t is not ModificationType.CUSTOM_AA)


@dataclass(frozen=True)
class ModificationDefinition:
    """
    One known modification.

    ``target_residues`` holds residue letters and/or the terminus sentinels
    ``<`` ``>`` ``[`` ``]``; an empty string means any residue.
    """
    mass: float
    target_residues: str = ''
    mod_type: ModificationType = ModificationType.DYNAMIC
    symbol: str = ''
    name: str = ''
    affected_atom: str = NO_AFFECTED_ATOM_SYMBOL
    formula: str = ''       # custom amino acids only

    @property
    def is_static(self) -> bool:
        return self.mod_type is ModificationType.STATIC

    @property
    def emits_symbol(self) -> bool:
        return not self.is_static and self.symbol != NO_SYMBOL_MODIFICATION_SYMBOL

    def targets(self, residue: str) -> bool:
        """True if this mod can decorate *residue* (generic mods match anything)."""
        return not self.target_residues or residue in self.target_residues


class ModificationCatalog:
    """
    Ordered collection of :class:`ModificationDefinition` with resolved symbols.

    Static mods always carry the no-symbol marker ``-``. Dynamic mods added
    without a symbol get the next free one from ``*#@$&!%~^``; a dynamic mod
    with the same mass and type as an existing one shares its symbol.

    Example::

        catalog = ModificationCatalog()
        catalog.add(ModificationDefinition(15.9949, 'M', ModificationType.DYNAMIC))
        catalog.add(ModificationDefinition(57.0215, 'C', ModificationType.STATIC))
        catalog.candidates(15.995)      # -> [0]
    """

    def __init__(self, definitions: Optional[Iterable[ModificationDefinition]] = None,
                 symbol_pool: str = DEFAULT_MODIFICATION_SYMBOLS):
        self._definitions: List[ModificationDefinition] = []
        self._symbol_pool = symbol_pool
        self._masses: Optional[np.ndarray] = None
        for definition in definitions or ():
            self.add(definition)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[ModificationDefinition]:
        return iter(self._definitions)

    def __getitem__(self, index: int) -> ModificationDefinition:
        return self._definitions[index]

    # ----- building -----

    def _used_symbols(self) -> Set[str]:
        return {d.symbol for d in self._definitions if d.emits_symbol}

    def _next_free_symbol(self) -> str:
        used = self._used_symbols()
        for symbol in self._symbol_pool:
            if symbol not in used:
                return symbol
        raise ModificationDefinitionError(
            "Too many dynamic modifications",
            f"All symbols in '{self._symbol_pool}' are already assigned")

    def add(self, definition: ModificationDefinition) -> ModificationDefinition:
        """
        Add a definition, assigning its symbol. Returns the stored definition.

        Raises:
            ModificationDefinitionError: If an explicit symbol is already used by
                a mod with a different mass, or no symbols remain.
        """
        if definition.mod_type in (ModificationType.STATIC, ModificationType.CUSTOM_AA):
            definition = replace(definition, symbol=NO_SYMBOL_MODIFICATION_SYMBOL)
        elif definition.symbol and definition.symbol != NO_SYMBOL_MODIFICATION_SYMBOL:
            for existing in self._definitions:
                if existing.emits_symbol and existing.symbol == definition.symbol \
                        and abs(existing.mass - definition.mass) > 1e-4:
                    raise ModificationDefinitionError(
                        f"Symbol {definition.symbol} is used by two modifications",
                        f"{existing.mass} and {definition.mass}")
        else:
            shared = self._find_same_mass(definition)
            symbol = shared.symbol if shared is not None else self._next_free_symbol()
            definition = replace(definition, symbol=symbol)

        self._definitions.append(definition)
        self._masses = None
        logger.debug("Added modification %s %.4f on '%s' (%s)", definition.symbol,
                     definition.mass, definition.target_residues, definition.mod_type.value)
        return definition

    def _find_same_mass(self, definition: ModificationDefinition) -> Optional[ModificationDefinition]:
        for existing in self._definitions:
            if existing.emits_symbol and existing.mod_type is definition.mod_type \
                    and abs(existing.mass - definition.mass) < 1e-4:
                return existing
        return None

    @classmethod
    def from_records(cls, records: Iterable[Dict]) -> 'ModificationCatalog':
        """
        Build a catalog from plain dicts, e.g. loaded from YAML.

        Each record needs ``mass``; optional keys are ``residues``, ``type``,
        ``symbol``, ``name``, ``affected_atom`` and ``formula``.
        """
        catalog = cls()
        for number, record in enumerate(records, start=1):
            try:
                mass = float(record['mass'])
            except (KeyError, TypeError, ValueError) as ex:
                raise ModificationDefinitionError(
                    f"Modification #{number} lacks a numeric mass", str(record)) from ex
            mod_type = record.get('type', ModificationType.DYNAMIC)
            if not isinstance(mod_type, ModificationType):
                mod_type = ModificationType.parse(str(mod_type))
            catalog.add(ModificationDefinition(
                mass=mass,
                target_residues=str(record.get('residues', '') or ''),
                mod_type=mod_type,
                symbol=str(record.get('symbol', '') or ''),
                name=str(record.get('name', '') or ''),
                affected_atom=str(record.get('affected_atom', NO_AFFECTED_ATOM_SYMBOL)),
                formula=str(record.get('formula', '') or ''),
            ))
        return catalog

    # ----- views -----

    def static_mods(self) -> List[ModificationDefinition]:
        return [d for d in self._definitions if d.is_static]

    def dynamic_mods(self) -> List[ModificationDefinition]:
        return [d for d in self._definitions if d.mod_type not in (ModificationType.STATIC,
                                                                   ModificationType.CUSTOM_AA)]

    def custom_amino_acids(self) -> List[ModificationDefinition]:
        return [d for d in self._definitions if d.mod_type is ModificationType.CUSTOM_AA]

    def find_by_symbol(self, symbol: str) -> Optional[ModificationDefinition]:
        for definition in self._definitions:
            if definition.emits_symbol and definition.symbol == symbol:
                return definition
        return None

    # ----- lookup -----

    @property
    def masses(self) -> np.ndarray:
        if self._masses is None:
            self._masses = np.array([d.mass for d in self._definitions], dtype=float)
        return self._masses

    def candidates(self, mass: float,
                   tolerance: float = MOD_MASS_MATCH_TOLERANCE,
                   allowed_types: Optional[Sequence[ModificationType]] = None) -> List[int]:
        """
        Indices of definitions within *tolerance* of *mass*, in catalog order.

        Args:
            mass: Observed modification mass.
            tolerance: Strict upper bound on ``|definition.mass - mass|``.
            allowed_types: Restrict to these types; custom amino acids are
                never returned.
        """
        if not self._definitions:
            return []
        allowed = SEARCHABLE_TYPES if allowed_types is None else SEARCHABLE_TYPES & set(allowed_types)
        within = np.flatnonzero(np.abs(self.masses - mass) < tolerance)
        return [int(i) for i in within if self._definitions[i].mod_type in allowed]
