"""
Processing options, loadable from a YAML file.

Example ``options.yaml``::

    precursor_tolerance: 20ppm
    spec_evalue_threshold: 5.0e-7
    evalue_threshold: 0.75
    fasta: proteins.fasta
    modifications:
      - {mass: 15.994915, residues: M, type: DynamicMod, name: Oxidation}
      - {mass: 57.021464, residues: C, type: StaticMod, name: Carbamidomethyl}
      - {mass: 42.010565, residues: "<", type: DynNTermPeptide, symbol: "#"}
    custom_amino_acids:
      - {symbol: J, formula: C6H11NO}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .constants import (
    DEFAULT_EVALUE_THRESHOLD, DEFAULT_MAX_ISOTOPE_SHIFT, DEFAULT_SPEC_EVALUE_THRESHOLD,
)
from .delta_mass import ParentMassTolerance
from .exceptions import ModificationDefinitionError
from .modifications import ModificationCatalog, ModificationDefinition, ModificationType
from .ranking import SynopsisThresholds
from .resolver import TieBreakPolicy

logger = logging.getLogger(__name__)


@dataclass
class ProcessingOptions:
    """All settings of one processing run."""
    precursor_tolerance: str = '20ppm'
    spec_evalue_threshold: float = DEFAULT_SPEC_EVALUE_THRESHOLD
    evalue_threshold: float = DEFAULT_EVALUE_THRESHOLD
    qvalue_threshold: Optional[float] = None
    max_isotope_shift: int = DEFAULT_MAX_ISOTOPE_SHIFT
    tie_break_policy: str = TieBreakPolicy.RESIDUE.value
    relocate_nterm_symbols: bool = True
    create_first_hits: bool = True
    create_synopsis: bool = True
    create_mod_summary: bool = True
    fasta: Optional[str] = None
    modifications: List[Dict[str, Any]] = field(default_factory=list)
    custom_amino_acids: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ProcessingOptions':
        """Build options from a dict; unknown keys are logged and ignored."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        for key in sorted(set(data) - known):
            logger.warning("Unknown option '%s' ignored", key)
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'ProcessingOptions':
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Options file {path} must contain a mapping")
        logger.info("Loaded options from %s", path)
        return cls.from_dict(data)

    def update(self, **overrides) -> 'ProcessingOptions':
        """Apply overrides that are not None (e.g. from the command line)."""
        for key, value in overrides.items():
            if value is not None:
                setattr(self, key, value)
        return self

    def to_yaml(self, path: Union[str, Path]):
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        with open(path, 'w') as f:
            yaml.dump(data, f, sort_keys=False)

    # ----- derived objects -----

    @property
    def tolerance(self) -> ParentMassTolerance:
        return ParentMassTolerance.parse(str(self.precursor_tolerance))

    @property
    def tie_policy(self) -> TieBreakPolicy:
        return TieBreakPolicy(str(self.tie_break_policy).lower())

    @property
    def thresholds(self) -> SynopsisThresholds:
        return SynopsisThresholds(self.spec_evalue_threshold, self.evalue_threshold,
                                  self.qvalue_threshold)

    def build_catalog(self) -> ModificationCatalog:
        """
        Catalog of :attr:`modifications` plus :attr:`custom_amino_acids`.

        Raises:
            ModificationDefinitionError: If a definition is malformed.
        """
        catalog = ModificationCatalog.from_records(self.modifications)
        for number, record in enumerate(self.custom_amino_acids, start=1):
            symbol = str(record.get('symbol', ''))
            formula = str(record.get('formula', ''))
            if len(symbol) != 1 or not symbol.isalpha() or not formula:
                raise ModificationDefinitionError(
                    f"Custom amino acid #{number} needs a one-letter symbol and a formula",
                    str(record))
            catalog.add(ModificationDefinition(
                mass=float(record.get('mass', 0.0) or 0.0),
                target_residues=symbol.upper(),
                mod_type=ModificationType.CUSTOM_AA,
                name=str(record.get('name', '') or ''),
                formula=formula,
            ))
        return catalog
