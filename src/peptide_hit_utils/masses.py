"""
Amino acid mass table and peptide mass calculations.

Computes neutral monoisotopic peptide masses from residue letters, applies
positional and isotopic modifications, and converts between charge states.
Element masses come from :data:`pyteomics.mass.nist_mass`.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pyteomics import mass as pyteomics_mass
from pyteomics.auxiliary import PyteomicsError

from .constants import (
    AA_COMPOSITIONS, AA_MASSES, DEFAULT_C_TERMINUS_MASS,
    DEFAULT_N_TERMINUS_MASS, NO_AFFECTED_ATOM_SYMBOL, PROTON,
)
from .utils import split_prefix_and_suffix

logger = logging.getLogger(__name__)

_NUMERIC_MOD = re.compile(r'[+-][0-9.]+')


# =============================================================================
# Data classes
# =============================================================================

@dataclass
class AminoAcidEntry:
    """Mass and elemental composition of one residue letter."""
    symbol: str
    mass: float = 0.0
    composition: Dict[str, int] = field(default_factory=dict)


@dataclass
class ResidueModification:
    """A modification applied to a residue when computing a peptide mass."""
    residue_index: int      # 1-based position in the clean sequence
    mass: float
    affected_atom: str = NO_AFFECTED_ATOM_SYMBOL   # element symbol for isotopic mods


# =============================================================================
# Helpers
# =============================================================================

def element_mass(symbol: str) -> float:
    """Monoisotopic mass of an element; raises KeyError if unknown."""
    return pyteomics_mass.nist_mass[symbol][0][0]


def formula_to_composition(formula: str) -> Dict[str, int]:
    """
    Parse an empirical formula such as ``C2H3NO`` or ``CH23NO-5S+4``.

    Raises:
        ValueError: If the formula cannot be parsed.
    """
    try:
        composition = pyteomics_mass.Composition(formula=formula)
    except PyteomicsError as ex:
        raise ValueError(f"Error parsing empirical formula '{formula}': {ex}") from ex
    unknown = [element for element in composition if element not in pyteomics_mass.nist_mass]
    if unknown:
        raise ValueError(f"Unknown element(s) {', '.join(unknown)} in formula '{formula}'")
    return {element: int(count) for element, count in composition.items()}


def composition_mass(composition: Dict[str, int]) -> float:
    """Monoisotopic mass of an element composition."""
    return sum(count * element_mass(element) for element, count in composition.items())


def mass_to_ppm(mass_to_convert: float, reference_mass: float) -> float:
    """Convert a mass difference (Da) to ppm relative to *reference_mass*."""
    return mass_to_convert * 1e6 / reference_mass


def ppm_to_mass(ppm_to_convert: float, reference_mass: float) -> float:
    """Convert a ppm value to a mass difference (Da) at *reference_mass*."""
    return ppm_to_convert / 1e6 * reference_mass


# =============================================================================
# Mass table
# =============================================================================

class AminoAcidMassTable:
    """
    Per-residue monoisotopic masses and compositions for the 26 letter slots.

    Args:
        charge_carrier_mass: Mass added per charge (default: proton).
        remove_prefix_and_suffix: Strip ``R.`` / ``.K`` context residues
            before computing sequence masses.

    Example::

        table = AminoAcidMassTable()
        table.compute_sequence_mass("PEPTIDE")       # neutral mass
        table.convolute(800.4, 2, 0)                  # m/z at 2+ -> neutral
    """

    def __init__(self,
                 charge_carrier_mass: float = PROTON,
                 remove_prefix_and_suffix: bool = True):
        self.charge_carrier_mass = charge_carrier_mass
        self.remove_prefix_and_suffix = remove_prefix_and_suffix
        self.error_message = ''
        self._entries: Dict[str, AminoAcidEntry] = {}
        self.reset_amino_acids()
        self.reset_terminus_masses()

    # ----- table maintenance -----

    def reset_amino_acids(self):
        for symbol in AA_MASSES:
            self.reset_amino_acid(symbol)

    def reset_amino_acid(self, symbol: str):
        if symbol not in AA_MASSES:
            return
        self._entries[symbol] = AminoAcidEntry(symbol, AA_MASSES[symbol],
                                               dict(AA_COMPOSITIONS[symbol]))

    def reset_terminus_masses(self):
        self.n_terminus_mass = DEFAULT_N_TERMINUS_MASS
        self.c_terminus_mass = DEFAULT_C_TERMINUS_MASS

    def get_entry(self, symbol: str) -> AminoAcidEntry:
        """Entry for *symbol*; unrecognized symbols give a zero entry."""
        entry = self._entries.get(symbol)
        if entry is None:
            return AminoAcidEntry(symbol)
        return entry

    def get_mass(self, symbol: str) -> float:
        return self.get_entry(symbol).mass

    def get_composition(self, symbol: str) -> Dict[str, int]:
        return dict(self.get_entry(symbol).composition)

    def set_amino_acid_mass(self, symbol: str, mass: float) -> bool:
        """Override the mass of a residue slot; False for an invalid symbol."""
        if symbol not in self._entries:
            return False
        self._entries[symbol].mass = mass
        return True

    def set_amino_acid_composition(self, symbol: str, composition: Dict[str, int]) -> bool:
        if symbol not in self._entries:
            return False
        self._entries[symbol].composition = dict(composition)
        return True

    def set_custom_amino_acid(self, symbol: str, formula: str,
                              mass: Optional[float] = None) -> bool:
        """
        Define a custom residue from its empirical formula.

        Args:
            symbol: Letter slot to override (A-Z).
            formula: Empirical formula, e.g. ``C5H7NO``.
            mass: Explicit mass; computed from *formula* when omitted.
        """
        composition = formula_to_composition(formula)
        if mass is None:
            mass = composition_mass(composition)
        if not self.set_amino_acid_mass(symbol, mass):
            return False
        self.set_amino_acid_composition(symbol, composition)
        logger.debug("Custom amino acid %s = %s (%.5f Da)", symbol, formula, mass)
        return True

    # ----- sequence masses -----

    def _primary_sequence(self, sequence: str) -> str:
        if not self.remove_prefix_and_suffix:
            return sequence
        primary, prefix, suffix = split_prefix_and_suffix(sequence)
        if not primary.strip():
            return sequence
        return primary

    def compute_sequence_mass(self,
                              sequence: str,
                              modified_residues: Optional[List[ResidueModification]] = None
                              ) -> float:
        """
        Compute the neutral monoisotopic mass of a peptide.

        Args:
            sequence: One-letter residues, no modification symbols. May carry
                prefix and suffix residues (``R.PEPTIDE.K``).
            modified_residues: Optional modifications. Positional mods add
                their mass once; isotopic mods add their mass once per atom of
                the affected element in the full sequence.

        Returns:
            The mass, or -1 if an unknown symbol or affected atom is found
            (see :attr:`error_message`).
        """
        primary = self._primary_sequence(sequence)
        self.error_message = ''

        mass = 0.0
        valid_residues = 0
        for residue in primary:
            if not ('A' <= residue <= 'Z'):
                self.error_message = f"Unknown symbol {residue} in sequence {primary}"
                return -1
            mass += self.get_mass(residue)
            valid_residues += 1

        if valid_residues > 0:
            mass += self.n_terminus_mass + self.c_terminus_mass

        if not modified_residues:
            return mass

        element_counts: Optional[Dict[str, int]] = None
        for mod in modified_residues:
            if not mod.affected_atom or mod.affected_atom == NO_AFFECTED_ATOM_SYMBOL:
                mass += mod.mass
                continue

            if mod.affected_atom not in pyteomics_mass.nist_mass:
                self.error_message = f"Unknown Affected Atom '{mod.affected_atom}'"
                return -1

            if element_counts is None:
                element_counts = self.composition(primary)

            count = element_counts.get(mod.affected_atom, 0)
            if count == 0:
                logger.warning("No amino acids in %s contain element %s", primary, mod.affected_atom)
            else:
                mass += count * mod.mass

        return mass

    def compute_sequence_mass_numeric_mods(self, sequence: str) -> float:
        """
        Mass of a peptide with inline numeric mods, e.g.
        ``R.A+144.102063AS+79.9663PQDLAGGYTSSLAC+57.0215HR.A``.
        """
        primary = self._primary_sequence(sequence)
        mod_mass = 0.0
        for match in _NUMERIC_MOD.finditer(primary):
            try:
                mod_mass += float(match.group())
            except ValueError:
                continue
        mass = self.compute_sequence_mass(_NUMERIC_MOD.sub('', primary))
        if mass < 0:
            return -1
        return mass + mod_mass

    def composition(self, sequence: str) -> Dict[str, int]:
        """Total element counts of the residues in *sequence*."""
        counts: Counter = Counter()
        for residue in sequence:
            if 'A' <= residue <= 'Z':
                counts.update(self.get_entry(residue).composition)
        return dict(counts)

    # ----- charge conversion -----

    def convolute(self, mz: float, from_charge: int, to_charge: int = 1,
                  charge_carrier_mass: Optional[float] = None) -> float:
        """
        Convert an m/z value from one charge state to another.

        Either charge may be 0, meaning a neutral mass. Negative charges are
        not supported and return 0.
        """
        carrier = charge_carrier_mass or self.charge_carrier_mass or PROTON

        if from_charge == to_charge:
            return mz

        if from_charge == 1:
            mh = mz
        elif from_charge > 1:
            mh = mz * from_charge - carrier * (from_charge - 1)
        elif from_charge == 0:
            mh = mz + carrier
        else:
            return 0.0

        if to_charge > 1:
            return (mh + carrier * (to_charge - 1)) / to_charge
        if to_charge == 1:
            return mh
        if to_charge == 0:
            return mh - carrier
        return 0.0

    def mh_to_monoisotopic_mass(self, mh: float) -> float:
        return self.convolute(mh, 1, 0)

    def monoisotopic_mass_to_mz(self, monoisotopic_mass: float, charge: int) -> float:
        return self.convolute(monoisotopic_mass, 0, charge)
