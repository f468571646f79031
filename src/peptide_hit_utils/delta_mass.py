"""
Precursor delta-mass reconciliation: Da/ppm conversion, C13 isotope-selection
correction, and a guard against implausible engine-reported ppm errors.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import DEFAULT_MAX_ISOTOPE_SHIFT, MASS_C13, PPM_ERROR_TOLERANCE_FACTOR
from .masses import AminoAcidMassTable, mass_to_ppm, ppm_to_mass
from .utils import should_show_warning

logger = logging.getLogger(__name__)

_TOLERANCE_PART = re.compile(r'^\s*([0-9.]+)\s*(ppm|da)?\s*$', re.IGNORECASE)


@dataclass
class ParentMassTolerance:
    """Precursor (parent ion) search tolerance, possibly asymmetric."""
    left: float = 20.0
    right: float = 20.0
    is_ppm: bool = True

    @classmethod
    def parse(cls, text: str) -> 'ParentMassTolerance':
        """
        Parse ``"20ppm"``, ``"0.5Da"`` or ``"20ppm,15ppm"``.

        Raises:
            ValueError: If the text is not a tolerance.
        """
        parts = [p for p in text.split(',') if p.strip()]
        if not parts or len(parts) > 2:
            raise ValueError(f"Invalid parent mass tolerance '{text}'")

        values = []
        units = []
        for part in parts:
            match = _TOLERANCE_PART.match(part)
            if not match:
                raise ValueError(f"Invalid parent mass tolerance '{text}'")
            values.append(float(match.group(1)))
            units.append((match.group(2) or 'ppm').lower())

        if len(values) == 1:
            values.append(values[0])
            units.append(units[0])
        return cls(left=values[0], right=values[1], is_ppm=units[0] == 'ppm')

    def __str__(self):
        unit = 'ppm' if self.is_ppm else 'Da'
        if self.left == self.right:
            return f"{self.left:g}{unit}"
        return f"{self.left:g}{unit},{self.right:g}{unit}"


@dataclass(frozen=True)
class DeltaMass:
    """Reconciled precursor error of one PSM."""
    da: float
    ppm: float
    isotope_shift: int = 0
    recomputed: bool = False


def corrected_delta_ppm(delta_da: float,
                        precursor_mono_mass: float,
                        peptide_mass: float,
                        max_isotope_shift: int = DEFAULT_MAX_ISOTOPE_SHIFT,
                        adjust_precursor: bool = True) -> Tuple[float, int]:
    """
    Delta mass in ppm, corrected for selection of a C13 isotope peak.

    Shifts of ``k`` isotope spacings, ``-max_isotope_shift <= k <= max_isotope_shift``,
    are tried and the one leaving the smallest residual error is kept.

    Args:
        delta_da: Observed precursor mass minus peptide mass, in Da.
        precursor_mono_mass: Neutral monoisotopic precursor mass.
        peptide_mass: Neutral monoisotopic peptide mass.
        max_isotope_shift: Largest shift tried.
        adjust_precursor: Subtract the chosen shift from the precursor mass
            before recomputing the delta.

    Returns:
        Tuple of (ppm, isotope_shift).
    """
    shift = min(range(-max_isotope_shift, max_isotope_shift + 1),
                key=lambda k: (abs(delta_da - k * MASS_C13), abs(k)))

    if shift != 0:
        if adjust_precursor:
            precursor_mono_mass -= shift * MASS_C13
        delta_da = precursor_mono_mass - peptide_mass

    return mass_to_ppm(delta_da, peptide_mass), shift


class DeltaMassCorrector:
    """
    Reconcile the Da and ppm precursor error of each PSM.

    Args:
        tolerance: Search tolerance, used to reject implausible engine ppm values.
        mass_table: Mass table providing charge conversion.
        max_isotope_shift: Largest C13 correction tried.
    """

    def __init__(self, tolerance: Optional[ParentMassTolerance] = None,
                 mass_table: Optional[AminoAcidMassTable] = None,
                 max_isotope_shift: int = DEFAULT_MAX_ISOTOPE_SHIFT):
        self.tolerance = tolerance or ParentMassTolerance()
        self.mass_table = mass_table or AminoAcidMassTable()
        self.max_isotope_shift = max_isotope_shift
        self.warning_count = 0

    def _implausible(self, ppm: float) -> bool:
        if not self.tolerance.is_ppm:
            return False
        return ppm < -self.tolerance.left * PPM_ERROR_TOLERANCE_FACTOR or \
            ppm > self.tolerance.right * PPM_ERROR_TOLERANCE_FACTOR

    def correct(self, precursor_mz: float, charge: int, peptide_mass: float,
                error_da: Optional[float] = None,
                error_ppm: Optional[float] = None) -> DeltaMass:
        """
        Compute both error representations for one PSM.

        Args:
            precursor_mz: Precursor m/z reported by the engine.
            charge: Precursor charge.
            peptide_mass: Neutral monoisotopic peptide mass.
            error_da: Engine-reported Da error (MSGFDB), if any.
            error_ppm: Engine-reported ppm error (MS-GF+), if any.

        Returns:
            :class:`DeltaMass`. An engine ppm value beyond 1.5x the search
            tolerance is discarded and recomputed from the precursor m/z.
        """
        precursor_mono_mass = self.mass_table.convolute(precursor_mz, charge, 0)
        recomputed = False

        if error_ppm is not None:
            if not self._implausible(error_ppm):
                return DeltaMass(ppm_to_mass(error_ppm, peptide_mass), error_ppm)

            self.warning_count += 1
            if should_show_warning(self.warning_count):
                logger.warning(
                    "Precursor mass error reported by the search engine is 1.5-fold larger "
                    "than the search tolerance: %s vs. %.0fppm,%.0fppm",
                    error_ppm, self.tolerance.left, self.tolerance.right)
            error_da = precursor_mono_mass - peptide_mass
            recomputed = True

        da_given = error_da is not None and not recomputed
        if error_da is None:
            error_da = precursor_mono_mass - peptide_mass

        ppm, shift = corrected_delta_ppm(error_da, precursor_mono_mass, peptide_mass,
                                         self.max_isotope_shift)
        da = error_da if da_given else ppm_to_mass(ppm, peptide_mass)
        return DeltaMass(da, ppm, shift, recomputed)
