"""Tests for the delta_mass module."""

import logging

import pytest

from peptide_hit_utils.constants import MASS_C13
from peptide_hit_utils.delta_mass import (
    DeltaMassCorrector,
    ParentMassTolerance,
    corrected_delta_ppm,
)
from peptide_hit_utils.masses import AminoAcidMassTable

PEPTIDE_MASS = 1000.0


@pytest.fixture
def table():
    return AminoAcidMassTable()


def precursor_mz(table, mono_mass, charge=2):
    return table.monoisotopic_mass_to_mz(mono_mass, charge)


class TestParentMassTolerance:
    def test_ppm(self):
        tol = ParentMassTolerance.parse("20ppm")
        assert (tol.left, tol.right, tol.is_ppm) == (20.0, 20.0, True)

    def test_da(self):
        tol = ParentMassTolerance.parse("0.5Da")
        assert tol.left == 0.5
        assert not tol.is_ppm

    def test_asymmetric(self):
        tol = ParentMassTolerance.parse("20ppm,15ppm")
        assert (tol.left, tol.right) == (20.0, 15.0)
        assert str(tol) == "20ppm,15ppm"

    def test_default_unit(self):
        assert ParentMassTolerance.parse("10").is_ppm

    @pytest.mark.parametrize("text", ["", "abc", "1,2,3", "5 bananas"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            ParentMassTolerance.parse(text)


class TestIsotopeCorrection:
    def test_no_shift(self):
        ppm, shift = corrected_delta_ppm(0.002, PEPTIDE_MASS + 0.002, PEPTIDE_MASS)
        assert shift == 0
        assert ppm == pytest.approx(2.0)

    def test_one_c13(self):
        delta = MASS_C13 + 0.001
        ppm, shift = corrected_delta_ppm(delta, PEPTIDE_MASS + delta, PEPTIDE_MASS)
        assert shift == 1
        assert ppm == pytest.approx(1.0, abs=1e-6)

    def test_negative_shift(self):
        delta = -MASS_C13
        ppm, shift = corrected_delta_ppm(delta, PEPTIDE_MASS + delta, PEPTIDE_MASS)
        assert shift == -1
        assert ppm == pytest.approx(0.0, abs=1e-6)

    def test_bounded(self):
        delta = 5 * MASS_C13
        _, shift = corrected_delta_ppm(delta, PEPTIDE_MASS + delta, PEPTIDE_MASS, max_isotope_shift=3)
        assert shift == 3


class TestDeltaMassCorrector:
    def test_plausible_ppm_kept(self, table):
        corrector = DeltaMassCorrector(ParentMassTolerance.parse("20ppm"), table)
        result = corrector.correct(precursor_mz(table, 1000.005), 2, PEPTIDE_MASS, error_ppm=5.0)
        assert result.ppm == 5.0
        assert result.da == pytest.approx(0.005)
        assert not result.recomputed

    def test_implausible_ppm_recomputed(self, table, caplog):
        corrector = DeltaMassCorrector(ParentMassTolerance.parse("20ppm"), table)
        with caplog.at_level(logging.WARNING):
            result = corrector.correct(precursor_mz(table, 1000.002), 2, PEPTIDE_MASS, error_ppm=100.0)
        assert result.recomputed
        assert result.ppm == pytest.approx(2.0, abs=1e-4)
        assert result.da == pytest.approx(0.002, abs=1e-7)
        assert corrector.warning_count == 1
        assert "1.5-fold" in caplog.text

    def test_da_tolerance_never_implausible(self, table):
        corrector = DeltaMassCorrector(ParentMassTolerance.parse("0.5Da"), table)
        result = corrector.correct(precursor_mz(table, 1000.1), 2, PEPTIDE_MASS, error_ppm=100.0)
        assert result.ppm == 100.0

    def test_da_given(self, table):
        corrector = DeltaMassCorrector(mass_table=table)
        result = corrector.correct(precursor_mz(table, 1000.003), 2, PEPTIDE_MASS, error_da=0.003)
        assert result.da == 0.003
        assert result.ppm == pytest.approx(3.0, abs=1e-4)

    def test_da_given_isotope(self, table):
        corrector = DeltaMassCorrector(mass_table=table)
        delta = MASS_C13 + 0.003
        result = corrector.correct(precursor_mz(table, PEPTIDE_MASS + delta), 2, PEPTIDE_MASS,
                                   error_da=delta)
        assert result.isotope_shift == 1
        assert result.ppm == pytest.approx(3.0, abs=1e-4)
        assert result.da == delta

    def test_no_engine_error(self, table):
        corrector = DeltaMassCorrector(mass_table=table)
        result = corrector.correct(precursor_mz(table, 1000.001, 3), 3, PEPTIDE_MASS)
        assert result.ppm == pytest.approx(1.0, abs=1e-4)
        assert result.da == pytest.approx(0.001, abs=1e-7)
