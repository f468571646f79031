"""Tests for the cleavage module."""

import pytest

from peptide_hit_utils.cleavage import (
    CleavageState,
    TerminusState,
    compute_cleavage_state,
    compute_terminus_state,
    count_missed_cleavages,
    matches_cleavage_rule,
)


class TestCleavageRule:
    @pytest.mark.parametrize("left,right,expected", [
        ('K', 'A', True),
        ('R', 'G', True),
        ('K', 'P', False),
        ('A', 'K', False),
    ])
    def test_trypsin(self, left, right, expected):
        assert matches_cleavage_rule(left, right) is expected


class TestCleavageState:
    @pytest.mark.parametrize("peptide,expected", [
        ("K.AEPTIDER.A", CleavageState.FULL),
        ("K.AEPTIDEG.A", CleavageState.PARTIAL),
        ("A.AEPTIDER.A", CleavageState.PARTIAL),
        ("A.AEPTIDEG.A", CleavageState.NON_SPECIFIC),
        ("K.AEPTIDER.P", CleavageState.PARTIAL),
    ])
    def test_inline_context(self, peptide, expected):
        assert compute_cleavage_state(peptide) == expected

    def test_protein_n_terminus(self):
        assert compute_cleavage_state("-.M#DHTPQSQLK.L") == CleavageState.FULL
        assert compute_cleavage_state("-.MDHTPQSQLG.L") == CleavageState.NON_SPECIFIC

    def test_protein_c_terminus(self):
        assert compute_cleavage_state("R.AEPTIDEG.-") == CleavageState.FULL

    def test_no_cleavage_before_proline(self):
        assert compute_cleavage_state("K.PEPTIDER.A") == CleavageState.PARTIAL
        assert compute_cleavage_state("R.PEPTIDEG.-") == CleavageState.NON_SPECIFIC

    def test_whole_protein(self):
        assert compute_cleavage_state("-.PEPTIDEG.-") == CleavageState.FULL

    def test_symbols_ignored(self):
        assert compute_cleavage_state("K.M*PEPTIDEK@.A") == CleavageState.FULL

    def test_separate_context(self):
        assert compute_cleavage_state("AEPTIDER", "K", "A") == CleavageState.FULL


class TestTerminusState:
    def test_states(self):
        assert compute_terminus_state('-', 'A') is TerminusState.PROTEIN_N_TERMINUS
        assert compute_terminus_state('K', '-') is TerminusState.PROTEIN_C_TERMINUS
        assert compute_terminus_state('-', '-') is TerminusState.PROTEIN_N_AND_C_TERMINUS
        assert compute_terminus_state('K', 'A') is TerminusState.NONE


class TestMissedCleavages:
    def test_count(self):
        assert count_missed_cleavages("R.PEPKTIDER.A") == 1
        assert count_missed_cleavages("R.PEPKPTIDER.A") == 0
        assert count_missed_cleavages("R.KKR.A") == 2
