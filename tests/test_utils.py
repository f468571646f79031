"""Tests for the utils module."""

import pytest

from peptide_hit_utils.utils import (
    ErrorLog,
    add_update_prefix_and_suffix,
    clean_sequence,
    dbl_to_string,
    mass_error_to_string,
    parse_int,
    parse_spec_index,
    replace_engine_terminus,
    should_show_warning,
    split_prefix_and_suffix,
    split_protein_list,
    trim_zero_if_not_first,
)


class TestSplitPrefixAndSuffix:
    def test_full(self):
        assert split_prefix_and_suffix("R.PEPTIDEK.L") == ("PEPTIDEK", "R", "L")

    def test_terminus(self):
        assert split_prefix_and_suffix("-.M#DHK.-") == ("M#DHK", "-", "-")

    def test_no_prefix(self):
        assert split_prefix_and_suffix("PEPTIDE") == ("PEPTIDE", "", "")

    def test_empty(self):
        assert split_prefix_and_suffix("") == ("", "", "")


class TestCleanSequence:
    def test_strips_symbols_and_context(self):
        assert clean_sequence("K.M*PEP#TK.L") == "MPEPTK"

    def test_keep_context(self):
        assert clean_sequence("M*PEP", strip_prefix_and_suffix=False) == "MPEP"


class TestNumberParsing:
    def test_spec_index(self):
        assert parse_spec_index("index=123") == 123
        assert parse_spec_index("42") == 42

    def test_native_spec_id(self):
        assert parse_spec_index("controllerType=0 controllerNumber=1 scan=6390") is None

    def test_parse_int(self):
        assert parse_int("8.000") == 8
        assert parse_int("abc") == 0
        assert parse_int("", default=-1) == -1


class TestFormatting:
    def test_trailing_zeros(self):
        assert dbl_to_string(1.23450, 5) == "1.2345"
        assert dbl_to_string(2.0, 3) == "2"

    def test_zero_threshold(self):
        assert dbl_to_string(0.00001, 5, 0.00005) == "0"

    def test_mass_error(self):
        assert mass_error_to_string(0.0000005) == "0"
        assert mass_error_to_string(0.00005) == "0.00005"
        assert mass_error_to_string(0.0123456) == "0.01235"

    def test_trim_zero(self):
        assert trim_zero_if_not_first(1, "0.0") == "0.0"
        assert trim_zero_if_not_first(2, "0.0") == "0"
        assert trim_zero_if_not_first(2, "0.01") == "0.01"


class TestProteinList:
    def test_multiple(self):
        first, proteins = split_protein_list(
            "AT1G26570.1(pre=K,post=N);AT3G29360.1(pre=R,post=-)")
        assert first == "AT1G26570.1"
        assert proteins == {"AT1G26570.1": ("K", "N"), "AT3G29360.1": ("R", "-")}

    def test_single_with_description(self):
        first, proteins = split_protein_list("Protein1 some description")
        assert first == "Protein1"
        assert proteins == {}


class TestPeptideNotation:
    def test_add_prefix_and_suffix(self):
        assert add_update_prefix_and_suffix("PEPTIDE", "K", "L") == "K.PEPTIDE.L"

    def test_update_prefix_and_suffix(self):
        assert add_update_prefix_and_suffix("R.PEPTIDE.G", "K", "L") == "K.PEPTIDE.L"

    def test_replace_engine_terminus(self):
        assert replace_engine_terminus("_.PEPTIDE._") == "-.PEPTIDE.-"
        assert replace_engine_terminus("K.PEPTIDE.L") == "K.PEPTIDE.L"


class TestShouldShowWarning:
    @pytest.mark.parametrize("count", [1, 5, 10, 100, 200, 2000, 30000])
    def test_shown(self, count):
        assert should_show_warning(count)

    @pytest.mark.parametrize("count", [11, 150, 2100, 30500])
    def test_suppressed(self, count):
        assert not should_show_warning(count)


class TestErrorLog:
    def test_budget(self):
        log = ErrorLog(max_length=10)
        assert log.add("x" * 12)
        assert not log.add("y")
        assert len(log) == 1
        assert log.dropped == 1

    def test_str(self):
        log = ErrorLog()
        log.add("first")
        log.add("second")
        assert str(log) == "first\nsecond"
        assert bool(log)
