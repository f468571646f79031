"""Tests for the writer module."""

import pytest

from peptide_hit_utils.modifications import ModificationCatalog, ModificationDefinition, ModificationType
from peptide_hit_utils.reader import SearchResult
from peptide_hit_utils.writer import (
    CORE_COLUMNS,
    OutputLayout,
    count_occurrences,
    modification_type_code,
    write_mod_summary,
    write_results,
)


@pytest.fixture
def result():
    return SearchResult(
        scan='100', scan_num=100, charge=2, peptide='K.M*PEPTIDEK.L', protein='ProtA',
        spec_index='7', frag_method='HCD', precursor_mz='620.80',
        spec_evalue='1E-12', evalue='1E-6', qvalue='0.0', pep_qvalue='0.0', efdr='0.0',
        isotope_error='0', delm_da=0.00123456, delm_ppm=1.234567, mh=1240.551234,
        ntt=2, rank=1,
    )


class TestOutputLayout:
    def test_msgf_plus_fdr(self):
        header = OutputLayout(is_msgf_plus=True, include_fdr=True).header()
        assert header[:len(CORE_COLUMNS)] == list(CORE_COLUMNS)
        assert header[len(CORE_COLUMNS):] == [
            'MSGFDB_SpecEValue', 'Rank_MSGFDB_SpecEValue', 'EValue', 'QValue', 'PepQValue', 'IsotopeError',
        ]

    def test_msgfdb(self):
        header = OutputLayout(is_msgf_plus=False, include_fdr=True).header()
        assert header[len(CORE_COLUMNS):] == ['MSGFDB_SpecProb', 'Rank_MSGFDB_SpecProb', 'PValue', 'FDR', 'PepFDR']

    def test_ims(self):
        assert OutputLayout(include_ims=True).header()[-2:] == ['IMS_Scan', 'IMS_Drift_Time']

    def test_row_matches_header(self, result):
        layout = OutputLayout(is_msgf_plus=True, include_fdr=True)
        row = layout.row(1, result)
        assert len(row) == len(layout.header())
        named = dict(zip(layout.header(), row))
        assert named['DelM'] == '0.00123'
        assert named['DelM_PPM'] == '1.23457'
        assert named['MH'] == '1240.551234'
        assert named['QValue'] == '0.0'

    def test_zero_trimmed_after_first_row(self, result):
        layout = OutputLayout(is_msgf_plus=True, include_fdr=True)
        assert dict(zip(layout.header(), layout.row(2, result)))['QValue'] == '0'

    def test_efdr(self, result):
        layout = OutputLayout(is_msgf_plus=True, include_efdr=True)
        named = dict(zip(layout.header(), layout.row(1, result)))
        assert named['EFDR'] == '0.0'
        assert named['PepFDR'] == '1'


class TestWriteResults:
    def test_file(self, tmp_path, result):
        path = tmp_path / "Dataset_syn.txt"
        assert write_results(path, [result, result], OutputLayout()) == 2
        lines = path.read_text().splitlines()
        assert len(lines) == 3
        assert lines[2].startswith('2\t100\tHCD\t7\t2\t')


class TestModSummary:
    def test_type_codes(self):
        assert modification_type_code(ModificationDefinition(57.02, 'C', ModificationType.STATIC)) == 'S'
        assert modification_type_code(ModificationDefinition(229.16, '<', ModificationType.STATIC)) == 'T'
        assert modification_type_code(ModificationDefinition(42.01, '[', ModificationType.STATIC)) == 'P'
        assert modification_type_code(ModificationDefinition(15.99, 'M')) == 'D'
        assert modification_type_code(ModificationDefinition(1.003, '', affected_atom='C')) == 'I'

    def test_occurrences(self, result):
        catalog = ModificationCatalog([
            ModificationDefinition(15.994915, 'M', ModificationType.DYNAMIC),
            ModificationDefinition(8.014199, 'K', ModificationType.STATIC),
        ])
        assert count_occurrences(catalog[0], [result, result]) == 2
        assert count_occurrences(catalog[1], [result]) == 1

    def test_shared_symbol_counted_once(self, tmp_path, result):
        catalog = ModificationCatalog([
            ModificationDefinition(15.994915, 'M', name='Oxidation'),
            ModificationDefinition(15.994915, 'W', name='Oxidation'),
        ])
        assert catalog[0].symbol == catalog[1].symbol == '*'
        path = tmp_path / "Dataset_ModSummary.txt"
        write_mod_summary(path, catalog, [result])
        rows = [line.split('\t') for line in path.read_text().splitlines()]
        assert [row[-1] for row in rows[1:]] == ['1', '0']
