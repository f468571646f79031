"""Tests for the ranking module."""

from peptide_hit_utils.ranking import (
    ProteinOrder,
    SynopsisThresholds,
    assign_ranks,
    global_sort_key,
    is_decoy_protein,
    rank_by_scan,
    select_first_hits,
    select_synopsis,
)
from peptide_hit_utils.reader import SearchResult


def make_result(scan_num, peptide, protein, spec_evalue, charge=2, evalue=10.0, mh=1000.0, qvalue=0.0):
    return SearchResult(
        scan=str(scan_num), scan_num=scan_num, charge=charge,
        peptide=peptide, protein=protein,
        spec_evalue=repr(spec_evalue), spec_evalue_num=spec_evalue,
        evalue=repr(evalue), evalue_num=evalue,
        qvalue=repr(qvalue), qvalue_num=qvalue,
        mh=mh,
    )


class TestAssignRanks:
    def test_ties_share_rank(self):
        results = [
            make_result(1, "K.AAA.L", "P1", 1e-5),
            make_result(1, "K.BBB.L", "P1", 1e-10),
            make_result(1, "K.CCC.L", "P1", 1e-8),
            make_result(1, "K.DDD.L", "P1", 1e-10),
        ]
        ranked = assign_ranks(results)
        assert [r.rank for r in ranked] == [1, 1, 2, 3]
        assert [r.spec_evalue_num for r in ranked] == [1e-10, 1e-10, 1e-8, 1e-5]

    def test_inputs_unchanged(self):
        result = make_result(1, "K.AAA.L", "P1", 1e-5)
        assign_ranks([result])
        assert result.rank == 0

    def test_rank_by_scan(self):
        results = sorted([
            make_result(2, "K.AAA.L", "P1", 1e-5),
            make_result(1, "K.BBB.L", "P1", 1e-3, charge=3),
            make_result(1, "K.CCC.L", "P1", 1e-8, charge=2),
        ], key=global_sort_key)
        ranked = rank_by_scan(results)
        assert [(r.scan_num, r.rank) for r in ranked] == [(1, 1), (1, 2), (2, 1)]


class TestProteinOrder:
    def test_decoy_prefixes(self):
        assert is_decoy_protein("XXX_ProtA")
        assert is_decoy_protein("rev_ProtA")
        assert not is_decoy_protein("ProtA")

    def test_forward_before_decoy(self):
        assert ProteinOrder().best(["XXX_ProtA", "ProtZ"]) == "ProtZ"

    def test_name_order_without_fasta(self):
        assert ProteinOrder().best(["ProtB", "ProtA"]) == "ProtA"

    def test_from_fasta(self, tmp_path):
        fasta_file = tmp_path / "proteins.fasta"
        fasta_file.write_text(">ProtB first protein\nPEPTIDEK\n>ProtA second protein\nMDHTPQSQLK\n")
        order = ProteinOrder.from_fasta(fasta_file)
        assert order.positions == {"ProtB": 0, "ProtA": 1}
        assert order.best(["ProtA", "ProtB"]) == "ProtB"
        assert order.best(["ProtA", "Unlisted"]) == "ProtA"


class TestFirstHits:
    def test_one_per_peptide(self):
        ranked = assign_ranks([
            make_result(100, "K.PEPTIDEK.L", "ProtB", 1e-10),
            make_result(100, "R.PEPTIDEK.L", "ProtA", 1e-10),
            make_result(100, "K.PEPTIDER.L", "ProtC", 1e-10),
            make_result(100, "K.OTHERK.L", "ProtC", 1e-6),
        ])
        hits = select_first_hits(ranked)
        assert sorted((h.peptide, h.protein) for h in hits) == [
            ("K.PEPTIDER.L", "ProtC"),
            ("R.PEPTIDEK.L", "ProtA"),
        ]

    def test_charges_kept_separately(self):
        ranked = assign_ranks([
            make_result(100, "K.PEPTIDEK.L", "ProtA", 1e-10, charge=2),
            make_result(100, "K.PEPTIDEK.L", "ProtA", 1e-10, charge=3),
        ])
        assert len(select_first_hits(ranked)) == 2

    def test_protein_order(self):
        order = ProteinOrder({"ProtB": 0, "ProtA": 1})
        ranked = assign_ranks([
            make_result(100, "K.PEPTIDEK.L", "ProtA", 1e-10),
            make_result(100, "K.PEPTIDEK.L", "ProtB", 1e-10),
        ])
        assert select_first_hits(ranked, order)[0].protein == "ProtB"


class TestSynopsis:
    def test_thresholds(self):
        thresholds = SynopsisThresholds()
        assert thresholds.passes(make_result(1, "K.A.L", "P", 1e-7))
        assert thresholds.passes(make_result(1, "K.A.L", "P", 1e-3, evalue=0.5))
        assert not thresholds.passes(make_result(1, "K.A.L", "P", 1e-3, evalue=1.0))

    def test_qvalue_criterion(self):
        thresholds = SynopsisThresholds(qvalue=0.01)
        assert thresholds.passes(make_result(1, "K.A.L", "P", 1e-3, evalue=5.0, qvalue=0.005))
        assert not thresholds.passes(make_result(1, "K.A.L", "P", 1e-3, evalue=5.0, qvalue=0.0))

    def test_any_rank_and_sorted(self):
        ranked = assign_ranks([
            make_result(7, "K.AAA.L", "P1", 1e-9),
            make_result(7, "K.BBB.L", "P1", 1e-12),
            make_result(7, "K.CCC.L", "P1", 1e-2),
        ])
        synopsis = select_synopsis(ranked)
        assert [r.peptide for r in synopsis] == ["K.BBB.L", "K.AAA.L"]
        assert [r.rank for r in synopsis] == [1, 2]

    def test_duplicates_removed(self):
        ranked = assign_ranks([
            make_result(7, "-.M#DHK.L", "P1", 1e-9),
            make_result(7, "-.M#DHK.L", "P1", 1e-9),
            make_result(7, "-.M#DHK.L", "P2", 1e-9),
        ])
        assert len(select_synopsis(ranked)) == 2

    def test_same_hit_in_other_scans_kept(self):
        ranked = rank_by_scan([
            make_result(300, "K.AAAAK.L", "ProtD", 1e-11),
            make_result(301, "K.AAAAK.L", "ProtD", 1e-11),
            make_result(500, "K.AAAAK.L", "ProtD", 1e-11),
        ])
        assert [r.scan for r in select_synopsis(ranked)] == ['300', '301', '500']
