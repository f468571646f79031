"""
Per-scan ranking and the first-hits / synopsis views.

Results are ranked by SpecEValue within each scan (all charges together).
The first-hits view keeps rank-1 matches; the synopsis view keeps every match
passing a score threshold.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, replace
from itertools import groupby
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pyteomics import fasta

from .constants import DECOY_PROTEIN_PREFIXES, DEFAULT_EVALUE_THRESHOLD, DEFAULT_SPEC_EVALUE_THRESHOLD
from .reader import SearchResult
from .utils import clean_sequence, truncate_protein_name

logger = logging.getLogger(__name__)

SCORE_EPSILON = sys.float_info.epsilon


# =============================================================================
# Sort keys
# =============================================================================

def global_sort_key(result: SearchResult) -> Tuple:
    """Scan, charge, SpecEValue, peptide, protein."""
    return (result.scan_num, result.charge, result.spec_evalue_num,
            result.peptide, result.protein)


def output_sort_key(result: SearchResult) -> Tuple:
    """SpecEValue, scan, charge, peptide, protein."""
    return (result.spec_evalue_num, result.scan_num, result.charge,
            result.peptide, result.protein)


# =============================================================================
# Protein ordering
# =============================================================================

def is_decoy_protein(name: str, prefixes: Sequence[str] = DECOY_PROTEIN_PREFIXES) -> bool:
    lowered = name.lower()
    return any(lowered.startswith(prefix.lower()) for prefix in prefixes)


class ProteinOrder:
    """
    Canonical protein preference used when one peptide maps to several proteins.

    Forward proteins win over decoys; then earlier FASTA position; then name.
    Proteins absent from the FASTA file sort after those present.
    """

    def __init__(self, positions: Optional[Dict[str, int]] = None,
                 decoy_prefixes: Sequence[str] = DECOY_PROTEIN_PREFIXES):
        self.positions = positions or {}
        self.decoy_prefixes = tuple(decoy_prefixes)

    @classmethod
    def from_fasta(cls, path: Union[str, Path],
                   decoy_prefixes: Sequence[str] = DECOY_PROTEIN_PREFIXES) -> 'ProteinOrder':
        """Read protein order from a FASTA file."""
        positions: Dict[str, int] = {}
        with fasta.read(str(path)) as entries:
            for entry in entries:
                name = truncate_protein_name(entry.description)
                positions.setdefault(name, len(positions))
        logger.info("Read %d proteins from %s", len(positions), path)
        return cls(positions, decoy_prefixes)

    def key(self, protein: str) -> Tuple[bool, int, str]:
        return (is_decoy_protein(protein, self.decoy_prefixes),
                self.positions.get(protein, len(self.positions)),
                protein)

    def best(self, proteins: Iterable[str]) -> str:
        return min(proteins, key=self.key)


# =============================================================================
# Ranking
# =============================================================================

def assign_ranks(results: Sequence[SearchResult]) -> List[SearchResult]:
    """
    Rank the results of one scan by ascending SpecEValue.

    Equal scores (within double-precision epsilon) share a rank; ranks are
    contiguous from 1.

    Returns:
        New results, sorted by SpecEValue, with ``rank`` populated.
    """
    ordered = sorted(results, key=lambda r: r.spec_evalue_num)
    ranked: List[SearchResult] = []
    rank = 1
    previous = None
    for result in ordered:
        if previous is not None and abs(result.spec_evalue_num - previous) > SCORE_EPSILON:
            rank += 1
        previous = result.spec_evalue_num
        ranked.append(replace(result, rank=rank))
    return ranked


def rank_by_scan(results: Iterable[SearchResult]) -> List[SearchResult]:
    """Rank every scan of a collection sorted with :func:`global_sort_key`."""
    ranked: List[SearchResult] = []
    for _scan, scan_results in groupby(results, key=lambda r: r.scan_num):
        ranked.extend(assign_ranks(list(scan_results)))
    return ranked


# =============================================================================
# Views
# =============================================================================

@dataclass
class SynopsisThresholds:
    """A result passes if any enabled criterion is met."""
    spec_evalue: float = DEFAULT_SPEC_EVALUE_THRESHOLD
    evalue: float = DEFAULT_EVALUE_THRESHOLD
    qvalue: Optional[float] = None

    def passes(self, result: SearchResult) -> bool:
        if result.spec_evalue_num <= self.spec_evalue:
            return True
        if result.evalue_num <= self.evalue:
            return True
        if self.qvalue is not None and 0 < result.qvalue_num < self.qvalue:
            return True
        return False


def select_first_hits(ranked: Iterable[SearchResult],
                      protein_order: Optional[ProteinOrder] = None) -> List[SearchResult]:
    """
    Rank-1 results, one per (scan, charge, clean peptide).

    When the same peptide is listed for several proteins, the protein
    preferred by *protein_order* is kept.
    """
    protein_order = protein_order or ProteinOrder()
    best: Dict[Tuple[int, int, str], SearchResult] = {}
    for result in ranked:
        if result.rank != 1:
            continue
        key = (*result.scan_charge_key, clean_sequence(result.peptide))
        current = best.get(key)
        if current is None or protein_order.key(result.protein) < protein_order.key(current.protein):
            best[key] = result
    return sorted(best.values(), key=output_sort_key)


def select_synopsis(ranked: Iterable[SearchResult],
                    thresholds: Optional[SynopsisThresholds] = None) -> List[SearchResult]:
    """
    Results passing *thresholds*, irrespective of rank.

    Identical (scan, charge, peptide, protein, MH, SpecEValue) results are
    written once; these arise when an N-terminal dynamic mod also matches the
    first residue.
    """
    thresholds = thresholds or SynopsisThresholds()
    seen = set()
    selected: List[SearchResult] = []
    for result in ranked:
        if not thresholds.passes(result):
            continue
        key = (*result.scan_charge_key, result.peptide, result.protein,
               round(result.mh, 6), result.spec_evalue)
        if key in seen:
            continue
        seen.add(key)
        selected.append(result)
    return sorted(selected, key=output_sort_key)
