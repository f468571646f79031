"""
Synopsis / first-hits and modification summary file writing.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from .columns import ColumnMap
from .constants import (
    C_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL,
    N_TERMINAL_PEPTIDE_SYMBOL, N_TERMINAL_PROTEIN_SYMBOL,
)
from .exceptions import OutputCreationError
from .modifications import ModificationCatalog, ModificationDefinition, ModificationType
from .reader import SearchResult
from .utils import (
    clean_sequence, dbl_to_string, mass_error_to_string,
    split_prefix_and_suffix, trim_zero_if_not_first,
)

logger = logging.getLogger(__name__)

CORE_COLUMNS = (
    'ResultID', 'Scan', 'FragMethod', 'SpecIndex', 'Charge', 'PrecursorMZ',
    'DelM', 'DelM_PPM', 'MH', 'Peptide', 'Protein', 'NTT', 'DeNovoScore', 'MSGFScore',
)

MOD_SUMMARY_COLUMNS = (
    'Modification_Symbol', 'Modification_Mass', 'Target_Residues',
    'Modification_Type', 'Mass_Correction_Tag', 'Occurrence_Count',
)


@dataclass(frozen=True)
class OutputLayout:
    """Optional column groups; fixed for a whole run."""
    is_msgf_plus: bool = True
    include_fdr: bool = False
    include_efdr: bool = False
    include_ims: bool = False

    @classmethod
    def from_columns(cls, columns: ColumnMap) -> 'OutputLayout':
        return cls(
            is_msgf_plus=columns.is_msgf_plus,
            include_fdr=columns.has_fdr,
            include_efdr=columns.has_efdr,
            include_ims=columns.has_ims,
        )

    def header(self) -> List[str]:
        names = list(CORE_COLUMNS)
        if self.is_msgf_plus:
            names += ['MSGFDB_SpecEValue', 'Rank_MSGFDB_SpecEValue', 'EValue']
        else:
            names += ['MSGFDB_SpecProb', 'Rank_MSGFDB_SpecProb', 'PValue']

        if self.include_fdr:
            names += ['QValue', 'PepQValue'] if self.is_msgf_plus else ['FDR', 'PepFDR']
        elif self.include_efdr:
            names += ['EFDR', 'PepFDR']

        if self.is_msgf_plus:
            names.append('IsotopeError')
        if self.include_ims:
            names += ['IMS_Scan', 'IMS_Drift_Time']
        return names

    def row(self, result_id: int, result: SearchResult) -> List[str]:
        data = [
            str(result_id),
            result.scan,
            result.frag_method,
            result.spec_index,
            str(result.charge),
            result.precursor_mz,
            mass_error_to_string(result.delm_da),
            dbl_to_string(result.delm_ppm, 5, 0.00005),
            dbl_to_string(result.mh, 6),
            result.peptide,
            result.protein,
            str(result.ntt),
            result.de_novo_score,
            result.msgf_score,
            result.spec_evalue,
            str(result.rank),
            result.evalue,
        ]
        if self.include_fdr:
            data.append(trim_zero_if_not_first(result_id, result.qvalue))
            data.append(trim_zero_if_not_first(result_id, result.pep_qvalue))
        elif self.include_efdr:
            data.append(trim_zero_if_not_first(result_id, result.efdr))
            data.append('1')

        if self.is_msgf_plus:
            data.append(result.isotope_error)
        if self.include_ims:
            data.append(result.ims_scan)
            data.append(result.ims_drift_time)
        return data


def write_results(path: Union[str, Path], results: Sequence[SearchResult],
                  layout: OutputLayout) -> int:
    """
    Write a synopsis or first-hits file. Result ids start at 1.

    Returns:
        Number of results written.

    Raises:
        OutputCreationError: If the file cannot be written.
    """
    try:
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f, delimiter='\t', lineterminator='\n')
            writer.writerow(layout.header())
            for result_id, result in enumerate(results, start=1):
                writer.writerow(layout.row(result_id, result))
    except OSError as ex:
        raise OutputCreationError(str(path), str(ex)) from ex

    logger.info("Wrote %d results to %s", len(results), path)
    return len(results)


def modification_type_code(definition: ModificationDefinition) -> str:
    """One-letter type code used in the modification summary file."""
    if definition.mod_type is ModificationType.STATIC:
        targets = definition.target_residues
        if N_TERMINAL_PROTEIN_SYMBOL in targets or C_TERMINAL_PROTEIN_SYMBOL in targets:
            return 'P'
        if N_TERMINAL_PEPTIDE_SYMBOL in targets or C_TERMINAL_PEPTIDE_SYMBOL in targets:
            return 'T'
        return 'S'
    if definition.affected_atom and definition.affected_atom != '-':
        return 'I'
    return 'D'


def count_occurrences(definition: ModificationDefinition,
                      results: Iterable[SearchResult]) -> int:
    """How often a modification appears in the given results."""
    count = 0
    for result in results:
        primary, _, _ = split_prefix_and_suffix(result.peptide)
        if definition.emits_symbol:
            count += primary.count(definition.symbol)
            continue
        residues = [r for r in definition.target_residues if r.isalpha()]
        if residues:
            clean = clean_sequence(primary, strip_prefix_and_suffix=False)
            count += sum(clean.count(r) for r in residues)
        else:
            count += 1
    return count


def write_mod_summary(path: Union[str, Path], catalog: ModificationCatalog,
                      results: Sequence[SearchResult]) -> int:
    """
    Write the modification summary: one line per catalog entry.

    A symbol shared by several same-mass entries is counted under the first
    of them; the others report 0.

    Raises:
        OutputCreationError: If the file cannot be written.
    """
    definitions = [d for d in catalog if d.mod_type is not ModificationType.CUSTOM_AA]
    counted_symbols = set()
    try:
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f, delimiter='\t', lineterminator='\n')
            writer.writerow(MOD_SUMMARY_COLUMNS)
            for definition in definitions:
                if definition.emits_symbol and definition.symbol in counted_symbols:
                    occurrences = 0
                else:
                    occurrences = count_occurrences(definition, results)
                    if definition.emits_symbol:
                        counted_symbols.add(definition.symbol)
                writer.writerow((
                    definition.symbol,
                    dbl_to_string(definition.mass, 6),
                    definition.target_residues,
                    modification_type_code(definition),
                    definition.name,
                    occurrences,
                ))
    except OSError as ex:
        raise OutputCreationError(str(path), str(ex)) from ex
    return len(definitions)
