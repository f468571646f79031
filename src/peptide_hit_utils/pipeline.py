"""
Two-pass results processing.

Pass one parses and annotates every input line into an in-memory list of
:class:`~peptide_hit_utils.reader.SearchResult`. Pass two sorts the list by
scan, charge and SpecEValue, ranks each scan, and writes the synopsis and
first-hits files plus the auxiliary scan group and modification summary files.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .cleavage import compute_cleavage_state
from .columns import ColumnMap
from .config import ProcessingOptions
from .constants import (
    FIRST_HITS_SUFFIX, MOD_SUMMARY_SUFFIX, SCAN_GROUP_SUFFIX, SYNOPSIS_SUFFIX,
)
from .delta_mass import DeltaMass, DeltaMassCorrector
from .exceptions import ModificationDefinitionError, OutputCreationError
from .masses import AminoAcidMassTable
from .modifications import ModificationCatalog
from .ranking import (
    ProteinOrder, global_sort_key, rank_by_scan, select_first_hits, select_synopsis,
)
from .reader import PsmFileReader, SearchResult, SpecIndexMapper, result_from_fields
from .rewriter import PeptideAnnotationRewriter
from .scan_groups import ScanGroupRegistry, is_merged_scan, split_merged_scan, write_scan_group_file
from .utils import ErrorLog, add_update_prefix_and_suffix, parse_float, split_protein_list
from .writer import OutputLayout, write_mod_summary, write_results

logger = logging.getLogger(__name__)

_ENGINE_SUFFIX = re.compile(r'_(msgfplus|msgfdb)$', re.IGNORECASE)


@dataclass
class ProcessingSummary:
    """Counts and output paths of one run."""
    lines_read: int = 0
    results: int = 0
    invalid_lines: int = 0
    synopsis_count: int = 0
    first_hits_count: int = 0
    aborted: bool = False
    output_files: Dict[str, Path] = field(default_factory=dict)


def output_base_name(input_path: Union[str, Path]) -> str:
    """``Dataset_msgfplus.tsv`` -> ``Dataset``."""
    stem = Path(input_path).stem
    trimmed = _ENGINE_SUFFIX.sub('', stem)
    return trimmed or stem


class ResultsProcessor:
    """
    Convert one MS-GF+ / MSGFDB result file into synopsis and first-hits files.

    Args:
        options: Processing options; defaults are used when omitted.

    Example::

        processor = ResultsProcessor(ProcessingOptions.from_yaml("options.yaml"))
        summary = processor.process_file("Dataset_msgfplus.tsv", "output/")
        print(summary.output_files["synopsis"])
    """

    def __init__(self, options: Optional[ProcessingOptions] = None):
        self.options = options or ProcessingOptions()
        self.error_log = ErrorLog()
        self._abort_requested = False

        self.catalog: ModificationCatalog = self.options.build_catalog()
        self.mass_table = AminoAcidMassTable()
        for definition in self.catalog.custom_amino_acids():
            try:
                self.mass_table.set_custom_amino_acid(
                    definition.target_residues, definition.formula, definition.mass or None)
            except ValueError as ex:
                raise ModificationDefinitionError(definition.target_residues, str(ex)) from ex

        self.corrector = DeltaMassCorrector(self.options.tolerance, self.mass_table,
                                            self.options.max_isotope_shift)
        self.protein_order = (ProteinOrder.from_fasta(self.options.fasta)
                              if self.options.fasta else ProteinOrder())

    def abort(self):
        """Request a stop; honoured before the next input line."""
        self._abort_requested = True

    @property
    def abort_requested(self) -> bool:
        return self._abort_requested

    # ----- pass one -----

    def _delta_mass(self, result: SearchResult, peptide_mass: float) -> DeltaMass:
        precursor_mz = parse_float(result.precursor_mz, default=None)
        if precursor_mz is None:
            return DeltaMass(0.0, 0.0)
        error_ppm = parse_float(result.pm_error_ppm, default=None) if result.pm_error_ppm else None
        error_da = parse_float(result.pm_error_da, default=None) if result.pm_error_da else None
        return self.corrector.correct(precursor_mz, result.charge, peptide_mass,
                                      error_da=error_da, error_ppm=error_ppm)

    def annotate(self, base: SearchResult, rewriter: PeptideAnnotationRewriter) -> List[SearchResult]:
        """
        One annotated result per protein listed for *base*.

        Raises:
            ValueError: If the peptide has no residues or its mass cannot be
                computed.
        """
        first_protein, proteins = split_protein_list(base.protein)
        protein_termini = list(proteins.items()) or [(first_protein, None)]

        annotated = []
        for protein, termini in protein_termini:
            peptide = base.peptide
            if termini is not None:
                peptide = add_update_prefix_and_suffix(peptide, *termini)

            rewritten = rewriter.rewrite(peptide)
            clean = rewritten.clean_sequence
            if not clean:
                raise ValueError(f"Peptide has no residues: {base.peptide}")
            residue_mass = self.mass_table.compute_sequence_mass(clean)
            if residue_mass < 0:
                raise ValueError(self.mass_table.error_message)
            mono_mass = residue_mass + rewritten.mod_mass
            delta = self._delta_mass(base, mono_mass)

            annotated.append(replace(
                base,
                peptide=rewritten.sequence,
                protein=protein,
                clean_sequence=clean,
                mod_mass=rewritten.mod_mass,
                mono_mass=mono_mass,
                mh=self.mass_table.convolute(mono_mass, 0, 1),
                delm_da=delta.da,
                delm_ppm=delta.ppm,
                ntt=int(compute_cleavage_state(rewritten.sequence)),
            ))
        return annotated

    def expand_scans(self, results: List[SearchResult], spec_index_mapper: SpecIndexMapper,
                     registry: ScanGroupRegistry) -> List[SearchResult]:
        """One copy of each result per physical scan of a merged identification."""
        if not results:
            return []
        base = results[0]
        scans = split_merged_scan(base.scan, base.spec_index, base.frag_method)
        group_id = None
        if is_merged_scan(base.scan):
            group_id = registry.register(base.charge, [s.scan_num for s in scans])

        expanded = []
        for record in scans:
            for result in results:
                expanded.append(replace(
                    result,
                    scan=record.scan,
                    scan_num=record.scan_num,
                    spec_index=spec_index_mapper.to_index(record.spec_index),
                    frag_method=record.frag_method,
                    scan_group_id=group_id,
                ))
        return expanded

    def read_results(self, input_path: Union[str, Path]
                     ) -> Tuple[List[SearchResult], ColumnMap, ScanGroupRegistry, int]:
        """
        Parse and annotate every line of *input_path*.

        Returns:
            Tuple of (results, column map, scan group registry, lines read).

        Raises:
            InputReadError: If the file cannot be read.
            HeaderParseError: If the header lacks a required column.
        """
        results: List[SearchResult] = []
        registry = ScanGroupRegistry()
        spec_index_mapper = SpecIndexMapper()
        lines_read = 0

        with PsmFileReader(input_path) as reader:
            columns = reader.columns
            rewriter = PeptideAnnotationRewriter(
                self.catalog,
                static_mods_explicit=columns.is_msgf_plus,
                relocate_nterm_symbols=self.options.relocate_nterm_symbols,
                tie_policy=self.options.tie_policy,
            )
            logger.info("Reading %s results from %s",
                        'MS-GF+' if columns.is_msgf_plus else 'MSGFDB', input_path)

            for line_number, fields in reader.iter_lines():
                if self._abort_requested:
                    logger.warning("Processing aborted at line %d", line_number)
                    break
                lines_read += 1
                try:
                    base = result_from_fields(fields, columns)
                    annotated = self.annotate(base, rewriter)
                except ValueError as ex:
                    self.error_log.add(f"Error parsing line {line_number}: {ex}")
                    continue
                results.extend(self.expand_scans(annotated, spec_index_mapper, registry))

        return results, columns, registry, lines_read

    # ----- pass two -----

    def process_file(self, input_path: Union[str, Path],
                     output_dir: Union[str, Path, None] = None) -> ProcessingSummary:
        """
        Process one input file.

        Args:
            input_path: MS-GF+ or MSGFDB tab-delimited results.
            output_dir: Directory for the output files; defaults to the
                input file's directory.

        Returns:
            :class:`ProcessingSummary`. Nothing is written when aborted.

        Raises:
            InputReadError, HeaderParseError, OutputCreationError
        """
        input_path = Path(input_path)
        output_dir = Path(output_dir) if output_dir is not None else input_path.parent
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            raise OutputCreationError(str(output_dir), str(ex)) from ex

        results, columns, registry, lines_read = self.read_results(input_path)
        summary = ProcessingSummary(lines_read=lines_read, results=len(results),
                                    invalid_lines=len(self.error_log) + self.error_log.dropped)

        if self.error_log:
            logger.warning("Invalid lines in %s:\n%s", input_path.name, self.error_log)
        if self._abort_requested:
            summary.aborted = True
            return summary

        results.sort(key=global_sort_key)
        ranked = rank_by_scan(results)
        layout = OutputLayout.from_columns(columns)
        base_name = output_base_name(input_path)
        synopsis: List[SearchResult] = []

        if self.options.create_synopsis:
            synopsis = select_synopsis(ranked, self.options.thresholds)
            path = output_dir / (base_name + SYNOPSIS_SUFFIX)
            summary.synopsis_count = write_results(path, synopsis, layout)
            summary.output_files['synopsis'] = path

        if self.options.create_first_hits:
            first_hits = select_first_hits(ranked, self.protein_order)
            path = output_dir / (base_name + FIRST_HITS_SUFFIX)
            summary.first_hits_count = write_results(path, first_hits, layout)
            summary.output_files['first_hits'] = path

        path = output_dir / (base_name + SCAN_GROUP_SUFFIX)
        if write_scan_group_file(path, registry.entries):
            summary.output_files['scan_groups'] = path

        if self.options.create_synopsis and self.options.create_mod_summary:
            path = output_dir / (base_name + MOD_SUMMARY_SUFFIX)
            write_mod_summary(path, self.catalog, synopsis)
            summary.output_files['mod_summary'] = path

        logger.info("Processed %d lines into %d results (%d synopsis, %d first hits)",
                    lines_read, len(results), summary.synopsis_count, summary.first_hits_count)
        return summary
