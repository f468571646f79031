"""
Tab-delimited PSM result file reading.

Provides the :class:`SearchResult` container and a reader that resolves the
header once and turns each data line into a partially populated result.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Generator, List, Optional, Sequence, Tuple, Union

from .columns import ColumnMap, parse_header
from .exceptions import HeaderParseError, InputReadError
from .utils import parse_float, parse_int, parse_spec_index

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Container for a single peptide-spectrum match."""
    scan: str
    charge: int
    peptide: str
    protein: str
    spec_evalue: str = ''
    spec_evalue_num: float = 0.0
    scan_num: int = 0
    spec_file: str = ''
    spec_index: str = ''
    frag_method: str = ''
    precursor_mz: str = ''
    isotope_error: str = ''
    pm_error_da: str = ''
    pm_error_ppm: str = ''
    de_novo_score: str = ''
    msgf_score: str = ''
    evalue: str = ''
    evalue_num: float = 0.0
    qvalue: str = ''
    qvalue_num: float = 0.0
    pep_qvalue: str = ''
    efdr: str = ''
    ims_scan: str = ''
    ims_drift_time: str = ''
    # Populated by later stages
    raw_peptide: str = ''
    clean_sequence: str = ''
    mod_mass: float = 0.0
    mono_mass: float = 0.0
    mh: float = 0.0
    delm_da: float = 0.0
    delm_ppm: float = 0.0
    ntt: int = 0
    rank: int = 0
    scan_group_id: Optional[int] = None

    @property
    def scan_charge_key(self) -> Tuple[int, int]:
        return self.scan_num, self.charge


def result_from_fields(fields: Sequence[str], columns: ColumnMap) -> SearchResult:
    """
    Build a :class:`SearchResult` from one split data line.

    Raises:
        ValueError: If the line lacks required columns.
    """
    if len(fields) <= columns.max_required_index:
        raise ValueError(f"line has {len(fields)} columns; expected at least "
                         f"{columns.max_required_index + 1}")

    peptide = columns.get(fields, 'Peptide')
    if not peptide:
        raise ValueError("empty peptide")

    spec_evalue = columns.get(fields, 'SpecEValue')
    evalue = columns.get(fields, 'EValue')
    qvalue = columns.get(fields, 'QValue')
    scan = columns.get(fields, 'Scan')

    return SearchResult(
        scan=scan,
        scan_num=parse_int(scan),
        charge=parse_int(columns.get(fields, 'Charge')),
        peptide=peptide,
        raw_peptide=peptide,
        protein=columns.get(fields, 'Protein'),
        spec_file=columns.get(fields, 'SpecFile'),
        spec_index=columns.get(fields, 'SpecIndex'),
        frag_method=columns.get(fields, 'FragMethod'),
        precursor_mz=columns.get(fields, 'PrecursorMZ'),
        isotope_error=columns.get(fields, 'IsotopeError'),
        pm_error_da=columns.get(fields, 'PMErrorDa'),
        pm_error_ppm=columns.get(fields, 'PMErrorPPM'),
        de_novo_score=columns.get(fields, 'DeNovoScore'),
        msgf_score=columns.get(fields, 'MSGFScore'),
        spec_evalue=spec_evalue,
        spec_evalue_num=parse_float(spec_evalue),
        evalue=evalue,
        evalue_num=parse_float(evalue),
        qvalue=qvalue,
        qvalue_num=parse_float(qvalue),
        pep_qvalue=columns.get(fields, 'PepQValue'),
        efdr=columns.get(fields, 'EFDR'),
        ims_scan=columns.get(fields, 'IMSScan'),
        ims_drift_time=columns.get(fields, 'IMSDriftTime'),
    )


class SpecIndexMapper:
    """
    Convert MS-GF+ SpecID text to integer indices.

    ``index=123`` becomes ``123``; native ids such as
    ``controllerType=0 controllerNumber=1 scan=6390`` are numbered in order
    of first appearance.
    """

    def __init__(self):
        self._native_ids: Dict[str, int] = {}

    def to_index(self, spec_id: str) -> str:
        if not spec_id:
            return ''
        index = parse_spec_index(spec_id)
        if index is not None:
            return str(index)
        if spec_id not in self._native_ids:
            self._native_ids[spec_id] = len(self._native_ids) + 1
        return str(self._native_ids[spec_id])


class PsmFileReader:
    """
    Read a tab-delimited MS-GF+ or MSGFDB result file.

    Args:
        path: Path to the result file.

    Example::

        with PsmFileReader("Dataset_msgfplus.tsv") as reader:
            print(reader.columns.is_msgf_plus)
            for line_number, fields in reader.iter_lines():
                result = result_from_fields(fields, reader.columns)

    Raises:
        InputReadError: If the file cannot be opened.
        HeaderParseError: If the header is missing a required column.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        try:
            self._handle = open(self.path, newline='')
        except OSError as ex:
            raise InputReadError(str(self.path), str(ex)) from ex
        self._reader = csv.reader(self._handle, delimiter='\t', quoting=csv.QUOTE_NONE)
        self.line_number = 0
        self.columns = self._read_header()

    def _read_header(self) -> ColumnMap:
        try:
            for fields in self._reader:
                self.line_number += 1
                if any(f.strip() for f in fields):
                    return parse_header(fields)
        except (csv.Error, UnicodeDecodeError) as ex:
            self.close()
            raise InputReadError(str(self.path), str(ex)) from ex
        except HeaderParseError:
            self.close()
            raise
        self.close()
        raise HeaderParseError(str(self.path), "The file has no header line")

    def close(self):
        """Close the underlying file handle."""
        if not self._handle.closed:
            self._handle.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def iter_lines(self) -> Generator[Tuple[int, List[str]], None, None]:
        """Yield (line_number, fields) for each non-blank data line."""
        try:
            for fields in self._reader:
                self.line_number += 1
                if not any(f.strip() for f in fields):
                    continue
                yield self.line_number, fields
        except (OSError, UnicodeDecodeError, csv.Error) as ex:
            raise InputReadError(str(self.path), f"line {self.line_number}: {ex}") from ex
