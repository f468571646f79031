"""
Declarative input column schema.

Each canonical field lists the header names the MS-GF+ family has used for
it. The header line is resolved once per file into a :class:`ColumnMap`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import HeaderParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    synonyms: Tuple[str, ...]
    required: bool = False


SCHEMA: Tuple[ColumnSpec, ...] = (
    ColumnSpec('SpecFile', ('#SpecFile', 'SpecFile')),
    ColumnSpec('SpecIndex', ('SpecIndex', 'SpecID')),
    ColumnSpec('Scan', ('Scan#', 'ScanNum', 'Scan'), required=True),
    ColumnSpec('ScanTime', ('ScanTime(Min)', 'ScanTime')),
    ColumnSpec('FragMethod', ('FragMethod',)),
    ColumnSpec('PrecursorMZ', ('Precursor', 'PrecursorMZ')),
    ColumnSpec('IsotopeError', ('IsotopeError',)),
    ColumnSpec('PMErrorDa', ('PMError(Da)', 'PrecursorError(Da)')),
    ColumnSpec('PMErrorPPM', ('PMError(ppm)', 'PrecursorError(ppm)')),
    ColumnSpec('Charge', ('Charge',), required=True),
    ColumnSpec('Peptide', ('Peptide',), required=True),
    ColumnSpec('Protein', ('Protein',), required=True),
    ColumnSpec('DeNovoScore', ('DeNovoScore',)),
    ColumnSpec('MSGFScore', ('MSGFScore',)),
    ColumnSpec('SpecEValue', ('SpecProb', 'SpecEValue'), required=True),
    ColumnSpec('EValue', ('P-value', 'PValue', 'EValue')),
    ColumnSpec('QValue', ('FDR', 'QValue')),
    ColumnSpec('PepQValue', ('PepFDR', 'PepQValue')),
    ColumnSpec('EFDR', ('EFDR',)),
    ColumnSpec('IMSScan', ('IMS_Scan',)),
    ColumnSpec('IMSDriftTime', ('IMS_Drift_Time',)),
)

_SYNONYM_LOOKUP: Dict[str, str] = {
    synonym.lower(): spec.name for spec in SCHEMA for synonym in spec.synonyms
}


@dataclass
class ColumnMap:
    """Canonical field name -> column index for one input file."""
    indices: Dict[str, int] = field(default_factory=dict)
    unknown: List[str] = field(default_factory=list)

    def has(self, name: str) -> bool:
        return name in self.indices

    def get(self, fields: Sequence[str], name: str, default: str = '') -> str:
        """Value of a canonical field in a split data line, stripped."""
        index = self.indices.get(name)
        if index is None or index >= len(fields):
            return default
        return fields[index].strip()

    @property
    def is_msgf_plus(self) -> bool:
        """MS-GF+ writes IsotopeError; MSGFDB does not."""
        return self.has('IsotopeError')

    @property
    def has_fdr(self) -> bool:
        return self.has('QValue') and self.has('PepQValue')

    @property
    def has_efdr(self) -> bool:
        return self.has('EFDR') and not self.has('QValue')

    @property
    def has_ims(self) -> bool:
        return self.has('IMSScan') or self.has('IMSDriftTime')

    @property
    def max_required_index(self) -> int:
        return max(self.indices[spec.name] for spec in SCHEMA if spec.required)


def canonical_name(header: str) -> Optional[str]:
    return _SYNONYM_LOOKUP.get(header.strip().lower())


def parse_header(header_fields: Sequence[str]) -> ColumnMap:
    """
    Resolve a split header line.

    Raises:
        HeaderParseError: If a required column is missing.
    """
    column_map = ColumnMap()
    for index, header in enumerate(header_fields):
        name = canonical_name(header)
        if name is None:
            if header.strip():
                column_map.unknown.append(header.strip())
            continue
        column_map.indices.setdefault(name, index)

    for header in column_map.unknown:
        logger.warning("Unrecognized column header '%s'; ignoring", header)

    missing = [spec.name for spec in SCHEMA if spec.required and spec.name not in column_map.indices]
    if missing:
        raise HeaderParseError(', '.join(missing),
                               "Required column(s) missing from the header line")
    return column_map
