"""
Merged-scan expansion and scan-group bookkeeping.

MS-GF+ can merge several spectra into one identification, reporting
``Scan`` as ``100/101/102`` with matching ``SpecIndex`` and ``FragMethod``
lists. Each physical scan becomes its own record; scans that came from one
merged line share a scan-group id.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .exceptions import OutputCreationError
from .utils import parse_int

logger = logging.getLogger(__name__)

SCAN_DELIMITER = '/'
SCAN_GROUP_HEADER = ('Scan_Group_ID', 'Charge', 'Scan')


@dataclass(frozen=True)
class ScanRecord:
    """One physical scan of a (possibly merged) identification."""
    scan: str
    scan_num: int
    spec_index: str = ''
    frag_method: str = ''


@dataclass(frozen=True)
class ScanGroupEntry:
    group_id: int
    charge: int
    scan: int


def is_merged_scan(scan: str, delimiter: str = SCAN_DELIMITER) -> bool:
    return delimiter in scan


def split_merged_scan(scan: str, spec_index: str = '', frag_method: str = '',
                      delimiter: str = SCAN_DELIMITER) -> List[ScanRecord]:
    """
    Split merged scan, spec index and fragmentation fields in lock-step.

    Args:
        scan: Scan text, e.g. ``"100/101/102"``.
        spec_index: Matching spec index text, e.g. ``"5/6/7"``.
        frag_method: Matching fragmentation text, e.g. ``"CID/ETD/CID"``.
        delimiter: Separator used by the search engine.

    Returns:
        One :class:`ScanRecord` per scan. Missing trailing index or method
        values are empty strings; surplus values are ignored.
    """
    if not is_merged_scan(scan, delimiter):
        return [ScanRecord(scan, parse_int(scan), spec_index, frag_method)]

    scans = scan.split(delimiter)
    indices = spec_index.split(delimiter) if spec_index else []
    methods = frag_method.split(delimiter) if frag_method else []

    records = []
    for position, scan_text in enumerate(scans):
        records.append(ScanRecord(
            scan=scan_text,
            scan_num=parse_int(scan_text),
            spec_index=indices[position] if position < len(indices) else '',
            frag_method=methods[position] if position < len(methods) else '',
        ))
    return records


class ScanGroupRegistry:
    """
    Allocate scan-group ids for merged-scan identifications.

    A new id is allocated only when at least one (charge, scan) pair of the
    group has not been seen before; already-seen pairs are not re-recorded.
    """

    def __init__(self):
        self.entries: List[ScanGroupEntry] = []
        self._seen: Dict[Tuple[int, int], int] = {}
        self._next_id = 1

    def register(self, charge: int, scans: Iterable[int]) -> Optional[int]:
        """
        Record the scans of one merged identification.

        Returns:
            The group id used for newly seen scans, or None if every
            (charge, scan) pair had been registered already.
        """
        group_id = None
        for scan in scans:
            key = (charge, scan)
            if key in self._seen:
                continue
            if group_id is None:
                group_id = self._next_id
                self._next_id += 1
            self._seen[key] = group_id
            self.entries.append(ScanGroupEntry(group_id, charge, scan))
        return group_id

    def group_of(self, charge: int, scan: int) -> Optional[int]:
        return self._seen.get((charge, scan))

    def __len__(self) -> int:
        return len(self.entries)


def has_material_groups(entries: Sequence[ScanGroupEntry]) -> bool:
    """True if some group id has two or more members."""
    counts: Dict[int, int] = {}
    for entry in entries:
        counts[entry.group_id] = counts.get(entry.group_id, 0) + 1
        if counts[entry.group_id] > 1:
            return True
    return False


def write_scan_group_file(path: Union[str, Path], entries: Sequence[ScanGroupEntry]) -> bool:
    """
    Write the scan group file if any group has two or more members.

    Returns:
        True if the file was written.

    Raises:
        OutputCreationError: If the file cannot be written.
    """
    if not has_material_groups(entries):
        logger.debug("No merged scan groups; skipping %s", path)
        return False

    try:
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f, delimiter='\t', lineterminator='\n')
            writer.writerow(SCAN_GROUP_HEADER)
            for entry in entries:
                writer.writerow((entry.group_id, entry.charge, entry.scan))
    except OSError as ex:
        raise OutputCreationError(str(path), f"Error creating scan group file: {ex}") from ex

    logger.info("Wrote %d scan group entries to %s", len(entries), path)
    return True
