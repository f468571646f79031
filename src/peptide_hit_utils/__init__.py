"""
peptide-hit-utils: Normalize MS-GF+ / MSGFDB peptide-spectrum-match results.

Modules:
    masses         - Amino acid mass table, peptide masses, charge conversion
    modifications  - Modification definitions and mass-indexed catalog
    resolver       - Inline mass shift to modification symbol resolution
    rewriter       - Peptide annotation rewriting into symbol notation
    delta_mass     - Precursor Da/ppm error reconciliation, C13 correction
    ranking        - Per-scan ranks, first-hits and synopsis views
    scan_groups    - Merged-scan expansion and scan group file
    cleavage       - Tryptic cleavage state (NTT)
    columns        - Declarative input header schema
    reader         - SearchResult container and result file reader
    writer         - Synopsis / first-hits / mod summary writers
    pipeline       - Two-pass results processor
    config         - Processing options (YAML)
    constants      - Physical constants, residue masses, symbols
    utils          - Sequence notation, number formatting, error log
"""

__version__ = "0.1.0"

# masses
from .masses import AminoAcidMassTable, ResidueModification, mass_to_ppm, ppm_to_mass

# modifications
from .modifications import ModificationCatalog, ModificationDefinition, ModificationType

# resolver / rewriter
from .resolver import MassShiftResolution, MassShiftResolver, TieBreakPolicy
from .rewriter import PeptideAnnotationRewriter, RewrittenPeptide, replace_terminus, rewrite_peptide

# delta mass
from .delta_mass import (
    DeltaMass,
    DeltaMassCorrector,
    ParentMassTolerance,
    corrected_delta_ppm,
)

# ranking
from .ranking import (
    ProteinOrder,
    SynopsisThresholds,
    assign_ranks,
    output_sort_key,
    select_first_hits,
    select_synopsis,
)

# scan groups
from .scan_groups import ScanGroupRegistry, ScanRecord, split_merged_scan, write_scan_group_file

# cleavage
from .cleavage import CleavageState, compute_cleavage_state

# reader / pipeline
from .reader import PsmFileReader, SearchResult
from .pipeline import ProcessingSummary, ResultsProcessor
from .config import ProcessingOptions

# exceptions
from .exceptions import (
    CustomError,
    HeaderParseError,
    InputReadError,
    ModificationDefinitionError,
    OutputCreationError,
)

# constants (commonly used)
from .constants import PROTON, MASS_C13, AA_MASSES

__all__ = [
    # version
    "__version__",
    # masses
    "AminoAcidMassTable",
    "ResidueModification",
    "mass_to_ppm",
    "ppm_to_mass",
    # modifications
    "ModificationCatalog",
    "ModificationDefinition",
    "ModificationType",
    # resolver / rewriter
    "MassShiftResolution",
    "MassShiftResolver",
    "TieBreakPolicy",
    "PeptideAnnotationRewriter",
    "RewrittenPeptide",
    "replace_terminus",
    "rewrite_peptide",
    # delta mass
    "DeltaMass",
    "DeltaMassCorrector",
    "ParentMassTolerance",
    "corrected_delta_ppm",
    # ranking
    "ProteinOrder",
    "SynopsisThresholds",
    "assign_ranks",
    "output_sort_key",
    "select_first_hits",
    "select_synopsis",
    # scan groups
    "ScanGroupRegistry",
    "ScanRecord",
    "split_merged_scan",
    "write_scan_group_file",
    # cleavage
    "CleavageState",
    "compute_cleavage_state",
    # reader / pipeline
    "PsmFileReader",
    "SearchResult",
    "ProcessingSummary",
    "ResultsProcessor",
    "ProcessingOptions",
    # exceptions
    "CustomError",
    "HeaderParseError",
    "InputReadError",
    "ModificationDefinitionError",
    "OutputCreationError",
    # constants
    "PROTON",
    "MASS_C13",
    "AA_MASSES",
]
