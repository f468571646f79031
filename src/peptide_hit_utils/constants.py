"""
Physical constants, amino acid masses, terminus symbols, and file-format
constants for PSM result normalization.

All masses are monoisotopic unless otherwise noted.
"""

from pyteomics.mass import nist_mass

# =============================================================================
# Physical constants
# =============================================================================

MASS_HYDROGEN = nist_mass['H'][0][0]
"""Hydrogen atom mass in Da."""

MASS_OXYGEN = nist_mass['O'][0][0]
"""Oxygen atom mass in Da."""

PROTON = 1.00727649
"""Proton mass in Da (default charge carrier)."""

MASS_C13 = 1.00335483
"""Mass difference between C13 and C12 in Da."""

DEFAULT_N_TERMINUS_MASS = MASS_HYDROGEN
"""Mass added to the N-terminus of a peptide (H)."""

DEFAULT_C_TERMINUS_MASS = MASS_OXYGEN + MASS_HYDROGEN
"""Mass added to the C-terminus of a peptide (OH)."""

# =============================================================================
# Amino acid residue masses (monoisotopic) and compositions
# =============================================================================

AA_MASSES = {
    'A': 71.0371100902557,   # Alanine
    'B': 114.042921543121,   # Asn/Asp, uses Asn
    'C': 103.009180784225,   # Cysteine
    'D': 115.026938199997,   # Aspartic acid
    'E': 129.042587518692,   # Glutamic acid
    'F': 147.068408727646,   # Phenylalanine
    'G': 57.0214607715607,   # Glycine
    'H': 137.058904886246,   # Histidine
    'I': 113.084058046341,   # Isoleucine
    'J': 0.0,                # Invalid, zero-mass placeholder
    'K': 128.094955444336,   # Lysine
    'L': 113.084058046341,   # Leucine
    'M': 131.040479421616,   # Methionine
    'N': 114.042921543121,   # Asparagine
    'O': 114.079306125641,   # Ornithine
    'P': 97.0527594089508,   # Proline
    'Q': 128.058570861816,   # Glutamine
    'R': 156.101100921631,   # Arginine
    'S': 87.0320241451263,   # Serine
    'T': 101.047673463821,   # Threonine
    'U': 150.95363,          # Selenocysteine
    'V': 99.0684087276459,   # Valine
    'W': 186.079306125641,   # Tryptophan
    'X': 113.084058046341,   # Unknown, uses Leu/Ile
    'Y': 163.063322782516,   # Tyrosine
    'Z': 128.058570861816,   # Gln/Glu, uses Gln
}
"""Monoisotopic residue masses for all 26 letter slots."""

AA_COMPOSITIONS = {
    'A': {'C': 3, 'H': 5, 'N': 1, 'O': 1},
    'B': {'C': 4, 'H': 6, 'N': 2, 'O': 2},
    'C': {'C': 3, 'H': 5, 'N': 1, 'O': 1, 'S': 1},
    'D': {'C': 4, 'H': 5, 'N': 1, 'O': 3},
    'E': {'C': 5, 'H': 7, 'N': 1, 'O': 3},
    'F': {'C': 9, 'H': 9, 'N': 1, 'O': 1},
    'G': {'C': 2, 'H': 3, 'N': 1, 'O': 1},
    'H': {'C': 6, 'H': 7, 'N': 3, 'O': 1},
    'I': {'C': 6, 'H': 11, 'N': 1, 'O': 1},
    'J': {},
    'K': {'C': 6, 'H': 12, 'N': 2, 'O': 1},
    'L': {'C': 6, 'H': 11, 'N': 1, 'O': 1},
    'M': {'C': 5, 'H': 9, 'N': 1, 'O': 1, 'S': 1},
    'N': {'C': 4, 'H': 6, 'N': 2, 'O': 2},
    'O': {'C': 5, 'H': 10, 'N': 2, 'O': 1},
    'P': {'C': 5, 'H': 7, 'N': 1, 'O': 1},
    'Q': {'C': 5, 'H': 8, 'N': 2, 'O': 2},
    'R': {'C': 6, 'H': 12, 'N': 4, 'O': 1},
    'S': {'C': 3, 'H': 5, 'N': 1, 'O': 2},
    'T': {'C': 4, 'H': 7, 'N': 1, 'O': 2},
    'U': {'C': 3, 'H': 5, 'N': 1, 'O': 1, 'Se': 1},
    'V': {'C': 5, 'H': 9, 'N': 1, 'O': 1},
    'W': {'C': 11, 'H': 10, 'N': 2, 'O': 1},
    'X': {'C': 6, 'H': 11, 'N': 1, 'O': 1},
    'Y': {'C': 9, 'H': 9, 'N': 1, 'O': 2},
    'Z': {'C': 5, 'H': 8, 'N': 2, 'O': 2},
}
"""Element counts for each residue (residue form, i.e. minus water)."""

# =============================================================================
# Sequence notation
# =============================================================================

TERMINUS_SYMBOL = '-'
"""Canonical prefix/suffix residue used when a peptide is at a protein terminus."""

ENGINE_N_TERMINUS = '_.'
"""Protein N-terminus marker written by MS-GF+."""

ENGINE_C_TERMINUS = '._'
"""Protein C-terminus marker written by MS-GF+."""

N_TERMINAL_PEPTIDE_SYMBOL = '<'
C_TERMINAL_PEPTIDE_SYMBOL = '>'
N_TERMINAL_PROTEIN_SYMBOL = '['
C_TERMINAL_PROTEIN_SYMBOL = ']'

NO_SYMBOL_MODIFICATION_SYMBOL = '-'
"""Symbol carried by static modifications; never written into a peptide."""

DEFAULT_MODIFICATION_SYMBOLS = '*#@$&!%~^'
"""Symbols handed out, in order, to dynamic mods defined without a symbol."""

NO_AFFECTED_ATOM_SYMBOL = '-'
"""Affected-atom marker for positional (non-isotopic) modifications."""

DECOY_PROTEIN_PREFIXES = ('REV_', 'XXX_', 'XXX.', 'Reversed_', 'SCRAMBLED_')
"""Protein name prefixes identifying reversed or scrambled (decoy) proteins."""

# =============================================================================
# Processing defaults
# =============================================================================

MOD_MASS_MATCH_TOLERANCE = 0.25
"""Maximum |candidate - observed| mass difference (Da) for a symbol match."""

DEFAULT_SPEC_EVALUE_THRESHOLD = 5e-7
"""Synopsis filter: maximum SpecEValue."""

DEFAULT_EVALUE_THRESHOLD = 0.75
"""Synopsis filter: maximum EValue."""

DEFAULT_MAX_ISOTOPE_SHIFT = 3
"""Largest isotope-selection correction tried, in isotope spacings."""

PPM_ERROR_TOLERANCE_FACTOR = 1.5
"""Engine ppm errors beyond this multiple of the search tolerance are recomputed."""

MAX_ERROR_LOG_LENGTH = 4096
"""Character budget for the per-run invalid-line error log."""

# =============================================================================
# Output file names
# =============================================================================

SYNOPSIS_SUFFIX = '_syn.txt'
FIRST_HITS_SUFFIX = '_fht.txt'
SCAN_GROUP_SUFFIX = '_ScanGroupInfo.txt'
MOD_SUMMARY_SUFFIX = '_syn_ModSummary.txt'
