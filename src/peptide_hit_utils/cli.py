"""CLI for peptide-hit-utils.

Options given on the command line override values from the ``--config`` file.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__

logger = logging.getLogger(__name__)

EXIT_CODE_SUCCESS = 0
EXIT_CODE_USER_ERROR = 1
EXIT_CODE_UNKNOWN_ERROR = 127

epilog = "Parameters passed via CLI will overwrite parameters from the config file."

parser = argparse.ArgumentParser(
    prog="peptide-hit-utils",
    description="Convert MS-GF+ / MSGFDB results into synopsis and first-hits files",
    epilog=epilog,
)
parser.add_argument("input", nargs="?", help="MS-GF+ or MSGFDB tab-delimited results file.")
parser.add_argument("--output", "-o", type=str, default=None,
                    help="Output directory (default: directory of the input file).")
parser.add_argument("--config", "-c", type=str, default=None,
                    help="YAML options file (modifications, thresholds, tolerance).")
parser.add_argument("--fasta", type=str, default=None,
                    help="FASTA file used to choose among proteins of equal rank.")
parser.add_argument("--tolerance", type=str, default=None,
                    help="Precursor tolerance used by the search, e.g. 20ppm or 0.5Da.")
parser.add_argument("--spec-evalue-threshold", type=float, default=None,
                    help="Synopsis SpecEValue threshold.")
parser.add_argument("--evalue-threshold", type=float, default=None,
                    help="Synopsis EValue threshold.")
parser.add_argument("--qvalue-threshold", type=float, default=None,
                    help="Also keep synopsis results with 0 < QValue < this value.")
parser.add_argument("--tie-break", choices=["residue", "dynamic", "static"], default=None,
                    help="Tie-break rule between equally close modifications.")
parser.add_argument("--no-relocate-nterm", action="store_true",
                    help="Keep N-terminal symbols before the first residue.")
parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
parser.add_argument("--version", "-v", action="store_true", help="Print version and exit.")


def init_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def run(argv: Optional[List[str]] = None) -> int:
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return EXIT_CODE_SUCCESS

    if not args.input:
        parser.print_help()
        return EXIT_CODE_USER_ERROR

    init_logging(args.debug)

    # load modules only here to keep --version and --help fast
    from .config import ProcessingOptions
    from .exceptions import CustomError
    from .pipeline import ResultsProcessor

    try:
        options = ProcessingOptions.from_yaml(args.config) if args.config else ProcessingOptions()
        options.update(
            fasta=args.fasta,
            precursor_tolerance=args.tolerance,
            spec_evalue_threshold=args.spec_evalue_threshold,
            evalue_threshold=args.evalue_threshold,
            qvalue_threshold=args.qvalue_threshold,
            tie_break_policy=args.tie_break,
            relocate_nterm_symbols=False if args.no_relocate_nterm else None,
        )
        summary = ResultsProcessor(options).process_file(args.input, args.output)
    except Exception as e:
        if isinstance(e, (CustomError, OSError, ValueError)):
            exit_code = EXIT_CODE_USER_ERROR
        else:
            import traceback

            logger.info(traceback.format_exc())
            exit_code = EXIT_CODE_UNKNOWN_ERROR

        logger.error(e)
        return exit_code

    for kind, path in summary.output_files.items():
        logger.info("%s: %s", kind, path)
    return EXIT_CODE_SUCCESS


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
