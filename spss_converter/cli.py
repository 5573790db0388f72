"""Command-line interface for the SPSS-to-R converter.

WHY: Analysts migrating scripts need to convert a .sps file from the
terminal without writing Python. The CLI wires together file reading,
the conversion pipeline, and the R script sink behind one command.

HOW: Uses argparse to accept an input syntax file, the output dialect,
pass-through mode, and an output location. Status messages go to
stderr; the R script is written next to the input (or to --output), or
printed to stdout with --stdout.

RULES:
- Positional argument: input SPSS syntax file path
- --dialect: dplyr (default from config) or data.table
- --nosave/--no-nosave: pass-through mode for GET/SAVE commands
- --output: file or directory; default is rScript.r next to the input
- --stdout prints the script instead of writing a file
- Conversion errors print "Error: ..." to stderr and exit with status 1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from spss_converter.config import DEFAULT_DIALECT, DEFAULT_NOSAVE, DIALECT_ALIASES
from spss_converter.core.errors import ConversionError
from spss_converter.core.pipeline import translate
from spss_converter.files import read_script, write_rscript


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so --stdout can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _run(args: argparse.Namespace) -> None:
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    try:
        script = read_script(input_path, encoding=args.encoding)
    except (OSError, UnicodeDecodeError) as e:
        _fail("Cannot read {}: {}".format(input_path, e))

    _status("Converting {} ({} lines, {} output)...".format(
        input_path.name, len(script), args.dialect
    ))
    try:
        rsyntax = translate(script, dialect=args.dialect, nosave=args.nosave)
    except (ConversionError, ValueError) as e:
        _fail(str(e))

    if args.stdout:
        sys.stdout.write(rsyntax.to_text())
        return

    output = Path(args.output) if args.output else input_path.parent
    try:
        saved = write_rscript(rsyntax, output)
    except OSError as e:
        _fail("Cannot write R script: {}".format(e))
    _status("Saved: {} ({} lines)".format(saved, len(rsyntax)))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running a conversion.
    """
    parser = argparse.ArgumentParser(
        prog="spss_converter",
        description="Translate SPSS syntax into equivalent R code (dplyr or data.table).",
    )

    parser.add_argument(
        "input_file",
        help="Path to the SPSS syntax (.sps) file to translate.",
    )

    parser.add_argument(
        "--dialect",
        default=DEFAULT_DIALECT.value,
        choices=sorted(DIALECT_ALIASES),
        help="R idiom to generate (default: %(default)s).",
    )

    parser.add_argument(
        "--nosave",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_NOSAVE,
        help="Skip GET/SAVE commands and keep working on the in-memory "
             "data frame (default: %(default)s).",
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Output file or directory (default: rScript.r next to the input file).",
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the R script to stdout instead of writing a file.",
    )

    parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Encoding of the input file (default: %(default)s).",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log segmentation and dispatch details to stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    _run(args)


if __name__ == "__main__":
    main()
