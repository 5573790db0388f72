"""Configuration constants, dialect selection, and .env loading.

WHY: The segmenter, classifier, assembler, and sink all depend on a
handful of fixed SPSS syntax markers and output conventions. Keeping
them here as plain data makes them easy to find and override, instead
of burying literal characters in regexes across the core.

HOW: python-dotenv loads the .env file on import. Syntax markers are
module-level constants. Run defaults (output dialect, pass-through mode,
output file name) can be overridden via environment variables.

RULES:
- STATEMENT_TERMINATOR ends every SPSS statement
- Lines starting with COMMENT_MARKER are dropped by the normalizer
- NOOP_KEYWORD ("execute.") is erased wherever it appears, any case
- DISPATCH_SUFFIX is appended to a command key to form a translator name
- resolve_dialect() raises ValueError for unknown dialect names
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from spss_converter.core.ir import Dialect

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# SPSS syntax markers
# ---------------------------------------------------------------------------

STATEMENT_TERMINATOR = "."
COMMENT_MARKER = "*"
NOOP_KEYWORD = "execute."

# ---------------------------------------------------------------------------
# Generated R script conventions
# ---------------------------------------------------------------------------

DATASET_NAME = "x"
HEADER_COMMENT = "# {} is the name of your data frame".format(DATASET_NAME)
DISPATCH_SUFFIX = "_to_r"

# ---------------------------------------------------------------------------
# Dialect names
# ---------------------------------------------------------------------------

DIALECT_ALIASES: dict[str, Dialect] = {
    "dplyr": Dialect.DPLYR,
    "tidyverse": Dialect.DPLYR,
    "data.table": Dialect.DATA_TABLE,
    "datatable": Dialect.DATA_TABLE,
    "dt": Dialect.DATA_TABLE,
}


def resolve_dialect(name: str | Dialect) -> Dialect:
    """Map a dialect name (case-insensitive) to a Dialect member.

    RULES:
    - Dialect members pass through unchanged
    - Accepts the aliases in DIALECT_ALIASES
    - Raises ValueError listing the accepted names otherwise
    """
    if isinstance(name, Dialect):
        return name
    dialect = DIALECT_ALIASES.get(name.strip().lower())
    if dialect is None:
        raise ValueError(
            "Unknown output dialect '{}'. Available: {}".format(
                name, ", ".join(sorted(DIALECT_ALIASES))
            )
        )
    return dialect


# ---------------------------------------------------------------------------
# Run defaults
# ---------------------------------------------------------------------------

DEFAULT_DIALECT = resolve_dialect(os.getenv("SPSS_CONVERTER_DIALECT", "dplyr"))
DEFAULT_NOSAVE = os.getenv("SPSS_CONVERTER_NOSAVE", "false").lower() == "true"
OUTPUT_FILENAME = os.getenv("SPSS_CONVERTER_OUTPUT_NAME", "rScript.r")
