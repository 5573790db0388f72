"""Reading SPSS syntax files and writing generated R scripts.

WHY: The core works on in-memory line sequences. Callers usually start
from a .sps file and want an .r file, so reading and writing live here,
outside the pipeline.

RULES:
- read_script(): whole file as text (UTF-8 by default), split into lines
- write_rscript(): one line per row, no quoting, no header row
- file_path=None writes OUTPUT_FILENAME into the current directory
- An existing directory as file_path writes OUTPUT_FILENAME inside it
- Any other file_path is used as the output file itself
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from spss_converter.config import OUTPUT_FILENAME

logger = logging.getLogger(__name__)


def read_script(path: str | Path, encoding: str = "utf-8") -> List[str]:
    """Read an SPSS syntax file into a list of lines.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    text = Path(path).read_text(encoding=encoding)
    return text.splitlines()


def resolve_output_path(file_path: Optional[str | Path] = None) -> Path:
    """Resolve where write_rscript() will write."""
    if file_path is None:
        return Path.cwd() / OUTPUT_FILENAME
    target = Path(file_path)
    if target.is_dir():
        return target / OUTPUT_FILENAME
    return target


def write_rscript(lines: Iterable[str], file_path: Optional[str | Path] = None) -> Path:
    """Write R lines to disk and return the path written."""
    target = resolve_output_path(file_path)
    target.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    logger.info("Wrote R script to %s", target)
    return target
