"""Output assembly: per-statement R lines to one generated script.

WHY: Each translator emits the library() calls it needs alongside its
code, so a script with ten dplyr statements would load dplyr ten times,
scattered through the body. SPSS paths also use Windows backslashes,
which R treats as escape characters.

HOW: Flatten the translator outputs behind the header comment, rewrite
backslashes as forward slashes, then pull every import line out of the
body and place the unique ones, in first-seen order, ahead of the header.

RULES:
- Final order: unique import lines, header comment, remaining lines
- Import lines are recognized by shape (library/require/requireNamespace
  calls on their own line), not by position
- Deduplication is exact string equality, first occurrence wins
- Non-import lines keep their relative order, duplicates included
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence

from spss_converter.config import HEADER_COMMENT
from spss_converter.core.ir import RSyntax

_IMPORT_RE = re.compile(r"^\s*(library|require|requireNamespace)\s*\(.*\)\s*;?\s*$")


def is_import_line(line: str) -> bool:
    """True if the line is a standalone library/require call."""
    return _IMPORT_RE.match(line) is not None


def assemble_rsyntax(outputs: Iterable[Sequence[str]]) -> RSyntax:
    """Combine per-block translator outputs into the final R script.

    Args:
        outputs: One line sequence per statement block, in block order.

    Returns:
        The assembled RSyntax.
    """
    flat = [HEADER_COMMENT]
    for block_lines in outputs:
        flat.extend(block_lines)
    flat = [line.replace("\\", "/") for line in flat]

    imports: List[str] = []
    seen = set()
    body: List[str] = []
    for line in flat:
        if is_import_line(line):
            if line not in seen:
                seen.add(line)
                imports.append(line)
        else:
            body.append(line)

    return RSyntax(imports + body)
