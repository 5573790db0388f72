"""Statement segmentation: normalized lines to classified statement blocks.

WHY: SPSS statements may span several lines and are only delimited by a
trailing terminator. Some constructs (DO REPEAT ... END REPEAT, DEFINE
... !ENDDEFINE) contain terminated statements of their own that must
reach their translator as one unit.

HOW: Three steps:
  1. find_statement_spans() marks every line ending in the terminator;
     each span runs from the line after the previous marker to the
     next marker, inclusive.
  2. FILE HANDLE aliases are erased from the lines after their
     declaration (classifier.erase_file_handles).
  3. Every span is classified, then begin/end pairs listed in
     NESTED_CONSTRUCTS are merged into a single block covering the
     begin statement through the nearest matching end statement.

RULES:
- Spans are ordered, non-overlapping, and cover every normalized line
- Lines after the last terminator raise StructuralError
- A begin statement without a later matching end raises StructuralError
- DEFINE also ends at a statement whose last line ends in "!ENDDEFINE"
- Inner statements of a merged construct never appear as blocks
- An empty script yields an empty block list
"""

from __future__ import annotations

import logging
import re
from typing import List, Sequence, Tuple

from spss_converter.config import STATEMENT_TERMINATOR
from spss_converter.core.classifier import (
    classify_command,
    clean_command_line,
    erase_file_handles,
)
from spss_converter.core.errors import StructuralError
from spss_converter.core.ir import StatementBlock

logger = logging.getLogger(__name__)

# Begin key -> end key for constructs whose inner statements are opaque.
NESTED_CONSTRUCTS: dict[str, str] = {
    "dorepeat": "endrepeat",
    "define": "!enddefine",
}

# Constructs whose end marker may also trail the last body statement
# ("FREQUENCIES VARIABLES=!1 !ENDDEFINE.").
INLINE_END_MARKERS: dict[str, re.Pattern] = {
    "define": re.compile(r"(?:^|\s)!enddefine$", re.IGNORECASE),
}


def find_statement_spans(lines: Sequence[str]) -> List[Tuple[int, int]]:
    """Partition normalized lines into inclusive (start, end) statement spans."""
    spans: List[Tuple[int, int]] = []
    start = 0
    for index, line in enumerate(lines):
        if line.rstrip().endswith(STATEMENT_TERMINATOR):
            spans.append((start, index))
            start = index + 1

    if start < len(lines):
        raise StructuralError(
            "Statement is missing its terminating '{}': {}".format(
                STATEMENT_TERMINATOR, lines[start]
            )
        )
    return spans


def _make_block(
    lines: Sequence[str],
    start: int,
    end: int,
    key: str,
) -> StatementBlock:
    if end < start:
        raise StructuralError(
            "Empty statement block at line {}".format(start + 1)
        )
    return StatementBlock(start=start, end=end, lines=tuple(lines[start:end + 1]), key=key)


def merge_nested_constructs(
    lines: Sequence[str],
    spans: Sequence[Tuple[int, int]],
    keys: Sequence[str],
) -> List[StatementBlock]:
    """Build blocks from classified spans, collapsing nested constructs.

    Args:
        lines: Normalized (alias-erased) script lines.
        spans: Statement spans from find_statement_spans().
        keys: One tentative command key per span.

    Returns:
        Ordered StatementBlocks; each nested construct is one block keyed
        by its begin statement.
    """
    blocks: List[StatementBlock] = []
    i = 0
    while i < len(spans):
        start, end = spans[i]
        key = keys[i]
        end_key = NESTED_CONSTRUCTS.get(key)
        if end_key is not None:
            inline_end = INLINE_END_MARKERS.get(key)
            for j in range(i, len(spans)):
                closes = j > i and keys[j] == end_key
                if inline_end is not None and inline_end.search(clean_command_line(lines[spans[j][1]])):
                    closes = True
                if closes:
                    logger.debug(
                        "Merged %s construct spanning statements %d-%d", key, i + 1, j + 1
                    )
                    blocks.append(_make_block(lines, start, spans[j][1], key))
                    i = j + 1
                    break
            else:
                raise StructuralError(
                    "'{}' has no matching '{}': {}".format(key, end_key, lines[start])
                )
            continue

        blocks.append(_make_block(lines, start, end, key))
        i += 1
    return blocks


def segment_statements(lines: Sequence[str]) -> List[StatementBlock]:
    """Split normalized lines into classified statement blocks.

    Returns:
        Always a list of StatementBlock (possibly empty), each with a
        non-empty line tuple and a canonical command key.
    """
    spans = find_statement_spans(lines)
    erased = erase_file_handles(lines, spans)
    keys = [classify_command(erased[start]) for start, _ in spans]
    blocks = merge_nested_constructs(erased, spans, keys)
    logger.debug("Segmented %d lines into %d statement blocks", len(lines), len(blocks))
    return blocks
