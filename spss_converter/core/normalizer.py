"""Line normalization ahead of statement segmentation.

WHY: SPSS scripts carry noise that would confuse boundary detection:
EXECUTE. statements that only force evaluation, indentation and tabs,
blank lines, and asterisk comments.

HOW: A single pass applies four rules in order and returns a new tuple.

RULES:
- "execute." is removed wherever it appears, any case
- Lines are trimmed; embedded tabs become single spaces
- Empty lines are dropped
- Lines starting with the comment marker are dropped
"""

from __future__ import annotations

import re
from typing import Iterable, Tuple

from spss_converter.config import COMMENT_MARKER, NOOP_KEYWORD

_NOOP_RE = re.compile(re.escape(NOOP_KEYWORD), re.IGNORECASE)


def normalize_lines(script: Iterable[str]) -> Tuple[str, ...]:
    """Strip boilerplate, whitespace, blank lines, and comments from a script."""
    normalized = []
    for raw in script:
        line = _NOOP_RE.sub("", raw.rstrip("\r\n"))
        line = line.strip().replace("\t", " ")
        if not line or line.startswith(COMMENT_MARKER):
            continue
        normalized.append(line)
    return tuple(normalized)
