"""Data model shared by the segmenter, classifier, dispatcher, and assembler.

WHY: SPSS syntax has no formal grammar, so the converter works on plain
line sequences. The pipeline stages still need a common vocabulary:
which slice of lines forms a statement, which command it is, which R
idiom to emit, and what the finished script looks like.

HOW: Four small immutable types:
  Dialect:        which R idiom the translators emit (dplyr or data.table)
  RunConfig:      the two flags handed unchanged to every translator call
  StatementBlock: one logical statement (or merged nested construct)
  RSyntax:        the assembled, tagged R script returned to callers

RULES:
- StatementBlock.start/end are inclusive indices into the normalized lines
- StatementBlock.lines is never empty
- RSyntax behaves like a read-only sequence of strings
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, Tuple


class Dialect(str, enum.Enum):
    """Output idiom selector for the generated R code."""

    DPLYR = "dplyr"
    DATA_TABLE = "data.table"


@dataclass(frozen=True)
class RunConfig:
    """Run-wide flags, set once per translation and never mutated.

    RULES:
    - dialect: which R idiom the translators emit
    - nosave: pass-through mode; GET/SAVE style commands are suppressed so
      the caller keeps working on the in-memory data frame directly
    """

    dialect: Dialect = Dialect.DPLYR
    nosave: bool = False


@dataclass(frozen=True)
class StatementBlock:
    """A contiguous run of normalized lines forming one SPSS statement.

    WHY: Translators receive whole statements, not lines. Nested
    constructs (DO REPEAT ... END REPEAT) arrive as one block so their
    inner statements are never dispatched on their own.

    RULES:
    - start/end: inclusive indices into the normalized line sequence
    - lines: the block's text, len(lines) == end - start + 1
    - key: canonical lowercase command key, e.g. "sortcases"
    """

    start: int
    end: int
    lines: Tuple[str, ...]
    key: str = ""

    @property
    def first_line(self) -> str:
        return self.lines[0]


class RSyntax:
    """The generated R script, one string per line.

    Tagged wrapper around a tuple so callers can tell a converted script
    apart from an arbitrary list of strings.
    """

    __slots__ = ("_lines",)

    def __init__(self, lines) -> None:
        self._lines = tuple(lines)

    @property
    def lines(self) -> Tuple[str, ...]:
        return self._lines

    def to_text(self) -> str:
        """Join the lines into a newline-terminated script."""
        return "".join(line + "\n" for line in self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index):
        return self._lines[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RSyntax):
            return self._lines == other._lines
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._lines)

    def __repr__(self) -> str:
        return "RSyntax({} lines)".format(len(self._lines))
