"""Exception taxonomy for the conversion pipeline.

WHY: Every failure aborts the whole run; generating R code that is
silently wrong is worse than generating none. Callers (CLI, HTTP API)
still need typed exceptions to tell a bad script apart from an I/O or
programming error.

RULES:
- ConversionError is the common base; catch it to handle any bad script
- StructuralError: unmatched nested construct, empty block, or a trailing
  statement with no terminator
- DispatchError: no translator registered for a command key; the
  message always quotes the block's first line
- Translator exceptions are never wrapped
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for SPSS-to-R conversion failures."""


class StructuralError(ConversionError):
    """The script cannot be split into well-formed statement blocks."""


class DispatchError(ConversionError):
    """A classified command has no registered translator.

    Attributes:
        key: The canonical command key that failed to resolve.
        source_line: The raw first line of the offending block.
    """

    def __init__(self, key: str, source_line: str) -> None:
        self.key = key
        self.source_line = source_line
        super().__init__(
            "Unrecognized SPSS command '{}' in statement: {}".format(key, source_line)
        )
