"""Abstract base translator.

WHY: The dispatcher routes every statement block to a translator by
command key. A common interface lets the pipeline, the DO REPEAT
expander, and the HTTP API treat any translator the same way.

HOW: BaseTranslator is an ABC with a ``command`` property (the canonical
key it handles) and a ``translate()`` method. ``name`` derives the
dispatch name by appending the fixed suffix, e.g. "recode_to_r".

RULES:
- translate() is a pure function of (lines, dialect, nosave); no state
  is kept between calls
- translate() returns a list of R lines; an empty list is valid (e.g.
  GET in pass-through mode)
- Unsupported argument forms raise ValueError, which aborts the run

To add a new SPSS command:
1. Subclass BaseTranslator in the matching module of translators/
2. Implement ``command`` and ``translate()``
3. Register it in TRANSLATORS in translators/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from spss_converter.config import DISPATCH_SUFFIX
from spss_converter.core.ir import Dialect


class BaseTranslator(ABC):
    """Abstract base for all SPSS command translators."""

    @property
    @abstractmethod
    def command(self) -> str:
        """Canonical command key, e.g. 'sortcases'."""

    @property
    def name(self) -> str:
        """Dispatch name, e.g. 'sortcases_to_r'."""
        return self.command + DISPATCH_SUFFIX

    @abstractmethod
    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        """Convert one statement block into R lines.

        Args:
            lines: The block's normalized SPSS lines, terminator included.
            dialect: Which R idiom to emit.
            nosave: Pass-through mode; suppress GET/SAVE style side effects.

        Returns:
            R source lines, import lines included.
        """
