"""Translators for nested constructs: DO REPEAT and DEFINE macros.

WHY: Both constructs arrive as one merged block because their inner
statements carry terminators of their own. DO REPEAT is a textual loop:
SPSS substitutes each stand-in variable and runs the inner statements
once per position. DEFINE macros have no R counterpart.

HOW: DoRepeatTranslator re-segments the block, reads the stand-in lists
from the DO REPEAT statement, and for each position substitutes the
stand-ins (whole words, any case) into the inner statements. Each
substituted statement is classified and dispatched through the same
classifier and translator registry as top-level statements.

RULES:
- All stand-in lists must have the same length
- Stand-ins are substituted in one pass; substituted values are not rescanned
- "a TO c" ranges in stand-in lists are not supported (ValueError)
- Inner statements with no registered translator raise DispatchError
- DEFINE blocks are emitted as R comments, line for line
"""

from __future__ import annotations

import re
from typing import Dict, List, Sequence

from spss_converter.core.classifier import classify_command
from spss_converter.core.errors import DispatchError
from spss_converter.core.ir import Dialect
from spss_converter.core.segmenter import find_statement_spans
from spss_converter.translators.base import BaseTranslator
from spss_converter.translators.syntax import (
    drop_words,
    split_unquoted,
    statement_text,
    tokenize,
)


class DoRepeatTranslator(BaseTranslator):
    """DO REPEAT v = a b c [/w = 1 2 3]. <statements> END REPEAT."""

    @property
    def command(self) -> str:
        return "dorepeat"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        from spss_converter.translators import get_translator

        spans = find_statement_spans(lines)
        header_start, header_end = spans[0]
        stand_ins = self._stand_ins(statement_text(lines[header_start:header_end + 1]))
        inner = [tuple(lines[start:end + 1]) for start, end in spans[1:-1]]
        by_name = {name.lower(): values for name, values in stand_ins.items()}
        alternation = "|".join(re.escape(name) for name in sorted(stand_ins, key=len, reverse=True))
        pattern = re.compile(r"(?<![\w.@#$])({})(?![\w@#$])".format(alternation), re.IGNORECASE)

        output: List[str] = []
        count = len(next(iter(stand_ins.values())))
        for position in range(count):
            for statement in inner:
                substituted = [
                    self._substitute(line, pattern, by_name, position)
                    for line in statement
                ]
                key = classify_command(substituted[0])
                translator_cls = get_translator(key)
                if translator_cls is None:
                    raise DispatchError(key, substituted[0])
                output.extend(translator_cls().translate(substituted, dialect, nosave))
        return output

    def _stand_ins(self, header: str) -> Dict[str, List[str]]:
        stand_ins: Dict[str, List[str]] = {}
        for part in split_unquoted(drop_words(header, 2), "/"):
            if not part:
                continue
            name, separator, values = part.partition("=")
            tokens = tokenize(values)
            if not separator or not name.strip() or not tokens:
                raise ValueError("DO REPEAT: cannot parse stand-in '{}'".format(part))
            if any(t.upper() == "TO" for t in tokens):
                raise ValueError("DO REPEAT: variable ranges ('TO') are not supported in '{}'".format(part))
            stand_ins[name.strip()] = tokens

        if not stand_ins:
            raise ValueError("DO REPEAT: no stand-in variables in: {}".format(header))
        lengths = {len(values) for values in stand_ins.values()}
        if len(lengths) != 1:
            raise ValueError("DO REPEAT: stand-in lists differ in length in: {}".format(header))
        return stand_ins

    def _substitute(self, line, pattern, by_name, position) -> str:
        return pattern.sub(lambda m: by_name[m.group(1).lower()][position], line)


class DefineTranslator(BaseTranslator):
    """DEFINE !name (...) <body> !ENDDEFINE."""

    @property
    def command(self) -> str:
        return "define"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        words = lines[0].split()
        name = words[1] if len(words) > 1 else "?"
        output = ["# SPSS macro {} has no R translation; original definition:".format(name)]
        output.extend("# {}".format(line) for line in lines)
        return output
