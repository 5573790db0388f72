"""Translators for variable metadata: missing values and labels.

WHY: SPSS keeps user-missing codes and value labels in the data
dictionary. R has no dictionary, so the closest faithful rendering is
to turn missing codes into NA and labelled codes into factors.

RULES:
- MISSING VALUES codes (including LO/HI THRU ranges) become NA; an empty
  code list "()" emits nothing for those variables
- VALUE LABELS / ADD VALUE LABELS become factor(levels, labels)
- VARIABLE LABELS set the "label" attribute, same output in both dialects
"""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from spss_converter.config import DATASET_NAME
from spss_converter.core.ir import Dialect
from spss_converter.translators.base import BaseTranslator
from spss_converter.translators.syntax import (
    dplyr_pipe,
    is_quoted,
    library_lines,
    plain_names,
    r_string,
    r_value,
    r_vector,
    split_unquoted,
    statement_text,
    tokenize,
    unquote,
)

_MISSING_GROUP_RE = re.compile(r"([^()]+)\(([^)]*)\)")
_VALUE_LABELS_PREFIX_RE = re.compile(r"^(add\s+)?value\s+labels\b", re.IGNORECASE)
_VARIABLE_LABELS_PREFIX_RE = re.compile(r"^variable\s+labels?\b", re.IGNORECASE)
_NAME_RE = re.compile(r"^[A-Za-z@#$][\w.@#$]*$")


class MissingValuesTranslator(BaseTranslator):
    """MISSING VALUES a b (9, 99) c (LO THRU 0)."""

    @property
    def command(self) -> str:
        return "missingvalues"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        text = re.sub(r"^missing\s+values\b", "", statement_text(lines), flags=re.IGNORECASE)
        groups = _MISSING_GROUP_RE.findall(text.replace("/", " "))
        if not groups:
            raise ValueError("MISSING VALUES: no (codes) given in: {}".format(lines[0]))

        output = library_lines(dialect)
        for names, codes in groups:
            condition_template = self._condition(codes)
            if condition_template is None:
                continue
            for name in plain_names(tokenize(names), "MISSING VALUES"):
                condition = condition_template.format(name)
                if dialect is Dialect.DATA_TABLE:
                    output.append("{}[{}, {} := NA]".format(DATASET_NAME, condition, name))
                else:
                    output.append(dplyr_pipe("mutate({0} = replace({0}, {1}, NA))".format(name, condition)))
        return output

    def _condition(self, codes: str):
        """Build a condition template with "{}" standing for the variable."""
        tokens = tokenize(codes)
        if not tokens:
            return None
        upper = [t.upper() for t in tokens]
        parts = []
        if "THRU" in upper:
            position = upper.index("THRU")
            low, high = tokens[position - 1], tokens[position + 1]
            bounds = []
            if low.upper() not in ("LO", "LOWEST"):
                bounds.append("{{}} >= {}".format(r_value(low)))
            if high.upper() not in ("HI", "HIGHEST"):
                bounds.append("{{}} <= {}".format(r_value(high)))
            parts.append("({})".format(" & ".join(bounds)) if bounds else "!is.na({})")
            tokens = tokens[:position - 1] + tokens[position + 2:]
        if tokens:
            values = [r_value(t) for t in tokens]
            if len(values) == 1:
                parts.append("{{}} == {}".format(values[0]))
            else:
                parts.append("{{}} %in% {}".format(r_vector(values)))
        return " | ".join(parts)


def _value_label_groups(text: str) -> List[Tuple[List[str], List[Tuple[str, str]]]]:
    """Parse "a b 1 'x' 2 'y' / c 1 'z'" into (names, [(value, label)]) groups."""
    groups = []
    for chunk in split_unquoted(text, "/"):
        tokens = tokenize(chunk)
        if not tokens:
            continue
        names = []
        while tokens and _NAME_RE.match(tokens[0]):
            names.append(tokens.pop(0))
        if not names or len(tokens) % 2:
            raise ValueError("VALUE LABELS: cannot pair values and labels in '{}'".format(chunk))
        pairs = [(tokens[i], tokens[i + 1]) for i in range(0, len(tokens), 2)]
        groups.append((names, pairs))
    return groups


class ValueLabelsTranslator(BaseTranslator):
    """VALUE LABELS vars value 'label' ... [/vars ...]."""

    @property
    def command(self) -> str:
        return "valuelabels"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        text = _VALUE_LABELS_PREFIX_RE.sub("", statement_text(lines)).strip()
        output = library_lines(dialect)
        for names, pairs in _value_label_groups(text):
            levels = r_vector([r_value(value) for value, _ in pairs])
            labels = r_vector([r_string(unquote(label)) for _, label in pairs])
            for name in names:
                factor = "factor({}, levels = {}, labels = {})".format(name, levels, labels)
                if dialect is Dialect.DATA_TABLE:
                    output.append("{}[, {} := {}]".format(DATASET_NAME, name, factor))
                else:
                    output.append(dplyr_pipe("mutate({} = {})".format(name, factor)))
        return output


class VariableLabelsTranslator(BaseTranslator):
    """VARIABLE LABELS a 'Label' [/] b 'Label'."""

    @property
    def command(self) -> str:
        return "variablelabels"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        text = _VARIABLE_LABELS_PREFIX_RE.sub("", statement_text(lines))
        tokens = [token for chunk in split_unquoted(text, "/") for token in tokenize(chunk)]
        output = []
        name = None
        for token in tokens:
            if is_quoted(token):
                if name is None:
                    raise ValueError("VARIABLE LABELS: label {} has no variable".format(token))
                output.append("attr({}${}, 'label') <- {}".format(DATASET_NAME, name, r_string(unquote(token))))
                name = None
            else:
                name = token
        return output
