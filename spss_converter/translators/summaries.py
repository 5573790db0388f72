"""Translators for descriptive output procedures.

WHY: FREQUENCIES, DESCRIPTIVES, and CROSSTABS print tables in SPSS; the
R equivalents compute the same numbers as expressions the analyst can
print or keep. They never modify the working data frame.

RULES:
- FREQUENCIES: one count per variable
- DESCRIPTIVES: /STATISTICS defaults to MEAN STDDEV MIN MAX; unknown
  statistics raise ValueError
- CROSSTABS: one count per row-by-column pair in each /TABLES request
"""

from __future__ import annotations

from typing import List, Sequence

from spss_converter.config import DATASET_NAME
from spss_converter.core.ir import Dialect
from spss_converter.translators.base import BaseTranslator
from spss_converter.translators.syntax import (
    drop_words,
    library_lines,
    plain_names,
    statement_text,
    subcommand,
    subcommands,
    tokenize,
)

_STATISTICS = {
    "MEAN": ("mean", "mean({}, na.rm = TRUE)"),
    "STDDEV": ("sd", "sd({}, na.rm = TRUE)"),
    "MIN": ("min", "min({}, na.rm = TRUE)"),
    "MAX": ("max", "max({}, na.rm = TRUE)"),
    "SUM": ("sum", "sum({}, na.rm = TRUE)"),
    "VARIANCE": ("var", "var({}, na.rm = TRUE)"),
    "RANGE": ("range", "diff(range({}, na.rm = TRUE))"),
    "SEMEAN": ("se", "sd({0}, na.rm = TRUE) / sqrt(sum(!is.na({0})))"),
}
_DEFAULT_STATISTICS = ("MEAN", "STDDEV", "MIN", "MAX")


def _variables(text: str, command: str) -> List[str]:
    """Variables named by /VARIABLES=, or by the text before the first subcommand."""
    pairs = subcommands(text)
    names = subcommand(pairs, "VARIABLES") or subcommand(pairs, "")
    variables = plain_names(tokenize(names), command)
    if not variables:
        raise ValueError("{}: no variables in: {}".format(command, text))
    return variables


def _count(names: Sequence[str], dialect: Dialect) -> str:
    if dialect is Dialect.DATA_TABLE:
        by = names[0] if len(names) == 1 else ".({})".format(", ".join(names))
        return "{}[, .N, by = {}]".format(DATASET_NAME, by)
    return "{} %>% count({})".format(DATASET_NAME, ", ".join(names))


class FrequenciesTranslator(BaseTranslator):
    """FREQUENCIES VARIABLES=a b [/...]."""

    @property
    def command(self) -> str:
        return "frequencies"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        variables = _variables(drop_words(statement_text(lines), 1), "FREQUENCIES")
        return library_lines(dialect) + [_count([name], dialect) for name in variables]


class DescriptivesTranslator(BaseTranslator):
    """DESCRIPTIVES VARIABLES=a b [/STATISTICS=MEAN STDDEV ...]."""

    @property
    def command(self) -> str:
        return "descriptives"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        text = drop_words(statement_text(lines), 1)
        variables = _variables(text, "DESCRIPTIVES")
        requested = [s.upper() for s in tokenize(subcommand(subcommands(text), "STATISTICS"))]
        if not requested or "DEFAULT" in requested:
            requested = [s for s in requested if s != "DEFAULT"] + list(_DEFAULT_STATISTICS)

        statistics = []
        for name in requested:
            if name not in _STATISTICS:
                raise ValueError("DESCRIPTIVES: statistic {} is not supported".format(name))
            if name not in statistics:
                statistics.append(name)

        output = library_lines(dialect)
        for variable in variables:
            summaries = []
            for name in statistics:
                suffix, template = _STATISTICS[name]
                summaries.append("{}_{} = {}".format(variable, suffix, template.format(variable)))
            if dialect is Dialect.DATA_TABLE:
                output.append("{}[, .({})]".format(DATASET_NAME, ", ".join(summaries)))
            else:
                output.append("{} %>% summarise({})".format(DATASET_NAME, ", ".join(summaries)))
        return output


class CrosstabsTranslator(BaseTranslator):
    """CROSSTABS /TABLES=rows BY columns [/CELLS=...]."""

    @property
    def command(self) -> str:
        return "crosstabs"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        pairs = subcommands(drop_words(statement_text(lines), 1))
        requests = [value for name, value in pairs if name == "TABLES"]
        if not requests:
            requests = [value for name, value in pairs if name == ""]
        output = library_lines(dialect)
        for request in requests:
            tokens = tokenize(request)
            upper = [t.upper() for t in tokens]
            if "BY" not in upper:
                raise ValueError("CROSSTABS: table request '{}' has no BY".format(request))
            split = upper.index("BY")
            rows = plain_names(tokens[:split], "CROSSTABS")
            columns = plain_names(tokens[split + 1:], "CROSSTABS")
            for row in rows:
                for column in columns:
                    output.append(_count([row, column], dialect))
        if len(output) == len(library_lines(dialect)):
            raise ValueError("CROSSTABS: no /TABLES request in: {}".format(lines[0]))
        return output
