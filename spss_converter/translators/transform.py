"""Translators for commands that change the working data frame.

WHY: COMPUTE, IF, RECODE, SELECT IF, SORT CASES, RENAME VARIABLES,
DELETE VARIABLES, and AGGREGATE make up the bulk of legacy SPSS
scripts. Each has a direct dplyr verb and a data.table idiom.

HOW: Arguments are parsed from the joined statement text; expressions
are rewritten by syntax.r_expression(). dplyr output pipes the working
frame through a verb and reassigns it; data.table output modifies it by
reference where the idiom allows.

RULES:
- RECODE without ELSE keeps unmatched values when recoding in place and
  leaves them missing when recoding INTO a new variable
- data.table RECODE uses fcase(default = ...) for literal fallbacks and a
  final "TRUE, column" arm when unmatched values keep the source column
- SORT CASES direction markers (A)/(D) apply to every variable listed
  before them since the previous marker
- AGGREGATE /OUTFILE=* replaces the frame, MODE=ADDVARIABLES adds the
  aggregates as columns, a file OUTFILE writes them (skipped in
  pass-through mode)
"""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from spss_converter.config import DATASET_NAME
from spss_converter.core.ir import Dialect
from spss_converter.translators.base import BaseTranslator
from spss_converter.translators.syntax import (
    drop_words,
    dplyr_pipe,
    dplyr_select,
    first_quoted,
    is_number,
    is_quoted,
    library_lines,
    plain_names,
    r_arithmetic,
    r_expression,
    r_names,
    r_string,
    r_value,
    r_vector,
    split_unquoted,
    statement_text,
    subcommand,
    subcommands,
    tokenize,
)

_IF_RE = re.compile(r"^(?P<condition>.*)\s+(?P<target>[A-Za-z@#$][\w.@#$]*)\s*=\s*(?P<expression>[^=].*)$")
_PAREN_GROUP_RE = re.compile(r"\(([^()]*)\)")
_SORT_TOKEN_RE = re.compile(r"\(\s*([AD])\s*\)|([^\s()]+)", re.IGNORECASE)
_AGGREGATE_RE = re.compile(r"^(?P<targets>[^=]+?)\s*=\s*(?P<function>\w+)\s*(?:\((?P<arguments>.*)\))?$")


def _split_assignment(text: str, command: str) -> Tuple[str, str]:
    target, separator, expression = text.partition("=")
    if not separator or not target.strip() or not expression.strip():
        raise ValueError("{}: expected 'target = expression' in: {}".format(command, text))
    return target.strip(), expression.strip()


def _is_scalar(value: str) -> bool:
    """True for an R literal (number, string, NA) rather than a column name."""
    return value == "NA" or is_number(value) or is_quoted(value)


class ComputeTranslator(BaseTranslator):
    """COMPUTE target = expression."""

    @property
    def command(self) -> str:
        return "compute"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        target, expression = _split_assignment(
            drop_words(statement_text(lines), 1), "COMPUTE"
        )
        expression = r_arithmetic(expression)
        if dialect is Dialect.DATA_TABLE:
            return library_lines(dialect) + [
                "{}[, {} := {}]".format(DATASET_NAME, target, expression)
            ]
        return library_lines(dialect) + [
            dplyr_pipe("mutate({} = {})".format(target, expression))
        ]


class IfTranslator(BaseTranslator):
    """IF (condition) target = expression."""

    @property
    def command(self) -> str:
        return "if"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        text = drop_words(statement_text(lines), 1)
        condition, target, expression = self._parse(text)
        if dialect is Dialect.DATA_TABLE:
            return library_lines(dialect) + [
                "{}[{}, {} := {}]".format(DATASET_NAME, condition, target, expression)
            ]
        return library_lines(dialect) + [
            dplyr_pipe("mutate({0} = ifelse({1}, {2}, {0}))".format(target, condition, expression))
        ]

    def _parse(self, text: str) -> Tuple[str, str, str]:
        if text.startswith("("):
            depth = 0
            for index, char in enumerate(text):
                depth += char == "("
                depth -= char == ")"
                if depth == 0:
                    condition = text[1:index]
                    target, expression = _split_assignment(text[index + 1:], "IF")
                    return r_expression(condition), target, r_arithmetic(expression)
        match = _IF_RE.match(text)
        if match is None or not match.group("condition"):
            raise ValueError("IF: cannot parse condition and assignment in: {}".format(text))
        return (
            r_expression(match.group("condition")),
            match.group("target"),
            r_arithmetic(match.group("expression")),
        )


class SelectIfTranslator(BaseTranslator):
    """SELECT IF (condition)."""

    @property
    def command(self) -> str:
        return "selectif"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        condition = r_expression(drop_words(statement_text(lines), 2))
        if not condition:
            raise ValueError("SELECT IF: missing condition in: {}".format(lines[0]))
        if dialect is Dialect.DATA_TABLE:
            return library_lines(dialect) + [
                "{0} <- {0}[{1}]".format(DATASET_NAME, condition)
            ]
        return library_lines(dialect) + [dplyr_pipe("filter({})".format(condition))]


class SelectTranslator(SelectIfTranslator):
    """SELECT IF with an "=" comparison, which classifies on its first word."""

    @property
    def command(self) -> str:
        return "select"


class RecodeTranslator(BaseTranslator):
    """RECODE vars (old=new) ... [INTO targets] [/vars (...) ...]."""

    @property
    def command(self) -> str:
        return "recode"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        output = library_lines(dialect)
        for group in split_unquoted(drop_words(statement_text(lines), 1), "/"):
            if group:
                output.extend(self._recode_group(group, dialect))
        return output

    def _recode_group(self, group: str, dialect: Dialect) -> List[str]:
        first_paren = group.find("(")
        last_paren = group.rfind(")")
        if first_paren < 0 or last_paren < 0:
            raise ValueError("RECODE: no value mappings in: {}".format(group))
        sources = tokenize(group[:first_paren])
        rules = [self._parse_rule(r) for r in _PAREN_GROUP_RE.findall(group[first_paren:last_paren + 1])]
        tail = tokenize(group[last_paren + 1:])
        targets = tail[1:] if tail and tail[0].upper() == "INTO" else sources
        if len(targets) != len(sources):
            raise ValueError("RECODE: INTO lists {} targets for {} variables".format(len(targets), len(sources)))

        output = []
        for source, target in zip(sources, targets):
            in_place = source == target
            output.append(self._render(source, target, rules, in_place, dialect))
        return output

    def _parse_rule(self, rule: str) -> Tuple[str, str]:
        old, separator, new = rule.rpartition("=")
        if not separator:
            raise ValueError("RECODE: mapping '({})' has no '='".format(rule))
        return old.strip(), new.strip()

    def _condition(self, variable: str, old: str) -> str:
        tokens = tokenize(old)
        upper = [t.upper() for t in tokens]
        if upper == ["ELSE"]:
            return "TRUE"
        if upper in (["MISSING"], ["SYSMIS"]):
            return "is.na({})".format(variable)
        if "THRU" in upper:
            position = upper.index("THRU")
            low, high = tokens[position - 1], tokens[position + 1]
            parts = []
            if low.upper() not in ("LO", "LOWEST"):
                parts.append("{} >= {}".format(variable, r_value(low)))
            if high.upper() not in ("HI", "HIGHEST"):
                parts.append("{} <= {}".format(variable, r_value(high)))
            return " & ".join(parts) or "!is.na({})".format(variable)
        values = [r_value(t) for t in tokens]
        if len(values) == 1:
            return "{} == {}".format(variable, values[0])
        return "{} %in% {}".format(variable, r_vector(values))

    def _render(
        self,
        source: str,
        target: str,
        rules: List[Tuple[str, str]],
        in_place: bool,
        dialect: Dialect,
    ) -> str:
        cases = []
        default = source if in_place else "NA"
        for old, new in rules:
            value = source if new.upper() == "COPY" else r_value(new)
            condition = self._condition(source, old)
            if condition == "TRUE":
                default = value
            else:
                cases.append((condition, value))

        if dialect is Dialect.DATA_TABLE:
            arguments = ["{}, {}".format(c, v) for c, v in cases]
            if _is_scalar(default):
                arguments.append("default = {}".format(default))
            else:
                # fcase() only takes a length-1 default; a column falls through a TRUE arm.
                arguments.append("TRUE, {}".format(default))
            return "{}[, {} := fcase({})]".format(DATASET_NAME, target, ", ".join(arguments))
        arms = ["{} ~ {}".format(c, v) for c, v in cases]
        arms.append("TRUE ~ {}".format(default))
        return dplyr_pipe("mutate({} = case_when({}))".format(target, ", ".join(arms)))


class SortCasesTranslator(BaseTranslator):
    """SORT CASES [BY] var [(A|D)] ..."""

    @property
    def command(self) -> str:
        return "sortcases"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        text = statement_text(lines)
        words = text.split()
        skip = 2 if len(words) > 1 and words[1].upper() == "CASES" else 1
        text = drop_words(text, skip)
        if text.upper().startswith("BY "):
            text = text[3:]

        ordering: List[Tuple[str, bool]] = []
        pending: List[str] = []
        for direction, name in _SORT_TOKEN_RE.findall(text):
            if name:
                pending.append(name)
                continue
            descending = direction.upper() == "D"
            ordering.extend((p, descending) for p in pending)
            pending = []
        ordering.extend((p, False) for p in pending)
        if not ordering:
            raise ValueError("SORT CASES: no sort variables in: {}".format(lines[0]))

        if dialect is Dialect.DATA_TABLE:
            keys = ["-" + n if d else n for n, d in ordering]
            return library_lines(dialect) + ["setorder({}, {})".format(DATASET_NAME, ", ".join(keys))]
        keys = ["desc({})".format(n) if d else n for n, d in ordering]
        return library_lines(dialect) + [dplyr_pipe("arrange({})".format(", ".join(keys)))]


class RenameVariablesTranslator(BaseTranslator):
    """RENAME VARIABLES (old=new) (a b = c d)."""

    @property
    def command(self) -> str:
        return "renamevariables"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        text = drop_words(statement_text(lines), 2)
        groups = _PAREN_GROUP_RE.findall(text) or [text]
        old_names: List[str] = []
        new_names: List[str] = []
        for group in groups:
            old, separator, new = group.partition("=")
            old_tokens, new_tokens = tokenize(old), tokenize(new)
            if not separator or len(old_tokens) != len(new_tokens) or not old_tokens:
                raise ValueError("RENAME VARIABLES: cannot pair names in '({})'".format(group))
            old_names.extend(old_tokens)
            new_names.extend(new_tokens)

        if dialect is Dialect.DATA_TABLE:
            return library_lines(dialect) + [
                "setnames({}, {}, {})".format(DATASET_NAME, r_names(old_names), r_names(new_names))
            ]
        pairs = ["{} = {}".format(n, o) for o, n in zip(old_names, new_names)]
        return library_lines(dialect) + [dplyr_pipe("rename({})".format(", ".join(pairs)))]


class DeleteVariablesTranslator(BaseTranslator):
    """DELETE VARIABLES a b c."""

    @property
    def command(self) -> str:
        return "deletevariables"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        names = tokenize(drop_words(statement_text(lines), 2))
        if not names:
            raise ValueError("DELETE VARIABLES: no variables in: {}".format(lines[0]))
        if dialect is Dialect.DATA_TABLE:
            names = plain_names(names, "DELETE VARIABLES")
            return library_lines(dialect) + [
                "{}[, {} := NULL]".format(DATASET_NAME, r_names(names))
            ]
        return library_lines(dialect) + [dplyr_pipe(dplyr_select(names, negate=True))]


_AGGREGATE_FUNCTIONS = {
    "MEAN": "mean({}, na.rm = TRUE)",
    "SUM": "sum({}, na.rm = TRUE)",
    "MIN": "min({}, na.rm = TRUE)",
    "MAX": "max({}, na.rm = TRUE)",
    "SD": "sd({}, na.rm = TRUE)",
    "MEDIAN": "median({}, na.rm = TRUE)",
    "FIRST": "first({})",
    "LAST": "last({})",
    "NU": "sum(!is.na({}))",
}
_AGGREGATE_OPTIONS = frozenset({"OUTFILE", "BREAK", "MISSING", "PRESORTED", "DOCUMENT", "MODE"})


class AggregateTranslator(BaseTranslator):
    """AGGREGATE /OUTFILE=* [MODE=ADDVARIABLES] /BREAK=vars /new = FUNC(var) ..."""

    @property
    def command(self) -> str:
        return "aggregate"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        text = drop_words(statement_text(lines), 1)
        pairs = subcommands(text)
        outfile = subcommand(pairs, "OUTFILE", "*")
        add_variables = "ADDVARIABLES" in outfile.upper()
        path = first_quoted(outfile)
        breaks = plain_names(tokenize(subcommand(pairs, "BREAK")), "AGGREGATE")

        summaries: List[str] = []
        for part in split_unquoted(text, "/"):
            keyword = re.split(r"[\s=]", part, maxsplit=1)[0].upper()
            if not part or keyword in _AGGREGATE_OPTIONS:
                continue
            summaries.append(self._summary(part, dialect))
        if not summaries:
            raise ValueError("AGGREGATE: no aggregate functions in: {}".format(lines[0]))

        frame = "aggregated" if path and not add_variables else DATASET_NAME
        output = library_lines(dialect)
        if dialect is Dialect.DATA_TABLE:
            by = ", by = .({})".format(", ".join(breaks)) if breaks else ""
            if add_variables:
                output.append("{}[, `:=`({}){}]".format(DATASET_NAME, ", ".join(summaries), by))
            else:
                output.append("{} <- {}[, .({}){}]".format(frame, DATASET_NAME, ", ".join(summaries), by))
        else:
            verbs = ["group_by({})".format(", ".join(breaks))] if breaks else []
            verbs.append("{}({})".format("mutate" if add_variables else "summarise", ", ".join(summaries)))
            if breaks:
                verbs.append("ungroup()")
            output.append("{} <- {} %>% {}".format(frame, DATASET_NAME, " %>% ".join(verbs)))

        if frame != DATASET_NAME and not nosave:
            output.extend(["library(haven)", "write_sav({}, {})".format(frame, r_string(path))])
        return output

    def _summary(self, text: str, dialect: Dialect) -> str:
        match = _AGGREGATE_RE.match(text.strip())
        if match is None:
            raise ValueError("AGGREGATE: cannot parse '{}'".format(text))
        target = match.group("targets").strip()
        function = match.group("function").upper()
        arguments = [a for a in tokenize(match.group("arguments") or "") if not is_quoted(a)]
        if function == "N":
            return "{} = {}".format(target, ".N" if dialect is Dialect.DATA_TABLE else "n()")
        template = _AGGREGATE_FUNCTIONS.get(function)
        if template is None or len(arguments) != 1:
            raise ValueError("AGGREGATE: function {} is not supported in '{}'".format(function, text))
        if dialect is Dialect.DATA_TABLE and function in ("FIRST", "LAST"):
            template = "{}[1]" if function == "FIRST" else "{}[.N]"
        return "{} = {}".format(target, template.format(arguments[0]))
