"""Translators for commands that read, write, or join data files.

WHY: GET, GET DATA, SAVE, FILE HANDLE, and MATCH FILES move data between
disk and the working data frame. In pass-through mode the caller already
holds the data frame in R, so reads and writes of the working file are
suppressed.

HOW: SPSS .sav files go through haven (read_sav/write_sav); delimited
text through read.table (dplyr) or fread (data.table); spreadsheets
through readxl. data.table output converts freshly read frames with
setDT().

RULES:
- GET, GET DATA, and SAVE return [] when nosave is set
- GET DATA supports /TYPE=TXT, XLS, and XLSX; other types raise ValueError
- FILE HANDLE becomes setwd() on the /NAME path
- MATCH FILES: /FILE entries are full joins, /TABLE entries are left
  joins, "*" is the working data frame
"""

from __future__ import annotations

from typing import List, Sequence

from spss_converter.config import DATASET_NAME
from spss_converter.core.ir import Dialect
from spss_converter.translators.base import BaseTranslator
from spss_converter.translators.syntax import (
    drop_words,
    dplyr_select,
    first_quoted,
    is_number,
    plain_names,
    r_names,
    r_string,
    statement_text,
    subcommand,
    subcommands,
    tokenize,
    unquote,
)


def _keep_drop(
    pairs,
    dialect: Dialect,
    frame: str,
    command: str,
) -> str:
    """Apply /KEEP and /DROP subcommands to an R expression naming a frame."""
    keep = tokenize(subcommand(pairs, "KEEP"))
    drop = tokenize(subcommand(pairs, "DROP"))
    if dialect is Dialect.DATA_TABLE:
        if keep:
            frame = "{}[, {}]".format(frame, r_names(plain_names(keep, command)))
        if drop:
            frame = "{}[, !{}]".format(frame, r_names(plain_names(drop, command)))
        return frame
    if keep:
        frame = "{} %>% {}".format(frame, dplyr_select(keep))
    if drop:
        frame = "{} %>% {}".format(frame, dplyr_select(drop, negate=True))
    return frame


class GetTranslator(BaseTranslator):
    """GET FILE='data.sav' [/KEEP ...] [/DROP ...]."""

    @property
    def command(self) -> str:
        return "get"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        if nosave:
            return []
        pairs = subcommands(drop_words(statement_text(lines), 1))
        path = first_quoted(subcommand(pairs, "FILE")) or first_quoted(statement_text(lines))
        if not path:
            raise ValueError("GET: no FILE given in: {}".format(lines[0]))

        output = ["library(haven)"]
        if dialect is Dialect.DPLYR and (subcommand(pairs, "KEEP") or subcommand(pairs, "DROP")):
            output.append("library(dplyr)")
        if dialect is Dialect.DATA_TABLE:
            output.append("library(data.table)")
        output.append("{} <- read_sav({})".format(DATASET_NAME, r_string(path)))
        if dialect is Dialect.DATA_TABLE:
            output.append("setDT({})".format(DATASET_NAME))

        selected = _keep_drop(pairs, dialect, DATASET_NAME, "GET")
        if selected != DATASET_NAME:
            output.append("{} <- {}".format(DATASET_NAME, selected))
        return output


class GetDataTranslator(BaseTranslator):
    """GET DATA /TYPE=TXT|XLS|XLSX /FILE='...' [...]."""

    @property
    def command(self) -> str:
        return "getdata"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        if nosave:
            return []
        pairs = subcommands(drop_words(statement_text(lines), 2))
        file_type = subcommand(pairs, "TYPE", "TXT").upper()
        path = first_quoted(subcommand(pairs, "FILE"))
        if not path:
            raise ValueError("GET DATA: no /FILE given in: {}".format(lines[0]))

        if file_type == "TXT":
            return self._text(pairs, path, dialect)
        if file_type in ("XLS", "XLSX"):
            return self._excel(pairs, path, dialect)
        raise ValueError("GET DATA: /TYPE={} is not supported".format(file_type))

    def _text(self, pairs, path: str, dialect: Dialect) -> List[str]:
        delimiter = first_quoted(subcommand(pairs, "DELIMITERS")) or ","
        # Backslashes do not survive assembly, so tab is spelled by code point.
        sep = "intToUtf8(9)" if delimiter == "\\t" else r_string(delimiter)
        first_case = subcommand(pairs, "FIRSTCASE", "1")
        header = "TRUE" if is_number(first_case) and int(float(first_case)) > 1 else "FALSE"
        if dialect is Dialect.DATA_TABLE:
            return [
                "library(data.table)",
                "{} <- fread({}, sep = {}, header = {})".format(
                    DATASET_NAME, r_string(path), sep, header
                ),
            ]
        return [
            "{} <- read.table({}, sep = {}, header = {}, stringsAsFactors = FALSE)".format(
                DATASET_NAME, r_string(path), sep, header
            ),
        ]

    def _excel(self, pairs, path: str, dialect: Dialect) -> List[str]:
        sheet = subcommand(pairs, "SHEET")
        arguments = [r_string(path)]
        if sheet:
            sheet_tokens = tokenize(sheet)
            sheet_value = sheet_tokens[-1] if sheet_tokens else ""
            if sheet_value:
                name = unquote(sheet_value)
                arguments.append("sheet = {}".format(name if is_number(name) else r_string(name)))
        read_first = subcommand(pairs, "READNAMES", "ON").upper()
        arguments.append("col_names = {}".format("FALSE" if read_first == "OFF" else "TRUE"))

        output = ["library(readxl)"]
        if dialect is Dialect.DATA_TABLE:
            output.append("library(data.table)")
        output.append("{} <- read_excel({})".format(DATASET_NAME, ", ".join(arguments)))
        if dialect is Dialect.DATA_TABLE:
            output.append("setDT({})".format(DATASET_NAME))
        return output


class SaveTranslator(BaseTranslator):
    """SAVE OUTFILE='data.sav' [/KEEP ...] [/DROP ...]."""

    @property
    def command(self) -> str:
        return "save"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        if nosave:
            return []
        pairs = subcommands(drop_words(statement_text(lines), 1))
        path = first_quoted(subcommand(pairs, "OUTFILE"))
        if not path:
            raise ValueError("SAVE: no OUTFILE given in: {}".format(lines[0]))

        output = ["library(haven)"]
        frame = _keep_drop(pairs, dialect, DATASET_NAME, "SAVE")
        if dialect is Dialect.DPLYR and frame != DATASET_NAME:
            output.append("library(dplyr)")
        output.append("write_sav({}, {})".format(frame, r_string(path)))
        return output


class FileHandleTranslator(BaseTranslator):
    """FILE HANDLE alias /NAME='directory'."""

    @property
    def command(self) -> str:
        return "filehandle"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        pairs = subcommands(drop_words(statement_text(lines), 2))
        path = first_quoted(subcommand(pairs, "NAME"))
        if not path:
            raise ValueError("FILE HANDLE: no /NAME given in: {}".format(lines[0]))
        return ["setwd({})".format(r_string(path))]


class MatchFilesTranslator(BaseTranslator):
    """MATCH FILES /FILE=* /TABLE='lookup.sav' /BY key."""

    @property
    def command(self) -> str:
        return "matchfiles"

    def translate(self, lines: Sequence[str], dialect: Dialect, nosave: bool) -> List[str]:
        pairs = subcommands(drop_words(statement_text(lines), 2))
        sources = [(name, value) for name, value in pairs if name in ("FILE", "TABLE")]
        if not sources:
            raise ValueError("MATCH FILES: no /FILE or /TABLE given in: {}".format(lines[0]))
        keys = tokenize(subcommand(pairs, "BY"))

        output = library_for_join(dialect)
        frames = []
        for kind, value in sources:
            if value.strip() == "*":
                frames.append((kind, DATASET_NAME))
                continue
            frame = "{}{}".format(DATASET_NAME, len(frames) + 1)
            output.append("{} <- read_sav({})".format(frame, r_string(first_quoted(value) or value)))
            if dialect is Dialect.DATA_TABLE:
                output.append("setDT({})".format(frame))
            frames.append((kind, frame))

        _, base = frames[0]
        if base != DATASET_NAME:
            output.append("{} <- {}".format(DATASET_NAME, base))
        for kind, frame in frames[1:]:
            output.append(self._join(kind, frame, keys, dialect))
        return output

    def _join(self, kind: str, frame: str, keys: List[str], dialect: Dialect) -> str:
        if dialect is Dialect.DATA_TABLE:
            if not keys:
                return "{0} <- cbind({0}, {1})".format(DATASET_NAME, frame)
            flag = "all.x = TRUE" if kind == "TABLE" else "all = TRUE"
            return "{0} <- merge({0}, {1}, by = {2}, {3})".format(
                DATASET_NAME, frame, r_names(keys), flag
            )
        if not keys:
            return "{0} <- bind_cols({0}, {1})".format(DATASET_NAME, frame)
        verb = "left_join" if kind == "TABLE" else "full_join"
        return "{0} <- {0} %>% {1}({2}, by = {3})".format(
            DATASET_NAME, verb, frame, r_names(keys)
        )


def library_for_join(dialect: Dialect) -> List[str]:
    if dialect is Dialect.DATA_TABLE:
        return ["library(haven)", "library(data.table)"]
    return ["library(haven)", "library(dplyr)"]
