"""Shared SPSS argument parsing and R rendering helpers.

WHY: Most translators need the same small pieces: the statement as one
string without its terminator, quote-aware splitting on "/" and
whitespace, SPSS value literals rendered as R literals, and SPSS
logical expressions rewritten with R operators.

HOW: Plain functions over strings. Quoted SPSS strings are always kept
intact; operators are only rewritten outside quotes.

RULES:
- statement_text() joins block lines with single spaces and drops the
  trailing terminator
- Numeric tokens render unchanged, quoted tokens render as R
  single-quoted strings, anything else renders as a bare name
- r_expression() maps EQ/NE/GT/LT/GE/LE/AND/OR/NOT, ~=, <>, ~, ** and
  single "=" to their R counterparts
"""

from __future__ import annotations

import re
from typing import Callable, List, Sequence, Tuple

from spss_converter.config import DATASET_NAME, STATEMENT_TERMINATOR
from spss_converter.core.ir import Dialect

_QUOTED_RE = re.compile(r"('[^']*'|\"[^\"]*\")")
_NUMBER_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")
_SUBCOMMAND_RE = re.compile(r"^([A-Za-z@#$][\w.@#$]*)\s*(=)?\s*(.*)$", re.DOTALL)

_WORD_OPERATORS: Tuple[Tuple[re.Pattern, str], ...] = tuple(
    (re.compile(r"\b{}\b".format(word), re.IGNORECASE), replacement)
    for word, replacement in (
        ("EQ", "=="),
        ("NE", "!="),
        ("GE", ">="),
        ("LE", "<="),
        ("GT", ">"),
        ("LT", "<"),
        ("AND", "&"),
        ("OR", "|"),
        ("NOT", "!"),
    )
)

_FUNCTIONS = {
    "SYSMIS": "is.na",
    "MISSING": "is.na",
    "ABS": "abs",
    "SQRT": "sqrt",
    "LN": "log",
    "LG10": "log10",
    "EXP": "exp",
    "RND": "round",
    "TRUNC": "trunc",
    "UPCASE": "toupper",
    "LOWER": "tolower",
    "CONCAT": "paste0",
    "LENGTH": "nchar",
}
_FUNCTION_RE = re.compile(
    r"\b({})\s*\(".format("|".join(_FUNCTIONS)), re.IGNORECASE
)


# ---------------------------------------------------------------------------
# Statement text
# ---------------------------------------------------------------------------


def statement_text(lines: Sequence[str]) -> str:
    """Join a block's lines into one string without the terminator."""
    text = " ".join(line.strip() for line in lines).strip()
    if text.endswith(STATEMENT_TERMINATOR):
        text = text[: -len(STATEMENT_TERMINATOR)].rstrip()
    return text


def drop_words(text: str, count: int) -> str:
    """Remove the first ``count`` whitespace-delimited words."""
    parts = text.strip().split(None, count)
    return parts[count] if len(parts) > count else ""


def split_unquoted(text: str, separator: str) -> List[str]:
    """Split on a single-character separator outside quotes; parts are stripped."""
    parts: List[str] = []
    current: List[str] = []
    quote = None
    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
            current.append(char)
        elif char == separator:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return parts


def tokenize(text: str) -> List[str]:
    """Split on whitespace and commas outside quotes, keeping quoted tokens whole."""
    tokens: List[str] = []
    for chunk in _QUOTED_RE.split(text):
        if not chunk:
            continue
        if _QUOTED_RE.fullmatch(chunk):
            tokens.append(chunk)
        else:
            tokens.extend(t for t in re.split(r"[\s,]+", chunk) if t)
    return tokens


def subcommands(text: str) -> List[Tuple[str, str]]:
    """Parse "/NAME=value" style subcommands into (UPPER NAME, value) pairs.

    Text before the first "/" is only named when it has the NAME=value
    form ("OUTFILE='a.sav'"); otherwise it is returned under the empty
    name. After a "/", the "=" is optional ("/BY id").
    """
    parts = split_unquoted(text, "/")
    result: List[Tuple[str, str]] = []
    for index, part in enumerate(parts):
        if not part:
            continue
        match = _SUBCOMMAND_RE.match(part)
        if match is None or (index == 0 and match.group(2) is None):
            result.append(("", part))
        else:
            result.append((match.group(1).upper(), match.group(3).strip()))
    return result


def subcommand(pairs: Sequence[Tuple[str, str]], name: str, default: str = "") -> str:
    """Return the value of the first subcommand called ``name``."""
    for key, value in pairs:
        if key == name:
            return value
    return default


def is_quoted(token: str) -> bool:
    return len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"')


def unquote(token: str) -> str:
    return token[1:-1] if is_quoted(token) else token


def first_quoted(text: str) -> str:
    """Return the contents of the first quoted string in ``text``, or ""."""
    match = _QUOTED_RE.search(text)
    return unquote(match.group(1)) if match else ""


def is_number(token: str) -> bool:
    return _NUMBER_RE.match(token) is not None


# ---------------------------------------------------------------------------
# R rendering
# ---------------------------------------------------------------------------


def r_string(value: str) -> str:
    # Backslashes are rewritten by the assembler, so quote-switch instead of escaping.
    if "'" in value:
        return '"{}"'.format(value)
    return "'{}'".format(value)


def r_value(token: str) -> str:
    """Render an SPSS literal (number, quoted string, or name) for R."""
    if is_quoted(token):
        return r_string(unquote(token))
    if token.upper() == "SYSMIS":
        return "NA"
    return token


def r_vector(items: Sequence[str]) -> str:
    return "c({})".format(", ".join(items))


def r_names(names: Sequence[str]) -> str:
    """Render column names as an R character vector."""
    return r_vector([r_string(name) for name in names])


def _map_unquoted(text: str, transform: Callable[[str], str]) -> str:
    chunks = _QUOTED_RE.split(text)
    return "".join(
        chunk if _QUOTED_RE.fullmatch(chunk) else transform(chunk)
        for chunk in chunks
    )


def _rewrite_operators(chunk: str) -> str:
    for pattern, replacement in _WORD_OPERATORS:
        chunk = pattern.sub(replacement, chunk)
    chunk = _FUNCTION_RE.sub(lambda m: _FUNCTIONS[m.group(1).upper()] + "(", chunk)
    chunk = chunk.replace("~=", "!=").replace("<>", "!=").replace("**", "^")
    chunk = re.sub(r"~(?!=)", "!", chunk)
    chunk = re.sub(r"(?<![<>!=])=(?!=)", "==", chunk)
    return chunk


def r_expression(expression: str) -> str:
    """Rewrite an SPSS logical or arithmetic expression with R operators."""
    return _map_unquoted(expression.strip(), _rewrite_operators)


def r_arithmetic(expression: str) -> str:
    """Like r_expression() but leaves single "=" alone (assignment context)."""
    def rewrite(chunk: str) -> str:
        chunk = _FUNCTION_RE.sub(lambda m: _FUNCTIONS[m.group(1).upper()] + "(", chunk)
        return chunk.replace("**", "^")

    return _map_unquoted(expression.strip(), rewrite)


# ---------------------------------------------------------------------------
# Dialect scaffolding
# ---------------------------------------------------------------------------


def library_lines(dialect: Dialect) -> List[str]:
    """Import lines needed by the chosen dialect."""
    if dialect is Dialect.DATA_TABLE:
        return ["library(data.table)"]
    return ["library(dplyr)"]


def dplyr_pipe(*verbs: str) -> str:
    """``x <- x %>% verb1 %>% verb2``"""
    return "{0} <- {0} %>% {1}".format(DATASET_NAME, " %>% ".join(verbs))


def dplyr_select(names: Sequence[str], negate: bool = False) -> str:
    """Render a dplyr select() argument list, turning "a TO c" into a:c."""
    items = to_ranges(names, ":")
    if negate:
        return "select(-c({}))".format(", ".join(items))
    return "select({})".format(", ".join(items))


def to_ranges(names: Sequence[str], joiner: str) -> List[str]:
    """Collapse SPSS "a TO c" variable ranges into "a<joiner>c"."""
    items: List[str] = []
    index = 0
    while index < len(names):
        name = names[index]
        if index + 2 < len(names) and names[index + 1].upper() == "TO":
            items.append("{}{}{}".format(name, joiner, names[index + 2]))
            index += 3
        else:
            items.append(name)
            index += 1
    return items


def plain_names(names: Sequence[str], command: str) -> List[str]:
    """Return variable names, rejecting "a TO c" ranges.

    data.table column assignments need explicit names, so a range
    cannot be rendered without the data file's dictionary.
    """
    if any(name.upper() == "TO" for name in names):
        raise ValueError(
            "{}: variable ranges ('TO') are not supported for data.table output".format(command)
        )
    return list(names)
