"""Command classification: from a statement's first line to a canonical key.

WHY: SPSS commands can be one word (COMPUTE), two words (SORT CASES,
VALUE LABELS), or abbreviated (SORT, MISSING), and the command name is
followed by free-form arguments. Translators are registered under one
lowercase key per command, so every spelling must collapse onto the
same key before dispatch.

HOW: Two ordered rule tables, both plain data:
  COMMAND_RULES: first match wins; picks the raw key from the line
  SUFFIX_RULES:  applied to the raw key; expands abbreviated commands
The result is lower-cased. erase_file_handles() runs before
classification and removes FILE HANDLE aliases from the rest of the
script, returning a new line tuple.

RULES:
- Hyphens are stripped and the trailing terminator dropped before matching
- Phrase rules (GET DATA, FILE HANDLE, MATCH FILES, RENAME VARIABLES,
  DO REPEAT) are anchored at the start of the line, any case
- A line containing "=" or the word "by" keys on its first token only
- Any other multi-word line keys on its first two tokens, concatenated
- Keys ending in sort/missing/value become sortcases/missingvalues/valuelabels
- Alias erasure is literal text, not token-aware: an alias that is a
  substring of an unrelated identifier erases that substring too
- One path separator ("/" or "\\") directly after the alias is erased with
  it, so "mydir\\a.sav" becomes a path relative to the FILE HANDLE directory
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from spss_converter.config import STATEMENT_TERMINATOR


@dataclass(frozen=True)
class CommandRule:
    """One classification rule: a pattern and the key it produces.

    Attributes:
        description: What the rule recognizes.
        pattern: Matched (search) against the cleaned first line.
        key: Builds the raw key from the cleaned first line.
    """

    description: str
    pattern: re.Pattern
    key: Callable[[str], str]


def _fixed(key: str) -> Callable[[str], str]:
    return lambda line: key


def _first_token(line: str) -> str:
    return line.split()[0]


def _first_two_tokens(line: str) -> str:
    return "".join(line.split()[:2])


COMMAND_RULES: Tuple[CommandRule, ...] = (
    CommandRule(
        "GET DATA reads external text or spreadsheet files",
        re.compile(r"^get\s+data\b", re.IGNORECASE),
        _fixed("getdata"),
    ),
    CommandRule(
        "FILE HANDLE declares a directory alias",
        re.compile(r"^file\s+handle\b", re.IGNORECASE),
        _fixed("filehandle"),
    ),
    CommandRule(
        "MATCH FILES joins data files",
        re.compile(r"^match\s+files\b", re.IGNORECASE),
        _fixed("matchfiles"),
    ),
    CommandRule(
        "RENAME VARIABLES takes (old=new) pairs",
        re.compile(r"^rename\s+variables\b", re.IGNORECASE),
        _fixed("renamevariables"),
    ),
    CommandRule(
        "DO REPEAT opens a nested construct",
        re.compile(r"^do\s+repeat\b", re.IGNORECASE),
        _fixed("dorepeat"),
    ),
    CommandRule(
        "assignment or BY clause follows a one-word command",
        re.compile(r"=|\bby\b", re.IGNORECASE),
        _first_token,
    ),
    CommandRule(
        "DEFINE opens a macro definition",
        re.compile(r"^define\b", re.IGNORECASE),
        _fixed("define"),
    ),
    CommandRule(
        "RECODE value mappings",
        re.compile(r"^recode\b", re.IGNORECASE),
        _fixed("recode"),
    ),
    CommandRule(
        "two-word command name",
        re.compile(r"\s"),
        _first_two_tokens,
    ),
)

# Abbreviated command keys and their full form.
SUFFIX_RULES: Tuple[Tuple[str, str], ...] = (
    ("sort", "sortcases"),
    ("missing", "missingvalues"),
    ("value", "valuelabels"),
)

_FILE_HANDLE_RE = re.compile(r"^file\s+handle\s+([^/]+)", re.IGNORECASE)


def clean_command_line(line: str) -> str:
    """Strip hyphens, surrounding whitespace, and the trailing terminator."""
    cleaned = line.replace("-", "").strip()
    if cleaned.endswith(STATEMENT_TERMINATOR):
        cleaned = cleaned[: -len(STATEMENT_TERMINATOR)].rstrip()
    return cleaned


def classify_command(line: str) -> str:
    """Return the canonical lowercase command key for a statement's first line.

    Examples:
        "GET DATA /TYPE=TXT."           -> "getdata"
        "RECODE var (1=0) (ELSE=1)."    -> "recode"
        "SORT CASES BY id."             -> "sortcases"
        "VALUE LABELS sex 1 'M' 2 'F'." -> "valuelabels"
    """
    cleaned = clean_command_line(line)
    key = cleaned
    for rule in COMMAND_RULES:
        if rule.pattern.search(cleaned):
            key = rule.key(cleaned)
            break

    lowered = key.lower()
    for suffix, replacement in SUFFIX_RULES:
        if lowered.endswith(suffix):
            lowered = replacement
            break
    return lowered


def file_handle_alias(line: str) -> Optional[str]:
    """Return the alias declared by a FILE HANDLE line, or None.

    The alias is the text between "FILE HANDLE" and the next "/" (the
    /NAME subcommand), trimmed.
    """
    match = _FILE_HANDLE_RE.match(line.strip())
    if match is None:
        return None
    alias = clean_command_line(match.group(1))
    return alias or None


def erase_file_handles(
    lines: Sequence[str],
    spans: Sequence[Tuple[int, int]],
) -> Tuple[str, ...]:
    """Remove each FILE HANDLE alias from every line after its declaration.

    WHY: Paths in later statements reference the alias ("mydir/a.sav");
    the generated R script sets the working directory instead, so the
    alias text must disappear before those statements are classified
    and translated.

    HOW: Walks the statement spans in order. When a span's first line
    declares an alias, every line after the span's end is rewritten with
    the alias, and one path separator directly after it, removed. The
    declaring statement keeps its alias.

    Returns:
        A new tuple of lines; the input is not modified.
    """
    result: List[str] = list(lines)
    for start, end in spans:
        alias = file_handle_alias(result[start])
        if alias is None:
            continue
        alias_re = re.compile(re.escape(alias) + r"[\\/]?")
        for index in range(end + 1, len(result)):
            result[index] = alias_re.sub("", result[index])
    return tuple(result)
