"""End-to-end SPSS-to-R conversion pipeline.

WHY: Callers (CLI, HTTP API, library users) need one entry point that
takes raw SPSS syntax and returns an R script, without knowing about
normalization, segmentation, classification, or assembly.

HOW: raw lines -> normalize_lines -> segment_statements (spans, alias
erasure, classification, nested-construct merge) -> resolve every
block's translator -> run translators in block order ->
assemble_rsyntax -> return RSyntax or hand it to the sink.

RULES:
- Every block's translator is resolved before any translator runs, so
  an unknown command fails the run without partial output
- Translators are invoked exactly once per block, in block order
- Translator exceptions propagate unchanged
- Same script + same RunConfig always yields identical output
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from spss_converter.config import DEFAULT_DIALECT, DEFAULT_NOSAVE, resolve_dialect
from spss_converter.core.assembler import assemble_rsyntax
from spss_converter.core.errors import DispatchError
from spss_converter.core.ir import Dialect, RSyntax, RunConfig, StatementBlock
from spss_converter.core.normalizer import normalize_lines
from spss_converter.core.segmenter import segment_statements
from spss_converter.files import read_script, write_rscript
from spss_converter.translators import get_translator
from spss_converter.translators.base import BaseTranslator

logger = logging.getLogger(__name__)


def _resolve_translators(
    blocks: List[StatementBlock],
) -> List[Tuple[StatementBlock, BaseTranslator]]:
    resolved = []
    for block in blocks:
        translator_cls = get_translator(block.key)
        if translator_cls is None:
            raise DispatchError(block.key, block.first_line)
        resolved.append((block, translator_cls()))
    return resolved


def convert(script: Iterable[str], config: RunConfig) -> RSyntax:
    """Convert raw SPSS lines into an R script under one run configuration.

    Raises:
        StructuralError: Unterminated statement or unmatched nested construct.
        DispatchError: A statement's command has no translator.
    """
    lines = normalize_lines(script)
    blocks = segment_statements(lines)
    resolved = _resolve_translators(blocks)

    outputs = []
    for block, translator in resolved:
        logger.debug(
            "Dispatching lines %d-%d to %s", block.start + 1, block.end + 1, translator.name
        )
        outputs.append(translator.translate(block.lines, config.dialect, config.nosave))

    rsyntax = assemble_rsyntax(outputs)
    logger.debug("Converted %d statements into %d R lines", len(blocks), len(rsyntax))
    return rsyntax


def translate(
    script: Iterable[str],
    dialect: str | Dialect = DEFAULT_DIALECT,
    write_output: bool = False,
    output_path: Optional[str | Path] = None,
    nosave: bool = DEFAULT_NOSAVE,
) -> Optional[RSyntax]:
    """Translate SPSS syntax lines into R.

    Args:
        script: Raw SPSS syntax lines.
        dialect: Output idiom, a Dialect or a name such as "dplyr" or
                 "data.table".
        write_output: Write the script to disk instead of returning it.
        output_path: File or directory for the script (see
                     files.write_rscript); None means the current directory.
        nosave: Pass-through mode; GET/SAVE style commands are suppressed.

    Returns:
        The RSyntax, or None when write_output is set.
    """
    config = RunConfig(dialect=resolve_dialect(dialect), nosave=nosave)
    rsyntax = convert(script, config)
    if write_output:
        write_rscript(rsyntax, output_path)
        return None
    return rsyntax


def spss_to_r(
    file: str | Path,
    dplyr: bool = True,
    write_rscript: bool = False,
    file_path: Optional[str | Path] = None,
    nosave: bool = False,
) -> Optional[RSyntax]:
    """Translate an SPSS syntax file into R.

    Args:
        file: Path of the .sps (or any text) file.
        dplyr: True for dplyr output, False for data.table output.
        write_rscript: Write the script to disk instead of returning it.
        file_path: Directory or file to write; None means the current
                   directory.
        nosave: Pass-through mode; GET/SAVE style commands are suppressed.
    """
    dialect = Dialect.DPLYR if dplyr else Dialect.DATA_TABLE
    return translate(
        read_script(file),
        dialect=dialect,
        write_output=write_rscript,
        output_path=file_path,
        nosave=nosave,
    )
