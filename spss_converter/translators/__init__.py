"""SPSS command translator registry: the dispatch table.

WHY: The pipeline, the DO REPEAT expander, the CLI, and the HTTP API all
need one lookup from a canonical command key to its translator. A
central dict registered at import time makes unknown commands
detectable before any translator runs.

HOW: TRANSLATORS maps dispatch names ("<key>_to_r") to translator
*classes* (not instances). get_translator() appends the suffix to a
canonical key and looks it up. Callers instantiate as needed:
``translator = get_translator("recode")()``.

RULES:
- Keys are dispatch names: canonical command key + DISPATCH_SUFFIX
- Each class's ``name`` property equals its key in TRANSLATORS
- Every translator listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Type

from spss_converter.config import DISPATCH_SUFFIX
from spss_converter.translators.control import DefineTranslator, DoRepeatTranslator
from spss_converter.translators.data_io import (
    FileHandleTranslator,
    GetDataTranslator,
    GetTranslator,
    MatchFilesTranslator,
    SaveTranslator,
)
from spss_converter.translators.metadata import (
    MissingValuesTranslator,
    ValueLabelsTranslator,
    VariableLabelsTranslator,
)
from spss_converter.translators.summaries import (
    CrosstabsTranslator,
    DescriptivesTranslator,
    FrequenciesTranslator,
)
from spss_converter.translators.transform import (
    AggregateTranslator,
    ComputeTranslator,
    DeleteVariablesTranslator,
    IfTranslator,
    RecodeTranslator,
    RenameVariablesTranslator,
    SelectIfTranslator,
    SelectTranslator,
    SortCasesTranslator,
)

if TYPE_CHECKING:
    from spss_converter.translators.base import BaseTranslator

TRANSLATORS: dict[str, type[BaseTranslator]] = {
    "get_to_r": GetTranslator,
    "getdata_to_r": GetDataTranslator,
    "save_to_r": SaveTranslator,
    "filehandle_to_r": FileHandleTranslator,
    "matchfiles_to_r": MatchFilesTranslator,
    "compute_to_r": ComputeTranslator,
    "if_to_r": IfTranslator,
    "recode_to_r": RecodeTranslator,
    "selectif_to_r": SelectIfTranslator,
    "select_to_r": SelectTranslator,
    "sortcases_to_r": SortCasesTranslator,
    "renamevariables_to_r": RenameVariablesTranslator,
    "deletevariables_to_r": DeleteVariablesTranslator,
    "aggregate_to_r": AggregateTranslator,
    "missingvalues_to_r": MissingValuesTranslator,
    "valuelabels_to_r": ValueLabelsTranslator,
    "variablelabels_to_r": VariableLabelsTranslator,
    "frequencies_to_r": FrequenciesTranslator,
    "descriptives_to_r": DescriptivesTranslator,
    "crosstabs_to_r": CrosstabsTranslator,
    "dorepeat_to_r": DoRepeatTranslator,
    "define_to_r": DefineTranslator,
}


def dispatch_name(key: str) -> str:
    """Translator name for a canonical command key, e.g. "recode_to_r"."""
    return key + DISPATCH_SUFFIX


def get_translator(key: str) -> Optional[Type[BaseTranslator]]:
    """Return the translator class registered for ``key``, or None."""
    return TRANSLATORS.get(dispatch_name(key))
