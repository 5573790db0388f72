"""Shared test fixtures for the spss_converter test suite.

WHY: Several test modules exercise the same small survey-cleaning script
end to end (pipeline, CLI, HTTP API). Centralizing it here keeps the
expected R output in one place.

HOW: SAMPLE_SCRIPT holds raw SPSS lines with the usual noise (comment,
blank line, tab indentation, EXECUTE.). The EXPECTED_* lists hold the
assembled R script for each dialect. Fixtures hand out copies.

RULES:
- SAMPLE_SCRIPT normalizes to five statements: GET, RECODE, COMPUTE,
  SORT CASES, SAVE
- EXPECTED_* lines are the exact assembler output, imports first
"""

from typing import List

import pytest

from spss_converter.config import HEADER_COMMENT


# ---------------------------------------------------------------------------
# Sample SPSS script
# ---------------------------------------------------------------------------

SAMPLE_SCRIPT: List[str] = [
    "* Survey cleaning script.",
    "GET FILE='C:\\data\\survey.sav'.",
    "",
    "RECODE age (LO THRU 17=1) (18 THRU HI=2) INTO agegrp.",
    "\tCOMPUTE total = q1 + q2.",
    "EXECUTE.",
    "SORT CASES BY id (A).",
    "SAVE OUTFILE='C:\\data\\clean.sav'.",
]

EXPECTED_DPLYR: List[str] = [
    "library(haven)",
    "library(dplyr)",
    HEADER_COMMENT,
    "x <- read_sav('C:/data/survey.sav')",
    "x <- x %>% mutate(agegrp = case_when(age <= 17 ~ 1, age >= 18 ~ 2, TRUE ~ NA))",
    "x <- x %>% mutate(total = q1 + q2)",
    "x <- x %>% arrange(id)",
    "write_sav(x, 'C:/data/clean.sav')",
]

EXPECTED_DATA_TABLE: List[str] = [
    "library(haven)",
    "library(data.table)",
    HEADER_COMMENT,
    "x <- read_sav('C:/data/survey.sav')",
    "setDT(x)",
    "x[, agegrp := fcase(age <= 17, 1, age >= 18, 2, default = NA)]",
    "x[, total := q1 + q2]",
    "setorder(x, id)",
    "write_sav(x, 'C:/data/clean.sav')",
]


@pytest.fixture
def sample_script() -> List[str]:
    """Raw SPSS lines for the survey-cleaning script."""
    return list(SAMPLE_SCRIPT)


@pytest.fixture
def expected_dplyr() -> List[str]:
    """Assembled dplyr output for SAMPLE_SCRIPT."""
    return list(EXPECTED_DPLYR)


@pytest.fixture
def expected_data_table() -> List[str]:
    """Assembled data.table output for SAMPLE_SCRIPT."""
    return list(EXPECTED_DATA_TABLE)


@pytest.fixture
def sample_sps_file(tmp_path):
    """The sample script written to a .sps file in a temp directory."""
    path = tmp_path / "survey.sps"
    path.write_text("\n".join(SAMPLE_SCRIPT) + "\n", encoding="utf-8")
    return path
