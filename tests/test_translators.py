"""Tests for the SPSS command translators and their registry.

WHY: Each translator owns one SPSS command's argument parsing and both
R renderings. These tests pin the generated lines for the common
argument forms and the ValueError paths for unsupported ones.

HOW: Translators are called directly with a block's lines, a Dialect,
and the nosave flag, so imports appear inline (assembly is tested
separately).

RULES:
- Every registered translator's name matches its registry key
- nosave only affects GET, GET DATA, SAVE, and AGGREGATE file output
"""

import pytest

from spss_converter.core.errors import DispatchError
from spss_converter.core.ir import Dialect
from spss_converter.translators import TRANSLATORS, dispatch_name, get_translator
from spss_converter.translators.syntax import (
    r_expression,
    r_string,
    split_unquoted,
    subcommands,
    to_ranges,
    tokenize,
)

DPLYR = Dialect.DPLYR
DT = Dialect.DATA_TABLE


def run(key, lines, dialect=DPLYR, nosave=False):
    """Translate one block with the registered translator for ``key``."""
    if isinstance(lines, str):
        lines = [lines]
    return get_translator(key)().translate(lines, dialect, nosave)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:

    def test_names_match_keys(self):
        for name, translator_cls in TRANSLATORS.items():
            assert translator_cls().name == name

    def test_dispatch_name(self):
        assert dispatch_name("sortcases") == "sortcases_to_r"

    def test_lookup(self):
        assert get_translator("recode") is TRANSLATORS["recode_to_r"]

    def test_unknown_key(self):
        assert get_translator("list") is None


# ---------------------------------------------------------------------------
# Syntax helpers
# ---------------------------------------------------------------------------


class TestSyntaxHelpers:

    def test_split_unquoted_keeps_quoted_separator(self):
        assert split_unquoted("a 'x/y' / b", "/") == ["a 'x/y'", "b"]

    def test_tokenize(self):
        assert tokenize("a, b 'c d'") == ["a", "b", "'c d'"]

    def test_subcommands_first_part_named_with_assignment(self):
        assert subcommands("OUTFILE='a.sav' /DROP x") == [("OUTFILE", "'a.sav'"), ("DROP", "x")]

    def test_subcommands_first_part_unnamed_without_assignment(self):
        assert subcommands("mydir /NAME='d'") == [("", "mydir"), ("NAME", "'d'")]

    def test_r_expression_operators(self):
        assert r_expression("a EQ 1 AND b ~= 2 OR NOT c") == "a == 1 & b != 2 | ! c"

    def test_r_expression_leaves_quotes_alone(self):
        assert r_expression("name = 'A AND B'") == "name == 'A AND B'"

    def test_r_expression_functions(self):
        assert r_expression("SYSMIS(a) OR a <> 1") == "is.na(a) | a != 1"

    def test_r_string_switches_quotes(self):
        assert r_string("it's") == '"it\'s"'

    def test_to_ranges(self):
        assert to_ranges(["a", "TO", "c", "d"], ":") == ["a:c", "d"]


# ---------------------------------------------------------------------------
# Data input and output
# ---------------------------------------------------------------------------


class TestGet:

    def test_dplyr_with_keep(self):
        assert run("get", "GET FILE='a.sav' /KEEP id age.") == [
            "library(haven)",
            "library(dplyr)",
            "x <- read_sav('a.sav')",
            "x <- x %>% select(id, age)",
        ]

    def test_data_table(self):
        assert run("get", "GET FILE='a.sav'.", DT) == [
            "library(haven)",
            "library(data.table)",
            "x <- read_sav('a.sav')",
            "setDT(x)",
        ]

    def test_nosave(self):
        assert run("get", "GET FILE='a.sav'.", nosave=True) == []

    def test_missing_file(self):
        with pytest.raises(ValueError, match="no FILE"):
            run("get", "GET.")


class TestGetData:

    def test_text_dplyr(self):
        line = "GET DATA /TYPE=TXT /FILE='data.csv' /DELIMITERS=\",\" /FIRSTCASE=2."
        assert run("getdata", line) == [
            "x <- read.table('data.csv', sep = ',', header = TRUE, stringsAsFactors = FALSE)",
        ]

    def test_text_tab_delimiter_data_table(self):
        line = "GET DATA /TYPE=TXT /FILE='data.txt' /DELIMITERS=\"\\t\"."
        assert run("getdata", line, DT) == [
            "library(data.table)",
            "x <- fread('data.txt', sep = intToUtf8(9), header = FALSE)",
        ]

    def test_excel_data_table(self):
        lines = [
            "GET DATA /TYPE=XLSX",
            "/FILE='book.xlsx'",
            "/SHEET=name 'Sheet1'",
            "/READNAMES=on.",
        ]
        assert run("getdata", lines, DT) == [
            "library(readxl)",
            "library(data.table)",
            "x <- read_excel('book.xlsx', sheet = 'Sheet1', col_names = TRUE)",
            "setDT(x)",
        ]

    def test_unsupported_type(self):
        with pytest.raises(ValueError, match="ODBC"):
            run("getdata", "GET DATA /TYPE=ODBC /FILE='x'.")

    def test_nosave(self):
        assert run("getdata", "GET DATA /TYPE=ODBC /FILE='x'.", nosave=True) == []


class TestSave:

    def test_dplyr(self):
        assert run("save", "SAVE OUTFILE='out.sav'.") == [
            "library(haven)",
            "write_sav(x, 'out.sav')",
        ]

    def test_drop_data_table(self):
        assert run("save", "SAVE OUTFILE='out.sav' /DROP tmp.", DT) == [
            "library(haven)",
            "write_sav(x[, !c('tmp')], 'out.sav')",
        ]

    def test_nosave(self):
        assert run("save", "SAVE OUTFILE='out.sav'.", nosave=True) == []


class TestFileHandle:

    def test_setwd(self):
        assert run("filehandle", "FILE HANDLE mydir /NAME='C:\\data'.") == ["setwd('C:\\data')"]

    def test_missing_name(self):
        with pytest.raises(ValueError):
            run("filehandle", "FILE HANDLE mydir.")


class TestMatchFiles:

    def test_table_lookup_dplyr(self):
        assert run("matchfiles", "MATCH FILES /FILE=* /TABLE='lookup.sav' /BY id.") == [
            "library(haven)",
            "library(dplyr)",
            "x2 <- read_sav('lookup.sav')",
            "x <- x %>% left_join(x2, by = c('id'))",
        ]

    def test_file_join_data_table(self):
        assert run("matchfiles", "MATCH FILES /FILE=* /FILE='more.sav' /BY id.", DT) == [
            "library(haven)",
            "library(data.table)",
            "x2 <- read_sav('more.sav')",
            "setDT(x2)",
            "x <- merge(x, x2, by = c('id'), all = TRUE)",
        ]

    def test_no_keys_binds_columns(self):
        output = run("matchfiles", "MATCH FILES /FILE=* /FILE='more.sav'.")
        assert output[-1] == "x <- bind_cols(x, x2)"


# ---------------------------------------------------------------------------
# Transformations
# ---------------------------------------------------------------------------


class TestCompute:

    def test_dplyr(self):
        assert run("compute", "COMPUTE total = q1 + q2.") == [
            "library(dplyr)",
            "x <- x %>% mutate(total = q1 + q2)",
        ]

    def test_data_table_power(self):
        assert run("compute", "COMPUTE bmi = weight / height ** 2.", DT) == [
            "library(data.table)",
            "x[, bmi := weight / height ^ 2]",
        ]

    def test_missing_expression(self):
        with pytest.raises(ValueError):
            run("compute", "COMPUTE total.")


class TestIf:

    def test_dplyr(self):
        assert run("if", "IF (age GE 65) senior = 1.") == [
            "library(dplyr)",
            "x <- x %>% mutate(senior = ifelse(age >= 65, 1, senior))",
        ]

    def test_data_table_compound_condition(self):
        assert run("if", "IF (sex = 'F' AND age < 30) group = 2.", DT) == [
            "library(data.table)",
            "x[sex == 'F' & age < 30, group := 2]",
        ]

    def test_condition_without_parentheses(self):
        output = run("if", "IF age GT 17 adult = 1.", DT)
        assert output[-1] == "x[age > 17, adult := 1]"


class TestSelect:

    def test_select_if_dplyr(self):
        assert run("selectif", "SELECT IF (income > 1000).") == [
            "library(dplyr)",
            "x <- x %>% filter((income > 1000))",
        ]

    def test_select_with_equals_data_table(self):
        assert run("select", "SELECT IF region = 3.", DT) == [
            "library(data.table)",
            "x <- x[region == 3]",
        ]


class TestRecode:

    def test_ranges_into_new_variable(self):
        assert run("recode", "RECODE age (LO THRU 17=1) (18 THRU HI=2) INTO agegrp.") == [
            "library(dplyr)",
            "x <- x %>% mutate(agegrp = case_when(age <= 17 ~ 1, age >= 18 ~ 2, TRUE ~ NA))",
        ]

    def test_value_list_and_else_in_place(self):
        assert run("recode", "RECODE q1 q2 (1,2=0) (ELSE=1).") == [
            "library(dplyr)",
            "x <- x %>% mutate(q1 = case_when(q1 %in% c(1, 2) ~ 0, TRUE ~ 1))",
            "x <- x %>% mutate(q2 = case_when(q2 %in% c(1, 2) ~ 0, TRUE ~ 1))",
        ]

    def test_missing_and_copy_data_table(self):
        assert run("recode", "RECODE q1 (MISSING=9) (ELSE=COPY).", DT) == [
            "library(data.table)",
            "x[, q1 := fcase(is.na(q1), 9, TRUE, q1)]",
        ]

    def test_in_place_without_else_data_table(self):
        """Unmatched values keep the column through a final TRUE arm, not default=."""
        assert run("recode", "RECODE q1 (1=0).", DT) == [
            "library(data.table)",
            "x[, q1 := fcase(q1 == 1, 0, TRUE, q1)]",
        ]

    def test_literal_fallback_uses_default_data_table(self):
        assert run("recode", "RECODE age (LO THRU 17=1) (ELSE=0) INTO adult.", DT) == [
            "library(data.table)",
            "x[, adult := fcase(age <= 17, 1, default = 0)]",
        ]

    def test_string_values(self):
        output = run("recode", "RECODE sex ('M'=1) ('F'=2) INTO sexnum.")
        assert output[-1] == (
            "x <- x %>% mutate(sexnum = case_when(sex == 'M' ~ 1, sex == 'F' ~ 2, TRUE ~ NA))"
        )

    def test_into_length_mismatch(self):
        with pytest.raises(ValueError, match="INTO"):
            run("recode", "RECODE a b (1=2) INTO c.")


class TestSortCases:

    def test_descending_applies_to_pending_variables(self):
        assert run("sortcases", "SORT CASES BY a b (D) c.") == [
            "library(dplyr)",
            "x <- x %>% arrange(desc(a), desc(b), c)",
        ]

    def test_data_table(self):
        assert run("sortcases", "SORT CASES BY region (D) id.", DT) == [
            "library(data.table)",
            "setorder(x, -region, id)",
        ]

    def test_abbreviated_command(self):
        assert run("sortcases", "SORT BY id.")[-1] == "x <- x %>% arrange(id)"


class TestRenameVariables:

    def test_dplyr(self):
        assert run("renamevariables", "RENAME VARIABLES (old1=new1) (a b = c d).") == [
            "library(dplyr)",
            "x <- x %>% rename(new1 = old1, c = a, d = b)",
        ]

    def test_data_table(self):
        assert run("renamevariables", "RENAME VARIABLES (old1=new1) (a b = c d).", DT) == [
            "library(data.table)",
            "setnames(x, c('old1', 'a', 'b'), c('new1', 'c', 'd'))",
        ]

    def test_unbalanced_names(self):
        with pytest.raises(ValueError):
            run("renamevariables", "RENAME VARIABLES (a b = c).")


class TestDeleteVariables:

    def test_dplyr(self):
        assert run("deletevariables", "DELETE VARIABLES tmp1 tmp2.") == [
            "library(dplyr)",
            "x <- x %>% select(-c(tmp1, tmp2))",
        ]

    def test_dplyr_range(self):
        output = run("deletevariables", "DELETE VARIABLES a TO c.")
        assert output[-1] == "x <- x %>% select(-c(a:c))"

    def test_data_table(self):
        assert run("deletevariables", "DELETE VARIABLES tmp1 tmp2.", DT) == [
            "library(data.table)",
            "x[, c('tmp1', 'tmp2') := NULL]",
        ]

    def test_data_table_range_rejected(self):
        with pytest.raises(ValueError, match="TO"):
            run("deletevariables", "DELETE VARIABLES a TO c.", DT)


class TestAggregate:

    def test_replace_frame_dplyr(self):
        line = "AGGREGATE /OUTFILE=* /BREAK=region /avg_income = MEAN(income) /n = N."
        assert run("aggregate", line) == [
            "library(dplyr)",
            "x <- x %>% group_by(region) %>% summarise("
            "avg_income = mean(income, na.rm = TRUE), n = n()) %>% ungroup()",
        ]

    def test_add_variables_data_table(self):
        line = "AGGREGATE /OUTFILE=* MODE=ADDVARIABLES /BREAK=region /total = SUM(sales)."
        assert run("aggregate", line, DT) == [
            "library(data.table)",
            "x[, `:=`(total = sum(sales, na.rm = TRUE)), by = .(region)]",
        ]

    def test_outfile_written(self):
        line = "AGGREGATE /OUTFILE='agg.sav' /BREAK=g /m = MAX(v)."
        assert run("aggregate", line) == [
            "library(dplyr)",
            "aggregated <- x %>% group_by(g) %>% summarise(m = max(v, na.rm = TRUE)) %>% ungroup()",
            "library(haven)",
            "write_sav(aggregated, 'agg.sav')",
        ]

    def test_outfile_skipped_with_nosave(self):
        line = "AGGREGATE /OUTFILE='agg.sav' /BREAK=g /m = MAX(v)."
        output = run("aggregate", line, nosave=True)
        assert not any("write_sav" in r for r in output)

    def test_unsupported_function(self):
        with pytest.raises(ValueError, match="PGT"):
            run("aggregate", "AGGREGATE /OUTFILE=* /BREAK=g /p = PGT(v 5).")


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class TestMissingValues:

    def test_code_lists_dplyr(self):
        assert run("missingvalues", "MISSING VALUES q1 q2 (9, 99) age (-1).") == [
            "library(dplyr)",
            "x <- x %>% mutate(q1 = replace(q1, q1 %in% c(9, 99), NA))",
            "x <- x %>% mutate(q2 = replace(q2, q2 %in% c(9, 99), NA))",
            "x <- x %>% mutate(age = replace(age, age == -1, NA))",
        ]

    def test_range_data_table(self):
        assert run("missingvalues", "MISSING VALUES score (LO THRU 0).", DT) == [
            "library(data.table)",
            "x[(score <= 0), score := NA]",
        ]

    def test_empty_list_emits_nothing(self):
        assert run("missingvalues", "MISSING VALUES q1 ().") == ["library(dplyr)"]


class TestValueLabels:

    def test_dplyr(self):
        assert run("valuelabels", "VALUE LABELS sex 1 'Male' 2 'Female'.") == [
            "library(dplyr)",
            "x <- x %>% mutate(sex = factor(sex, levels = c(1, 2), labels = c('Male', 'Female')))",
        ]

    def test_multiple_groups_data_table(self):
        lines = ["VALUE LABELS a b", "1 'Yes' 2 'No'", "/c 'M' 'Man'."]
        assert run("valuelabels", lines, DT) == [
            "library(data.table)",
            "x[, a := factor(a, levels = c(1, 2), labels = c('Yes', 'No'))]",
            "x[, b := factor(b, levels = c(1, 2), labels = c('Yes', 'No'))]",
            "x[, c := factor(c, levels = c('M'), labels = c('Man'))]",
        ]

    def test_add_value_labels(self):
        output = run("valuelabels", "ADD VALUE LABELS sex 3 'Other'.")
        assert output[-1] == "x <- x %>% mutate(sex = factor(sex, levels = c(3), labels = c('Other')))"


class TestVariableLabels:

    def test_labels(self):
        line = "VARIABLE LABELS age 'Age in years' /income 'Monthly income / net'."
        assert run("variablelabels", line) == [
            "attr(x$age, 'label') <- 'Age in years'",
            "attr(x$income, 'label') <- 'Monthly income / net'",
        ]


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


class TestFrequencies:

    def test_dplyr(self):
        assert run("frequencies", "FREQUENCIES VARIABLES=sex region /ORDER=ANALYSIS.") == [
            "library(dplyr)",
            "x %>% count(sex)",
            "x %>% count(region)",
        ]

    def test_data_table(self):
        assert run("frequencies", "FREQUENCIES VARIABLES=sex.", DT)[-1] == "x[, .N, by = sex]"


class TestDescriptives:

    def test_requested_statistics(self):
        assert run("descriptives", "DESCRIPTIVES VARIABLES=age /STATISTICS=MEAN MAX.") == [
            "library(dplyr)",
            "x %>% summarise(age_mean = mean(age, na.rm = TRUE), age_max = max(age, na.rm = TRUE))",
        ]

    def test_default_statistics(self):
        output = run("descriptives", "DESCRIPTIVES VARIABLES=age.", DT)
        assert output[-1] == (
            "x[, .(age_mean = mean(age, na.rm = TRUE), age_sd = sd(age, na.rm = TRUE), "
            "age_min = min(age, na.rm = TRUE), age_max = max(age, na.rm = TRUE))]"
        )

    def test_unknown_statistic(self):
        with pytest.raises(ValueError, match="KURTOSIS"):
            run("descriptives", "DESCRIPTIVES VARIABLES=age /STATISTICS=KURTOSIS.")


class TestCrosstabs:

    def test_data_table(self):
        assert run("crosstabs", "CROSSTABS /TABLES=sex BY region /CELLS=COUNT.", DT) == [
            "library(data.table)",
            "x[, .N, by = .(sex, region)]",
        ]

    def test_dplyr(self):
        output = run("crosstabs", "CROSSTABS /TABLES=sex BY region.")
        assert output[-1] == "x %>% count(sex, region)"

    def test_missing_by(self):
        with pytest.raises(ValueError, match="BY"):
            run("crosstabs", "CROSSTABS /TABLES=sex.")


# ---------------------------------------------------------------------------
# Nested constructs
# ---------------------------------------------------------------------------


class TestDoRepeat:

    def test_expansion_data_table(self):
        lines = ["DO REPEAT v = a b /n = 1 2.", "COMPUTE v = n.", "END REPEAT."]
        assert run("dorepeat", lines, DT) == [
            "library(data.table)",
            "x[, a := 1]",
            "library(data.table)",
            "x[, b := 2]",
        ]

    def test_values_naming_other_stand_ins_not_resubstituted(self):
        lines = ["DO REPEAT a = b c /b = 1 2.", "COMPUTE a = b.", "END REPEAT."]
        assert run("dorepeat", lines) == [
            "library(dplyr)",
            "x <- x %>% mutate(b = 1)",
            "library(dplyr)",
            "x <- x %>% mutate(c = 2)",
        ]

    def test_mismatched_lengths(self):
        lines = ["DO REPEAT v = a b /n = 1.", "COMPUTE v = n.", "END REPEAT."]
        with pytest.raises(ValueError, match="differ"):
            run("dorepeat", lines)

    def test_ranges_rejected(self):
        lines = ["DO REPEAT v = a TO c.", "COMPUTE v = 0.", "END REPEAT."]
        with pytest.raises(ValueError, match="TO"):
            run("dorepeat", lines)

    def test_unknown_inner_command(self):
        lines = ["DO REPEAT v = a b.", "LIST v.", "END REPEAT."]
        with pytest.raises(DispatchError):
            run("dorepeat", lines)


class TestDefine:

    def test_emitted_as_comments(self):
        lines = ["DEFINE !mymacro ()", "FREQUENCIES VARIABLES=!1.", "!ENDDEFINE."]
        assert run("define", lines) == [
            "# SPSS macro !mymacro has no R translation; original definition:",
            "# DEFINE !mymacro ()",
            "# FREQUENCIES VARIABLES=!1.",
            "# !ENDDEFINE.",
        ]
