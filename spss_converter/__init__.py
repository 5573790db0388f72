"""SPSS-to-R converter: migrate legacy SPSS syntax scripts to R.

WHY: Analysts moving off SPSS have years of .sps scripts. Rewriting
them by hand is slow and error-prone. This package splits a script into
statements, recognizes each command, and emits equivalent dplyr or
data.table code.

HOW: Four-stage pipeline: normalize (strip noise), segment and
classify (statement blocks with canonical command keys), dispatch
(pluggable per-command translators), assemble (one R script with
hoisted library calls). Each stage is independently testable.

RULES:
- Every statement must resolve to a registered translator, or the run fails
- Adding a new SPSS command = one new translator class, no core changes
- The canonical command key is the stable contract between
  classification and translation
"""

__version__ = "0.1.0"
