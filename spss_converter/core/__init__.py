"""Core segmentation, classification, and assembly modules.

WHY: The core package holds the format-independent heart of the
converter: turning unstructured SPSS text into classified statement
blocks and turning translator output into one R script.

HOW: ir.py defines the data structures, normalizer.py and segmenter.py
build statement blocks, classifier.py assigns command keys,
assembler.py builds the output, pipeline.py wires them together.

RULES:
- No translator-specific logic here
- Every stage returns new values; inputs are never mutated
"""
