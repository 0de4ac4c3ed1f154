"""
Analyzer package - the declaration-resolution and evaluation pipeline.

Parsing, dependency extraction, import resolution, merging, sequencing and
evaluation live in separate modules so each stage can be tested on its own.
"""

from __future__ import annotations

from .evaluator import LiteralEvaluator, evaluate_bindings
from .import_resolver import ImportResolver
from .merger import build_compilation_unit
from .sequencer import sequence_bindings

__all__ = [
    "ImportResolver",
    "LiteralEvaluator",
    "build_compilation_unit",
    "evaluate_bindings",
    "sequence_bindings",
]
