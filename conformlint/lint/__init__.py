"""Evaluation pass over a parsed tree."""

from conformlint.lint.evaluate import DiagnosticSet, evaluate_tree
from conformlint.lint.suppression import Suppression, SuppressionIndex

__all__ = [
    "DiagnosticSet",
    "Suppression",
    "SuppressionIndex",
    "evaluate_tree",
]
