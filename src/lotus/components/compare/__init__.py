"""
Compare component - strict JSON equality with location-qualified diagnostics.
"""

from ._impl import compare_strict, describe, json_type, render_report
from .models import ROOT_PATH, ComparisonOutput, Difference, DifferenceKind

__all__ = [
    "compare_strict",
    "describe",
    "json_type",
    "render_report",
    "ComparisonOutput",
    "Difference",
    "DifferenceKind",
    "ROOT_PATH",
]
