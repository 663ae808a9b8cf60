"""Importers that build the inventory and attach external signals to it."""

from .churn import (
    ChurnImporter,
    ChurnLogSource,
    ChurnOptions,
    ChurnStats,
    FileChurnLogSource,
    GitNumstatLogSource,
    merge_churn,
    parse_numstat_log,
)
from .complexity import ComplexityImporter, FileComplexity
from .coverage import CoverageImporter
from .inventory import build_source_inventory
from .lexical import LexicalComplexityAnalyzer, SourceComplexity
from .reconcile import MergeResult, PathReconciler, Reconciliation, merge_file_metrics

__all__ = [
    "build_source_inventory",
    "ChurnImporter",
    "ChurnLogSource",
    "ChurnOptions",
    "ChurnStats",
    "FileChurnLogSource",
    "GitNumstatLogSource",
    "merge_churn",
    "parse_numstat_log",
    "CoverageImporter",
    "ComplexityImporter",
    "FileComplexity",
    "LexicalComplexityAnalyzer",
    "SourceComplexity",
    "PathReconciler",
    "Reconciliation",
    "MergeResult",
    "merge_file_metrics",
]
