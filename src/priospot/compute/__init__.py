"""Derived metrics: decay indicators, defaults and the C3 score."""

from .c3 import C3Computer, C3Result, c3_score
from .defaults import (
    DefaultingResult,
    DefaultingStats,
    MetricDefaulter,
    MetricDefaults,
    apply_metric_defaults,
)
from .indicators import change_frequency_indicator, lines_changed_indicator, max_ccn_indicator

__all__ = [
    "C3Computer",
    "C3Result",
    "c3_score",
    "MetricDefaulter",
    "MetricDefaults",
    "DefaultingResult",
    "DefaultingStats",
    "apply_metric_defaults",
    "change_frequency_indicator",
    "lines_changed_indicator",
    "max_ccn_indicator",
]
