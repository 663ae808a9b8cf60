"""
Priospot - Change, Complexity and Coverage Hotspot Analysis

Merges version-control churn, test coverage and static complexity reports
onto a source inventory, scores every file with the C3 indicator and renders
the result as interactive treemaps.
"""

__version__ = "0.1.0"
__author__ = "Priospot Contributors"

from .config import PriospotConfig, load_config
from .engine import PriospotEngine, PriospotResult
from .model import PriospotDocument, Project
from .visualization import ReportType

__all__ = [
    "PriospotEngine",  # Main entry point
    "PriospotResult",
    "PriospotConfig",
    "load_config",
    "PriospotDocument",
    "Project",
    "ReportType",
]
