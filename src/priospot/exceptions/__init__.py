"""Exception hierarchy for Priospot."""

from .base import PriospotError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .ingest import (
    ChurnSourceError,
    IngestError,
    InvalidCoverageCounterError,
    ReportParseError,
    UnsupportedReportFormatError,
)

__all__ = [
    "PriospotError",
    "IngestError",
    "UnsupportedReportFormatError",
    "InvalidCoverageCounterError",
    "ReportParseError",
    "ChurnSourceError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
