"""Ingestion exceptions: report formats, malformed inputs, churn sources.

All of these are fatal for a run. Recoverable problems (missing report
files, unmatched paths) are reported as diagnostics instead.
"""

from pathlib import Path
from typing import Optional

from .base import PriospotError


class IngestError(PriospotError):
    """Base class for report ingestion errors."""

    pass


class UnsupportedReportFormatError(IngestError):
    """Raised when a report file has an extension no importer understands."""

    def __init__(self, kind: str, report_path: Path):
        super().__init__(
            f"Unsupported {kind} report format: {report_path}",
            details={"kind": kind, "path": str(report_path)},
        )
        self.kind = kind
        self.report_path = report_path


class InvalidCoverageCounterError(IngestError):
    """Raised when a coverage counter violates 0 <= covered <= total."""

    def __init__(self, covered: int, total: int, reason: str):
        super().__init__(
            f"Invalid coverage counter: {reason}",
            details={"covered": str(covered), "total": str(total)},
        )
        self.covered = covered
        self.total = total
        self.reason = reason


class ReportParseError(IngestError):
    """Raised when a report file cannot be parsed."""

    def __init__(self, report_path: Path, reason: str):
        super().__init__(
            f"Failed to parse report: {report_path}",
            details={"path": str(report_path), "reason": reason},
        )
        self.report_path = report_path
        self.reason = reason


class ChurnSourceError(IngestError):
    """Raised when the change-log producer fails."""

    def __init__(self, reason: str, exit_code: Optional[int] = None):
        details = {"reason": reason}
        if exit_code is not None:
            details["exit_code"] = str(exit_code)

        super().__init__("Change log command failed", details=details)
        self.reason = reason
        self.exit_code = exit_code
