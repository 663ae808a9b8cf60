"""Import per-file churn from a ``git log --numstat`` style change log.

The log format is line-oriented: lines starting with ``--`` separate
commits and are ignored, every other non-blank line is
``<added>\\t<removed>\\t<path>``.
"""

from __future__ import annotations

import subprocess
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from ..compute.indicators import change_frequency_indicator, lines_changed_indicator
from ..exceptions import ChurnSourceError, InvalidPathError
from ..logging_config import get_logger
from ..model import DecimalMetric, IntegerMetric, Metric, MetricNames, Project, normalize_path
from .reconcile import merge_file_metrics

logger = get_logger(__name__)

COMMIT_SEPARATOR = "--"


@dataclass(frozen=True)
class ChurnStats:
    lines_added: int = 0
    lines_removed: int = 0
    times_changed: int = 0

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_removed

    def __add__(self, other: "ChurnStats") -> "ChurnStats":
        return ChurnStats(
            lines_added=self.lines_added + other.lines_added,
            lines_removed=self.lines_removed + other.lines_removed,
            times_changed=self.times_changed + other.times_changed,
        )


@dataclass(frozen=True)
class ChurnOptions:
    days: int = 30
    churn_log: Optional[Path] = None
    write_git_log_to: Optional[Path] = None


class ChurnLogSource(Protocol):
    """Anything that can produce raw change-log text for a lookback window."""

    def read_log(self, days: int, repo_root: Path) -> str: ...


class FileChurnLogSource:
    """Read a precomputed change log from disk."""

    def __init__(self, log_path: Path):
        self.log_path = Path(log_path)

    def read_log(self, days: int, repo_root: Path) -> str:
        if not self.log_path.is_file():
            raise InvalidPathError(self.log_path, "churn log does not exist")
        return self.log_path.read_text(encoding="utf-8")


class GitNumstatLogSource:
    """Run ``git log --numstat`` in the repository root."""

    def __init__(self, git_executable: str = "git"):
        self.git_executable = git_executable

    def command(self, days: int) -> list[str]:
        return [
            self.git_executable,
            "log",
            "--all",
            "--numstat",
            "--date=short",
            "--pretty=format:--%h--%ad--%aN",
            "--no-renames",
            "--relative",
            f"--since={days}.days",
        ]

    def read_log(self, days: int, repo_root: Path) -> str:
        cmd = self.command(days)
        logger.debug("Running %s in %s", " ".join(cmd), repo_root)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(repo_root),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError as e:
            raise ChurnSourceError(f"git executable not found: {e}")

        if result.returncode != 0:
            raise ChurnSourceError(result.stdout.strip(), exit_code=result.returncode)
        return result.stdout


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        # binary files report "-" for both counts
        return 0


def parse_numstat_log(text: str) -> Dict[str, ChurnStats]:
    """Aggregate added/removed/changed counts per normalized path.

    Lines with fewer than three fields are skipped. When a log source
    emitted a literal backslash-t instead of real tabs, that is split on too.
    """
    result: Dict[str, ChurnStats] = defaultdict(ChurnStats)

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(COMMIT_SEPARATOR):
            continue

        parts = trimmed.split("\t")
        if len(parts) < 3:
            parts = trimmed.split("\\t")
        if len(parts) < 3:
            continue

        path = normalize_path(parts[2].strip())
        result[path] += ChurnStats(_to_int(parts[0]), _to_int(parts[1]), 1)

    return dict(result)


def churn_metrics(stats: ChurnStats, days: int) -> Tuple[Metric, ...]:
    return (
        IntegerMetric(MetricNames.LINES_ADDED, stats.lines_added),
        IntegerMetric(MetricNames.LINES_REMOVED, stats.lines_removed),
        IntegerMetric(MetricNames.TIMES_CHANGED, stats.times_changed),
        DecimalMetric(
            MetricNames.LINES_CHANGED_INDICATOR, lines_changed_indicator(stats.lines_changed, days)
        ),
        DecimalMetric(
            MetricNames.CHANGE_FREQUENCY_INDICATOR,
            change_frequency_indicator(stats.times_changed, days),
        ),
    )


def merge_churn(project: Project, per_file: Dict[str, ChurnStats], days: int) -> Project:
    """Attach churn metrics by exact path and record the churn window on the project."""
    updates = {
        entry.path: churn_metrics(per_file[entry.path], days)
        for entry in project.files
        if entry.path in per_file
    }
    merged = merge_file_metrics(project, updates)
    return merged.with_metrics([IntegerMetric(MetricNames.CHURN_DURATION, days)])


class ChurnImporter:
    """Load a change log from a file or a log source and merge it onto a project."""

    def __init__(self, log_source: Optional[ChurnLogSource] = None):
        self.log_source = log_source or GitNumstatLogSource()

    def load_log(self, options: ChurnOptions, repo_root: Path) -> str:
        if options.churn_log is not None:
            text = FileChurnLogSource(options.churn_log).read_log(options.days, repo_root)
        else:
            text = self.log_source.read_log(options.days, repo_root)

        if options.write_git_log_to is not None:
            options.write_git_log_to.parent.mkdir(parents=True, exist_ok=True)
            options.write_git_log_to.write_text(text, encoding="utf-8")
        return text

    def merge(self, project: Project, options: ChurnOptions, repo_root: Path) -> Project:
        per_file = parse_numstat_log(self.load_log(options, repo_root))
        logger.info("Churn log covers %d paths over %d days", len(per_file), options.days)
        return merge_churn(project, per_file, options.days)
