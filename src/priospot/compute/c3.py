"""C3 (change, complexity, coverage) hotspot score.

    C3 = ((lines_changed + change_frequency) / 2 + ccn + (1 - coverage)) / 3

where each term is an exponential-decay indicator in [0, 1). A file scores
high when it changes often, is complex and is poorly tested.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..logging_config import get_logger
from ..model import DecimalMetric, FileEntry, IntegerMetric, MetricNames, Project, RatioMetric
from .indicators import change_frequency_indicator, lines_changed_indicator, max_ccn_indicator

logger = get_logger(__name__)


@dataclass(frozen=True)
class C3Result:
    project: Project
    warnings: Tuple[str, ...]
    files_computed: int


def c3_score(
    times_changed: int, lines_added: int, lines_removed: int, max_ccn: int, coverage: float, days: int
) -> float:
    freq = change_frequency_indicator(times_changed, days)
    lines = lines_changed_indicator(lines_added + lines_removed, days)
    ccn = max_ccn_indicator(max_ccn)
    return (((lines + freq) / 2.0) + ccn + (1 - coverage)) / 3.0


def _integer(entry: FileEntry, name: str) -> Optional[int]:
    metric = entry.metric(name)
    return metric.value if isinstance(metric, IntegerMetric) else None


class C3Computer:
    def compute(self, project: Project, days: int) -> C3Result:
        warnings: List[str] = []
        computed = 0
        files = []

        for entry in project.files:
            times_changed = _integer(entry, MetricNames.TIMES_CHANGED)
            lines_added = _integer(entry, MetricNames.LINES_ADDED)
            lines_removed = _integer(entry, MetricNames.LINES_REMOVED)
            max_ccn = _integer(entry, MetricNames.MAX_CCN)
            coverage = entry.metric(MetricNames.LINE_COVERAGE)

            inputs = (times_changed, lines_added, lines_removed, max_ccn)
            if any(v is None for v in inputs) or not isinstance(coverage, RatioMetric):
                warning = f"Skipping C3 for {entry.path}: missing required metrics"
                logger.debug(warning)
                warnings.append(warning)
                files.append(entry)
                continue

            score = c3_score(
                times_changed, lines_added, lines_removed, max_ccn, coverage.safe_ratio(), days
            )
            files.append(entry.with_metrics([DecimalMetric(MetricNames.C3_INDICATOR, score)]))
            computed += 1

        return C3Result(
            project=project.with_files(files), warnings=tuple(warnings), files_computed=computed
        )
