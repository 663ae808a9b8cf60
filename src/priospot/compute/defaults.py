"""Fill in metrics the importers could not provide.

Every file leaves this stage with coverage, complexity and churn metrics so
the C3 score can be computed for all of them. Existing metrics are never
replaced, so running the stage twice changes nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..ingest.lexical import LexicalComplexityAnalyzer, SourceComplexity
from ..model import (
    DecimalMetric,
    IntegerMetric,
    Metric,
    MetricNames,
    Project,
    RatioMetric,
    is_test_source,
)
from ..model.paths import DEFAULT_TEST_SOURCE_MARKERS

ZERO_CHURN: tuple = (
    IntegerMetric(MetricNames.LINES_ADDED, 0),
    IntegerMetric(MetricNames.LINES_REMOVED, 0),
    IntegerMetric(MetricNames.TIMES_CHANGED, 0),
    DecimalMetric(MetricNames.LINES_CHANGED_INDICATOR, 0.0),
    DecimalMetric(MetricNames.CHANGE_FREQUENCY_INDICATOR, 0.0),
)


@dataclass(frozen=True)
class DefaultingStats:
    source_derived_complexity: int = 0
    source_derived_ncss: int = 0
    fallback_complexity: int = 0


@dataclass(frozen=True)
class DefaultingResult:
    project: Project
    stats: DefaultingStats


@dataclass(frozen=True)
class MetricDefaults:
    coverage_numerator: float = 0.0
    coverage_denominator: float = 1.0
    max_ccn: int = 1000
    test_source_markers: tuple = DEFAULT_TEST_SOURCE_MARKERS


class MetricDefaulter:
    """Apply coverage, complexity and churn defaults to every file of a project."""

    def __init__(
        self,
        defaults: Optional[MetricDefaults] = None,
        analyzer: Optional[LexicalComplexityAnalyzer] = None,
    ):
        self.defaults = defaults or MetricDefaults()
        self.analyzer = analyzer or LexicalComplexityAnalyzer()

    def _source_complexity(self, path: str, base_path: Path) -> Optional[SourceComplexity]:
        return self.analyzer.analyze(Path(base_path) / path)

    def _default_coverage(self, path: str) -> RatioMetric:
        if is_test_source(path, self.defaults.test_source_markers):
            return RatioMetric(MetricNames.LINE_COVERAGE, 1.0, 1.0)
        return RatioMetric(
            MetricNames.LINE_COVERAGE,
            self.defaults.coverage_numerator,
            self.defaults.coverage_denominator,
        )

    def apply(self, project: Project, base_path: Path) -> DefaultingResult:
        from_source_ccn = 0
        from_source_ncss = 0
        fallback_ccn = 0
        files = []

        for entry in project.files:
            present = {m.name for m in entry.metrics}
            added: Dict[str, Metric] = {}

            if MetricNames.LINE_COVERAGE not in present:
                added[MetricNames.LINE_COVERAGE] = self._default_coverage(entry.path)

            needs_ncss = MetricNames.NCSS not in present
            needs_ccn = MetricNames.MAX_CCN not in present
            estimate = self._source_complexity(entry.path, base_path) if needs_ncss or needs_ccn else None

            if needs_ncss and estimate is not None:
                added[MetricNames.NCSS] = IntegerMetric(MetricNames.NCSS, estimate.ncss)
                from_source_ncss += 1
            if needs_ccn:
                if estimate is not None:
                    added[MetricNames.MAX_CCN] = IntegerMetric(MetricNames.MAX_CCN, estimate.max_ccn)
                    from_source_ccn += 1
                else:
                    added[MetricNames.MAX_CCN] = IntegerMetric(
                        MetricNames.MAX_CCN, self.defaults.max_ccn
                    )
                    fallback_ccn += 1

            for metric in ZERO_CHURN:
                if metric.name not in present:
                    added[metric.name] = metric

            files.append(entry.with_metrics(added.values()) if added else entry)

        return DefaultingResult(
            project=project.with_files(files),
            stats=DefaultingStats(
                source_derived_complexity=from_source_ccn,
                source_derived_ncss=from_source_ncss,
                fallback_complexity=fallback_ccn,
            ),
        )


def apply_metric_defaults(
    project: Project,
    base_path: Path,
    coverage_numerator: float = 0.0,
    coverage_denominator: float = 1.0,
    max_ccn: int = 1000,
    test_source_markers: Iterable[str] = DEFAULT_TEST_SOURCE_MARKERS,
) -> DefaultingResult:
    defaults = MetricDefaults(
        coverage_numerator=coverage_numerator,
        coverage_denominator=coverage_denominator,
        max_ccn=max_ccn,
        test_source_markers=tuple(test_source_markers),
    )
    return MetricDefaulter(defaults).apply(project, base_path)
