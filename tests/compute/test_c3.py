"""Tests for the decay indicators and the C3 score."""

from math import exp

import pytest

from priospot.compute import (
    C3Computer,
    c3_score,
    change_frequency_indicator,
    lines_changed_indicator,
    max_ccn_indicator,
)
from priospot.model import DecimalMetric, IntegerMetric, MetricNames, RatioMetric


def _hotspot_metrics(coverage=RatioMetric(MetricNames.LINE_COVERAGE, 80.0, 100.0)):
    return (
        IntegerMetric(MetricNames.TIMES_CHANGED, 3),
        IntegerMetric(MetricNames.LINES_ADDED, 30),
        IntegerMetric(MetricNames.LINES_REMOVED, 10),
        IntegerMetric(MetricNames.MAX_CCN, 8),
        coverage,
    )


class TestIndicators:
    def test_zero_input_is_zero(self):
        assert change_frequency_indicator(0, 30) == 0.0
        assert lines_changed_indicator(0, 30) == 0.0
        assert max_ccn_indicator(0) == 0.0

    def test_decay_constants(self):
        assert change_frequency_indicator(3, 30) == pytest.approx(1 - exp(-2.3025 * 3 / 30))
        assert lines_changed_indicator(40, 30) == pytest.approx(1 - exp(-0.05756 * 40 / 30))
        assert max_ccn_indicator(8) == pytest.approx(1 - exp(-0.092103 * 8))

    def test_bounded_and_monotonic(self):
        values = [max_ccn_indicator(n) for n in (1, 10, 100, 1000)]
        assert values == sorted(values)
        assert all(0.0 <= v <= 1.0 for v in values)

    def test_churn_indicators_strictly_increasing(self):
        frequency = [change_frequency_indicator(n, 30) for n in range(0, 60)]
        changed = [lines_changed_indicator(c, 30) for c in range(0, 600, 10)]
        for values in (frequency, changed):
            assert all(a < b for a, b in zip(values, values[1:]))
            assert all(0.0 <= v < 1.0 for v in values)


class TestC3Score:
    def test_formula(self):
        expected = (
            (lines_changed_indicator(40, 30) + change_frequency_indicator(3, 30)) / 2
            + max_ccn_indicator(8)
            + (1 - 0.8)
        ) / 3
        assert c3_score(3, 30, 10, 8, 0.8, 30) == pytest.approx(expected)

    def test_untouched_trivial_covered_file(self):
        assert c3_score(0, 0, 0, 0, 1.0, 30) == 0.0


class TestC3Computer:
    def test_computes_score(self, make_project):
        project = make_project("src/Foo.kt", metrics={"src/Foo.kt": _hotspot_metrics()})
        result = C3Computer().compute(project, 30)

        metric = result.project.files[0].metric(MetricNames.C3_INDICATOR)
        assert isinstance(metric, DecimalMetric)
        assert 0.0 < metric.value < 1.0
        assert metric.value == pytest.approx(c3_score(3, 30, 10, 8, 0.8, 30))
        assert result.files_computed == 1
        assert result.warnings == ()

    def test_skips_file_with_missing_metrics(self, make_project):
        project = make_project("src/Foo.kt")
        result = C3Computer().compute(project, 30)

        assert result.files_computed == 0
        assert result.warnings == ("Skipping C3 for src/Foo.kt: missing required metrics",)
        assert result.project.files[0] == project.files[0]

    def test_zero_denominator_coverage_counts_as_uncovered(self, make_project):
        coverage = RatioMetric(MetricNames.LINE_COVERAGE, 0.0, 0.0)
        project = make_project("src/Foo.kt", metrics={"src/Foo.kt": _hotspot_metrics(coverage)})
        result = C3Computer().compute(project, 30)

        value = result.project.files[0].metric(MetricNames.C3_INDICATOR).value
        assert value == pytest.approx(c3_score(3, 30, 10, 8, 0.0, 30))
