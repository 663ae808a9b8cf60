"""Metric values attached to files and projects.

A metric is one of three frozen record types. Each carries a ``kind`` tag
that is the only thing serialization dispatches on (see ``metric_from_dict``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple, Type, Union


class MetricNames:
    """Metric names. These strings are part of the document format."""

    LINES_ADDED = "Lines Added"
    LINES_REMOVED = "Lines Removed"
    TIMES_CHANGED = "Times Changed"
    LINES_CHANGED_INDICATOR = "Lines Changed Indicator"
    CHANGE_FREQUENCY_INDICATOR = "Change Frequency Indicator"
    CHURN_DURATION = "Churn Duration"
    NCSS = "NCSS"
    MAX_CCN = "MAX-CCN"
    LINE_COVERAGE = "Line Coverage"
    BRANCH_COVERAGE = "Branch Coverage"
    METHOD_COVERAGE = "Method Coverage"
    C3_INDICATOR = "C3 Indicator"


@dataclass(frozen=True)
class IntegerMetric:
    name: str
    value: int

    kind: ClassVar[str] = "integer"

    def numeric(self) -> float:
        return float(self.value)

    def display(self) -> str:
        return f"{self.name}: {self.value}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntegerMetric":
        return cls(name=str(data["name"]), value=int(data["value"]))


@dataclass(frozen=True)
class DecimalMetric:
    name: str
    value: float

    kind: ClassVar[str] = "decimal"

    def numeric(self) -> float:
        return float(self.value)

    def display(self) -> str:
        return f"{self.name}: {self.value:.4f}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DecimalMetric":
        return cls(name=str(data["name"]), value=float(data["value"]))


@dataclass(frozen=True)
class RatioMetric:
    name: str
    numerator: float
    denominator: float

    kind: ClassVar[str] = "ratio"

    def safe_ratio(self) -> float:
        """numerator / denominator, or 0.0 when the denominator is not positive."""
        if self.denominator <= 0.0:
            return 0.0
        return self.numerator / self.denominator

    def numeric(self) -> float:
        return self.safe_ratio()

    def display(self) -> str:
        return f"{self.name}: {self.safe_ratio() * 100:.2f}%"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "numerator": self.numerator,
            "denominator": self.denominator,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RatioMetric":
        return cls(
            name=str(data["name"]),
            numerator=float(data["numerator"]),
            denominator=float(data["denominator"]),
        )


Metric = Union[IntegerMetric, DecimalMetric, RatioMetric]

METRIC_KINDS: Dict[str, Type[Metric]] = {
    IntegerMetric.kind: IntegerMetric,
    DecimalMetric.kind: DecimalMetric,
    RatioMetric.kind: RatioMetric,
}


def metric_from_dict(data: Dict[str, Any]) -> Metric:
    """Rebuild a metric from its tagged dict form."""
    kind = data.get("kind")
    metric_type = METRIC_KINDS.get(kind)  # type: ignore[arg-type]
    if metric_type is None:
        raise ValueError(f"Unknown metric kind: {kind!r}")
    return metric_type.from_dict(data)


def sorted_metrics(metrics: Iterable[Metric]) -> Tuple[Metric, ...]:
    return tuple(sorted(metrics, key=lambda m: m.name))


def upsert_metrics(metrics: Iterable[Metric], updates: Iterable[Metric]) -> Tuple[Metric, ...]:
    """Replace metrics by name (last write wins) and return them sorted by name."""
    by_name: Dict[str, Metric] = {m.name: m for m in metrics}
    for metric in updates:
        by_name[metric.name] = metric
    return sorted_metrics(by_name.values())


def find_metric(metrics: Iterable[Metric], name: str) -> Optional[Metric]:
    for metric in metrics:
        if metric.name == name:
            return metric
    return None
