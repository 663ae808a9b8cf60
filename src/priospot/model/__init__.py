"""Metric model, canonical paths and document serialization."""

from .coverage import (
    CoverageClass,
    CoverageCounter,
    CoverageDocument,
    CoverageFile,
    CoverageMethod,
)
from .metrics import (
    DecimalMetric,
    IntegerMetric,
    Metric,
    MetricNames,
    RatioMetric,
    metric_from_dict,
    sorted_metrics,
    upsert_metrics,
)
from .paths import is_test_source, normalize_path, relativize
from .project import (
    ClassEntry,
    ClassFlags,
    FileEntry,
    MethodEntry,
    PackageEntry,
    Position,
    PriospotDocument,
    Project,
    SupplementDeclaration,
    now_iso_timestamp,
)

__all__ = [
    "Metric",
    "IntegerMetric",
    "DecimalMetric",
    "RatioMetric",
    "MetricNames",
    "metric_from_dict",
    "sorted_metrics",
    "upsert_metrics",
    "CoverageCounter",
    "CoverageDocument",
    "CoverageFile",
    "CoverageClass",
    "CoverageMethod",
    "FileEntry",
    "ClassEntry",
    "ClassFlags",
    "MethodEntry",
    "PackageEntry",
    "Position",
    "Project",
    "PriospotDocument",
    "SupplementDeclaration",
    "now_iso_timestamp",
    "normalize_path",
    "relativize",
    "is_test_source",
]
