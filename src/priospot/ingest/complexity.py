"""Import per-file size and complexity from lint reports.

Two XML shapes are read from the same document: checkstyle-like
``<file name><error source message line/></file>`` blocks and the older
``<finding file id metric/>`` elements. JSON reports are a list of
``{"path", "ncss", "maxCcn"}`` objects.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..exceptions import ReportParseError, UnsupportedReportFormatError
from ..logging_config import get_logger
from ..model import IntegerMetric, MetricNames, Project, normalize_path, relativize
from .coverage import parse_report_xml
from .reconcile import MergeResult, PathReconciler, merge_file_metrics

logger = get_logger(__name__)

CCN_MESSAGE_RE = re.compile(r"complexity:\s*(\d+)")
LONG_METHOD_MESSAGE_RE = re.compile(r"too long\s*\((\d+)\)")
FIRST_INT_RE = re.compile(r"(\d+)")

SIZE_RULES = ("LargeClass", "TooManyFunctions", "ComplexCondition")
LEGACY_SIZE_RULES = ("LongMethod", "LargeClass", "ComplexCondition")


@dataclass(frozen=True)
class FileComplexity:
    path: str
    ncss: int
    max_ccn: int


class _Accumulator:
    def __init__(self) -> None:
        self.ncss = 0
        self.max_ccn = 0
        self.max_observed_line = 1

    def result(self, path: str) -> FileComplexity:
        ncss = self.ncss if self.ncss > 0 else self.max_observed_line
        return FileComplexity(path=path, ncss=max(ncss, 1), max_ccn=max(self.max_ccn, 1))


def _first_int(pattern: re.Pattern, text: str, default: int = 1) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else default


def _to_int(value: Optional[str], default: int = 1) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _matches_rule(rule: str, names: Iterable[str]) -> bool:
    rule = rule.lower()
    return any(name.lower() in rule for name in names)


class ComplexityImporter:
    """Parse complexity reports and merge NCSS / MAX-CCN onto a project."""

    def parse(self, report_path: Path) -> List[FileComplexity]:
        report_path = Path(report_path)
        suffix = report_path.suffix.lower()
        if suffix == ".xml":
            return self._parse_lint_xml(report_path)
        if suffix == ".json":
            return self._parse_json(report_path)
        raise UnsupportedReportFormatError("complexity", report_path)

    def _parse_json(self, report_path: Path) -> List[FileComplexity]:
        try:
            items = json.loads(report_path.read_text(encoding="utf-8"))
            return [
                FileComplexity(
                    path=normalize_path(item["path"]),
                    ncss=int(item["ncss"]),
                    max_ccn=int(item["maxCcn"]),
                )
                for item in items
            ]
        except (ValueError, KeyError, TypeError) as e:
            raise ReportParseError(report_path, str(e))

    def _parse_lint_xml(self, report_path: Path) -> List[FileComplexity]:
        root = parse_report_xml(report_path)
        aggregate: Dict[str, _Accumulator] = {}

        for file_node in root.iter("file"):
            path = normalize_path(file_node.get("name", "").strip())
            if not path:
                continue
            current = aggregate.setdefault(path, _Accumulator())

            for error in file_node.iter("error"):
                source = error.get("source", "")
                message = error.get("message", "")
                line = _to_int(error.get("line"))
                current.max_observed_line = max(current.max_observed_line, line)

                if _matches_rule(source, ("CyclomaticComplexMethod",)):
                    ccn = _first_int(CCN_MESSAGE_RE, message)
                    current.max_ccn = max(current.max_ccn, ccn)
                elif _matches_rule(source, ("LongMethod",)):
                    current.ncss += _first_int(LONG_METHOD_MESSAGE_RE, message)
                elif _matches_rule(source, SIZE_RULES):
                    current.ncss += _first_int(FIRST_INT_RE, message)

        for finding in root.iter("finding"):
            file_attr = finding.get("file", "")
            if not file_attr.strip():
                continue
            current = aggregate.setdefault(normalize_path(file_attr), _Accumulator())
            rule = finding.get("id", "")
            value = _to_int(finding.get("metric"))

            if _matches_rule(rule, ("CyclomaticComplexMethod",)):
                current.max_ccn = max(current.max_ccn, value)
            elif _matches_rule(rule, LEGACY_SIZE_RULES):
                current.ncss += value

        logger.debug("Parsed %d files from lint report %s", len(aggregate), report_path)
        return [acc.result(path) for path, acc in aggregate.items()]

    def combine(
        self, reports: Iterable[List[FileComplexity]], base_path: Optional[Path] = None
    ) -> List[FileComplexity]:
        """Sum NCSS and keep the highest MAX-CCN per path across reports."""
        merged: Dict[str, FileComplexity] = {}
        for report in reports:
            for item in report:
                path = relativize(item.path, base_path) if base_path is not None else item.path
                previous = merged.get(path)
                if previous is None:
                    merged[path] = FileComplexity(path, item.ncss, item.max_ccn)
                else:
                    merged[path] = FileComplexity(
                        path, previous.ncss + item.ncss, max(previous.max_ccn, item.max_ccn)
                    )
        return [merged[path] for path in sorted(merged)]

    def merge(self, project: Project, complexity: Iterable[FileComplexity]) -> MergeResult:
        records = {item.path: item for item in complexity}
        reconciliation = PathReconciler(project.paths).reconcile(records, "complexity")
        updates = {
            path: (
                IntegerMetric(MetricNames.NCSS, item.ncss),
                IntegerMetric(MetricNames.MAX_CCN, item.max_ccn),
            )
            for path, item in reconciliation.matched.items()
        }
        return MergeResult(
            project=merge_file_metrics(project, updates), diagnostics=reconciliation.diagnostics
        )
