"""Normalize coverage reports and merge them onto a project.

Supported inputs:

* canonical JSON (``{schemaVersion, generator, generatedAt, files: [...]}``)
* JaCoCo-like XML, root ``<report>``: path is ``<package name>/<sourcefile name>``
  and coverage comes from the LINE and BRANCH counters
* Cobertura-like XML, root ``<coverage>``: one ``<class filename>`` per file,
  line coverage counted from its ``<line hits>`` elements
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..exceptions import ReportParseError, UnsupportedReportFormatError
from ..logging_config import get_logger
from ..model import (
    CoverageCounter,
    CoverageDocument,
    CoverageFile,
    MetricNames,
    Project,
    RatioMetric,
    normalize_path,
    now_iso_timestamp,
    relativize,
)
from ..model.serialization import coverage_document_from_dict, coverage_document_to_dict
from .reconcile import MergeResult, PathReconciler, merge_file_metrics

logger = get_logger(__name__)

GENERATOR = "coverageReport"


def parse_report_xml(report_path: Path) -> ET.Element:
    """Parse a report without touching any DTD or entity it references.

    Reports often declare a DOCTYPE whose DTD is not shipped next to them;
    expat never fetches external DTDs or entities, so parsing stays local.
    """
    try:
        return ET.parse(str(report_path), parser=ET.XMLParser()).getroot()
    except ET.ParseError as e:
        raise ReportParseError(report_path, str(e))


def _int_attr(node: ET.Element, name: str) -> int:
    try:
        return int(node.get(name, "0"))
    except ValueError:
        return 0


def _counter(node: ET.Element, counter_type: str) -> Optional[CoverageCounter]:
    for counter in node.iter("counter"):
        if counter.get("type") == counter_type:
            covered = _int_attr(counter, "covered")
            return CoverageCounter(covered=covered, total=covered + _int_attr(counter, "missed"))
    return None


def _parse_jacoco_like(root: ET.Element) -> List[CoverageFile]:
    files = []
    for package in root.iter("package"):
        package_name = package.get("name", "").strip("/")
        for source in package.findall("sourcefile"):
            name = source.get("name", "").strip()
            if not name:
                continue
            path = normalize_path("/".join(p for p in (package_name, name) if p))
            files.append(
                CoverageFile(
                    path=path,
                    line_coverage=_counter(source, "LINE") or CoverageCounter(0, 0),
                    branch_coverage=_counter(source, "BRANCH"),
                )
            )
    return files


def _parse_cobertura_like(root: ET.Element) -> List[CoverageFile]:
    files = []
    for klass in root.iter("class"):
        filename = normalize_path(klass.get("filename", "").strip())
        if not filename:
            continue

        lines = list(klass.iter("line"))
        covered = sum(1 for line in lines if _int_attr(line, "hits") > 0)
        files.append(
            CoverageFile(path=filename, line_coverage=CoverageCounter(covered=covered, total=len(lines)))
        )
    return files


class CoverageImporter:
    """Turn coverage reports into a ``CoverageDocument`` and merge it onto a project."""

    def normalize_report(self, report_path: Path) -> CoverageDocument:
        report_path = Path(report_path)
        suffix = report_path.suffix.lower()
        if suffix == ".json":
            return self._parse_json(report_path).sorted_deterministic()
        if suffix == ".xml":
            return self._parse_xml(report_path).sorted_deterministic()
        raise UnsupportedReportFormatError("coverage", report_path)

    def _parse_json(self, report_path: Path) -> CoverageDocument:
        try:
            data = json.loads(report_path.read_text(encoding="utf-8"))
            return coverage_document_from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            raise ReportParseError(report_path, str(e))

    def _parse_xml(self, report_path: Path) -> CoverageDocument:
        root = parse_report_xml(report_path)
        tag = root.tag.lower()
        if tag == "report":
            files = _parse_jacoco_like(root)
        elif tag == "coverage":
            files = _parse_cobertura_like(root)
        else:
            logger.warning("Unrecognized coverage XML root <%s> in %s", root.tag, report_path)
            files = []
        return CoverageDocument(
            generator=GENERATOR, generated_at=now_iso_timestamp(), files=tuple(files)
        )

    def combine(
        self,
        documents: Iterable[CoverageDocument],
        generated_at: str,
        base_path: Optional[Path] = None,
    ) -> CoverageDocument:
        """Sum line and branch counters per path across every report."""
        line: Dict[str, CoverageCounter] = {}
        branch: Dict[str, CoverageCounter] = {}

        for document in documents:
            for f in document.files:
                path = relativize(f.path, base_path) if base_path is not None else normalize_path(f.path)
                line[path] = line[path] + f.line_coverage if path in line else f.line_coverage
                if f.branch_coverage is not None:
                    branch[path] = (
                        branch[path] + f.branch_coverage if path in branch else f.branch_coverage
                    )

        files = tuple(
            CoverageFile(path=path, line_coverage=line[path], branch_coverage=branch.get(path))
            for path in line
        )
        return CoverageDocument(
            generator=GENERATOR, generated_at=generated_at, files=files
        ).sorted_deterministic()

    def merge(self, project: Project, document: CoverageDocument) -> MergeResult:
        records = {normalize_path(f.path): f for f in document.files}
        reconciliation = PathReconciler(project.paths).reconcile(records, "coverage")

        updates = {}
        for path, f in reconciliation.matched.items():
            metrics = [
                RatioMetric(
                    MetricNames.LINE_COVERAGE,
                    float(f.line_coverage.covered),
                    float(f.line_coverage.total),
                )
            ]
            if f.branch_coverage is not None:
                metrics.append(
                    RatioMetric(
                        MetricNames.BRANCH_COVERAGE,
                        float(f.branch_coverage.covered),
                        float(f.branch_coverage.total),
                    )
                )
            updates[path] = metrics

        return MergeResult(
            project=merge_file_metrics(project, updates), diagnostics=reconciliation.diagnostics
        )

    def write_normalized_json(self, document: CoverageDocument, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        payload = coverage_document_to_dict(document.sorted_deterministic())
        output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return output_path
