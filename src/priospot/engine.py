"""Pipeline orchestrator for Priospot.

A run is a fixed sequence of stages, each taking the previous project
snapshot and returning a new one:

    inventory -> churn -> complexity -> coverage -> defaults -> C3 -> outputs

Every stage is timed. Recoverable problems (missing reports, unmatched or
ambiguous report paths, files without C3 inputs) become diagnostics on the
result; anything else propagates as a ``PriospotError``.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .compute import C3Computer, MetricDefaulter, MetricDefaults
from .config import PriospotConfig
from .ingest import (
    ChurnImporter,
    ChurnLogSource,
    ChurnOptions,
    ComplexityImporter,
    CoverageImporter,
    build_source_inventory,
    merge_churn,
)
from .logging_config import get_logger
from .model import MetricNames, PriospotDocument, Project, now_iso_timestamp
from .model.serialization import write_compat_xml, write_document
from .visualization import ReportType, SvgTreemapReporter

logger = get_logger(__name__)

DOCUMENT_FILE = "priospot.json"
COMPAT_XML_FILE = "priospot.xml"
COVERAGE_FILE = "coverage.json"
GIT_LOG_FILE = "gitlog.txt"


@dataclass(frozen=True)
class StageTiming:
    stage: str
    millis: float


@dataclass(frozen=True)
class PriospotResult:
    document_path: Path
    report_paths: Dict[ReportType, Path]
    stage_timings: Tuple[StageTiming, ...]
    diagnostics: Tuple[str, ...]
    summary: Dict[str, int]
    compat_xml_path: Optional[Path] = None
    coverage_path: Optional[Path] = None


@dataclass
class _RunState:
    timings: List[StageTiming] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        logger.debug(f"Stage {name} started")
        try:
            yield
        finally:
            millis = (time.perf_counter() - start) * 1000.0
            self.timings.append(StageTiming(name, millis))
            logger.debug(f"Stage {name} finished in {millis:.1f} ms")

    def diagnose(self, message: str) -> None:
        logger.warning(message)
        self.diagnostics.append(message)


def _count_with(project: Project, metric_name: str) -> int:
    return sum(1 for f in project.files if f.has_metric(metric_name))


def _split_existing(reports: List[Path], kind: str, fallback: str, state: _RunState) -> List[Path]:
    existing = []
    for report in reports:
        if report.exists():
            existing.append(report)
        else:
            state.diagnose(
                f"{kind} report missing, using default {fallback} for unmatched files: {report}"
            )
    return existing


class PriospotEngine:
    """Runs the full analysis for one ``PriospotConfig``.

    The importers, scorer and reporter can be swapped out; the change-log
    source in particular is replaceable so runs need not shell out to git.
    """

    def __init__(
        self,
        churn_log_source: Optional[ChurnLogSource] = None,
        reporter: Optional[SvgTreemapReporter] = None,
    ):
        self.churn_importer = ChurnImporter(churn_log_source)
        self.coverage_importer = CoverageImporter()
        self.complexity_importer = ComplexityImporter()
        self.c3_computer = C3Computer()
        self.reporter = reporter

    def run(self, config: PriospotConfig) -> PriospotResult:
        state = _RunState()
        output_dir = Path(config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        generated_at = config.deterministic_timestamp or now_iso_timestamp()
        base_path = Path(config.base_path)

        coverage_reports = _split_existing(
            list(config.coverage_reports), "Coverage", "coverage", state
        )
        complexity_reports = _split_existing(
            list(config.complexity_reports), "Complexity", "complexity", state
        )

        with state.stage("inventory"):
            project = build_source_inventory(
                config.project_name, config.project_version, base_path, config.source_roots
            )
        logger.info(f"Inventory: {len(project.files)} files")

        with state.stage("ingest-churn"):
            if config.churn_log is not None and not Path(config.churn_log).is_file():
                state.diagnose(
                    f"Churn log missing, using zero churn for all files: {config.churn_log}"
                )
                project = merge_churn(project, {}, config.churn_days)
            else:
                options = ChurnOptions(
                    days=config.churn_days,
                    churn_log=config.churn_log,
                    write_git_log_to=(
                        None if config.churn_log is not None else output_dir / GIT_LOG_FILE
                    ),
                )
                project = self.churn_importer.merge(project, options, base_path)

        with state.stage("ingest-complexity"):
            if complexity_reports:
                complexity = self.complexity_importer.combine(
                    (self.complexity_importer.parse(r) for r in complexity_reports), base_path
                )
                merged = self.complexity_importer.merge(project, complexity)
                project = merged.project
                for message in merged.diagnostics:
                    state.diagnose(message)

        with state.stage("ingest-coverage-normalize"):
            coverage_doc = self.coverage_importer.combine(
                (self.coverage_importer.normalize_report(r) for r in coverage_reports),
                generated_at,
                base_path,
            )

        with state.stage("write-coverage-json"):
            coverage_path = self.coverage_importer.write_normalized_json(
                coverage_doc, output_dir / COVERAGE_FILE
            )

        with state.stage("ingest-coverage-merge"):
            merged = self.coverage_importer.merge(project, coverage_doc)
            project = merged.project
            for message in merged.diagnostics:
                state.diagnose(message)

        complexity_from_report = _count_with(project, MetricNames.MAX_CCN)

        with state.stage("apply-defaults"):
            defaulter = MetricDefaulter(
                MetricDefaults(
                    coverage_numerator=config.default_coverage_numerator,
                    coverage_denominator=config.default_coverage_denominator,
                    max_ccn=config.default_max_ccn,
                    test_source_markers=tuple(config.test_source_markers),
                )
            )
            defaulted = defaulter.apply(project, base_path)
            project = defaulted.project
        stats = defaulted.stats
        if stats.source_derived_complexity:
            state.diagnose(
                f"Source-derived complexity applied to {stats.source_derived_complexity} files"
            )
        if stats.source_derived_ncss:
            state.diagnose(f"Source-derived NCSS applied to {stats.source_derived_ncss} files")
        if stats.fallback_complexity:
            state.diagnose(
                f"Complexity fallback (MAX-CCN={config.default_max_ccn}) applied to "
                f"{stats.fallback_complexity} files"
            )

        with state.stage("compute-c3"):
            c3 = self.c3_computer.compute(project, config.churn_days)
        for warning in c3.warnings:
            state.diagnose(warning)

        project = c3.project.sorted_deep()
        document = PriospotDocument(generated_at=generated_at, project=project)

        with state.stage("write-priospot-json"):
            document_path = write_document(document, output_dir / DOCUMENT_FILE)

        compat_xml_path = None
        if config.emit_compatibility_xml:
            with state.stage("write-compat-xml"):
                compat_xml_path = write_compat_xml(document, output_dir / COMPAT_XML_FILE)

        report_paths: Dict[ReportType, Path] = {}
        reporter = self.reporter or SvgTreemapReporter(tuple(config.test_source_markers))
        with state.stage("generate-svg-reports"):
            for report_type in ReportType:
                report_paths[report_type] = reporter.generate_interactive_treemap(
                    project, report_type, output_dir / report_type.file_name
                )

        summary = {
            "filesParsed": len(project.files),
            "filesWithChurn": _count_with(project, MetricNames.TIMES_CHANGED),
            "filesWithCoverage": _count_with(project, MetricNames.LINE_COVERAGE),
            "filesWithComplexity": _count_with(project, MetricNames.MAX_CCN),
            "filesWithC3Computed": c3.files_computed,
            "filesWithComplexityFromReport": complexity_from_report,
            "filesWithFallbackComplexity": stats.fallback_complexity,
            "filesWithComplexityFromSource": stats.source_derived_complexity,
        }
        logger.info(f"Analysis complete: {summary}")

        return PriospotResult(
            document_path=document_path,
            report_paths=report_paths,
            stage_timings=tuple(state.timings),
            diagnostics=tuple(state.diagnostics),
            summary=summary,
            compat_xml_path=compat_xml_path,
            coverage_path=coverage_path,
        )
