"""Render a project as a self-contained interactive SVG treemap.

The drawing has two parts: the treemap on the left and a details panel on
the right. Clicking a file cell fills the panel from the cell's ``data-*``
attributes and highlights its enclosing package boxes. A checkbox switches
between the full view and a view with test sources removed.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

from ..logging_config import get_logger
from ..model import (
    DecimalMetric,
    FileEntry,
    IntegerMetric,
    Metric,
    MetricNames,
    Project,
    RatioMetric,
    is_test_source,
)
from ..model.paths import DEFAULT_TEST_SOURCE_MARKERS
from ..model.serialization import xml_escape
from .treemap import FileCell, PackageBox, Rect, build_tree, layout_treemap

logger = get_logger(__name__)

WIDTH = 1600
HEIGHT = 900
PANEL_WIDTH = 420
TREEMAP_WIDTH = WIDTH - PANEL_WIDTH
PANEL_TEXT_X = TREEMAP_WIDTH + 30

METRICS_SEPARATOR = ";;"
MISSING_FILL = "#b0b0b0"
DEFAULT_STROKE = "#111"

GOOD_FILL = "#2e7d32"
WATCH_FILL = "#f9a825"
RISK_FILL = "#c62828"
CRITICAL_FILL = "#000000"
CRITICAL_STROKE = "#ff0000"

COMPLEXITY_SCALE_MAX = 30.0
CHURN_SCALE_MAX = 25.0


class ReportType(str, Enum):
    PRIOSPOT = "priospot"
    COVERAGE = "coverage"
    COMPLEXITY = "complexity"
    CHURN = "churn"

    @property
    def primary_metric(self) -> str:
        return _PRIMARY_METRIC[self]

    @property
    def file_name(self) -> str:
        return f"{self.value}-interactive-treemap.svg"


_PRIMARY_METRIC = {
    ReportType.PRIOSPOT: MetricNames.C3_INDICATOR,
    ReportType.COVERAGE: MetricNames.LINE_COVERAGE,
    ReportType.COMPLEXITY: MetricNames.MAX_CCN,
    ReportType.CHURN: MetricNames.TIMES_CHANGED,
}


class LegendItem(NamedTuple):
    label: str
    fill: str
    stroke: str = DEFAULT_STROKE


# ── Colours ──────────────────────────────────────────────────────────


def c3_color(c3: Optional[float]) -> Tuple[str, str]:
    """Fill and stroke for a C3 value."""
    if c3 is None:
        return MISSING_FILL, DEFAULT_STROKE
    if c3 < 0.3:
        return GOOD_FILL, DEFAULT_STROKE
    if c3 < 0.6:
        return WATCH_FILL, DEFAULT_STROKE
    if c3 < 0.9:
        return RISK_FILL, DEFAULT_STROKE
    return CRITICAL_FILL, CRITICAL_STROKE


def coverage_color(ratio: Optional[float]) -> str:
    if ratio is None:
        return MISSING_FILL
    if ratio >= 0.8:
        return GOOD_FILL
    if ratio >= 0.5:
        return WATCH_FILL
    return RISK_FILL


def red_scale(value: Optional[float], max_value: float) -> str:
    """White-to-red ramp, clamped at *max_value*."""
    ratio = min(max(value or 0.0, 0.0), max_value) / max_value
    shade = int(220 - ratio * 170)
    return f"#{255:02x}{shade:02x}{shade:02x}"


def _value(entry: FileEntry, name: str, metric_type: type) -> Optional[float]:
    metric = entry.metric(name)
    if not isinstance(metric, metric_type):
        return None
    return metric.numeric()


def fill_and_stroke(entry: FileEntry, report_type: ReportType) -> Tuple[str, str]:
    if report_type is ReportType.PRIOSPOT:
        return c3_color(_value(entry, MetricNames.C3_INDICATOR, DecimalMetric))
    if report_type is ReportType.COVERAGE:
        return coverage_color(_value(entry, MetricNames.LINE_COVERAGE, RatioMetric)), DEFAULT_STROKE
    if report_type is ReportType.COMPLEXITY:
        value = _value(entry, MetricNames.MAX_CCN, IntegerMetric)
        return red_scale(value, COMPLEXITY_SCALE_MAX), DEFAULT_STROKE
    value = _value(entry, MetricNames.TIMES_CHANGED, IntegerMetric)
    return red_scale(value, CHURN_SCALE_MAX), DEFAULT_STROKE


def legend_items(report_type: ReportType) -> List[LegendItem]:
    if report_type is ReportType.PRIOSPOT:
        return [
            LegendItem("C3 < 0.30 (Good)", GOOD_FILL),
            LegendItem("0.30 <= C3 < 0.60 (Watch)", WATCH_FILL),
            LegendItem("0.60 <= C3 < 0.90 (Risk)", RISK_FILL),
            LegendItem("C3 >= 0.90 (Critical)", CRITICAL_FILL, CRITICAL_STROKE),
            LegendItem("Metric missing", MISSING_FILL),
        ]
    if report_type is ReportType.COVERAGE:
        return [
            LegendItem("Coverage >= 80%", GOOD_FILL),
            LegendItem("50% <= Coverage < 80%", WATCH_FILL),
            LegendItem("Coverage < 50%", RISK_FILL),
            LegendItem("Metric missing", MISSING_FILL),
        ]
    if report_type is ReportType.COMPLEXITY:
        scale, noun = COMPLEXITY_SCALE_MAX, "complexity"
    else:
        scale, noun = CHURN_SCALE_MAX, "churn"
    return [
        LegendItem(f"Lower {noun}", red_scale(0.0, scale)),
        LegendItem(f"Medium {noun}", red_scale(scale / 2.0, scale)),
        LegendItem(f"Higher {noun}", red_scale(scale, scale)),
    ]


# ── Elements ─────────────────────────────────────────────────────────


def primary_display(entry: FileEntry, report_type: ReportType) -> str:
    metric: Optional[Metric] = entry.metric(report_type.primary_metric)
    return metric.display() if metric is not None else "metric: n/a"


def metrics_display(entry: FileEntry) -> str:
    return METRICS_SEPARATOR.join(m.display() for m in sorted(entry.metrics, key=lambda m: m.name))


def _package_stroke(depth: int) -> str:
    return {0: "#888", 1: "#777", 2: "#666"}.get(depth % 4, "#555")


def _package_element(box: PackageBox) -> str:
    r = box.rect
    stroke = _package_stroke(box.depth)
    key = xml_escape(box.key)
    return (
        f'<g><rect class="package-box" x="{r.x}" y="{r.y}" width="{r.width}" height="{r.height}" '
        f'fill="none" stroke="{stroke}" stroke-width="1.4" data-package-key="{key}" '
        f'data-stroke="{stroke}" pointer-events="none"><title>{key or xml_escape(box.label)}</title>'
        f"</rect></g>"
    )


def _file_element(cell: FileCell, report_type: ReportType) -> str:
    r = cell.rect
    entry = cell.file
    fill, stroke = fill_and_stroke(entry, report_type)
    path = xml_escape(entry.path)
    primary = xml_escape(primary_display(entry, report_type))
    return (
        f'<g><rect class="treemap-cell" x="{r.x}" y="{r.y}" width="{r.width}" height="{r.height}" '
        f'fill="{fill}" stroke="{stroke}" stroke-width="1" data-file="{path}" '
        f'data-primary="{primary}" data-metrics="{xml_escape(metrics_display(entry))}" '
        f'data-package-key="{xml_escape(cell.package_key)}" data-stroke="{stroke}" '
        f'onclick="showDetails(this)"><title>{path} | {primary}</title></rect></g>'
    )


def _legend_elements(report_type: ReportType) -> List[str]:
    items = legend_items(report_type)
    x = PANEL_TEXT_X
    y_start = HEIGHT - len(items) * 24 - 56
    elements = [
        f'<text x="{x}" y="{y_start}" font-family="monospace" font-size="13" fill="#555">Legend</text>'
    ]
    for index, item in enumerate(items):
        y = y_start + 18 + index * 24
        elements.append(
            f'<rect x="{x}" y="{y}" width="14" height="14" fill="{item.fill}" '
            f'stroke="{item.stroke}" stroke-width="1"/>'
        )
        elements.append(
            f'<text x="{x + 22}" y="{y + 11}" font-family="monospace" font-size="12" '
            f'fill="#222">{xml_escape(item.label)}</text>'
        )
    return elements


def _view(view_id: str, files: List[FileEntry], report_type: ReportType, visible: bool) -> str:
    layout = layout_treemap(build_tree(files), Rect(0.0, 0.0, float(TREEMAP_WIDTH), float(HEIGHT)))
    display = "" if visible else ' display="none"'
    body = [_file_element(cell, report_type) for cell in layout.cells]
    body.extend(_package_element(box) for box in layout.packages)
    return f'<g id="{view_id}"{display}>\n' + "\n".join(body) + "\n</g>"


_SCRIPT = """
function clearChildren(node) {
  while (node && node.firstChild) { node.removeChild(node.firstChild); }
}

function setLines(id, lines, lineHeight) {
  var target = document.getElementById(id);
  if (!target) return;
  clearChildren(target);
  for (var i = 0; i < lines.length; i++) {
    var tspan = document.createElementNS('http://www.w3.org/2000/svg', 'tspan');
    tspan.setAttribute('x', '%(x)s');
    tspan.setAttribute('dy', i === 0 ? '0' : String(lineHeight));
    tspan.textContent = lines[i];
    target.appendChild(tspan);
  }
}

function wrap(text, maxChars, maxLines) {
  var value = (text && text.length) ? text : 'n/a';
  var lines = [];
  for (var i = 0; i < value.length; i += maxChars) { lines.push(value.substring(i, i + maxChars)); }
  if (lines.length > maxLines) {
    lines = lines.slice(0, maxLines);
    lines[maxLines - 1] = lines[maxLines - 1].substring(0, maxChars - 3) + '...';
  }
  return lines;
}

function showDetails(node) {
  var packageKey = node.getAttribute('data-package-key') || '';
  var selectedParts = packageKey.length ? packageKey.split('/') : [];
  var metricsRaw = node.getAttribute('data-metrics') || '';

  setLines('detail-file', wrap(node.getAttribute('data-file'), 43, 4), 16);
  setLines('detail-primary', wrap(node.getAttribute('data-primary'), 43, 2), 16);
  setLines('detail-metrics', metricsRaw.length ? metricsRaw.split('%(sep)s') : [], 18);

  var cells = document.getElementsByClassName('treemap-cell');
  for (var i = 0; i < cells.length; i++) {
    cells[i].setAttribute('stroke', cells[i].getAttribute('data-stroke') || '#111');
    cells[i].setAttribute('stroke-width', '1');
  }
  var boxes = document.getElementsByClassName('package-box');
  var palette = ['#1a4dd9', '#3567e0', '#5888e8', '#7da7ef', '#a6c5f6', '#d0e0fb'];
  for (var k = 0; k < boxes.length; k++) {
    var key = boxes[k].getAttribute('data-package-key') || '';
    boxes[k].setAttribute('stroke', boxes[k].getAttribute('data-stroke') || '#666');
    boxes[k].setAttribute('stroke-width', '1.4');
    if (!key.length || !(packageKey === key || packageKey.indexOf(key + '/') === 0)) continue;
    var keyParts = key.split('/');
    var distance = selectedParts.length - keyParts.length;
    if (keyParts.length === 1) {
      boxes[k].setAttribute('stroke', '#f57c00');
      boxes[k].setAttribute('stroke-width', '3.4');
    } else {
      boxes[k].setAttribute('stroke', palette[Math.min(distance, palette.length - 1)]);
      boxes[k].setAttribute('stroke-width', distance === 0 ? '3.2' : '2.4');
    }
  }

  node.setAttribute('stroke', '#1a4dd9');
  node.setAttribute('stroke-width', '3');
}

function toggleTestClasses() {
  var checkbox = document.getElementById('test-filter-checkbox');
  var showTests = !checkbox || checkbox.checked;
  document.getElementById('view-all').setAttribute('display', showTests ? 'inline' : 'none');
  document.getElementById('view-no-tests').setAttribute('display', showTests ? 'none' : 'inline');
}
"""


class SvgTreemapReporter:
    """Writes one interactive treemap SVG per report type."""

    def __init__(self, test_source_markers: Tuple[str, ...] = DEFAULT_TEST_SOURCE_MARKERS):
        self.test_source_markers = test_source_markers

    def render(self, project: Project, report_type: ReportType) -> str:
        files = list(project.files)
        production = [f for f in files if not is_test_source(f.path, self.test_source_markers)]
        script = _SCRIPT % {"x": PANEL_TEXT_X, "sep": METRICS_SEPARATOR}
        x = PANEL_TEXT_X

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{WIDTH}" height="{HEIGHT}" '
            f'viewBox="0 0 {WIDTH} {HEIGHT}">',
            "<style>",
            "  .treemap-cell { cursor: pointer; }",
            "  .treemap-cell:hover { opacity: 0.88; }",
            "</style>",
            f"<script><![CDATA[{script}]]></script>",
            f'<rect x="0" y="0" width="{TREEMAP_WIDTH}" height="{HEIGHT}" fill="#f8f8f8"/>',
            _view("view-all", files, report_type, visible=True),
            _view("view-no-tests", production, report_type, visible=False),
            f'<rect x="{TREEMAP_WIDTH}" y="0" width="{PANEL_WIDTH}" height="{HEIGHT}" '
            f'fill="#f0f0f0" stroke="#c0c0c0"/>',
            f'<text x="{x}" y="30" font-family="monospace" font-size="18" fill="#111">File Details</text>',
            f'<foreignObject x="{x}" y="40" width="360" height="24">'
            f'<label xmlns="http://www.w3.org/1999/xhtml" style="font-family: monospace; font-size: 12px;">'
            f'<input type="checkbox" id="test-filter-checkbox" checked="checked" '
            f'onchange="toggleTestClasses()"/> Show test classes</label></foreignObject>',
            f'<text x="{x}" y="84" font-family="monospace" font-size="13" fill="#555">Selected File</text>',
            f'<text id="detail-file" x="{x}" y="104" font-family="monospace" font-size="12" '
            f'fill="#111">Click a file box</text>',
            f'<text x="{x}" y="180" font-family="monospace" font-size="13" fill="#555">Primary Metric</text>',
            f'<text id="detail-primary" x="{x}" y="200" font-family="monospace" font-size="12" '
            f'fill="#111">n/a</text>',
            f'<text x="{x}" y="240" font-family="monospace" font-size="13" fill="#555">All Metrics</text>',
            f'<text id="detail-metrics" x="{x}" y="264" font-family="monospace" font-size="12" '
            f'fill="#111"></text>',
        ]
        parts.extend(_legend_elements(report_type))
        parts.append("</svg>")
        return "\n".join(parts) + "\n"

    def generate_interactive_treemap(
        self, project: Project, report_type: ReportType, output: Path
    ) -> Path:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(self.render(project, report_type), encoding="utf-8")
        logger.debug(f"Wrote {report_type.value} treemap to {output}")
        return output
