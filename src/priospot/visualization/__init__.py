"""Visualization layer: treemap layout and interactive SVG reports."""

from .svg import ReportType, SvgTreemapReporter
from .treemap import Rect, build_tree, layout_treemap, package_segments_for, partition

__all__ = [
    "ReportType",
    "SvgTreemapReporter",
    "Rect",
    "build_tree",
    "layout_treemap",
    "package_segments_for",
    "partition",
]
