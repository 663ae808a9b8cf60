"""Slice-and-dice treemap layout over the package hierarchy.

Files are grouped into a package tree derived from their paths. Each
package's children (sub-packages by label, then files by path) are split
recursively into two groups of roughly equal weight, cutting the longer
side of the rectangle in proportion to the first group's share. A file
weighs its NCSS (minimum 1), a package the sum of its subtree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Union

import numpy as np

from ..model import FileEntry, IntegerMetric, MetricNames

PACKAGE_ROOT_MARKERS = (
    "/src/main/kotlin/",
    "/src/test/kotlin/",
    "/src/main/java/",
    "/src/test/java/",
)

MODULE_BOX_INSET = 6.0
TOP_PACKAGE_BOX_INSET = 4.0
SUBPACKAGE_BASE_INSET = 2.4
SUBPACKAGE_STEP_DOWN = 0.3
SUBPACKAGE_MIN_INSET = 1.0
FILE_BOX_INSET = 0.8


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0

    def inset(self, amount: float) -> "Rect":
        if amount <= 0.0:
            return self
        return Rect(
            self.x + amount,
            self.y + amount,
            max(self.width - amount * 2.0, 0.0),
            max(self.height - amount * 2.0, 0.0),
        )


def file_weight(entry: FileEntry) -> float:
    ncss = entry.metric(MetricNames.NCSS)
    value = ncss.value if isinstance(ncss, IntegerMetric) else 1
    return float(max(1, value))


@dataclass
class FileLeaf:
    file: FileEntry

    @property
    def label(self) -> str:
        return self.file.name

    @property
    def weight(self) -> float:
        return file_weight(self.file)


@dataclass
class PackageNode:
    label: str
    children: Dict[str, "PackageNode"] = field(default_factory=dict)
    files: List[FileEntry] = field(default_factory=list)

    @property
    def weight(self) -> float:
        return sum(file_weight(f) for f in self.files) + sum(
            c.weight for c in self.children.values()
        )

    def items(self) -> List[Union["PackageNode", FileLeaf]]:
        """Sub-packages by label, then files by path."""
        packages: List[Union[PackageNode, FileLeaf]] = sorted(
            self.children.values(), key=lambda c: c.label
        )
        return packages + [FileLeaf(f) for f in sorted(self.files, key=lambda f: f.path)]


TreeItem = Union[PackageNode, FileLeaf]


def package_segments_for(path: str) -> List[str]:
    """Package path for a file.

    Under a conventional source root the module prefix before the root is
    kept and the root itself is dropped, so ``app/src/main/kotlin/a/b/X.kt``
    yields ``["app", "a", "b"]``. Other paths use every directory.
    """
    normalized = path.replace("\\", "/")
    marker = next((m for m in PACKAGE_ROOT_MARKERS if m in normalized), None)
    if marker is None:
        return [s for s in normalized.split("/")[:-1] if s.strip()]

    idx = normalized.index(marker)
    module_prefix = [s for s in normalized[:idx].strip("/").split("/") if s.strip()]
    package_tail = [s for s in normalized[idx + len(marker) :].split("/")[:-1] if s.strip()]
    return module_prefix + package_tail


def build_tree(files: Iterable[FileEntry]) -> PackageNode:
    root = PackageNode(label="root")
    for entry in files:
        current = root
        for segment in package_segments_for(entry.path):
            current = current.children.setdefault(segment, PackageNode(segment))
        current.files.append(entry)
    return root


def split_index(weights: Sequence[float]) -> int:
    """First position where the running weight reaches half the total.

    The result is clamped to ``[1, len(weights) - 1]`` so both halves are
    non-empty.
    """
    cumulative = np.cumsum(np.asarray(weights, dtype=float))
    half = max(float(cumulative[-1]), 1.0) / 2.0
    split = int(np.searchsorted(cumulative, half, side="left")) + 1
    return min(max(split, 1), len(weights) - 1)


def partition(items: Sequence[TreeItem], rect: Rect) -> List[Rect]:
    """One rectangle per item, in item order, tiling *rect* exactly."""
    out: List[Rect] = []
    if items:
        _partition(list(items), [item.weight for item in items], rect, out)
    return out


def _partition(items: List[TreeItem], weights: List[float], rect: Rect, out: List[Rect]) -> None:
    if len(items) == 1:
        out.append(rect)
        return

    total = max(sum(weights), 1.0)
    split = split_index(weights)
    ratio = sum(weights[:split]) / total

    if rect.width >= rect.height:
        left_width = rect.width * ratio
        first = Rect(rect.x, rect.y, left_width, rect.height)
        second = Rect(rect.x + left_width, rect.y, rect.width - left_width, rect.height)
    else:
        top_height = rect.height * ratio
        first = Rect(rect.x, rect.y, rect.width, top_height)
        second = Rect(rect.x, rect.y + top_height, rect.width, rect.height - top_height)

    _partition(items[:split], weights[:split], first, out)
    _partition(items[split:], weights[split:], second, out)


def package_inset_for_depth(depth: int) -> float:
    if depth <= 0:
        return 0.0
    if depth == 1:
        return MODULE_BOX_INSET
    if depth == 2:
        return TOP_PACKAGE_BOX_INSET
    return max(SUBPACKAGE_BASE_INSET - (depth - 3) * SUBPACKAGE_STEP_DOWN, SUBPACKAGE_MIN_INSET)


@dataclass(frozen=True)
class PackageBox:
    key: str
    label: str
    depth: int
    rect: Rect


@dataclass(frozen=True)
class FileCell:
    file: FileEntry
    package_key: str
    rect: Rect


@dataclass
class TreemapLayout:
    packages: List[PackageBox] = field(default_factory=list)
    cells: List[FileCell] = field(default_factory=list)


def layout_treemap(root: PackageNode, rect: Rect, inset: bool = True) -> TreemapLayout:
    """Lay out the whole tree inside *rect*.

    With ``inset=False`` no package or file padding is applied and the
    file cells tile *rect* exactly.
    """
    layout = TreemapLayout()
    _layout_node(root, rect, 0, "", inset, layout)
    return layout


def _layout_node(
    node: PackageNode, rect: Rect, depth: int, package_key: str, inset: bool, layout: TreemapLayout
) -> None:
    if rect.is_empty:
        return
    content = rect.inset(package_inset_for_depth(depth)) if inset else rect
    if content.is_empty:
        return

    if depth > 0:
        layout.packages.append(
            PackageBox(key=package_key, label=node.label, depth=depth, rect=content)
        )

    items = node.items()
    for item, sub_rect in zip(items, partition(items, content)):
        if isinstance(item, PackageNode):
            child_key = f"{package_key}/{item.label}" if package_key else item.label
            _layout_node(item, sub_rect, depth + 1, child_key, inset, layout)
            continue
        drawn = sub_rect.inset(FILE_BOX_INSET) if inset else sub_rect
        if not drawn.is_empty:
            layout.cells.append(FileCell(file=item.file, package_key=package_key, rect=drawn))
