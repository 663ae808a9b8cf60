"""Project model: the file inventory and everything attached to it.

Every record is a frozen dataclass. Pipeline stages never mutate a
``Project``; they build a new one with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from .metrics import Metric, find_metric, sorted_metrics, upsert_metrics


@dataclass(frozen=True)
class Position:
    line: int
    column: int


@dataclass(frozen=True)
class ClassFlags:
    is_abstract: bool = False
    is_interface: bool = False
    is_enum: bool = False
    is_static: bool = False


@dataclass(frozen=True)
class MethodEntry:
    name: str
    fully_qualified_name: str
    position: Position
    is_constructor: bool = False
    is_abstract: bool = False
    metrics: Tuple[Metric, ...] = ()


@dataclass(frozen=True)
class ClassEntry:
    name: str
    fully_qualified_name: str
    position: Position
    flags: ClassFlags = ClassFlags()
    metrics: Tuple[Metric, ...] = ()
    methods: Tuple[MethodEntry, ...] = ()

    def sorted_deep(self) -> "ClassEntry":
        return replace(
            self,
            metrics=sorted_metrics(self.metrics),
            methods=tuple(
                replace(m, metrics=sorted_metrics(m.metrics))
                for m in sorted(self.methods, key=lambda m: m.fully_qualified_name)
            ),
        )


@dataclass(frozen=True)
class FileEntry:
    """One source file. ``path`` is canonical and unique within a project."""

    name: str
    path: str
    metrics: Tuple[Metric, ...] = ()
    classes: Tuple[ClassEntry, ...] = ()

    def metric(self, name: str) -> Optional[Metric]:
        return find_metric(self.metrics, name)

    def has_metric(self, name: str) -> bool:
        return self.metric(name) is not None

    def with_metrics(self, updates: Iterable[Metric]) -> "FileEntry":
        return replace(self, metrics=upsert_metrics(self.metrics, updates))

    def sorted_deep(self) -> "FileEntry":
        return replace(
            self,
            metrics=sorted_metrics(self.metrics),
            classes=tuple(
                c.sorted_deep() for c in sorted(self.classes, key=lambda c: c.fully_qualified_name)
            ),
        )


@dataclass(frozen=True)
class PackageEntry:
    name: str
    metrics: Tuple[Metric, ...] = ()
    files: Tuple[FileEntry, ...] = ()


@dataclass(frozen=True)
class SupplementDeclaration:
    name: str
    description: str


@dataclass(frozen=True)
class Project:
    name: str
    version: Optional[str]
    base_path: str
    metrics: Tuple[Metric, ...] = ()
    files: Tuple[FileEntry, ...] = ()
    supplements: Tuple[SupplementDeclaration, ...] = ()
    packages: Tuple[PackageEntry, ...] = ()

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(f.path for f in self.files)

    def with_files(self, files: Iterable[FileEntry]) -> "Project":
        return replace(self, files=tuple(files))

    def with_metrics(self, updates: Iterable[Metric]) -> "Project":
        return replace(self, metrics=upsert_metrics(self.metrics, updates))

    def sorted_deep(self) -> "Project":
        """Order files by path and every nested list by name."""
        return replace(
            self,
            metrics=sorted_metrics(self.metrics),
            files=tuple(f.sorted_deep() for f in sorted(self.files, key=lambda f: f.path)),
            packages=tuple(sorted(self.packages, key=lambda p: p.name)),
        )


@dataclass(frozen=True)
class PriospotDocument:
    """Top-level canonical output document."""

    generated_at: str
    project: Project
    schema_version: int = 1


def now_iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
