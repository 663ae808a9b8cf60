"""Attach externally reported per-file records to inventory entries.

A report key binds to a project path by exact match or, failing that, by
unique suffix: the project paths equal to the key or ending in ``/<key>``
must number exactly one. Anything else is dropped with a diagnostic, so a
file name shared by two source roots never absorbs the wrong record.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Generic, Iterable, List, Mapping, Sequence, Tuple, TypeVar

from ..model import Metric, Project

T = TypeVar("T")


@dataclass(frozen=True)
class Reconciliation(Generic[T]):
    """Records keyed by the project path they bound to, plus what was dropped."""

    matched: Dict[str, T]
    diagnostics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MergeResult:
    """A merge stage's new project snapshot and its per-file diagnostics."""

    project: Project
    diagnostics: Tuple[str, ...] = field(default_factory=tuple)


class PathReconciler:
    """Resolve report keys against a fixed set of project paths."""

    def __init__(self, project_paths: Iterable[str]):
        self._paths = frozenset(project_paths)
        self._by_basename: Dict[str, List[str]] = defaultdict(list)
        for path in sorted(self._paths):
            self._by_basename[path.rsplit("/", 1)[-1]].append(path)

    def candidates(self, key: str) -> List[str]:
        basename = key.rsplit("/", 1)[-1]
        return [
            p for p in self._by_basename.get(basename, []) if p == key or p.endswith("/" + key)
        ]

    def resolve(self, key: str) -> str | None:
        if key in self._paths:
            return key
        found = self.candidates(key)
        return found[0] if len(found) == 1 else None

    def reconcile(self, records: Mapping[str, T], kind: str) -> Reconciliation[T]:
        diagnostics: List[str] = []
        exact: Dict[str, T] = {}
        by_suffix: Dict[str, List[str]] = defaultdict(list)

        for key in sorted(records):
            if key in self._paths:
                exact[key] = records[key]
                continue
            found = self.candidates(key)
            if len(found) == 1:
                by_suffix[found[0]].append(key)
            elif found:
                diagnostics.append(
                    f"Dropped {kind} entry '{key}': ambiguous, matches {len(found)} files "
                    f"({', '.join(found)})"
                )
            else:
                diagnostics.append(f"Dropped {kind} entry '{key}': no matching project file")

        matched = dict(exact)
        for path in sorted(by_suffix):
            keys = by_suffix[path]
            if path in exact:
                for key in keys:
                    diagnostics.append(
                        f"Dropped {kind} entry '{key}': '{path}' already has an exact entry"
                    )
            elif len(keys) == 1:
                matched[path] = records[keys[0]]
            else:
                diagnostics.append(
                    f"Dropped {kind} entries {', '.join(repr(k) for k in keys)}: "
                    f"all resolve to '{path}'"
                )

        return Reconciliation(matched=matched, diagnostics=tuple(diagnostics))


def merge_file_metrics(project: Project, updates: Mapping[str, Sequence[Metric]]) -> Project:
    """Upsert metrics onto the files named in *updates*; other files are untouched."""
    if not updates:
        return project
    files = []
    for entry in project.files:
        new_metrics = updates.get(entry.path)
        files.append(entry.with_metrics(new_metrics) if new_metrics else entry)
    return project.with_files(files)
