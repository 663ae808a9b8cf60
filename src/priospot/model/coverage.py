"""Normalized coverage model shared by every coverage report dialect."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..exceptions import InvalidCoverageCounterError
from .paths import normalize_path


@dataclass(frozen=True)
class CoverageCounter:
    """Covered / total pair. Construction enforces ``0 <= covered <= total``."""

    covered: int
    total: int

    def __post_init__(self) -> None:
        if self.covered < 0:
            raise InvalidCoverageCounterError(self.covered, self.total, "covered must be >= 0")
        if self.total < 0:
            raise InvalidCoverageCounterError(self.covered, self.total, "total must be >= 0")
        if self.covered > self.total:
            raise InvalidCoverageCounterError(
                self.covered, self.total, "covered must be <= total"
            )

    def __add__(self, other: "CoverageCounter") -> "CoverageCounter":
        return CoverageCounter(self.covered + other.covered, self.total + other.total)


@dataclass(frozen=True)
class CoverageMethod:
    name: str
    signature: Optional[str] = None
    line_coverage: Optional[CoverageCounter] = None
    branch_coverage: Optional[CoverageCounter] = None


@dataclass(frozen=True)
class CoverageClass:
    name: str
    line_coverage: Optional[CoverageCounter] = None
    branch_coverage: Optional[CoverageCounter] = None
    methods: Tuple[CoverageMethod, ...] = ()


@dataclass(frozen=True)
class CoverageFile:
    path: str
    line_coverage: CoverageCounter
    branch_coverage: Optional[CoverageCounter] = None
    classes: Tuple[CoverageClass, ...] = ()


@dataclass(frozen=True)
class CoverageDocument:
    generator: str
    generated_at: str
    files: Tuple[CoverageFile, ...] = ()
    schema_version: int = 1

    def sorted_deterministic(self) -> "CoverageDocument":
        """Normalize paths and sort files, classes and methods."""
        files = []
        for f in sorted(self.files, key=lambda f: normalize_path(f.path)):
            classes = tuple(
                replace(c, methods=tuple(sorted(c.methods, key=lambda m: m.signature or m.name)))
                for c in sorted(f.classes, key=lambda c: c.name)
            )
            files.append(replace(f, path=normalize_path(f.path), classes=classes))
        return replace(self, files=tuple(files))
