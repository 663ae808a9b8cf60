"""Canonical path handling shared by every importer.

Canonical paths use forward slashes and are relative to the project base
path whenever the file lies under it.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Union

PathLike = Union[str, Path]

DEFAULT_TEST_SOURCE_MARKERS: tuple[str, ...] = ("src/test/",)

_ABSOLUTE_RE = re.compile(r"^(/|[A-Za-z]:/)")


def normalize_path(path: PathLike) -> str:
    """Convert a path to forward-slash form, dropping a leading ``./``."""
    normalized = str(path).replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def relativize(path: PathLike, base_path: PathLike) -> str:
    """Express *path* relative to *base_path* when it lies underneath it.

    Paths outside the base (or already relative) are only normalized.
    """
    normalized = normalize_path(path)
    if not _ABSOLUTE_RE.match(normalized):
        return normalized
    base = normalize_path(Path(base_path).absolute()).rstrip("/")
    if normalized.startswith(base + "/"):
        return normalized[len(base) + 1 :]
    return normalized


def is_test_source(path: str, markers: Iterable[str] = DEFAULT_TEST_SOURCE_MARKERS) -> bool:
    """True when *path* sits under a test source root such as ``src/test/``."""
    normalized = normalize_path(path).lower()
    for marker in markers:
        marker = normalize_path(marker).lower().strip("/") + "/"
        if normalized.startswith(marker) or f"/{marker}" in normalized:
            return True
    return False
