"""Build the initial file inventory every metric attaches to."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional

from ..logging_config import get_logger
from ..model import FileEntry, Project, normalize_path

logger = get_logger(__name__)


def _canonical_path(path: Path, base_path: Path) -> str:
    try:
        return normalize_path(path.relative_to(base_path))
    except ValueError:
        return normalize_path(path.resolve())


def build_source_inventory(
    project_name: str,
    project_version: Optional[str],
    base_path: Path,
    source_roots: Iterable[Path],
) -> Project:
    """Walk every source root and list its regular files.

    Paths are made relative to *base_path* when possible. A path seen under
    two overlapping roots keeps its first entry. Missing roots are skipped.
    """
    base = Path(base_path).absolute()
    files: Dict[str, FileEntry] = {}

    for root in source_roots:
        root = Path(root).absolute()
        if not root.exists():
            logger.warning("Source root does not exist, skipping: %s", root)
            continue

        for path in sorted(root.rglob("*")):
            if not path.is_file():
                continue
            canonical = _canonical_path(path, base)
            if canonical not in files:
                files[canonical] = FileEntry(name=path.name, path=canonical)

    logger.debug("Inventory built with %d files", len(files))
    return Project(
        name=project_name,
        version=project_version,
        base_path=normalize_path(base.resolve()),
        files=tuple(files[p] for p in sorted(files)),
    )
