"""Shared test fixtures for Priospot."""

import json
from pathlib import Path

import pytest

from priospot.model import FileEntry, Project

SAMPLE_KOTLIN = """package demo

class Sample {
    fun one(a: Int): Int {
        if (a > 0 && a < 10) {
            return a
        }
        return 0
    }

    fun two(items: List<Int>): Int =
        when {
            items.isEmpty() -> 0
            else -> items.sum()
        }
}
"""

BAR_KOTLIN = """package demo

class Bar {
    fun bar(x: Int) = if (x > 0) 1 else 0
}
"""

FOO_TEST_KOTLIN = """package demo

class FooTest {
    fun test() {}
}
"""

FOO_PATH = "src/main/kotlin/com/example/Foo.kt"
BAR_PATH = "src/main/kotlin/com/example/Bar.kt"
FOO_TEST_PATH = "src/test/kotlin/com/example/FooTest.kt"


@pytest.fixture
def make_project():
    """Build a Project from paths, optionally with metrics per path."""

    def _make(*paths, metrics=None, base_path="/repo"):
        metrics = metrics or {}
        files = tuple(
            FileEntry(name=p.rsplit("/", 1)[-1], path=p, metrics=tuple(metrics.get(p, ())))
            for p in paths
        )
        return Project(name="sample", version=None, base_path=base_path, files=files)

    return _make


@pytest.fixture
def kotlin_repo(tmp_path: Path) -> Path:
    """A small repository with two production sources and one test source."""
    for rel, content in (
        (FOO_PATH, SAMPLE_KOTLIN),
        (BAR_PATH, BAR_KOTLIN),
        (FOO_TEST_PATH, FOO_TEST_KOTLIN),
    ):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return tmp_path


@pytest.fixture
def write_json(tmp_path: Path):
    def _write(name, payload) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def coverage_payload():
    """Canonical coverage JSON for ``(path, covered, total)`` entries."""

    def _payload(*entries):
        return {
            "schemaVersion": 1,
            "generator": "coverageReport",
            "generatedAt": "2026-02-28T00:00:00Z",
            "files": [
                {"path": path, "lineCoverage": {"covered": covered, "total": total}}
                for path, covered, total in entries
            ],
        }

    return _payload
