"""Tests for binding report keys to inventory paths."""

from priospot.ingest import PathReconciler, merge_file_metrics
from priospot.model import IntegerMetric, MetricNames

PATHS = [
    "src/main/kotlin/com/example/Foo.kt",
    "app/src/main/kotlin/com/example/Util.kt",
    "lib/src/main/kotlin/com/example/Util.kt",
]


class TestResolve:
    def test_exact(self):
        reconciler = PathReconciler(PATHS)
        assert reconciler.resolve(PATHS[0]) == PATHS[0]

    def test_unique_suffix(self):
        reconciler = PathReconciler(PATHS)
        assert reconciler.resolve("com/example/Foo.kt") == PATHS[0]

    def test_suffix_must_align_with_segment(self):
        reconciler = PathReconciler(PATHS)
        assert reconciler.resolve("example/Foo.kt") == PATHS[0]
        assert reconciler.resolve("ample/Foo.kt") is None

    def test_ambiguous_suffix(self):
        reconciler = PathReconciler(PATHS)
        assert reconciler.resolve("com/example/Util.kt") is None


class TestReconcile:
    def test_matches_and_diagnostics(self):
        records = {
            "com/example/Foo.kt": "foo",
            "com/example/Util.kt": "util",
            "com/example/Gone.kt": "gone",
        }
        result = PathReconciler(PATHS).reconcile(records, "coverage")

        assert result.matched == {PATHS[0]: "foo"}
        assert len(result.diagnostics) == 2
        assert any("ambiguous" in d and "Util.kt" in d for d in result.diagnostics)
        assert any("no matching project file" in d and "Gone.kt" in d for d in result.diagnostics)

    def test_exact_wins_over_suffix(self):
        records = {PATHS[0]: "exact", "com/example/Foo.kt": "suffix"}
        result = PathReconciler(PATHS).reconcile(records, "complexity")

        assert result.matched == {PATHS[0]: "exact"}
        assert any("already has an exact entry" in d for d in result.diagnostics)

    def test_two_suffix_keys_for_one_path_dropped(self):
        records = {"com/example/Foo.kt": 1, "example/Foo.kt": 2}
        result = PathReconciler(PATHS).reconcile(records, "coverage")

        assert result.matched == {}
        assert len(result.diagnostics) == 1
        assert PATHS[0] in result.diagnostics[0]

    def test_empty_records(self):
        result = PathReconciler(PATHS).reconcile({}, "coverage")
        assert result.matched == {}
        assert result.diagnostics == ()


class TestMergeFileMetrics:
    def test_other_files_untouched(self, make_project):
        project = make_project(*PATHS)
        merged = merge_file_metrics(project, {PATHS[1]: [IntegerMetric(MetricNames.NCSS, 9)]})

        assert merged.files[0] == project.files[0]
        assert merged.files[1].metric(MetricNames.NCSS).value == 9
        assert merged.files[2] == project.files[2]

    def test_no_updates_returns_same_project(self, make_project):
        project = make_project(*PATHS)
        assert merge_file_metrics(project, {}) is project
