"""Tests for canonical path handling."""

from priospot.model import is_test_source, normalize_path, relativize


class TestNormalizePath:
    def test_backslashes(self):
        assert normalize_path("src\\main\\kotlin\\Foo.kt") == "src/main/kotlin/Foo.kt"

    def test_leading_dot_slash(self):
        assert normalize_path("./src/Foo.kt") == "src/Foo.kt"
        assert normalize_path("././src/Foo.kt") == "src/Foo.kt"


class TestRelativize:
    def test_absolute_under_base(self):
        assert relativize("/repo/src/Foo.kt", "/repo") == "src/Foo.kt"

    def test_absolute_outside_base(self):
        assert relativize("/elsewhere/src/Foo.kt", "/repo") == "/elsewhere/src/Foo.kt"

    def test_prefix_is_not_a_parent(self):
        assert relativize("/repository/Foo.kt", "/repo") == "/repository/Foo.kt"

    def test_relative_paths_untouched(self):
        assert relativize("com/example/Foo.kt", "/repo") == "com/example/Foo.kt"


class TestIsTestSource:
    def test_root_marker(self):
        assert is_test_source("src/test/kotlin/FooTest.kt")

    def test_nested_module_marker(self):
        assert is_test_source("app/src/test/kotlin/FooTest.kt")

    def test_case_insensitive(self):
        assert is_test_source("App/SRC/Test/kotlin/FooTest.kt")

    def test_production_source(self):
        assert not is_test_source("src/main/kotlin/TestHelpers.kt")
        assert not is_test_source("mysrc/test/Foo.kt")

    def test_custom_markers(self):
        assert is_test_source("tests/test_engine.py", markers=("tests/",))
        assert not is_test_source("src/test/Foo.kt", markers=("tests/",))
