"""Tests for configuration validation and layered loading."""

import os
from pathlib import Path

import pytest

from priospot.config import PriospotConfig, load_config
from priospot.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test from an empty directory with no PRIOSPOT_* variables."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("PRIOSPOT_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestValidation:
    def test_defaults(self, tmp_path):
        config = PriospotConfig(project_name="demo", source_roots=["src"])
        assert config.churn_days == 30
        assert config.default_max_ccn == 1000
        assert config.test_source_markers == ["src/test/"]
        assert config.emit_compatibility_xml is False

    @pytest.mark.parametrize(
        "overrides,key",
        [
            ({"project_name": "  "}, "project_name"),
            ({"source_roots": []}, "source_roots"),
            ({"churn_days": 0}, "churn_days"),
            ({"default_coverage_denominator": 0.0}, "default_coverage_denominator"),
            ({"default_coverage_numerator": 2.0}, "default_coverage_numerator"),
            ({"default_coverage_numerator": -0.1}, "default_coverage_numerator"),
            ({"default_max_ccn": 0}, "default_max_ccn"),
        ],
    )
    def test_invalid_values(self, overrides, key):
        settings = {"project_name": "demo", "source_roots": ["src"]}
        settings.update(overrides)
        with pytest.raises(InvalidConfigError) as excinfo:
            PriospotConfig(**settings)
        assert excinfo.value.key == key

    def test_relative_paths_resolved_against_base(self, tmp_path):
        config = PriospotConfig(
            project_name="demo",
            base_path=tmp_path / "repo",
            source_roots=["src/main/kotlin", tmp_path / "abs"],
            coverage_reports=["build/jacoco.xml"],
            churn_log="gitlog.txt",
        )
        repo = tmp_path / "repo"
        assert config.source_roots == [repo / "src/main/kotlin", tmp_path / "abs"]
        assert config.coverage_reports == [repo / "build/jacoco.xml"]
        assert config.churn_log == repo / "gitlog.txt"
        assert config.output_dir == repo / "build/priospot"

    def test_base_path_defaults_to_cwd(self, tmp_path):
        config = PriospotConfig(project_name="demo", source_roots=["src"])
        assert config.base_path == Path.cwd()
        assert config.source_roots == [Path.cwd() / "src"]


class TestLoadConfig:
    def test_overrides_only(self):
        config = load_config(project_name="demo", source_roots=["src"], churn_days=None)
        assert config.project_name == "demo"
        assert config.churn_days == 30

    def test_project_toml_table(self, tmp_path):
        (tmp_path / "priospot.toml").write_text(
            '[priospot]\nproject_name = "from-toml"\nsource_roots = ["src"]\nchurn_days = 14\n',
            encoding="utf-8",
        )
        config = load_config()
        assert config.project_name == "from-toml"
        assert config.churn_days == 14

    def test_explicit_file_top_level(self, tmp_path):
        (tmp_path / "priospot.toml").write_text(
            'project_name = "project"\nsource_roots = ["src"]\n', encoding="utf-8"
        )
        explicit = tmp_path / "ci.toml"
        explicit.write_text('project_name = "ci"\ndefault_max_ccn = 50\n', encoding="utf-8")

        config = load_config(explicit)
        assert config.project_name == "ci"
        assert config.default_max_ccn == 50
        assert config.source_roots == [Path.cwd() / "src"]

    def test_env_over_file_and_overrides_over_env(self, tmp_path, monkeypatch):
        (tmp_path / "priospot.toml").write_text(
            'project_name = "file"\nsource_roots = ["src"]\nchurn_days = 10\n', encoding="utf-8"
        )
        monkeypatch.setenv("PRIOSPOT_CHURN_DAYS", "20")
        monkeypatch.setenv("PRIOSPOT_COVERAGE_REPORTS", "a.xml, b.json")
        monkeypatch.setenv("PRIOSPOT_EMIT_COMPATIBILITY_XML", "yes")
        monkeypatch.setenv("PRIOSPOT_PROJECT_NAME", "env")

        config = load_config(project_name="cli")
        assert config.project_name == "cli"
        assert config.churn_days == 20
        assert config.coverage_reports == [Path.cwd() / "a.xml", Path.cwd() / "b.json"]
        assert config.emit_compatibility_xml is True

    def test_env_bad_bool(self, monkeypatch):
        monkeypatch.setenv("PRIOSPOT_EMIT_COMPATIBILITY_XML", "maybe")
        with pytest.raises(InvalidConfigError):
            load_config(project_name="demo", source_roots=["src"])

    def test_env_bad_int(self, monkeypatch):
        monkeypatch.setenv("PRIOSPOT_CHURN_DAYS", "thirty")
        with pytest.raises(InvalidConfigError):
            load_config(project_name="demo", source_roots=["src"])

    def test_unknown_key(self, tmp_path):
        (tmp_path / "priospot.toml").write_text('colour = "red"\n', encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(project_name="demo", source_roots=["src"])

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_config(tmp_path / "nope.toml", project_name="demo", source_roots=["src"])

    def test_malformed_toml(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("project_name = \n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            load_config(bad)
