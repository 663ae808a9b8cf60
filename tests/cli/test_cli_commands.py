"""Tests for the priospot command line."""

import json

import pytest
from typer.testing import CliRunner

from priospot import __version__
from priospot.cli import app
from priospot.model import MetricNames
from priospot.model.serialization import read_document

runner = CliRunner()


@pytest.fixture
def cli_repo(tmp_path, monkeypatch, write_json, coverage_payload):
    """A single-file repository with split coverage and complexity reports."""
    monkeypatch.chdir(tmp_path)
    source_root = tmp_path / "src" / "main" / "kotlin"
    source_root.mkdir(parents=True)
    (source_root / "Sample.kt").write_text(
        "package demo\nclass Sample { fun ok() = 1 }\n", encoding="utf-8"
    )
    (tmp_path / "gitlog.txt").write_text(
        "--x--2026-01-01--a\n4\t1\tsrc/main/kotlin/Sample.kt\n", encoding="utf-8"
    )
    write_json("coverage-1.json", coverage_payload(("Sample.kt", 3, 5)))
    write_json("coverage-2.json", coverage_payload(("Sample.kt", 2, 5)))
    write_json("complexity-1.json", [{"path": "Sample.kt", "ncss": 7, "maxCcn": 2}])
    write_json("complexity-2.json", [{"path": "Sample.kt", "ncss": 11, "maxCcn": 4}])
    return tmp_path


def _analyze_args(repo, *extra):
    return [
        "analyze",
        "--project-name",
        "cli-test",
        "--base-path",
        str(repo),
        "--source-roots",
        str(repo / "src" / "main" / "kotlin"),
        "--churn-log",
        str(repo / "gitlog.txt"),
        *extra,
    ]


class TestMainCallback:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_prints_usage(self):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "Usage" in result.output


class TestAnalyzeCommand:
    def test_merges_multiple_reports(self, cli_repo):
        output_json = cli_repo / "out" / "priospot.json"
        args = _analyze_args(
            cli_repo,
            "--coverage-reports",
            f"{cli_repo / 'coverage-1.json'},{cli_repo / 'coverage-2.json'}",
            "--complexity-reports",
            f"{cli_repo / 'complexity-1.json'},{cli_repo / 'complexity-2.json'}",
            "--output-json",
            str(output_json),
        )
        result = runner.invoke(app, args)

        assert result.exit_code == 0, result.output
        assert "Generated" in result.output

        sample = read_document(output_json).project.files[0]
        assert sample.path == "src/main/kotlin/Sample.kt"
        assert sample.metric(MetricNames.MAX_CCN).value == 4
        assert sample.metric(MetricNames.NCSS).value == 18
        coverage = sample.metric(MetricNames.LINE_COVERAGE)
        assert (coverage.numerator, coverage.denominator) == (5.0, 10.0)

        assert (cli_repo / "out" / "priospot-interactive-treemap.svg").exists()
        assert (cli_repo / "out" / "coverage.json").exists()

    def test_single_report_options_and_custom_json_name(self, cli_repo):
        output_json = cli_repo / "reports" / "hotspots.json"
        args = _analyze_args(
            cli_repo,
            "--coverage-report",
            str(cli_repo / "coverage-1.json"),
            "--complexity-report",
            str(cli_repo / "complexity-2.json"),
            "--output-json",
            str(output_json),
            "--emit-compat-xml",
            "--quiet",
        )
        result = runner.invoke(app, args)

        assert result.exit_code == 0, result.output
        data = json.loads(output_json.read_text(encoding="utf-8"))
        assert data["project"]["name"] == "cli-test"
        assert (cli_repo / "reports" / "priospot.json").exists()
        assert (cli_repo / "reports" / "priospot.xml").exists()

    def test_reports_are_optional(self, cli_repo):
        result = runner.invoke(app, _analyze_args(cli_repo, "--output-dir", "build/out"))

        assert result.exit_code == 0, result.output
        sample = read_document(cli_repo / "build" / "out" / "priospot.json").project.files[0]
        assert sample.metric(MetricNames.LINE_COVERAGE).safe_ratio() == 0.0

    def test_missing_source_roots_fails(self, cli_repo):
        result = runner.invoke(app, ["analyze", "--project-name", "invalid"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_config_file(self, cli_repo):
        config = cli_repo / "ci.toml"
        config.write_text(
            '[priospot]\nproject_name = "from-config"\nsource_roots = ["src/main/kotlin"]\n'
            'churn_log = "gitlog.txt"\noutput_dir = "cfg-out"\n',
            encoding="utf-8",
        )
        result = runner.invoke(app, ["analyze", "--config", str(config)])

        assert result.exit_code == 0, result.output
        document = read_document(cli_repo / "cfg-out" / "priospot.json")
        assert document.project.name == "from-config"


class TestReportCommand:
    def test_generates_svg(self, cli_repo):
        output_json = cli_repo / "out" / "priospot.json"
        analyze = runner.invoke(
            app,
            _analyze_args(
                cli_repo,
                "--coverage-report",
                str(cli_repo / "coverage-1.json"),
                "--output-json",
                str(output_json),
            ),
        )
        assert analyze.exit_code == 0, analyze.output

        output_svg = cli_repo / "custom" / "coverage.svg"
        result = runner.invoke(
            app,
            [
                "report",
                "--input-json",
                str(output_json),
                "--type",
                "coverage",
                "--output-svg",
                str(output_svg),
            ],
        )

        assert result.exit_code == 0, result.output
        svg = output_svg.read_text(encoding="utf-8")
        assert "<svg" in svg
        assert "Legend" in svg

    def test_invalid_document(self, cli_repo):
        broken = cli_repo / "broken.json"
        broken.write_text("{}", encoding="utf-8")
        result = runner.invoke(
            app, ["report", "--input-json", str(broken), "--output-svg", str(cli_repo / "x.svg")]
        )
        assert result.exit_code == 1
