"""Main analysis command: inventory, ingestion, scoring and reports in one run."""

import shutil
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..config import load_config
from ..engine import PriospotEngine
from ..exceptions import PriospotError
from ..logging_config import setup_logging
from . import app
from ._common import console, split_paths, summary_table


@app.callback(invoke_without_command=True, no_args_is_help=False)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Analyze repository hotspots using churn, complexity, and coverage (C3).
    """
    from .. import __version__

    if version:
        console.print(f"[bold cyan]Priospot[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


@app.command()
def analyze(
    project_name: Optional[str] = typer.Option(
        None,
        "--project-name",
        help="Logical project name to embed in the output document and reports",
    ),
    project_version: Optional[str] = typer.Option(
        None,
        "--project-version",
        help="Optional project version to include in the output document",
    ),
    source_roots: Optional[str] = typer.Option(
        None,
        "--source-roots",
        help="Comma-separated source roots (e.g. src/main/kotlin,src/test/kotlin)",
    ),
    coverage_report: Optional[str] = typer.Option(
        None,
        "--coverage-report",
        help="Single coverage report path",
    ),
    coverage_reports: Optional[str] = typer.Option(
        None,
        "--coverage-reports",
        help="Comma-separated coverage report paths (merged during ingestion)",
    ),
    complexity_report: Optional[str] = typer.Option(
        None,
        "--complexity-report",
        help="Single complexity report path",
    ),
    complexity_reports: Optional[str] = typer.Option(
        None,
        "--complexity-reports",
        help="Comma-separated complexity report paths (merged during ingestion)",
    ),
    output_json: Optional[Path] = typer.Option(
        None,
        "--output-json",
        help="Where to place the priospot JSON; its directory receives the other outputs",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        help="Directory for all outputs (default: the --output-json directory)",
    ),
    churn_days: Optional[int] = typer.Option(
        None,
        "--churn-days",
        help="Lookback window in days for churn calculation [default: 30]",
        min=1,
    ),
    churn_log: Optional[Path] = typer.Option(
        None,
        "--churn-log",
        help="Precomputed churn log; when omitted, churn is derived from git history",
    ),
    emit_compat_xml: Optional[bool] = typer.Option(
        None,
        "--emit-compat-xml/--no-compat-xml",
        help="Also write the compatibility XML document",
    ),
    base_path: Optional[Path] = typer.Option(
        None,
        "--base-path",
        help="Repository root (default: current directory)",
        file_okay=False,
        dir_okay=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
):
    """
    Run end-to-end hotspot analysis and generate priospot JSON plus treemap reports.

    [bold cyan]Examples:[/bold cyan]

      priospot analyze --project-name demo --source-roots src/main/kotlin --output-json build/priospot/priospot.json

      priospot analyze --project-name demo --source-roots src/main/kotlin,src/test/kotlin --coverage-reports build/jacoco.xml --complexity-report build/detekt.xml --churn-log gitlog.txt
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)

    if output_dir is None and output_json is not None:
        output_dir = output_json.parent

    try:
        settings = load_config(
            config_file=config,
            project_name=project_name,
            project_version=project_version,
            base_path=base_path,
            source_roots=split_paths(source_roots),
            coverage_reports=split_paths(coverage_reports, coverage_report),
            complexity_reports=split_paths(complexity_reports, complexity_report),
            output_dir=output_dir,
            churn_days=churn_days,
            churn_log=churn_log,
            emit_compatibility_xml=emit_compat_xml,
        )

        result = PriospotEngine().run(settings)

        if output_json is not None:
            target = output_json if output_json.is_absolute() else settings.base_path / output_json
            if target.resolve() != result.document_path.resolve():
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(result.document_path, target)
            document_path = target
        else:
            document_path = result.document_path

    except PriospotError as e:
        logger.error(str(e))
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not quiet:
        console.print(summary_table(result.summary))
        for message in result.diagnostics:
            console.print(f"[yellow]![/yellow] {escape(message)}", highlight=False)
        for report_type, path in result.report_paths.items():
            console.print(f"[dim]{report_type.value}:[/dim] {path}", highlight=False)
    console.print(f"Generated {document_path}", highlight=False)
