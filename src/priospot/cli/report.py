"""Report CLI command -- render one treemap from a saved priospot document."""

from pathlib import Path

import typer
from rich.markup import escape

from ..exceptions import PriospotError
from ..logging_config import setup_logging
from ..model.serialization import read_document
from ..visualization import ReportType, SvgTreemapReporter
from . import app
from ._common import console


@app.command()
def report(
    input_json: Path = typer.Option(
        ...,
        "--input-json",
        help="priospot JSON produced by 'priospot analyze'",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    report_type: ReportType = typer.Option(
        ReportType.PRIOSPOT,
        "--type",
        "-t",
        help="Which metric colours the treemap",
        case_sensitive=False,
    ),
    output_svg: Path = typer.Option(
        ...,
        "--output-svg",
        "-o",
        help="Output SVG file path",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
):
    """
    Generate an interactive SVG treemap from an existing priospot JSON document.

    [bold cyan]Examples:[/bold cyan]

      priospot report --input-json build/priospot/priospot.json --type coverage --output-svg coverage.svg
    """
    logger = setup_logging(verbose=verbose)

    try:
        document = read_document(input_json)
        output = SvgTreemapReporter().generate_interactive_treemap(
            document.project, report_type, output_svg
        )
    except PriospotError as e:
        logger.error(str(e))
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"Generated {output}", highlight=False)
