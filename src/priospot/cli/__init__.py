"""Command line interface: the typer app and its subcommands."""

import typer

from ._common import console

app = typer.Typer(
    name="priospot",
    help="Priospot - Change, Complexity and Coverage Hotspot Analysis",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .analyze import main as _main_callback, analyze as _analyze  # noqa: F401, E402
from .report import report as _report  # noqa: F401, E402

__all__ = ["app", "console"]
