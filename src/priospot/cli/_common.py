"""Shared CLI helpers."""

from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

console = Console()


def split_paths(*values: Optional[str]) -> Optional[List[Path]]:
    """Collect comma-separated path options into one list.

    Returns ``None`` when no option was given so config-file values apply.
    """
    paths = [
        Path(item.strip())
        for value in values
        if value
        for item in value.split(",")
        if item.strip()
    ]
    return paths or None


def summary_table(summary: Dict[str, int]) -> Table:
    table = Table(title="Summary", show_header=True, header_style="bold cyan")
    table.add_column("Metric")
    table.add_column("Files", justify="right")
    for key, value in summary.items():
        table.add_row(key, str(value))
    return table
