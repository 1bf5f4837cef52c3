"""Centralized Rich Console management.

The CLI renders tables and progress bars through one shared Console so that
progress output and log lines do not interleave badly.
"""

from typing import Any, Iterable

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

_console: Console | None = None


def get_console() -> Console:
    """Get or create the global Rich Console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_composer_table(composers: Iterable[Any], title: str) -> None:
    """Render composers (id, name, period, counts) as a table."""
    table = Table(title=title)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Period")
    table.add_column("Works", justify="right")
    table.add_column("Recordings", justify="right")

    for composer in composers:
        table.add_row(
            composer.id,
            composer.name,
            composer.period,
            str(composer.sheet_music_count),
            str(composer.recording_count),
        )

    get_console().print(table)


def sync_progress() -> Progress:
    """Progress bar used by push/pull; percent-based (total=100)."""
    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=get_console(),
    )
