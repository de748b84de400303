"""Rich-based console formatting utilities"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
)
from rich.table import Table
from rich.text import Text

console = Console()


def print_check(message: str) -> None:
    """Print a checkmark message in bold green."""
    text = Text("✓ ", style="bold green") + Text(message, style="bold")
    console.print(text)


def print_warning(message: str) -> None:
    """Print a warning message in bold yellow."""
    text = Text("⚠ ", style="bold yellow") + Text(message, style="bold")
    console.print(text)


def print_error(message: str) -> None:
    """Print an error message in bold red."""
    text = Text("✗ ", style="bold red") + Text(message, style="bold")
    console.print(text)


def print_success(message: str) -> None:
    """Print a success message in plain green."""
    text = Text("✓ ", style="green") + Text(message, style="green")
    console.print(text)


def print_header(title: str) -> None:
    """Print a title rule across the console width."""
    console.rule(Text(title, style="bold blue"), style="blue")


def print_outcome_table(outcomes) -> None:
    """Print one row per job outcome."""
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Source")
    table.add_column("Output")
    table.add_column("Time", justify="right")
    table.add_column("Status")
    for outcome in outcomes:
        status = Text("ok", style="green") if outcome.success else Text(str(outcome.error or "failed"), style="red")
        table.add_row(
            str(outcome.source),
            str(outcome.output),
            format_duration(outcome.elapsed),
            status
        )
    console.print(table)


def format_duration(seconds: float) -> str:
    """Format seconds as HHh MMm SSs."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{hours:02d}h {minutes:02d}m {secs:02d}s"


class EncodeProgress:
    """
    Live, self-overwriting progress bar for one encode.

    Lines printed through ``print_line`` scroll above the bar. Percentages are
    clamped to [0, 100] for display only.
    """
    def __init__(self, description: str, target: Optional[Console] = None):
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=target or console,
            transient=True,
        )
        self._description = description
        self._task_id = None

    def __enter__(self) -> "EncodeProgress":
        self._progress.start()
        self._task_id = self._progress.add_task(self._description, total=100.0)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._progress.stop()

    @property
    def completed(self) -> float:
        if self._task_id is None:
            return 0.0
        return self._progress.tasks[0].completed

    def update(self, percent: float) -> None:
        if self._task_id is None:
            return
        self._progress.update(self._task_id, completed=max(0.0, min(percent, 100.0)))

    def print_line(self, line: str) -> None:
        self._progress.console.print(line, markup=False, highlight=False)
