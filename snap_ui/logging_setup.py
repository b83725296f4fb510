"""Console logging and run summary output."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from snap_ui.models.results import RunResult

console = Console()

_RESULT_STYLES = {"pass": "green", "fail": "red", "error": "yellow"}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    # PIL logs every PNG chunk at DEBUG
    logging.getLogger("PIL").setLevel(logging.INFO)


def print_summary(run_result: RunResult) -> None:
    """Render one row per check, failures with their reason."""
    table = Table(title=f"Visual Checks ({run_result.run_id})")
    table.add_column("Check", style="bold")
    table.add_column("Variant")
    table.add_column("Result")
    table.add_column("Diff px", justify="right")
    table.add_column("Reason")
    for r in run_result.check_results:
        style = _RESULT_STYLES.get(r.result, "")
        table.add_row(
            r.check_name,
            r.variant or "-",
            f"[{style}]{r.result.upper()}[/{style}]",
            "-" if r.diff_pixel_count is None else str(r.diff_pixel_count),
            r.failure_reason or "",
        )
    console.print(table)
    console.print(
        f"[green]{run_result.passed} passed[/green], "
        f"[red]{run_result.failed} failed[/red], "
        f"[yellow]{run_result.errors} errors[/yellow] "
        f"in {run_result.duration_seconds}s"
    )
