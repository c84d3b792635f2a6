"""CLI command for portfolio summary statistics."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ..services.display import format_currency, format_percent
from ..services.json_serializer import serialize_summary
from ..services.summary import SummaryStats, calculate_summary
from .utils import FormatChoice, ledger_argument, run_pipeline


def _build_summary_table(summary: SummaryStats) -> Table:
    table = Table(title="Portfolio Summary", show_header=False)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    table.add_row("Total P/L", format_currency(summary.total_pl))
    table.add_row("Premium Collected", format_currency(summary.total_premium_collected))
    table.add_row("Open Positions", f"{summary.open_positions_count}")
    table.add_row("Closed Positions", f"{summary.closed_positions_count}")
    table.add_row("Wins / Losses", f"{summary.total_wins} / {summary.total_losses}")
    table.add_row("Win Rate", format_percent(summary.win_rate))
    return table


@click.command("summary")
@ledger_argument
@click.option(
    "--format",
    "output_format",
    type=FormatChoice,
    default="table",
    show_default=True,
    help="Output format.",
)
def summary_command(ledger: Path, output_format: str) -> None:
    """Display portfolio statistics for the LEDGER JSON file."""

    result = run_pipeline(ledger)
    summary = calculate_summary(result.positions)

    if output_format.lower() == "json":
        click.echo(json.dumps(serialize_summary(summary), indent=2))
        return

    console = Console(width=200, force_terminal=False)
    console.print(_build_summary_table(summary))
