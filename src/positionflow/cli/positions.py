"""CLI command for displaying option positions derived from a ledger."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional

import click
from rich.console import Console
from rich.table import Table

from ..services.display import format_currency, format_date, format_legs
from ..services.json_serializer import serialize_position
from ..services.positions import Position
from .utils import (
    FormatChoice,
    StatusChoice,
    filter_by_status,
    filter_by_ticker,
    ledger_argument,
    run_pipeline,
)


def _pnl_style(value) -> str:
    if value > 0:
        return "green"
    if value < 0:
        return "red"
    return "white"


def _build_positions_table(rows: Iterable[Position]) -> Table:
    table = Table(title="Option Positions", expand=True)
    table.add_column("Symbol", style="magenta", no_wrap=True)
    table.add_column("Strategy", style="cyan")
    table.add_column("Legs")
    table.add_column("Entry", no_wrap=True)
    table.add_column("Exit", no_wrap=True)
    table.add_column("Status", style="yellow", no_wrap=True)
    table.add_column("Credit", justify="right")
    table.add_column("Debit", justify="right")
    table.add_column("Net P/L", justify="right")
    table.add_column("Rolls", justify="right")

    for position in rows:
        table.add_row(
            position.symbol,
            position.strategy_type,
            format_legs(position),
            format_date(position.entry_date),
            format_date(position.exit_date),
            position.status.upper(),
            format_currency(position.total_credit),
            format_currency(position.total_debit),
            f"[{_pnl_style(position.net_pl)}]{format_currency(position.net_pl)}[/]",
            f"{len(position.roll_ids)}",
        )
    return table


@click.command("positions")
@ledger_argument
@click.option(
    "--status",
    type=StatusChoice,
    default="all",
    show_default=True,
    help="Filter positions by status.",
)
@click.option("--ticker", help="Filter positions by underlying symbol.")
@click.option(
    "--format",
    "output_format",
    type=FormatChoice,
    default="table",
    show_default=True,
    help="Output format.",
)
def positions_command(
    ledger: Path,
    status: str,
    ticker: Optional[str],
    output_format: str,
) -> None:
    """Display positions built from the LEDGER JSON file."""

    result = run_pipeline(ledger)
    positions = filter_by_ticker(filter_by_status(result.positions, status), ticker)
    positions.sort(key=lambda pos: (pos.entry_date, pos.symbol), reverse=True)

    if output_format.lower() == "json":
        payload = {"positions": [serialize_position(position) for position in positions]}
        click.echo(json.dumps(payload, indent=2))
        return

    console = Console(width=200, force_terminal=False)
    if not positions:
        console.print("[yellow]No positions match the requested filters.[/yellow]")
        return

    console.print(_build_positions_table(positions))
    if result.orphan_transaction_ids:
        console.print(
            f"[yellow]Skipped unmatched contracts on {len(result.orphan_transaction_ids)} closing "
            "fill(s) that found no open lot.[/yellow]"
        )
