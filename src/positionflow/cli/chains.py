"""CLI command for displaying roll chains."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..services.chain_builder import RollChain
from ..services.display import format_contract, format_currency, format_date, format_roll
from ..services.json_serializer import serialize_chain
from ..services.pipeline import PositionBuildResult
from .utils import (
    FormatChoice,
    StatusChoice,
    filter_by_status,
    filter_by_ticker,
    ledger_argument,
    run_pipeline,
)


def _build_chain_table(chain: RollChain, result: PositionBuildResult) -> Table:
    title = (
        f"{chain.symbol} - {chain.roll_count} roll{'s' if chain.roll_count != 1 else ''} "
        f"({chain.status.upper()})"
    )
    table = Table(title=title, expand=True)
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Rolled On", no_wrap=True)
    table.add_column("From", no_wrap=True)
    table.add_column("Change")
    table.add_column("Contract", style="cyan", no_wrap=True)
    table.add_column("Credit", justify="right")
    table.add_column("Debit", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("Status", style="yellow", no_wrap=True)

    for index, segment in enumerate(chain.segments, start=1):
        roll = result.roll_by_id(segment.roll_id) if segment.roll_id else None
        table.add_row(
            f"{index}",
            format_date(segment.roll_date),
            format_contract(segment.from_strike, segment.from_expiration)
            if roll
            else "--",
            format_roll(roll) if roll else "opened",
            format_contract(segment.to_strike, segment.to_expiration),
            format_currency(segment.credit),
            format_currency(segment.debit),
            format_currency(segment.net_credit),
            segment.status.upper(),
        )

    table.add_section()
    table.add_row(
        "",
        format_date(chain.first_entry_date),
        "",
        "",
        f"through {format_date(chain.last_exit_date)}",
        format_currency(chain.total_credits),
        format_currency(chain.total_debits),
        format_currency(chain.net_pl),
        "REALIZED",
    )
    return table


@click.command("chains")
@ledger_argument
@click.option(
    "--status",
    type=StatusChoice,
    default="all",
    show_default=True,
    help="Filter chains by status.",
)
@click.option("--ticker", help="Filter chains by underlying symbol.")
@click.option(
    "--format",
    "output_format",
    type=FormatChoice,
    default="table",
    show_default=True,
    help="Output format.",
)
def chains_command(
    ledger: Path,
    status: str,
    ticker: Optional[str],
    output_format: str,
) -> None:
    """Display roll chains built from the LEDGER JSON file."""

    result = run_pipeline(ledger)
    chains = filter_by_ticker(filter_by_status(result.roll_chains, status), ticker)

    if output_format.lower() == "json":
        click.echo(json.dumps({"roll_chains": [serialize_chain(c) for c in chains]}, indent=2))
        return

    console = Console(width=200, force_terminal=False)
    if not chains:
        console.print("[yellow]No roll chains match the requested filters.[/yellow]")
        return

    for index, chain in enumerate(chains):
        if index:
            console.print()
        console.print(_build_chain_table(chain, result))
