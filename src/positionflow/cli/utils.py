"""Shared helpers for positionflow CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, TypeVar

import click

from ..services.pipeline import PositionBuildResult, build_positions
from ..services.transaction_loader import TransactionLoadError, load_ledger

FormatChoice = click.Choice(["table", "json"], case_sensitive=False)
StatusChoice = click.Choice(["all", "open", "closed"], case_sensitive=False)

T = TypeVar("T")


def ledger_argument(func):
    """Attach the ``LEDGER`` JSON file argument to a command."""
    return click.argument(
        "ledger",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
    )(func)


def run_pipeline(ledger: Path) -> PositionBuildResult:
    """Load ``ledger`` and build positions, turning input problems into CLI errors."""
    try:
        transactions, groupings = load_ledger(ledger)
    except TransactionLoadError as exc:
        raise click.ClickException(str(exc)) from exc
    return build_positions(transactions, groupings)


def filter_by_status(items: Iterable[T], status: str) -> List[T]:
    """Keep items whose ``status`` attribute matches, or everything for ``all``."""
    wanted = status.lower()
    if wanted == "all":
        return list(items)
    return [item for item in items if getattr(item, "status") == wanted]


def filter_by_ticker(items: Iterable[T], ticker: Optional[str]) -> List[T]:
    if not ticker:
        return list(items)
    normalized = ticker.strip().upper()
    return [item for item in items if getattr(item, "symbol") == normalized]
