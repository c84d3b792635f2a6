"""Portfolio summary statistics."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .positions import Position

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class SummaryStats:
    """Derived snapshot of a position set; recomputed on demand."""

    total_pl: Decimal
    total_premium_collected: Decimal
    open_positions_count: int
    closed_positions_count: int
    win_rate: Decimal  # percent, 0-100
    total_wins: int
    total_losses: int


def _outcome(position: Position) -> Decimal:
    return position.realized_pl if position.realized_pl is not None else position.net_pl


def calculate_win_rate(wins: int, losses: int) -> Decimal:
    """Percentage of decided trades that were wins; 0 when nothing was decided."""
    decided = wins + losses
    if decided == 0:
        return ZERO
    rate = Decimal(wins) / Decimal(decided) * Decimal("100")
    return rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def calculate_summary(positions: Iterable[Position]) -> SummaryStats:
    """Reduce ``positions`` into portfolio statistics.

    Wins and losses are counted over closed positions only; a break-even close is neither.
    """
    positions = list(positions)
    closed = [position for position in positions if position.is_closed]
    wins = sum(1 for position in closed if _outcome(position) > 0)
    losses = sum(1 for position in closed if _outcome(position) < 0)

    return SummaryStats(
        total_pl=sum((position.net_pl for position in positions), ZERO),
        total_premium_collected=sum((position.total_credit for position in positions), ZERO),
        open_positions_count=sum(1 for position in positions if position.is_open),
        closed_positions_count=len(closed),
        win_rate=calculate_win_rate(wins, losses),
        total_wins=wins,
        total_losses=losses,
    )
