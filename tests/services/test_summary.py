"""Tests for portfolio summary statistics."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from positionflow.services.positions import Position
from positionflow.services.strategy import label_for_name
from positionflow.services.summary import calculate_summary, calculate_win_rate


def _make_position(index: int, net_pl: str, status: str, credit: str = "100") -> Position:
    net = Decimal(net_pl)
    total_credit = Decimal(credit)
    closed = status == "closed"
    return Position(
        id=f"pos-{index}",
        symbol="TSLA",
        strategy=label_for_name("Short Call"),
        entry_date=date(2025, 5, index),
        exit_date=date(2025, 6, index) if closed else None,
        status=status,
        legs=(),
        total_credit=total_credit,
        total_debit=total_credit - net,
        net_pl=net,
        realized_pl=net if closed else None,
        max_profitable_debit=None if closed else total_credit,
        transaction_ids=(f"txn-{index}",),
    )


def test_summary_over_mixed_positions():
    positions = [
        _make_position(1, "50", "closed"),
        _make_position(2, "-20", "closed"),
        _make_position(3, "30", "closed"),
        _make_position(4, "10", "open"),
        _make_position(5, "-5", "open"),
    ]
    summary = calculate_summary(positions)

    assert summary.total_pl == Decimal("65")
    assert summary.total_premium_collected == Decimal("500")
    assert summary.open_positions_count == 2
    assert summary.closed_positions_count == 3
    assert summary.total_wins == 2
    assert summary.total_losses == 1
    assert summary.win_rate == Decimal("66.67")


def test_break_even_close_is_neither_win_nor_loss():
    summary = calculate_summary(
        [_make_position(1, "0", "closed"), _make_position(2, "25", "closed")]
    )
    assert summary.total_wins == 1
    assert summary.total_losses == 0
    assert summary.win_rate == Decimal("100.00")


def test_no_closed_positions_has_zero_win_rate():
    summary = calculate_summary([_make_position(1, "40", "open")])
    assert summary.win_rate == Decimal("0")
    assert summary.closed_positions_count == 0


def test_empty_summary():
    summary = calculate_summary([])
    assert summary.total_pl == Decimal("0")
    assert summary.open_positions_count == 0


@pytest.mark.parametrize(
    "wins, losses, expected",
    [(0, 0, "0"), (1, 1, "50.00"), (1, 2, "33.33"), (2, 1, "66.67")],
)
def test_calculate_win_rate(wins, losses, expected):
    assert calculate_win_rate(wins, losses) == Decimal(expected)
