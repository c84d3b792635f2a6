"""
Display formatting services for the positionflow CLI.

This module provides formatting functions for displaying positions, rolls, chains and
summary figures in the CLI interface.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .positions import Position
from .roll_detection import Roll


def format_currency(value: Decimal | None) -> str:
    """Format a decimal value as currency."""
    if value is None:
        return "--"
    quantized = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    quantized = abs(quantized)
    return f"{sign}${quantized:,.2f}"


def format_percent(value: Decimal) -> str:
    """Format a percentage value (already scaled to 0-100)."""
    percent = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{percent:,.2f}"
    if text.endswith(".00"):
        text = text[:-3]
    elif text.endswith("0"):
        text = text[:-1]
    return f"{text}%"


def format_date(value: Optional[date]) -> str:
    return value.isoformat() if value else "--"


def format_strike(strike: Decimal) -> str:
    if strike == strike.to_integral_value():
        return f"${int(strike)}"
    return f"${strike.normalize()}"


def format_contract(strike: Decimal, expiration: date) -> str:
    return f"{format_strike(strike)} {expiration.isoformat()}"


def format_legs(position: Position) -> str:
    """Short description of the opening legs of a position."""
    parts = []
    for leg in position.opening_legs:
        side = "+" if leg.direction == "long" else "-"
        parts.append(
            f"{side}{leg.quantity.normalize()} {format_strike(leg.strike)}{leg.option_type[0]} "
            f"{leg.expiration.isoformat()}"
        )
    return ", ".join(parts) or "--"


def format_roll(roll: Roll) -> str:
    """Describe what changed in a roll, e.g. ``$100 -> $105, 2025-06-20 -> 2025-07-18``."""
    changes = []
    if roll.strike_changed:
        changes.append(f"{format_strike(roll.from_strike)} -> {format_strike(roll.to_strike)}")
    if roll.expiration_changed:
        changes.append(
            f"{roll.from_expiration.isoformat()} -> {roll.to_expiration.isoformat()}"
        )
    return ", ".join(changes)
