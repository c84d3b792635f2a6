"""Domain models for option contracts and position legs.

The helpers in this module build on :class:`~positionflow.core.models.Transaction` to expose a
hashable contract key used for FIFO matching and roll detection, and the per-transaction
:class:`OptionLeg` records that positions are made of.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .models import OPENING_CODES, Transaction

LEG_STATUSES = ("open", "closed", "expired", "assigned")
_OUTCOME_BY_CODE = {
    "BTC": "closed",
    "STC": "closed",
    "OEXP": "expired",
    "OASGN": "assigned",
}
_SIDE_BY_CODE = {"BTO": "long", "STC": "long", "STO": "short", "BTC": "short"}


def _strike_to_cents(value: Decimal) -> int:
    """Convert a strike price to an integer number of cents."""
    normalized = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return int((normalized * Decimal("100")).to_integral_value(rounding=ROUND_HALF_UP))


def _format_strike(strike: Decimal) -> str:
    if strike == strike.to_integral_value():
        return f"{int(strike)}"
    return f"{strike.normalize()}"


def outcome_status(trans_code: str) -> str:
    """Return the leg status produced by a terminal transaction code."""
    return _OUTCOME_BY_CODE.get(trans_code.upper(), "closed")


@dataclass(frozen=True)
class LegContract:
    """Identifies a single option contract (symbol/expiration/strike/type)."""

    leg_id: str
    symbol: str
    expiration: date
    option_type: str
    strike: Decimal

    @classmethod
    def from_transaction(cls, txn: Transaction) -> "LegContract":
        """Derive contract metadata from an option transaction."""
        option = txn.option
        if option is None or option.expiration is None or option.strike is None:
            raise ValueError(f"transaction {txn.id} has no option contract")
        option_type = option.option_type or ""
        option_code = "C" if option_type.startswith("C") else "P"
        strike_cents = _strike_to_cents(option.strike)
        leg_id = f"{option.symbol}-{option.expiration.isoformat()}-{option_code}-{strike_cents}"
        return cls(
            leg_id=leg_id,
            symbol=option.symbol,
            expiration=option.expiration,
            option_type=option_type,
            strike=option.strike,
        )

    @property
    def display_name(self) -> str:
        return (
            f"{self.symbol} ${_format_strike(self.strike)} {self.option_type} "
            f"{self.expiration.isoformat()}"
        )


@dataclass(frozen=True)
class OptionLeg:
    """One contract-side of a position, backed by (a slice of) one transaction."""

    id: str
    transaction_id: str
    symbol: str
    expiration: date
    strike: Decimal
    option_type: str
    trans_code: str
    quantity: Decimal
    price: Decimal
    amount: Decimal
    activity_date: date
    status: str

    @property
    def is_opening(self) -> bool:
        return self.trans_code in OPENING_CODES

    @property
    def direction(self) -> Optional[str]:
        """Position side the leg belongs to; ``None`` for expirations and assignments."""
        return _SIDE_BY_CODE.get(self.trans_code)


def create_option_leg(
    txn: Transaction,
    status: str,
    *,
    quantity: Optional[Decimal] = None,
    amount: Optional[Decimal] = None,
) -> OptionLeg:
    """Build a leg from ``txn``; ``quantity``/``amount`` override it for partial slices."""
    if status not in LEG_STATUSES:
        raise ValueError(f"unknown leg status {status!r}")
    contract = LegContract.from_transaction(txn)
    return OptionLeg(
        id=txn.id,
        transaction_id=txn.id,
        symbol=contract.symbol,
        expiration=contract.expiration,
        strike=contract.strike,
        option_type=contract.option_type,
        trans_code=txn.trans_code,
        quantity=txn.quantity if quantity is None else quantity,
        price=txn.price,
        amount=txn.amount if amount is None else amount,
        activity_date=txn.activity_date,
        status=status,
    )
