"""
Roll detection.

A roll is a same-day close of an option contract paired with the opening of a different
contract (new strike and/or expiration) of the same type, on the same side, on the same
underlying.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from hashlib import sha256
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.legs import LegContract
from ..core.models import CLOSING_CODES, Transaction

logger = logging.getLogger(__name__)

ROLL_QUANTITY_TOLERANCE = Decimal("1")
# A close re-opens the side it just closed: BTC (short) -> STO, STC (long) -> BTO.
REOPEN_CODES = {"BTC": "STO", "STC": "BTO"}


@dataclass(frozen=True)
class Roll:
    """Directed edge from a closing transaction to the opening transaction that replaced it."""

    id: str
    from_leg_id: str
    to_leg_id: str
    symbol: str
    option_type: str
    roll_date: date
    from_strike: Decimal
    to_strike: Decimal
    from_expiration: date
    to_expiration: date
    quantity: Decimal
    net_credit: Decimal

    @property
    def strike_changed(self) -> bool:
        return self.from_strike != self.to_strike

    @property
    def expiration_changed(self) -> bool:
        return self.from_expiration != self.to_expiration


def roll_id_for(from_leg_id: str, to_leg_id: str) -> str:
    digest = sha256(f"{from_leg_id}->{to_leg_id}".encode("utf-8")).hexdigest()
    return f"roll-{digest[:16]}"


def _is_roll_pair(closing: Transaction, opening: Transaction) -> bool:
    """Check whether ``opening`` continues the contract closed by ``closing``."""
    if opening.trans_code != REOPEN_CODES.get(closing.trans_code):
        return False

    close_contract = LegContract.from_transaction(closing)
    open_contract = LegContract.from_transaction(opening)
    if close_contract.option_type != open_contract.option_type:
        return False

    if abs(closing.quantity - opening.quantity) >= ROLL_QUANTITY_TOLERANCE:
        return False

    # Closing and reopening the identical contract is not a roll.
    return close_contract.leg_id != open_contract.leg_id


def _find_reopening(closing: Transaction, openings: List[Transaction]) -> Optional[Transaction]:
    """Earliest ledger-order opening that pairs with ``closing``."""
    for opening in openings:
        if _is_roll_pair(closing, opening):
            return opening
    return None


def _build_roll(closing: Transaction, opening: Transaction) -> Roll:
    close_contract = LegContract.from_transaction(closing)
    open_contract = LegContract.from_transaction(opening)
    return Roll(
        id=roll_id_for(closing.id, opening.id),
        from_leg_id=closing.id,
        to_leg_id=opening.id,
        symbol=close_contract.symbol,
        option_type=close_contract.option_type,
        roll_date=closing.activity_date,
        from_strike=close_contract.strike,
        to_strike=open_contract.strike,
        from_expiration=close_contract.expiration,
        to_expiration=open_contract.expiration,
        quantity=closing.quantity,
        # Closing debits are negative and opening credits positive, so the sum is signed.
        net_credit=(opening.amount + closing.amount).quantize(Decimal("0.01")),
    )


def _group_by_day_and_symbol(
    transactions: Iterable[Transaction],
) -> Dict[Tuple[date, str], List[Transaction]]:
    grouped: Dict[Tuple[date, str], List[Transaction]] = {}
    for txn in transactions:
        if not txn.is_option:
            continue
        grouped.setdefault((txn.activity_date, txn.symbol), []).append(txn)
    return grouped


def detect_rolls(transactions: Iterable[Transaction]) -> List[Roll]:
    """Detect rolls in ``transactions``.

    Within each (activity date, underlying) group, closing fills are visited in ledger order
    and each pairs with the earliest ledger-order opening that matches it. Several closings may
    pair with the same opening; choosing between such edges is left to chain building. Rolls
    are returned ordered by date, then ledger order.
    """
    rolls: List[Roll] = []
    grouped = _group_by_day_and_symbol(transactions)

    for (_day, _symbol), txns in sorted(grouped.items(), key=lambda item: item[0][0]):
        closings = [txn for txn in txns if txn.trans_code in CLOSING_CODES]
        openings = [txn for txn in txns if txn.is_opening]
        if not closings or not openings:
            continue

        for closing in closings:
            opening = _find_reopening(closing, openings)
            if opening is None:
                continue
            rolls.append(_build_roll(closing, opening))

    logger.debug("Detected %d rolls", len(rolls))
    return rolls
