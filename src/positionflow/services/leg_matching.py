"""FIFO leg matching service.

Transforms option :class:`~positionflow.core.models.Transaction` sequences into leg groups that
pair opening fills with the closing, expiring or assigned fills that offset them, per contract.
Downstream layers (position assembly, CLI, web) consume the groups without reimplementing the
matching algorithm.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Deque, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.legs import LegContract
from ..core.models import Transaction

logger = logging.getLogger(__name__)

Money = Decimal
ZERO = Decimal("0")


def _quantize(value: Decimal | int | float) -> Decimal:
    """Normalise monetary values to cents while preserving sign."""
    if not isinstance(value, Decimal):
        value = Decimal(value)
    return value.quantize(Decimal("0.01"))


@dataclass(frozen=True)
class LotFillPortion:
    """Represents a quantity slice of a :class:`Transaction` and its share of the cash."""

    transaction: Transaction
    quantity: Decimal
    amount: Money

    @property
    def activity_date(self) -> date:
        return self.transaction.activity_date

    @property
    def trans_code(self) -> str:
        return self.transaction.trans_code

    def split(self, quantity: Decimal) -> Tuple["LotFillPortion", Optional["LotFillPortion"]]:
        """Split this portion into two, returning the requested quantity and the remainder."""
        if quantity <= 0 or quantity > self.quantity:
            raise ValueError("split quantity must be positive and no larger than the portion")

        if quantity == self.quantity:
            return self, None

        ratio = quantity / self.quantity
        first = LotFillPortion(
            transaction=self.transaction,
            quantity=quantity,
            amount=_quantize(self.amount * ratio),
        )
        remainder = LotFillPortion(
            transaction=self.transaction,
            quantity=self.quantity - quantity,
            amount=_quantize(self.amount - first.amount),
        )
        return first, remainder


def _portion_from_transaction(txn: Transaction) -> LotFillPortion:
    return LotFillPortion(transaction=txn, quantity=txn.quantity, amount=_quantize(txn.amount))


@dataclass(frozen=True)
class MatchedLegGroup:
    """Opening fills of one contract together with the closing slices matched against them."""

    contract: LegContract
    status: str  # "open" or "closed"
    open_portions: Tuple[LotFillPortion, ...]
    close_portions: Tuple[LotFillPortion, ...]
    open_quantity: Decimal

    @property
    def is_open(self) -> bool:
        return self.status == "open"

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"

    @property
    def portions(self) -> Tuple[LotFillPortion, ...]:
        return (*self.open_portions, *self.close_portions)

    @property
    def opened_quantity(self) -> Decimal:
        return sum((portion.quantity for portion in self.open_portions), ZERO)

    @property
    def closed_quantity(self) -> Decimal:
        return sum((portion.quantity for portion in self.close_portions), ZERO)

    @property
    def opened_at(self) -> date:
        return min(portion.activity_date for portion in self.open_portions)

    @property
    def closed_at(self) -> Optional[date]:
        if not self.is_closed or not self.close_portions:
            return None
        return max(portion.activity_date for portion in self.close_portions)

    @property
    def transaction_ids(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for portion in self.portions:
            seen.setdefault(portion.transaction.id, None)
        return tuple(seen)


@dataclass(frozen=True)
class LegMatchResult:
    """Closed and open leg groups produced by one matching pass."""

    closed_groups: Tuple[MatchedLegGroup, ...]
    open_groups: Tuple[MatchedLegGroup, ...]
    orphan_transaction_ids: Tuple[str, ...] = ()

    @property
    def groups(self) -> Tuple[MatchedLegGroup, ...]:
        return (*self.closed_groups, *self.open_groups)


@dataclass
class _LotBuilder:
    """Mutable lot: one opening fill, its remaining quantity and the slices that closed it."""

    contract: LegContract
    opening: LotFillPortion
    remaining: Decimal
    close_portions: List[LotFillPortion] = field(default_factory=list)

    def to_group(self, *, status: str) -> MatchedLegGroup:
        return MatchedLegGroup(
            contract=self.contract,
            status=status,
            open_portions=(self.opening,),
            close_portions=tuple(self.close_portions),
            open_quantity=self.remaining,
        )


def sort_transactions(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Return transactions ascending by activity date; ties keep ledger order."""
    return sorted(transactions, key=lambda txn: txn.activity_date)


def _consume_closing_fill(
    queue: Deque[_LotBuilder],
    closing: LotFillPortion,
) -> Tuple[List[MatchedLegGroup], Optional[LotFillPortion]]:
    """Offset ``closing`` against open lots oldest-first.

    Returns the groups for every lot drained to zero and whatever part of the fill found no
    open lot.
    """
    exhausted: List[MatchedLegGroup] = []
    remaining_portion: Optional[LotFillPortion] = closing
    while remaining_portion is not None and queue:
        builder = queue[0]
        take = min(builder.remaining, remaining_portion.quantity)
        used, remaining_portion = remaining_portion.split(take)
        builder.close_portions.append(used)
        builder.remaining -= take
        if builder.remaining == 0:
            queue.popleft()
            exhausted.append(builder.to_group(status="closed"))
    return exhausted, remaining_portion


def _merge_open_lots(contract: LegContract, lots: Sequence[_LotBuilder]) -> MatchedLegGroup:
    """Collapse every still-open lot of a contract into one open group."""
    open_portions: List[LotFillPortion] = []
    close_portions: List[LotFillPortion] = []
    for lot in lots:
        open_portions.append(lot.opening)
        close_portions.extend(lot.close_portions)
    return MatchedLegGroup(
        contract=contract,
        status="open",
        open_portions=tuple(open_portions),
        close_portions=tuple(close_portions),
        open_quantity=sum((lot.remaining for lot in lots), ZERO),
    )


def match_leg_groups(transactions: Iterable[Transaction]) -> LegMatchResult:
    """Run FIFO matching over every option contract in ``transactions``.

    Rows without a complete option descriptor and stock rows are ignored. A terminal fill
    with no open lot for its contract (or the unmatched remainder of one) is dropped and
    reported through :attr:`LegMatchResult.orphan_transaction_ids`.
    """
    queues: Dict[str, Deque[_LotBuilder]] = {}
    contracts: Dict[str, LegContract] = {}
    closed: List[MatchedLegGroup] = []
    orphans: List[str] = []

    option_txns = [txn for txn in transactions if txn.is_option]
    for txn in sort_transactions(option_txns):
        if txn.quantity == 0:
            logger.debug("Skipping zero-quantity transaction %s", txn.id)
            continue

        contract = LegContract.from_transaction(txn)
        key = contract.leg_id
        contracts.setdefault(key, contract)
        queue = queues.setdefault(key, deque())

        if txn.is_opening:
            queue.append(
                _LotBuilder(
                    contract=contract,
                    opening=_portion_from_transaction(txn),
                    remaining=txn.quantity,
                )
            )
            continue

        if not txn.is_terminal:
            continue

        exhausted, leftover = _consume_closing_fill(queue, _portion_from_transaction(txn))
        closed.extend(exhausted)
        if leftover is not None:
            logger.warning(
                "Dropping %s contracts of %s %s on %s: no open lot for %s",
                leftover.quantity,
                txn.trans_code,
                txn.id,
                txn.activity_date.isoformat(),
                contract.display_name,
            )
            orphans.append(txn.id)

    open_groups = tuple(
        _merge_open_lots(contracts[key], list(queue)) for key, queue in queues.items() if queue
    )
    logger.debug(
        "Matched %d closed and %d open leg groups from %d option transactions",
        len(closed),
        len(open_groups),
        len(option_txns),
    )
    return LegMatchResult(
        closed_groups=tuple(closed),
        open_groups=open_groups,
        orphan_transaction_ids=tuple(orphans),
    )
