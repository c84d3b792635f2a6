"""Position assembly from matched leg groups."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from hashlib import sha256
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core.legs import OptionLeg, create_option_leg, outcome_status
from .leg_matching import LegMatchResult, MatchedLegGroup
from .strategy import Classifier, StrategyLabel, classify_strategy

Money = Decimal
ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Position:
    """The unit of trading activity: one or more legs on a single underlying."""

    id: str
    symbol: str
    strategy: StrategyLabel
    entry_date: date
    exit_date: Optional[date]
    status: str  # "open" or "closed"
    legs: Tuple[OptionLeg, ...]
    total_credit: Money
    total_debit: Money
    net_pl: Money
    realized_pl: Optional[Money]
    max_profitable_debit: Optional[Money]
    transaction_ids: Tuple[str, ...]
    roll_ids: Tuple[str, ...] = ()

    @property
    def strategy_type(self) -> str:
        return self.strategy.name

    @property
    def is_open(self) -> bool:
        return self.status == "open"

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"

    @property
    def opening_legs(self) -> Tuple[OptionLeg, ...]:
        return tuple(leg for leg in self.legs if leg.is_opening)


def position_id_for(transaction_ids: Iterable[str]) -> str:
    """Deterministic position id derived from its source transactions."""
    digest = sha256("|".join(sorted(set(transaction_ids))).encode("utf-8")).hexdigest()
    return f"pos-{digest[:16]}"


def split_cash(legs: Iterable[OptionLeg]) -> Tuple[Money, Money]:
    """Return ``(total_credit, total_debit)`` for ``legs``; debits are reported positive."""
    credit = ZERO
    debit = ZERO
    for leg in legs:
        if leg.amount > 0:
            credit += leg.amount
        else:
            debit += abs(leg.amount)
    return credit.quantize(Decimal("0.01")), debit.quantize(Decimal("0.01"))


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def _legs_for_group(group: MatchedLegGroup) -> List[OptionLeg]:
    if group.is_closed:
        final_code = group.close_portions[-1].trans_code
        opening_status = outcome_status(final_code)
    else:
        opening_status = "open"

    legs = [
        create_option_leg(
            portion.transaction,
            opening_status,
            quantity=portion.quantity,
            amount=portion.amount,
        )
        for portion in group.open_portions
    ]
    legs.extend(
        create_option_leg(
            portion.transaction,
            outcome_status(portion.trans_code),
            quantity=portion.quantity,
            amount=portion.amount,
        )
        for portion in group.close_portions
    )
    return legs


def build_position(
    group: MatchedLegGroup,
    *,
    classifier: Classifier = classify_strategy,
) -> Position:
    """Turn one matched leg group into a :class:`Position`."""
    legs = _legs_for_group(group)
    credit, debit = split_cash(legs)
    net = credit - debit
    transaction_ids = _unique(leg.transaction_id for leg in legs)
    closed = group.is_closed

    return Position(
        id=position_id_for(transaction_ids),
        symbol=group.contract.symbol,
        strategy=classifier(legs),
        entry_date=min(leg.activity_date for leg in legs),
        exit_date=max(leg.activity_date for leg in legs) if closed else None,
        status="closed" if closed else "open",
        legs=tuple(legs),
        total_credit=credit,
        total_debit=debit,
        net_pl=net,
        realized_pl=net if closed else None,
        max_profitable_debit=None if closed else credit,
        transaction_ids=transaction_ids,
    )


def assemble_positions(
    match_result: LegMatchResult,
    *,
    classifier: Classifier = classify_strategy,
) -> List[Position]:
    """Build positions for every closed group, then one per contract still open."""
    return [build_position(group, classifier=classifier) for group in match_result.groups]


def combine_positions(
    members: Sequence[Position],
    strategy: StrategyLabel,
) -> Position:
    """Collapse ``members`` into a single position labelled ``strategy``."""
    if not members:
        raise ValueError("combine_positions requires at least one position")

    all_closed = all(member.is_closed for member in members)
    legs = tuple(leg for member in members for leg in member.legs)
    transaction_ids = _unique(txn_id for member in members for txn_id in member.transaction_ids)
    total_credit = sum((member.total_credit for member in members), ZERO)
    total_debit = sum((member.total_debit for member in members), ZERO)
    net = sum((member.net_pl for member in members), ZERO)
    open_credit = sum((member.total_credit for member in members if member.is_open), ZERO)

    return Position(
        id=position_id_for(transaction_ids),
        symbol=members[0].symbol,
        strategy=strategy,
        entry_date=min(member.entry_date for member in members),
        exit_date=members[-1].exit_date if all_closed else None,
        status="closed" if all_closed else "open",
        legs=legs,
        total_credit=total_credit,
        total_debit=total_debit,
        net_pl=net,
        realized_pl=net if all_closed else None,
        max_profitable_debit=None if all_closed else open_credit,
        transaction_ids=transaction_ids,
        roll_ids=_unique(roll_id for member in members for roll_id in member.roll_ids),
    )
