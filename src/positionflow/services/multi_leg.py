"""Multi-leg merging of same-day positions and user-defined groupings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Sequence, Tuple

from .positions import Position, combine_positions
from .strategy import Classifier, classify_strategy, label_for_name

logger = logging.getLogger(__name__)

GroupKey = Tuple[str, date]


@dataclass(frozen=True)
class ManualGrouping:
    """User override forcing the positions behind ``transaction_ids`` into one position."""

    transaction_ids: Tuple[str, ...]
    strategy_name: str


def _group_by_symbol_and_day(positions: Iterable[Position]) -> Dict[GroupKey, List[Position]]:
    grouped: Dict[GroupKey, List[Position]] = {}
    for position in positions:
        grouped.setdefault((position.symbol, position.entry_date), []).append(position)
    return grouped


def merge_multi_leg_positions(
    positions: Sequence[Position],
    *,
    classifier: Classifier = classify_strategy,
) -> List[Position]:
    """Collapse same-day positions on one underlying when their legs form a multi-leg strategy.

    Groups whose combined legs do not classify as a multi-leg kind are left as independent
    positions. Running the merger over its own output returns it unchanged.
    """
    merged: List[Position] = []
    for (symbol, entry_date), members in _group_by_symbol_and_day(positions).items():
        if len(members) == 1:
            merged.append(members[0])
            continue

        combined_legs = [leg for member in members for leg in member.legs]
        label = classifier(combined_legs)
        if not label.is_multi_leg:
            merged.extend(members)
            continue

        logger.debug(
            "Merging %d %s positions opened %s into %s",
            len(members),
            symbol,
            entry_date.isoformat(),
            label.name,
        )
        merged.append(combine_positions(members, label))
    return merged


def apply_manual_groupings(
    positions: Sequence[Position],
    groupings: Iterable[ManualGrouping],
) -> List[Position]:
    """Combine the positions touched by each grouping, in grouping order.

    A grouping that references no known transaction leaves the list untouched.
    """
    result = list(positions)
    for grouping in groupings:
        wanted = set(grouping.transaction_ids)
        members = [p for p in result if wanted.intersection(p.transaction_ids)]
        if not members:
            logger.debug("Manual grouping %s matched no positions", grouping.strategy_name)
            continue

        combined = combine_positions(members, label_for_name(grouping.strategy_name))
        member_ids = {member.id for member in members}
        insert_at = next(idx for idx, p in enumerate(result) if p.id in member_ids)
        result = [p for p in result if p.id not in member_ids]
        result.insert(insert_at, combined)
    return result
