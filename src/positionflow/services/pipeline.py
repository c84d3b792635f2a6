"""
Position pipeline orchestration.

``build_positions`` runs the whole derivation in one synchronous pass:
transactions -> matched leg groups -> positions -> merged positions -> rolls -> chains.
Every call owns its working state, so the pipeline is re-run in full whenever the ledger
changes rather than updated incrementally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.models import Transaction
from .chain_builder import RollChain, attach_rolls, build_roll_chains
from .leg_matching import match_leg_groups
from .multi_leg import ManualGrouping, apply_manual_groupings, merge_multi_leg_positions
from .positions import Position, assemble_positions
from .roll_detection import Roll, detect_rolls
from .strategy import Classifier, classify_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionBuildResult:
    """Flat, id-indexed output of :func:`build_positions`."""

    positions: Tuple[Position, ...]
    rolls: Tuple[Roll, ...]
    roll_chains: Tuple[RollChain, ...]
    orphan_transaction_ids: Tuple[str, ...] = ()
    _positions_by_id: Dict[str, Position] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._positions_by_id.update({position.id: position for position in self.positions})

    def position_by_id(self, position_id: str) -> Optional[Position]:
        return self._positions_by_id.get(position_id)

    def roll_by_id(self, roll_id: str) -> Optional[Roll]:
        return next((roll for roll in self.rolls if roll.id == roll_id), None)

    def rolls_for(self, position: Position) -> List[Roll]:
        wanted = set(position.roll_ids)
        return [roll for roll in self.rolls if roll.id in wanted]

    def chain_for_position(self, position_id: str) -> Optional[RollChain]:
        for chain in self.roll_chains:
            if position_id in chain.position_ids:
                return chain
        return None


def build_positions(
    transactions: Iterable[Transaction],
    manual_groupings: Sequence[ManualGrouping] = (),
    *,
    classifier: Classifier = classify_strategy,
) -> PositionBuildResult:
    """Derive positions, rolls and roll chains from a full transaction ledger."""
    transactions = list(transactions)

    matched = match_leg_groups(transactions)
    positions = assemble_positions(matched, classifier=classifier)
    positions = merge_multi_leg_positions(positions, classifier=classifier)
    if manual_groupings:
        positions = apply_manual_groupings(positions, manual_groupings)

    rolls = detect_rolls(transactions)
    positions = attach_rolls(positions, rolls)
    chains = build_roll_chains(positions, rolls)

    logger.debug(
        "Built %d positions, %d rolls, %d chains from %d transactions",
        len(positions),
        len(rolls),
        len(chains),
        len(transactions),
    )
    return PositionBuildResult(
        positions=tuple(positions),
        rolls=tuple(rolls),
        roll_chains=tuple(chains),
        orphan_transaction_ids=matched.orphan_transaction_ids,
    )
