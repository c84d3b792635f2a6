"""
Roll chain detection and building functionality.

This module attaches detected rolls to the positions they touch and follows roll edges
across positions to build roll chains: the sequence of positions that together make up
one continuous trade, from the original entry to the final exit.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from hashlib import sha256
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .positions import Position
from .roll_detection import Roll

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class RollChainSegment:
    """One position inside a roll chain, with the contract it was rolled from and holds."""

    position_id: str
    roll_id: Optional[str]
    roll_date: Optional[date]
    from_strike: Decimal
    from_expiration: date
    to_strike: Decimal
    to_expiration: date
    credit: Decimal
    debit: Decimal
    net_credit: Decimal
    status: str

    @property
    def is_open(self) -> bool:
        return self.status == "open"


@dataclass(frozen=True)
class RollChain:
    """Positions linked end-to-end by rolls."""

    chain_id: str
    symbol: str
    segments: Tuple[RollChainSegment, ...]
    roll_count: int
    total_credits: Decimal
    total_debits: Decimal
    net_pl: Decimal
    status: str
    first_entry_date: date
    last_exit_date: Optional[date]

    @property
    def position_ids(self) -> Tuple[str, ...]:
        return tuple(segment.position_id for segment in self.segments)

    @property
    def is_open(self) -> bool:
        return self.status == "open"


class UnionFind:
    """Union-find with path compression and union by rank."""

    def __init__(self) -> None:
        self._parent: Dict[str, str] = {}
        self._rank: Dict[str, int] = {}

    def add(self, x: str) -> None:
        if x not in self._parent:
            self._parent[x] = x
            self._rank[x] = 0

    def find(self, x: str) -> str:
        self.add(x)
        if self._parent[x] != x:
            self._parent[x] = self.find(self._parent[x])
        return self._parent[x]

    def union(self, x: str, y: str) -> None:
        rx, ry = self.find(x), self.find(y)
        if rx == ry:
            return
        if self._rank[rx] < self._rank[ry]:
            rx, ry = ry, rx
        self._parent[ry] = rx
        if self._rank[rx] == self._rank[ry]:
            self._rank[rx] += 1


def _owners_by_transaction(positions: Sequence[Position]) -> Dict[str, List[Position]]:
    owners: Dict[str, List[Position]] = defaultdict(list)
    for position in positions:
        for txn_id in position.transaction_ids:
            owners[txn_id].append(position)
    return owners


def attach_rolls(positions: Sequence[Position], rolls: Sequence[Roll]) -> List[Position]:
    """Return ``positions`` with the ids of every roll touching one of their transactions."""
    attached: Dict[str, List[str]] = defaultdict(list)
    owners = _owners_by_transaction(positions)
    for roll in rolls:
        touched: Dict[str, None] = {}
        for leg_id in (roll.from_leg_id, roll.to_leg_id):
            for position in owners.get(leg_id, ()):
                touched.setdefault(position.id, None)
        for position_id in touched:
            attached[position_id].append(roll.id)

    result: List[Position] = []
    for position in positions:
        extra = [
            roll_id
            for roll_id in attached.get(position.id, [])
            if roll_id not in position.roll_ids
        ]
        if extra:
            position = replace(position, roll_ids=(*position.roll_ids, *extra))
        result.append(position)
    return result


def _edge_endpoints(
    roll: Roll, owners: Dict[str, List[Position]]
) -> Optional[Tuple[Position, Position]]:
    """Resolve the positions a roll leaves and enters.

    A closing fill that drained several lots belongs to several positions; the roll leaves
    the most recently entered one.
    """
    sources = owners.get(roll.from_leg_id)
    targets = owners.get(roll.to_leg_id)
    if not sources or not targets:
        return None
    source = max(enumerate(sources), key=lambda item: (item[1].entry_date, item[0]))[1]
    return source, targets[0]


def _select_edges(
    positions: Sequence[Position], rolls: Sequence[Roll]
) -> Dict[str, Tuple[Roll, str]]:
    """Pick the roll edges that form chains; returns ``{source position id: (roll, target id)}``.

    Edges are considered by roll date, then ledger order. Rolls of several legs linking the
    same two positions count as one edge. Any other edge is dropped when its source already
    rolls somewhere, its target was already rolled into, or it would close a cycle, so every
    chain is a simple path.
    """
    owners = _owners_by_transaction(positions)
    outgoing: Dict[str, Tuple[Roll, str]] = {}
    incoming: Set[str] = set()
    components = UnionFind()

    for roll in sorted(rolls, key=lambda item: item.roll_date):
        endpoints = _edge_endpoints(roll, owners)
        if endpoints is None:
            continue
        source, target = endpoints
        if source.id == target.id or source.symbol != target.symbol:
            continue
        existing = outgoing.get(source.id)
        if existing is not None and existing[1] == target.id:
            # another leg of the same multi-leg position rolled alongside the first
            logger.debug("Roll %s repeats the link it shares with %s", roll.id, existing[0].id)
            continue
        if (
            source.id in outgoing
            or target.id in incoming
            or components.find(source.id) == components.find(target.id)
        ):
            logger.warning(
                "Roll %s on %s conflicts with an existing chain link; not chaining it",
                roll.id,
                roll.roll_date.isoformat(),
            )
            continue
        outgoing[source.id] = (roll, target.id)
        incoming.add(target.id)
        components.union(source.id, target.id)
    return outgoing


def chain_id_for(position_ids: Sequence[str]) -> str:
    digest = sha256("|".join(position_ids).encode("utf-8")).hexdigest()
    return f"chain-{digest[:16]}"


def _build_segment(
    position: Position,
    roll_in: Optional[Roll],
    roll_out: Optional[Roll],
) -> RollChainSegment:
    if roll_out is not None:
        to_strike, to_expiration = roll_out.from_strike, roll_out.from_expiration
    elif roll_in is not None:
        to_strike, to_expiration = roll_in.to_strike, roll_in.to_expiration
    else:
        raise ValueError("a chain segment needs at least one roll")

    if roll_in is not None:
        from_strike, from_expiration = roll_in.from_strike, roll_in.from_expiration
    else:
        from_strike, from_expiration = to_strike, to_expiration

    return RollChainSegment(
        position_id=position.id,
        roll_id=roll_in.id if roll_in else None,
        roll_date=roll_in.roll_date if roll_in else None,
        from_strike=from_strike,
        from_expiration=from_expiration,
        to_strike=to_strike,
        to_expiration=to_expiration,
        credit=position.total_credit,
        debit=position.total_debit,
        net_credit=position.total_credit - position.total_debit,
        status=position.status,
    )


def build_chain(path: Sequence[Position], links: Sequence[Roll]) -> RollChain:
    """Build a chain from positions ``path`` joined by ``links`` (``len(path) - 1`` rolls)."""
    if len(path) < 2 or len(links) != len(path) - 1:
        raise ValueError("a roll chain needs n positions joined by n - 1 rolls")

    segments = tuple(
        _build_segment(
            position,
            links[idx - 1] if idx > 0 else None,
            links[idx] if idx < len(links) else None,
        )
        for idx, position in enumerate(path)
    )
    last = path[-1]
    return RollChain(
        chain_id=chain_id_for([position.id for position in path]),
        symbol=path[0].symbol,
        segments=segments,
        roll_count=len(segments) - 1,
        total_credits=sum((segment.credit for segment in segments), ZERO),
        total_debits=sum((segment.debit for segment in segments), ZERO),
        net_pl=sum((segment.net_credit for segment in segments if not segment.is_open), ZERO),
        status="open" if last.is_open else "closed",
        first_entry_date=path[0].entry_date,
        last_exit_date=None if last.is_open else last.exit_date,
    )


def build_roll_chains(positions: Sequence[Position], rolls: Sequence[Roll]) -> List[RollChain]:
    """
    Detect roll chains - sequences of positions connected by rolls.
    A roll chain: Open -> Close+Open -> Close+Open -> ... -> Close (or still open)
    Positions that were never rolled in or out belong to no chain.
    """
    outgoing = _select_edges(positions, rolls)
    targets = {target for _roll, target in outgoing.values()}
    by_id = {position.id: position for position in positions}

    chains: List[RollChain] = []
    for position in positions:
        if position.id not in outgoing or position.id in targets:
            continue
        path = [position]
        links: List[Roll] = []
        while path[-1].id in outgoing:
            roll, target_id = outgoing[path[-1].id]
            links.append(roll)
            path.append(by_id[target_id])
        chains.append(build_chain(path, links))

    chains.sort(key=lambda chain: (chain.first_entry_date, chain.symbol))
    logger.debug("Built %d roll chains from %d rolls", len(chains), len(rolls))
    return chains
