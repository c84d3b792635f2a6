"""JSON serialization utilities for positions, rolls, chains and summaries."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from ..core.legs import OptionLeg
from .chain_builder import RollChain, RollChainSegment
from .pipeline import PositionBuildResult
from .positions import Position
from .roll_detection import Roll
from .summary import SummaryStats


def serialize_decimal(value: Any) -> Any:
    """Serialize Decimal values to JSON-compatible format."""
    if isinstance(value, Decimal):
        normalized = value.normalize()
        return format(normalized, "f")
    return value


def serialize_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_leg(leg: OptionLeg) -> Dict[str, Any]:
    """Serialize an option leg for JSON output."""
    return {
        "id": leg.id,
        "transaction_id": leg.transaction_id,
        "symbol": leg.symbol,
        "expiration": serialize_date(leg.expiration),
        "strike": serialize_decimal(leg.strike),
        "option_type": leg.option_type,
        "trans_code": leg.trans_code,
        "quantity": serialize_decimal(leg.quantity),
        "price": serialize_decimal(leg.price),
        "amount": serialize_decimal(leg.amount),
        "activity_date": serialize_date(leg.activity_date),
        "status": leg.status,
    }


def serialize_position(position: Position) -> Dict[str, Any]:
    """Serialize a position for JSON output."""
    return {
        "id": position.id,
        "symbol": position.symbol,
        "strategy_type": position.strategy.name,
        "strategy_kind": position.strategy.kind.value,
        "entry_date": serialize_date(position.entry_date),
        "exit_date": serialize_date(position.exit_date),
        "status": position.status,
        "legs": [serialize_leg(leg) for leg in position.legs],
        "roll_ids": list(position.roll_ids),
        "total_credit": serialize_decimal(position.total_credit),
        "total_debit": serialize_decimal(position.total_debit),
        "net_pl": serialize_decimal(position.net_pl),
        "realized_pl": serialize_decimal(position.realized_pl),
        "max_profitable_debit": serialize_decimal(position.max_profitable_debit),
        "transaction_ids": list(position.transaction_ids),
    }


def serialize_roll(roll: Roll) -> Dict[str, Any]:
    """Serialize a roll for JSON output."""
    return {
        "id": roll.id,
        "from_leg_id": roll.from_leg_id,
        "to_leg_id": roll.to_leg_id,
        "symbol": roll.symbol,
        "option_type": roll.option_type,
        "roll_date": serialize_date(roll.roll_date),
        "from_strike": serialize_decimal(roll.from_strike),
        "to_strike": serialize_decimal(roll.to_strike),
        "from_expiration": serialize_date(roll.from_expiration),
        "to_expiration": serialize_date(roll.to_expiration),
        "quantity": serialize_decimal(roll.quantity),
        "net_credit": serialize_decimal(roll.net_credit),
    }


def serialize_segment(segment: RollChainSegment) -> Dict[str, Any]:
    return {
        "position_id": segment.position_id,
        "roll_id": segment.roll_id,
        "roll_date": serialize_date(segment.roll_date),
        "from_strike": serialize_decimal(segment.from_strike),
        "from_expiration": serialize_date(segment.from_expiration),
        "to_strike": serialize_decimal(segment.to_strike),
        "to_expiration": serialize_date(segment.to_expiration),
        "credit": serialize_decimal(segment.credit),
        "debit": serialize_decimal(segment.debit),
        "net_credit": serialize_decimal(segment.net_credit),
        "status": segment.status,
    }


def serialize_chain(chain: RollChain) -> Dict[str, Any]:
    """Serialize a roll chain for JSON output."""
    return {
        "chain_id": chain.chain_id,
        "symbol": chain.symbol,
        "status": chain.status,
        "roll_count": chain.roll_count,
        "first_entry_date": serialize_date(chain.first_entry_date),
        "last_exit_date": serialize_date(chain.last_exit_date),
        "total_credits": serialize_decimal(chain.total_credits),
        "total_debits": serialize_decimal(chain.total_debits),
        "net_pl": serialize_decimal(chain.net_pl),
        "segments": [serialize_segment(segment) for segment in chain.segments],
    }


def serialize_summary(summary: SummaryStats) -> Dict[str, Any]:
    """Serialize summary statistics for JSON output."""
    return {
        "total_pl": serialize_decimal(summary.total_pl),
        "total_premium_collected": serialize_decimal(summary.total_premium_collected),
        "open_positions_count": summary.open_positions_count,
        "closed_positions_count": summary.closed_positions_count,
        "win_rate": serialize_decimal(summary.win_rate),
        "total_wins": summary.total_wins,
        "total_losses": summary.total_losses,
    }


def serialize_build_result(
    result: PositionBuildResult, summary: Optional[SummaryStats] = None
) -> Dict[str, Any]:
    """Serialize a full pipeline result, optionally with its summary."""
    payload: Dict[str, Any] = {
        "positions": [serialize_position(position) for position in result.positions],
        "rolls": [serialize_roll(roll) for roll in result.rolls],
        "roll_chains": [serialize_chain(chain) for chain in result.roll_chains],
        "orphan_transaction_ids": list(result.orphan_transaction_ids),
    }
    if summary is not None:
        payload["summary"] = serialize_summary(summary)
    return payload
