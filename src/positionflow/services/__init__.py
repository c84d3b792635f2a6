"""Services for position, roll and roll-chain analysis."""

from .chain_builder import RollChain, RollChainSegment, attach_rolls, build_roll_chains
from .display import format_currency, format_date, format_percent
from .json_serializer import (
    serialize_build_result,
    serialize_chain,
    serialize_decimal,
    serialize_leg,
    serialize_position,
    serialize_roll,
    serialize_summary,
)
from .leg_matching import LegMatchResult, LotFillPortion, MatchedLegGroup, match_leg_groups
from .multi_leg import ManualGrouping, apply_manual_groupings, merge_multi_leg_positions
from .pipeline import PositionBuildResult, build_positions
from .positions import Position, assemble_positions, build_position, combine_positions
from .roll_detection import Roll, detect_rolls
from .strategy import StrategyKind, StrategyLabel, classify_strategy
from .summary import SummaryStats, calculate_summary
from .transaction_loader import TransactionLoadError, load_ledger, parse_transactions

__all__ = [
    "build_positions",
    "calculate_summary",
    "classify_strategy",
    "match_leg_groups",
    "assemble_positions",
    "build_position",
    "combine_positions",
    "merge_multi_leg_positions",
    "apply_manual_groupings",
    "detect_rolls",
    "attach_rolls",
    "build_roll_chains",
    "load_ledger",
    "parse_transactions",
    "format_currency",
    "format_date",
    "format_percent",
    "serialize_decimal",
    "serialize_leg",
    "serialize_position",
    "serialize_roll",
    "serialize_chain",
    "serialize_summary",
    "serialize_build_result",
    "LegMatchResult",
    "LotFillPortion",
    "MatchedLegGroup",
    "ManualGrouping",
    "Position",
    "PositionBuildResult",
    "Roll",
    "RollChain",
    "RollChainSegment",
    "StrategyKind",
    "StrategyLabel",
    "SummaryStats",
    "TransactionLoadError",
]
