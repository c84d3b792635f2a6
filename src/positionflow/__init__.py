"""
PositionFlow - Options trading position and roll chain analysis.

A Python package that turns a brokerage fill ledger into positions, rolls, roll chains and
portfolio statistics.
"""

__version__ = "0.1.0"

# Import main components for easy access
from .core.legs import LegContract, OptionLeg
from .core.models import OptionDetails, Transaction
from .services.chain_builder import RollChain, RollChainSegment
from .services.multi_leg import ManualGrouping
from .services.pipeline import PositionBuildResult, build_positions
from .services.positions import Position
from .services.roll_detection import Roll
from .services.strategy import StrategyKind, StrategyLabel, classify_strategy
from .services.summary import SummaryStats, calculate_summary

__all__ = [
    "Transaction",
    "OptionDetails",
    "LegContract",
    "OptionLeg",
    "Position",
    "Roll",
    "RollChain",
    "RollChainSegment",
    "ManualGrouping",
    "PositionBuildResult",
    "StrategyKind",
    "StrategyLabel",
    "SummaryStats",
    "build_positions",
    "calculate_summary",
    "classify_strategy",
]
