"""Strategy classification for option legs.

The classifier is a pure function of the opening legs of a position. It returns a
:class:`StrategyLabel` carrying a closed :class:`StrategyKind` tag next to the human readable
name, so callers branch on the tag rather than on substrings of the name.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from ..core.legs import OptionLeg


class StrategyKind(str, Enum):
    SINGLE = "single"
    VERTICAL = "vertical"
    IRON_CONDOR = "iron_condor"
    STRADDLE = "straddle"
    STRANGLE = "strangle"
    CALENDAR = "calendar"
    DIAGONAL = "diagonal"
    UNKNOWN = "unknown"


MULTI_LEG_KINDS = frozenset(
    {
        StrategyKind.VERTICAL,
        StrategyKind.IRON_CONDOR,
        StrategyKind.STRADDLE,
        StrategyKind.STRANGLE,
        StrategyKind.CALENDAR,
        StrategyKind.DIAGONAL,
    }
)


@dataclass(frozen=True)
class StrategyLabel:
    """Result of strategy classification."""

    kind: StrategyKind
    name: str

    @property
    def is_multi_leg(self) -> bool:
        return self.kind in MULTI_LEG_KINDS

    def __str__(self) -> str:
        return self.name


UNKNOWN = StrategyLabel(StrategyKind.UNKNOWN, "Unknown")

_KNOWN_LABELS: Dict[str, StrategyKind] = {
    "Long Call": StrategyKind.SINGLE,
    "Long Put": StrategyKind.SINGLE,
    "Short Call": StrategyKind.SINGLE,
    "Short Put": StrategyKind.SINGLE,
    "Cash Secured Put": StrategyKind.SINGLE,
    "Covered Call": StrategyKind.SINGLE,
    "Put Credit Spread": StrategyKind.VERTICAL,
    "Put Debit Spread": StrategyKind.VERTICAL,
    "Call Credit Spread": StrategyKind.VERTICAL,
    "Call Debit Spread": StrategyKind.VERTICAL,
    "Iron Condor": StrategyKind.IRON_CONDOR,
    "Long Straddle": StrategyKind.STRADDLE,
    "Short Straddle": StrategyKind.STRADDLE,
    "Long Strangle": StrategyKind.STRANGLE,
    "Short Strangle": StrategyKind.STRANGLE,
    "Calendar Spread": StrategyKind.CALENDAR,
    "Diagonal Spread": StrategyKind.DIAGONAL,
    "Unknown": StrategyKind.UNKNOWN,
}

Classifier = Callable[[Sequence[OptionLeg]], StrategyLabel]


def label_for_name(name: str) -> StrategyLabel:
    """Return the label for a known strategy name, or an ``Unknown``-kind label carrying it."""
    kind = _KNOWN_LABELS.get(name, StrategyKind.UNKNOWN)
    return StrategyLabel(kind, name)


def _label(name: str) -> StrategyLabel:
    return StrategyLabel(_KNOWN_LABELS[name], name)


def _match_single(leg: OptionLeg) -> Optional[StrategyLabel]:
    if leg.trans_code == "STO":
        return _label("Cash Secured Put" if leg.option_type == "Put" else "Short Call")
    if leg.trans_code == "BTO":
        return _label(f"Long {leg.option_type}")
    return None


def _match_straddle_or_strangle(low: OptionLeg, high: OptionLeg) -> Optional[StrategyLabel]:
    if low.expiration != high.expiration or low.option_type == high.option_type:
        return None
    if low.trans_code != high.trans_code:
        return None
    side = "Long" if low.trans_code == "BTO" else "Short"
    shape = "Straddle" if low.strike == high.strike else "Strangle"
    return _label(f"{side} {shape}")


def _match_vertical(low: OptionLeg, high: OptionLeg) -> Optional[StrategyLabel]:
    if low.expiration != high.expiration or low.option_type != high.option_type:
        return None
    if low.strike == high.strike or low.trans_code == high.trans_code:
        return None

    if low.option_type == "Put":
        # credit: short the higher put, long the lower put
        credit = low.trans_code == "BTO"
    else:
        # credit: short the lower call, long the higher call
        credit = low.trans_code == "STO"
    return _label(f"{low.option_type} {'Credit' if credit else 'Debit'} Spread")


def _match_time_spread(low: OptionLeg, high: OptionLeg) -> Optional[StrategyLabel]:
    if low.expiration == high.expiration or low.option_type != high.option_type:
        return None
    if low.trans_code == high.trans_code:
        return None
    if low.strike == high.strike:
        return _label("Calendar Spread")
    return _label("Diagonal Spread")


def _match_iron_condor(legs: List[OptionLeg]) -> Optional[StrategyLabel]:
    if len({leg.expiration for leg in legs}) != 1:
        return None
    puts = sorted((leg for leg in legs if leg.option_type == "Put"), key=lambda leg: leg.strike)
    calls = sorted((leg for leg in legs if leg.option_type == "Call"), key=lambda leg: leg.strike)
    if len(puts) != 2 or len(calls) != 2:
        return None

    lower_put, higher_put = puts
    lower_call, higher_call = calls
    put_credit = lower_put.trans_code == "BTO" and higher_put.trans_code == "STO"
    call_credit = lower_call.trans_code == "STO" and higher_call.trans_code == "BTO"
    if put_credit and call_credit:
        return _label("Iron Condor")
    return None


def classify_strategy(legs: Sequence[OptionLeg]) -> StrategyLabel:
    """Classify the strategy formed by the opening legs in ``legs``.

    Closing, expiration and assignment legs are ignored; a closed position is classified by
    how it was opened.
    """
    opening = [leg for leg in legs if leg.is_opening]
    if not opening:
        return UNKNOWN

    if len(opening) == 1:
        return _match_single(opening[0]) or UNKNOWN

    if len(opening) == 2:
        low, high = sorted(opening, key=lambda leg: (leg.strike, leg.expiration))
        for matcher in (_match_straddle_or_strangle, _match_vertical, _match_time_spread):
            label = matcher(low, high)
            if label is not None:
                return label
        return UNKNOWN

    if len(opening) == 4:
        return _match_iron_condor(opening) or UNKNOWN

    return UNKNOWN
