"""
Core ledger models.

This module defines the Pydantic models for the canonical transactions handed to
the position pipeline by the ingestion layer.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

OPENING_CODES = frozenset({"BTO", "STO"})
CLOSING_CODES = frozenset({"BTC", "STC"})
TERMINAL_CODES = frozenset({"BTC", "STC", "OEXP", "OASGN"})
STOCK_CODES = frozenset({"Buy", "Sell"})
TRANS_CODES = OPENING_CODES | TERMINAL_CODES | STOCK_CODES

_OPTION_TYPE_ALIASES = {
    "C": "Call",
    "CALL": "Call",
    "P": "Put",
    "PUT": "Put",
}


class OptionDetails(BaseModel):
    """Option contract descriptor attached to a ledger row."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., description="Underlying symbol (e.g., 'TSLA')")
    expiration: Optional[date] = Field(None, description="Expiration date")
    strike: Optional[Decimal] = Field(None, description="Strike price")
    option_type: Optional[str] = Field(None, description="'Call' or 'Put'")

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v):
        return v.strip().upper()

    @field_validator("option_type")
    @classmethod
    def validate_option_type(cls, v):
        if v is None:
            return v
        normalized = _OPTION_TYPE_ALIASES.get(v.strip().upper())
        if normalized is None:
            raise ValueError('option_type must be "Call" or "Put"')
        return normalized


class Transaction(BaseModel):
    """Represents one immutable ledger row."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable transaction identifier")
    activity_date: date = Field(..., description="Activity (trade) date")
    instrument: str = Field("", description="Instrument text as reported by the broker")
    description: str = Field("", description="Free-form broker description")
    trans_code: str = Field(..., description="Broker transaction code (STO, BTC, OEXP, ...)")
    quantity: Decimal = Field(..., ge=0, description="Number of contracts or shares")
    price: Decimal = Field(Decimal("0"), description="Price per share")
    amount: Decimal = Field(Decimal("0"), description="Signed cash amount; positive is a credit")
    option: Optional[OptionDetails] = Field(None, description="Option descriptor, if any")

    @field_validator("trans_code")
    @classmethod
    def validate_trans_code(cls, v):
        code = v.strip()
        if code.upper() in {"BUY", "SELL"}:
            return code.capitalize()
        code = code.upper()
        if code not in TRANS_CODES:
            raise ValueError(f"unsupported trans_code {v!r}")
        return code

    @property
    def is_option(self) -> bool:
        """Whether the row carries enough option fields for the option pipeline."""
        return (
            self.option is not None
            and self.option.expiration is not None
            and self.option.strike is not None
            and self.option.option_type is not None
        )

    @property
    def is_opening(self) -> bool:
        return self.trans_code in OPENING_CODES

    @property
    def is_terminal(self) -> bool:
        """Whether the row closes, expires or assigns an option lot."""
        return self.trans_code in TERMINAL_CODES

    @property
    def symbol(self) -> str:
        if self.option is not None:
            return self.option.symbol
        return self.instrument.strip().upper()
