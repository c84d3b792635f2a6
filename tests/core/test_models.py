"""Tests for the canonical transaction models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from positionflow.core.models import OptionDetails, Transaction


def _make_txn(**overrides) -> Transaction:
    data = {
        "id": "t-1",
        "activity_date": date(2025, 5, 1),
        "trans_code": "STO",
        "quantity": Decimal("1"),
        "amount": Decimal("125"),
        "option": OptionDetails(
            symbol="tsla",
            expiration=date(2025, 6, 20),
            strike=Decimal("250"),
            option_type="C",
        ),
    }
    data.update(overrides)
    return Transaction(**data)


def test_option_details_normalises_symbol_and_type():
    txn = _make_txn()
    assert txn.option.symbol == "TSLA"
    assert txn.option.option_type == "Call"
    assert txn.symbol == "TSLA"


@pytest.mark.parametrize("raw", ["put", "P", " Put "])
def test_option_type_aliases(raw):
    details = OptionDetails(symbol="AAPL", option_type=raw)
    assert details.option_type == "Put"


def test_option_type_rejects_garbage():
    with pytest.raises(ValidationError):
        OptionDetails(symbol="AAPL", option_type="straddle")


@pytest.mark.parametrize(
    "raw, expected",
    [("sto", "STO"), (" btc ", "BTC"), ("OEXP", "OEXP"), ("buy", "Buy"), ("SELL", "Sell")],
)
def test_trans_code_is_normalised(raw, expected):
    assert _make_txn(trans_code=raw).trans_code == expected


def test_unknown_trans_code_rejected():
    with pytest.raises(ValidationError, match="unsupported trans_code"):
        _make_txn(trans_code="ACH")


def test_negative_quantity_rejected():
    with pytest.raises(ValidationError):
        _make_txn(quantity=Decimal("-1"))


def test_transaction_is_immutable():
    txn = _make_txn()
    with pytest.raises(ValidationError):
        txn.amount = Decimal("0")


def test_is_option_requires_full_contract():
    assert _make_txn().is_option
    partial = _make_txn(option=OptionDetails(symbol="TSLA", strike=Decimal("250")))
    assert not partial.is_option
    stock = _make_txn(trans_code="Buy", option=None, instrument="tsla")
    assert not stock.is_option
    assert stock.symbol == "TSLA"


def test_opening_and_terminal_flags():
    assert _make_txn(trans_code="BTO").is_opening
    assert not _make_txn(trans_code="BTO").is_terminal
    for code in ("BTC", "STC", "OEXP", "OASGN"):
        txn = _make_txn(trans_code=code)
        assert txn.is_terminal
        assert not txn.is_opening
