"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
import logging
from datetime import date
from decimal import Decimal

import pytest

from positionflow.core.models import OptionDetails, Transaction

BASE_EXPIRATION = date(2025, 6, 20)


def _build_transaction(
    txn_id: str,
    activity_date: date,
    trans_code: str,
    quantity: int | str = 1,
    amount: str = "0",
    *,
    symbol: str = "TSLA",
    strike: str = "100",
    expiration: date = BASE_EXPIRATION,
    option_type: str = "Call",
    price: str | None = None,
) -> Transaction:
    qty = Decimal(str(quantity))
    cash = Decimal(amount)
    if price is None:
        per_share = abs(cash) / (qty * 100) if qty else Decimal("0")
        price = str(per_share.quantize(Decimal("0.01")))
    return Transaction(
        id=txn_id,
        activity_date=activity_date,
        instrument=symbol,
        description=f"{symbol} {expiration:%m/%d/%Y} {option_type} ${strike}",
        trans_code=trans_code,
        quantity=qty,
        price=Decimal(price),
        amount=cash,
        option=OptionDetails(
            symbol=symbol,
            expiration=expiration,
            strike=Decimal(strike),
            option_type=option_type,
        ),
    )


@pytest.fixture
def make_txn():
    """Factory for option transactions with sensible defaults."""
    return _build_transaction


@pytest.fixture
def write_ledger(tmp_path):
    """Write transactions (and optional manual groupings) to a JSON ledger file."""

    def _write(transactions, manual_groupings=None, name="ledger.json"):
        records = [txn.model_dump(mode="json") for txn in transactions]
        payload = records
        if manual_groupings is not None:
            payload = {"transactions": records, "manual_groupings": manual_groupings}
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def scenario_a(make_txn):
    """STO five $100 calls, then roll them to the $105 July calls on day six."""
    return [
        make_txn("a-1", date(2025, 5, 1), "STO", 5, "500", strike="100"),
        make_txn("a-2", date(2025, 5, 6), "BTC", 5, "-200", strike="100"),
        make_txn(
            "a-3",
            date(2025, 5, 6),
            "STO",
            5,
            "650",
            strike="105",
            expiration=date(2025, 7, 18),
        ),
    ]


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handlers and levels installed by ``configure_logging`` during a test."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler and handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
