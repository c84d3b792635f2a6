"""Tests for FIFO leg matching."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from positionflow.services.leg_matching import (
    LotFillPortion,
    match_leg_groups,
    sort_transactions,
)


def test_open_and_close_forms_closed_group(make_txn):
    txns = [
        make_txn("open", date(2025, 5, 1), "STO", 1, "120"),
        make_txn("close", date(2025, 5, 9), "BTC", 1, "-40"),
    ]
    result = match_leg_groups(txns)
    assert result.open_groups == ()
    assert len(result.closed_groups) == 1
    group = result.closed_groups[0]
    assert group.transaction_ids == ("open", "close")
    assert group.opened_at == date(2025, 5, 1)
    assert group.closed_at == date(2025, 5, 9)
    assert group.open_quantity == 0


def test_fifo_drains_oldest_lot_first(make_txn):
    txns = [
        make_txn("day3", date(2025, 5, 3), "STO", 2, "240"),
        make_txn("day1", date(2025, 5, 1), "STO", 2, "200"),
        make_txn("day2", date(2025, 5, 2), "STO", 2, "220"),
        make_txn("close", date(2025, 5, 10), "BTC", 3, "-150"),
    ]
    result = match_leg_groups(txns)

    assert [g.open_portions[0].transaction.id for g in result.closed_groups] == ["day1"]
    (open_group,) = result.open_groups
    assert [p.transaction.id for p in open_group.open_portions] == ["day2", "day3"]
    assert open_group.open_quantity == Decimal("3")
    # day2 was partially closed by the remaining contract
    assert [p.quantity for p in open_group.close_portions] == [Decimal("1")]


def test_closing_cash_is_prorated_across_lots(make_txn):
    txns = [
        make_txn("lot-a", date(2025, 5, 1), "STO", 1, "100"),
        make_txn("lot-b", date(2025, 5, 2), "STO", 2, "220"),
        make_txn("close", date(2025, 5, 10), "BTC", 3, "-100"),
    ]
    result = match_leg_groups(txns)

    assert len(result.closed_groups) == 2
    first, second = result.closed_groups
    assert first.close_portions[0].amount == Decimal("-33.33")
    assert second.close_portions[0].amount == Decimal("-66.67")
    total = sum(p.amount for g in result.closed_groups for p in g.close_portions)
    assert total == Decimal("-100.00")


def test_inventory_is_conserved_per_contract(make_txn):
    txns = [
        make_txn("o1", date(2025, 5, 1), "STO", 3, "300"),
        make_txn("o2", date(2025, 5, 2), "STO", 4, "400"),
        make_txn("c1", date(2025, 5, 5), "BTC", 2, "-50"),
        make_txn("c2", date(2025, 5, 6), "BTC", 2, "-50"),
    ]
    result = match_leg_groups(txns)
    opened = sum(g.opened_quantity for g in result.groups)
    closed = sum(g.closed_quantity for g in result.groups)
    still_open = sum(g.open_quantity for g in result.open_groups)
    assert opened == Decimal("7")
    assert closed == Decimal("4")
    assert opened - closed == still_open


def test_contracts_are_matched_independently(make_txn):
    txns = [
        make_txn("call", date(2025, 5, 1), "STO", 1, "100", option_type="Call"),
        make_txn("put", date(2025, 5, 1), "STO", 1, "90", option_type="Put"),
        make_txn("put-close", date(2025, 5, 4), "BTC", 1, "-20", option_type="Put"),
    ]
    result = match_leg_groups(txns)
    assert result.closed_groups[0].transaction_ids == ("put", "put-close")
    assert result.open_groups[0].transaction_ids == ("call",)


def test_expiration_and_assignment_close_lots(make_txn):
    txns = [
        make_txn("o1", date(2025, 5, 1), "STO", 1, "100"),
        make_txn("o2", date(2025, 5, 1), "STO", 1, "100", strike="110"),
        make_txn("exp", date(2025, 6, 20), "OEXP", 1, "0"),
        make_txn("asg", date(2025, 6, 20), "OASGN", 1, "0", strike="110"),
    ]
    result = match_leg_groups(txns)
    codes = sorted(g.close_portions[-1].trans_code for g in result.closed_groups)
    assert codes == ["OASGN", "OEXP"]
    assert result.open_groups == ()


def test_orphan_closing_fill_is_reported(make_txn, caplog):
    txns = [make_txn("orphan", date(2025, 5, 3), "BTC", 1, "-50")]
    with caplog.at_level("WARNING", logger="positionflow.services.leg_matching"):
        result = match_leg_groups(txns)
    assert result.groups == ()
    assert result.orphan_transaction_ids == ("orphan",)
    assert "no open lot" in caplog.text


def test_overclose_reports_remainder(make_txn):
    txns = [
        make_txn("open", date(2025, 5, 1), "STO", 1, "100"),
        make_txn("close", date(2025, 5, 2), "BTC", 2, "-60"),
    ]
    result = match_leg_groups(txns)
    assert len(result.closed_groups) == 1
    assert result.closed_groups[0].closed_quantity == Decimal("1")
    assert result.orphan_transaction_ids == ("close",)


def test_same_day_ties_keep_ledger_order(make_txn):
    day = date(2025, 5, 1)
    txns = [
        make_txn("first", day, "STO", 1, "100"),
        make_txn("second", day, "STO", 1, "110"),
        make_txn("close", date(2025, 5, 2), "BTC", 1, "-30"),
    ]
    shuffled = [txns[2], *txns[:2]]
    assert [t.id for t in sort_transactions(shuffled)] == ["first", "second", "close"]
    result = match_leg_groups(txns)
    assert result.closed_groups[0].open_portions[0].transaction.id == "first"


def test_non_option_and_zero_quantity_rows_are_ignored(make_txn):
    stock = make_txn("stock", date(2025, 5, 1), "Buy", 100, "-5000")
    stock = stock.model_copy(update={"option": None})
    zero = make_txn("zero", date(2025, 5, 1), "STO", 0, "0")
    assert match_leg_groups([stock, zero]).groups == ()


def test_lot_fill_portion_split(make_txn):
    txn = make_txn("t", date(2025, 5, 1), "BTC", 3, "-100")
    portion = LotFillPortion(transaction=txn, quantity=Decimal("3"), amount=Decimal("-100"))

    first, rest = portion.split(Decimal("1"))
    assert first.amount == Decimal("-33.33")
    assert rest.amount == Decimal("-66.67")
    assert rest.quantity == Decimal("2")

    whole, none = portion.split(Decimal("3"))
    assert whole is portion
    assert none is None

    with pytest.raises(ValueError):
        portion.split(Decimal("4"))
