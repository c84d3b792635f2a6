"""End-to-end tests for the position pipeline."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from positionflow.services.multi_leg import ManualGrouping
from positionflow.services.pipeline import build_positions
from positionflow.services.strategy import StrategyKind, StrategyLabel


def test_roll_pipeline_links_positions(scenario_a):
    result = build_positions(scenario_a)

    assert len(result.positions) == 2
    assert len(result.rolls) == 1
    (chain,) = result.roll_chains
    for position in result.positions:
        assert result.position_by_id(position.id) is position
        assert result.chain_for_position(position.id) is chain
        assert result.rolls_for(position) == list(result.rolls)
    roll = result.rolls[0]
    assert result.roll_by_id(roll.id) is roll
    assert result.roll_by_id("roll-missing") is None


def test_every_closing_fill_lands_in_exactly_one_position(make_txn):
    txns = [
        make_txn("o1", date(2025, 5, 1), "STO", 2, "200"),
        make_txn("o2", date(2025, 5, 2), "STO", 2, "180"),
        make_txn("c1", date(2025, 5, 8), "BTC", 3, "-90"),
        make_txn("c2", date(2025, 5, 9), "BTC", 1, "-20"),
    ]
    result = build_positions(txns)

    closing_ids = {"c1", "c2"}
    slices = [
        leg.transaction_id
        for position in result.positions
        for leg in position.legs
        if leg.transaction_id in closing_ids
    ]
    # c1 drains two lots, so it is split across two positions
    assert sorted(slices) == ["c1", "c1", "c2"]
    closed_quantity = sum(
        leg.quantity
        for position in result.positions
        for leg in position.legs
        if leg.transaction_id in closing_ids
    )
    assert closed_quantity == Decimal("4")


def test_net_pl_identity_holds_for_every_position(make_txn, scenario_a):
    txns = [
        *scenario_a,
        make_txn("p1", date(2025, 5, 2), "STO", 1, "90", option_type="Put", strike="90"),
        make_txn("p2", date(2025, 5, 2), "BTO", 1, "-40", option_type="Put", strike="85"),
        make_txn("p3", date(2025, 5, 15), "OEXP", 1, "0", option_type="Put", strike="90"),
        make_txn("p4", date(2025, 5, 15), "OEXP", 1, "0", option_type="Put", strike="85"),
    ]
    result = build_positions(txns)
    for position in result.positions:
        assert position.net_pl == position.total_credit - position.total_debit
        if position.is_closed:
            assert position.realized_pl == position.net_pl
    spread = next(p for p in result.positions if p.strategy.kind is StrategyKind.VERTICAL)
    assert spread.strategy_type == "Put Credit Spread"
    assert spread.is_closed
    assert spread.net_pl == Decimal("50.00")


def test_orphans_are_reported(make_txn):
    result = build_positions([make_txn("lonely", date(2025, 5, 1), "BTC", 1, "-10")])
    assert result.positions == ()
    assert result.orphan_transaction_ids == ("lonely",)


def test_manual_groupings_and_custom_classifier(make_txn):
    txns = [
        make_txn("a", date(2025, 5, 1), "STO", 1, "100"),
        make_txn("b", date(2025, 5, 2), "STO", 1, "100", strike="110"),
    ]

    def classifier(_legs):
        return StrategyLabel(StrategyKind.SINGLE, "Custom Single")

    result = build_positions(
        txns,
        [ManualGrouping(transaction_ids=("a", "b"), strategy_name="Two Step")],
        classifier=classifier,
    )
    (position,) = result.positions
    assert position.strategy_type == "Two Step"


def test_pipeline_is_deterministic(scenario_a):
    first = build_positions(scenario_a)
    second = build_positions(list(scenario_a))
    assert [p.id for p in first.positions] == [p.id for p in second.positions]
    assert [c.chain_id for c in first.roll_chains] == [c.chain_id for c in second.roll_chains]
