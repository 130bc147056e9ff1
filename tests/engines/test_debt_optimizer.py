"""
Tests for the Debt Optimizer.

Covers:
- Single creditor / single debtor
- Order-preserving greedy walk
- Largest-first ordering
- Tolerance handling for near-zero balances
- Plan size bounds
"""

from decimal import Decimal

import pytest

from settlement_kernel.domain.values import GroupType, SettlementRow
from settlement_kernel.exceptions import InvalidOrderingError
from settlement_engines.debt_optimizer import (
    SettlementOrdering,
    optimize_settlements,
    parse_ordering,
    transaction_lower_bound,
)
from tests.conftest import assert_close


def _row(group_id, balance, name=None) -> SettlementRow:
    balance = Decimal(str(balance))
    return SettlementRow(
        group_id=group_id,
        name=name or f"Group {group_id}",
        group_type=GroupType.INTERNAL,
        total_count=1,
        billable_count=1,
        internal_billable_count=1,
        total_paid=max(balance, Decimal("0")),
        fair_share=max(-balance, Decimal("0")),
        balance=balance,
    )


class TestOptimizeSettlements:
    """Tests for the order-preserving greedy walk."""

    def test_single_pair(self):
        plan = optimize_settlements(rows=[_row(1, "600"), _row(2, "-600")])

        assert len(plan) == 1
        assert plan[0].from_group_id == 2
        assert plan[0].to_group_id == 1
        assert plan[0].amount == Decimal("600")
        assert plan[0].from_name == "Group 2"
        assert plan[0].to_name == "Group 1"

    def test_no_balances_no_transactions(self):
        assert optimize_settlements(rows=[_row(1, "0"), _row(2, "0")]) == ()

    def test_empty_rows(self):
        assert optimize_settlements(rows=[]) == ()

    def test_walks_in_input_order(self):
        rows = [
            _row(1, "-100"),
            _row(2, "300"),
            _row(3, "-200"),
            _row(4, "100"),
            _row(5, "-100"),
        ]

        plan = optimize_settlements(rows=rows)

        assert [(t.from_group_id, t.to_group_id, t.amount) for t in plan] == [
            (1, 2, Decimal("100")),
            (3, 2, Decimal("200")),
            (5, 4, Decimal("100")),
        ]

    def test_one_creditor_many_debtors(self):
        rows = [_row(1, "900")] + [_row(g, "-300") for g in (2, 3, 4)]

        plan = optimize_settlements(rows=rows)

        assert [t.from_group_id for t in plan] == [2, 3, 4]
        assert all(t.to_group_id == 1 for t in plan)
        assert sum(t.amount for t in plan) == Decimal("900")

    def test_balances_within_tolerance_ignored(self):
        rows = [_row(1, "0.01"), _row(2, "-0.005"), _row(3, "50"), _row(4, "-50")]

        plan = optimize_settlements(rows=rows)

        assert len(plan) == 1
        assert plan[0].from_group_id == 4
        assert plan[0].to_group_id == 3

    def test_drift_residue_not_emitted(self):
        rows = [
            _row(1, "100.004"),
            _row(2, "-100"),
            _row(3, "-0.004"),
        ]

        plan = optimize_settlements(rows=rows)

        assert len(plan) == 1
        assert plan[0].amount == Decimal("100")

    def test_every_amount_above_tolerance(self):
        rows = [
            _row(1, "33.333"),
            _row(2, "33.333"),
            _row(3, "33.334"),
            _row(4, "-50"),
            _row(5, "-50"),
        ]

        plan = optimize_settlements(rows=rows)

        assert all(t.amount > Decimal("0.01") for t in plan)
        assert_close(sum(t.amount for t in plan), "100")

    def test_plan_size_bounds(self):
        rows = [
            _row(1, "120"),
            _row(2, "-45"),
            _row(3, "80"),
            _row(4, "-70"),
            _row(5, "-85"),
        ]

        plan = optimize_settlements(rows=rows)

        assert transaction_lower_bound(rows) <= len(plan) <= 2 + 3 - 1

    def test_input_rows_untouched(self):
        rows = [_row(1, "10"), _row(2, "-10")]
        before = list(rows)

        optimize_settlements(rows=rows)

        assert rows == before


class TestLargestFirstOrdering:
    """Tests for the magnitude-sorted matching order."""

    def test_largest_creditor_matched_with_largest_debtor(self):
        rows = [
            _row(1, "100"),
            _row(2, "500"),
            _row(3, "-100"),
            _row(4, "-500"),
        ]

        plan = optimize_settlements(rows=rows, ordering=SettlementOrdering.LARGEST_FIRST)

        assert [(t.from_group_id, t.to_group_id) for t in plan] == [(4, 2), (3, 1)]

    def test_input_order_on_same_rows_needs_more_transactions(self):
        rows = [
            _row(1, "100"),
            _row(2, "500"),
            _row(3, "-500"),
            _row(4, "-100"),
        ]

        in_order = optimize_settlements(rows=rows)
        largest = optimize_settlements(rows=rows, ordering=SettlementOrdering.LARGEST_FIRST)

        assert len(in_order) == 3
        assert len(largest) == 2

    def test_ordering_accepts_string_value(self):
        rows = [_row(1, "5"), _row(2, "-5")]

        plan = optimize_settlements(rows=rows, ordering="largest_first")

        assert len(plan) == 1

    def test_unknown_ordering_rejected(self):
        with pytest.raises(InvalidOrderingError) as exc_info:
            optimize_settlements(rows=[_row(1, "5"), _row(2, "-5")], ordering="bogus")

        assert exc_info.value.code == "INVALID_ORDERING"

    def test_parse_ordering_keeps_members(self):
        assert parse_ordering(SettlementOrdering.INPUT_ORDER) is SettlementOrdering.INPUT_ORDER
        assert parse_ordering("largest_first") is SettlementOrdering.LARGEST_FIRST


class TestTransactionLowerBound:
    """Tests for the lower bound on plan size."""

    def test_counts_sides_outside_tolerance(self):
        rows = [_row(1, "10"), _row(2, "0.005"), _row(3, "-4"), _row(4, "-6")]

        assert transaction_lower_bound(rows) == 2

    def test_zero_when_settled(self):
        assert transaction_lower_bound([_row(1, "0")]) == 0
