"""
Module: settlement_engines.settlement
Responsibility:
    Run the whole settlement pipeline over one input snapshot:
    validation -> headcounts & total -> fair shares -> balances ->
    transactions.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Entry point for the HTTP collaborator, which loads the snapshot and
    renders the result; neither concern lives here.

Invariants enforced:
    - Nothing is computed from a malformed snapshot; validation errors
      propagate before any engine runs.
    - Soft-deleted expenses never reach the aggregator.
    - Inputs are never mutated; every derived value lives in a new
      frozen result.
    - No caching: each call recomputes from the snapshot it is given.

Failure modes:
    - ValidationError subclasses from ``validate_snapshot``.
    - InvalidOrderingError for an unknown ``ordering``, raised with the
      other validation errors before ``settlement_started`` is logged.

Usage:
    from settlement_engines.settlement import SettlementEngine

    engine = SettlementEngine()
    result = engine.calculate(
        expenses=expenses,
        groups=roster.groups,
        exclusions=roster.exclusions,
    )
    result.rows          # settlement report
    result.transactions  # transaction plan
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from settlement_engines.aggregation import active_expenses, aggregate_expenses
from settlement_engines.balances import build_balances
from settlement_engines.debt_optimizer import (
    SettlementOrdering,
    optimize_settlements,
    parse_ordering,
)
from settlement_engines.fair_share import calculate_fair_shares
from settlement_engines.headcount import resolve_headcounts, summarize_headcounts
from settlement_engines.tracer import traced_engine
from settlement_kernel.domain.validation import validate_snapshot
from settlement_kernel.domain.values import (
    Expense,
    Group,
    HeadcountSummary,
    MemberExclusion,
    SettlementRow,
    SettlementSummary,
    Transaction,
    ZERO,
)
from settlement_kernel.exceptions import ValidationError
from settlement_kernel.logging_config import get_logger

logger = get_logger("engines.settlement")


@dataclass(frozen=True)
class SettlementResult:
    """
    Complete output of one settlement run.

    Contract:
        ``rows`` is the settlement report, one row per group in input
        order.  ``transactions`` is the payment plan that settles it.
    Non-goals:
        - Does not persist anything; callers own storage and display.
    """

    rows: tuple[SettlementRow, ...]
    transactions: tuple[Transaction, ...]
    summary: SettlementSummary
    headcount_summary: HeadcountSummary

    @property
    def total_paid(self) -> Decimal:
        return sum((r.total_paid for r in self.rows), ZERO)

    @property
    def total_fair_share(self) -> Decimal:
        return sum((r.fair_share for r in self.rows), ZERO)

    @property
    def total_balance(self) -> Decimal:
        return sum((r.balance for r in self.rows), ZERO)

    def to_dict(self) -> dict[str, Any]:
        return {
            "settlement": [r.to_dict() for r in self.rows],
            "transactions": [t.to_dict() for t in self.transactions],
            "summary": self.summary.to_dict(),
        }


class SettlementEngine:
    """
    Compute fair shares, balances and a payment plan for a group snapshot.

    Contract:
        Pure function of its arguments.  No I/O, no database access, no
        state kept between calls; concurrent callers are safe as long as
        each passes its own snapshot.
    """

    @traced_engine("settlement", "1.0", fingerprint_fields=("groups", "ordering"))
    def calculate(
        self,
        *,
        expenses: Iterable[Expense],
        groups: Sequence[Group],
        exclusions: Iterable[MemberExclusion] = (),
        ordering: SettlementOrdering = SettlementOrdering.INPUT_ORDER,
    ) -> SettlementResult:
        """
        Run the settlement pipeline.

        Args:
            expenses: Recorded expenses; soft-deleted ones are skipped.
            groups: Payer groups in display order.
            exclusions: Sparse member exclusion records for any group.
            ordering: Matching order for the payment plan, as a
                ``SettlementOrdering`` or its string value.

        Raises:
            ValidationError: if the snapshot is malformed.
        """
        t0 = time.monotonic()
        live = active_expenses(expenses)

        try:
            ordering = parse_ordering(ordering)
            snapshot = validate_snapshot(live, groups, exclusions)
        except ValidationError as exc:
            logger.warning("settlement_validation_failed", extra={
                "error_code": exc.code,
                "error": str(exc),
            })
            raise

        logger.info("settlement_started", extra={
            "expense_count": len(snapshot.expenses),
            "group_count": len(snapshot.groups),
            "ordering": ordering.value,
        })

        headcounts = resolve_headcounts(snapshot.groups, snapshot.exclusions_by_group)
        total_expense = aggregate_expenses(snapshot.expenses)
        fair = calculate_fair_shares(
            total_expense=total_expense,
            headcounts=headcounts,
        )
        rows = build_balances(
            groups=snapshot.groups,
            headcounts=headcounts,
            expenses=snapshot.expenses,
            fair_shares=fair.shares,
        )
        transactions = optimize_settlements(rows=rows, ordering=ordering)

        result = SettlementResult(
            rows=rows,
            transactions=transactions,
            summary=fair.summary,
            headcount_summary=summarize_headcounts(headcounts),
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("settlement_completed", extra={
            "total_expense": str(total_expense),
            "total_billable_heads": fair.summary.total_billable_heads,
            "total_balance": str(result.total_balance),
            "transaction_count": len(transactions),
            "duration_ms": duration_ms,
        })

        return result


def calculate_settlement(
    expenses: Iterable[Expense],
    groups: Sequence[Group],
    exclusions: Iterable[MemberExclusion] = (),
) -> tuple[SettlementRow, ...]:
    """Settlement report: one row per group."""
    return SettlementEngine().calculate(
        expenses=expenses, groups=groups, exclusions=exclusions,
    ).rows


def calculate_optimized_settlements(
    expenses: Iterable[Expense],
    groups: Sequence[Group],
    exclusions: Iterable[MemberExclusion] = (),
    ordering: SettlementOrdering = SettlementOrdering.INPUT_ORDER,
) -> tuple[Transaction, ...]:
    """Transaction plan that settles the report."""
    return SettlementEngine().calculate(
        expenses=expenses, groups=groups, exclusions=exclusions, ordering=ordering,
    ).transactions
