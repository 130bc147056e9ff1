"""
Module: settlement_engines.aggregation
Responsibility:
    Sum expense amounts, in total and per payer group, and drop
    soft-deleted expenses before they reach any calculation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic; an empty expense list totals Decimal("0").
    - A malformed amount is never counted as zero; it raises.
    - Soft-deleted expenses are excluded, not removed from the caller's list.

Failure modes:
    - InvalidAmountError for a non-numeric or non-finite amount
      (amounts are re-parsed, so raw records are safe to pass in).
      Negative amounts are corrections and are summed like any other.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

from settlement_kernel.domain.validation import parse_amount
from settlement_kernel.domain.values import Expense, ZERO
from settlement_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")


def active_expenses(expenses: Iterable[Expense]) -> tuple[Expense, ...]:
    """Return the expenses that are not soft-deleted, in input order."""
    kept: list[Expense] = []
    dropped = 0
    for expense in expenses:
        if expense.is_deleted:
            dropped += 1
            continue
        kept.append(expense)

    if dropped:
        logger.debug("soft_deleted_expenses_skipped", extra={
            "skipped": dropped,
            "kept": len(kept),
        })
    return tuple(kept)


def aggregate_expenses(expenses: Sequence[Expense]) -> Decimal:
    """Total of all expense amounts."""
    total = ZERO
    for expense in expenses:
        total += parse_amount(expense.amount, expense.expense_id)
    return total


def total_paid_by_group(expenses: Sequence[Expense]) -> dict[Any, Decimal]:
    """Sum of expense amounts per payer group id."""
    paid: dict[Any, Decimal] = {}
    for expense in expenses:
        amount = parse_amount(expense.amount, expense.expense_id)
        paid[expense.payer_group_id] = paid.get(expense.payer_group_id, ZERO) + amount
    return paid
