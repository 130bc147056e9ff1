"""
Module: settlement_engines.debt_optimizer
Responsibility:
    Turn signed group balances into an ordered list of pairwise payments
    that brings every group to zero.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Every emitted amount is greater than TOLERANCE.
    - sum(amounts) == sum(positive balances) within tolerance.
    - At most (#creditors + #debtors - 1) transactions.
    - Deterministic: with INPUT_ORDER, creditors and debtors are walked in
      the order the rows were given, so the plan is stable for display.

Non-goals:
    - INPUT_ORDER does not guarantee the minimum transaction count.
      LARGEST_FIRST matches the largest creditor against the largest
      debtor instead; neither strategy is an exact minimiser.

Usage:
    from settlement_engines.debt_optimizer import optimize_settlements

    plan = optimize_settlements(rows=report_rows)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from settlement_engines.tracer import traced_engine
from settlement_kernel.domain.values import (
    SettlementRow,
    TOLERANCE,
    Transaction,
)
from settlement_kernel.exceptions import InvalidOrderingError
from settlement_kernel.logging_config import get_logger

logger = get_logger("engines.debt_optimizer")


class SettlementOrdering(str, Enum):
    """Order in which creditors and debtors are matched."""

    INPUT_ORDER = "input_order"  # Group display order
    LARGEST_FIRST = "largest_first"  # By outstanding amount, descending


def parse_ordering(value: Any) -> SettlementOrdering:
    """Normalise an ordering name or member; raise InvalidOrderingError otherwise."""
    if isinstance(value, SettlementOrdering):
        return value
    try:
        return SettlementOrdering(value)
    except ValueError as exc:
        raise InvalidOrderingError(value) from exc


@dataclass
class _Party:
    """Working entry for one side of the walk; never leaves this module."""

    group_id: Any
    name: str
    remaining: Decimal


def _split_parties(
    rows: Sequence[SettlementRow],
    ordering: SettlementOrdering,
) -> tuple[list[_Party], list[_Party]]:
    creditors = [
        _Party(r.group_id, r.name, r.balance) for r in rows if r.balance > TOLERANCE
    ]
    debtors = [
        _Party(r.group_id, r.name, -r.balance) for r in rows if r.balance < -TOLERANCE
    ]
    if ordering == SettlementOrdering.LARGEST_FIRST:
        # sorted() is stable, so ties keep display order.
        creditors = sorted(creditors, key=lambda p: p.remaining, reverse=True)
        debtors = sorted(debtors, key=lambda p: p.remaining, reverse=True)
    return creditors, debtors


def transaction_lower_bound(rows: Sequence[SettlementRow]) -> int:
    """Fewest transactions any plan needs: max(#creditors, #debtors)."""
    creditors = sum(1 for r in rows if r.balance > TOLERANCE)
    debtors = sum(1 for r in rows if r.balance < -TOLERANCE)
    return max(creditors, debtors)


@traced_engine("debt_optimizer", "1.0", fingerprint_fields=("rows", "ordering"))
def optimize_settlements(
    *,
    rows: Sequence[SettlementRow],
    ordering: SettlementOrdering = SettlementOrdering.INPUT_ORDER,
) -> tuple[Transaction, ...]:
    """
    Greedy two-cursor settlement walk.

    While both a creditor and a debtor remain, the smaller of their
    outstanding amounts is settled between them.  A side whose remainder
    falls below TOLERANCE is exhausted and its cursor advances.
    """
    ordering = parse_ordering(ordering)
    creditors, debtors = _split_parties(rows, ordering)

    transactions: list[Transaction] = []
    i = j = 0
    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]
        settled = min(creditor.remaining, debtor.remaining)

        if settled > TOLERANCE:
            transactions.append(Transaction(
                from_group_id=debtor.group_id,
                from_name=debtor.name,
                to_group_id=creditor.group_id,
                to_name=creditor.name,
                amount=settled,
            ))

        creditor.remaining -= settled
        debtor.remaining -= settled

        if creditor.remaining < TOLERANCE:
            i += 1
        if debtor.remaining < TOLERANCE:
            j += 1

    logger.debug("settlement_plan_built", extra={
        "ordering": ordering.value,
        "creditor_count": len(creditors),
        "debtor_count": len(debtors),
        "transaction_count": len(transactions),
    })

    return tuple(transactions)
