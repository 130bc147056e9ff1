"""
Module: settlement_engines.balances
Responsibility:
    Compare what each group paid with its fair share and produce the
    settlement report rows.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - balance = total_paid - fair_share; positive means the group is owed.
    - sum(balance) == 0 within TOLERANCE whenever the fair shares sum to
      the total expense.
    - Rows follow the group order of the input (display order).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from settlement_engines.aggregation import total_paid_by_group
from settlement_kernel.domain.values import (
    Expense,
    Group,
    GroupHeadcount,
    GroupType,
    SettlementRow,
    ZERO,
)


def build_balances(
    *,
    groups: Sequence[Group],
    headcounts: Sequence[GroupHeadcount],
    expenses: Sequence[Expense],
    fair_shares: Mapping[Any, Decimal],
) -> tuple[SettlementRow, ...]:
    """Build one SettlementRow per group, in group order."""
    paid = total_paid_by_group(expenses)
    counts = {h.group_id: h for h in headcounts}

    rows: list[SettlementRow] = []
    for group in groups:
        h = counts[group.group_id]
        total_paid = paid.get(group.group_id, ZERO)
        fair_share = fair_shares.get(group.group_id, ZERO)
        rows.append(SettlementRow(
            group_id=group.group_id,
            name=group.name,
            group_type=GroupType(group.group_type),
            total_count=h.total_count,
            billable_count=h.billable_count,
            internal_billable_count=h.internal_billable_count,
            total_paid=total_paid,
            fair_share=fair_share,
            balance=total_paid - fair_share,
        ))
    return tuple(rows)
