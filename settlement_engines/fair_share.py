"""
Module: settlement_engines.fair_share
Responsibility:
    Split the total expense into per-group fair shares.  External groups
    pay a uniform base rate per billable head; Internal groups absorb the
    remainder, split across their internally-billable heads.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic at full context precision; no rounding.
      Display rounding belongs to the caller.
    - sum(fair shares) == total expense within TOLERANCE whenever at least
      one billable head and one internally-billable head exist (or the
      remainder is zero).
    - Purity: shares are returned in a new mapping; inputs are untouched.

Failure modes:
    - None.  Two degenerate configurations are defined, non-error cases:
        * no billable heads at all: every share is zero;
        * a non-zero internal remainder with no internally-billable heads:
          Internal shares are zero.
      Both are logged at WARNING and produce a complete result.

Usage:
    from settlement_engines.fair_share import calculate_fair_shares

    result = calculate_fair_shares(
        total_expense=Decimal("2700"),
        headcounts=headcounts,
    )
    result.shares[group_id]
    result.summary.base_unit_cost
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from settlement_engines.tracer import traced_engine
from settlement_kernel.domain.values import (
    GroupHeadcount,
    GroupType,
    SettlementSummary,
    TOLERANCE,
    ZERO,
)
from settlement_kernel.logging_config import get_logger

logger = get_logger("engines.fair_share")


@dataclass(frozen=True)
class FairShareResult:
    """
    Fair shares per group plus the intermediate figures.

    Guarantees:
        - ``shares`` has one entry per input headcount, in input order.
    """

    shares: dict[Any, Decimal]
    summary: SettlementSummary

    @property
    def total(self) -> Decimal:
        return sum(self.shares.values(), ZERO)


@traced_engine("fair_share", "1.0", fingerprint_fields=("total_expense", "headcounts"))
def calculate_fair_shares(
    *,
    total_expense: Decimal,
    headcounts: Sequence[GroupHeadcount],
) -> FairShareResult:
    """
    Compute each group's fair share of ``total_expense``.

    Steps:
        1. total billable heads = sum of billable counts over all groups
        2. base unit cost = total / total billable heads
        3. External share = base unit cost * billable count
        4. internal remainder = total - sum of External shares
        5. internal per-head cost = remainder / internally-billable heads
        6. Internal share = internal per-head cost * internal billable count
    """
    external = [h for h in headcounts if h.group_type == GroupType.EXTERNAL]
    internal = [h for h in headcounts if h.group_type == GroupType.INTERNAL]

    total_billable_heads = sum(h.billable_count for h in headcounts)
    internal_billable_total = sum(h.internal_billable_count for h in internal)

    if total_billable_heads == 0:
        logger.warning("fair_share_no_billable_heads", extra={
            "total_expense": str(total_expense),
            "group_count": len(headcounts),
        })
        return FairShareResult(
            shares={h.group_id: ZERO for h in headcounts},
            summary=SettlementSummary(
                total_expense=total_expense,
                total_billable_heads=0,
                base_unit_cost=ZERO,
                external_fair_share_total=ZERO,
                internal_remainder=ZERO,
                internal_billable_total=internal_billable_total,
                internal_per_head_cost=ZERO,
            ),
        )

    base_unit_cost = total_expense / Decimal(total_billable_heads)

    external_shares = {h.group_id: base_unit_cost * h.billable_count for h in external}
    external_total = sum(external_shares.values(), ZERO)
    internal_remainder = total_expense - external_total

    if internal_billable_total == 0:
        internal_per_head_cost = ZERO
        if abs(internal_remainder) > TOLERANCE:
            logger.warning("fair_share_no_internal_heads", extra={
                "internal_remainder": str(internal_remainder),
                "internal_group_count": len(internal),
            })
    else:
        internal_per_head_cost = internal_remainder / Decimal(internal_billable_total)

    shares: dict[Any, Decimal] = {}
    for h in headcounts:
        if h.group_type == GroupType.EXTERNAL:
            shares[h.group_id] = external_shares[h.group_id]
        else:
            shares[h.group_id] = internal_per_head_cost * h.internal_billable_count

    summary = SettlementSummary(
        total_expense=total_expense,
        total_billable_heads=total_billable_heads,
        base_unit_cost=base_unit_cost,
        external_fair_share_total=external_total,
        internal_remainder=internal_remainder,
        internal_billable_total=internal_billable_total,
        internal_per_head_cost=internal_per_head_cost,
    )

    logger.debug("fair_shares_calculated", extra={
        "total_expense": str(total_expense),
        "total_billable_heads": total_billable_heads,
        "base_unit_cost": str(base_unit_cost),
        "internal_remainder": str(internal_remainder),
        "internal_billable_total": internal_billable_total,
    })

    return FairShareResult(shares=shares, summary=summary)
