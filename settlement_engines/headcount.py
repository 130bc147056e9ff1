"""
Module: settlement_engines.headcount
Responsibility:
    Resolve each group's head counts from its declared total and its
    sparse list of member exclusion records.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import settlement_kernel.domain and sibling engine modules.

Invariants enforced:
    - Absence of an exclusion record means the seat is fully billable.
    - A globally excluded seat is subtracted once, never again as an
      internal-only exclusion.
    - 0 <= internal_billable_count <= billable_count <= total_count for
      validated input.
    - Each group is resolved independently; no state is shared.

Failure modes:
    - None for validated input.  ``validate_snapshot`` rejects negative
      counts and exclusion lists longer than the declared count.

Usage:
    from settlement_engines.headcount import resolve_headcount

    counts = resolve_headcount(group=group, exclusions=exclusions)
    counts.billable_count
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from settlement_kernel.domain.values import (
    Group,
    GroupHeadcount,
    GroupType,
    HeadcountSummary,
    MemberExclusion,
    SeatStatus,
)
from settlement_kernel.logging_config import get_logger

logger = get_logger("engines.headcount")


def seat_roster(
    group: Group,
    exclusions: Sequence[MemberExclusion] = (),
) -> tuple[SeatStatus, ...]:
    """
    Expand a sparse exclusion list into an explicit per-seat roster.

    The first seats carry the status of each exclusion record in order;
    every remaining seat of ``declared_count`` is COUNTED.
    """
    listed = tuple(exclusion.seat_status for exclusion in exclusions)
    unlisted = max(group.declared_count - len(listed), 0)
    return listed + (SeatStatus.COUNTED,) * unlisted


def resolve_headcount(
    group: Group,
    exclusions: Sequence[MemberExclusion] = (),
) -> GroupHeadcount:
    """
    Resolve total, billable and internally-billable counts for one group.

    - total = declared count
    - billable = total - globally excluded seats
    - internal billable = billable - internal-only seats for Internal
      groups; equal to billable for External groups
    """
    roster = seat_roster(group, exclusions)
    globally_excluded = roster.count(SeatStatus.EXCLUDED_GLOBALLY)

    # Internal-only exclusions have no meaning for External groups.
    internally_excluded = 0
    if group.group_type == GroupType.INTERNAL:
        internally_excluded = roster.count(SeatStatus.EXCLUDED_INTERNAL_ONLY)

    total_count = group.declared_count
    billable_count = total_count - globally_excluded
    internal_billable_count = billable_count - internally_excluded

    logger.debug("headcount_resolved", extra={
        "group_id": group.group_id,
        "group_type": GroupType(group.group_type).value,
        "total_count": total_count,
        "billable_count": billable_count,
        "internal_billable_count": internal_billable_count,
        "exclusion_records": len(exclusions),
    })

    return GroupHeadcount(
        group_id=group.group_id,
        group_type=GroupType(group.group_type),
        total_count=total_count,
        billable_count=billable_count,
        internal_billable_count=internal_billable_count,
        globally_excluded=globally_excluded,
        internally_excluded=internally_excluded,
    )


def resolve_headcounts(
    groups: Sequence[Group],
    exclusions_by_group: Mapping[Any, Sequence[MemberExclusion]],
) -> tuple[GroupHeadcount, ...]:
    """Resolve every group in order, each against its own exclusions."""
    return tuple(
        resolve_headcount(group, exclusions_by_group.get(group.group_id, ()))
        for group in groups
    )


def summarize_headcounts(headcounts: Sequence[GroupHeadcount]) -> HeadcountSummary:
    """Roll head counts up by group type.

    Internal billable heads are the internally-billable ones, the heads
    that share the remainder after external contributions.
    """
    internal = [h for h in headcounts if h.group_type == GroupType.INTERNAL]
    external = [h for h in headcounts if h.group_type == GroupType.EXTERNAL]

    internal_members = sum(h.total_count for h in internal)
    external_members = sum(h.total_count for h in external)
    internal_billable = sum(h.internal_billable_count for h in internal)
    external_billable = sum(h.billable_count for h in external)

    return HeadcountSummary(
        total_members=internal_members + external_members,
        total_billable=internal_billable + external_billable,
        internal_members=internal_members,
        internal_billable=internal_billable,
        external_members=external_members,
        external_billable=external_billable,
    )
