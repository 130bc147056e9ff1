"""
Pure domain layer.

This module contains pure value objects and validation with NO
dependencies on:
- ORM / database
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from settlement_kernel.domain.validation import (
    ValidatedSnapshot,
    parse_amount,
    parse_group_type,
    validate_exclusion_flags,
    validate_group,
    validate_snapshot,
)
from settlement_kernel.domain.values import (
    TOLERANCE,
    ZERO,
    Expense,
    Group,
    GroupHeadcount,
    GroupType,
    HeadcountSummary,
    MemberExclusion,
    SeatStatus,
    SettlementRow,
    SettlementSummary,
    Transaction,
)

__all__ = [
    "TOLERANCE",
    "ZERO",
    # Input records
    "Expense",
    "Group",
    "GroupType",
    "MemberExclusion",
    "SeatStatus",
    # Derived records
    "GroupHeadcount",
    "HeadcountSummary",
    "SettlementRow",
    "SettlementSummary",
    "Transaction",
    # Validation
    "ValidatedSnapshot",
    "parse_amount",
    "parse_group_type",
    "validate_exclusion_flags",
    "validate_group",
    "validate_snapshot",
]
