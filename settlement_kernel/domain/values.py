"""
Value objects for the settlement kernel.

Contract:
    Every record crossing the engine boundary is a frozen dataclass.
    Input records (Expense, Group, MemberExclusion) mirror what the
    persistence layer loads; they may carry raw amounts (strings, ints)
    and raw group types until ``validate_snapshot`` normalises them.
    Derived records (GroupHeadcount, SettlementRow, Transaction, ...) are
    produced only by the engines and always hold ``Decimal`` amounts.

Guarantees:
    - Immutable: no engine annotates an input record in place.
    - Monetary values in derived records are ``Decimal``, never float.
    - ``to_dict`` renders amounts as exact decimal strings; rounding for
      display is the caller's job.

Non-goals:
    - No currency handling; every amount is in one implicit currency.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

# Shared tolerance band for every comparison against zero.
TOLERANCE = Decimal("0.01")

ZERO = Decimal("0")


class GroupType(str, Enum):
    """How a payer group is billed."""

    EXTERNAL = "External"  # Billed at the uniform base rate
    INTERNAL = "Internal"  # Absorbs the remainder after external shares


class SeatStatus(str, Enum):
    """Billing status of a single seat in a group's roster."""

    COUNTED = "counted"
    EXCLUDED_GLOBALLY = "excluded_globally"
    EXCLUDED_INTERNAL_ONLY = "excluded_internal_only"


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Expense:
    """A recorded expense paid by one group."""

    expense_id: Any
    payer_group_id: Any
    amount: Decimal | int | str
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True)
class Group:
    """A payer group with its declared total head count."""

    group_id: Any
    name: str
    group_type: GroupType | str
    declared_count: int

    @property
    def is_internal(self) -> bool:
        return self.group_type == GroupType.INTERNAL


@dataclass(frozen=True)
class MemberExclusion:
    """
    A member whose billing deviates from "fully billable".

    Only deviating members are recorded; unlisted seats count fully.
    ``exclude_from_all_headcount`` wins over
    ``exclude_from_internal_headcount`` when both are set.
    """

    exclusion_id: Any
    group_id: Any
    exclude_from_all_headcount: bool = False
    exclude_from_internal_headcount: bool = False
    name: str = ""

    @property
    def seat_status(self) -> SeatStatus:
        if self.exclude_from_all_headcount:
            return SeatStatus.EXCLUDED_GLOBALLY
        if self.exclude_from_internal_headcount:
            return SeatStatus.EXCLUDED_INTERNAL_ONLY
        return SeatStatus.COUNTED


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GroupHeadcount:
    """
    Resolved head counts for one group.

    Guarantees:
        - 0 <= internal_billable_count <= billable_count <= total_count
          for validated input.
    """

    group_id: Any
    group_type: GroupType
    total_count: int
    billable_count: int
    internal_billable_count: int
    globally_excluded: int = 0
    internally_excluded: int = 0


@dataclass(frozen=True)
class HeadcountSummary:
    """Roll-up of head counts per group type."""

    total_members: int
    total_billable: int
    internal_members: int
    internal_billable: int
    external_members: int
    external_billable: int


@dataclass(frozen=True)
class SettlementSummary:
    """Intermediate figures of a fair-share calculation."""

    total_expense: Decimal
    total_billable_heads: int
    base_unit_cost: Decimal
    external_fair_share_total: Decimal
    internal_remainder: Decimal
    internal_billable_total: int
    internal_per_head_cost: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalExpense": str(self.total_expense),
            "totalBillableHeads": self.total_billable_heads,
            "baseUnitCost": str(self.base_unit_cost),
            "externalFairShareTotal": str(self.external_fair_share_total),
            "internalRemainder": str(self.internal_remainder),
            "internalBillableTotal": self.internal_billable_total,
            "internalPerHeadCost": str(self.internal_per_head_cost),
        }


@dataclass(frozen=True)
class SettlementRow:
    """One group's line in the settlement report."""

    group_id: Any
    name: str
    group_type: GroupType
    total_count: int
    billable_count: int
    internal_billable_count: int
    total_paid: Decimal
    fair_share: Decimal
    balance: Decimal

    @property
    def is_creditor(self) -> bool:
        """True if the group is owed money."""
        return self.balance > TOLERANCE

    @property
    def is_debtor(self) -> bool:
        """True if the group owes money."""
        return self.balance < -TOLERANCE

    def to_dict(self) -> dict[str, Any]:
        return {
            "groupId": self.group_id,
            "name": self.name,
            "type": self.group_type.value,
            "totalCount": self.total_count,
            "billableCount": self.billable_count,
            "internalBillableCount": self.internal_billable_count,
            "totalPaid": str(self.total_paid),
            "fairShare": str(self.fair_share),
            "balance": str(self.balance),
        }


@dataclass(frozen=True)
class Transaction:
    """A single payment that moves money from a debtor to a creditor."""

    from_group_id: Any
    from_name: str
    to_group_id: Any
    to_name: str
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "fromGroupId": self.from_group_id,
            "fromName": self.from_name,
            "toGroupId": self.to_group_id,
            "toName": self.to_name,
            "amount": str(self.amount),
        }
