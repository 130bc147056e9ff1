"""
Input snapshot validation for the settlement engine.

Pure checks with no I/O.  Malformed input is rejected here, before any
computation starts, so the engines never produce a partial report.

Validation never mutates its arguments: normalised records (parsed
``Decimal`` amounts, ``GroupType`` enums) are fresh copies
built with ``dataclasses.replace``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any

from settlement_kernel.domain.values import (
    Expense,
    Group,
    GroupType,
    MemberExclusion,
)
from settlement_kernel.exceptions import (
    DuplicateGroupError,
    ExclusionOverflowError,
    InvalidAmountError,
    InvalidExclusionFlagError,
    InvalidHeadcountError,
    UnknownExclusionGroupError,
    UnknownGroupTypeError,
    UnknownPayerGroupError,
)


@dataclass(frozen=True)
class ValidatedSnapshot:
    """
    A normalised, internally consistent input snapshot.

    Guarantees:
        - Every expense amount is a finite ``Decimal``; negative amounts
          are corrections and net into the totals.
        - Every group has a ``GroupType`` and a non-negative int count.
        - Every expense payer and exclusion group exists in ``groups``.
        - No group has more exclusion records than seats.
        - Every exclusion flag is a real ``bool``.
    """

    expenses: tuple[Expense, ...]
    groups: tuple[Group, ...]
    exclusions_by_group: dict[Any, tuple[MemberExclusion, ...]]

    def exclusions_for(self, group_id: Any) -> tuple[MemberExclusion, ...]:
        return self.exclusions_by_group.get(group_id, ())


def parse_amount(value: Any, expense_id: Any = None) -> Decimal:
    """
    Parse a stored expense amount into an exact ``Decimal``.

    Accepts ``Decimal``, ``int``, ``float`` (via its string form) and
    numeric strings.  Never coerces a malformed value to zero.

    Raises:
        InvalidAmountError: if the value is not numeric or not finite.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(expense_id, value, "not a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidAmountError(expense_id, value, "empty")
        try:
            amount = Decimal(text)
        except InvalidOperation as exc:
            raise InvalidAmountError(expense_id, value, "not a number") from exc
    else:
        raise InvalidAmountError(
            expense_id, value, f"unsupported type {type(value).__name__}"
        )

    if not amount.is_finite():
        raise InvalidAmountError(expense_id, value, "not finite")
    return amount


def parse_group_type(value: Any, group_id: Any = None) -> GroupType:
    """Normalise a raw group type ("External"/"Internal") to ``GroupType``."""
    if isinstance(value, GroupType):
        return value
    try:
        return GroupType(value)
    except ValueError as exc:
        raise UnknownGroupTypeError(group_id, value) from exc


def validate_group(group: Group) -> Group:
    """Return a normalised copy of ``group``."""
    group_type = parse_group_type(group.group_type, group.group_id)
    count = group.declared_count
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidHeadcountError(group.group_id, count)
    return replace(group, group_type=group_type)


def validate_exclusion_flags(exclusion: MemberExclusion) -> None:
    """Reject flags that are not real bools ("false" would read as set)."""
    for flag in ("exclude_from_all_headcount", "exclude_from_internal_headcount"):
        value = getattr(exclusion, flag)
        if not isinstance(value, bool):
            raise InvalidExclusionFlagError(exclusion.exclusion_id, flag, value)


def validate_snapshot(
    expenses: Iterable[Expense],
    groups: Sequence[Group],
    exclusions: Iterable[MemberExclusion] = (),
) -> ValidatedSnapshot:
    """
    Validate and normalise an input snapshot.

    Preconditions:
        ``expenses`` holds only non-deleted expenses.

    Postconditions:
        Returns a ``ValidatedSnapshot``; the arguments are left untouched.

    Raises:
        ValidationError subclass on the first malformed record found.
    """
    normalised_groups: list[Group] = []
    seen: set[Any] = set()
    for group in groups:
        if group.group_id in seen:
            raise DuplicateGroupError(group.group_id)
        seen.add(group.group_id)
        normalised_groups.append(validate_group(group))

    grouped: dict[Any, list[MemberExclusion]] = {}
    for exclusion in exclusions:
        if exclusion.group_id not in seen:
            raise UnknownExclusionGroupError(
                exclusion.exclusion_id, exclusion.group_id
            )
        validate_exclusion_flags(exclusion)
        grouped.setdefault(exclusion.group_id, []).append(exclusion)

    for group in normalised_groups:
        listed = len(grouped.get(group.group_id, ()))
        if listed > group.declared_count:
            raise ExclusionOverflowError(group.group_id, group.declared_count, listed)

    normalised_expenses: list[Expense] = []
    for expense in expenses:
        if expense.payer_group_id not in seen:
            raise UnknownPayerGroupError(expense.expense_id, expense.payer_group_id)
        amount = parse_amount(expense.amount, expense.expense_id)
        normalised_expenses.append(replace(expense, amount=amount))

    return ValidatedSnapshot(
        expenses=tuple(normalised_expenses),
        groups=tuple(normalised_groups),
        exclusions_by_group={k: tuple(v) for k, v in grouped.items()},
    )
