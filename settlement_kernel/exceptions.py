"""
Typed Exception Hierarchy for the Settlement Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The settlement engine has exactly one failure mode that callers must act
on: the input snapshot is malformed.  Callers (the HTTP layer, batch jobs)
translate failures into responses, so every error is:

  1. A TYPED exception class (catch by type, not message)
  2. Carrying a CODE attribute (machine-readable, API-safe)
  3. Carrying structured DATA (not just a message string)

Example:
    try:
        result = engine.calculate(expenses=..., groups=..., exclusions=...)
    except InvalidAmountError as e:
        api_response(code=e.code, expense=e.expense_id, value=e.value)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    SettlementKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidAmountError
    |   +-- UnknownGroupTypeError
    |   +-- InvalidHeadcountError
    |   +-- DuplicateGroupError
    |   +-- UnknownPayerGroupError
    |   +-- UnknownExclusionGroupError
    |   +-- ExclusionOverflowError
    |   +-- InvalidExclusionFlagError
    |   +-- InvalidOrderingError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                      | When Raised
--------------|---------------------------|-----------------------------------------
Validation    | INVALID_AMOUNT            | Amount non-numeric or non-finite
              | UNKNOWN_GROUP_TYPE        | Group type not External / Internal
              | INVALID_HEADCOUNT         | Declared count negative or not an int
              | DUPLICATE_GROUP           | Two groups share one id
              | UNKNOWN_PAYER_GROUP       | Expense paid by a group not in snapshot
              | UNKNOWN_EXCLUSION_GROUP   | Exclusion record for an unknown group
              | EXCLUSION_OVERFLOW        | More exclusion records than seats
              | INVALID_EXCLUSION_FLAG    | Exclusion flag is not a bool
              | INVALID_ORDERING          | Unknown settlement ordering
--------------|---------------------------|-----------------------------------------
Config        | CONFIGURATION_ERROR       | Default roster file is malformed

Degenerate configurations (no billable heads, no internal heads) are NOT
errors; the engine returns a zero-valued report for them.

===============================================================================
"""

from typing import Any


class SettlementKernelError(Exception):
    """
    Base exception for all settlement kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SETTLEMENT_KERNEL_ERROR"


# Validation exceptions


class ValidationError(SettlementKernelError):
    """Base exception for a malformed input snapshot."""

    code: str = "VALIDATION_ERROR"


class InvalidAmountError(ValidationError):
    """Expense amount cannot be parsed as a finite decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, expense_id: Any, value: Any, reason: str):
        self.expense_id = expense_id
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid amount {value!r} for expense {expense_id}: {reason}"
        )


class UnknownGroupTypeError(ValidationError):
    """Group type is neither External nor Internal."""

    code: str = "UNKNOWN_GROUP_TYPE"

    def __init__(self, group_id: Any, group_type: Any):
        self.group_id = group_id
        self.group_type = group_type
        super().__init__(f"Unknown type {group_type!r} for group {group_id}")


class InvalidHeadcountError(ValidationError):
    """Declared head count is negative or not an integer."""

    code: str = "INVALID_HEADCOUNT"

    def __init__(self, group_id: Any, declared_count: Any):
        self.group_id = group_id
        self.declared_count = declared_count
        super().__init__(
            f"Invalid declared count {declared_count!r} for group {group_id}"
        )


class DuplicateGroupError(ValidationError):
    """Two groups in the snapshot share the same id."""

    code: str = "DUPLICATE_GROUP"

    def __init__(self, group_id: Any):
        self.group_id = group_id
        super().__init__(f"Duplicate group id: {group_id}")


class UnknownPayerGroupError(ValidationError):
    """Expense names a payer group that is not part of the snapshot."""

    code: str = "UNKNOWN_PAYER_GROUP"

    def __init__(self, expense_id: Any, payer_group_id: Any):
        self.expense_id = expense_id
        self.payer_group_id = payer_group_id
        super().__init__(
            f"Expense {expense_id} paid by unknown group {payer_group_id}"
        )


class UnknownExclusionGroupError(ValidationError):
    """Exclusion record references a group that is not part of the snapshot."""

    code: str = "UNKNOWN_EXCLUSION_GROUP"

    def __init__(self, exclusion_id: Any, group_id: Any):
        self.exclusion_id = exclusion_id
        self.group_id = group_id
        super().__init__(
            f"Exclusion {exclusion_id} references unknown group {group_id}"
        )


class ExclusionOverflowError(ValidationError):
    """A group lists more exclusion records than it has seats."""

    code: str = "EXCLUSION_OVERFLOW"

    def __init__(self, group_id: Any, declared_count: int, exclusion_count: int):
        self.group_id = group_id
        self.declared_count = declared_count
        self.exclusion_count = exclusion_count
        super().__init__(
            f"Group {group_id} has {exclusion_count} exclusion record(s) "
            f"but only {declared_count} seat(s)"
        )


class InvalidExclusionFlagError(ValidationError):
    """An exclusion flag holds something other than a bool."""

    code: str = "INVALID_EXCLUSION_FLAG"

    def __init__(self, exclusion_id: Any, flag: str, value: Any):
        self.exclusion_id = exclusion_id
        self.flag = flag
        self.value = value
        super().__init__(
            f"Exclusion {exclusion_id} has non-boolean {flag}: {value!r}"
        )


class InvalidOrderingError(ValidationError):
    """Requested settlement ordering is not a known strategy."""

    code: str = "INVALID_ORDERING"

    def __init__(self, ordering: Any):
        self.ordering = ordering
        super().__init__(f"Unknown settlement ordering: {ordering!r}")


# Configuration exceptions


class ConfigurationError(SettlementKernelError):
    """Default roster configuration is malformed."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"Invalid roster configuration {source}: {detail}")
