"""
Pytest fixtures for the settlement engine test suite.

Provides:
- Structured logging configuration and capture
- Record builders for expenses, groups and member exclusions
- The two-group and nine-group rosters used across scenario tests
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from settlement_kernel.domain.values import (
    Expense,
    Group,
    GroupType,
    MemberExclusion,
)
from settlement_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Record builders
# =============================================================================

_counter = {"expense": 0, "exclusion": 0}


def make_group(group_id, declared_count, group_type=GroupType.INTERNAL, name=None) -> Group:
    return Group(
        group_id=group_id,
        name=name or f"Group {group_id}",
        group_type=group_type,
        declared_count=declared_count,
    )


def make_expense(payer_group_id, amount, description="", expense_id=None, deleted_at=None) -> Expense:
    _counter["expense"] += 1
    return Expense(
        expense_id=expense_id if expense_id is not None else _counter["expense"],
        payer_group_id=payer_group_id,
        amount=amount,
        description=description,
        deleted_at=deleted_at,
    )


def make_exclusion(group_id, *, all_headcount=False, internal_headcount=False) -> MemberExclusion:
    _counter["exclusion"] += 1
    return MemberExclusion(
        exclusion_id=_counter["exclusion"],
        group_id=group_id,
        exclude_from_all_headcount=all_headcount,
        exclude_from_internal_headcount=internal_headcount,
    )


def assert_close(actual: Decimal, expected, tolerance: str = "0.01") -> None:
    """Assert two amounts agree within a tolerance band."""
    assert abs(actual - Decimal(str(expected))) <= Decimal(tolerance), (
        f"{actual} differs from {expected} by more than {tolerance}"
    )


# =============================================================================
# Roster fixtures
# =============================================================================


@pytest.fixture
def family_roster():
    """
    One External family of 3 and eight Internal households.

    27 billable heads overall; the households carry 18 internally-billable
    heads (six dependants count toward the base rate only, one child is
    excluded everywhere).
    """
    groups = [
        make_group(1, 3, GroupType.EXTERNAL, name="Other Family"),
        make_group(2, 5, name="Household 1"),
        make_group(3, 5, name="Household 2"),
        make_group(4, 4, name="Household 3"),
        make_group(5, 3, name="Household 4"),
        make_group(6, 2, name="Household 5"),
        make_group(7, 2, name="Household 6"),
        make_group(8, 2, name="Household 7"),
        make_group(9, 2, name="Household 8"),
    ]
    exclusions = [
        make_exclusion(2, internal_headcount=True),
        make_exclusion(2, internal_headcount=True),
        make_exclusion(3, internal_headcount=True),
        make_exclusion(3, internal_headcount=True),
        make_exclusion(4, all_headcount=True),
        make_exclusion(4, internal_headcount=True),
        make_exclusion(5, internal_headcount=True),
    ]
    return groups, exclusions


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture settlement_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            SettlementEngine().calculate(...)
            logs = captured_logs()
            assert any(r["message"] == "settlement_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("settlement_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)
