"""
Module: settlement_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    settlement calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import settlement_kernel (and sibling engine modules).
    MUST NOT import settlement_config; callers inject the roster.

Invariants enforced:
    - Purity: engines never read the clock, the environment or files.
    - Decimal-only arithmetic; floats are parsed, never computed with.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from settlement_engines import SettlementEngine
    from settlement_engines.headcount import resolve_headcount
    from settlement_engines.debt_optimizer import optimize_settlements
"""

from settlement_engines.aggregation import (
    active_expenses,
    aggregate_expenses,
    total_paid_by_group,
)
from settlement_engines.balances import build_balances
from settlement_engines.debt_optimizer import (
    SettlementOrdering,
    parse_ordering,
    optimize_settlements,
    transaction_lower_bound,
)
from settlement_engines.fair_share import FairShareResult, calculate_fair_shares
from settlement_engines.headcount import (
    resolve_headcount,
    resolve_headcounts,
    seat_roster,
    summarize_headcounts,
)
from settlement_engines.settlement import (
    SettlementEngine,
    SettlementResult,
    calculate_optimized_settlements,
    calculate_settlement,
)

__all__ = [
    # Headcount
    "seat_roster",
    "resolve_headcount",
    "resolve_headcounts",
    "summarize_headcounts",
    # Aggregation
    "active_expenses",
    "aggregate_expenses",
    "total_paid_by_group",
    # Fair share
    "FairShareResult",
    "calculate_fair_shares",
    # Balances
    "build_balances",
    # Debt optimizer
    "SettlementOrdering",
    "parse_ordering",
    "optimize_settlements",
    "transaction_lower_bound",
    # Pipeline
    "SettlementEngine",
    "SettlementResult",
    "calculate_settlement",
    "calculate_optimized_settlements",
]
