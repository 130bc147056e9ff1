"""
Settlement Kernel

Domain records, input validation, typed errors and structured logging for
the group expense settlement engine:
- Immutable input snapshot (expenses, groups, member exclusions)
- Exact Decimal amounts throughout
- Validation before computation, never partial output
"""

__version__ = "0.1.0"
