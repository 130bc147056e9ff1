"""
settlement_config -- single public entrypoint for the default payer roster.

Responsibility:
    Provides the ONLY way to obtain the default roster at runtime through
    ``get_default_roster()``.  The engines never read configuration; the
    application loads a roster here at startup and injects its groups and
    exclusions into ``SettlementEngine.calculate``.

Architecture position:
    Configuration -- sits beside ``settlement_engines`` and above
    ``settlement_kernel``.  Engines MUST NOT import from this package.

Invariants enforced:
    - A returned roster passes the same validation as an engine snapshot
      (known group types, non-negative counts, unique ids, no more
      exclusion records than seats).
    - Deterministic: the same YAML always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- no roster with the requested name.
    - ``ConfigurationError`` -- missing keys or a roster the engine would
      reject.

Audit relevance:
    Every successful call emits a ``SETTLEMENT_CONFIG_TRACE`` log entry
    with the roster name, version, checksum and counts.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from settlement_config.loader import load_roster_file
from settlement_config.schema import RosterConfig
from settlement_kernel.domain.validation import validate_snapshot
from settlement_kernel.exceptions import ConfigurationError, ValidationError
from settlement_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default roster sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_default_roster(
    name: str = "default",
    config_dir: Path | None = None,
) -> RosterConfig:
    """Load, validate and return the named roster.

    Args:
        name: Roster set name; the file read is ``<config_dir>/<name>/roster.yaml``.
        config_dir: Override path to the roster sets directory.
            Defaults to settlement_config/sets/.

    Raises:
        FileNotFoundError: If the roster file does not exist.
        ConfigurationError: If the roster is malformed.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / name / "roster.yaml"

    roster = load_roster_file(path)

    try:
        snapshot = validate_snapshot((), roster.groups, roster.exclusions)
    except ValidationError as exc:
        raise ConfigurationError(str(path), str(exc)) from exc

    roster = replace(
        roster,
        groups=snapshot.groups,
        exclusions=tuple(
            e for g in snapshot.groups for e in snapshot.exclusions_for(g.group_id)
        ),
    )

    _logger.info(
        "SETTLEMENT_CONFIG_TRACE",
        extra={
            "trace_type": "SETTLEMENT_CONFIG_TRACE",
            "roster_name": roster.name,
            "roster_version": roster.version,
            "checksum": roster.checksum,
            "group_count": len(roster.groups),
            "exclusion_count": len(roster.exclusions),
        },
    )

    return roster


__all__ = [
    "ConfigurationError",
    "RosterConfig",
    "get_default_roster",
]
