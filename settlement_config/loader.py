"""
Roster Loader (``settlement_config.loader``).

Responsibility
--------------
Loads a roster YAML file and parses it into a ``RosterConfig``.  This is
internal tooling; the public entry point for runtime configuration is
``settlement_config.get_default_roster()``.

Invariants enforced
-------------------
* Required keys (``name``, ``groups``, and per group ``id``, ``name``,
  ``type``, ``declared_count``) must be present; no silent defaults.
* Every parsed object is a frozen dataclass.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  roster for identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing keys or wrong shapes  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from settlement_config.schema import RosterConfig
from settlement_kernel.domain.values import Group, MemberExclusion
from settlement_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed roster document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _require(data: dict[str, Any], key: str, source: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ConfigurationError(source, f"missing required key {key!r}") from None


def _flag(item: dict[str, Any], key: str, source: str) -> bool:
    value = item.get(key, False)
    if not isinstance(value, bool):
        raise ConfigurationError(source, f"{key} must be true or false, got {value!r}")
    return value


def _version(data: dict[str, Any], source: str) -> int:
    value = data.get("version", 1)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(source, f"'version' must be an integer, got {value!r}")
    return value


def parse_exclusions(
    group_id: Any,
    items: list[dict[str, Any]],
    source: str,
) -> tuple[MemberExclusion, ...]:
    """Parse the exclusion list of one group.

    Records without an ``id`` get ``"<group_id>-<position>"``.
    """
    if not isinstance(items, list):
        raise ConfigurationError(source, f"exclusions of group {group_id} must be a list")

    parsed = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ConfigurationError(source, f"exclusion {index} of group {group_id} must be a mapping")
        parsed.append(MemberExclusion(
            exclusion_id=item.get("id", f"{group_id}-{index}"),
            group_id=group_id,
            exclude_from_all_headcount=_flag(item, "exclude_from_all_headcount", source),
            exclude_from_internal_headcount=_flag(
                item, "exclude_from_internal_headcount", source
            ),
            name=str(item.get("name", "")),
        ))
    return tuple(parsed)


def parse_group(data: dict[str, Any], source: str) -> tuple[Group, tuple[MemberExclusion, ...]]:
    """Parse one group entry and its exclusions."""
    if not isinstance(data, dict):
        raise ConfigurationError(source, "each group must be a mapping")
    group_id = _require(data, "id", source)
    group = Group(
        group_id=group_id,
        name=str(_require(data, "name", source)),
        group_type=_require(data, "type", source),
        declared_count=_require(data, "declared_count", source),
    )
    exclusions = parse_exclusions(group_id, data.get("exclusions") or [], source)
    return group, exclusions


def parse_roster(data: dict[str, Any], source: str = "<memory>") -> RosterConfig:
    """
    Parse a ``RosterConfig`` from a roster document.

    The result is not validated against the engine rules; that is done by
    ``settlement_config.get_default_roster``.
    """
    raw_groups = _require(data, "groups", source)
    if not isinstance(raw_groups, list):
        raise ConfigurationError(source, "'groups' must be a list")

    groups: list[Group] = []
    exclusions: list[MemberExclusion] = []
    for entry in raw_groups:
        group, group_exclusions = parse_group(entry, source)
        groups.append(group)
        exclusions.extend(group_exclusions)

    return RosterConfig(
        name=str(_require(data, "name", source)),
        version=_version(data, source),
        groups=tuple(groups),
        exclusions=tuple(exclusions),
        checksum=compute_checksum(data),
    )


def load_roster_file(path: Path) -> RosterConfig:
    """Load and parse a roster YAML file."""
    return parse_roster(load_yaml_file(path), source=str(path))
