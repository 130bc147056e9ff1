"""
Roster configuration schema.

A roster is the human-authored list of payer groups and their member
exclusions that the application injects into the settlement engine at
startup.  YAML files are parsed into these types by the loader.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from settlement_kernel.domain.values import Group, MemberExclusion


@dataclass(frozen=True)
class RosterConfig:
    """A validated payer roster."""

    name: str
    version: int
    groups: tuple[Group, ...]
    exclusions: tuple[MemberExclusion, ...] = ()
    checksum: str = ""

    def exclusions_for(self, group_id: Any) -> tuple[MemberExclusion, ...]:
        return tuple(e for e in self.exclusions if e.group_id == group_id)

    @property
    def group_ids(self) -> tuple[Any, ...]:
        return tuple(g.group_id for g in self.groups)
