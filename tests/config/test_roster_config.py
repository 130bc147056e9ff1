"""
Tests for the default roster configuration (settlement_config).

Covers:
- Loading the shipped default roster
- Running the engine on an injected roster
- Parse errors and engine-rule violations in roster files
- Checksum determinism
"""

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from settlement_config import get_default_roster
from settlement_config.loader import compute_checksum, parse_roster
from settlement_kernel.domain.values import GroupType
from settlement_kernel.exceptions import ConfigurationError
from settlement_engines.settlement import SettlementEngine
from tests.conftest import assert_close, make_expense


def _write_roster(tmp_path: Path, name: str, document: dict) -> Path:
    roster_dir = tmp_path / name
    roster_dir.mkdir()
    (roster_dir / "roster.yaml").write_text(yaml.safe_dump(document))
    return tmp_path


class TestDefaultRoster:
    """Tests for the shipped default roster."""

    def test_loads(self):
        roster = get_default_roster()

        assert roster.name == "default"
        assert len(roster.groups) == 9
        assert roster.groups[0].name == "Other Family"
        assert roster.groups[0].group_type is GroupType.EXTERNAL
        assert all(g.group_type is GroupType.INTERNAL for g in roster.groups[1:])
        assert sum(g.declared_count for g in roster.groups) == 28
        assert len(roster.checksum) == 64

    def test_exclusions_attached_to_groups(self):
        roster = get_default_roster()

        assert len(roster.exclusions) == 7
        assert len(roster.exclusions_for(2)) == 2
        assert roster.exclusions_for(1) == ()
        assert roster.group_ids == tuple(range(1, 10))

    def test_injected_into_engine(self):
        roster = get_default_roster()

        result = SettlementEngine().calculate(
            expenses=[make_expense(1, "2700")],
            groups=roster.groups,
            exclusions=roster.exclusions,
        )

        assert result.summary.total_billable_heads == 27
        assert result.summary.base_unit_cost == Decimal("100")
        assert result.rows[0].fair_share == Decimal("300")
        assert_close(result.rows[1].fair_share, "400.00")
        assert_close(result.rows[8].fair_share, "266.67")

    def test_config_trace_emitted(self, captured_logs):
        get_default_roster()

        traces = [r for r in captured_logs() if r["message"] == "SETTLEMENT_CONFIG_TRACE"]
        assert traces
        assert traces[-1]["roster_name"] == "default"
        assert traces[-1]["group_count"] == 9


class TestRosterFiles:
    """Tests for loading custom roster files."""

    def test_custom_roster(self, tmp_path):
        config_dir = _write_roster(tmp_path, "trip", {
            "name": "trip",
            "version": 3,
            "groups": [
                {"id": "a", "name": "Guests", "type": "External", "declared_count": 2},
                {
                    "id": "b",
                    "name": "Hosts",
                    "type": "Internal",
                    "declared_count": 3,
                    "exclusions": [{"id": "x1", "exclude_from_internal_headcount": True}],
                },
            ],
        })

        roster = get_default_roster("trip", config_dir=config_dir)

        assert roster.version == 3
        assert roster.exclusions[0].exclusion_id == "x1"
        assert roster.exclusions[0].group_id == "b"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_default_roster("absent", config_dir=tmp_path)

    def test_missing_required_key(self, tmp_path):
        config_dir = _write_roster(tmp_path, "broken", {
            "name": "broken",
            "groups": [{"id": 1, "name": "No type", "declared_count": 2}],
        })

        with pytest.raises(ConfigurationError, match="type"):
            get_default_roster("broken", config_dir=config_dir)

    def test_engine_rule_violation_reported_as_config_error(self, tmp_path):
        config_dir = _write_roster(tmp_path, "overflow", {
            "name": "overflow",
            "groups": [{
                "id": 1,
                "name": "Tiny",
                "type": "Internal",
                "declared_count": 1,
                "exclusions": [
                    {"exclude_from_all_headcount": True},
                    {"exclude_from_all_headcount": True},
                ],
            }],
        })

        with pytest.raises(ConfigurationError) as exc_info:
            get_default_roster("overflow", config_dir=config_dir)

        assert exc_info.value.code == "CONFIGURATION_ERROR"
        assert "exclusion record" in exc_info.value.detail

    def test_unknown_group_type_in_file(self, tmp_path):
        config_dir = _write_roster(tmp_path, "typo", {
            "name": "typo",
            "groups": [{"id": 1, "name": "A", "type": "Externel", "declared_count": 1}],
        })

        with pytest.raises(ConfigurationError, match="Externel"):
            get_default_roster("typo", config_dir=config_dir)

    def test_groups_must_be_a_list(self):
        with pytest.raises(ConfigurationError):
            parse_roster({"name": "bad", "groups": {"id": 1}})

    @pytest.mark.parametrize("raw", ["false", "yes", 1, None])
    def test_exclusion_flag_must_be_boolean(self, raw):
        document = {
            "name": "flags",
            "groups": [{
                "id": 1,
                "name": "A",
                "type": "Internal",
                "declared_count": 2,
                "exclusions": [{"exclude_from_all_headcount": raw}],
            }],
        }

        with pytest.raises(ConfigurationError, match="exclude_from_all_headcount"):
            parse_roster(document, source="flags.yaml")

    def test_quoted_false_flag_in_file_rejected(self, tmp_path):
        config_dir = _write_roster(tmp_path, "quoted", {
            "name": "quoted",
            "groups": [{
                "id": 1,
                "name": "A",
                "type": "Internal",
                "declared_count": 2,
                "exclusions": [{"exclude_from_internal_headcount": "false"}],
            }],
        })

        with pytest.raises(ConfigurationError) as exc_info:
            get_default_roster("quoted", config_dir=config_dir)

        assert "exclude_from_internal_headcount" in exc_info.value.detail

    @pytest.mark.parametrize("version", ["two", "2", 1.5, True])
    def test_version_must_be_integer(self, version):
        with pytest.raises(ConfigurationError, match="version"):
            parse_roster({"name": "r", "version": version, "groups": []})


class TestChecksum:

    def test_key_order_does_not_matter(self):
        a = {"name": "r", "groups": [{"id": 1, "type": "Internal"}]}
        b = {"groups": [{"type": "Internal", "id": 1}], "name": "r"}

        assert compute_checksum(a) == compute_checksum(b)

    def test_content_changes_checksum(self):
        a = {"name": "r", "groups": [{"id": 1, "declared_count": 2}]}
        b = {"name": "r", "groups": [{"id": 1, "declared_count": 3}]}

        assert compute_checksum(a) != compute_checksum(b)
