#!/usr/bin/env python3
"""Tests for rule matching and priority resolution."""
import pytest

from service_schedule import ScheduleRule, ServiceDefinition, Vehicle, match_rules


@pytest.fixture
def definitions():
    return [
        ServiceDefinition("oil-change", "Engine Oil & Filter", "Engine"),
        ServiceDefinition("transfer-case-oil", "Transfer Case Oil Change", "Drivetrain"),
        ServiceDefinition("retired", "Retired Service", is_active=False),
    ]


@pytest.fixture
def vehicle():
    return Vehicle("v1", "Toyota", "4Runner", 2021, 45000, drive_type="4WD")


class TestMatchRules:
    """Tests for match_rules."""

    def test_highest_priority_wins(self, definitions, vehicle):
        """Generic 7,500 mi rule loses to the make-specific 10,000 mi rule."""
        rules = [
            ScheduleRule("generic", "oil-change", mileage_interval=7500, priority=0),
            ScheduleRule(
                "toyota", "oil-change", make="Toyota", mileage_interval=10000, priority=10
            ),
        ]
        matched = match_rules(vehicle, rules, definitions)
        assert len(matched) == 1
        assert matched[0].id == "toyota"
        assert matched[0].mileage_interval == 10000

    def test_non_matching_specific_rule_falls_back(self, definitions):
        honda = Vehicle("v2", "Honda", "Civic", 2019, 30000)
        rules = [
            ScheduleRule("generic", "oil-change", mileage_interval=7500),
            ScheduleRule(
                "toyota", "oil-change", make="Toyota", mileage_interval=10000, priority=10
            ),
        ]
        matched = match_rules(honda, rules, definitions)
        assert [r.id for r in matched] == ["generic"]

    def test_one_rule_per_service(self, definitions, vehicle):
        rules = [
            ScheduleRule("oil-a", "oil-change", mileage_interval=5000),
            ScheduleRule("oil-b", "oil-change", make="Toyota", priority=10),
            ScheduleRule("tc-4wd", "transfer-case-oil", drive_type="4WD", priority=5),
        ]
        matched = match_rules(vehicle, rules, definitions)
        assert sorted(r.service_definition_id for r in matched) == [
            "oil-change",
            "transfer-case-oil",
        ]

    def test_equal_priority_tie_broken_by_rule_id(self, definitions, vehicle):
        """Ties are deterministic regardless of input order."""
        a = ScheduleRule("a-rule", "oil-change", mileage_interval=5000, priority=10)
        b = ScheduleRule("b-rule", "oil-change", mileage_interval=6000, priority=10)
        assert match_rules(vehicle, [b, a], definitions)[0].id == "a-rule"
        assert match_rules(vehicle, [a, b], definitions)[0].id == "a-rule"

    def test_inactive_definition_excluded(self, definitions, vehicle):
        rules = [ScheduleRule("r1", "retired", mileage_interval=5000)]
        assert match_rules(vehicle, rules, definitions) == []

    def test_missing_definition_excluded(self, definitions, vehicle):
        rules = [ScheduleRule("r1", "no-such-service", mileage_interval=5000)]
        assert match_rules(vehicle, rules, definitions) == []

    def test_drive_type_rule_skips_other_drivetrains(self, definitions):
        fwd = Vehicle("v3", "Toyota", "Camry", 2020, 10000, drive_type="FWD")
        rules = [ScheduleRule("tc-4wd", "transfer-case-oil", drive_type="4WD", priority=5)]
        assert match_rules(fwd, rules, definitions) == []

    def test_orders_by_priority(self, definitions, vehicle):
        rules = [
            ScheduleRule("oil", "oil-change", priority=0),
            ScheduleRule("tc", "transfer-case-oil", drive_type="4WD", priority=5),
        ]
        assert [r.id for r in match_rules(vehicle, rules, definitions)] == ["tc", "oil"]
