#!/usr/bin/env python3
"""
Tests for status evaluation.

Phase 1 (catch-up advancement) moves stale mileage due points forward and
backfills an assumed service; Phase 2 turns due points into a status.
"""
import pytest
from dataclasses import replace
from datetime import date

from service_schedule import (
    ReminderPreferences,
    ScheduleRule,
    ServiceDefinition,
    Status,
    VehicleScheduleEntry,
    advance_entry,
    evaluate_status,
    generate_schedule_for_vehicle,
    update_all_vehicle_statuses,
    update_vehicle_statuses,
)


def _set_miles(repo, vehicle_id, miles):
    vehicle = repo.find_vehicle(vehicle_id)
    vehicle.current_mileage = miles
    repo.update_vehicle(vehicle)


@pytest.fixture
def entry():
    return VehicleScheduleEntry(
        id="e1",
        vehicle_id="v1",
        service_definition_id="oil-change",
        mileage_interval=10000,
        month_interval=12,
        next_due_mileage=50000,
        next_due_date=date(2026, 6, 1),
    )


class TestAdvanceEntry:
    """Tests for Phase 1 catch-up advancement."""

    def test_crossing_boundary_advances(self, entry):
        """Passing the due point advances it and backfills the boundary."""
        result = advance_entry(entry, 50200, date(2025, 9, 1))
        assert result.advanced
        assert result.backfill_miles == 50000
        assert result.entry.next_due_mileage == 60000
        assert result.entry.next_due_date == date(2026, 9, 1)

    def test_large_jump_lands_on_future_boundary(self, entry):
        """A big jump skips straight to the next boundary ahead."""
        result = advance_entry(entry, 87654, date(2025, 9, 1))
        assert result.backfill_miles == 80000
        assert result.entry.next_due_mileage == 90000

    def test_before_due_unchanged(self, entry):
        """Short of the due point nothing changes."""
        result = advance_entry(entry, 49999, date(2025, 9, 1))
        assert not result.advanced
        assert result.entry is entry

    def test_input_entry_not_mutated(self, entry):
        """The entry passed in keeps its values."""
        advance_entry(entry, 50200, date(2025, 9, 1))
        assert entry.next_due_mileage == 50000
        assert entry.next_due_date == date(2026, 6, 1)

    def test_mileage_only_keeps_no_date(self):
        """Mileage-only entries do not gain a due date."""
        entry = VehicleScheduleEntry(
            "e1", "v1", "oil-change", mileage_interval=5000, next_due_mileage=5000
        )
        result = advance_entry(entry, 6000, date(2025, 9, 1))
        assert result.entry.next_due_mileage == 10000
        assert result.entry.next_due_date is None

    def test_no_mileage_interval_unchanged(self):
        """Time-only entries are never advanced by mileage."""
        entry = VehicleScheduleEntry(
            "e1", "v1", "wipers", month_interval=12, next_due_date=date(2025, 1, 1)
        )
        assert not advance_entry(entry, 100000, date(2025, 9, 1)).advanced

    def test_zero_interval_unchanged(self):
        """A zero interval cannot advance."""
        entry = VehicleScheduleEntry(
            "e1", "v1", "oil-change", mileage_interval=0, next_due_mileage=0
        )
        assert not advance_entry(entry, 100000, date(2025, 9, 1)).advanced


class TestEvaluateStatus:
    """Tests for Phase 2 status computation."""

    @pytest.fixture
    def prefs(self):
        return ReminderPreferences(lead_miles=500, lead_days=30)

    def test_mileage_thresholds(self, prefs):
        """Ok, then upcoming inside the lead, then overdue at the due point."""
        entry = VehicleScheduleEntry(
            "e1", "v1", "oil-change", mileage_interval=10000, next_due_mileage=50000
        )
        today = date(2025, 6, 1)
        assert evaluate_status(entry, 49499, today, prefs) == Status.OK
        assert evaluate_status(entry, 49500, today, prefs) == Status.UPCOMING
        assert evaluate_status(entry, 50000, today, prefs) == Status.OVERDUE

    def test_date_thresholds(self, prefs):
        """Ok, then upcoming inside the lead days, then overdue on the due date."""
        entry = VehicleScheduleEntry(
            "e1", "v1", "wipers", month_interval=12, next_due_date=date(2025, 7, 1)
        )
        assert evaluate_status(entry, 0, date(2025, 5, 31), prefs) == Status.OK
        assert evaluate_status(entry, 0, date(2025, 6, 1), prefs) == Status.UPCOMING
        assert evaluate_status(entry, 0, date(2025, 7, 1), prefs) == Status.OVERDUE

    def test_no_due_points_is_ok(self, prefs):
        """Entries with nothing to measure stay ok."""
        entry = VehicleScheduleEntry("e1", "v1", "inspect")
        assert evaluate_status(entry, 10**6, date(2099, 1, 1), prefs) == Status.OK

    def test_combined_date_overdue_wins(self, prefs, entry):
        """500 mi short of due but past the due date: overdue."""
        assert evaluate_status(entry, 49500, date(2026, 7, 1), prefs) == Status.OVERDUE

    def test_non_combined_needs_both_overdue(self, prefs, entry):
        """Non-combined entries are only overdue once both points pass."""
        entry = replace(entry, is_combined=False)
        assert evaluate_status(entry, 49500, date(2026, 7, 1), prefs) == Status.UPCOMING
        assert evaluate_status(entry, 50000, date(2026, 7, 1), prefs) == Status.OVERDUE
        assert evaluate_status(entry, 40000, date(2025, 6, 1), prefs) == Status.OK


class TestUpdateVehicleStatuses:
    """Integration tests for update_vehicle_statuses."""

    @pytest.fixture
    def registered(self, oil_repo, add_vehicle, today):
        add_vehicle(oil_repo)
        generate_schedule_for_vehicle(oil_repo, "4runner", today)
        return oil_repo

    def test_mileage_update_past_boundary(self, registered):
        """50,200 mi: due point moves to 60,000 with a backfill at 50,000."""
        _set_miles(registered, "4runner", 50200)

        entries = update_vehicle_statuses(registered, "4runner", date(2025, 9, 1))

        assert entries[0].next_due_mileage == 60000
        assert entries[0].next_due_date == date(2026, 9, 1)
        assert entries[0].status == Status.OK
        stored = registered.find_entry("4runner", "oil-change")
        assert stored == entries[0]
        miles = sorted(h.mileage_at_service for h in registered.list_history("4runner"))
        assert miles == [40000, 50000]

    def test_idempotent(self, registered):
        """A second run with no changes writes nothing."""
        _set_miles(registered, "4runner", 50200)
        first = update_vehicle_statuses(registered, "4runner", date(2025, 9, 1))
        history_count = len(registered.history)
        commits = registered.commits

        second = update_vehicle_statuses(registered, "4runner", date(2025, 9, 1))

        assert second == first
        assert len(registered.history) == history_count
        assert registered.commits == commits

    def test_creeping_mileage_no_duplicate_backfill(self, registered):
        """Small steps past one boundary backfill it once."""
        for miles in (50200, 50300, 55000, 59600):
            _set_miles(registered, "4runner", miles)
            update_vehicle_statuses(registered, "4runner", date(2025, 9, 1))

        miles = [h.mileage_at_service for h in registered.list_history("4runner")]
        assert sorted(miles) == [40000, 50000]
        entry = registered.find_entry("4runner", "oil-change")
        assert entry.next_due_mileage == 60000
        assert entry.status == Status.UPCOMING

    def test_monotonic_advancement_on_large_jump(self, registered):
        """The due point always ends up past the odometer."""
        _set_miles(registered, "4runner", 87654)

        entry = update_vehicle_statuses(registered, "4runner", date(2025, 9, 1))[0]

        assert entry.next_due_mileage == 90000
        assert entry.next_due_mileage > 87654
        assert registered.find_history(entry.id, 80000) is not None

    def test_combined_overdue_by_date(self, registered):
        """13 months after registration, 500 mi short: overdue by date."""
        _set_miles(registered, "4runner", 49500)

        entry = update_vehicle_statuses(registered, "4runner", date(2026, 7, 1))[0]

        assert entry.next_due_mileage == 50000
        assert entry.status == Status.OVERDUE

    def test_status_progression(self, registered):
        """Upcoming inside the lead, overdue once the point passes."""
        _set_miles(registered, "4runner", 49600)
        assert (
            update_vehicle_statuses(registered, "4runner", date(2025, 7, 1))[0].status
            == Status.UPCOMING
        )
        _set_miles(registered, "4runner", 49999)
        assert (
            update_vehicle_statuses(registered, "4runner", date(2026, 6, 1))[0].status
            == Status.OVERDUE
        )

    def test_owner_lead_window(self, registered):
        """The owner's wider lead window is used."""
        registered.set_preferences("alex", ReminderPreferences(lead_miles=1500))
        vehicle = registered.find_vehicle("4runner")
        vehicle.owner_id = "alex"
        vehicle.current_mileage = 48600
        registered.update_vehicle(vehicle)

        entry = update_vehicle_statuses(registered, "4runner", date(2025, 7, 1))[0]

        assert entry.status == Status.UPCOMING

    def test_time_only_rule(self, oil_repo, add_vehicle, today):
        """A 6 month rule goes ok, upcoming, overdue over time."""
        oil_repo.add_service_definition(ServiceDefinition("wipers", "Wiper Blades"))
        oil_repo.add_rule(ScheduleRule("wipers/all", "wipers", month_interval=6))
        add_vehicle(oil_repo)
        generate_schedule_for_vehicle(oil_repo, "4runner", today)

        statuses = [
            update_vehicle_statuses(oil_repo, "4runner", day)
            for day in (date(2025, 10, 1), date(2025, 11, 15), date(2025, 12, 1))
        ]

        wipers = [
            next(e for e in entries if e.service_definition_id == "wipers").status
            for entries in statuses
        ]
        assert wipers == [Status.OK, Status.UPCOMING, Status.OVERDUE]

    def test_unknown_vehicle_is_noop(self, oil_repo, today):
        """Unknown vehicles return nothing."""
        assert update_vehicle_statuses(oil_repo, "missing", today) == []

    def test_persistence_failure_propagates(self, registered):
        """Storage errors reach the caller instead of being swallowed."""
        _set_miles(registered, "4runner", 50200)
        registered.fail_writes = True

        with pytest.raises(OSError, match="disk full"):
            update_vehicle_statuses(registered, "4runner", date(2025, 9, 1))


class TestUpdateAllVehicleStatuses:
    """Tests for the periodic sweep."""

    def test_evaluates_every_vehicle(self, oil_repo, add_vehicle, today):
        """Every registered vehicle is re-evaluated."""
        add_vehicle(oil_repo)
        add_vehicle(oil_repo, "civic", make="Honda", model="Civic", miles=20000)
        generate_schedule_for_vehicle(oil_repo, "4runner", today)
        generate_schedule_for_vehicle(oil_repo, "civic", today)
        _set_miles(oil_repo, "4runner", 50200)
        _set_miles(oil_repo, "civic", 22600)

        count = update_all_vehicle_statuses(oil_repo, date(2025, 9, 1))

        assert count == 2
        assert oil_repo.find_entry("4runner", "oil-change").next_due_mileage == 60000
        assert oil_repo.find_entry("civic", "oil-change").next_due_mileage == 30000

    def test_empty_repository(self, oil_repo, today):
        """An empty garage evaluates nothing."""
        assert update_all_vehicle_statuses(oil_repo, today) == 0
