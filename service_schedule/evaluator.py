"""Re-evaluate schedule entries as mileage and time advance."""

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import List, Optional

from .calculations import calc_due_date, check_status, combine_status, last_boundary
from .history_entry import ServiceHistoryRecord, assumed_note
from .preferences import ReminderPreferences
from .repository import ScheduleRepository, new_id
from .schedule_entry import VehicleScheduleEntry
from .status import Status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Advancement:
    """Result of catch-up advancement for one entry."""

    entry: VehicleScheduleEntry
    backfill_miles: Optional[int] = None

    @property
    def advanced(self) -> bool:
        return self.backfill_miles is not None


def advance_entry(
    entry: VehicleScheduleEntry, current_mileage: int, today: date
) -> Advancement:
    """
    Move a stale mileage due point to the next boundary past current mileage.

    When the odometer has reached next_due_mileage, services are assumed to
    have been done on schedule up to the latest boundary, so the due point
    jumps to the boundary after it and the time clock restarts today. The
    returned backfill_miles is that latest boundary (None if nothing moved).
    """
    interval = entry.mileage_interval
    if not interval or interval <= 0 or entry.next_due_mileage is None:
        return Advancement(entry)
    if current_mileage < entry.next_due_mileage:
        return Advancement(entry)

    boundary = last_boundary(current_mileage, interval)
    next_due = boundary + interval
    if next_due <= entry.next_due_mileage:
        return Advancement(entry)

    changes = {"next_due_mileage": next_due}
    if entry.month_interval:
        changes["next_due_date"] = calc_due_date(today, entry.month_interval)
    return Advancement(replace(entry, **changes), backfill_miles=boundary)


def evaluate_status(
    entry: VehicleScheduleEntry,
    current_mileage: int,
    today: date,
    preferences: ReminderPreferences,
) -> Status:
    """Compute an entry's status from its due points and the lead window."""
    mileage_status = None
    if entry.next_due_mileage is not None:
        mileage_status = check_status(
            current_mileage, entry.next_due_mileage, preferences.lead_miles
        )

    date_status = None
    if entry.next_due_date is not None:
        if today >= entry.next_due_date:
            date_status = Status.OVERDUE
        elif today + timedelta(days=preferences.lead_days) >= entry.next_due_date:
            date_status = Status.UPCOMING
        else:
            date_status = Status.OK

    return combine_status(mileage_status, date_status, entry.is_combined)


def update_vehicle_statuses(
    repo: ScheduleRepository, vehicle_id: str, today: Optional[date] = None
) -> List[VehicleScheduleEntry]:
    """
    Advance stale entries and recompute statuses for one vehicle.

    Writes only what changed: an advanced entry, a backfill record that does
    not exist yet, or a new status. Running it twice with the same mileage,
    date and preferences writes nothing the second time.

    Returns the vehicle's entries after evaluation (empty if the vehicle is
    unknown).
    """
    vehicle = repo.find_vehicle(vehicle_id)
    if vehicle is None:
        logger.warning("Vehicle %s not found, nothing to evaluate", vehicle_id)
        return []

    today = today or date.today()
    prefs = repo.get_preferences(vehicle.owner_id)
    mileage = vehicle.current_mileage

    results = []
    for entry in repo.list_entries(vehicle.id):
        # Phase 1: catch-up advancement
        advancement = advance_entry(entry, mileage, today)
        current = advancement.entry
        if advancement.advanced:
            record_backfill(repo, current, advancement.backfill_miles, today)
            logger.info(
                "Advanced %s on %s: next due %s -> %s mi",
                entry.service_definition_id,
                vehicle.name,
                entry.next_due_mileage,
                current.next_due_mileage,
            )

        # Phase 2: status
        status = evaluate_status(current, mileage, today, prefs)
        if status != current.status:
            logger.debug(
                "%s on %s: %s -> %s",
                current.service_definition_id,
                vehicle.name,
                current.status.label,
                status.label,
            )
            current = replace(current, status=status)

        if current != entry:
            repo.update_schedule_entry(current)
        results.append(current)

    return results


def update_all_vehicle_statuses(
    repo: ScheduleRepository, today: Optional[date] = None
) -> int:
    """Evaluate every vehicle. Returns the number of vehicles evaluated."""
    today = today or date.today()
    vehicle_ids = repo.list_vehicle_ids()
    for vehicle_id in vehicle_ids:
        update_vehicle_statuses(repo, vehicle_id, today)
    logger.info("Evaluated schedules for %d vehicles", len(vehicle_ids))
    return len(vehicle_ids)


def record_backfill(
    repo: ScheduleRepository,
    entry: VehicleScheduleEntry,
    miles: Optional[int],
    today: date,
) -> None:
    """Insert an assumed-service record unless one exists for this boundary."""
    if not miles or miles <= 0:
        return
    if repo.find_history(entry.id, miles) is not None:
        return
    repo.insert_history(
        ServiceHistoryRecord(
            id=new_id(),
            vehicle_id=entry.vehicle_id,
            service_definition_id=entry.service_definition_id,
            completed_date=today,
            mileage_at_service=miles,
            schedule_entry_id=entry.id,
            notes=assumed_note(miles),
        )
    )
    logger.info("Recorded assumed service at %s mi for entry %s", miles, entry.id)
