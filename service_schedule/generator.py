"""Materialize per-vehicle schedule entries from matched rules."""

import logging
from datetime import date
from typing import List, Optional, Tuple

from .calculations import calc_due_date, calc_next_due_miles, last_boundary
from .evaluator import record_backfill, update_vehicle_statuses
from .repository import ScheduleRepository, new_id
from .rule import ScheduleRule
from .schedule_entry import VehicleScheduleEntry
from .status import Status
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


def build_entry(
    vehicle: Vehicle, rule: ScheduleRule, today: date
) -> Tuple[VehicleScheduleEntry, Optional[int]]:
    """
    Build a fresh schedule entry for a vehicle from its winning rule.

    The vehicle is assumed to have been serviced on schedule up to the most
    recent mileage boundary below its odometer; that boundary is returned
    alongside the entry (None when there is nothing to backfill). Time-based
    due dates count from today since there is no service date to go on.
    """
    mileage_interval = rule.mileage_interval or None
    month_interval = rule.month_interval or None
    miles = vehicle.current_mileage

    boundary = None
    if miles > 0:
        boundary = last_boundary(miles, mileage_interval)

    entry = VehicleScheduleEntry(
        id=new_id(),
        vehicle_id=vehicle.id,
        service_definition_id=rule.service_definition_id,
        mileage_interval=mileage_interval,
        month_interval=month_interval,
        is_combined=rule.is_combined,
        next_due_mileage=calc_next_due_miles(miles, mileage_interval),
        next_due_date=calc_due_date(today, month_interval),
        status=Status.OK,
        source=rule.source,
        source_notes=rule.notes,
    )
    return entry, boundary or None


def generate_schedule_for_vehicle(
    repo: ScheduleRepository, vehicle_id: str, today: Optional[date] = None
) -> List[VehicleScheduleEntry]:
    """
    Create the vehicle's schedule entries, then evaluate their status.

    Safe to call again for the same vehicle: entries are upserted per
    service definition and backfill records are not duplicated. Returns the
    evaluated entries (empty if the vehicle is unknown).
    """
    vehicle = repo.find_vehicle(vehicle_id)
    if vehicle is None:
        logger.warning("Vehicle %s not found, nothing to schedule", vehicle_id)
        return []

    today = today or date.today()
    rules = repo.list_matching_rules(vehicle)

    for rule in rules:
        entry, boundary = build_entry(vehicle, rule, today)
        stored = repo.upsert_schedule_entry(entry)
        record_backfill(repo, stored, boundary, today)

    logger.info(
        "Generated %d schedule entries for %s at %s mi",
        len(rules),
        vehicle.name,
        f"{vehicle.current_mileage:,}",
    )
    return update_vehicle_statuses(repo, vehicle.id, today)
