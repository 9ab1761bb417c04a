"""Handlers for odometer readings, completed services and history cleanup."""

import copy
import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional

from .calculations import calc_due_date
from .evaluator import update_vehicle_statuses
from .history_entry import ServiceHistoryRecord
from .mileage_entry import MileageEntry
from .repository import ScheduleRepository, new_id
from .schedule_entry import VehicleScheduleEntry
from .status import Status
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


def _with_mileage(vehicle: Vehicle, mileage: int) -> Vehicle:
    """Copy of the vehicle with a new odometer value; the stored one is untouched."""
    updated = copy.copy(vehicle)
    updated.current_mileage = mileage
    return updated


def record_mileage(
    repo: ScheduleRepository,
    vehicle_id: str,
    mileage: int,
    today: Optional[date] = None,
    notes: Optional[str] = None,
) -> List[VehicleScheduleEntry]:
    """
    Log an odometer reading and re-evaluate the vehicle's schedule.

    Every reading goes into the mileage log. The vehicle's current mileage
    only moves up: it is the highest reading seen, so a lower reading is
    logged without rolling the odometer back.
    """
    if mileage < 0:
        raise ValueError(f"Mileage must be non-negative, got {mileage}")
    vehicle = repo.find_vehicle(vehicle_id)
    if vehicle is None:
        raise LookupError(f"Vehicle '{vehicle_id}' not found")

    today = today or date.today()
    repo.insert_mileage_entry(
        MileageEntry(new_id(), vehicle.id, mileage, today, notes=notes)
    )

    if mileage > vehicle.current_mileage:
        repo.update_vehicle(_with_mileage(vehicle, mileage))
        logger.info(
            "Mileage for %s: %s -> %s", vehicle.name, vehicle.current_mileage, mileage
        )
    else:
        logger.info(
            "Logged %s mi for %s, odometer stays at %s",
            mileage,
            vehicle.name,
            vehicle.current_mileage,
        )
    return update_vehicle_statuses(repo, vehicle_id, today)


def record_service_completion(
    repo: ScheduleRepository,
    vehicle_id: str,
    service_definition_id: str,
    completed_date: date,
    mileage_at_service: int,
    cost: Optional[float] = None,
    notes: Optional[str] = None,
    shop_name: Optional[str] = None,
    today: Optional[date] = None,
) -> ServiceHistoryRecord:
    """
    Log a real service and restart the matching entry's intervals from it.

    The entry's next due points become completion mileage + interval and
    completion date + months. The service mileage is added to the mileage
    log, and if it is higher than the vehicle's odometer the odometer is
    raised to match. Statuses are re-evaluated afterwards.
    """
    vehicle = repo.find_vehicle(vehicle_id)
    if vehicle is None:
        raise LookupError(f"Vehicle '{vehicle_id}' not found")
    if mileage_at_service < 0:
        raise ValueError(f"Mileage must be non-negative, got {mileage_at_service}")

    entry = repo.find_entry(vehicle_id, service_definition_id)
    if entry is None:
        raise LookupError(
            f"No schedule entry for service '{service_definition_id}' "
            f"on vehicle '{vehicle_id}'"
        )

    record = ServiceHistoryRecord(
        id=new_id(),
        vehicle_id=vehicle_id,
        service_definition_id=service_definition_id,
        completed_date=completed_date,
        mileage_at_service=mileage_at_service,
        schedule_entry_id=entry.id,
        notes=notes,
        cost=cost,
        shop_name=shop_name,
    )
    repo.insert_history(record)

    next_due_mileage = None
    if entry.mileage_interval:
        next_due_mileage = mileage_at_service + entry.mileage_interval
    repo.update_schedule_entry(
        replace(
            entry,
            next_due_mileage=next_due_mileage,
            next_due_date=calc_due_date(completed_date, entry.month_interval),
            status=Status.OK,
        )
    )

    if mileage_at_service > vehicle.current_mileage:
        repo.update_vehicle(_with_mileage(vehicle, mileage_at_service))
    repo.insert_mileage_entry(
        MileageEntry(
            new_id(),
            vehicle_id,
            mileage_at_service,
            completed_date,
            notes=f"Service completed: {service_definition_id}",
        )
    )

    logger.info(
        "Recorded %s on %s at %s mi (%s)",
        service_definition_id,
        vehicle.name,
        mileage_at_service,
        completed_date.isoformat(),
    )
    update_vehicle_statuses(repo, vehicle_id, today)
    return record


def delete_service_record(
    repo: ScheduleRepository, vehicle_id: str, record_id: str
) -> ServiceHistoryRecord:
    """Remove a history record. Schedule entries keep their due points."""
    if repo.find_vehicle(vehicle_id) is None:
        raise LookupError(f"Vehicle '{vehicle_id}' not found")
    record = repo.delete_history(vehicle_id, record_id)
    logger.info(
        "Deleted %s record at %s mi from %s",
        record.service_definition_id,
        record.mileage_at_service,
        vehicle_id,
    )
    return record
