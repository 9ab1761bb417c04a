"""Read paths over stored schedule state."""

from typing import List

from .history_entry import ServiceHistoryRecord
from .mileage_entry import MileageEntry
from .repository import ScheduleRepository
from .schedule_entry import VehicleScheduleEntry

_NO_MILEAGE = float("inf")


def _urgency_key(entry: VehicleScheduleEntry):
    due = entry.next_due_mileage if entry.next_due_mileage is not None else _NO_MILEAGE
    return (entry.status.value, due, entry.service_definition_id)


def sorted_entries(
    repo: ScheduleRepository, vehicle_id: str
) -> List[VehicleScheduleEntry]:
    """All entries, most urgent first, then by next due mileage."""
    return sorted(repo.list_entries(vehicle_id), key=_urgency_key)


def due_entries(
    repo: ScheduleRepository, vehicle_id: str
) -> List[VehicleScheduleEntry]:
    """Entries that are upcoming or overdue, most urgent first."""
    return [e for e in sorted_entries(repo, vehicle_id) if e.is_due]


def history_newest_first(
    repo: ScheduleRepository, vehicle_id: str
) -> List[ServiceHistoryRecord]:
    """Service history for a vehicle, most recent first."""
    return sorted(
        repo.list_history(vehicle_id),
        key=lambda h: (h.completed_date, h.mileage_at_service),
        reverse=True,
    )


def mileage_log(repo: ScheduleRepository, vehicle_id: str) -> List[MileageEntry]:
    """Odometer readings for a vehicle, most recent first."""
    return sorted(
        repo.list_mileage_entries(vehicle_id),
        key=lambda m: (m.recorded_at, m.mileage),
        reverse=True,
    )
