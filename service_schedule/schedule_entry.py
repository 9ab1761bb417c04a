"""VehicleScheduleEntry dataclass for per-vehicle schedule state."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .status import Status


@dataclass(frozen=True)
class VehicleScheduleEntry:
    """
    A matched rule materialized for one vehicle.

    Intervals and is_combined are copied from the rule at generation time;
    next_due_mileage, next_due_date and status are recomputed by the
    evaluator. Instances are immutable: changes produce a new value via
    dataclasses.replace.
    """

    id: str
    vehicle_id: str
    service_definition_id: str
    mileage_interval: Optional[int] = None
    month_interval: Optional[int] = None
    is_combined: bool = True
    next_due_mileage: Optional[int] = None
    next_due_date: Optional[date] = None
    status: Status = Status.OK
    source: Optional[str] = None
    source_notes: Optional[str] = None

    @property
    def is_due(self) -> bool:
        return self.status in (Status.OVERDUE, Status.UPCOMING)

    def miles_remaining(self, current_mileage: int) -> Optional[int]:
        if self.next_due_mileage is None:
            return None
        return self.next_due_mileage - current_mileage

    def days_remaining(self, today: date) -> Optional[int]:
        if self.next_due_date is None:
            return None
        return (self.next_due_date - today).days
