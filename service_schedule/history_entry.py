"""ServiceHistoryRecord class for completed and assumed services."""
from datetime import date
from typing import Optional

ASSUMED_NOTE = "Assumed on-schedule service at {miles:,} mi (auto-generated)"


class ServiceHistoryRecord:
    """A record of maintenance performed, real or assumed."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            service_definition_id: str,
            completed_date: date,
            mileage_at_service: int,
            schedule_entry_id: Optional[str] = None,
            notes: Optional[str] = None,
            cost: Optional[float] = None,
            shop_name: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.service_definition_id = service_definition_id
        self.completed_date = completed_date
        self.mileage_at_service = mileage_at_service
        self.schedule_entry_id = schedule_entry_id
        self.notes = notes
        self.cost = cost
        self.shop_name = shop_name


def assumed_note(miles: int) -> str:
    """Note attached to backfilled history records."""
    return ASSUMED_NOTE.format(miles=int(miles))
