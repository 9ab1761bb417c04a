"""MileageEntry class for the odometer log."""
from datetime import date
from typing import Optional


class MileageEntry:
    """One odometer reading, entered by hand or logged with a service."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            mileage: int,
            recorded_at: date,
            notes: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_id = vehicle_id
        self.mileage = mileage
        self.recorded_at = recorded_at
        self.notes = notes
