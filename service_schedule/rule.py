"""ScheduleRule class for scoped maintenance interval templates."""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .vehicle import Vehicle


def _same(rule_value: Optional[str], vehicle_value: Optional[str]) -> bool:
    """Unset rule field matches anything; otherwise compare case-insensitively."""
    if rule_value is None:
        return True
    if vehicle_value is None:
        return False
    return str(rule_value).lower() == str(vehicle_value).lower()


class ScheduleRule:
    """
    Interval template for one service type, scoped to a set of vehicles.

    Every scoping field (make, model, year bounds, engine, drive type) is an
    optional filter; None means "matches any". Priority decides which rule
    wins when several match the same vehicle for the same service.
    """

    def __init__(
            self,
            id: str,
            service_definition_id: str,
            make: Optional[str] = None,
            model: Optional[str] = None,
            year_min: Optional[int] = None,
            year_max: Optional[int] = None,
            engine: Optional[str] = None,
            drive_type: Optional[str] = None,
            mileage_interval: Optional[int] = None,
            month_interval: Optional[int] = None,
            is_combined: bool = True,
            priority: int = 0,
            source: Optional[str] = None,
            notes: Optional[str] = None,
    ):
        self.id = id
        self.service_definition_id = service_definition_id
        self.make = make
        self.model = model
        self.year_min = year_min
        self.year_max = year_max
        self.engine = engine
        self.drive_type = drive_type
        self.mileage_interval = mileage_interval
        self.month_interval = month_interval
        self.is_combined = is_combined if is_combined is not None else True
        self.priority = priority or 0
        self.source = source
        self.notes = notes

    @property
    def scope(self) -> str:
        """Human-readable description of which vehicles the rule targets."""
        parts = [p for p in (self.make, self.model, self.engine, self.drive_type) if p]
        if self.year_min is not None or self.year_max is not None:
            lo = self.year_min if self.year_min is not None else ""
            hi = self.year_max if self.year_max is not None else ""
            parts.append(f"{lo}-{hi}")
        return " ".join(str(p) for p in parts) if parts else "all vehicles"

    def matches(self, vehicle: "Vehicle") -> bool:
        """Check whether every scoping field accepts the vehicle."""
        if self.year_min is not None and vehicle.year < self.year_min:
            return False
        if self.year_max is not None and vehicle.year > self.year_max:
            return False
        return (
            _same(self.make, vehicle.make)
            and _same(self.model, vehicle.model)
            and _same(self.engine, vehicle.engine)
            and _same(self.drive_type, vehicle.drive_type)
        )
