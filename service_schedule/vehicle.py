"""Vehicle class for the attributes the engine reads."""

from typing import Optional


class Vehicle:
    """Vehicle identification and odometer state."""

    def __init__(
        self,
        id: str,
        make: str,
        model: str,
        year: int,
        current_mileage: int = 0,
        engine: Optional[str] = None,
        drive_type: Optional[str] = None,
        owner_id: Optional[str] = None,
        vin: Optional[str] = None,
        trim: Optional[str] = None,
    ):
        self.id = id
        self.make = make
        self.model = model
        self.year = year
        self.current_mileage = current_mileage or 0
        self.engine = engine
        self.drive_type = drive_type
        self.owner_id = owner_id
        self.vin = vin
        self.trim = trim

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        base = f"{self.year} {self.make} {self.model}"
        return f"{base} {self.trim}" if self.trim else base
