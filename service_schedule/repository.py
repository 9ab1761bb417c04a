"""Storage interface used by the scheduling engine, plus an in-memory store."""

import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .history_entry import ServiceHistoryRecord
from .matcher import match_rules
from .mileage_entry import MileageEntry
from .preferences import ReminderPreferences
from .rule import ScheduleRule
from .schedule_entry import VehicleScheduleEntry
from .service_definition import ServiceDefinition
from .vehicle import Vehicle


def new_id() -> str:
    """Generate a record id."""
    return str(uuid.uuid4())


class ScheduleRepository(ABC):
    """
    Everything the engine reads and writes.

    Implementations own consistency of their own records; the engine never
    touches storage except through these methods.
    """

    # Vehicles and owners

    @abstractmethod
    def find_vehicle(self, vehicle_id: str) -> Optional[Vehicle]: ...

    @abstractmethod
    def list_vehicle_ids(self) -> List[str]: ...

    @abstractmethod
    def add_vehicle(self, vehicle: Vehicle) -> None: ...

    @abstractmethod
    def update_vehicle(self, vehicle: Vehicle) -> None: ...

    @abstractmethod
    def delete_vehicle(self, vehicle_id: str) -> None:
        """Remove a vehicle with its schedule entries, history and mileage log."""

    @abstractmethod
    def get_preferences(self, owner_id: Optional[str]) -> ReminderPreferences: ...

    @abstractmethod
    def set_preferences(self, owner_id: str, prefs: ReminderPreferences) -> None: ...

    # Reference data

    @abstractmethod
    def list_service_definitions(self) -> List[ServiceDefinition]: ...

    @abstractmethod
    def add_service_definition(self, definition: ServiceDefinition) -> None: ...

    @abstractmethod
    def list_rules(self) -> List[ScheduleRule]: ...

    @abstractmethod
    def add_rule(self, rule: ScheduleRule) -> None: ...

    def list_matching_rules(self, vehicle: Vehicle) -> List[ScheduleRule]:
        """Winning rule per active service definition for the vehicle."""
        return match_rules(vehicle, self.list_rules(), self.list_service_definitions())

    # Schedule entries

    @abstractmethod
    def list_entries(self, vehicle_id: str) -> List[VehicleScheduleEntry]: ...

    @abstractmethod
    def find_entry(
        self, vehicle_id: str, service_definition_id: str
    ) -> Optional[VehicleScheduleEntry]: ...

    @abstractmethod
    def upsert_schedule_entry(
        self, entry: VehicleScheduleEntry
    ) -> VehicleScheduleEntry:
        """
        Store an entry keyed by (vehicle, service definition).

        If an entry already exists for the pair it is replaced in place and
        keeps its id. Returns the stored entry.
        """

    @abstractmethod
    def update_schedule_entry(self, entry: VehicleScheduleEntry) -> None:
        """Replace an existing entry by id. Raises LookupError if missing."""

    # Service history

    @abstractmethod
    def list_history(self, vehicle_id: str) -> List[ServiceHistoryRecord]: ...

    @abstractmethod
    def find_history(
        self, schedule_entry_id: str, mileage_at_service: int
    ) -> Optional[ServiceHistoryRecord]: ...

    @abstractmethod
    def insert_history(self, record: ServiceHistoryRecord) -> None: ...

    @abstractmethod
    def delete_history(self, vehicle_id: str, record_id: str) -> ServiceHistoryRecord:
        """Remove one of the vehicle's history records. Raises LookupError."""

    # Mileage log

    @abstractmethod
    def list_mileage_entries(self, vehicle_id: str) -> List[MileageEntry]: ...

    @abstractmethod
    def insert_mileage_entry(self, entry: MileageEntry) -> None: ...


class MemoryRepository(ScheduleRepository):
    """Dictionary-backed repository. Subclasses persist via _commit()."""

    def __init__(
        self, default_preferences: Optional[ReminderPreferences] = None
    ):
        self.default_preferences = default_preferences or ReminderPreferences()
        self.vehicles: Dict[str, Vehicle] = {}
        self.preferences: Dict[str, ReminderPreferences] = {}
        self.definitions: Dict[str, ServiceDefinition] = {}
        self.rules: Dict[str, ScheduleRule] = {}
        self.entries: Dict[str, VehicleScheduleEntry] = {}
        self.history: List[ServiceHistoryRecord] = []
        self.mileage: List[MileageEntry] = []

    def _commit(self) -> None:
        """Hook called after every mutation."""

    def load_catalog(
        self,
        definitions: Iterable[ServiceDefinition],
        rules: Iterable[ScheduleRule],
    ) -> None:
        """Bulk-add reference data, committing once."""
        for definition in definitions:
            self.definitions[definition.id] = definition
        for rule in rules:
            self.rules[rule.id] = rule
        self._commit()

    def find_vehicle(self, vehicle_id):
        return self.vehicles.get(vehicle_id)

    def list_vehicle_ids(self):
        return list(self.vehicles)

    def add_vehicle(self, vehicle):
        if vehicle.id in self.vehicles:
            raise ValueError(f"Vehicle '{vehicle.id}' already exists")
        self.vehicles[vehicle.id] = vehicle
        self._commit()

    def update_vehicle(self, vehicle):
        if vehicle.id not in self.vehicles:
            raise LookupError(f"Vehicle '{vehicle.id}' not found")
        self.vehicles[vehicle.id] = vehicle
        self._commit()

    def delete_vehicle(self, vehicle_id):
        if vehicle_id not in self.vehicles:
            raise LookupError(f"Vehicle '{vehicle_id}' not found")
        del self.vehicles[vehicle_id]
        self.entries = {
            k: e for k, e in self.entries.items() if e.vehicle_id != vehicle_id
        }
        self.history = [h for h in self.history if h.vehicle_id != vehicle_id]
        self.mileage = [m for m in self.mileage if m.vehicle_id != vehicle_id]
        self._commit()

    def get_preferences(self, owner_id):
        if owner_id is None:
            return self.default_preferences
        return self.preferences.get(owner_id, self.default_preferences)

    def set_preferences(self, owner_id, prefs):
        self.preferences[owner_id] = prefs
        self._commit()

    def list_service_definitions(self):
        return list(self.definitions.values())

    def add_service_definition(self, definition):
        self.definitions[definition.id] = definition
        self._commit()

    def list_rules(self):
        return list(self.rules.values())

    def add_rule(self, rule):
        self.rules[rule.id] = rule
        self._commit()

    def list_entries(self, vehicle_id):
        return [e for e in self.entries.values() if e.vehicle_id == vehicle_id]

    def find_entry(self, vehicle_id, service_definition_id):
        for entry in self.entries.values():
            if (
                entry.vehicle_id == vehicle_id
                and entry.service_definition_id == service_definition_id
            ):
                return entry
        return None

    def upsert_schedule_entry(self, entry):
        existing = self.find_entry(entry.vehicle_id, entry.service_definition_id)
        if existing is not None and existing.id != entry.id:
            del self.entries[existing.id]
            entry = replace(entry, id=existing.id)
        self.entries[entry.id] = entry
        self._commit()
        return entry

    def update_schedule_entry(self, entry):
        if entry.id not in self.entries:
            raise LookupError(f"Schedule entry '{entry.id}' not found")
        self.entries[entry.id] = entry
        self._commit()

    def list_history(self, vehicle_id):
        return [h for h in self.history if h.vehicle_id == vehicle_id]

    def find_history(self, schedule_entry_id, mileage_at_service):
        for record in self.history:
            if (
                record.schedule_entry_id == schedule_entry_id
                and record.mileage_at_service == mileage_at_service
            ):
                return record
        return None

    def insert_history(self, record):
        self.history.append(record)
        self._commit()

    def delete_history(self, vehicle_id, record_id):
        for record in self.history:
            if record.id == record_id and record.vehicle_id == vehicle_id:
                self.history.remove(record)
                self._commit()
                return record
        raise LookupError(
            f"History record '{record_id}' not found for vehicle '{vehicle_id}'"
        )

    def list_mileage_entries(self, vehicle_id):
        return [m for m in self.mileage if m.vehicle_id == vehicle_id]

    def insert_mileage_entry(self, entry):
        self.mileage.append(entry)
        self._commit()
