"""YAML loading and saving for garage files and rule catalogs."""

from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .history_entry import ServiceHistoryRecord
from .mileage_entry import MileageEntry
from .preferences import ReminderPreferences
from .repository import MemoryRepository
from .rule import ScheduleRule
from .schedule_entry import VehicleScheduleEntry
from .service_definition import ServiceDefinition
from .status import Status
from .vehicle import Vehicle


def _parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Accept ISO strings or dates already parsed by the YAML loader."""
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values for cleaner YAML."""
    return {k: v for k, v in d.items() if v is not None}


def _text(value: Any) -> Optional[str]:
    """YAML reads bare scalars like `model: 86` as numbers; names are strings."""
    return None if value is None else str(value)


# =============================================================================
# Record <-> dict (camelCase keys)
# =============================================================================


def _definition_from_dict(dct: Dict[str, Any]) -> ServiceDefinition:
    return ServiceDefinition(
        dct["id"],
        dct["name"],
        dct.get("category"),
        dct.get("description"),
        dct.get("isActive", True),
    )


def _definition_to_dict(d: ServiceDefinition) -> Dict[str, Any]:
    out = _compact(
        {
            "id": d.id,
            "name": d.name,
            "category": d.category,
            "description": d.description,
        }
    )
    if not d.is_active:
        out["isActive"] = False
    return out


def _rule_from_dict(dct: Dict[str, Any]) -> ScheduleRule:
    return ScheduleRule(
        dct["id"],
        dct["serviceDefinitionId"],
        make=_text(dct.get("make")),
        model=_text(dct.get("model")),
        year_min=dct.get("yearMin"),
        year_max=dct.get("yearMax"),
        engine=_text(dct.get("engine")),
        drive_type=_text(dct.get("driveType")),
        mileage_interval=dct.get("mileageInterval"),
        month_interval=dct.get("monthInterval"),
        is_combined=dct.get("isCombined", True),
        priority=dct.get("priority", 0),
        source=dct.get("source"),
        notes=dct.get("notes"),
    )


def _rule_to_dict(rule: ScheduleRule) -> Dict[str, Any]:
    d = _compact(
        {
            "id": rule.id,
            "serviceDefinitionId": rule.service_definition_id,
            "make": rule.make,
            "model": rule.model,
            "yearMin": rule.year_min,
            "yearMax": rule.year_max,
            "engine": rule.engine,
            "driveType": rule.drive_type,
            "mileageInterval": rule.mileage_interval,
            "monthInterval": rule.month_interval,
        }
    )
    if not rule.is_combined:
        d["isCombined"] = False
    if rule.priority:
        d["priority"] = rule.priority
    if rule.source is not None:
        d["source"] = rule.source
    if rule.notes is not None:
        d["notes"] = rule.notes
    return d


def _vehicle_from_dict(dct: Dict[str, Any]) -> Vehicle:
    return Vehicle(
        dct["id"],
        str(dct["make"]),
        str(dct["model"]),
        dct["year"],
        current_mileage=dct.get("currentMileage", 0),
        engine=_text(dct.get("engine")),
        drive_type=_text(dct.get("driveType")),
        owner_id=dct.get("ownerId"),
        vin=_text(dct.get("vin")),
        trim=_text(dct.get("trim")),
    )


def _vehicle_to_dict(v: Vehicle) -> Dict[str, Any]:
    return _compact(
        {
            "id": v.id,
            "ownerId": v.owner_id,
            "make": v.make,
            "model": v.model,
            "year": v.year,
            "trim": v.trim,
            "engine": v.engine,
            "driveType": v.drive_type,
            "vin": v.vin,
            "currentMileage": v.current_mileage,
        }
    )


def _entry_from_dict(dct: Dict[str, Any]) -> VehicleScheduleEntry:
    return VehicleScheduleEntry(
        id=dct["id"],
        vehicle_id=dct["vehicleId"],
        service_definition_id=dct["serviceDefinitionId"],
        mileage_interval=dct.get("mileageInterval"),
        month_interval=dct.get("monthInterval"),
        is_combined=dct.get("isCombined", True),
        next_due_mileage=dct.get("nextDueMileage"),
        next_due_date=_parse_date(dct.get("nextDueDate")),
        status=Status.from_label(dct.get("status", "ok")),
        source=dct.get("source"),
        source_notes=dct.get("sourceNotes"),
    )


def _entry_to_dict(e: VehicleScheduleEntry) -> Dict[str, Any]:
    return _compact(
        {
            "id": e.id,
            "vehicleId": e.vehicle_id,
            "serviceDefinitionId": e.service_definition_id,
            "mileageInterval": e.mileage_interval,
            "monthInterval": e.month_interval,
            "isCombined": e.is_combined,
            "nextDueMileage": e.next_due_mileage,
            "nextDueDate": e.next_due_date.isoformat() if e.next_due_date else None,
            "status": e.status.label,
            "source": e.source,
            "sourceNotes": e.source_notes,
        }
    )


def _history_from_dict(dct: Dict[str, Any]) -> ServiceHistoryRecord:
    return ServiceHistoryRecord(
        dct["id"],
        dct["vehicleId"],
        dct["serviceDefinitionId"],
        _parse_date(dct["completedDate"]),
        dct["mileageAtService"],
        schedule_entry_id=dct.get("scheduleEntryId"),
        notes=dct.get("notes"),
        cost=dct.get("cost"),
        shop_name=dct.get("shopName"),
    )


def _history_to_dict(h: ServiceHistoryRecord) -> Dict[str, Any]:
    return _compact(
        {
            "id": h.id,
            "vehicleId": h.vehicle_id,
            "scheduleEntryId": h.schedule_entry_id,
            "serviceDefinitionId": h.service_definition_id,
            "completedDate": h.completed_date.isoformat(),
            "mileageAtService": h.mileage_at_service,
            "notes": h.notes,
            "cost": h.cost,
            "shopName": h.shop_name,
        }
    )


def _mileage_from_dict(dct: Dict[str, Any]) -> MileageEntry:
    return MileageEntry(
        dct["id"],
        dct["vehicleId"],
        dct["mileage"],
        _parse_date(dct["recordedAt"]),
        notes=dct.get("notes"),
    )


def _mileage_to_dict(m: MileageEntry) -> Dict[str, Any]:
    return _compact(
        {
            "id": m.id,
            "vehicleId": m.vehicle_id,
            "mileage": m.mileage,
            "recordedAt": m.recorded_at.isoformat(),
            "notes": m.notes,
        }
    )


# =============================================================================
# Files
# =============================================================================


def _read_yaml(filename: Union[str, Path]) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader) or {}


def _write_yaml(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def load_catalog(
    filename: Union[str, Path],
) -> Tuple[List[ServiceDefinition], List[ScheduleRule]]:
    """Load service definitions and schedule rules from a catalog YAML file."""
    data = _read_yaml(filename)
    definitions = [_definition_from_dict(d) for d in data.get("serviceDefinitions") or []]
    rules = [_rule_from_dict(r) for r in data.get("rules") or []]
    known = {d.id for d in definitions}
    for rule in rules:
        if rule.service_definition_id not in known:
            raise ValueError(
                f"Rule '{rule.id}' references unknown service definition "
                f"'{rule.service_definition_id}'"
            )
    return definitions, rules


class YamlRepository(MemoryRepository):
    """
    Repository persisted to a single garage YAML file.

    The whole file is loaded up front and rewritten after every mutation.
    A missing file starts an empty garage and is created on the first write.
    """

    def __init__(
        self,
        filename: Union[str, Path],
        default_preferences: Optional[ReminderPreferences] = None,
    ):
        super().__init__(default_preferences)
        self.filename = Path(filename)
        if self.filename.exists():
            self._load()

    def _load(self) -> None:
        data = _read_yaml(self.filename)
        for dct in data.get("serviceDefinitions") or []:
            d = _definition_from_dict(dct)
            self.definitions[d.id] = d
        for dct in data.get("rules") or []:
            r = _rule_from_dict(dct)
            self.rules[r.id] = r
        for dct in data.get("owners") or []:
            self.preferences[dct["id"]] = ReminderPreferences(
                dct.get("reminderLeadMiles", self.default_preferences.lead_miles),
                dct.get("reminderLeadDays", self.default_preferences.lead_days),
            )
        for dct in data.get("vehicles") or []:
            v = _vehicle_from_dict(dct)
            self.vehicles[v.id] = v
        for dct in data.get("schedules") or []:
            e = _entry_from_dict(dct)
            self.entries[e.id] = e
        self.history = [_history_from_dict(h) for h in data.get("history") or []]
        self.mileage = [_mileage_from_dict(m) for m in data.get("mileage") or []]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the whole garage to the YAML dict format."""
        return {
            "serviceDefinitions": [
                _definition_to_dict(d) for d in self.definitions.values()
            ],
            "rules": [_rule_to_dict(r) for r in self.rules.values()],
            "owners": [
                {
                    "id": owner_id,
                    "reminderLeadMiles": p.lead_miles,
                    "reminderLeadDays": p.lead_days,
                }
                for owner_id, p in self.preferences.items()
            ],
            "vehicles": [_vehicle_to_dict(v) for v in self.vehicles.values()],
            "schedules": [_entry_to_dict(e) for e in self.entries.values()],
            "history": [_history_to_dict(h) for h in self.history],
            "mileage": [_mileage_to_dict(m) for m in self.mileage],
        }

    def _commit(self) -> None:
        _write_yaml(self.filename, self.to_dict())
