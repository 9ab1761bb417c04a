"""
Vehicle maintenance scheduling engine.

This package matches interval rules to vehicles and tracks what is due:
- Status: Urgency levels (OVERDUE, UPCOMING, OK)
- ServiceDefinition / ScheduleRule: Reference data describing intervals
- Vehicle: The attributes rules are matched against
- VehicleScheduleEntry: Per-vehicle due points and status
- ServiceHistoryRecord: Completed or assumed services
- MileageEntry: Odometer log
- match_rules / generate_schedule_for_vehicle / update_vehicle_statuses:
  the engine itself
- ScheduleRepository: Storage interface (MemoryRepository, YamlRepository)
"""

from .status import Status
from .service_definition import ServiceDefinition
from .rule import ScheduleRule
from .vehicle import Vehicle
from .preferences import ReminderPreferences
from .schedule_entry import VehicleScheduleEntry
from .history_entry import ServiceHistoryRecord
from .mileage_entry import MileageEntry
from .calculations import (
    calc_due_date,
    calc_next_due_miles,
    check_status,
    combine_status,
    last_boundary,
)
from .matcher import match_rules
from .repository import MemoryRepository, ScheduleRepository, new_id
from .evaluator import (
    Advancement,
    advance_entry,
    evaluate_status,
    update_all_vehicle_statuses,
    update_vehicle_statuses,
)
from .generator import build_entry, generate_schedule_for_vehicle
from .completion import (
    delete_service_record,
    record_mileage,
    record_service_completion,
)
from .queries import due_entries, history_newest_first, mileage_log, sorted_entries
from .loader import YamlRepository, load_catalog
from .config import Settings

__all__ = [
    "Status",
    "ServiceDefinition",
    "ScheduleRule",
    "Vehicle",
    "ReminderPreferences",
    "VehicleScheduleEntry",
    "ServiceHistoryRecord",
    "MileageEntry",
    "calc_due_date",
    "calc_next_due_miles",
    "check_status",
    "combine_status",
    "last_boundary",
    "match_rules",
    "ScheduleRepository",
    "MemoryRepository",
    "YamlRepository",
    "new_id",
    "Advancement",
    "advance_entry",
    "evaluate_status",
    "update_vehicle_statuses",
    "update_all_vehicle_statuses",
    "build_entry",
    "generate_schedule_for_vehicle",
    "record_mileage",
    "record_service_completion",
    "delete_service_record",
    "due_entries",
    "sorted_entries",
    "history_newest_first",
    "mileage_log",
    "load_catalog",
    "Settings",
]
