"""Per-owner reminder preferences."""

from dataclasses import dataclass

DEFAULT_LEAD_MILES = 500
DEFAULT_LEAD_DAYS = 30


@dataclass(frozen=True)
class ReminderPreferences:
    """How far ahead of a due point an entry turns UPCOMING."""

    lead_miles: int = DEFAULT_LEAD_MILES
    lead_days: int = DEFAULT_LEAD_DAYS
