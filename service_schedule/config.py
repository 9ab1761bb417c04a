"""Settings read from MAINT_* environment variables."""

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .preferences import DEFAULT_LEAD_DAYS, DEFAULT_LEAD_MILES, ReminderPreferences


class Settings(BaseSettings):
    """CLI configuration. MAINT_DEFAULT_LEAD_MILES sets default_lead_miles, etc."""

    model_config = SettingsConfigDict(
        env_prefix="MAINT_", env_ignore_empty=True, frozen=True
    )

    garage_file: Path = Path("garage.yaml")
    log_level: str = "WARNING"
    default_lead_miles: int = DEFAULT_LEAD_MILES
    default_lead_days: int = DEFAULT_LEAD_DAYS

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @field_validator("default_lead_miles", "default_lead_days")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be non-negative")
        return value

    @property
    def default_preferences(self) -> ReminderPreferences:
        return ReminderPreferences(self.default_lead_miles, self.default_lead_days)
