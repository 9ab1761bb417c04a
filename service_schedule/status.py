"""Status enum for maintenance urgency levels."""

from enum import Enum


class Status(Enum):
    """Schedule entry status. Lower value = more urgent."""

    OVERDUE = 1
    UPCOMING = 2
    OK = 3

    @property
    def label(self) -> str:
        """Lowercase name used when persisting the status."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "Status":
        try:
            return cls[label.upper()]
        except KeyError:
            raise ValueError(f"Unknown status '{label}'") from None
