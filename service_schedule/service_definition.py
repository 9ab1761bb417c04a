"""ServiceDefinition class for maintenance task types."""
from typing import Optional


class ServiceDefinition:
    """A type of maintenance task, e.g. 'Oil Change'."""

    def __init__(
            self,
            id: str,
            name: str,
            category: Optional[str] = None,
            description: Optional[str] = None,
            is_active: bool = True,
    ):
        self.id = id
        self.name = name
        self.category = category
        self.description = description
        self.is_active = is_active if is_active is not None else True
