"""Shared fixtures for scheduling engine tests."""

from datetime import date
from pathlib import Path

import pytest

from service_schedule import (
    MemoryRepository,
    ScheduleRule,
    ServiceDefinition,
    Vehicle,
    load_catalog,
)

CATALOG = Path(__file__).parent.parent / "catalog" / "default.yaml"


class CountingRepository(MemoryRepository):
    """MemoryRepository that counts writes, and can be made to fail them."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.commits = 0
        self.fail_writes = False

    def _commit(self):
        if self.fail_writes:
            raise OSError("disk full")
        self.commits += 1


@pytest.fixture
def today():
    return date(2025, 6, 1)


@pytest.fixture
def catalog_path():
    return CATALOG


@pytest.fixture
def oil_repo():
    """Generic oil rule (7,500 mi / 6 mo) plus a Toyota 4Runner override."""
    repo = CountingRepository()
    repo.load_catalog(
        [ServiceDefinition("oil-change", "Oil Change", "Engine")],
        [
            ScheduleRule(
                "oil-change/generic",
                "oil-change",
                mileage_interval=7500,
                month_interval=6,
            ),
            ScheduleRule(
                "oil-change/toyota-4runner",
                "oil-change",
                make="Toyota",
                model="4Runner",
                mileage_interval=10000,
                month_interval=12,
                priority=20,
            ),
        ],
    )
    return repo


@pytest.fixture
def catalog_repo():
    repo = CountingRepository()
    repo.load_catalog(*load_catalog(CATALOG))
    return repo


@pytest.fixture
def add_vehicle():
    """Factory registering a vehicle (2021 Toyota 4Runner 4WD by default)."""

    def _add(
        repo,
        vehicle_id="4runner",
        make="Toyota",
        model="4Runner",
        year=2021,
        miles=45000,
        drive_type="4WD",
        engine=None,
        owner_id=None,
    ):
        vehicle = Vehicle(
            vehicle_id,
            make,
            model,
            year,
            current_mileage=miles,
            engine=engine,
            drive_type=drive_type,
            owner_id=owner_id,
        )
        repo.add_vehicle(vehicle)
        return vehicle

    return _add
