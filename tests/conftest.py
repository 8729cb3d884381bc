"""
Shared test configuration and fixtures.

Stores run against real SQLite files under ``tmp_path`` and an in-memory
blob store. ``FakeTransport`` stands in for the vehicle service so sync
tests control exactly what is pulled and which pushes fail.
"""

import asyncio
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

import pytest

from vehicle_store.config import StoreConfig
from vehicle_store.exceptions import PushError
from vehicle_store.models import FuelLevel, InspectionNote, Vehicle, VehiclePart
from vehicle_store.storage.blobs import MemoryBlobStore
from vehicle_store.storage.database import VehicleDatabase
from vehicle_store.store import LocalVehicleStore
from vehicle_store.transport import VehicleTransport


def build_vehicle(
    license_number: str,
    last_updated: datetime | None = None,
    make: str = "Toyota",
    mileage: int = 1000,
    notes: list[InspectionNote] | None = None,
) -> Vehicle:
    return Vehicle(
        license_number=license_number,
        make=make,
        model="Sprint",
        registration_date=date(2018, 5, 17),
        last_updated=last_updated or datetime(2024, 1, 1, 12, 0, 0),
        mileage=mileage,
        tank=FuelLevel.HALF,
        notes=notes if notes is not None else [InspectionNote(VehiclePart.HOOD, "Light scratch")],
    )


class FakeTransport(VehicleTransport):
    """Scripted vehicle service."""

    def __init__(self, changed: list[Vehicle] | None = None):
        self.changed = changed or []
        self.fail_fetch: Exception | None = None
        self.reject: set[str] = set()
        self.pushed: list[Vehicle] = []
        self.since_requests: list[datetime] = []

    async def get_changed_vehicles(self, since: datetime) -> list[Vehicle]:
        self.since_requests.append(since)
        if self.fail_fetch is not None:
            raise self.fail_fetch
        return list(self.changed)

    async def put_vehicle_details(self, vehicle: Vehicle) -> None:
        if vehicle.license_number in self.reject:
            raise PushError(vehicle.license_number, "rejected by service")
        self.pushed.append(vehicle)


class CountingDatabaseFactory:
    """Database opener that records every open."""

    def __init__(self) -> None:
        self.opened: list[VehicleDatabase] = []

    async def __call__(self, path: Path) -> VehicleDatabase:
        database = await VehicleDatabase.open(path)
        self.opened.append(database)
        return database

    @property
    def indexes_ensured(self) -> int:
        return sum(db.indexes_ensured for db in self.opened)


class SlowDatabaseFactory(CountingDatabaseFactory):
    """Database opener that waits for the test to release it."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def __call__(self, path: Path) -> VehicleDatabase:
        self.entered.set()
        await self.release.wait()
        return await super().__call__(path)


@pytest.fixture
def make_vehicle() -> Callable[..., Vehicle]:
    """Factory for vehicles with sensible defaults."""
    return build_vehicle


@pytest.fixture
def store_config(tmp_path: Path) -> StoreConfig:
    return StoreConfig(data_dir=tmp_path / "data")


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def database_factory() -> CountingDatabaseFactory:
    return CountingDatabaseFactory()


@pytest.fixture
def slow_database_factory() -> SlowDatabaseFactory:
    return SlowDatabaseFactory()


@pytest.fixture
async def store(store_config, blobs, transport, database_factory):
    """Store wired to the fake transport and in-memory blobs."""
    vehicle_store = LocalVehicleStore(
        store_config,
        transport=transport,
        blobs=blobs,
        database_factory=database_factory,
    )
    yield vehicle_store
    await vehicle_store.close()
