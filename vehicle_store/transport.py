"""
Transport boundary between the local store and the vehicle service.

The sync engine only talks to ``VehicleTransport``. ``SeedDataTransport``
answers change queries from the seed generator and keeps pushed vehicles in
memory, which is what the app runs against until a service is available.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from .models import Vehicle
from .seed import SeedDataGenerator

logger = logging.getLogger(__name__)


class VehicleTransport(ABC):
    """Request/response contract with the remote vehicle service."""

    @abstractmethod
    async def get_changed_vehicles(self, since: datetime) -> list[Vehicle]:
        """Return every vehicle changed at or after ``since``.

        ``since`` is a naive timestamp; the service interprets it in its own
        timezone.
        """
        ...

    @abstractmethod
    async def put_vehicle_details(self, vehicle: Vehicle) -> None:
        """Upload a locally edited vehicle.

        Returning normally confirms the service accepted it.

        Raises:
            PushError: If the service rejected the vehicle
        """
        ...


class SeedDataTransport(VehicleTransport):
    """Transport backed by synthetic data."""

    def __init__(self, count: int = 100, generator: SeedDataGenerator | None = None):
        self.count = count
        self.generator = generator or SeedDataGenerator()
        self.pushed: dict[str, Vehicle] = {}

    async def get_changed_vehicles(self, since: datetime) -> list[Vehicle]:
        vehicles = [
            v for v in self.generator.vehicles(self.count)
            if v.last_updated.replace(tzinfo=None) >= since
        ]
        logger.debug(f"Generated {len(vehicles)} seed vehicles changed since {since.isoformat()}")
        return vehicles

    async def put_vehicle_details(self, vehicle: Vehicle) -> None:
        self.pushed[vehicle.key] = vehicle
