"""
Local vehicle store.

Two collections back the store:

- ``vehicles``: the baseline, a cache of what the server last sent us
- ``local_edits``: vehicles changed on this device and not yet pushed

Reads that resolve the "current" vehicle look at local edits first and fall
back to the baseline. The database is opened lazily on first use, exactly
once, whichever operation gets there first.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Generic, TypeVar

from .config import StoreConfig
from .exceptions import StorageIOError
from .identity.account import AccountSnapshotStore
from .identity.types import ClaimsPrincipal
from .logging_utils import VehicleLoggerAdapter
from .models import Vehicle
from .storage.blobs import BlobStore, FileBlobStore
from .storage.database import VehicleCollection, VehicleDatabase
from .storage.gate import InitializationGate
from .sync.engine import SyncEngine, SyncResult
from .transport import SeedDataTransport, VehicleTransport

logger = logging.getLogger(__name__)

BASELINE_COLLECTION = "vehicles"
LOCAL_EDITS_COLLECTION = "local_edits"

DatabaseFactory = Callable[[Path], Awaitable[VehicleDatabase]]

K = TypeVar("K")
V = TypeVar("V")


class LayeredLookup(Generic[K, V]):
    """Resolve a key against an ordered list of layers; the first hit wins."""

    def __init__(self, layers: Sequence[Callable[[K], Awaitable[V | None]]]):
        self.layers = list(layers)

    async def resolve(self, key: K) -> V | None:
        for layer in self.layers:
            value = await layer(key)
            if value is not None:
                return value
        return None


class LocalVehicleStore:
    """
    Offline-first vehicle store.

    Usage:
        async with LocalVehicleStore(StoreConfig.from_env()) as store:
            await store.synchronize()
            matches = await store.autocomplete("00")
            vehicle = await store.get_vehicle(matches[0])
            vehicle.mileage += 10
            await store.save_vehicle(vehicle)
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        transport: VehicleTransport | None = None,
        blobs: BlobStore | None = None,
        database_factory: DatabaseFactory = VehicleDatabase.open,
    ):
        """
        Initialize the store. Nothing is opened until the first operation.

        Args:
            config: Store configuration (defaults to StoreConfig.from_env())
            transport: Remote vehicle service (defaults to seed data)
            blobs: Protected blob store (defaults to files under config.blob_dir)
            database_factory: Opens the database; replaceable for testing
        """
        self.config = config or StoreConfig.from_env()
        self.blobs = blobs or FileBlobStore(self.config.blob_dir)
        self.accounts = AccountSnapshotStore(self.blobs)
        self.sync_engine = SyncEngine(
            self,
            transport or SeedDataTransport(count=self.config.seed_count),
            self.blobs,
            push_local_edits=self.config.push_local_edits,
        )
        self._database_factory = database_factory
        self._gate = InitializationGate(self._initialize)

        self.database: VehicleDatabase | None = None
        self.vehicles: VehicleCollection | None = None
        self.local_edits: VehicleCollection | None = None

    @classmethod
    async def create(cls, config: StoreConfig | None = None, **kwargs) -> LocalVehicleStore:
        """Create a store and open its database immediately."""
        store = cls(config, **kwargs)
        await store.ensure_ready()
        return store

    async def __aenter__(self) -> LocalVehicleStore:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def ensure_ready(self) -> None:
        """Open the database and collections if that has not happened yet.

        Raises:
            StorageConnectionError: If the database could not be opened
            StorageIOError: If the store was closed while this call waited
        """
        await self._gate.ensure_ready()
        if self.database is None:
            raise StorageIOError("open_store", str(self.config.db_path))

    async def _initialize(self) -> None:
        database = await self._database_factory(self.config.db_path)
        try:
            vehicles = await database.get_collection(BASELINE_COLLECTION)
            await vehicles.ensure_index("license_number")
            await vehicles.ensure_index("last_updated")

            local_edits = await database.get_collection(LOCAL_EDITS_COLLECTION)
            await local_edits.ensure_index("license_number")
            await local_edits.ensure_index("last_updated")
        except BaseException:
            await database.close()
            raise

        self.database = database
        self.vehicles = vehicles
        self.local_edits = local_edits
        logger.info(f"Vehicle store ready: {database.location}")

    async def close(self) -> None:
        """Release the database handle. The store reopens it if used again.

        An initialization still in flight is waited for first, so the handle
        it opens is released as well.
        """
        await self._gate.drain()

        database = self.database
        self._gate.reset()
        self.database = None
        self.vehicles = None
        self.local_edits = None

        if database:
            await database.close()

    # =========================================================================
    # Queries
    # =========================================================================

    async def autocomplete(self, prefix: str) -> list[str]:
        """License numbers in the baseline starting with ``prefix``.

        Sorted ascending and capped at ``config.autocomplete_limit``.
        """
        await self.ensure_ready()
        return await self.vehicles.find_prefix(
            prefix,
            self.config.autocomplete_limit,
            case_sensitive=self.config.case_sensitive_autocomplete,
        )

    async def get_vehicle(self, license_number: str) -> Vehicle | None:
        """Current state of a vehicle: its local edit if any, else the baseline."""
        await self.ensure_ready()
        lookup = LayeredLookup([self.local_edits.find_by_key, self.vehicles.find_by_key])
        return await lookup.resolve(license_number)

    async def get_outstanding_local_edits(self) -> list[Vehicle]:
        """Every vehicle edited locally and not yet pushed."""
        await self.ensure_ready()
        return await self.local_edits.find_all()

    # =========================================================================
    # Local edits
    # =========================================================================

    async def save_vehicle(self, vehicle: Vehicle) -> None:
        """Record a local edit. The baseline is left untouched."""
        await self.ensure_ready()
        await self.local_edits.upsert(vehicle)
        VehicleLoggerAdapter(logger, vehicle).debug(
            f"Saved local edit for {vehicle.license_number}"
        )

    async def discard_local_edit(
        self,
        license_number: str,
        if_matches: Vehicle | None = None,
    ) -> bool:
        """Remove a local edit.

        Args:
            license_number: Vehicle whose edit to remove
            if_matches: Only remove the edit if it still equals this vehicle

        Returns:
            True if an edit was removed
        """
        await self.ensure_ready()
        if if_matches is not None:
            current = await self.local_edits.find_by_key(license_number)
            if current != if_matches:
                return False
        return await self.local_edits.delete(license_number)

    # =========================================================================
    # Baseline (written by synchronization only)
    # =========================================================================

    async def latest_synchronized_vehicle(self) -> Vehicle | None:
        """Baseline vehicle with the most recent ``last_updated``."""
        await self.ensure_ready()
        return await self.vehicles.find_latest()

    async def merge_synchronized(self, vehicles: Sequence[Vehicle]) -> int:
        """Upsert vehicles received from the server into the baseline."""
        await self.ensure_ready()
        return await self.vehicles.upsert_many(vehicles)

    # =========================================================================
    # Synchronization and account
    # =========================================================================

    async def synchronize(self) -> SyncResult:
        """Push local edits (if enabled) and pull remote changes."""
        return await self.sync_engine.synchronize()

    async def get_last_update_date(self) -> datetime | None:
        """When the baseline was last synchronized, if ever."""
        return await self.sync_engine.get_last_update_date()

    async def save_user_account(self, principal: ClaimsPrincipal | None) -> None:
        await self.accounts.save_account(principal)

    async def load_user_account(self) -> ClaimsPrincipal:
        return await self.accounts.load_account()
