"""
Vehicle Store

Offline-first local data layer for vehicle inspections.

Provides:
- A two-tier vehicle cache: server baseline plus pending local edits
- Lazy, once-only database initialization on SQLite
- Pull-based synchronization with an optional local-edits push phase
- Account snapshots for signing in while offline

Usage:

    >>> from vehicle_store import LocalVehicleStore, StoreConfig
    >>> async with LocalVehicleStore(StoreConfig.from_env()) as store:
    ...     result = await store.synchronize()
    ...     matches = await store.autocomplete("00")
    ...     vehicle = await store.get_vehicle(matches[0])
    ...     vehicle.mileage = 12000
    ...     await store.save_vehicle(vehicle)
"""

from .config import StoreConfig
from .exceptions import (
    AccountSerializationError,
    PushError,
    StorageConnectionError,
    StorageIOError,
    SyncError,
    VehicleStoreError,
)
from .identity import (
    AccountSnapshotStore,
    Claim,
    ClaimsIdentity,
    ClaimsPrincipal,
    OfflineAccountPrincipalFactory,
    RemotePrincipalFactory,
)
from .models import FuelLevel, InspectionNote, Vehicle, VehiclePart
from .storage import BlobStore, FileBlobStore, MemoryBlobStore, VehicleDatabase
from .store import LayeredLookup, LocalVehicleStore
from .sync import SyncEngine, SyncResult, SyncState
from .transport import SeedDataTransport, VehicleTransport

__version__ = "0.1.0"

__all__ = [
    # Store
    "LocalVehicleStore",
    "LayeredLookup",
    "StoreConfig",
    # Model
    "Vehicle",
    "InspectionNote",
    "FuelLevel",
    "VehiclePart",
    # Storage
    "VehicleDatabase",
    "BlobStore",
    "FileBlobStore",
    "MemoryBlobStore",
    # Sync
    "SyncEngine",
    "SyncResult",
    "SyncState",
    "VehicleTransport",
    "SeedDataTransport",
    # Identity
    "Claim",
    "ClaimsIdentity",
    "ClaimsPrincipal",
    "AccountSnapshotStore",
    "RemotePrincipalFactory",
    "OfflineAccountPrincipalFactory",
    # Exceptions
    "VehicleStoreError",
    "StorageConnectionError",
    "StorageIOError",
    "SyncError",
    "PushError",
    "AccountSerializationError",
]
