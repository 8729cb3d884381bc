"""
Synchronization engine.

Reconciles the local store with the vehicle service in two phases:
- Push: local edits → service (disabled unless ``push_local_edits``)
- Pull: vehicles changed since the newest baseline record → baseline

The pull cursor is derived from the baseline itself, so it only moves past
records that were actually merged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..exceptions import StorageIOError, SyncError, VehicleStoreError
from ..logging_utils import VehicleLoggerAdapter
from ..storage.blobs import BlobStore
from ..transport import VehicleTransport

if TYPE_CHECKING:
    from ..store import LocalVehicleStore

logger = logging.getLogger(__name__)

LAST_UPDATE_KEY = "last_update_date"


class SyncState(Enum):
    """Current state of the sync engine."""

    IDLE = "idle"
    SYNCING = "syncing"
    ERROR = "error"


@dataclass
class SyncResult:
    """Result of a sync operation."""

    success: bool
    pushed: int = 0
    pulled: int = 0
    failed_pushes: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0


class SyncEngine:
    """Pull-based sync between a LocalVehicleStore and a VehicleTransport.

    Handles:
    - Pushing outstanding local edits, one record at a time
    - Computing the change cursor from the baseline
    - Merging pulled vehicles into the baseline
    - Remembering when the last pull happened
    """

    def __init__(
        self,
        store: LocalVehicleStore,
        transport: VehicleTransport,
        blobs: BlobStore,
        push_local_edits: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the sync engine.

        Args:
            store: Store whose collections are synchronized
            transport: Remote vehicle service
            blobs: Blob store for the last update date
            push_local_edits: Whether to push local edits before pulling
            clock: Source of the recorded sync timestamp
        """
        self.store = store
        self.transport = transport
        self.blobs = blobs
        self.push_local_edits = push_local_edits
        self.clock = clock

        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        """Get current sync state."""
        return self._state

    async def synchronize(self) -> SyncResult:
        """Run the push phase (if enabled) followed by the pull phase.

        Storage and transport failures are reported in the result rather
        than raised.
        """
        if self._state == SyncState.SYNCING:
            return SyncResult(success=False, errors=["Sync already in progress"])

        self._state = SyncState.SYNCING
        start_time = datetime.now(UTC)
        push_result: dict[str, Any] = {"count": 0, "failed": [], "errors": []}

        try:
            await self.store.ensure_ready()

            if self.push_local_edits:
                push_result = await self._push_local_edits()

            pulled = await self.fetch_changes()
        except VehicleStoreError as e:
            self._state = SyncState.ERROR
            logger.error(f"Synchronization failed: {e}")
            return SyncResult(
                success=False,
                pushed=push_result["count"],
                failed_pushes=push_result["failed"],
                errors=push_result["errors"] + [str(e)],
                duration_ms=self._elapsed_ms(start_time),
            )
        except BaseException:
            self._state = SyncState.ERROR
            raise

        self._state = SyncState.IDLE
        duration = self._elapsed_ms(start_time)
        logger.info(
            f"Synchronization finished: pushed={push_result['count']} "
            f"pulled={pulled} failed={len(push_result['failed'])} in {duration}ms"
        )

        return SyncResult(
            success=len(push_result["errors"]) == 0,
            pushed=push_result["count"],
            pulled=pulled,
            failed_pushes=push_result["failed"],
            errors=push_result["errors"],
            duration_ms=duration,
        )

    async def _push_local_edits(self) -> dict[str, Any]:
        """Push every outstanding local edit.

        An edit is removed locally only after the service confirmed it; a
        failed push leaves it in place and does not stop the others.

        Returns:
            Dict with count, failed (license numbers), errors
        """
        result: dict[str, Any] = {"count": 0, "failed": [], "errors": []}

        for vehicle in await self.store.get_outstanding_local_edits():
            vehicle_log = VehicleLoggerAdapter(logger, vehicle, phase="push")
            try:
                await self.transport.put_vehicle_details(vehicle)
            except Exception as e:
                vehicle_log.warning(f"Failed to push {vehicle.license_number}: {e}")
                result["failed"].append(vehicle.license_number)
                result["errors"].append(f"Failed to push {vehicle.license_number}: {e}")
                continue

            # An edit saved again while the push was in flight stays queued
            await self.store.discard_local_edit(vehicle.license_number, if_matches=vehicle)
            vehicle_log.debug(f"Pushed {vehicle.license_number}")
            result["count"] += 1

        return result

    async def fetch_changes(self) -> int:
        """Pull vehicles changed since the newest baseline record into the baseline.

        The cursor is inclusive; vehicles delivered twice are simply upserted
        again.

        Failing to record the last update date is logged and does not undo
        or fail the merge.

        Returns:
            Number of vehicles merged

        Raises:
            SyncError: If retrieval or merging failed; the baseline is unchanged
        """
        sync_date = self.clock()
        since = await self.get_cursor()

        try:
            vehicles = await self.transport.get_changed_vehicles(since)
        except Exception as e:
            raise SyncError(f"Fetching vehicles changed since {since.isoformat()} failed", e) from e

        try:
            merged = await self.store.merge_synchronized(vehicles)
        except StorageIOError as e:
            raise SyncError("Merging fetched vehicles into the baseline failed", e) from e

        try:
            await self.blobs.set(LAST_UPDATE_KEY, sync_date.isoformat().encode("utf-8"))
        except VehicleStoreError as e:
            # The merge stands; only the displayed date is stale
            logger.warning(f"Could not record last update date: {e}")

        logger.debug(f"Merged {merged} vehicles changed since {since.isoformat()}")
        return merged

    async def get_cursor(self) -> datetime:
        """Timestamp to request changes from, with timezone info dropped."""
        latest = await self.store.latest_synchronized_vehicle()
        since = latest.last_updated if latest else datetime.min
        # Keep the wall-clock value, the service applies its own timezone
        return since.replace(tzinfo=None)

    async def get_last_update_date(self) -> datetime | None:
        """When changes were last pulled successfully, if ever."""
        data = await self.blobs.get(LAST_UPDATE_KEY)
        if data is None:
            return None

        try:
            return datetime.fromisoformat(data.decode("utf-8"))
        except ValueError as e:
            logger.warning(f"Ignoring unreadable last update date: {e}")
            return None

    @staticmethod
    def _elapsed_ms(start_time: datetime) -> int:
        return int((datetime.now(UTC) - start_time).total_seconds() * 1000)
