"""
SQLite-backed collection store for vehicle records.

Each collection is a table holding one JSON document per vehicle, keyed by
the case-folded license number, with secondary indexes on the license
number and the last-updated timestamp. All statements run on aiosqlite's
worker thread so callers never block the event loop.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

import aiofiles.os
import aiosqlite

from ..exceptions import StorageConnectionError, StorageIOError
from ..models import Vehicle, normalize_license_number

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

# Fields a collection can carry a secondary index on
INDEXABLE_FIELDS = ("license_number", "last_updated")

_COLLECTION_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def sortable_timestamp(value: datetime) -> str:
    """Render a timestamp so that string order equals chronological order.

    Timezone information is dropped and the wall-clock time kept.
    """
    return value.replace(tzinfo=None).isoformat(timespec="microseconds")


class VehicleCollection:
    """Handle on one named collection of vehicles."""

    def __init__(self, database: VehicleDatabase, name: str):
        self.database = database
        self.name = name

    @property
    def conn(self) -> aiosqlite.Connection:
        return self.database.conn

    async def ensure_index(self, field: str) -> None:
        """Create a secondary index on ``field`` if it does not exist yet."""
        if field not in INDEXABLE_FIELDS:
            raise ValueError(f"Cannot index field {field!r} on {self.name}")

        try:
            await self.conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{self.name}_{field} ON {self.name} ({field})"
            )
            await self.conn.commit()
        except aiosqlite.Error as e:
            raise StorageIOError("ensure_index", f"{self.name}.{field}", e) from e

        self.database.indexes_ensured += 1
        logger.debug(f"Ensured index on {self.name}.{field}")

    async def upsert(self, vehicle: Vehicle) -> None:
        """Insert or replace a vehicle by license number."""
        try:
            await self.conn.execute(self._upsert_sql(), self._row(vehicle))
            await self.conn.commit()
        except aiosqlite.Error as e:
            raise StorageIOError("upsert", self.name, e) from e

    async def upsert_many(self, vehicles: Iterable[Vehicle]) -> int:
        """Insert or replace many vehicles in a single transaction.

        Either every vehicle is written or none is.

        Returns:
            Number of vehicles written
        """
        rows = [self._row(v) for v in vehicles]
        if not rows:
            return 0

        try:
            await self.conn.executemany(self._upsert_sql(), rows)
            await self.conn.commit()
        except aiosqlite.Error as e:
            await self.conn.rollback()
            raise StorageIOError("upsert_many", self.name, e) from e

        return len(rows)

    async def find_by_key(self, license_number: str) -> Vehicle | None:
        """Find a vehicle by license number, ignoring case."""
        return await self._fetch_one(
            f"SELECT document FROM {self.name} WHERE key = ?",
            (normalize_license_number(license_number),),
        )

    async def find_latest(self) -> Vehicle | None:
        """Return the vehicle with the greatest last-updated timestamp."""
        return await self._fetch_one(
            f"SELECT document FROM {self.name} ORDER BY last_updated DESC LIMIT 1", ()
        )

    async def find_prefix(
        self,
        prefix: str,
        limit: int,
        case_sensitive: bool = True,
    ) -> list[str]:
        """Return license numbers starting with ``prefix``, ascending.

        Ordering is by code point regardless of ``case_sensitive``.
        """
        if case_sensitive:
            column, needle = "license_number", prefix
        else:
            column, needle = "key", normalize_license_number(prefix)

        sql = f"""
            SELECT license_number FROM {self.name}
            WHERE substr({column}, 1, ?) = ?
            ORDER BY license_number
            LIMIT ?
        """
        try:
            async with self.conn.execute(sql, (len(needle), needle, limit)) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageIOError("find_prefix", self.name, e) from e

        return [row[0] for row in rows]

    async def find_all(self) -> list[Vehicle]:
        """Return every vehicle in the collection."""
        try:
            async with self.conn.execute(f"SELECT document FROM {self.name}") as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageIOError("find_all", self.name, e) from e

        return [Vehicle.from_dict(json.loads(row[0])) for row in rows]

    async def delete(self, license_number: str) -> bool:
        """Delete a vehicle by license number.

        Returns:
            True if a record was removed
        """
        try:
            cursor = await self.conn.execute(
                f"DELETE FROM {self.name} WHERE key = ?",
                (normalize_license_number(license_number),),
            )
            await self.conn.commit()
        except aiosqlite.Error as e:
            raise StorageIOError("delete", self.name, e) from e

        return cursor.rowcount > 0

    async def count(self) -> int:
        try:
            async with self.conn.execute(f"SELECT COUNT(*) FROM {self.name}") as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageIOError("count", self.name, e) from e
        return row[0] if row else 0

    # =========================================================================
    # Helpers
    # =========================================================================

    def _upsert_sql(self) -> str:
        return f"""
            INSERT INTO {self.name} (key, license_number, last_updated, document)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (key) DO UPDATE SET
                license_number = excluded.license_number,
                last_updated = excluded.last_updated,
                document = excluded.document
        """

    @staticmethod
    def _row(vehicle: Vehicle) -> tuple[Any, ...]:
        return (
            vehicle.key,
            vehicle.license_number,
            sortable_timestamp(vehicle.last_updated),
            json.dumps(vehicle.to_dict()),
        )

    async def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> Vehicle | None:
        try:
            async with self.conn.execute(sql, params) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageIOError("query", self.name, e) from e

        if row is None:
            return None
        return Vehicle.from_dict(json.loads(row[0]))


class VehicleDatabase:
    """
    Embedded on-disk database holding named vehicle collections.

    Only plumbing lives here: opening (creating the file and its directory
    if needed), handing out collections and closing.
    """

    def __init__(self, location: str, conn: aiosqlite.Connection):
        self.location = location
        self.conn: aiosqlite.Connection | None = conn
        self.indexes_ensured = 0

    @classmethod
    async def open(cls, path: str | Path) -> VehicleDatabase:
        """Open the database at ``path``, creating it if absent."""
        location = str(path)

        try:
            if location != MEMORY_PATH:
                await aiofiles.os.makedirs(Path(location).parent, exist_ok=True)
            conn = await aiosqlite.connect(location)
        except (OSError, aiosqlite.Error) as e:
            raise StorageConnectionError(location, e) from e

        logger.info(f"Vehicle database opened: {location}")
        return cls(location, conn)

    async def get_collection(self, name: str) -> VehicleCollection:
        """Return the named collection, creating its table if needed."""
        if not _COLLECTION_NAME.match(name):
            raise ValueError(f"Invalid collection name: {name!r}")
        if self.conn is None:
            raise StorageIOError("get_collection", self.location)

        try:
            await self.conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {name} (
                    key TEXT NOT NULL PRIMARY KEY,
                    license_number TEXT NOT NULL,
                    last_updated TEXT NOT NULL,
                    document TEXT NOT NULL
                )
            """)
            await self.conn.commit()
        except aiosqlite.Error as e:
            raise StorageIOError("create_collection", name, e) from e

        return VehicleCollection(self, name)

    @property
    def is_open(self) -> bool:
        return self.conn is not None

    async def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            await self.conn.close()
            self.conn = None
            logger.debug(f"Vehicle database closed: {self.location}")
