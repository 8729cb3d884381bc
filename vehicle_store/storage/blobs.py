"""
Protected key/value blob storage.

Small binary values (the account snapshot, the last sync date) live here,
outside the vehicle database. ``FileBlobStore`` keeps one owner-readable
file per key and replaces values atomically; ``MemoryBlobStore`` is the
in-process equivalent for tests and ephemeral use.
"""

import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles
import aiofiles.os

from ..exceptions import StorageIOError

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.match(key):
        raise ValueError(f"Invalid blob key: {key!r}")
    return key


class BlobStore(ABC):
    """Abstract protected blob store."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the bytes stored under ``key`` or None if absent."""
        ...

    @abstractmethod
    async def set(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Deleting a missing key is not an error."""
        ...


class MemoryBlobStore(BlobStore):
    """Blob store kept in a dictionary."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def get(self, key: str) -> bytes | None:
        return self._data.get(_check_key(key))

    async def set(self, key: str, data: bytes) -> None:
        self._data[_check_key(key)] = bytes(data)

    async def delete(self, key: str) -> None:
        self._data.pop(_check_key(key), None)


class FileBlobStore(BlobStore):
    """Blob store with one file per key inside a private directory.

    The directory is created with owner-only permissions on first write.
    Writes go to a temp file that is renamed over the target.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}.bin"

    async def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            if not await aiofiles.os.path.exists(path):
                return None
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageIOError("read_blob", str(path), e) from e

    async def set(self, key: str, data: bytes) -> None:
        path = self._path(key)
        try:
            await aiofiles.os.makedirs(self.directory, mode=0o700, exist_ok=True)
        except OSError as e:
            raise StorageIOError("create_directory", str(self.directory), e) from e

        # mkstemp creates the file readable by the owner only
        try:
            fd, temp_path = tempfile.mkstemp(dir=self.directory, prefix=".tmp_", suffix=".bin")
        except OSError as e:
            raise StorageIOError("create_temp_blob", str(self.directory), e) from e

        try:
            os.close(fd)
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
                await f.flush()
                os.fsync(f.fileno())

            await aiofiles.os.replace(temp_path, path)
        except OSError as e:
            try:
                await aiofiles.os.remove(temp_path)
            except OSError:
                pass
            raise StorageIOError("write_blob", str(path), e) from e

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageIOError("delete_blob", str(path), e) from e
