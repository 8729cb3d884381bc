"""Tests for protected blob stores."""

import stat
import sys

import pytest

from vehicle_store.exceptions import StorageIOError
from vehicle_store.storage.blobs import FileBlobStore, MemoryBlobStore


@pytest.fixture(params=["memory", "file"])
def blob_store(request, tmp_path):
    if request.param == "memory":
        return MemoryBlobStore()
    return FileBlobStore(tmp_path / "protected")


class TestBlobStore:
    """Behaviour shared by every blob store."""

    @pytest.mark.asyncio
    async def test_missing_key(self, blob_store):
        assert await blob_store.get("claims_principal") is None

    @pytest.mark.asyncio
    async def test_set_get_replace(self, blob_store):
        await blob_store.set("claims_principal", b"\x00first")
        await blob_store.set("claims_principal", b"\x00second")

        assert await blob_store.get("claims_principal") == b"\x00second"

    @pytest.mark.asyncio
    async def test_delete(self, blob_store):
        await blob_store.set("last_update_date", b"2024-01-01T00:00:00")

        await blob_store.delete("last_update_date")
        await blob_store.delete("last_update_date")

        assert await blob_store.get("last_update_date") is None

    @pytest.mark.asyncio
    async def test_rejects_path_like_keys(self, blob_store):
        with pytest.raises(ValueError):
            await blob_store.set("../escape", b"x")


class TestFileBlobStore:
    """Tests specific to file-backed blobs."""

    @pytest.mark.asyncio
    async def test_creates_directory_lazily(self, tmp_path):
        directory = tmp_path / "protected"
        blobs = FileBlobStore(directory)
        assert not directory.exists()

        await blobs.set("claims_principal", b"data")

        assert (directory / "claims_principal.bin").read_bytes() == b"data"
        assert [p.name for p in directory.iterdir()] == ["claims_principal.bin"]

    @pytest.mark.asyncio
    async def test_temp_file_failure_raises_storage_error(self, tmp_path, monkeypatch):
        def refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("vehicle_store.storage.blobs.tempfile.mkstemp", refuse)
        blobs = FileBlobStore(tmp_path / "protected")

        with pytest.raises(StorageIOError) as exc_info:
            await blobs.set("claims_principal", b"data")

        assert exc_info.value.operation == "create_temp_blob"
        assert isinstance(exc_info.value.cause, PermissionError)

    @pytest.mark.asyncio
    async def test_failed_replace_leaves_no_temp_file(self, tmp_path, monkeypatch):
        directory = tmp_path / "protected"
        blobs = FileBlobStore(directory)
        await blobs.set("claims_principal", b"old")

        async def refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("vehicle_store.storage.blobs.aiofiles.os.replace", refuse)

        with pytest.raises(StorageIOError):
            await blobs.set("claims_principal", b"new")

        assert [p.name for p in directory.iterdir()] == ["claims_principal.bin"]
        assert await blobs.get("claims_principal") == b"old"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    @pytest.mark.asyncio
    async def test_owner_only_permissions(self, tmp_path):
        blobs = FileBlobStore(tmp_path / "protected")

        await blobs.set("claims_principal", b"secret")

        mode = (tmp_path / "protected" / "claims_principal.bin").stat().st_mode
        assert stat.S_IMODE(mode) & (stat.S_IRWXG | stat.S_IRWXO) == 0
