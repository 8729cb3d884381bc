"""
Storage plumbing for the vehicle store.

- VehicleDatabase / VehicleCollection: embedded SQLite collections
- InitializationGate: one-shot lazy initialization
- BlobStore implementations: protected key/value blobs
"""

from .blobs import BlobStore, FileBlobStore, MemoryBlobStore
from .database import VehicleCollection, VehicleDatabase, sortable_timestamp
from .gate import InitializationGate

__all__ = [
    "VehicleDatabase",
    "VehicleCollection",
    "sortable_timestamp",
    "InitializationGate",
    "BlobStore",
    "FileBlobStore",
    "MemoryBlobStore",
]
