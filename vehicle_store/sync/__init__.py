"""
Synchronization between the local store and the vehicle service.
"""

from .engine import LAST_UPDATE_KEY, SyncEngine, SyncResult, SyncState

__all__ = [
    "SyncEngine",
    "SyncResult",
    "SyncState",
    "LAST_UPDATE_KEY",
]
