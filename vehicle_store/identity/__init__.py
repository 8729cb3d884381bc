"""
Identity support for offline sign-in.

Provides the claims model, persistence of the last signed-in account and
a principal factory that falls back to that account when offline.
"""

from .account import (
    ACCOUNT_KEY,
    AccountSnapshotStore,
    decode_principal,
    deserialize_principal,
    serialize_principal,
)
from .factory import OfflineAccountPrincipalFactory, RemotePrincipalFactory
from .types import Claim, ClaimsIdentity, ClaimsPrincipal

__all__ = [
    # Types
    "Claim",
    "ClaimsIdentity",
    "ClaimsPrincipal",
    # Snapshot persistence
    "ACCOUNT_KEY",
    "AccountSnapshotStore",
    "serialize_principal",
    "decode_principal",
    "deserialize_principal",
    # Factories
    "RemotePrincipalFactory",
    "OfflineAccountPrincipalFactory",
]
