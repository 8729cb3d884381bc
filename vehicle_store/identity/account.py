"""
Account snapshot persistence.

The most recent authenticated principal is kept as one binary blob so the
application can restore the user's identity while offline. Neither
operation raises: a snapshot that cannot be written or read simply means
the user comes back as anonymous.
"""

from __future__ import annotations

import json
import logging

from ..exceptions import AccountSerializationError, VehicleStoreError
from ..storage.blobs import BlobStore
from .types import ClaimsPrincipal

logger = logging.getLogger(__name__)

ACCOUNT_KEY = "claims_principal"

SNAPSHOT_HEADER = b"VSCP\x01"


def serialize_principal(principal: ClaimsPrincipal) -> bytes:
    """Encode a principal, with every identity and claim, as bytes."""
    payload = json.dumps(principal.to_dict(), separators=(",", ":"))
    return SNAPSHOT_HEADER + payload.encode("utf-8")


def decode_principal(data: bytes) -> ClaimsPrincipal:
    """Decode bytes produced by ``serialize_principal``.

    Raises:
        AccountSerializationError: If the bytes are not a valid snapshot
    """
    if not data.startswith(SNAPSHOT_HEADER):
        raise AccountSerializationError("unknown snapshot header")

    try:
        payload = json.loads(data[len(SNAPSHOT_HEADER):].decode("utf-8"))
        return ClaimsPrincipal.from_dict(payload)
    except (ValueError, KeyError, TypeError, AttributeError, RecursionError) as e:
        raise AccountSerializationError(str(e)) from e


def deserialize_principal(data: bytes) -> ClaimsPrincipal | None:
    """Decode a snapshot, returning None instead of raising on bad input."""
    try:
        return decode_principal(data)
    except AccountSerializationError as e:
        logger.warning(f"Discarding unreadable account snapshot: {e.reason}")
        return None


class AccountSnapshotStore:
    """Saves and restores the user's principal for offline sign-in."""

    def __init__(self, blobs: BlobStore):
        self.blobs = blobs

    async def save_account(self, principal: ClaimsPrincipal | None) -> None:
        """Store ``principal``, or forget the stored one when None."""
        try:
            if principal is None:
                await self.blobs.delete(ACCOUNT_KEY)
                logger.debug("Account snapshot cleared")
            else:
                await self.blobs.set(ACCOUNT_KEY, serialize_principal(principal))
                logger.debug("Account snapshot saved")
        except (VehicleStoreError, TypeError, ValueError) as e:
            logger.error(f"Could not persist account snapshot: {e}")

    async def load_account(self) -> ClaimsPrincipal:
        """Return the stored principal, or an anonymous one."""
        try:
            data = await self.blobs.get(ACCOUNT_KEY)
        except VehicleStoreError as e:
            logger.error(f"Could not read account snapshot: {e}")
            data = None

        principal = deserialize_principal(data) if data is not None else None
        return principal if principal is not None else ClaimsPrincipal.anonymous()
