"""
Offline-capable principal factory.

Wraps the remote authentication flow: a successful sign-in is snapshotted
locally, and when the remote side cannot produce an authenticated user the
last snapshot is used instead.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from .account import AccountSnapshotStore
from .types import ClaimsPrincipal

logger = logging.getLogger(__name__)


class RemotePrincipalFactory(ABC):
    """Builds a principal from the remote identity provider's account data."""

    @abstractmethod
    async def create_user(self, account: Any) -> ClaimsPrincipal:
        """Create a principal for ``account``.

        Returns an unauthenticated principal when the account is missing or
        the user is signed out.
        """
        ...


class OfflineAccountPrincipalFactory:
    """Principal factory that falls back to the stored account snapshot."""

    def __init__(self, remote: RemotePrincipalFactory, accounts: AccountSnapshotStore):
        self.remote = remote
        self.accounts = accounts

    async def create_user(self, account: Any) -> ClaimsPrincipal:
        """Resolve the current user, online if possible, offline otherwise."""
        try:
            principal = await self.remote.create_user(account)
        except Exception as e:
            logger.warning(f"Remote sign-in unavailable, using offline account: {e}")
            principal = None

        if principal is not None and principal.is_authenticated:
            await self.accounts.save_account(principal)
            return principal

        return await self.accounts.load_account()
