"""
One-shot initialization shared by concurrent callers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class InitializationGate:
    """Runs an async initializer at most once, however many callers race for it.

    The first caller to find no pending task claims the slot by creating the
    shared task; everyone, the claimant included, awaits that same task. The
    claim happens without an intervening ``await`` so no second caller can
    slip in between the check and the assignment.

    A failed initialization is reported to every waiter and then forgotten,
    so the next ``ensure_ready()`` call starts a fresh attempt.
    """

    def __init__(self, initializer: Callable[[], Awaitable[None]]):
        self._initializer = initializer
        self._task: asyncio.Task[None] | None = None
        self._ready = False

    @property
    def is_ready(self) -> bool:
        """True once an initialization attempt has completed successfully."""
        return self._ready

    async def ensure_ready(self) -> None:
        """Wait until initialization has completed, starting it if needed."""
        if self._ready:
            return

        task = self._task
        if task is None:
            task = asyncio.ensure_future(self._run())
            self._task = task

        # A cancelled waiter must not cancel the initialization others wait on
        await asyncio.shield(task)

    async def _run(self) -> None:
        try:
            await self._initializer()
        except BaseException:
            self._task = None
            logger.warning("Initialization failed; next call will retry", exc_info=True)
            raise
        self._ready = True

    async def drain(self) -> None:
        """Wait for an in-flight initialization to settle, whatever its outcome.

        Its result or exception stays with the callers of ``ensure_ready()``.
        """
        task = self._task
        if task is None or task.done():
            return
        await asyncio.wait([task])

    def reset(self) -> None:
        """Forget a completed initialization so the next call runs it again."""
        self._task = None
        self._ready = False
