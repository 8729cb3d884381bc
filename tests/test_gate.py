"""Tests for the one-shot initialization gate."""

import asyncio

import pytest

from vehicle_store.storage.gate import InitializationGate


class CountingInitializer:
    def __init__(self, failures: int = 0):
        self.calls = 0
        self.failures = failures
        self.release = asyncio.Event()

    async def __call__(self) -> None:
        self.calls += 1
        await self.release.wait()
        if self.calls <= self.failures:
            raise RuntimeError(f"attempt {self.calls} failed")


class TestInitializationGate:
    """Tests for InitializationGate."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_run(self):
        initializer = CountingInitializer()
        gate = InitializationGate(initializer)

        waiters = [asyncio.create_task(gate.ensure_ready()) for _ in range(20)]
        await asyncio.sleep(0)
        assert not gate.is_ready

        initializer.release.set()
        await asyncio.gather(*waiters)

        assert initializer.calls == 1
        assert gate.is_ready

    @pytest.mark.asyncio
    async def test_later_calls_do_not_rerun(self):
        initializer = CountingInitializer()
        initializer.release.set()
        gate = InitializationGate(initializer)

        await gate.ensure_ready()
        await gate.ensure_ready()

        assert initializer.calls == 1

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter_then_retries(self):
        initializer = CountingInitializer(failures=1)
        gate = InitializationGate(initializer)

        waiters = [asyncio.create_task(gate.ensure_ready()) for _ in range(3)]
        await asyncio.sleep(0)
        initializer.release.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert initializer.calls == 1
        assert not gate.is_ready

        await gate.ensure_ready()
        assert initializer.calls == 2
        assert gate.is_ready

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_initialization(self):
        initializer = CountingInitializer()
        gate = InitializationGate(initializer)

        cancelled = asyncio.create_task(gate.ensure_ready())
        survivor = asyncio.create_task(gate.ensure_ready())
        await asyncio.sleep(0)

        cancelled.cancel()
        with pytest.raises(asyncio.CancelledError):
            await cancelled

        initializer.release.set()
        await survivor

        assert initializer.calls == 1
        assert gate.is_ready

    @pytest.mark.asyncio
    async def test_reset_allows_reinitialization(self):
        initializer = CountingInitializer()
        initializer.release.set()
        gate = InitializationGate(initializer)

        await gate.ensure_ready()
        gate.reset()
        await gate.ensure_ready()

        assert initializer.calls == 2

    @pytest.mark.asyncio
    async def test_drain_waits_for_in_flight_run(self):
        initializer = CountingInitializer()
        gate = InitializationGate(initializer)

        waiter = asyncio.create_task(gate.ensure_ready())
        await asyncio.sleep(0)
        draining = asyncio.create_task(gate.drain())
        await asyncio.sleep(0)
        assert not draining.done()

        initializer.release.set()
        await draining

        assert gate.is_ready
        await waiter

    @pytest.mark.asyncio
    async def test_drain_does_not_raise_initialization_failure(self):
        initializer = CountingInitializer(failures=1)
        gate = InitializationGate(initializer)

        waiter = asyncio.create_task(gate.ensure_ready())
        await asyncio.sleep(0)
        draining = asyncio.create_task(gate.drain())
        initializer.release.set()

        await draining
        with pytest.raises(RuntimeError):
            await waiter
        assert not gate.is_ready

    @pytest.mark.asyncio
    async def test_drain_without_pending_run(self):
        gate = InitializationGate(CountingInitializer())

        await gate.drain()

        assert not gate.is_ready
