"""
Tests for failure streak tracking and its stores
"""

import asyncio

import pytest

from config.constants import UptimeStatus
from exceptions import StreakStoreError, UnknownStatusError
from monitoring.streak import InMemoryStreakStore, SQLStreakStore, StreakTracker

from tests.conftest import CountingStreakStore, FailingStreakStore


class TestStreakTracker:

    @pytest.mark.asyncio
    async def test_consecutive_down_increments(self):
        tracker = StreakTracker(InMemoryStreakStore())

        assert await tracker.update("a", UptimeStatus.DOWN) == 1
        assert await tracker.update("a", UptimeStatus.DOWN) == 2
        assert await tracker.update("a", UptimeStatus.DOWN) == 3

    @pytest.mark.asyncio
    async def test_up_resets(self):
        tracker = StreakTracker(InMemoryStreakStore())
        await tracker.update("a", UptimeStatus.DOWN)
        await tracker.update("a", UptimeStatus.DOWN)

        assert await tracker.update("a", UptimeStatus.UP) == 0
        assert await tracker.update("a", UptimeStatus.DOWN) == 1

    @pytest.mark.asyncio
    async def test_maintenance_resets(self):
        tracker = StreakTracker(InMemoryStreakStore())
        await tracker.update("a", UptimeStatus.DOWN)

        assert await tracker.update("a", UptimeStatus.MAINTENANCE) == 0

    @pytest.mark.asyncio
    async def test_sites_are_independent(self):
        tracker = StreakTracker(InMemoryStreakStore())
        await tracker.update("a", UptimeStatus.DOWN)
        await tracker.update("a", UptimeStatus.DOWN)

        assert await tracker.update("b", UptimeStatus.DOWN) == 1

    @pytest.mark.asyncio
    async def test_one_store_operation_per_update(self):
        store = CountingStreakStore()
        tracker = StreakTracker(store)

        await tracker.update("a", UptimeStatus.DOWN)
        await tracker.update("a", UptimeStatus.UP)

        assert store.increments == 1
        assert store.resets == 1

    @pytest.mark.asyncio
    async def test_pending_is_rejected(self):
        store = CountingStreakStore()
        tracker = StreakTracker(store)

        with pytest.raises(UnknownStatusError):
            await tracker.update("a", UptimeStatus.PENDING)
        assert store.increments == store.resets == 0

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self):
        with pytest.raises(UnknownStatusError):
            await StreakTracker(InMemoryStreakStore()).update("a", 7)

    @pytest.mark.asyncio
    async def test_store_failure_returns_zero(self):
        tracker = StreakTracker(FailingStreakStore())

        assert await tracker.update("a", UptimeStatus.DOWN) == 0
        assert await tracker.update("a", UptimeStatus.UP) == 0

    @pytest.mark.asyncio
    async def test_store_failure_returns_last_known(self):
        tracker = StreakTracker(InMemoryStreakStore())
        await tracker.update("a", UptimeStatus.DOWN)
        await tracker.update("a", UptimeStatus.DOWN)

        tracker.store = FailingStreakStore()

        assert await tracker.update("a", UptimeStatus.DOWN) == 2


class TestInMemoryStreakStore:

    @pytest.mark.asyncio
    async def test_concurrent_increments_are_not_lost(self):
        store = InMemoryStreakStore()

        await asyncio.gather(*(store.increment("a") for _ in range(50)))

        assert store.get("a") == 50


class TestSQLStreakStore:

    @pytest.mark.asyncio
    async def test_increment_and_reset(self, db_manager):
        store = SQLStreakStore(db_manager)

        assert await store.increment("a") == 1
        assert await store.increment("a") == 2
        assert await store.reset("a") == 0
        assert await store.increment("a") == 1

    @pytest.mark.asyncio
    async def test_reset_unknown_site(self, db_manager):
        assert await SQLStreakStore(db_manager).reset("new") == 0

    @pytest.mark.asyncio
    async def test_concurrent_increments(self, db_manager):
        store = SQLStreakStore(db_manager)

        results = await asyncio.gather(*(store.increment("a") for _ in range(10)))

        assert sorted(results) == list(range(1, 11))

    @pytest.mark.asyncio
    async def test_disconnected_store_raises_store_error(self, db_manager):
        store = SQLStreakStore(db_manager)
        await store.increment("a")
        await db_manager.disconnect()

        with pytest.raises(StreakStoreError):
            await store.increment("a")
        with pytest.raises(StreakStoreError):
            await store.reset("a")

    @pytest.mark.asyncio
    async def test_tracker_soft_fails_after_disconnect(self, db_manager):
        tracker = StreakTracker(SQLStreakStore(db_manager))
        assert await tracker.update("a", UptimeStatus.DOWN) == 1

        await db_manager.disconnect()

        assert await tracker.update("a", UptimeStatus.DOWN) == 1
        assert await tracker.update("a", UptimeStatus.UP) == 0

    @pytest.mark.asyncio
    async def test_tracker_over_sql_store(self, db_manager):
        tracker = StreakTracker(SQLStreakStore(db_manager))

        assert await tracker.update("a", UptimeStatus.DOWN) == 1
        assert await tracker.update("a", UptimeStatus.DOWN) == 2
        assert await tracker.update("a", UptimeStatus.UP) == 0
