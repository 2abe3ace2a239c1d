"""
============================================================================
UPTIME PROBE - FAILURE STREAK TRACKING
============================================================================
StreakStore          ← atomic increment / reset primitive per site
├── InMemoryStreakStore  single process, guarded by an asyncio.Lock
└── SQLStreakStore       INSERT .. ON CONFLICT DO UPDATE .. RETURNING,
                         safe across processes sharing one database
StreakTracker        ← maps a status to exactly one store operation and
                       degrades to the last known value if the store fails
============================================================================
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict

from sqlalchemy.dialects import postgresql, sqlite

from config.constants import UptimeStatus
from database.connection import DatabaseManager
from database.models import FailureStreak
from exceptions import ConfigurationError, DatabaseException, StreakStoreError, UnknownStatusError
from monitoring.classifier import coerce_status
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("StreakTracker")


# ============================================================================
# STORES
# ============================================================================

class StreakStore(ABC):
    """
    Counter store contract. Both operations are a single atomic
    read-modify-write and return the stored value afterwards.
    """

    @abstractmethod
    async def increment(self, site_id: str) -> int:
        """Add one to the counter and return the new value."""

    @abstractmethod
    async def reset(self, site_id: str) -> int:
        """Set the counter to zero and return 0."""


class InMemoryStreakStore(StreakStore):
    """Dictionary-backed store for a single process."""

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def increment(self, site_id: str) -> int:
        async with self._lock:
            value = self._counts.get(site_id, 0) + 1
            self._counts[site_id] = value
            return value

    async def reset(self, site_id: str) -> int:
        async with self._lock:
            self._counts[site_id] = 0
            return 0

    def get(self, site_id: str) -> int:
        return self._counts.get(site_id, 0)


class SQLStreakStore(StreakStore):
    """
    Store backed by the failure_streaks table.

    Each operation is one upsert statement with RETURNING, so concurrent
    checks of the same site from several processes never lose an update.
    """

    _INSERTS = {
        "postgresql": postgresql.insert,
        "sqlite": sqlite.insert,
    }

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def _insert(self):
        dialect = self.db_manager.dialect
        try:
            return self._INSERTS[dialect](FailureStreak)
        except KeyError:
            raise ConfigurationError(
                f"Atomic streak updates are not supported on {dialect}",
                config_key="DB_TYPE",
            )

    async def _upsert(self, site_id: str, count: int, on_conflict_count) -> int:
        now = TimeHelper.get_utc_now()
        try:
            stmt = self._insert().values(site_id=site_id, count=count, updated_at=now)
            stmt = stmt.on_conflict_do_update(
                index_elements=[FailureStreak.site_id],
                set_={"count": on_conflict_count, "updated_at": now},
            ).returning(FailureStreak.count)

            async with self.db_manager.session() as session:
                result = await session.execute(stmt)
                return int(result.scalar_one())
        except (DatabaseException, ConfigurationError) as e:
            raise StreakStoreError(f"Failure streak update failed: {e.message}", site_id=site_id, cause=e)

    async def increment(self, site_id: str) -> int:
        return await self._upsert(site_id, 1, FailureStreak.count + 1)

    async def reset(self, site_id: str) -> int:
        return await self._upsert(site_id, 0, 0)


# ============================================================================
# TRACKER
# ============================================================================

class StreakTracker:
    """
    Applies one streak update per check.

    DOWN                → increment, return the new value
    UP / MAINTENANCE    → reset, return 0
    PENDING             → rejected; a pending check has no outcome yet

    If the store raises StreakStoreError the check still completes:
    the last value this tracker saw for the site (or 0) is returned.
    """

    def __init__(self, store: StreakStore):
        self.store = store
        self._last_known: Dict[str, int] = {}

    async def update(self, site_id: str, status: UptimeStatus) -> int:
        status = coerce_status(status)

        if status == UptimeStatus.DOWN:
            operation = self.store.increment
        elif status in (UptimeStatus.UP, UptimeStatus.MAINTENANCE):
            operation = self.store.reset
        elif status == UptimeStatus.PENDING:
            raise UnknownStatusError("Pending checks do not update the failure streak", status=status)
        else:
            raise UnknownStatusError(status=status)

        try:
            value = await operation(site_id)
        except StreakStoreError as e:
            fallback = self._last_known.get(site_id, 0) if status == UptimeStatus.DOWN else 0
            logger.warning(
                f"[Streak] store unavailable for {site_id}, using {fallback}: {e.message}"
            )
            return fallback

        self._last_known[site_id] = value
        return value
