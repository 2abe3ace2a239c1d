"""
Pytest configuration

Shared fakes for the check pipeline: a scripted prober with fixed
outputs, a call-counting website lookup and call-counting streak stores.
"""
from typing import Dict, List, Optional, Sequence, Union

import pytest

from config.constants import TransportErrorKind
from config.settings import DatabaseSettings, ProbeSettings, RetrySettings
from database.connection import DatabaseManager
from exceptions import StreakStoreError, WebsiteNotFoundError
from monitoring.coordinator import CheckCoordinator
from monitoring.models import ConnectionInfo, ProbeAttempt, Site
from monitoring.retry import RetryController
from monitoring.streak import InMemoryStreakStore, StreakStore, StreakTracker
from utils.helpers import TimeHelper


Outcome = Union[int, TransportErrorKind]


def make_attempt(
    outcome: Outcome,
    attempt_number: int = 1,
    connection: Optional[ConnectionInfo] = None,
) -> ProbeAttempt:
    """An attempt that got HTTP status *outcome*, or failed with that transport error."""
    if isinstance(outcome, TransportErrorKind):
        return ProbeAttempt(
            attempt_number=attempt_number,
            started_at=TimeHelper.get_utc_now(),
            total_ms=5.0,
            transport_error=outcome,
            error_detail="simulated",
        )
    return ProbeAttempt(
        attempt_number=attempt_number,
        started_at=TimeHelper.get_utc_now(),
        http_code=outcome,
        ttfb_ms=12.5,
        total_ms=20.0,
        connection=connection,
    )


class ScriptedProber:
    """Returns the scripted outcomes in order, repeating the last one."""

    def __init__(self, outcomes: Sequence[Outcome], connection: Optional[ConnectionInfo] = None):
        self.outcomes = list(outcomes)
        self.connection = connection
        self.calls: List[dict] = []

    async def probe(self, url, timeout_ms=None, attempt_number=1) -> ProbeAttempt:
        self.calls.append({"url": url, "timeout_ms": timeout_ms, "attempt_number": attempt_number})
        index = min(len(self.calls), len(self.outcomes)) - 1
        return make_attempt(self.outcomes[index], attempt_number, self.connection)


class CountingLookup:
    """Website lookup over a dict, counting calls."""

    def __init__(self, sites: Optional[Dict[str, Site]] = None):
        self.sites = sites or {}
        self.calls = 0

    async def __call__(self, site_id: str) -> Site:
        self.calls += 1
        try:
            return self.sites[site_id]
        except KeyError:
            raise WebsiteNotFoundError(f"Website {site_id} not found", website_id=site_id)


class CountingStreakStore(InMemoryStreakStore):
    def __init__(self) -> None:
        super().__init__()
        self.increments = 0
        self.resets = 0

    async def increment(self, site_id: str) -> int:
        self.increments += 1
        return await super().increment(site_id)

    async def reset(self, site_id: str) -> int:
        self.resets += 1
        return await super().reset(site_id)


class FailingStreakStore(StreakStore):
    def __init__(self) -> None:
        self.calls = 0

    async def increment(self, site_id: str) -> int:
        self.calls += 1
        raise StreakStoreError("store offline", site_id=site_id)

    async def reset(self, site_id: str) -> int:
        self.calls += 1
        raise StreakStoreError("store offline", site_id=site_id)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def probe_settings():
    return ProbeSettings(timeout_ms=1000, connect_timeout_ms=500)


@pytest.fixture
def retry_settings():
    return RetrySettings(
        default_max_retries=3,
        max_retries_cap=10,
        delay_ms=300,
        backoff_factor=1.5,
        max_delay_ms=1000,
    )


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def sites():
    return {
        "site-1": Site(id="site-1", domain="example.com"),
        "plain": Site(id="plain", domain="http://plain.example.com/"),
        "paused": Site(id="paused", domain="paused.example.com", maintenance=True),
        "broken": Site(id="broken", domain="ftp://files.example.com"),
    }


@pytest.fixture
def lookup(sites):
    return CountingLookup(sites)


@pytest.fixture
def streak_store():
    return CountingStreakStore()


@pytest.fixture
def build_coordinator(lookup, streak_store, retry_settings, recording_sleep):
    """Factory: coordinator around a scripted prober."""

    def _build(prober, store: Optional[StreakStore] = None) -> CheckCoordinator:
        controller = RetryController(
            prober,
            retry_settings,
            probe_timeout_ms=1000,
            sleep=recording_sleep,
        )
        return CheckCoordinator(
            lookup_website=lookup,
            retry_controller=controller,
            streak_tracker=StreakTracker(store or streak_store),
        )

    return _build


@pytest.fixture
async def db_manager(tmp_path):
    """Connected manager over a temporary SQLite file."""
    settings = DatabaseSettings(sqlite_path=tmp_path / "uptime.db")
    manager = DatabaseManager(settings)
    await manager.connect()
    yield manager
    await manager.disconnect()
