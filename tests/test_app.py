"""
End-to-end wiring: real repositories, SQL streak store and prober over
a mock transport
"""

import aiohttp
import httpx
import pytest

from config.settings import DatabaseSettings, RetrySettings, Settings
from config.constants import UptimeStatus
from database.repositories import UptimeCheckRepository, WebsiteRepository
from main import UptimeProbeApplication, build_coordinator
from monitoring.prober import HTTPProber
from utils.logger import log_execution_time


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        database=DatabaseSettings(sqlite_path=tmp_path / "app.db"),
        retry=RetrySettings(delay_ms=0, max_delay_ms=0),
    )


@pytest.mark.asyncio
async def test_pipeline_over_database(app_settings, db_manager):
    await WebsiteRepository(db_manager).add_website("site-1", "example.com")
    codes = iter([500, 200])

    coordinator = build_coordinator(app_settings, db_manager)
    coordinator.retry_controller.prober = HTTPProber(
        app_settings.probe,
        transport=httpx.MockTransport(lambda request: httpx.Response(next(codes))),
    )

    down = await coordinator.check("site-1", 2)
    up = await coordinator.check("site-1", 2)

    assert down.data.status == UptimeStatus.DOWN
    assert down.data.failure_streak == 1
    assert down.data.ssl_valid is False
    assert up.data.status == UptimeStatus.UP
    assert up.data.failure_streak == 0

    repo = UptimeCheckRepository(db_manager)
    await repo.record(down.data)
    rows = await repo.recent("site-1")
    assert rows[0].status == 0


@pytest.mark.asyncio
async def test_application_lifecycle(app_settings, unused_tcp_port):
    app_settings.server.port = unused_tcp_port
    app_settings.server.host = "127.0.0.1"
    app = UptimeProbeApplication(app_settings)

    try:
        assert await app.startup() is True
        assert app.coordinator is not None

        async with aiohttp.ClientSession() as session:
            async with session.get(f"http://127.0.0.1:{unused_tcp_port}/health") as resp:
                body = await resp.json()
        assert body["database"] is True

        app.request_stop()
        await app.run()
    finally:
        await app.shutdown()

    assert app.db_manager is None


def test_log_execution_time_rejects_sync_functions():
    with pytest.raises(TypeError):
        @log_execution_time
        def not_async():
            return 1
