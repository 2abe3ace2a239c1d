"""
Tests for the retry controller
"""

import pytest

from config.constants import TransportErrorKind
from config.settings import RetrySettings
from monitoring.retry import RetryController

from tests.conftest import ScriptedProber


REFUSED = TransportErrorKind.CONNECTION_REFUSED


@pytest.fixture
def controller_for(retry_settings, recording_sleep):
    def _build(prober, settings=None, clock=None):
        kwargs = {"sleep": recording_sleep}
        if clock is not None:
            kwargs["clock"] = clock
        return RetryController(prober, settings or retry_settings, probe_timeout_ms=1000, **kwargs)

    return _build


@pytest.mark.asyncio
async def test_first_attempt_success(controller_for, recording_sleep):
    prober = ScriptedProber([200])

    final, attempts = await controller_for(prober).run("https://example.com", max_retries=3)

    assert final.http_code == 200
    assert attempts == 1
    assert recording_sleep.delays == []


@pytest.mark.asyncio
async def test_error_status_stops_loop(controller_for):
    """Any HTTP response ends the loop, including 5xx"""
    prober = ScriptedProber([503, 200])

    final, attempts = await controller_for(prober).run("https://example.com", max_retries=3)

    assert final.http_code == 503
    assert attempts == 1
    assert len(prober.calls) == 1


@pytest.mark.asyncio
async def test_recovers_after_transport_errors(controller_for):
    prober = ScriptedProber([REFUSED, REFUSED, 200])

    final, attempts = await controller_for(prober).run("https://example.com", max_retries=3)

    assert final.http_code == 200
    assert attempts == 3
    assert [c["attempt_number"] for c in prober.calls] == [1, 2, 3]


@pytest.mark.asyncio
async def test_exhausts_all_attempts(controller_for, recording_sleep):
    prober = ScriptedProber([REFUSED])

    final, attempts = await controller_for(prober).run("https://example.com", max_retries=3)

    assert final.transport_error == REFUSED
    assert attempts == 4
    assert len(prober.calls) == 4
    assert len(recording_sleep.delays) == 3


@pytest.mark.asyncio
async def test_zero_retries_means_single_attempt(controller_for):
    prober = ScriptedProber([REFUSED])

    _, attempts = await controller_for(prober).run("https://example.com", max_retries=0)

    assert attempts == 1


@pytest.mark.asyncio
async def test_default_max_retries(controller_for):
    prober = ScriptedProber([REFUSED])

    _, attempts = await controller_for(prober).run("https://example.com")

    assert attempts == 4


@pytest.mark.asyncio
async def test_max_retries_is_capped(controller_for):
    prober = ScriptedProber([REFUSED])

    _, attempts = await controller_for(prober).run("https://example.com", max_retries=50)

    assert attempts == 11


@pytest.mark.asyncio
async def test_backoff_delays(controller_for, recording_sleep):
    prober = ScriptedProber([REFUSED])

    await controller_for(prober).run("https://example.com", max_retries=5)

    # 300ms * 1.5^(n-1), capped at 1000ms
    assert recording_sleep.delays == pytest.approx([0.3, 0.45, 0.675, 1.0, 1.0])


def test_delay_for(retry_settings):
    controller = RetryController(ScriptedProber([200]), retry_settings, probe_timeout_ms=1000)

    assert controller.delay_for(1) == pytest.approx(0.3)
    assert controller.delay_for(2) == pytest.approx(0.45)
    assert controller.delay_for(10) == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_deadline_stops_retries(controller_for, recording_sleep):
    """No new delay or attempt starts once the deadline would be crossed"""
    prober = ScriptedProber([REFUSED])
    now = [100.0]

    def clock():
        return now[0]

    async def advancing_sleep(seconds):
        recording_sleep.delays.append(seconds)
        now[0] += seconds

    settings = RetrySettings(delay_ms=300, backoff_factor=1.0, max_delay_ms=300)
    controller = RetryController(
        prober, settings, probe_timeout_ms=1000, sleep=advancing_sleep, clock=clock
    )

    _, attempts = await controller.run("https://example.com", max_retries=10, deadline=100.7)

    # attempts at t=100.0, 100.3, 100.6; the next delay would end past 100.7
    assert attempts == 3
    assert prober.calls[-1]["timeout_ms"] == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_deadline_shrinks_attempt_timeout(controller_for):
    prober = ScriptedProber([200])
    controller = controller_for(prober, clock=lambda: 0.0)

    await controller.run("https://example.com", deadline=0.25)

    assert prober.calls[0]["timeout_ms"] == pytest.approx(250.0)


@pytest.mark.asyncio
async def test_configured_deadline(recording_sleep):
    settings = RetrySettings(check_deadline_seconds=0.5)
    prober = ScriptedProber([200])
    controller = RetryController(
        prober, settings, probe_timeout_ms=1000, sleep=recording_sleep, clock=lambda: 10.0
    )

    await controller.run("https://example.com")

    assert prober.calls[0]["timeout_ms"] == pytest.approx(500.0)
