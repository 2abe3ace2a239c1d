"""
Tests for the aiohttp check endpoint
"""

import pytest
from aiohttp.test_utils import TestClient, TestServer

from api.server import CheckServer
from config.constants import TransportErrorKind
from config.settings import ServerSettings, Settings

from tests.conftest import ScriptedProber


class RecordingSink:
    def __init__(self, fail: bool = False):
        self.results = []
        self.fail = fail

    async def __call__(self, result):
        if self.fail:
            raise RuntimeError("sink offline")
        self.results.append(result)


@pytest.fixture
def settings():
    return Settings(server=ServerSettings(persist_results=True))


@pytest.fixture
def make_server(build_coordinator, settings):
    def _build(prober, sink=None, db_manager=None, server_settings=None) -> CheckServer:
        return CheckServer(
            server_settings or settings,
            build_coordinator(prober),
            sink=sink,
            db_manager=db_manager,
        )

    return _build


@pytest.mark.asyncio
async def test_check_up(make_server):
    sink = RecordingSink()
    server = make_server(ScriptedProber([200]), sink=sink)

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/", headers={"x-website-id": "site-1"})
        body = await resp.json()

    assert resp.status == 200
    assert body["success"] is True
    assert body["message"] == "Uptime check complete"
    assert body["data"]["status"] == 1
    assert body["data"]["retries"] == 0
    assert len(sink.results) == 1
    assert sink.results[0].site_id == "site-1"


@pytest.mark.asyncio
async def test_check_down_is_still_success(make_server):
    server = make_server(ScriptedProber([TransportErrorKind.CONNECTION_REFUSED]))

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/", headers={"x-website-id": "site-1", "x-max-retries": "2"})
        body = await resp.json()

    assert resp.status == 200
    assert body["success"] is True
    assert body["data"]["status"] == 0
    assert body["data"]["retries"] == 2


@pytest.mark.asyncio
async def test_missing_website_id(make_server):
    prober = ScriptedProber([200])
    sink = RecordingSink()
    server = make_server(prober, sink=sink)

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/")
        body = await resp.json()

    assert resp.status == 400
    assert body == {
        "success": False,
        "message": "Website ID is required",
        "error": "Missing or invalid x-website-id header",
    }
    assert prober.calls == []
    assert sink.results == []


@pytest.mark.asyncio
async def test_invalid_max_retries(make_server):
    server = make_server(ScriptedProber([200]))

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/", headers={"x-website-id": "site-1", "x-max-retries": "zero"})
        body = await resp.json()

    assert resp.status == 400
    assert body["message"] == "Invalid max retries"
    assert body["error"] == "x-max-retries must be a positive integer"


@pytest.mark.asyncio
async def test_overlong_website_id(make_server):
    server = make_server(ScriptedProber([200]))

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/", headers={"x-website-id": "s" * 200})
        body = await resp.json()

    assert resp.status == 400
    assert body["message"] == "Invalid website ID"
    assert body["error"] == "x-website-id must be at most 128 characters"


@pytest.mark.asyncio
async def test_unknown_website(make_server):
    server = make_server(ScriptedProber([200]))

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/", headers={"x-website-id": "ghost"})
        body = await resp.json()

    assert resp.status == 404
    assert body["success"] is False
    assert body["message"] == "Website not found"


@pytest.mark.asyncio
async def test_sink_failure_does_not_change_response(make_server):
    server = make_server(ScriptedProber([200]), sink=RecordingSink(fail=True))

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/", headers={"x-website-id": "site-1"})
        body = await resp.json()

    assert resp.status == 200
    assert body["success"] is True


@pytest.mark.asyncio
async def test_persistence_disabled(make_server):
    sink = RecordingSink()
    server = make_server(
        ScriptedProber([200]),
        sink=sink,
        server_settings=Settings(server=ServerSettings(persist_results=False)),
    )

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/", headers={"x-website-id": "site-1"})

    assert resp.status == 200
    assert sink.results == []


@pytest.mark.asyncio
async def test_health(make_server):
    server = make_server(ScriptedProber([200]))

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.get("/health")
        body = await resp.json()

    assert resp.status == 200
    assert body["status"] == "healthy"
    assert body["database"] is None
    assert body["app_name"] == "Uptime Probe"


@pytest.mark.asyncio
async def test_health_reports_database(make_server, db_manager):
    server = make_server(ScriptedProber([200]), db_manager=db_manager)

    async with TestClient(TestServer(server.app)) as client:
        resp = await client.get("/health")
        body = await resp.json()

    assert body["database"] is True
    assert body["status"] == "healthy"
