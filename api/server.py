"""
============================================================================
UPTIME PROBE - HTTP TRIGGER SERVER
============================================================================
Thin aiohttp front end over the CheckCoordinator.

    POST /         → run one check
                     headers: x-website-id (required), x-max-retries
                     200 on a completed measurement (UP, DOWN or MAINTENANCE)
                     400 input errors, 404 unknown website, 500 internal
    GET  /health   → liveness JSON

Completed results are handed to the result sink (the uptime_checks
table by default). A failing sink is logged and never changes the
response.
============================================================================
"""

import time
from typing import Awaitable, Callable, Optional

from aiohttp import web

from config.constants import FailureKind, RequestHeaders
from config.settings import Settings
from database.connection import DatabaseManager
from monitoring.coordinator import CheckCoordinator
from monitoring.models import CheckResponse, CheckResult
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("Server")

ResultSink = Callable[[CheckResult], Awaitable[None]]

_STATUS_FOR_KIND = {
    FailureKind.INPUT: 400,
    FailureKind.RESOLUTION: 404,
    FailureKind.INTERNAL: 500,
}


class CheckServer:
    """
    aiohttp application exposing the check trigger.

    Attributes
    ----------
    app : aiohttp.web.Application
    _runner : aiohttp.web.AppRunner
    _site : aiohttp.web.TCPSite
    _start_time : float          - epoch seconds when the server started
    _request_count : int         - check requests served
    """

    def __init__(
        self,
        settings: Settings,
        coordinator: CheckCoordinator,
        sink: Optional[ResultSink] = None,
        db_manager: Optional[DatabaseManager] = None,
    ):
        self.settings = settings
        self.coordinator = coordinator
        self.sink = sink if settings.server.persist_results else None
        self.db_manager = db_manager

        self.app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._start_time: float = time.time()
        self._request_count: int = 0

        self.app.router.add_post("/", self._handle_check)
        self.app.router.add_get("/health", self._handle_health)

    async def start(self) -> None:
        """Bind and start serving."""
        host, port = self.settings.server.host, self.settings.server.port
        self._start_time = time.time()
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host, port)
        await self._site.start()
        logger.info(f"✓ CheckServer listening on {host}:{port}")

    async def stop(self) -> None:
        """Gracefully shut down the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
        logger.info("✓ CheckServer stopped")

    # ------------------------------------------------------------------
    # ROUTE HANDLERS
    # ------------------------------------------------------------------

    async def _handle_check(self, request: web.Request) -> web.Response:
        """POST / - run one uptime check."""
        self._request_count += 1

        response = await self.coordinator.check(
            request.headers.get(RequestHeaders.WEBSITE_ID),
            request.headers.get(RequestHeaders.MAX_RETRIES),
        )

        if response.success and response.data is not None:
            await self._persist(response.data)

        return web.json_response(response.to_dict(), status=self._http_status(response))

    async def _handle_health(self, request: web.Request) -> web.Response:
        """GET /health - liveness and database reachability."""
        uptime_seconds = time.time() - self._start_time

        database_ok = None
        if self.db_manager is not None:
            database_ok = await self.db_manager.check_connection()

        health = {
            "status": "healthy" if database_ok is not False else "degraded",
            "uptime_seconds": round(uptime_seconds, 1),
            "checks_served": self._request_count,
            "database": database_ok,
            "timestamp": TimeHelper.to_iso(TimeHelper.get_utc_now()),
            "app_name": self.settings.app_name,
            "version": self.settings.version,
        }

        return web.json_response(health, status=200)

    # ------------------------------------------------------------------
    # HELPERS
    # ------------------------------------------------------------------

    async def _persist(self, result: CheckResult) -> None:
        if self.sink is None:
            return
        try:
            await self.sink(result)
        except Exception as e:
            logger.error(f"[Sink] failed to store check for {result.site_id}: {e}")

    @staticmethod
    def _http_status(response: CheckResponse) -> int:
        if response.success:
            return 200
        return _STATUS_FOR_KIND.get(response.kind, 500)
