"""
============================================================================
UPTIME PROBE - MAIN APPLICATION
============================================================================
Wires every layer together and serves the check trigger:

    Layer 1 - Core & Database
        • Settings (pydantic-settings)
        • SQLAlchemy async engine + models
        • DatabaseManager + Repositories
        • Logging, Validators, Helpers

    Layer 2 - Check Pipeline
        • HTTPProber → RetryController → TLSInspector → StatusClassifier
        • StreakTracker over the SQL streak store
        • CheckCoordinator

    Layer 3 - HTTP
        • CheckServer (aiohttp) on SERVER_HOST:SERVER_PORT

Startup Order
-------------
1.  Load settings & configure logging
2.  Connect DatabaseManager (create tables if configured)
3.  Build the check pipeline
4.  Start CheckServer and wait for a stop signal

Shutdown Order (reverse)
-------------------------
On SIGINT or SIGTERM:
    stop server → close DB → exit
============================================================================
"""

import asyncio
import signal
import sys
from typing import Optional

from config.settings import Settings, get_settings
from database.connection import DatabaseManager
from database.repositories import UptimeCheckRepository, WebsiteRepository
from api.server import CheckServer
from monitoring.classifier import StatusClassifier
from monitoring.coordinator import CheckCoordinator
from monitoring.prober import HTTPProber
from monitoring.retry import RetryController
from monitoring.streak import SQLStreakStore, StreakTracker
from monitoring.tls import TLSInspector
from utils.logger import get_logger, setup_logging


logger = get_logger("Main")


# ============================================================================
# PIPELINE FACTORY
# ============================================================================

def build_coordinator(settings: Settings, db_manager: DatabaseManager) -> CheckCoordinator:
    """Assemble the check pipeline from settings and a connected database."""
    prober = HTTPProber(settings.probe)
    retry_controller = RetryController(
        prober,
        settings.retry,
        probe_timeout_ms=settings.probe.timeout_ms,
    )
    return CheckCoordinator(
        lookup_website=WebsiteRepository(db_manager).lookup_website,
        retry_controller=retry_controller,
        streak_tracker=StreakTracker(SQLStreakStore(db_manager)),
        tls_inspector=TLSInspector(settings.probe.ssl_expiry_warning_days),
        classifier=StatusClassifier(),
    )


# ============================================================================
# APPLICATION CLASS
# ============================================================================

class UptimeProbeApplication:
    """
    Top-level application orchestrator.

    Owns every subsystem and is the single place that knows the startup /
    shutdown order. Subsystems receive their collaborators from here;
    only Settings is cached process-wide.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

        self.db_manager: Optional[DatabaseManager] = None
        self.coordinator: Optional[CheckCoordinator] = None
        self.server: Optional[CheckServer] = None

        self._stop_event = asyncio.Event()
        self._is_running = False

    # ==================================================================
    # PHASE 1 - DATABASE
    # ==================================================================

    async def _init_database(self) -> bool:
        """Connect the database manager and verify connectivity."""
        logger.info("── Phase 1: Database ─────────────────────────────")
        try:
            self.db_manager = DatabaseManager(self.settings.database)
            await self.db_manager.connect()

            if not await self.db_manager.check_connection():
                logger.error("  ✗ Database connection check failed")
                return False

            logger.info(f"  ✓ Connected to {self.db_manager.dialect}")
            return True

        except Exception as e:
            logger.opt(exception=e).error(f"  ✗ Database init failed: {e}")
            return False

    # ==================================================================
    # PHASE 2 - CHECK PIPELINE
    # ==================================================================

    async def _init_pipeline(self) -> bool:
        logger.info("── Phase 2: Check Pipeline ───────────────────────")
        try:
            self.coordinator = build_coordinator(self.settings, self.db_manager)
            logger.info(
                f"  ✓ Pipeline ready - timeout={self.settings.probe.timeout_ms}ms, "
                f"default retries={self.settings.retry.default_max_retries}, "
                f"cap={self.settings.retry.max_retries_cap}"
            )
            return True

        except Exception as e:
            logger.opt(exception=e).error(f"  ✗ Pipeline init failed: {e}")
            return False

    # ==================================================================
    # PHASE 3 - HTTP SERVER
    # ==================================================================

    async def _init_server(self) -> bool:
        logger.info("── Phase 3: HTTP Server ──────────────────────────")
        try:
            self.server = CheckServer(
                self.settings,
                self.coordinator,
                sink=UptimeCheckRepository(self.db_manager).record,
                db_manager=self.db_manager,
            )
            await self.server.start()
            return True

        except Exception as e:
            logger.opt(exception=e).error(f"  ✗ Server start failed: {e}")
            return False

    # ==================================================================
    # FULL STARTUP SEQUENCE
    # ==================================================================

    async def startup(self) -> bool:
        """
        Execute the complete startup sequence.
        Returns False (and logs errors) if any phase fails.
        """
        logger.info("=" * 74)
        logger.info(f"  STARTING {self.settings.app_name} v{self.settings.version} …")
        logger.info("=" * 74)

        if not await self._init_database():
            return False

        if not await self._init_pipeline():
            return False

        if not await self._init_server():
            return False

        self._is_running = True

        logger.info("=" * 74)
        logger.info("  ✓ ALL SYSTEMS OPERATIONAL")
        logger.info(
            f"  Check endpoint: POST http://{self.settings.server.host}:"
            f"{self.settings.server.port}/"
        )
        logger.info("=" * 74)
        return True

    # ==================================================================
    # SHUTDOWN SEQUENCE
    # ==================================================================

    async def shutdown(self) -> None:
        """
        Graceful shutdown in reverse order.
        A failure in one subsystem does not stop the others from cleaning up.
        """
        logger.info("  SHUTTING DOWN …")
        self._is_running = False

        if self.server:
            try:
                await self.server.stop()
            except Exception as e:
                logger.error(f"  ✗ CheckServer stop error: {e}")
            self.server = None

        if self.db_manager:
            try:
                await self.db_manager.disconnect()
            except Exception as e:
                logger.error(f"  ✗ Database close error: {e}")
            self.db_manager = None

        logger.info("  ✓ SHUTDOWN COMPLETE")

    # ==================================================================
    # RUN
    # ==================================================================

    def request_stop(self) -> None:
        self._stop_event.set()

    async def run(self) -> None:
        """Block until request_stop() is called."""
        await self._stop_event.wait()


# ============================================================================
# SIGNAL HANDLER SETUP
# ============================================================================

def _install_signal_handlers(app: UptimeProbeApplication) -> None:
    """
    Install SIGTERM / SIGINT handlers so the service shuts down gracefully
    when the process manager stops it.
    """
    loop = asyncio.get_running_loop()

    def _handle_signal(sig: signal.Signals) -> None:
        logger.info(f"  ⚡ {sig.name} received - initiating graceful shutdown…")
        app.request_stop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, _handle_signal, sig)
        except (NotImplementedError, OSError):
            # Not supported on Windows; KeyboardInterrupt still works there
            logger.debug(f"Signal handler for {sig.name} not installed")


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

async def main() -> int:
    settings = get_settings()
    setup_logging(settings)

    app = UptimeProbeApplication(settings)
    _install_signal_handlers(app)

    try:
        if not await app.startup():
            logger.error("  ✗ Startup failed - exiting")
            return 1
        await app.run()
        return 0
    finally:
        await app.shutdown()


def cli() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli()
