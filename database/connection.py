"""
Database Connection Module for Uptime Probe

Manages database connections, session factories, and connection pooling
using SQLAlchemy's async engine and session maker.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.pool import NullPool
from sqlalchemy.exc import SQLAlchemyError

from config.settings import DatabaseSettings
from database.models import Base
from exceptions import DatabaseConnectionError, DatabaseQueryError
from utils.logger import get_logger


logger = get_logger("Database")


class DatabaseManager:
    """
    Database Manager Class

    Owns the async engine and session factory. One instance is created
    by the application and injected wherever a session is needed.

    Attributes:
        engine: SQLAlchemy async engine
        session_factory: Async session maker
        is_connected: Connection status flag
    """

    def __init__(self, settings: DatabaseSettings, url: Optional[str] = None) -> None:
        """
        Initialize database manager.

        Args:
            settings: Database settings
            url: Explicit database URL, overriding the one built from settings
        """
        self._settings = settings
        self._url = url or settings.url
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self.is_connected: bool = False
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        return self._url

    @property
    def dialect(self) -> str:
        """Dialect name of the connected engine, e.g. 'sqlite' or 'postgresql'."""
        if self.engine is None:
            raise DatabaseConnectionError("Database not connected")
        return self.engine.dialect.name

    @staticmethod
    def _mask_password(url: str) -> str:
        """Mask password in database URL for logging."""
        if "://" not in url:
            return url

        protocol, rest = url.split("://", 1)
        if "@" not in rest:
            return url

        credentials, host_part = rest.split("@", 1)
        if ":" in credentials:
            user, _ = credentials.split(":", 1)
            return f"{protocol}://{user}:****@{host_part}"

        return url

    async def connect(self) -> None:
        """
        Establish database connection.

        Creates the async engine and session factory, verifies
        connectivity and creates missing tables when configured.

        Raises:
            DatabaseConnectionError: If connection fails
        """
        async with self._lock:
            if self.is_connected:
                logger.warning("Database already connected")
                return

            try:
                logger.info(f"Connecting to database {self._mask_password(self._url)}")

                self.engine = create_async_engine(self._url, **self._get_engine_kwargs())

                self.session_factory = async_sessionmaker(
                    bind=self.engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                    autoflush=False
                )

                await self._test_connection()
                self._setup_event_listeners()

                if self._settings.create_tables:
                    await self.create_tables()

                self.is_connected = True
                logger.info("Database connection established successfully")

            except SQLAlchemyError as e:
                error_msg = f"Failed to connect to database: {str(e)}"
                logger.error(error_msg)
                if self.engine is not None:
                    await self.engine.dispose()
                    self.engine = None
                raise DatabaseConnectionError(
                    message=error_msg,
                    host=self._settings.host,
                    port=self._settings.port,
                    database=self._settings.name,
                    cause=e
                )

    def _get_engine_kwargs(self) -> Dict[str, Any]:
        """
        Get engine configuration kwargs based on settings.

        Returns:
            Dictionary of engine configuration options
        """
        kwargs: Dict[str, Any] = {
            "echo": self._settings.echo,
        }

        # NullPool for SQLite, default queue pool for others
        if self._url.startswith("sqlite"):
            kwargs["poolclass"] = NullPool
        else:
            kwargs["pool_size"] = self._settings.pool_size
            kwargs["max_overflow"] = self._settings.max_overflow
            kwargs["pool_timeout"] = self._settings.pool_timeout
            kwargs["pool_recycle"] = self._settings.pool_recycle
            kwargs["pool_pre_ping"] = True

        return kwargs

    async def _test_connection(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    def _setup_event_listeners(self) -> None:
        """Set up SQLAlchemy event listeners for monitoring."""

        @event.listens_for(self.engine.sync_engine, "connect")
        def on_connect(dbapi_connection, connection_record):
            logger.debug("New database connection established")

    async def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def check_connection(self) -> bool:
        """Return True when a trivial query succeeds."""
        if not self.is_connected or self.engine is None:
            return False
        try:
            await self._test_connection()
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    async def disconnect(self) -> None:
        """
        Close database connection.

        Disposes of the engine and cleans up resources.
        """
        async with self._lock:
            if not self.is_connected:
                logger.warning("Database not connected")
                return

            logger.info("Disconnecting from database...")

            if self.engine:
                await self.engine.dispose()
                self.engine = None

            self.session_factory = None
            self.is_connected = False

            logger.info("Database disconnected successfully")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions.

        Provides a session that is automatically committed on success
        or rolled back on failure.

        Yields:
            AsyncSession: Database session

        Raises:
            DatabaseConnectionError: If not connected
            DatabaseQueryError: If query fails
        """
        if not self.is_connected or not self.session_factory:
            raise DatabaseConnectionError("Database not connected")

        session = self.session_factory()

        try:
            yield session
            await session.commit()

        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database session error: {e}")
            raise DatabaseQueryError(
                message=str(e),
                query=getattr(e, "statement", None),
                cause=e
            )

        finally:
            await session.close()
