"""
Database Exception Classes for Uptime Probe

Provides specialized exceptions for database-related errors
including connection issues and query failures.
"""

from __future__ import annotations

import re
from typing import Any, Optional
from exceptions.base import UptimeProbeException


class DatabaseException(UptimeProbeException):
    """
    Base Database Exception

    Parent class for all database-related exceptions.
    """

    default_error_code = 2000
    default_recoverable = False

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize database exception.

        Args:
            message: Error message
            query: The SQL statement that caused the error (sanitized)
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        if query:
            self.details["query"] = self._sanitize_query(query)

    @staticmethod
    def _sanitize_query(query: str) -> str:
        """
        Sanitize SQL query by removing literal values.

        Args:
            query: The original SQL query

        Returns:
            Sanitized query string
        """
        query = re.sub(r"'[^']*'", "'***'", query)
        query = re.sub(r"= \d+", "= ***", query)

        if len(query) > 500:
            query = query[:500] + "..."

        return query


class DatabaseConnectionError(DatabaseException):
    """
    Database Connection Error

    Raised when unable to establish or maintain database connection.
    """

    default_error_code = 2001

    def __init__(
        self,
        message: str = "Unable to connect to database",
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if host:
            self.details["host"] = host

        if port:
            self.details["port"] = port

        if database:
            self.details["database"] = database


class DatabaseQueryError(DatabaseException):
    """
    Database Query Error

    Raised when a database query fails to execute.
    """

    default_error_code = 2002

    def __init__(self, message: str = "Database query failed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
