"""
Base Exception Classes for Uptime Probe

Provides the foundation exception hierarchy from which all
other exceptions inherit.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type
from datetime import datetime, timezone


class UptimeProbeException(Exception):
    """
    Base Exception Class

    All custom exceptions in the application inherit from this class.
    Provides common functionality for error handling, logging, and
    serialization.

    Attributes:
        message: Human-readable error message
        error_code: Numeric error code for categorization
        details: Additional error details as dictionary
        timestamp: When the exception occurred
        recoverable: Whether the error is recoverable
    """

    default_error_code: int = 1000

    default_recoverable: bool = True

    def __init__(
        self,
        message: str = "An error occurred",
        error_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Numeric error code
            details: Additional error details
            cause: The underlying exception that caused this one
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        self.cause = cause
        self.recoverable = recoverable if recoverable is not None else self.default_recoverable
        self.timestamp = datetime.now(timezone.utc)

    @property
    def full_message(self) -> str:
        """Get full error message with code."""
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "cause": str(self.cause) if self.cause else None,
        }

    @classmethod
    def from_exception(
        cls,
        exception: BaseException,
        message: Optional[str] = None,
        **kwargs: Any
    ) -> "UptimeProbeException":
        """
        Create from another exception.

        Args:
            exception: The original exception
            message: Override message (uses original if not provided)
            **kwargs: Additional arguments for the exception

        Returns:
            New exception instance
        """
        return cls(
            message=message or str(exception),
            cause=exception,
            **kwargs
        )

    def __str__(self) -> str:
        """String representation."""
        return self.full_message

    def __repr__(self) -> str:
        """Detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code}, "
            f"details={self.details})"
        )


class ConfigurationError(UptimeProbeException):
    """
    Configuration Error

    Raised when there are issues with application configuration,
    environment variables, or settings files.
    """

    default_error_code = 1100
    default_recoverable = False

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[Type] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if config_key:
            self.details["config_key"] = config_key

        if expected_type:
            self.details["expected_type"] = expected_type.__name__
