"""
Validation Exception Classes for Uptime Probe

Raised when an inbound check request carries missing or
malformed input. These never trigger network I/O.
"""

from __future__ import annotations

from typing import Any, Optional
from exceptions.base import UptimeProbeException


class ValidationException(UptimeProbeException):
    """
    Base Validation Exception

    Parent class for all validation-related exceptions.
    """

    default_error_code = 3000
    default_recoverable = True

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: The field that failed validation
            value: The invalid value (sanitized)
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        if field:
            self.details["field"] = field

        if value is not None:
            self.details["value"] = self._sanitize_value(value)

    @staticmethod
    def _sanitize_value(value: Any) -> str:
        """Truncate long values before they reach a log line."""
        str_value = str(value)

        if len(str_value) > 100:
            str_value = str_value[:100] + "..."

        return str_value


class MissingFieldError(ValidationException):
    """
    Missing Field Error

    Raised when a required field is absent or blank.
    """

    default_error_code = 3001

    def __init__(
        self,
        message: str = "Required field is missing",
        field: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field=field, **kwargs)


class InvalidFormatError(ValidationException):
    """
    Invalid Format Error

    Raised when a field is present but cannot be parsed.
    """

    default_error_code = 3002

    def __init__(
        self,
        message: str = "Invalid format",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field=field, value=value, **kwargs)

        if expected:
            self.details["expected"] = expected


class InvalidURLError(ValidationException):
    """
    Invalid URL Error

    Raised when a resolved domain cannot be turned into a probe URL.
    """

    default_error_code = 3003

    def __init__(
        self,
        message: str = "Invalid URL format",
        url: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="url", value=url, **kwargs)

        if reason:
            self.details["reason"] = reason
