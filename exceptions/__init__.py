"""
Exceptions Package for Uptime Probe

Provides the exception hierarchy for error handling
throughout the application.
"""

from exceptions.base import (
    UptimeProbeException,
    ConfigurationError,
)

from exceptions.database import (
    DatabaseException,
    DatabaseConnectionError,
    DatabaseQueryError,
)

from exceptions.validation import (
    ValidationException,
    MissingFieldError,
    InvalidFormatError,
    InvalidURLError,
)

from exceptions.monitoring import (
    MonitoringException,
    WebsiteNotFoundError,
    StreakStoreError,
    UnknownStatusError,
)

__all__ = [
    # Base exceptions
    "UptimeProbeException",
    "ConfigurationError",

    # Database exceptions
    "DatabaseException",
    "DatabaseConnectionError",
    "DatabaseQueryError",

    # Validation exceptions
    "ValidationException",
    "MissingFieldError",
    "InvalidFormatError",
    "InvalidURLError",

    # Monitoring exceptions
    "MonitoringException",
    "WebsiteNotFoundError",
    "StreakStoreError",
    "UnknownStatusError",
]
