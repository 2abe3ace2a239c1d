"""
Configuration Package for Uptime Probe

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Constants and enums used throughout the application
"""

from config.settings import (
    Settings,
    DatabaseSettings,
    ProbeSettings,
    RetrySettings,
    LoggingSettings,
    ServerSettings,
    Environment,
    get_settings,
)

from config.constants import (
    UptimeStatus,
    TransportErrorKind,
    FailureKind,
    StatusCodes,
    RequestHeaders,
    MessageTemplates,
    Limits,
    Defaults,
)

__all__ = [
    # Settings
    "Settings",
    "DatabaseSettings",
    "ProbeSettings",
    "RetrySettings",
    "LoggingSettings",
    "ServerSettings",
    "Environment",
    "get_settings",

    # Constants
    "UptimeStatus",
    "TransportErrorKind",
    "FailureKind",
    "StatusCodes",
    "RequestHeaders",
    "MessageTemplates",
    "Limits",
    "Defaults",
]
