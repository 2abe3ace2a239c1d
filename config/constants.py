"""
Constants Module for Uptime Probe

Contains all constant values, enumerations, message templates and
static configuration used throughout the application.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Final, FrozenSet


class UptimeStatus(IntEnum):
    """
    Uptime Status Enumeration

    Closed set of statuses a check result may carry. The integer
    values are the ones written to the uptime_checks table.

    PENDING is assigned by whoever queues a check before it runs;
    the check pipeline itself never produces it.
    """

    DOWN = 0
    UP = 1
    PENDING = 2
    MAINTENANCE = 3

    @property
    def label(self) -> str:
        """Upper-case label used in logs."""
        return self.name


class TransportErrorKind(str, Enum):
    """
    Transport Error Enumeration

    Categorical reason an attempt failed to complete an HTTP exchange.
    """

    DNS_FAILURE = "dns_failure"
    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_ERROR = "connection_error"
    TLS_ERROR = "tls_error"
    TIMEOUT = "timeout"
    TOO_MANY_REDIRECTS = "too_many_redirects"
    PROTOCOL_ERROR = "protocol_error"
    NETWORK_ERROR = "network_error"
    INVALID_URL = "invalid_url"


class FailureKind(str, Enum):
    """
    Check Failure Enumeration

    Why a check could not produce a measurement. A DOWN target is
    not a failure; it is a successful measurement.
    """

    INPUT = "input"
    RESOLUTION = "resolution"
    INTERNAL = "internal"


class StatusCodes:
    """
    HTTP Status Code Categories
    """

    # Range treated as "reachable and healthy"
    HEALTHY_MIN: Final[int] = 200
    HEALTHY_MAX: Final[int] = 399

    @classmethod
    def is_healthy(cls, code: int) -> bool:
        """Check if status code counts as UP."""
        return cls.HEALTHY_MIN <= code <= cls.HEALTHY_MAX


class RequestHeaders:
    """Inbound request headers read by the check endpoint."""

    WEBSITE_ID: Final[str] = "x-website-id"
    MAX_RETRIES: Final[str] = "x-max-retries"


class MessageTemplates:
    """
    Response Envelope Messages
    """

    CHECK_COMPLETE: Final[str] = "Uptime check complete"

    WEBSITE_ID_REQUIRED: Final[str] = "Website ID is required"
    WEBSITE_ID_INVALID: Final[str] = "Missing or invalid x-website-id header"
    WEBSITE_ID_MALFORMED: Final[str] = "Invalid website ID"
    WEBSITE_ID_TOO_LONG: Final[str] = "x-website-id must be at most 128 characters"

    MAX_RETRIES_INVALID: Final[str] = "Invalid max retries"
    MAX_RETRIES_DETAIL: Final[str] = "x-max-retries must be a positive integer"

    WEBSITE_NOT_FOUND: Final[str] = "Website not found"
    INVALID_DOMAIN: Final[str] = "Invalid website domain"

    INTERNAL_ERROR: Final[str] = "Internal server error"


class Limits:
    """
    Application Limits and Constraints
    """

    MAX_WEBSITE_ID_LENGTH: Final[int] = 128
    MAX_DOMAIN_LENGTH: Final[int] = 2048
    MAX_ERROR_LENGTH: Final[int] = 500


class Defaults:
    """
    Default Values
    """

    SCHEME: Final[str] = "https"
    SUPPORTED_SCHEMES: Final[FrozenSet[str]] = frozenset({"http", "https"})
