"""
Monitoring Exception Classes for Uptime Probe

Exceptions raised by the check pipeline and its collaborators.
Probe failures are not exceptions; they are classified results.
"""

from __future__ import annotations

from typing import Any, Optional
from exceptions.base import UptimeProbeException


class MonitoringException(UptimeProbeException):
    """
    Base Monitoring Exception
    """

    default_error_code = 4000


class WebsiteNotFoundError(MonitoringException):
    """
    Website Not Found Error

    Raised by the website lookup when no site matches the identifier.
    """

    default_error_code = 4001

    def __init__(
        self,
        message: str = "Website not found",
        website_id: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if website_id:
            self.details["website_id"] = website_id


class StreakStoreError(MonitoringException):
    """
    Streak Store Error

    Raised by a failure streak store that cannot complete an update.
    The tracker degrades instead of failing the check.
    """

    default_error_code = 4002

    def __init__(
        self,
        message: str = "Failure streak store unavailable",
        site_id: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if site_id:
            self.details["site_id"] = site_id


class UnknownStatusError(MonitoringException):
    """
    Unknown Status Error

    Raised when a status value falls outside the closed set, or a
    component receives a status it must never handle.
    """

    default_error_code = 4003
    default_recoverable = False

    def __init__(
        self,
        message: str = "Unrecognized uptime status",
        status: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if status is not None:
            self.details["status"] = repr(status)
