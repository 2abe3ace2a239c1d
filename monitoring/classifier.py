"""
============================================================================
UPTIME PROBE - STATUS CLASSIFIER
============================================================================
Maps the final attempt of a retry loop to an UptimeStatus.

Rules, first match wins
-----------------------
1. maintenance flag set         → MAINTENANCE
2. http_code in [200, 399]      → UP
3. http_code outside that range → DOWN   (reachable but erroring)
4. no response at all           → DOWN

PENDING is never produced here.
============================================================================
"""

from typing import Any

from config.constants import StatusCodes, UptimeStatus
from exceptions import UnknownStatusError
from monitoring.models import ProbeAttempt


class StatusClassifier:
    """Stateless attempt → status mapping."""

    def classify(self, final_attempt: ProbeAttempt, maintenance_active: bool = False) -> UptimeStatus:
        if maintenance_active:
            return UptimeStatus.MAINTENANCE

        if final_attempt.http_code is not None:
            if StatusCodes.is_healthy(final_attempt.http_code):
                return UptimeStatus.UP
            return UptimeStatus.DOWN

        return UptimeStatus.DOWN


def coerce_status(value: Any) -> UptimeStatus:
    """
    Convert a raw status value to UptimeStatus.

    Raises:
        UnknownStatusError: For anything outside the closed set
    """
    if isinstance(value, UptimeStatus):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnknownStatusError(status=value)
    try:
        return UptimeStatus(value)
    except ValueError as e:
        raise UnknownStatusError(status=value, cause=e)


def status_label(value: Any) -> str:
    """
    Label for a status value, e.g. 1 → "UP".

    Raises:
        UnknownStatusError: For anything outside the closed set
    """
    return coerce_status(value).label
