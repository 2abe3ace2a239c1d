"""
============================================================================
UPTIME PROBE - CHECK PIPELINE VALUE OBJECTS
============================================================================
Immutable records passed between the prober, the retry controller,
the classifier and the coordinator.

ProbeAttempt   ← one per Prober invocation, dropped after the retry loop
TLSInfo        ← certificate health, https targets only
CheckResult    ← the only record that outlives a check
CheckResponse  ← envelope returned to whoever triggered the check
============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from config.constants import FailureKind, TransportErrorKind, UptimeStatus
from utils.helpers import TimeHelper


@dataclass(frozen=True)
class Site:
    """A website as resolved by the lookup collaborator."""

    id: str
    domain: str
    maintenance: bool = False


@dataclass(frozen=True)
class ConnectionInfo:
    """
    Transport details captured from the connection that served the
    final response of an attempt.

    peer_certificate is the decoded dict from ssl.SSLSocket.getpeercert();
    it is only populated when the chain was verified during the handshake.
    """

    url: str
    tls_version: Optional[str] = None
    peer_certificate: Optional[Dict[str, Any]] = None
    verified: bool = False

    @property
    def is_tls(self) -> bool:
        return self.tls_version is not None


@dataclass(frozen=True)
class ProbeAttempt:
    """Outcome of a single timed HTTP request."""

    attempt_number: int
    started_at: datetime
    http_code: Optional[int] = None
    ttfb_ms: Optional[float] = None
    total_ms: Optional[float] = None
    transport_error: Optional[TransportErrorKind] = None
    error_detail: Optional[str] = None
    connection: Optional[ConnectionInfo] = None

    def __post_init__(self) -> None:
        if self.attempt_number < 1:
            raise ValueError("attempt_number starts at 1")

    @property
    def got_response(self) -> bool:
        """True when the server answered with any HTTP status."""
        return self.http_code is not None

    @property
    def tls_failed(self) -> bool:
        return self.transport_error == TransportErrorKind.TLS_ERROR

    def describe_error(self) -> Optional[str]:
        """Error text stored with the check result."""
        if self.transport_error is not None:
            if self.error_detail:
                return f"{self.transport_error.value}: {self.error_detail}"
            return self.transport_error.value
        return None


@dataclass(frozen=True)
class TLSInfo:
    """Certificate health of an https target."""

    valid: bool
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class CheckResult:
    """
    Fully measured check.

    to_row() produces the shape written to the uptime_checks table,
    to_dict() the JSON payload of the response envelope.
    """

    site_id: str
    status: UptimeStatus
    url: str
    http_code: Optional[int] = None
    ttfb_ms: Optional[float] = None
    total_ms: Optional[float] = None
    retries: int = 0
    failure_streak: int = 0
    ssl_valid: Optional[bool] = None
    ssl_expiry: Optional[datetime] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=TimeHelper.get_utc_now)

    def to_row(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "site_id": self.site_id,
            "status": int(self.status),
            "http_code": self.http_code,
            "ttfb_ms": self.ttfb_ms,
            "total_ms": self.total_ms,
            "url": self.url,
            "error": self.error,
            "ssl_valid": self.ssl_valid,
            "ssl_expiry": self.ssl_expiry,
            "retries": self.retries,
            "failure_streak": self.failure_streak,
        }

    def to_dict(self) -> Dict[str, Any]:
        row = self.to_row()
        row["timestamp"] = TimeHelper.to_iso(self.timestamp)
        row["ssl_expiry"] = TimeHelper.to_iso(self.ssl_expiry)
        return row


@dataclass(frozen=True)
class CheckResponse:
    """
    Response envelope.

    success is False only when no measurement could be made. A DOWN
    target is a successful measurement.
    """

    success: bool
    message: str
    data: Optional[CheckResult] = None
    error: Optional[str] = None
    kind: Optional[FailureKind] = None

    @classmethod
    def completed(cls, result: CheckResult, message: str) -> "CheckResponse":
        return cls(success=True, message=message, data=result)

    @classmethod
    def failed(cls, kind: FailureKind, message: str, error: Optional[str] = None) -> "CheckResponse":
        return cls(success=False, message=message, error=error, kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "message": self.message,
        }
        if self.data is not None:
            payload["data"] = self.data.to_dict()
        if self.error is not None:
            payload["error"] = self.error
        return payload
