"""
============================================================================
UPTIME PROBE - TLS INSPECTOR
============================================================================
Evaluates the certificate presented on the connection that served an
https response.

valid      ← chain verified during the handshake AND now is inside
             [notBefore, notAfter]
expires_at ← notAfter

The inspector only runs after a completed handshake. A failed handshake
surfaces as a tls_error transport error on the attempt instead.
============================================================================
"""

import ssl
from datetime import datetime, timezone
from typing import Optional

from monitoring.models import ConnectionInfo, TLSInfo
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("TLSInspector")


class TLSInspector:
    """
    Certificate validity and expiry from connection info.

    Parameters
    ----------
    expiry_warning_days : int
        Certificates expiring within this window are logged as warnings.
    """

    def __init__(self, expiry_warning_days: int = 30):
        self.expiry_warning_days = expiry_warning_days

    @staticmethod
    def _parse_cert_time(value: Optional[str]) -> Optional[datetime]:
        """Parse a certificate time such as 'Jan 15 12:00:00 2025 GMT'."""
        if not value:
            return None
        try:
            return datetime.fromtimestamp(ssl.cert_time_to_seconds(value), tz=timezone.utc)
        except (ValueError, TypeError, OverflowError):
            return None

    def inspect(
        self,
        connection: Optional[ConnectionInfo],
        now: Optional[datetime] = None,
    ) -> TLSInfo:
        """
        Evaluate certificate health.

        Parameters
        ----------
        connection : ConnectionInfo | None
            Captured from the final response of the probe.
        now : datetime | None
            Evaluation time; defaults to the current UTC time.
        """
        if connection is None or not connection.is_tls or not connection.peer_certificate:
            return TLSInfo(valid=False)

        cert = connection.peer_certificate
        not_after = self._parse_cert_time(cert.get("notAfter"))
        not_before = self._parse_cert_time(cert.get("notBefore"))
        now = now or TimeHelper.get_utc_now()

        in_window = (
            not_after is not None
            and now <= not_after
            and (not_before is None or now >= not_before)
        )
        valid = connection.verified and in_window

        if not_after is not None:
            days_remaining = (not_after - now).days
            if days_remaining < 0:
                logger.warning(f"[TLS] {connection.url} certificate expired on {not_after.date()}")
            elif days_remaining <= self.expiry_warning_days:
                logger.warning(
                    f"[TLS] {connection.url} certificate expires in {days_remaining} days "
                    f"({not_after.date()})"
                )

        return TLSInfo(valid=valid, expires_at=not_after)
