"""
============================================================================
UPTIME PROBE - HTTP PROBER
============================================================================
Issues one timed HTTP(S) GET against a target and reports what happened.

Timing
------
ttfb_ms   ← request start until the status line and headers arrived
total_ms  ← request start until the body was read (or the attempt failed)

Network failures never raise: they come back as a ProbeAttempt whose
transport_error carries a TransportErrorKind. An HTTP error status is
not a transport error; it is returned with http_code set.
============================================================================
"""

import asyncio
import re
import socket
import ssl
from typing import Iterator, Optional

import httpx

from config.constants import TransportErrorKind
from config.settings import ProbeSettings
from monitoring.models import ConnectionInfo, ProbeAttempt
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("Prober")


_DNS_PATTERN = re.compile(
    r"name or service not known|nodename nor servname|getaddrinfo failed|"
    r"temporary failure in name resolution|no address associated|name resolution",
    re.IGNORECASE,
)
_TLS_PATTERN = re.compile(r"\bssl\b|certificate|tlsv?1|handshake", re.IGNORECASE)
_REFUSED_PATTERN = re.compile(r"connection refused|errno 111|errno 61", re.IGNORECASE)


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield exc and every exception it was raised from."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def categorize_request_error(exc: BaseException) -> TransportErrorKind:
    """
    Map an httpx request failure to a categorical reason.

    Connect errors are split by walking the exception chain down to the
    socket or ssl error httpcore wrapped, falling back to message text.
    """
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return TransportErrorKind.TIMEOUT

    if isinstance(exc, httpx.TooManyRedirects):
        return TransportErrorKind.TOO_MANY_REDIRECTS

    if isinstance(exc, (httpx.UnsupportedProtocol, httpx.InvalidURL)):
        return TransportErrorKind.INVALID_URL

    if isinstance(exc, (httpx.ProtocolError, httpx.DecodingError)):
        return TransportErrorKind.PROTOCOL_ERROR

    if isinstance(exc, httpx.ConnectError):
        chain = list(_exception_chain(exc))
        text = " ".join(str(e) for e in chain)

        if any(isinstance(e, ssl.SSLError) for e in chain) or _TLS_PATTERN.search(text):
            return TransportErrorKind.TLS_ERROR

        if any(isinstance(e, socket.gaierror) for e in chain) or _DNS_PATTERN.search(text):
            return TransportErrorKind.DNS_FAILURE

        if any(isinstance(e, ConnectionRefusedError) for e in chain) or _REFUSED_PATTERN.search(text):
            return TransportErrorKind.CONNECTION_REFUSED

        return TransportErrorKind.CONNECTION_ERROR

    return TransportErrorKind.NETWORK_ERROR


class _InFlight:
    """Mutable progress of one attempt, read back when it fails midway."""

    __slots__ = ("http_code", "ttfb_ms", "connection")

    def __init__(self) -> None:
        self.http_code: Optional[int] = None
        self.ttfb_ms: Optional[float] = None
        self.connection: Optional[ConnectionInfo] = None


class HTTPProber:
    """
    Performs single HTTP / HTTPS reachability probes using httpx.

    A fresh client is opened per attempt so a pooled keep-alive
    connection can never hide a host that stopped accepting connections.

    Parameters
    ----------
    settings : ProbeSettings
        Timeouts, redirect policy, TLS verification and user agent.
    transport : httpx.AsyncBaseTransport | None
        Overrides the network transport (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        settings: ProbeSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport

    def _build_client(self, timeout_s: float) -> httpx.AsyncClient:
        connect_s = min(self.settings.connect_timeout_ms / 1000, timeout_s)
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_s, connect=connect_s),
            follow_redirects=self.settings.follow_redirects,
            max_redirects=self.settings.max_redirects,
            verify=self.settings.verify_ssl,
            limits=httpx.Limits(max_connections=1, max_keepalive_connections=0),
            headers={"User-Agent": self.settings.user_agent},
            transport=self._transport,
        )

    async def probe(
        self,
        url: str,
        timeout_ms: Optional[float] = None,
        attempt_number: int = 1,
    ) -> ProbeAttempt:
        """
        Execute one GET against *url* with a hard deadline.

        Parameters
        ----------
        url : str
            Absolute http or https URL.
        timeout_ms : float | None
            Deadline for the whole attempt; defaults to settings.timeout_ms.
        attempt_number : int
            Position of this attempt in the retry loop, starting at 1.

        Returns
        -------
        ProbeAttempt
            Never raises for network failures.
        """
        if timeout_ms is None:
            timeout_ms = self.settings.timeout_ms
        timeout_s = max(timeout_ms, 1) / 1000

        started_at = TimeHelper.get_utc_now()
        start = TimeHelper.monotonic()
        state = _InFlight()

        try:
            await asyncio.wait_for(
                self._exchange(url, timeout_s, start, state),
                timeout=timeout_s,
            )
        except (asyncio.TimeoutError, httpx.RequestError, httpx.InvalidURL) as e:
            kind = categorize_request_error(e)
            detail = str(e)[:200] or type(e).__name__
            if kind == TransportErrorKind.TIMEOUT and not str(e):
                detail = f"no complete response within {timeout_ms:.0f}ms"

            logger.debug(f"[HTTP] {url} attempt {attempt_number} → {kind.value} ({detail})")

            return ProbeAttempt(
                attempt_number=attempt_number,
                started_at=started_at,
                http_code=state.http_code,
                ttfb_ms=state.ttfb_ms,
                total_ms=TimeHelper.elapsed_ms(start),
                transport_error=kind,
                error_detail=detail,
                connection=state.connection,
            )

        total_ms = TimeHelper.elapsed_ms(start)
        logger.debug(
            f"[HTTP] {url} attempt {attempt_number} → {state.http_code} "
            f"ttfb={state.ttfb_ms}ms total={total_ms}ms"
        )

        return ProbeAttempt(
            attempt_number=attempt_number,
            started_at=started_at,
            http_code=state.http_code,
            ttfb_ms=state.ttfb_ms,
            total_ms=total_ms,
            connection=state.connection,
        )

    async def _exchange(self, url: str, timeout_s: float, start: float, state: _InFlight) -> None:
        async with self._build_client(timeout_s) as client:
            async with client.stream("GET", url) as response:
                state.ttfb_ms = TimeHelper.elapsed_ms(start)
                state.http_code = response.status_code
                state.connection = self._connection_info(response)
                await self._drain(response)

    async def _drain(self, response: httpx.Response) -> None:
        """Read the body up to the configured byte cap."""
        limit = self.settings.max_body_bytes
        if limit <= 0:
            return
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received >= limit:
                break

    def _connection_info(self, response: httpx.Response) -> ConnectionInfo:
        final_url = str(response.url)
        stream = response.extensions.get("network_stream")
        ssl_object = stream.get_extra_info("ssl_object") if stream is not None else None

        if ssl_object is None:
            return ConnectionInfo(url=final_url)

        # Empty dict when the handshake ran without verification
        peer_certificate = ssl_object.getpeercert() or None

        return ConnectionInfo(
            url=final_url,
            tls_version=ssl_object.version(),
            peer_certificate=peer_certificate,
            verified=self.settings.verify_ssl and peer_certificate is not None,
        )
