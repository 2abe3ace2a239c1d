"""
============================================================================
UPTIME PROBE - RETRY CONTROLLER
============================================================================
Runs the prober up to max_retries + 1 times, strictly one after another.

Policy
------
• attempt 1 always runs
• any HTTP response (2xx..5xx) ends the loop: the host is reachable
• a transport error triggers another attempt while retries remain
• between attempts: delay_ms * backoff_factor^(n-1), capped at max_delay_ms
• an optional overall deadline shrinks per-attempt timeouts and stops
  the loop once no budget is left for the next delay

retries in the final result = attempts made - 1
============================================================================
"""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple

from config.settings import RetrySettings
from monitoring.models import ProbeAttempt
from monitoring.prober import HTTPProber
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("RetryController")


class RetryController:
    """
    Bounded retry loop around a prober.

    Parameters
    ----------
    prober : HTTPProber
        Anything with an async probe(url, timeout_ms, attempt_number).
    settings : RetrySettings
        Retry bounds, delays and the optional overall deadline.
    probe_timeout_ms : int
        Per-attempt deadline handed to the prober.
    sleep : coroutine function
        Used for inter-retry delays; replaced in tests.
    clock : callable
        Monotonic clock in seconds.
    """

    def __init__(
        self,
        prober: HTTPProber,
        settings: RetrySettings,
        probe_timeout_ms: int,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = TimeHelper.monotonic,
    ):
        self.prober = prober
        self.settings = settings
        self.probe_timeout_ms = probe_timeout_ms
        self._sleep = sleep
        self._clock = clock

    def delay_for(self, retry_number: int) -> float:
        """Seconds to wait before retry number *retry_number* (1-based)."""
        delay_ms = self.settings.delay_ms * (self.settings.backoff_factor ** (retry_number - 1))
        return min(delay_ms, self.settings.max_delay_ms) / 1000

    async def run(
        self,
        url: str,
        max_retries: Optional[int] = None,
        deadline: Optional[float] = None,
    ) -> Tuple[ProbeAttempt, int]:
        """
        Probe *url* until it answers or retries run out.

        Parameters
        ----------
        url : str
            Target URL.
        max_retries : int | None
            Caller supplied bound; defaulted and clamped by settings.
        deadline : float | None
            Absolute monotonic time the whole loop must finish by.
            Defaults to now + check_deadline_seconds when configured.

        Returns
        -------
        (final_attempt, attempts_made)
        """
        max_retries = self.settings.clamp(max_retries)

        if deadline is None and self.settings.check_deadline_seconds:
            deadline = self._clock() + self.settings.check_deadline_seconds

        final_attempt: Optional[ProbeAttempt] = None
        attempts_made = 0

        for attempt_number in range(1, max_retries + 2):
            timeout_ms: float = self.probe_timeout_ms
            if deadline is not None:
                remaining_ms = (deadline - self._clock()) * 1000
                timeout_ms = max(1.0, min(timeout_ms, remaining_ms))

            final_attempt = await self.prober.probe(
                url,
                timeout_ms=timeout_ms,
                attempt_number=attempt_number,
            )
            attempts_made = attempt_number

            if final_attempt.got_response:
                break

            if attempt_number > max_retries:
                logger.warning(f"[Retry] {url} exhausted all {max_retries} retries")
                break

            delay = self.delay_for(attempt_number)
            if deadline is not None and self._clock() + delay >= deadline:
                logger.warning(
                    f"[Retry] {url} check deadline reached after {attempts_made} attempts"
                )
                break

            logger.debug(
                f"[Retry] {url} attempt {attempt_number}/{max_retries + 1} failed "
                f"({final_attempt.transport_error.value if final_attempt.transport_error else 'no response'}), "
                f"retrying in {delay:.3f}s"
            )
            if delay > 0:
                await self._sleep(delay)

        return final_attempt, attempts_made
