"""
============================================================================
UPTIME PROBE - CHECK COORDINATOR
============================================================================
One call = one uptime check for one website.

    validate input ─► lookup site ─► build URL ─► retry loop (prober)
        ─► TLS inspection (https) ─► classify ─► streak update ─► envelope

Failure kinds
-------------
INPUT       missing / malformed website id or max retries; nothing else runs
RESOLUTION  unknown website or unusable domain
INTERNAL    any unexpected fault inside the pipeline

Transport failures and error status codes are NOT failures here: they are
measured, classified as DOWN and returned with success=True.
============================================================================
"""

from typing import Any, Awaitable, Callable, Optional

from config.constants import FailureKind, Limits, MessageTemplates, StatusCodes
from exceptions import (
    InvalidFormatError,
    InvalidURLError,
    MissingFieldError,
    WebsiteNotFoundError,
)
from monitoring.classifier import StatusClassifier
from monitoring.models import CheckResponse, CheckResult, ProbeAttempt, Site, TLSInfo
from monitoring.retry import RetryController
from monitoring.streak import StreakTracker
from monitoring.tls import TLSInspector
from utils.helpers import TimeHelper
from utils.logger import get_logger
from utils.validators import RequestValidator, URLValidator


logger = get_logger("Coordinator")

LookupWebsite = Callable[[str], Awaitable[Site]]


class CheckCoordinator:
    """
    Drives a single check through the pipeline.

    Parameters
    ----------
    lookup_website : async callable
        site_id → Site, raising WebsiteNotFoundError.
    retry_controller : RetryController
    streak_tracker : StreakTracker
    tls_inspector : TLSInspector
    classifier : StatusClassifier
    """

    def __init__(
        self,
        lookup_website: LookupWebsite,
        retry_controller: RetryController,
        streak_tracker: StreakTracker,
        tls_inspector: Optional[TLSInspector] = None,
        classifier: Optional[StatusClassifier] = None,
    ):
        self.lookup_website = lookup_website
        self.retry_controller = retry_controller
        self.streak_tracker = streak_tracker
        self.tls_inspector = tls_inspector or TLSInspector()
        self.classifier = classifier or StatusClassifier()

    async def check(
        self,
        website_id: Any,
        max_retries: Any = None,
        maintenance_active: Optional[bool] = None,
    ) -> CheckResponse:
        """
        Run one uptime check.

        Args:
            website_id: Identifier of the website to check
            max_retries: Optional positive integer (int or numeric string)
            maintenance_active: Overrides the website's own maintenance flag

        Returns:
            CheckResponse envelope; never raises except on cancellation
        """
        try:
            site_id = RequestValidator.validate_website_id(website_id)
        except MissingFieldError as e:
            logger.debug(f"[Check] rejected website id: {e.message}")
            return CheckResponse.failed(
                FailureKind.INPUT,
                MessageTemplates.WEBSITE_ID_REQUIRED,
                MessageTemplates.WEBSITE_ID_INVALID,
            )
        except InvalidFormatError as e:
            logger.debug(f"[Check] rejected website id: {e.message}")
            return CheckResponse.failed(
                FailureKind.INPUT,
                MessageTemplates.WEBSITE_ID_MALFORMED,
                MessageTemplates.WEBSITE_ID_TOO_LONG,
            )

        try:
            max_retries = RequestValidator.parse_max_retries(max_retries)
        except InvalidFormatError as e:
            logger.debug(f"[Check] {site_id} rejected max retries: {e.message}")
            return CheckResponse.failed(
                FailureKind.INPUT,
                MessageTemplates.MAX_RETRIES_INVALID,
                MessageTemplates.MAX_RETRIES_DETAIL,
            )

        try:
            return await self._run(site_id, max_retries, maintenance_active)
        except Exception as e:
            logger.exception(f"[Check] {site_id} failed with an internal error: {e}")
            return CheckResponse.failed(
                FailureKind.INTERNAL,
                MessageTemplates.INTERNAL_ERROR,
                str(e) or type(e).__name__,
            )

    async def _run(
        self,
        site_id: str,
        max_retries: Optional[int],
        maintenance_active: Optional[bool],
    ) -> CheckResponse:
        try:
            site = await self.lookup_website(site_id)
        except WebsiteNotFoundError as e:
            logger.info(f"[Check] {site_id} not found")
            return CheckResponse.failed(
                FailureKind.RESOLUTION,
                MessageTemplates.WEBSITE_NOT_FOUND,
                e.message,
            )

        try:
            url = URLValidator.build_target_url(site.domain)
        except InvalidURLError as e:
            logger.warning(f"[Check] {site_id} has an unusable domain {site.domain!r}: {e.message}")
            return CheckResponse.failed(
                FailureKind.RESOLUTION,
                MessageTemplates.INVALID_DOMAIN,
                e.message,
            )

        if maintenance_active is None:
            maintenance_active = site.maintenance

        final_attempt, attempts_made = await self.retry_controller.run(url, max_retries)

        tls = self._tls_for(url, final_attempt)
        status = self.classifier.classify(final_attempt, maintenance_active)
        streak = await self.streak_tracker.update(site_id, status)

        result = CheckResult(
            site_id=site_id,
            status=status,
            url=url,
            http_code=final_attempt.http_code,
            ttfb_ms=final_attempt.ttfb_ms,
            total_ms=final_attempt.total_ms,
            retries=attempts_made - 1,
            failure_streak=streak,
            ssl_valid=tls.valid if tls else None,
            ssl_expiry=tls.expires_at if tls else None,
            error=self._error_text(final_attempt),
            timestamp=TimeHelper.get_utc_now(),
        )

        logger.info(
            f"[Check] {site_id} {url} → {status.label} "
            f"http={result.http_code} ttfb={result.ttfb_ms}ms "
            f"retries={result.retries} streak={result.failure_streak}"
        )

        return CheckResponse.completed(result, MessageTemplates.CHECK_COMPLETE)

    def _tls_for(self, url: str, final_attempt: ProbeAttempt) -> Optional[TLSInfo]:
        """TLS health for https targets, None for plain http."""
        if not URLValidator.is_https(url):
            return None
        if final_attempt.tls_failed or final_attempt.connection is None:
            return TLSInfo(valid=False)
        return self.tls_inspector.inspect(final_attempt.connection)

    @staticmethod
    def _error_text(final_attempt: ProbeAttempt) -> Optional[str]:
        error = final_attempt.describe_error()
        if error is None and final_attempt.http_code is not None:
            if not StatusCodes.is_healthy(final_attempt.http_code):
                error = f"HTTP {final_attempt.http_code}"
        if error is not None and len(error) > Limits.MAX_ERROR_LENGTH:
            error = error[: Limits.MAX_ERROR_LENGTH]
        return error
