"""
============================================================================
UPTIME PROBE - VALIDATORS UTILITY
============================================================================
Validation for inbound check requests and for turning a resolved
website domain into the URL that gets probed.
============================================================================
"""

import ipaddress
import re
from typing import Any, Optional
from urllib.parse import urlparse

import validators as external_validators

from config.constants import Defaults, Limits, RequestHeaders
from exceptions import InvalidFormatError, InvalidURLError, MissingFieldError


# ============================================================================
# URL VALIDATORS
# ============================================================================

class URLValidator:
    """
    Target URL construction and host validation.
    """

    SCHEME_PATTERN = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*)://")

    @staticmethod
    def is_valid_host(host: str) -> bool:
        """
        Check if host is a domain name, an IP address or localhost.

        Args:
            host: Hostname without port

        Returns:
            True if valid, False otherwise
        """
        if not host:
            return False

        if host.lower() == "localhost":
            return True

        try:
            ipaddress.ip_address(host)
            return True
        except ValueError:
            pass

        return external_validators.domain(host) is True

    @classmethod
    def build_target_url(cls, domain: str) -> str:
        """
        Turn a website domain into the URL to probe.

        A missing scheme defaults to https. Surrounding whitespace
        and a trailing slash are removed; path and query are kept.

        Args:
            domain: Domain as stored for the website

        Returns:
            Normalized absolute URL

        Raises:
            InvalidURLError: If no usable URL can be built
        """
        if not isinstance(domain, str) or not domain.strip():
            raise InvalidURLError("Website domain is empty", url=domain, reason="empty")

        candidate = domain.strip()

        if len(candidate) > Limits.MAX_DOMAIN_LENGTH:
            raise InvalidURLError("Website domain is too long", url=candidate, reason="too_long")

        match = cls.SCHEME_PATTERN.match(candidate)
        if match:
            scheme = match.group(1).lower()
            if scheme not in Defaults.SUPPORTED_SCHEMES:
                raise InvalidURLError(
                    f"Unsupported URL scheme: {scheme}",
                    url=candidate,
                    reason="unsupported_scheme",
                )
            candidate = scheme + candidate[len(scheme):]
        else:
            candidate = f"{Defaults.SCHEME}://{candidate}"

        try:
            parsed = urlparse(candidate)
            # Accessing .port validates it
            parsed.port
        except ValueError as e:
            raise InvalidURLError(f"Malformed URL: {e}", url=candidate, reason="malformed", cause=e)

        if not cls.is_valid_host(parsed.hostname or ""):
            raise InvalidURLError("Invalid domain", url=candidate, reason="invalid_domain")

        normalized = f"{parsed.scheme}://{parsed.netloc}"

        if parsed.path and parsed.path != "/":
            normalized += parsed.path.rstrip("/")

        if parsed.query:
            normalized += f"?{parsed.query}"

        return normalized

    @staticmethod
    def is_https(url: str) -> bool:
        """Check if the URL uses the https scheme."""
        return urlparse(url).scheme.lower() == "https"


# ============================================================================
# REQUEST VALIDATORS
# ============================================================================

class RequestValidator:
    """
    Validation of the inbound check trigger.
    """

    @staticmethod
    def validate_website_id(website_id: Any) -> str:
        """
        Validate the website identifier.

        Returns:
            The identifier with surrounding whitespace removed

        Raises:
            MissingFieldError: If absent, not a string, or blank
            InvalidFormatError: If too long
        """
        if not isinstance(website_id, str) or not website_id.strip():
            raise MissingFieldError("Website ID is required", field=RequestHeaders.WEBSITE_ID)

        website_id = website_id.strip()

        if len(website_id) > Limits.MAX_WEBSITE_ID_LENGTH:
            raise InvalidFormatError(
                "Website ID is too long",
                field=RequestHeaders.WEBSITE_ID,
                value=website_id,
                expected=f"at most {Limits.MAX_WEBSITE_ID_LENGTH} characters",
            )

        return website_id

    @staticmethod
    def parse_max_retries(value: Any) -> Optional[int]:
        """
        Parse the optional max retries value.

        Returns:
            None when absent, otherwise a positive integer

        Raises:
            InvalidFormatError: If present but not a positive integer
        """
        if value is None:
            return None

        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            if not (value.isascii() and value.isdigit()):
                raise InvalidFormatError(
                    "Max retries must be a positive integer",
                    field=RequestHeaders.MAX_RETRIES,
                    value=value,
                    expected="positive integer",
                )
            value = int(value)

        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidFormatError(
                "Max retries must be a positive integer",
                field=RequestHeaders.MAX_RETRIES,
                value=value,
                expected="positive integer",
            )

        return value
