"""
============================================================================
UPTIME PROBE - HELPERS UTILITY
============================================================================
Time helpers shared by the prober, the retry controller and the
result models.
============================================================================
"""

import time
from datetime import datetime, timezone
from typing import Optional


# ============================================================================
# TIME UTILITIES
# ============================================================================

class TimeHelper:
    """
    Time and date manipulation utilities.
    """

    @staticmethod
    def get_utc_now() -> datetime:
        """Get current timezone-aware UTC datetime."""
        return datetime.now(timezone.utc)

    @staticmethod
    def monotonic() -> float:
        """Monotonic clock reading in seconds."""
        return time.perf_counter()

    @staticmethod
    def elapsed_ms(start: float, end: Optional[float] = None) -> float:
        """
        Milliseconds between two monotonic readings, rounded to 0.01ms.

        Args:
            start: Reading taken with TimeHelper.monotonic()
            end: Later reading; defaults to now
        """
        if end is None:
            end = time.perf_counter()
        return round((end - start) * 1000, 2)

    @staticmethod
    def to_iso(dt: Optional[datetime]) -> Optional[str]:
        """ISO-8601 string for a datetime, or None."""
        if dt is None:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.isoformat()
