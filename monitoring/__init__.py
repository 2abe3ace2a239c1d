"""
============================================================================
UPTIME PROBE - MONITORING PACKAGE
============================================================================
The check pipeline, leaves first:

monitoring/
├── __init__.py          ← this file
├── models.py            ← Site, ProbeAttempt, TLSInfo, CheckResult, CheckResponse
├── prober.py            ← HTTPProber: one timed request, never raises on network failure
├── tls.py               ← TLSInspector: certificate validity and expiry
├── retry.py             ← RetryController: bounded, sequential retries with backoff
├── classifier.py        ← StatusClassifier: final attempt → UptimeStatus
├── streak.py            ← StreakTracker + in-memory / SQL counter stores
└── coordinator.py       ← CheckCoordinator: one check, one envelope
============================================================================
"""

from monitoring.models import (
    Site,
    ConnectionInfo,
    ProbeAttempt,
    TLSInfo,
    CheckResult,
    CheckResponse,
)
from monitoring.prober import HTTPProber, categorize_request_error
from monitoring.tls import TLSInspector
from monitoring.retry import RetryController
from monitoring.classifier import StatusClassifier, coerce_status, status_label
from monitoring.streak import (
    StreakStore,
    InMemoryStreakStore,
    SQLStreakStore,
    StreakTracker,
)
from monitoring.coordinator import CheckCoordinator

__all__ = [
    # Value objects
    "Site",
    "ConnectionInfo",
    "ProbeAttempt",
    "TLSInfo",
    "CheckResult",
    "CheckResponse",

    # Pipeline
    "HTTPProber",
    "categorize_request_error",
    "TLSInspector",
    "RetryController",
    "StatusClassifier",
    "coerce_status",
    "status_label",

    # Failure streaks
    "StreakStore",
    "InMemoryStreakStore",
    "SQLStreakStore",
    "StreakTracker",

    # Entry point
    "CheckCoordinator",
]
