"""
Database Package for Uptime Probe

Provides database connectivity, models, and repositories
for data persistence using SQLAlchemy with async support.
"""

from database.connection import DatabaseManager

from database.models import (
    Base,
    Website,
    FailureStreak,
    UptimeCheck
)

from database.repositories import (
    WebsiteRepository,
    UptimeCheckRepository
)

__all__ = [
    # Connection
    "DatabaseManager",

    # Models
    "Base",
    "Website",
    "FailureStreak",
    "UptimeCheck",

    # Repositories
    "WebsiteRepository",
    "UptimeCheckRepository"
]
