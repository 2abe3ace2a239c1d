"""
============================================================================
UPTIME PROBE - DATABASE MODELS
============================================================================
websites         ← lookup collaborator: domain + maintenance flag
failure_streaks  ← per-site consecutive DOWN counter
uptime_checks    ← time-series sink, one row per completed check
============================================================================
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, SmallInteger, String, Boolean, DateTime, Float, Text,
    Index, CheckConstraint, false, func
)
from sqlalchemy.orm import declarative_base


# ============================================================================
# BASE MODEL CONFIGURATION
# ============================================================================

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """
    Mixin to add created_at and updated_at timestamps to models.
    """
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
    )


# ============================================================================
# WEBSITE MODEL
# ============================================================================

class Website(TimestampMixin, Base):
    """A monitored website."""

    __tablename__ = "websites"

    id = Column(String(128), primary_key=True)
    domain = Column(String(2048), nullable=False)
    name = Column(String(255), nullable=True)
    maintenance = Column(Boolean, nullable=False, default=False, server_default=false())

    def __repr__(self) -> str:
        return f"<Website(id={self.id!r}, domain={self.domain!r})>"


# ============================================================================
# FAILURE STREAK MODEL
# ============================================================================

class FailureStreak(Base):
    """Consecutive DOWN checks for one site."""

    __tablename__ = "failure_streaks"

    site_id = Column(String(128), primary_key=True)
    count = Column(Integer, nullable=False, default=0, server_default="0")
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("count >= 0", name="ck_failure_streaks_count_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<FailureStreak(site_id={self.site_id!r}, count={self.count})>"


# ============================================================================
# UPTIME CHECK MODEL
# ============================================================================

class UptimeCheck(Base):
    """One completed check; the row shape consumers aggregate over."""

    __tablename__ = "uptime_checks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    site_id = Column(String(128), nullable=False)
    status = Column(SmallInteger, nullable=False)
    http_code = Column(Integer, nullable=True)
    ttfb_ms = Column(Float, nullable=True)
    total_ms = Column(Float, nullable=True)
    url = Column(Text, nullable=False)
    error = Column(Text, nullable=True)
    ssl_valid = Column(Boolean, nullable=True)
    ssl_expiry = Column(DateTime(timezone=True), nullable=True)
    retries = Column(Integer, nullable=False, default=0)
    failure_streak = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_uptime_checks_site_timestamp", "site_id", "timestamp"),
        CheckConstraint("status BETWEEN 0 AND 3", name="ck_uptime_checks_status"),
    )

    def __repr__(self) -> str:
        return (
            f"<UptimeCheck(site_id={self.site_id!r}, status={self.status}, "
            f"timestamp={self.timestamp})>"
        )
