"""
============================================================================
UPTIME PROBE - REPOSITORIES
============================================================================
WebsiteRepository      ← website lookup collaborator
UptimeCheckRepository  ← result sink for completed checks
============================================================================
"""

from typing import List, Optional

from sqlalchemy import select, update

from database.connection import DatabaseManager
from database.models import UptimeCheck, Website
from exceptions import WebsiteNotFoundError
from monitoring.models import CheckResult, Site
from utils.logger import get_logger, log_execution_time


logger = get_logger("Repositories")


class WebsiteRepository:
    """Resolves website identifiers to domains."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def lookup_website(self, site_id: str) -> Site:
        """
        Resolve a website.

        Raises:
            WebsiteNotFoundError: If no website has this id
        """
        async with self.db_manager.session() as session:
            website = await session.get(Website, site_id)

        if website is None:
            raise WebsiteNotFoundError(f"Website {site_id} not found", website_id=site_id)

        return Site(id=website.id, domain=website.domain, maintenance=bool(website.maintenance))

    async def add_website(
        self,
        site_id: str,
        domain: str,
        name: Optional[str] = None,
        maintenance: bool = False,
    ) -> Site:
        async with self.db_manager.session() as session:
            session.add(Website(id=site_id, domain=domain, name=name, maintenance=maintenance))

        logger.info(f"Website {site_id} registered for {domain}")
        return Site(id=site_id, domain=domain, maintenance=maintenance)

    async def set_maintenance(self, site_id: str, active: bool) -> None:
        """
        Toggle maintenance mode for a website.

        Raises:
            WebsiteNotFoundError: If no website has this id
        """
        async with self.db_manager.session() as session:
            result = await session.execute(
                update(Website).where(Website.id == site_id).values(maintenance=active)
            )

        if result.rowcount == 0:
            raise WebsiteNotFoundError(f"Website {site_id} not found", website_id=site_id)

        logger.info(f"Website {site_id} maintenance={'on' if active else 'off'}")


class UptimeCheckRepository:
    """Writes completed checks to the uptime_checks table."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @log_execution_time
    async def record(self, result: CheckResult) -> None:
        async with self.db_manager.session() as session:
            session.add(UptimeCheck(**result.to_row()))

    async def recent(self, site_id: str, limit: int = 10) -> List[UptimeCheck]:
        """Most recent rows for a site, newest first."""
        async with self.db_manager.session() as session:
            rows = await session.execute(
                select(UptimeCheck)
                .where(UptimeCheck.site_id == site_id)
                .order_by(UptimeCheck.timestamp.desc(), UptimeCheck.id.desc())
                .limit(limit)
            )
            return list(rows.scalars().all())
