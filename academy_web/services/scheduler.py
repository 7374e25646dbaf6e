"""Background scheduler for housekeeping jobs."""
import logging
from datetime import timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from academy_web.core.config import settings
from academy_web.services.confirmation import ConfirmationTracker, confirmation_tracker

logger = logging.getLogger(__name__)


class MaintenanceScheduler:
    """Background scheduler that purges finished confirmation lookups."""

    def __init__(self, tracker: Optional[ConfirmationTracker] = None):
        """Initialize the scheduler."""
        self.scheduler = AsyncIOScheduler()
        self.tracker = tracker or confirmation_tracker
        self.running = False

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        logger.info("Starting maintenance scheduler")

        # Add the purge job to run every minute
        self.scheduler.add_job(
            self._purge_lookups,
            IntervalTrigger(minutes=1),
            id="purge_lookups_job",
            name="Purge finished confirmation lookups",
            replace_existing=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info("Maintenance scheduler started")

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping maintenance scheduler")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Maintenance scheduler stopped")

    async def _purge_lookups(self):
        """Forget lookups that finished longer ago than the retention window."""
        try:
            removed = self.tracker.purge_finished(
                timedelta(minutes=settings.LOOKUP_RETENTION_MINUTES)
            )
            if removed:
                logger.info(f"Purged {removed} finished confirmation lookups")
        except Exception as e:
            logger.error(f"Error purging confirmation lookups: {e}", exc_info=True)


# Singleton instance
maintenance_scheduler = MaintenanceScheduler()
