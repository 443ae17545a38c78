import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from newshub.core.config import settings
from newshub.core.database import SessionLocal
from newshub.schemas.ingestion import CleanupResult, IngestionStats, SchedulerStatus
from newshub.services.article_cleanup import ArticleCleanupService
from newshub.services.feed_ingestion import FeedIngestionService

logger = logging.getLogger(__name__)

INGESTION_JOB_ID = "feed_ingestion"
INITIAL_INGESTION_JOB_ID = "initial_ingestion"
CLEANUP_JOB_ID = "retention_sweep"


class IngestionInProgressError(Exception):
    """Raised when a manual trigger would overlap a running ingestion."""


class FeedScheduler:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        service_factory: Callable[[Session], FeedIngestionService] = FeedIngestionService,
    ):
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.session_factory = session_factory
        self.service_factory = service_factory
        self._run_lock = asyncio.Lock()
        self.last_run_at: Optional[datetime] = None
        self.last_stats: Optional[IngestionStats] = None
        # AsyncIOScheduler.shutdown only schedules the stop on the event loop
        self._running = False

    @property
    def ingestion_in_progress(self) -> bool:
        return self._run_lock.locked()

    async def run_ingestion(self) -> Optional[IngestionStats]:
        """Scheduled ingestion job. Never raises, so the next tick still fires."""
        if self.ingestion_in_progress:
            logger.warning("Skipping scheduled RSS feed parsing: a run is already in progress")
            return None

        logger.info("Starting scheduled RSS feed parsing")
        try:
            return await self._ingest()
        except Exception:
            logger.exception("Error in scheduled RSS feed parsing")
            return None

    async def trigger_ingestion_now(self) -> IngestionStats:
        """Run ingestion immediately and return its statistics."""
        if self.ingestion_in_progress:
            raise IngestionInProgressError("An ingestion run is already in progress")

        logger.info("Manually triggering RSS feed parsing")
        return await self._ingest()

    async def _ingest(self) -> IngestionStats:
        async with self._run_lock:
            db = self.session_factory()
            try:
                stats = await self.service_factory(db).ingest_all()
            finally:
                db.close()

        self.last_run_at = stats.finished_at
        self.last_stats = stats
        return stats

    async def run_cleanup(self) -> Optional[CleanupResult]:
        """Scheduled retention sweep, run off the event loop."""
        logger.info("Starting scheduled cleanup")
        try:
            result = await asyncio.to_thread(self._cleanup)
        except Exception:
            logger.exception("Error in scheduled cleanup")
            return None
        logger.info("Scheduled cleanup completed")
        return result

    def _cleanup(self) -> CleanupResult:
        db = self.session_factory()
        try:
            return ArticleCleanupService(db).cleanup_old_articles(settings.RETENTION_DAYS)
        finally:
            db.close()

    def start(self):
        """Start the scheduler."""
        if self._running:
            logger.warning("Scheduler is already running")
            return

        self.scheduler.add_job(
            self.run_ingestion,
            trigger=IntervalTrigger(minutes=settings.RSS_FETCH_INTERVAL),
            id=INGESTION_JOB_ID,
            name="Fetch RSS feeds",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.add_job(
            self.run_ingestion,
            trigger=DateTrigger(
                run_date=datetime.now(timezone.utc)
                + timedelta(seconds=settings.INITIAL_FETCH_DELAY)
            ),
            id=INITIAL_INGESTION_JOB_ID,
            name="Initial RSS fetch on startup",
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.run_cleanup,
            trigger=CronTrigger(hour=settings.CLEANUP_HOUR, minute=0, timezone="UTC"),
            id=CLEANUP_JOB_ID,
            name="Delete old unsaved articles",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self._running = True
        logger.info(
            f"Scheduler started with interval: {settings.RSS_FETCH_INTERVAL} minutes"
        )

    def shutdown(self):
        """Shutdown the scheduler without waiting for running jobs."""
        if not self._running:
            logger.warning("Scheduler is not running")
            return

        self.scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Scheduler shutdown")

    def get_status(self) -> SchedulerStatus:
        ingestion_job = self.scheduler.get_job(INGESTION_JOB_ID)
        return SchedulerStatus(
            is_running=self._running,
            jobs=[job.id for job in self.scheduler.get_jobs()],
            ingestion_in_progress=self.ingestion_in_progress,
            last_run_at=self.last_run_at,
            next_run_at=getattr(ingestion_job, "next_run_time", None),
        )


# Global scheduler instance
scheduler = FeedScheduler()
