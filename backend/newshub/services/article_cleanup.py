"""
Article retention sweep - removes old articles nobody has saved.

Runs daily. Articles older than RETENTION_DAYS with no saved state for any
user are deleted, then per-user state rows left without an article.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.orm import Session

from newshub.core.config import settings
from newshub.repositories.articles import ArticleStore
from newshub.schemas.ingestion import CleanupResult, CleanupStats

logger = logging.getLogger(__name__)


class ArticleCleanupService:
    """Service for the periodic retention sweep."""

    def __init__(self, db: Session, article_store: Optional[ArticleStore] = None):
        self.db = db
        self.articles = article_store or ArticleStore(db)

    def cleanup_old_articles(self, days_to_keep: Optional[int] = None) -> CleanupResult:
        """
        Delete articles older than ``days_to_keep`` days that are not saved.

        Args:
            days_to_keep: Age threshold in days (default RETENTION_DAYS)

        Returns:
            CleanupResult with deletion counts and the cutoff used
        """
        days = settings.RETENTION_DAYS if days_to_keep is None else days_to_keep
        logger.info(f"Starting article cleanup (keeping articles from last {days} days)")

        deleted_articles, cutoff_date = self.articles.delete_older_than_unsaved(days)
        if deleted_articles:
            logger.info(f"Cleanup: deleted {deleted_articles} old articles")
        else:
            logger.info("Cleanup: no old articles to delete")

        deleted_user_articles = self.articles.delete_orphaned_user_state()
        logger.info(
            f"Cleanup: deleted {deleted_user_articles} orphaned user_articles records"
        )

        return CleanupResult(
            deleted_articles=deleted_articles,
            deleted_user_articles=deleted_user_articles,
            cutoff_date=cutoff_date,
        )

    def get_cleanup_stats(self, days_to_keep: Optional[int] = None) -> CleanupStats:
        """Dry run: what a cleanup with ``days_to_keep`` would delete and keep."""
        days = settings.RETENTION_DAYS if days_to_keep is None else days_to_keep

        return CleanupStats(
            cutoff_date=datetime.now(timezone.utc) - timedelta(days=days),
            articles_to_delete=self.articles.count_older_than_unsaved(days),
            old_saved_articles_kept=self.articles.count_older_than_saved(days),
            days_to_keep=days,
        )


def cleanup_old_articles(db: Session, days_to_keep: Optional[int] = None) -> CleanupResult:
    """Convenience function to run the retention sweep."""
    service = ArticleCleanupService(db)
    return service.cleanup_old_articles(days_to_keep)
