from newshub.schemas.publication import Publication, PublicationCreate
from newshub.schemas.article import ArticleCreate
from newshub.schemas.feed_item import RawFeedItem
from newshub.schemas.ingestion import (
    FetchResult,
    IngestionStats,
    CleanupResult,
    CleanupStats,
    SchedulerStatus,
)

__all__ = [
    "Publication",
    "PublicationCreate",
    "ArticleCreate",
    "RawFeedItem",
    "FetchResult",
    "IngestionStats",
    "CleanupResult",
    "CleanupStats",
    "SchedulerStatus",
]
