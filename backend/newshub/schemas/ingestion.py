from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class FetchResult(BaseModel):
    """Outcome of ingesting one publication during a run."""

    publication_id: int
    publication: str
    success: bool
    count: int = 0
    error: Optional[str] = None


class IngestionStats(BaseModel):
    """Aggregate of one run over all active publications."""

    total_feeds: int = 0
    successful_feeds: int = 0
    total_articles: int = 0
    results: List[FetchResult] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def failed_feeds(self) -> int:
        return self.total_feeds - self.successful_feeds


class CleanupResult(BaseModel):
    deleted_articles: int
    deleted_user_articles: int
    cutoff_date: datetime


class CleanupStats(BaseModel):
    cutoff_date: datetime
    articles_to_delete: int
    old_saved_articles_kept: int
    days_to_keep: int


class SchedulerStatus(BaseModel):
    is_running: bool
    jobs: List[str] = Field(default_factory=list)
    ingestion_in_progress: bool = False
    last_run_at: Optional[datetime] = None
    next_run_at: Optional[datetime] = None
