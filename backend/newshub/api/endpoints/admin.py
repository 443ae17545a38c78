import secrets
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from typing import List, Optional
from slowapi import Limiter
from slowapi.util import get_remote_address

from newshub.core.config import settings
from newshub.core.database import get_db
from newshub.models.publication import Publication
from newshub.schemas.ingestion import CleanupResult, CleanupStats, SchedulerStatus
from newshub.schemas.publication import Publication as PublicationSchema
from newshub.services.article_cleanup import ArticleCleanupService
from newshub.services.scheduler import FeedScheduler, IngestionInProgressError, scheduler

limiter = Limiter(key_func=get_remote_address)


def require_admin_token(x_admin_token: Optional[str] = Header(default=None)):
    """Check the shared admin secret when ADMIN_TOKEN is configured."""
    if not settings.ADMIN_TOKEN:
        return
    if not x_admin_token or not secrets.compare_digest(x_admin_token, settings.ADMIN_TOKEN):
        raise HTTPException(status_code=401, detail="Invalid admin token")


def get_scheduler() -> FeedScheduler:
    return scheduler


router = APIRouter(dependencies=[Depends(require_admin_token)])


@router.post("/scheduler/trigger")
@limiter.limit("5/minute")
async def trigger_feed_parsing(
    request: Request,
    feed_scheduler: FeedScheduler = Depends(get_scheduler),
):
    """Run an ingestion over all active publications and return its statistics."""
    try:
        stats = await feed_scheduler.trigger_ingestion_now()
    except IngestionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {"message": "Feed parsing triggered successfully", **stats.model_dump()}


@router.get("/scheduler/status", response_model=SchedulerStatus)
def scheduler_status(feed_scheduler: FeedScheduler = Depends(get_scheduler)):
    return feed_scheduler.get_status()


@router.get("/publications", response_model=List[PublicationSchema])
def list_publications(db: Session = Depends(get_db)):
    """All publications with their last fetch time and error."""
    return (
        db.query(Publication)
        .order_by(Publication.is_active.desc(), Publication.name)
        .all()
    )


@router.post("/cleanup", response_model=CleanupResult)
@limiter.limit("5/hour")
def run_cleanup(
    request: Request,
    days_to_keep: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Delete old unsaved articles now."""
    if days_to_keep is not None and days_to_keep < 1:
        raise HTTPException(status_code=400, detail="days_to_keep must be positive")
    return ArticleCleanupService(db).cleanup_old_articles(days_to_keep)


@router.get("/cleanup/preview", response_model=CleanupStats)
def preview_cleanup(days_to_keep: Optional[int] = None, db: Session = Depends(get_db)):
    """Dry run of the retention sweep."""
    return ArticleCleanupService(db).get_cleanup_stats(days_to_keep)
