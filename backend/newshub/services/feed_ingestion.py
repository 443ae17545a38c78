import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Sequence
from sqlalchemy.orm import Session

from newshub.core.config import settings
from newshub.core.logging_config import ingestion_run_context
from newshub.models.publication import Publication
from newshub.repositories.articles import ArticleStore
from newshub.repositories.publications import PublicationStore
from newshub.schemas.article import ArticleCreate
from newshub.schemas.feed_item import RawFeedItem
from newshub.schemas.ingestion import CleanupResult, FetchResult, IngestionStats
from newshub.services import text_normalizer
from newshub.services.article_cleanup import ArticleCleanupService
from newshub.services.content_extractor import ArticleContentExtractor
from newshub.services.feed_fetcher import FeedFetcher
from newshub.services.feed_item_extractor import FeedItemExtractor
from newshub.services.topic_tagger import TopicTagger

logger = logging.getLogger(__name__)


class FeedIngestionService:
    """Runs feed ingestion for one publication or for all active ones."""

    def __init__(
        self,
        db: Session,
        fetcher: Optional[FeedFetcher] = None,
        extractor: Optional[FeedItemExtractor] = None,
        content_extractor: Optional[ArticleContentExtractor] = None,
        request_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.db = db
        self.publications = PublicationStore(db)
        self.articles = ArticleStore(db)
        self.fetcher = fetcher or FeedFetcher()
        self.extractor = extractor or FeedItemExtractor(
            TopicTagger.from_settings(settings),
            summary_max_length=settings.SUMMARY_MAX_LENGTH,
        )
        if content_extractor is None and settings.FULL_CONTENT_EXTRACTION:
            content_extractor = ArticleContentExtractor()
        self.content_extractor = content_extractor
        self.request_delay = (
            settings.FEED_REQUEST_DELAY if request_delay is None else request_delay
        )
        self.sleep = sleep

    async def ingest_one(self, publication: Publication) -> FetchResult:
        """
        Fetch, normalize and store one publication's feed.

        Fetch and parse failures are recorded on the publication and returned
        as a failed result. Storage failures propagate to the caller.
        """
        publication_id, name, feed_url = publication.id, publication.name, publication.rss_url
        logger.info(f"Parsing feed for {name}: {feed_url}")

        try:
            items = await self.fetcher.fetch(feed_url)
        except Exception as e:
            logger.error(f"Error parsing feed {name}: {str(e)}")
            self.publications.record_fetch_outcome(publication_id, str(e))
            return FetchResult(
                publication_id=publication_id, publication=name, success=False, error=str(e)
            )

        articles = self.extract_items(items, publication_id, name)
        if self.content_extractor is not None:
            articles = [await self.enrich(article) for article in articles]

        try:
            stored = self.articles.bulk_upsert(articles)
        except Exception as e:
            logger.error(f"Error storing articles for {name}: {str(e)}")
            self._record_storage_failure(publication_id, e)
            raise

        self.publications.record_fetch_outcome(publication_id, None)
        logger.info(f"Successfully parsed {len(stored)} articles for {name}")
        return FetchResult(
            publication_id=publication_id, publication=name, success=True, count=len(stored)
        )

    def extract_items(
        self, items: Sequence[RawFeedItem], publication_id: int, name: str = ""
    ) -> List[ArticleCreate]:
        """Normalize raw items, skipping incomplete or malformed ones."""
        articles = []
        skipped = 0
        for item in items:
            try:
                article = self.extractor.extract(item, publication_id)
            except Exception as e:
                logger.warning(f"Skipping malformed item for {name}: {str(e)}")
                skipped += 1
                continue
            if article is None:
                skipped += 1
                continue
            articles.append(article)

        if skipped:
            logger.debug(f"Skipped {skipped} of {len(items)} items for {name}")
        return articles

    async def enrich(self, article: ArticleCreate) -> ArticleCreate:
        """Swap in page content when it is richer than the feed's. Never raises."""
        try:
            extracted = await self.content_extractor.extract(article.url)
            if not extracted:
                return article

            update = {}
            content = text_normalizer.clean(extracted.get("content"))
            if len(content) > len(article.content):
                words = text_normalizer.word_count(content)
                update.update(
                    content=content,
                    word_count=words,
                    reading_time=text_normalizer.reading_time(words),
                    tags=self.extractor.tagger.tag(article.title, content, article.summary),
                )
                logger.debug(f"Used extracted content for: {article.title}")
            if extracted.get("author") and not article.author:
                update["author"] = extracted["author"]
            return article.model_copy(update=update) if update else article
        except Exception as e:
            logger.warning(f"Content extraction failed for {article.title}: {str(e)}")
            return article

    async def ingest_all(self) -> IngestionStats:
        """Ingest every active publication sequentially, pausing between them."""
        with ingestion_run_context("ingest"):
            started_at = datetime.now(timezone.utc)
            publications = self.publications.list_active()
            logger.info(f"Starting to parse {len(publications)} active feeds")

            results: List[FetchResult] = []
            for index, publication in enumerate(publications):
                if index:
                    await self.sleep(self.request_delay)

                publication_id, name = publication.id, publication.name
                try:
                    results.append(await self.ingest_one(publication))
                except Exception as e:
                    logger.error(f"Feed ingestion failed for {name}: {str(e)}")
                    results.append(
                        FetchResult(
                            publication_id=publication_id,
                            publication=name,
                            success=False,
                            error=str(e),
                        )
                    )

            stats = IngestionStats(
                total_feeds=len(publications),
                successful_feeds=sum(1 for r in results if r.success),
                total_articles=sum(r.count for r in results),
                results=results,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
            )
            logger.info(
                f"Feed parsing completed: {stats.successful_feeds}/{stats.total_feeds} "
                f"feeds processed successfully, {stats.total_articles} total articles"
            )
            return stats

    def retention_sweep(self, age_days: Optional[int] = None) -> CleanupResult:
        return ArticleCleanupService(self.db, self.articles).cleanup_old_articles(age_days)

    def _record_storage_failure(self, publication_id: int, error: Exception) -> None:
        try:
            self.publications.record_fetch_outcome(
                publication_id, f"Storage error: {str(error)}"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Could not record storage failure for {publication_id}: {str(e)}")
