"""Article store: bulk upsert keyed on (url, publication_id) and retention deletes."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Sequence, Tuple
from sqlalchemy import and_, delete, exists, not_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from newshub.models.article import Article
from newshub.models.user_article import UserArticle
from newshub.schemas.article import ArticleCreate

logger = logging.getLogger(__name__)

# Columns refreshed when an existing (url, publication_id) row is re-ingested.
# id, guid and created_at keep their original values.
UPSERT_COLUMNS = (
    "title",
    "content",
    "summary",
    "author",
    "published_date",
    "image_url",
    "word_count",
    "reading_time",
    "tags",
)

UPSERT_CHUNK_SIZE = 500
DELETE_CHUNK_SIZE = 1000

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _chunks(items: Sequence, size: int):
    for start in range(0, len(items), size):
        yield items[start : start + size]


class ArticleStore:
    def __init__(self, db: Session):
        self.db = db

    def bulk_upsert(self, articles: Sequence[ArticleCreate]) -> List[Article]:
        """
        Insert or refresh articles in one transaction.

        Records sharing a (url, publication_id) key within the batch collapse
        to the last one. Errors roll back the whole batch and propagate.
        """
        if not articles:
            return []

        unique: Dict[Tuple[str, int], ArticleCreate] = {}
        for article in articles:
            unique[article.key] = article

        now = datetime.now(timezone.utc)
        rows = [
            {**article.model_dump(), "created_at": now, "updated_at": now}
            for article in unique.values()
        ]

        try:
            insert = _DIALECT_INSERTS.get(self.db.get_bind().dialect.name)
            if insert is not None:
                for chunk in _chunks(rows, UPSERT_CHUNK_SIZE):
                    stmt = insert(Article).values(chunk)
                    set_ = {column: stmt.excluded[column] for column in UPSERT_COLUMNS}
                    set_["updated_at"] = now
                    self.db.execute(
                        stmt.on_conflict_do_update(
                            index_elements=["url", "publication_id"], set_=set_
                        )
                    )
            else:
                self._upsert_orm(rows, now)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return self._load(unique.keys())

    def _upsert_orm(self, rows: List[dict], now: datetime) -> None:
        """Row-by-row upsert for dialects without ON CONFLICT support."""
        for row in rows:
            existing = (
                self.db.query(Article)
                .filter(
                    Article.url == row["url"],
                    Article.publication_id == row["publication_id"],
                )
                .first()
            )
            if existing is None:
                self.db.add(Article(**row))
                continue
            for column in UPSERT_COLUMNS:
                setattr(existing, column, row[column])
            existing.updated_at = now
        self.db.flush()

    def _load(self, keys) -> List[Article]:
        urls_by_publication: Dict[int, List[str]] = {}
        for url, publication_id in keys:
            urls_by_publication.setdefault(publication_id, []).append(url)

        loaded: List[Article] = []
        for publication_id, urls in urls_by_publication.items():
            for chunk in _chunks(urls, UPSERT_CHUNK_SIZE):
                loaded.extend(
                    self.db.query(Article)
                    .filter(
                        Article.publication_id == publication_id,
                        Article.url.in_(chunk),
                    )
                    .populate_existing()
                    .all()
                )
        return loaded

    @staticmethod
    def _is_saved():
        return exists(
            select(UserArticle.id).where(
                and_(UserArticle.article_id == Article.id, UserArticle.is_saved == True)  # noqa: E712
            )
        )

    def _unsaved_older_than(self, cutoff: datetime):
        return and_(Article.published_date < cutoff, not_(self._is_saved()))

    def count_older_than_unsaved(self, age_days: int) -> int:
        cutoff = datetime.now(timezone.utc) - timedelta(days=age_days)
        return self.db.query(Article).filter(self._unsaved_older_than(cutoff)).count()

    def count_older_than_saved(self, age_days: int) -> int:
        cutoff = datetime.now(timezone.utc) - timedelta(days=age_days)
        return (
            self.db.query(Article)
            .filter(Article.published_date < cutoff, self._is_saved())
            .count()
        )

    def delete_older_than_unsaved(self, age_days: int) -> Tuple[int, datetime]:
        """Delete articles older than ``age_days`` that no user has saved."""
        cutoff = datetime.now(timezone.utc) - timedelta(days=age_days)
        article_ids = [
            row[0]
            for row in self.db.query(Article.id)
            .filter(self._unsaved_older_than(cutoff))
            .all()
        ]

        for chunk in _chunks(article_ids, DELETE_CHUNK_SIZE):
            self.db.execute(
                delete(Article)
                .where(Article.id.in_(chunk))
                .execution_options(synchronize_session=False)
            )
        self.db.commit()
        return len(article_ids), cutoff

    def delete_orphaned_user_state(self) -> int:
        """Delete per-user article state whose article no longer exists."""
        result = self.db.execute(
            delete(UserArticle)
            .where(UserArticle.article_id.not_in(select(Article.id)))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount or 0
