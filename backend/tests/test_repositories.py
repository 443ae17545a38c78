"""Tests for the publication and article stores."""

import pytest
from datetime import datetime, timezone

from newshub.models.article import Article
from newshub.repositories import articles as articles_repo
from newshub.repositories.articles import ArticleStore
from newshub.repositories.publications import PublicationStore
from newshub.schemas.article import ArticleCreate


def article_record(publication_id: int, url: str, title: str = "Title", **overrides) -> ArticleCreate:
    data = dict(
        title=title,
        content="Body text",
        summary="Body text",
        url=url,
        guid=url,
        published_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        publication_id=publication_id,
        word_count=2,
        reading_time=1,
        tags=["Technology"],
    )
    data.update(overrides)
    return ArticleCreate(**data)


@pytest.mark.integration
class TestArticleStore:
    """Test ArticleStore.bulk_upsert()."""

    def test_empty_batch(self, db_session):
        assert ArticleStore(db_session).bulk_upsert([]) == []

    def test_insert_then_update(self, db_session, test_publication):
        store = ArticleStore(db_session)
        url = "https://example.com/a"

        stored = store.bulk_upsert([article_record(test_publication.id, url, "Original")])
        assert len(stored) == 1
        original_id = stored[0].id
        original_created_at = stored[0].created_at
        assert original_created_at is not None

        stored = store.bulk_upsert(
            [article_record(test_publication.id, url, "Updated", tags=["Business"])]
        )

        assert db_session.query(Article).count() == 1
        assert stored[0].id == original_id
        assert stored[0].created_at == original_created_at
        assert stored[0].title == "Updated"
        assert stored[0].tags == ["Business"]

    def test_same_url_different_publications_are_distinct(
        self, db_session, multiple_publications
    ):
        pub1, pub2 = multiple_publications[:2]
        url = "https://example.com/shared"

        ArticleStore(db_session).bulk_upsert(
            [article_record(pub1.id, url), article_record(pub2.id, url)]
        )

        assert db_session.query(Article).count() == 2

    def test_duplicate_keys_in_batch_last_wins(self, db_session, test_publication):
        url = "https://example.com/dup"
        stored = ArticleStore(db_session).bulk_upsert(
            [
                article_record(test_publication.id, url, "First"),
                article_record(test_publication.id, url, "Second"),
            ]
        )

        assert len(stored) == 1
        assert stored[0].title == "Second"

    def test_failure_rolls_back_whole_batch(self, db_session, test_publication):
        good = article_record(test_publication.id, "https://example.com/good")
        # publication_id is NOT NULL; a null slips past the schema via model_construct
        bad = ArticleCreate.model_construct(
            **{**article_record(test_publication.id, "https://example.com/bad").model_dump(),
               "publication_id": None}
        )

        with pytest.raises(Exception):
            ArticleStore(db_session).bulk_upsert([good, bad])

        assert db_session.query(Article).count() == 0

    def test_orm_fallback_for_other_dialects(self, db_session, test_publication, monkeypatch):
        monkeypatch.setattr(articles_repo, "_DIALECT_INSERTS", {})
        store = ArticleStore(db_session)
        url = "https://example.com/orm"

        store.bulk_upsert([article_record(test_publication.id, url, "Original")])
        stored = store.bulk_upsert([article_record(test_publication.id, url, "Updated")])

        assert db_session.query(Article).count() == 1
        assert stored[0].title == "Updated"


@pytest.mark.integration
class TestPublicationStore:
    """Test PublicationStore."""

    def test_list_active_excludes_inactive(self, db_session, multiple_publications):
        active = PublicationStore(db_session).list_active()
        assert [p.name for p in active] == [
            "Publication 1",
            "Publication 2",
            "Publication 3",
        ]

    def test_record_fetch_outcome(self, db_session, test_publication):
        store = PublicationStore(db_session)

        store.record_fetch_outcome(test_publication.id, "HTTP 503 Service Unavailable")
        db_session.refresh(test_publication)
        assert test_publication.fetch_error == "HTTP 503 Service Unavailable"
        assert test_publication.has_fetch_error
        first_fetch = test_publication.last_fetched_at
        assert first_fetch is not None

        store.record_fetch_outcome(test_publication.id, None)
        db_session.refresh(test_publication)
        assert test_publication.fetch_error is None
        assert test_publication.last_fetched_at >= first_fetch

    def test_record_fetch_outcome_unknown_publication(self, db_session):
        assert PublicationStore(db_session).record_fetch_outcome(9999, "boom") is None
