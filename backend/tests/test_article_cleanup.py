"""Tests for the article retention sweep."""

import pytest

from newshub.models.article import Article
from newshub.models.user_article import UserArticle
from newshub.services.article_cleanup import ArticleCleanupService, cleanup_old_articles


@pytest.mark.integration
class TestArticleCleanupService:
    """Test ArticleCleanupService."""

    def test_deletes_only_old_unsaved_articles(
        self, db_session, test_publication, test_user, make_article, save_article
    ):
        recent = make_article(test_publication, age_days=5)
        old_unsaved = make_article(test_publication, age_days=120)
        old_saved = make_article(test_publication, age_days=200)
        old_read_only = make_article(test_publication, age_days=150)
        save_article(test_user, old_saved)
        save_article(test_user, old_read_only, is_saved=False)

        kept_ids = {recent.id, old_saved.id}
        old_unsaved_id = old_unsaved.id
        result = ArticleCleanupService(db_session).cleanup_old_articles(90)

        assert result.deleted_articles == 2
        remaining = {row[0] for row in db_session.query(Article.id).all()}
        assert remaining == kept_ids
        assert old_unsaved_id not in remaining

    def test_removes_orphaned_user_state(
        self, db_session, test_publication, test_user, make_article, save_article
    ):
        old_read = make_article(test_publication, age_days=120)
        save_article(test_user, old_read, is_saved=False)

        result = ArticleCleanupService(db_session).cleanup_old_articles(90)

        assert result.deleted_articles == 1
        assert db_session.query(UserArticle).count() == 0

    def test_nothing_to_delete(self, db_session, test_publication, make_article):
        make_article(test_publication, age_days=1)

        result = cleanup_old_articles(db_session, 30)

        assert result.deleted_articles == 0
        assert result.deleted_user_articles == 0
        assert db_session.query(Article).count() == 1

    def test_defaults_to_configured_retention(
        self, db_session, test_publication, make_article, monkeypatch
    ):
        from newshub.core.config import settings

        monkeypatch.setattr(settings, "RETENTION_DAYS", 10)
        make_article(test_publication, age_days=11)
        make_article(test_publication, age_days=9)

        result = ArticleCleanupService(db_session).cleanup_old_articles()

        assert result.deleted_articles == 1

    def test_cleanup_stats_is_a_dry_run(
        self, db_session, test_publication, test_user, make_article, save_article
    ):
        make_article(test_publication, age_days=5)
        make_article(test_publication, age_days=120)
        make_article(test_publication, age_days=130)
        save_article(test_user, make_article(test_publication, age_days=140))

        stats = ArticleCleanupService(db_session).get_cleanup_stats(90)

        assert stats.days_to_keep == 90
        assert stats.articles_to_delete == 2
        assert stats.old_saved_articles_kept == 1
        assert db_session.query(Article).count() == 4
