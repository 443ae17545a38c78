"""
Pytest configuration and fixtures for NewsHub tests.
"""

import os

# Settings are read at import time; keep the module-level engine off Postgres
os.environ.setdefault("DATABASE_URI", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")

import pytest
import httpx
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Generator, Tuple, Union
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from newshub.core.database import Base, get_db
from newshub.models.publication import Publication
from newshub.models.article import Article
from newshub.models.user import User
from newshub.models.user_article import UserArticle


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

RouteResponse = Union[int, Tuple[int, str], Tuple[int, str, str], Exception]


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory bound to the shared in-memory database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Create a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def test_publication(db_session) -> Publication:
    """Create a test publication."""
    publication = Publication(
        name="Example News",
        rss_url="https://example.com/feed.xml",
        website_url="https://example.com",
        description="A test publication",
        category="News",
        is_active=True,
    )
    db_session.add(publication)
    db_session.commit()
    db_session.refresh(publication)
    return publication


@pytest.fixture(scope="function")
def multiple_publications(db_session) -> list[Publication]:
    """Create three active publications and one inactive one."""
    publications = [
        Publication(
            name=f"Publication {i+1}",
            rss_url=f"https://pub{i+1}.example.com/feed.xml",
            is_active=True,
        )
        for i in range(3)
    ]
    publications.append(
        Publication(
            name="Retired Publication",
            rss_url="https://retired.example.com/feed.xml",
            is_active=False,
        )
    )
    db_session.add_all(publications)
    db_session.commit()
    for publication in publications:
        db_session.refresh(publication)
    return publications


@pytest.fixture(scope="function")
def test_user(db_session) -> User:
    """Create a test user."""
    user = User(email="reader@example.com", first_name="Test", last_name="Reader")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def make_article(db_session) -> Callable[..., Article]:
    """Factory for stored articles of a given age in days."""
    counter = {"n": 0}

    def _make(publication: Publication, age_days: float = 0, **overrides) -> Article:
        counter["n"] += 1
        published = datetime.now(timezone.utc) - timedelta(days=age_days)
        data = dict(
            publication_id=publication.id,
            title=f"Stored Article {counter['n']}",
            content="Body text",
            summary="Summary",
            url=f"https://example.com/stored-{counter['n']}",
            guid=f"stored-{counter['n']}",
            published_date=published,
            word_count=2,
            reading_time=1,
            tags=[],
        )
        data.update(overrides)
        article = Article(**data)
        db_session.add(article)
        db_session.commit()
        db_session.refresh(article)
        return article

    return _make


@pytest.fixture(scope="function")
def save_article(db_session) -> Callable[[User, Article], UserArticle]:
    """Mark an article as saved by a user."""

    def _save(user: User, article: Article, is_saved: bool = True) -> UserArticle:
        state = UserArticle(
            user_id=user.id,
            article_id=article.id,
            is_saved=is_saved,
            saved_at=datetime.now(timezone.utc) if is_saved else None,
        )
        db_session.add(state)
        db_session.commit()
        db_session.refresh(state)
        return state

    return _save


@pytest.fixture
def mock_rss_feed_data() -> str:
    """RSS 2.0 feed with content:encoded, media and enclosure fields."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:media="http://search.yahoo.com/mrss/">
    <channel>
        <title>Example News</title>
        <link>https://example.com</link>
        <description>A test RSS feed</description>
        <item>
            <title>Fed raises interest rates amid inflation fears</title>
            <link>https://example.com/fed-rates?utm_source=rss&amp;id=7</link>
            <guid isPermaLink="false">fed-rates-7</guid>
            <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
            <description>The central bank moved again.</description>
            <content:encoded><![CDATA[<p>The Federal Reserve raised <b>interest rates</b> by a quarter point.</p><p>Officials said inflation remains too high.</p>]]></content:encoded>
            <dc:creator>Jane Doe</dc:creator>
            <media:content url="https://example.com/images/fed.jpg" medium="image" />
        </item>
        <item>
            <title>Second story</title>
            <link>https://example.com/second/</link>
            <pubDate>Tue, 02 Jan 2024 08:30:00 GMT</pubDate>
            <description>Short description of the second story.</description>
            <enclosure url="https://example.com/images/second.png" type="image/png" length="1234" />
        </item>
    </channel>
</rss>
"""


@pytest.fixture
def mock_atom_feed_data() -> str:
    """Atom feed with one entry."""
    return """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
    <title>Atom Example</title>
    <link href="https://atom.example.com/"/>
    <updated>2024-03-05T10:00:00Z</updated>
    <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
    <entry>
        <title>Atom entry title</title>
        <link rel="alternate" href="https://atom.example.com/posts/1/amp/"/>
        <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
        <updated>2024-03-05T10:00:00Z</updated>
        <author><name>Atom Author</name></author>
        <summary>Atom summary text.</summary>
        <content type="html">&lt;p&gt;Atom body with more words than the summary has.&lt;/p&gt;</content>
    </entry>
</feed>
"""


@pytest.fixture
def mock_client_factory() -> Callable[[Dict[str, RouteResponse]], httpx.AsyncClient]:
    """
    Build an httpx.AsyncClient whose requests are answered from a route table.

    Each route maps a URL to a status code, a (status, body) or
    (status, body, content type) tuple, or an exception to raise.
    Unknown URLs get a 404.
    """

    def _factory(routes: Dict[str, RouteResponse]) -> httpx.AsyncClient:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(str(request.url))
            if route is None:
                return httpx.Response(404, request=request)
            if isinstance(route, Exception):
                raise route
            if isinstance(route, int):
                return httpx.Response(route, request=request)
            status, body, *rest = route
            content_type = rest[0] if rest else "application/rss+xml"
            return httpx.Response(
                status,
                content=body.encode("utf-8"),
                headers={"content-type": content_type},
                request=request,
            )

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory


@pytest.fixture
def no_sleep():
    """Async stand-in for asyncio.sleep that records requested delays."""
    delays = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


@pytest.fixture(scope="function")
def test_scheduler(session_factory):
    """FeedScheduler wired to the test database; never started."""
    from newshub.services.scheduler import FeedScheduler

    return FeedScheduler(session_factory=session_factory)


@pytest.fixture(scope="function")
def test_app(db_session, test_scheduler):
    """Create a FastAPI test app without lifespan events."""
    from fastapi import FastAPI
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded
    from newshub.api.endpoints import admin

    # Create app without lifespan to avoid starting the real scheduler
    test_app = FastAPI(title="NewsHub - Test", version="1.0.0")

    admin.limiter.reset()
    test_app.state.limiter = admin.limiter
    test_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    test_app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    # Override database dependency
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db
    test_app.dependency_overrides[admin.get_scheduler] = lambda: test_scheduler

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Create a test client without entering context manager."""
    return TestClient(test_app, raise_server_exceptions=False)
