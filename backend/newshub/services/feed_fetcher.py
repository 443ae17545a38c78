import feedparser
import httpx
import logging
from typing import Any, List, Optional

from newshub.core.config import settings
from newshub.schemas.feed_item import RawFeedItem

logger = logging.getLogger(__name__)

FEED_ACCEPT_HEADER = (
    "application/rss+xml, application/atom+xml, "
    "application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5"
)


class FeedFetchError(Exception):
    """A publication's feed could not be retrieved."""


class FeedParseError(FeedFetchError):
    """The feed body was retrieved but is not a parseable RSS/Atom document."""


def _plain(value: Any) -> Any:
    """Convert feedparser dicts (and lists of them) into plain dicts."""
    if isinstance(value, dict):
        return {key: _plain(val) for key, val in value.items()}
    if isinstance(value, list):
        return [_plain(val) for val in value]
    return value


def entry_to_item(entry: dict) -> RawFeedItem:
    """Map one feedparser entry onto the fields the extractor understands."""
    contents = [
        c.get("value", "")
        for c in entry.get("content") or []
        if isinstance(c, dict) and c.get("value")
    ]
    links = [
        _plain(link)
        for link in entry.get("links") or []
        if isinstance(link, dict) and link.get("rel", "alternate") == "alternate"
    ]

    return RawFeedItem(
        title=entry.get("title"),
        link=entry.get("link"),
        links=links or None,
        orig_link=entry.get("feedburner_origlink"),
        guid=entry.get("id"),
        published=entry.get("published") or entry.get("updated"),
        published_parsed=entry.get("published_parsed") or entry.get("updated_parsed"),
        content=max(contents, key=len) if contents else None,
        summary=entry.get("summary"),
        excerpt=entry.get("excerpt"),
        author=entry.get("author") or _plain(entry.get("author_detail")),
        enclosure=_plain(entry.get("enclosures")) or None,
        media_content=_plain(entry.get("media_content")) or None,
        media_thumbnail=_plain(entry.get("media_thumbnail")) or None,
        image=_plain(entry.get("image")) or None,
    )


def parse_feed(body, response_headers: Optional[dict] = None) -> List[RawFeedItem]:
    """
    Parse an RSS/Atom document into raw feed items.

    Raises FeedParseError when the body is not recognisable as a feed at all.
    Entries that cannot be converted are dropped.
    """
    parsed = feedparser.parse(body, response_headers=response_headers or {})

    if not parsed.get("version") and not parsed.entries:
        reason = parsed.get("bozo_exception")
        raise FeedParseError(
            f"Unparseable feed: {reason}" if reason else "Unrecognized feed format"
        )

    if parsed.get("bozo"):
        logger.debug(f"Feed parsed with recoverable errors: {parsed.get('bozo_exception')}")

    items = []
    for entry in parsed.entries:
        try:
            items.append(entry_to_item(entry))
        except Exception as e:
            logger.debug(f"Dropping malformed feed entry: {str(e)}")
    return items


class FeedFetcher:
    """Fetches a feed URL over HTTP and parses it into raw items."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ):
        self.client = client
        self.timeout = timeout if timeout is not None else settings.FEED_REQUEST_TIMEOUT
        self.user_agent = user_agent or settings.FEED_USER_AGENT

    @property
    def headers(self) -> dict:
        return {"User-Agent": self.user_agent, "Accept": FEED_ACCEPT_HEADER}

    async def fetch(self, feed_url: str) -> List[RawFeedItem]:
        """Fetch and parse one feed. Raises FeedFetchError on any failure."""
        if self.client is not None:
            response = await self._get(self.client, feed_url)
        else:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True
            ) as client:
                response = await self._get(client, feed_url)

        items = parse_feed(
            response.content,
            response_headers={
                "content-type": response.headers.get("content-type", ""),
                # Base for relative item links, after redirects
                "content-location": str(response.url),
            },
        )
        logger.debug(f"Fetched {len(items)} items from {feed_url}")
        return items

    async def _get(self, client: httpx.AsyncClient, feed_url: str) -> httpx.Response:
        try:
            response = await client.get(
                feed_url,
                headers=self.headers,
                timeout=self.timeout,
                follow_redirects=True,
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FeedFetchError(
                f"HTTP {status} {e.response.reason_phrase} fetching {feed_url}"
            ) from e
        except httpx.TimeoutException as e:
            raise FeedFetchError(
                f"Timed out after {self.timeout:g}s fetching {feed_url}"
            ) from e
        except httpx.RequestError as e:
            raise FeedFetchError(f"Request failed for {feed_url}: {str(e)}") from e
