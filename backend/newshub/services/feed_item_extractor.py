"""Turns one raw feed item into a normalized article record."""

import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Optional

from newshub.schemas.article import ArticleCreate
from newshub.schemas.feed_item import RawFeedItem
from newshub.services import text_normalizer
from newshub.services.media_extractor import extract_image
from newshub.services.topic_tagger import TopicTagger
from newshub.services.url_canonicalizer import canonicalize

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in ("href", "name", "value"):
            if isinstance(value.get(key), str):
                return value[key]
    return ""


def resolve_link(item: RawFeedItem) -> Optional[str]:
    """Pick the article link: origin link, then primary link, then alternates."""
    link = _as_text(item.orig_link).strip()
    if link:
        return link

    link = _as_text(item.link).strip()
    if link:
        return link

    if isinstance(item.links, list):
        for alternate in item.links:
            link = _as_text(alternate).strip()
            if link:
                return link
    return None


def parse_published_date(item: RawFeedItem) -> Optional[datetime]:
    """Parse the item's publish date into an aware UTC datetime."""
    parsed = item.published_parsed
    if isinstance(parsed, datetime):
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    if isinstance(parsed, time.struct_time):
        try:
            return datetime(*parsed[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            pass

    date_string = (item.published or "").strip()
    if not date_string:
        return None

    try:
        result = parsedate_to_datetime(date_string)
    except (TypeError, ValueError):
        try:
            result = datetime.fromisoformat(date_string.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Could not parse date: {date_string}")
            return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result.astimezone(timezone.utc)


class FeedItemExtractor:
    """Builds ``ArticleCreate`` records from ``RawFeedItem`` entries.

    Pure transformation: no network or database access. Items without a
    title or a resolvable link are skipped by returning None.
    """

    def __init__(
        self,
        tagger: Optional[TopicTagger] = None,
        summary_max_length: int = 300,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.tagger = tagger or TopicTagger()
        self.summary_max_length = summary_max_length
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def extract(self, item: RawFeedItem, publication_id: int) -> Optional[ArticleCreate]:
        title = text_normalizer.clean(item.title)
        link = resolve_link(item)
        if not title or not link:
            return None

        url = canonicalize(link)

        content = self._pick_content(item)
        summary = text_normalizer.clean(item.summary or item.excerpt)
        if not summary or summary == content:
            summary = text_normalizer.summarize(content, self.summary_max_length)

        author = text_normalizer.clean(_as_text(item.creator) or _as_text(item.author))
        words = text_normalizer.word_count(content)

        try:
            tags = self.tagger.tag(title, content, summary)
        except Exception as e:
            logger.warning(f"Tagging failed for {title}: {str(e)}")
            tags = []

        guid = _as_text(item.guid).strip() or url

        return ArticleCreate(
            title=title,
            content=content,
            summary=summary,
            url=url,
            guid=guid,
            author=author or None,
            published_date=parse_published_date(item) or self.clock(),
            publication_id=publication_id,
            image_url=extract_image(item),
            word_count=words,
            reading_time=text_normalizer.reading_time(words),
            tags=tags,
        )

    def _pick_content(self, item: RawFeedItem) -> str:
        """Cleaned text of the most complete content field."""
        best = ""
        for raw in (
            item.content_encoded,
            item.content,
            item.content_snippet,
            item.summary,
        ):
            candidate = text_normalizer.clean(raw)
            if len(candidate) > len(best):
                best = candidate
        return best
