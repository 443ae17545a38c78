from pydantic import BaseModel
from typing import Any, Optional


class RawFeedItem(BaseModel):
    """One entry of a parsed feed, before normalization.

    Media and link fields keep whatever shape the feed used (string, dict or
    list of dicts); the extractor is responsible for decoding them.
    """

    title: Optional[str] = None
    link: Any = None  # str or {"href": ...}
    links: Optional[list] = None  # alternate links, [{"href": ..., "rel": ...}]
    orig_link: Optional[str] = None  # feedburner:origLink
    guid: Optional[str] = None
    published: Optional[str] = None
    published_parsed: Any = None  # time.struct_time in UTC, from feedparser

    content: Optional[str] = None
    content_encoded: Optional[str] = None
    content_snippet: Optional[str] = None
    summary: Optional[str] = None
    excerpt: Optional[str] = None

    creator: Any = None
    author: Any = None

    enclosure: Any = None
    media_content: Any = None
    media_thumbnail: Any = None
    image: Any = None
