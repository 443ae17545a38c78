"""Image URL extraction from the inconsistent media fields of feed items."""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def _url_of(value: Any) -> Optional[str]:
    """Decode one media value: a URL string or a mapping exposing url/href."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, dict):
        for key in ("url", "href"):
            candidate = value.get(key)
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        # Attribute bag: {"$": {"url": ...}}
        attrs = value.get("$")
        if isinstance(attrs, dict):
            return _url_of(attrs)
    return None


def _from_enclosure(enclosure: Any) -> Optional[str]:
    candidates = enclosure if isinstance(enclosure, list) else [enclosure]
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        media_type = candidate.get("type")
        if isinstance(media_type, str) and media_type.lower().startswith("image/"):
            url = _url_of(candidate)
            if url:
                return url
    return None


def _from_media_list(media: Any) -> Optional[str]:
    if isinstance(media, list):
        for element in media:
            url = _url_of(element)
            if url:
                return url
        return None
    return _url_of(media)


def extract_image(item: Any) -> Optional[str]:
    """
    Return the best image URL for a feed item, or None.

    Precedence: image enclosure, media:content, media:thumbnail, then a
    generic image field. Malformed media metadata never raises.
    """
    try:
        for value, decode in (
            (getattr(item, "enclosure", None), _from_enclosure),
            (getattr(item, "media_content", None), _from_media_list),
            (getattr(item, "media_thumbnail", None), _from_media_list),
            (getattr(item, "image", None), _url_of),
        ):
            if not value:
                continue
            url = decode(value)
            if url:
                return url
    except Exception as e:
        logger.warning(f"Error extracting media for item: {str(e)}")
    return None
