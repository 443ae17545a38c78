"""Text cleanup helpers shared by the feed item extractor."""

import math
import re
from typing import Optional
from bs4 import BeautifulSoup

WORDS_PER_MINUTE = 200
ELLIPSIS = "..."

_WHITESPACE_RE = re.compile(r"\s+")


def strip_markup(text: Optional[str]) -> str:
    """Return the text content of an HTML fragment, entities decoded."""
    if not text:
        return ""
    if "<" not in text and "&" not in text:
        return text
    return BeautifulSoup(text, "html.parser").get_text(" ")


def clean(text: Optional[str]) -> str:
    """Strip markup, collapse whitespace runs to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", strip_markup(text)).strip()


def word_count(text: Optional[str]) -> int:
    cleaned = clean(text)
    if not cleaned:
        return 0
    return len(cleaned.split(" "))


def reading_time(words: int) -> int:
    """Minutes needed to read ``words`` words."""
    return math.ceil(words / WORDS_PER_MINUTE)


def summarize(content: Optional[str], max_length: int = 300) -> str:
    """
    Build a plain-text summary of at most ``max_length`` characters.

    Long text is cut back to the last sentence-ending period when that period
    falls in the second half of the window; otherwise it is hard-truncated
    and an ellipsis is appended.
    """
    text = clean(content)
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_period = truncated.rfind(".")
    if last_period > max_length * 0.5:
        return truncated[: last_period + 1]

    return truncated.rstrip() + ELLIPSIS
