"""
Best-effort full-content extraction from an article's own web page.

Optional enhancement on top of feed-supplied content, toggled by
FULL_CONTENT_EXTRACTION. Extraction tries trafilatura first and falls back
to readability. Any failure returns None and the caller keeps the feed content.
"""

import httpx
import logging
import trafilatura
from typing import Dict, Optional
from lxml import html as lxml_html
from readability import Document

from newshub.core.config import settings
from newshub.services import text_normalizer

logger = logging.getLogger(__name__)


def _with_trafilatura(html: str, url: Optional[str]) -> Optional[str]:
    return trafilatura.extract(
        html,
        url=url,
        include_comments=False,
        include_tables=False,
    )


def _with_readability(html: str) -> Optional[str]:
    summary_html = Document(html).summary()
    text = lxml_html.fromstring(summary_html).text_content()
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return "\n".join(lines) if lines else None


def extract_main_text(html: str, url: Optional[str] = None) -> Dict[str, Optional[str]]:
    """
    Pull title, author and main text out of an article page.

    Order:
    1. trafilatura
    2. readability-lxml
    """
    content = None
    try:
        content = _with_trafilatura(html, url)
    except Exception as e:
        logger.warning(f"trafilatura failed for {url}: {str(e)}")

    if not content:
        try:
            content = _with_readability(html)
        except Exception as e:
            logger.warning(f"readability failed for {url}: {str(e)}")

    title = author = None
    metadata = trafilatura.extract_metadata(html, default_url=url)
    if metadata is not None:
        title = text_normalizer.clean(metadata.title) or None
        author = text_normalizer.clean(metadata.author) or None

    return {"title": title, "content": content or "", "author": author}


class ArticleContentExtractor:
    """Fetches an article page and extracts its main text."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        min_length: Optional[int] = None,
    ):
        self.client = client
        self.timeout = timeout if timeout is not None else settings.FULL_CONTENT_TIMEOUT
        self.min_length = (
            min_length if min_length is not None else settings.FULL_CONTENT_MIN_LENGTH
        )

    async def extract(self, url: str) -> Optional[Dict[str, Optional[str]]]:
        try:
            if self.client is not None:
                html = await self._get(self.client, url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    html = await self._get(client, url)

            extracted = extract_main_text(html, url)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to extract full content from {url}: {str(e)}")
            return None
        except Exception as e:
            logger.warning(f"Could not parse article page {url}: {str(e)}")
            return None

        if len(extracted["content"] or "") < self.min_length:
            logger.debug(f"Extracted content too short or empty from {url}")
            return None

        logger.debug(f"Extracted {len(extracted['content'])} characters from {url}")
        return extracted

    async def _get(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(
            url,
            headers={"User-Agent": f"Mozilla/5.0 (compatible; {settings.FEED_USER_AGENT})"},
            timeout=self.timeout,
            follow_redirects=True,
        )
        response.raise_for_status()
        return response.text
