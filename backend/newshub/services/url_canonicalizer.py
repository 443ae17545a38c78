"""
URL canonicalization for article deduplication.

Articles are unique per (canonical url, publication), so every rule here is
part of the dedup contract: two links that canonicalize to the same string
are the same article.
"""

import logging
import re
from urllib.parse import urlsplit, urlunsplit, unquote_plus

logger = logging.getLogger(__name__)

# Query parameters that only carry campaign/referrer tracking.
# Any parameter starting with "utm_" is removed as well.
TRACKING_PARAMS = frozenset(
    name.lower()
    for name in (
        "gclid",
        "dclid",
        "fbclid",
        "msclkid",
        "yclid",
        "mc_cid",
        "mc_eid",
        "ref",
        "ref_src",
        "igshid",
        "mkt_tok",
        "_hsenc",
        "_hsmi",
        "s",
        "ncid",
        "cmp",
        "cmpid",
        "ito",
        "spm",
        "sr_share",
        "WT.mc_id",
        "WT.mc_t",
    )
)

_AMP_SUFFIX_RE = re.compile(r"/amp/?$", re.IGNORECASE)


def is_tracking_param(name: str) -> bool:
    key = name.lower()
    return key.startswith("utm_") or key in TRACKING_PARAMS


def _strip_tracking(query: str) -> str:
    # Filter raw "k=v" segments so kept parameters stay byte-identical
    kept = []
    for segment in query.split("&"):
        if not segment:
            continue
        name = unquote_plus(segment.split("=", 1)[0])
        if not is_tracking_param(name):
            kept.append(segment)
    return "&".join(kept)


def _normalize_netloc(netloc: str) -> str:
    if "@" in netloc:
        userinfo, host = netloc.rsplit("@", 1)
        return f"{userinfo}@{host.lower()}"
    return netloc.lower()


def _normalize_path(path: str) -> str:
    path = _AMP_SUFFIX_RE.sub("/", path)
    path = path.rstrip("/")
    return path or "/"


def canonicalize(url: str) -> str:
    """
    Return the deduplication-stable form of an article URL.

    Unparseable or relative input is returned unchanged.
    """
    if not url:
        return url

    try:
        parts = urlsplit(url.strip())
    except ValueError:
        logger.debug(f"Could not parse URL, keeping as-is: {url}")
        return url

    if not parts.scheme or not parts.netloc:
        return url

    return urlunsplit(
        (
            parts.scheme.lower(),
            _normalize_netloc(parts.netloc),
            _normalize_path(parts.path),
            _strip_tracking(parts.query),
            "",
        )
    )
