# File: site_spider/utils.py
"""site_spider.utils: URL helpers shared by the crawler modules."""

from __future__ import annotations

from typing import Optional, Sequence
from urllib.parse import urlsplit, urlunsplit

from site_spider.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "parse_link",
)


def normalize_url(url: str) -> str:
    """Canonical registry key: lower-case scheme and host, drop the fragment.

    An empty path becomes ``/``; otherwise path and query are kept as-is, so
    ``/pkg`` and ``/pkg/`` stay distinct pages.
    Raises ValueError for URLs urllib cannot split (e.g. a broken IPv6 host).
    """
    parts = urlsplit(url)
    normalized = urlunsplit(
        (
            parts.scheme.lower(),
            parts.netloc.lower(),
            parts.path or ("/" if parts.netloc else ""),
            parts.query,
            "",
        )
    )
    return normalized


def parse_link(url: str) -> Optional[str]:
    """Normalize a discovered link, or return None if it is malformed."""
    try:
        parts = urlsplit(url.strip())
        # touching .port validates it
        parts.port
    except ValueError as exc:
        logger.debug("Dropping malformed link %r: %s", url, exc)
        return None
    if not parts.scheme or not parts.netloc:
        logger.debug("Dropping non-absolute link %r", url)
        return None
    return normalize_url(url.strip())
