# site_spider/crawler/models.py
"""
Data models for the SiteSpider crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
from urllib.parse import SplitResult, urlsplit

from site_spider.errors import InvalidSeedURL

__all__ = (
    "WorkItem",
    "Page",
    "ResponseInfo",
    "FetchResult",
    "Site",
    "SkipReason",
    "UNLIMITED_DEPTH",
)

#: ``max_depth`` value meaning "crawl the whole site".
UNLIMITED_DEPTH = -1


@dataclass(frozen=True, slots=True)
class WorkItem:
    """A queued (url, distance) pair; distance is the BFS depth from the seed."""

    url: str
    distance: int = 0

    def child(self, url: str) -> WorkItem:
        return WorkItem(url=url, distance=self.distance + 1)


@dataclass(frozen=True, slots=True)
class ResponseInfo:
    """Status and error information from a fetch attempt.

    The all-empty value means the URL has not been fetched yet.
    """

    status: str = ""
    status_code: int = 0
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self == _EMPTY_RESPONSE

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status_code < 300


_EMPTY_RESPONSE = ResponseInfo()


@dataclass(frozen=True, slots=True)
class Page:
    """A fetched page: body plus its immediate children, in document order."""

    url: str
    distance: int
    body: str
    links: Tuple[str, ...] = ()


@dataclass(slots=True)
class FetchResult:
    """What a fetcher hands back for one URL."""

    body: str = ""
    response: ResponseInfo = field(default_factory=ResponseInfo)
    links: List[str] = field(default_factory=list)


class SkipReason(str, Enum):
    """Why the admission policy rejected a candidate URL."""

    DUPLICATE = "duplicate"
    SCHEME = "scheme"
    ROBOTS = "robots"
    OUTSIDE_PATH = "outside_path"


@dataclass(frozen=True, slots=True)
class Site:
    """The crawl boundary derived from the seed URL."""

    url: str
    scheme: str
    host: str
    path: str

    @classmethod
    def from_url(cls, start: str) -> Site:
        if not start:
            raise InvalidSeedURL("the start url cannot be empty")
        try:
            parts = urlsplit(start)
            # touching .port validates it
            parts.port
        except ValueError as exc:
            raise InvalidSeedURL(f"parse {start}: {exc}") from exc
        if not parts.scheme:
            raise InvalidSeedURL(f"parse {start}: missing protocol scheme")
        if parts.scheme.lower() not in ("http", "https"):
            raise InvalidSeedURL(f"parse {start}: unsupported protocol scheme \"{parts.scheme}\"")
        if not parts.netloc:
            raise InvalidSeedURL(f"parse {start}: missing host")
        return cls(
            url=start, scheme=parts.scheme.lower(), host=host_of(parts), path=parts.path or "/"
        )

    @property
    def robots_url(self) -> str:
        return f"{self.scheme}://{self.host}/robots.txt"

    def contains_path(self, path: str) -> bool:
        return path.startswith(self.path)


def host_of(parts: SplitResult) -> str:
    """host[:port] of *parts*, without user info, lower-cased."""
    return parts.netloc.rpartition("@")[2].lower()
