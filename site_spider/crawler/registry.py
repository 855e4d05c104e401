# site_spider/crawler/registry.py
"""
URL registry: which URLs were admitted, fetched or skipped during a crawl.
"""
from __future__ import annotations

import threading
from typing import Dict, List, Optional, Set
from urllib.parse import urlsplit

from site_spider.crawler.models import ResponseInfo


class URLRegistry:
    """Thread-safe bookkeeping of crawl state, keyed by normalized URL.

    ``found``   – URLs admitted for fetching; guarantees at-most-once fetch.
    ``fetched`` – URL → :class:`ResponseInfo` of the fetch attempt.
    ``skipped`` – URL paths rejected by the admission policy.

    The lock is held only for the dictionary/set operation itself, never
    across a fetch.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._found: Set[str] = set()
        self._fetched: Dict[str, ResponseInfo] = {}
        self._skipped: Set[str] = set()

    def try_admit_found(self, url: str) -> bool:
        """Claim *url* for fetching. True only for the first caller."""
        with self._lock:
            if url in self._found:
                return False
            self._found.add(url)
            return True

    def is_found(self, url: str) -> bool:
        with self._lock:
            return url in self._found

    def record_fetch(self, url: str, response: ResponseInfo) -> None:
        with self._lock:
            self._fetched[url] = response

    def record_skip(self, url: str) -> None:
        path = urlsplit(url).path
        with self._lock:
            self._skipped.add(path)

    def response_for(self, url: str) -> Optional[ResponseInfo]:
        with self._lock:
            return self._fetched.get(url)

    def fetched(self) -> Dict[str, ResponseInfo]:
        with self._lock:
            return dict(self._fetched)

    def skipped(self) -> List[str]:
        with self._lock:
            return sorted(self._skipped)

    def found_count(self) -> int:
        with self._lock:
            return len(self._found)
