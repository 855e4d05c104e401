# site_spider/crawler/store.py
"""
Result store: page records and external links collected by a crawl.
"""
from __future__ import annotations

import threading
from typing import Dict, List, Optional, Set, Tuple

from site_spider.crawler.models import Page, ResponseInfo


class ResultStore:
    """Holds everything the reporting layer reads after (or during) a crawl.

    Pages are inserted once per URL and never replaced; external links start
    with an empty :class:`ResponseInfo` that is filled in by a HEAD check.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pages: Dict[str, Page] = {}
        self._external_hosts: Set[str] = set()
        self._external_links: Dict[str, ResponseInfo] = {}
        self._checked: Set[str] = set()

    # pages ------------------------------------------------------------------

    def add_page(self, page: Page) -> bool:
        """Insert *page*; returns False (and keeps the first) on a repeat URL."""
        with self._lock:
            if page.url in self._pages:
                return False
            self._pages[page.url] = page
            return True

    def page(self, url: str) -> Optional[Page]:
        with self._lock:
            return self._pages.get(url)

    def pages(self) -> List[Page]:
        """Pages in insertion order, which is BFS order for a crawl."""
        with self._lock:
            return list(self._pages.values())

    def page_count(self) -> int:
        with self._lock:
            return len(self._pages)

    # external links ---------------------------------------------------------

    def add_external(self, host: str, url: str) -> Tuple[bool, bool]:
        """Register an external host/link; returns (new_host, new_link)."""
        with self._lock:
            new_host = host not in self._external_hosts
            if new_host:
                self._external_hosts.add(host)
            new_link = url not in self._external_links
            if new_link:
                self._external_links[url] = ResponseInfo()
            return new_host, new_link

    def claim_external_check(self, url: str) -> bool:
        """True for the first caller wanting to HEAD-check *url*."""
        with self._lock:
            if url in self._checked or not self._external_links.get(url, ResponseInfo()).is_empty:
                return False
            self._checked.add(url)
            return True

    def record_external(self, url: str, response: ResponseInfo) -> None:
        with self._lock:
            self._external_links[url] = response

    def external_response(self, url: str) -> Optional[ResponseInfo]:
        with self._lock:
            return self._external_links.get(url)

    def external_hosts(self) -> List[str]:
        with self._lock:
            return sorted(self._external_hosts)

    def external_links(self) -> List[str]:
        with self._lock:
            return sorted(self._external_links)

    def external_counts(self) -> Tuple[int, int]:
        """(links, hosts)"""
        with self._lock:
            return len(self._external_links), len(self._external_hosts)
