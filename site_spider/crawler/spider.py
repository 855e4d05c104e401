# site_spider/crawler/spider.py
"""
Breadth-first crawl of a single site.

The spider starts from a seed URL, fetches every page reachable inside the
site boundary (the seed's host and path prefix, optionally its scheme) and
records each page's body, links and fetch outcome. Links that leave the host
are noted and optionally HEAD-checked, but never followed.

Pages are processed one BFS layer at a time: every page at distance *d* is
fetched or skipped before any page at *d + 1* is started. Within a layer
``config.workers`` coroutines share the work; with one worker pages are
fetched strictly in discovery order.
"""
from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Deque, Dict, List, Optional

from site_spider.config import SpiderConfig
from site_spider.crawler.admission import AdmissionPolicy
from site_spider.crawler.external import ExternalClassifier
from site_spider.crawler.fetcher import Fetcher, HttpFetcher
from site_spider.crawler.models import UNLIMITED_DEPTH, Page, ResponseInfo, Site, WorkItem
from site_spider.crawler.ratelimit import RateLimiter
from site_spider.crawler.registry import URLRegistry
from site_spider.crawler.robots import RobotsGate
from site_spider.crawler.store import ResultStore
from site_spider.logger import logger
from site_spider.utils import normalize_url, parse_link

__all__ = ("Spider",)


class Spider:
    """Crawls one site and keeps everything it learned for reporting.

    ``start`` is both the first page fetched and the crawl restriction.
    Raises :class:`~site_spider.errors.InvalidSeedURL` if it is empty or has
    no scheme/host.
    """

    def __init__(
        self,
        start: str,
        config: Optional[SpiderConfig] = None,
        *,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.site = Site.from_url(start)
        self.config = config if config is not None else SpiderConfig(base_url=start)
        self.max_depth = UNLIMITED_DEPTH
        self.registry = URLRegistry()
        self.store = ResultStore()
        self.external = ExternalClassifier(self.site, self.store)
        self.rate_limiter = rate_limiter or RateLimiter(self.config.fetch_interval, self.config.jitter)
        self._custom_rate = rate_limiter is not None
        self.admission = AdmissionPolicy(
            self.site,
            self.registry,
            RobotsGate(),
            restrict_to_scheme=self.config.restrict_to_scheme,
            respect_robots=self.config.respect_robots,
        )
        self._robots_loaded = False
        self._queue: Deque[WorkItem] = deque()

    # ------------------------------------------------------------------ #
    # Crawl                                                              #
    # ------------------------------------------------------------------ #

    async def crawl(self, max_depth: int = UNLIMITED_DEPTH, fetcher: Optional[Fetcher] = None) -> str:
        """Crawl up to *max_depth* (-1: no limit) and return a summary line.

        Without a *fetcher* an :class:`HttpFetcher` built from the config is
        used for the duration of the crawl.
        """
        if fetcher is None:
            async with HttpFetcher(self.config) as http:
                return await self.crawl(max_depth, http)

        self.max_depth = max_depth
        logger.info("Crawl started: %s (max depth %s)", self.site.url, max_depth)
        start = time.monotonic()
        if self.config.respect_robots and not self._robots_loaded:
            await self._load_robots(fetcher)
        self._queue.append(WorkItem(normalize_url(self.site.url)))
        await self._crawl(fetcher)
        message = self.summary()
        logger.info("%s (%.2f s)", message, time.monotonic() - start)
        return message

    async def _crawl(self, fetcher: Fetcher) -> None:
        while self._queue:
            distance = self._queue[0].distance
            # FIFO order: nothing shallower can follow, so the crawl is over
            if self.max_depth != UNLIMITED_DEPTH and distance > self.max_depth:
                logger.debug("Depth %d exceeds max depth %d, stopping", distance, self.max_depth)
                self._queue.clear()
                return
            layer: asyncio.Queue[WorkItem] = asyncio.Queue()
            while self._queue and self._queue[0].distance == distance:
                layer.put_nowait(self._queue.popleft())
            logger.debug(
                "Depth %d: %d queued URLs (%d found, %d pages so far)",
                distance, layer.qsize(), self.registry.found_count(), self.store.page_count(),
            )
            children: List[WorkItem] = []
            workers = [
                asyncio.create_task(self._worker(fetcher, layer, children))
                for _ in range(min(self.config.workers, layer.qsize()))
            ]
            try:
                await asyncio.gather(*workers)
            except BaseException:
                for w in workers:
                    w.cancel()
                raise
            self._queue.extend(children)

    async def _worker(
        self, fetcher: Fetcher, layer: asyncio.Queue[WorkItem], children: List[WorkItem]
    ) -> None:
        while True:
            try:
                item = layer.get_nowait()
            except asyncio.QueueEmpty:
                return
            children.extend(await self._process(fetcher, item))

    async def _process(self, fetcher: Fetcher, item: WorkItem) -> List[WorkItem]:
        """Handle one work item; returns the children to queue."""
        url = item.url
        if self.external.is_external(url):
            if self.config.check_external_links:
                await self._check_external(fetcher, url)
            return []
        if self.admission.should_skip(url):
            return []
        if not self.registry.try_admit_found(url):
            # another worker claimed it first
            return []

        result = await fetcher.fetch(url)
        self.registry.record_fetch(url, result.response)
        children: List[WorkItem] = []
        if result.response.error:
            logger.warning("Fetch failed: %s", result.response.error)
        else:
            self.store.add_page(
                Page(url=url, distance=item.distance, body=result.body, links=tuple(result.links))
            )
            for link in result.links:
                normalized = parse_link(link)
                if normalized is not None:
                    children.append(item.child(normalized))
            logger.debug("Fetched %s (depth %d, %d links)", url, item.distance, len(result.links))

        await self.rate_limiter.pause()
        return children

    async def _check_external(self, fetcher: Fetcher, url: str) -> None:
        if not self.store.claim_external_check(url):
            return
        response = await fetcher.check(url)
        self.store.record_external(url, response)
        if not response.ok:
            logger.info("External link check failed: %s", response.error or f"{url}: {response.status}")

    async def _load_robots(self, fetcher: Fetcher) -> None:
        """Populate the robots gate once; any failure leaves it allow-all."""
        self._robots_loaded = True
        text = await fetcher.fetch_robots(self.site.robots_url)
        if text is None:
            logger.debug("No robots.txt for %s, everything allowed", self.site.host)
            return
        gate = RobotsGate.from_text(text, self.config.robot_user_agent)
        if not gate.loaded:
            logger.debug("robots.txt has no group for %s", self.config.robot_user_agent)
            return
        self.admission.robots = gate
        delay = gate.crawl_delay
        if not delay or self._custom_rate or delay <= self.rate_limiter.interval:
            return
        if delay > self.config.max_crawl_delay:
            logger.warning(
                "robots.txt Crawl-delay of %.2f s capped to %.2f s", delay, self.config.max_crawl_delay
            )
            delay = max(self.config.max_crawl_delay, self.rate_limiter.interval)
        logger.info("Honouring robots.txt Crawl-delay of %.2f s", delay)
        self.rate_limiter = RateLimiter(delay, self.rate_limiter.jitter)

    # ------------------------------------------------------------------ #
    # Reporting                                                          #
    # ------------------------------------------------------------------ #

    def summary(self) -> str:
        links, hosts = self.store.external_counts()
        return (
            f"{len(self.registry.fetched())} pages were processed; {links} external links "
            f"linking to {hosts} external hosts were not processed"
        )

    def pages(self) -> List[Page]:
        return self.store.pages()

    def page(self, url: str) -> Optional[Page]:
        return self.store.page(url)

    def fetched(self) -> Dict[str, ResponseInfo]:
        return self.registry.fetched()

    def response(self, url: str) -> Optional[ResponseInfo]:
        """Outcome of the fetch of *url*, or None if it was never fetched."""
        return self.registry.response_for(url)

    def skipped(self) -> List[str]:
        return self.registry.skipped()

    def external_hosts(self) -> List[str]:
        """Hosts outside the site that were linked to, sorted."""
        return self.store.external_hosts()

    def external_links(self) -> List[str]:
        """Links outside the site, sorted."""
        return self.store.external_links()

    def external_response(self, url: str) -> Optional[ResponseInfo]:
        return self.store.external_response(url)
