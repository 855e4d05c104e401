# site_spider/crawler/admission.py
"""
Admission policy: decides whether an internal URL is crawled.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from site_spider.crawler.models import Site, SkipReason
from site_spider.crawler.registry import URLRegistry
from site_spider.crawler.robots import RobotsGate
from site_spider.logger import logger


class AdmissionPolicy:
    """Checks, in order: duplicate, scheme, robots.txt, path prefix.

    The first failing check decides. Scheme, robots and path rejections are
    recorded in the registry's ``skipped`` table; duplicates are not, so a
    fetched URL never also shows up as skipped.
    """

    def __init__(
        self,
        site: Site,
        registry: URLRegistry,
        robots: Optional[RobotsGate] = None,
        *,
        restrict_to_scheme: bool = False,
        respect_robots: bool = True,
    ) -> None:
        self.site = site
        self.registry = registry
        self.robots = robots or RobotsGate()
        self.restrict_to_scheme = restrict_to_scheme
        self.respect_robots = respect_robots

    def evaluate(self, url: str) -> Optional[SkipReason]:
        """Return why *url* must be skipped, or None if it may be crawled."""
        if self.registry.is_found(url):
            return SkipReason.DUPLICATE
        parts = urlsplit(url)
        if self.restrict_to_scheme and parts.scheme.lower() != self.site.scheme:
            reason = SkipReason.SCHEME
        elif self.respect_robots and not self.robots.allowed(parts.path):
            reason = SkipReason.ROBOTS
        elif not self.site.contains_path(parts.path):
            reason = SkipReason.OUTSIDE_PATH
        else:
            return None
        self.registry.record_skip(url)
        logger.debug("Skipping %s (%s)", url, reason.value)
        return reason

    def should_skip(self, url: str) -> bool:
        return self.evaluate(url) is not None
