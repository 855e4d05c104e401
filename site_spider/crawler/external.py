# site_spider/crawler/external.py
"""
Classifies discovered URLs as inside or outside the crawled host.
"""
from __future__ import annotations

from urllib.parse import urlsplit

from site_spider.crawler.models import Site, host_of
from site_spider.crawler.store import ResultStore
from site_spider.logger import logger


class ExternalClassifier:
    """Host membership test that records external hosts and links as it goes."""

    def __init__(self, site: Site, store: ResultStore) -> None:
        self.site = site
        self.store = store

    def is_external(self, url: str) -> bool:
        host = host_of(urlsplit(url))
        if host == self.site.host:
            return False
        new_host, new_link = self.store.add_external(host, url)
        if new_host:
            logger.debug("New external host: %s", host)
        if new_link:
            logger.debug("External link noted: %s", url)
        return True
