"""site_spider.crawler: the traversal engine (scheduler, admission, bookkeeping)."""
from site_spider.crawler.fetcher import Fetcher, HttpFetcher
from site_spider.crawler.models import (
    UNLIMITED_DEPTH,
    FetchResult,
    Page,
    ResponseInfo,
    Site,
    SkipReason,
    WorkItem,
)
from site_spider.crawler.spider import Spider

__all__ = [
    "Fetcher",
    "FetchResult",
    "HttpFetcher",
    "Page",
    "ResponseInfo",
    "Site",
    "SkipReason",
    "Spider",
    "UNLIMITED_DEPTH",
    "WorkItem",
]
