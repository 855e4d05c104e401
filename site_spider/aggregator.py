# File: site_spider/aggregator.py
"""site_spider.aggregator: turns a finished crawl into a serialisable report."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import List, Optional, TypedDict

from site_spider.crawler.models import ResponseInfo
from site_spider.crawler.spider import Spider


class PageInfo(TypedDict, total=False):
    """One crawled (or attempted) page."""

    url: str
    distance: Optional[int]
    status: str
    status_code: int
    error: Optional[str]
    links: List[str]


class ExternalLinkInfo(TypedDict, total=False):
    """A link leaving the site, with its HEAD-check outcome if one was made."""

    url: str
    status: str
    status_code: int
    error: Optional[str]


@dataclass(slots=True)
class CrawlReport:
    """Everything a crawl found, ready for the JSON/HTML renderers."""

    site: str = ""
    summary: str = ""
    pages: List[PageInfo] = field(default_factory=list)
    external_hosts: List[str] = field(default_factory=list)
    external_links: List[ExternalLinkInfo] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    complete: bool = True

    def to_dict(self) -> dict:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def _aggregate_pages(spider: Spider) -> List[PageInfo]:
    """Fetched pages first (BFS order), then attempts that failed."""
    pages: List[PageInfo] = []
    recorded = set()
    for page in spider.pages():
        response = spider.response(page.url) or ResponseInfo()
        recorded.add(page.url)
        pages.append(
            {
                "url": page.url,
                "distance": page.distance,
                "status": response.status,
                "status_code": response.status_code,
                "error": response.error,
                "links": list(page.links),
            }
        )
    fetched = spider.fetched()
    for url in sorted(set(fetched) - recorded):
        response = fetched[url]
        pages.append(
            {
                "url": url,
                "distance": None,
                "status": response.status,
                "status_code": response.status_code,
                "error": response.error,
                "links": [],
            }
        )
    return pages


def _aggregate_external(spider: Spider) -> List[ExternalLinkInfo]:
    links: List[ExternalLinkInfo] = []
    for url in spider.external_links():
        response = spider.external_response(url) or ResponseInfo()
        links.append(
            {
                "url": url,
                "status": response.status,
                "status_code": response.status_code,
                "error": response.error,
            }
        )
    return links


def aggregate_results(spider: Spider, summary: str = "", *, complete: bool = True) -> CrawlReport:
    """Collect all parts of the report from *spider*.

    ``complete=False`` marks a crawl that was cut short; the spider's
    tables then hold whatever was gathered up to that point.
    """
    return CrawlReport(
        site=spider.site.url,
        summary=summary or spider.summary(),
        pages=_aggregate_pages(spider),
        external_hosts=spider.external_hosts(),
        external_links=_aggregate_external(spider),
        skipped=spider.skipped(),
        complete=complete,
    )
