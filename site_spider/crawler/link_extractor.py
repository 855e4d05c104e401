# site_spider/crawler/link_extractor.py
"""
Link extraction for SiteSpider.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_spider.logger import logger

_FOLLOWED_SCHEMES = ("http", "https")


def extract_links(html: str, page_url: str) -> List[str]:
    """
    Return the absolute URL of every ``<a href>`` in *html*, in document order.

    Relative hrefs are resolved against *page_url*. Same-page anchors
    (``#...``) and non-HTTP(S) targets (mailto:, javascript:, tel:, ...) are
    ignored. Hrefs that cannot be resolved are dropped.
    Both internal and external links are returned; the crawler classifies them.
    """
    soup = BeautifulSoup(html, "html.parser")
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.startswith("#"):
            continue
        try:
            absolute = urljoin(page_url, raw)
            scheme = urlsplit(absolute).scheme
        except ValueError as exc:
            logger.debug("Unparsable href %r on %s: %s", raw, page_url, exc)
            continue
        if scheme.lower() in _FOLLOWED_SCHEMES:
            links.append(absolute)
    return links
