"""Exceptions raised by SiteSpider."""
from __future__ import annotations


class SpiderError(Exception):
    """Base class for errors that stop a crawl from starting."""


class InvalidSeedURL(SpiderError, ValueError):
    """The start URL is empty or cannot be parsed into scheme + host."""


__all__ = ["SpiderError", "InvalidSeedURL"]
