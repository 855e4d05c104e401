"""
SiteSpider package initializer.
Defines package version and exposes the CLI and the Spider.
"""
__version__ = "0.1.0"

from site_spider.crawler.spider import Spider  # noqa: E402
from site_spider.cli import cli  # noqa: E402

__all__ = ["__version__", "Spider", "cli"]
