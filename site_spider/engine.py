# File: site_spider/engine.py
"""site_spider.engine: orchestration layer that runs a crawl and builds the report."""

from __future__ import annotations

import asyncio
from typing import Optional

from site_spider.aggregator import CrawlReport, aggregate_results
from site_spider.config import SpiderConfig, load_config
from site_spider.crawler.fetcher import Fetcher
from site_spider.crawler.spider import Spider
from site_spider.logger import logger

__all__ = ["Engine", "start_crawl"]


async def start_crawl(
    cfg: SpiderConfig,
    fetcher: Optional[Fetcher] = None,
    *,
    timeout: Optional[float] = None,
) -> CrawlReport:
    """
    Crawl ``cfg.base_url`` up to ``cfg.max_depth`` and return the aggregated report.

    Parameters
    ----------
    cfg : SpiderConfig
        Crawl configuration.
    fetcher : Fetcher, optional
        Replaces the aiohttp fetcher (tests use an in-memory one).
    timeout : float, optional
        Seconds before the crawl is cancelled. Whatever was gathered by then
        is still reported, with ``complete`` set to False.
    """
    spider = Spider(str(cfg.base_url), cfg)
    try:
        summary = await asyncio.wait_for(spider.crawl(cfg.max_depth, fetcher), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Crawl did not finish within %s seconds, reporting partial results", timeout)
        return aggregate_results(spider, complete=False)
    return aggregate_results(spider, summary)


class Engine:
    """Facade for the CLI and scripts: load a config, run a crawl, get a report."""

    @staticmethod
    def load_config(path: Optional[str]) -> SpiderConfig:
        """Load the config from YAML/JSON (``configs/default.yaml`` when *path* is None)."""
        return load_config(path)

    def __init__(self, config: SpiderConfig) -> None:
        self.config = config

    def start_crawl(self, timeout: Optional[float] = None) -> CrawlReport:
        """Run the crawl to completion (or *timeout* seconds) and return the report."""
        logger.info("Starting crawl of %s", self.config.base_url)
        try:
            return asyncio.run(start_crawl(self.config, timeout=timeout))
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
