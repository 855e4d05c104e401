# site_spider/crawler/fetcher.py
"""
Fetcher module: the capability the spider crawls through, and its aiohttp
implementation with retry/backoff and timeout.
"""
from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Optional, Protocol, Sequence

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from site_spider.config import SpiderConfig
from site_spider.crawler.link_extractor import extract_links
from site_spider.crawler.models import FetchResult, ResponseInfo
from site_spider.logger import logger

__all__ = ("Fetcher", "HttpFetcher", "RETRY_STATUS")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
_HTML_TYPES = ("text/html", "application/xhtml+xml")


class Fetcher(Protocol):
    """What the spider needs from the network.

    Implementations never raise for a failed request: the failure is
    reported in the returned :class:`ResponseInfo` instead.
    """

    async def fetch(self, url: str) -> FetchResult:
        """GET *url*; return its body, status and absolute outbound links."""
        ...

    async def check(self, url: str) -> ResponseInfo:
        """Existence check (HEAD) for a link outside the site."""
        ...

    async def fetch_robots(self, url: str) -> Optional[str]:
        """Body of the robots.txt at *url*, or None when unavailable."""
        ...


class _RetryableStatus(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"retryable status {status}")
        self.status = status


class HttpFetcher:
    """Handles HTTP fetching with retries/backoff and timeout.

    Use as an async context manager, or pass an existing ``session``::

        async with HttpFetcher(config) as fetcher:
            result = await fetcher.fetch("https://example.com/")
    """

    def __init__(
        self,
        config: SpiderConfig,
        session: Optional[ClientSession] = None,
        *,
        retry_status: Sequence[int] = RETRY_STATUS,
        backoff: float = 1.0,
    ) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._retry_status = retry_status
        self._backoff = backoff

    async def __aenter__(self) -> HttpFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _require_session(self) -> ClientSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    async def fetch(self, url: str) -> FetchResult:
        try:
            return await self._fetch_with_retries(url)
        except asyncio.TimeoutError:
            logger.warning("Timed out fetching %s", url)
            return FetchResult(response=ResponseInfo(error=f"{url}: timed out"))
        except ClientError as exc:
            logger.warning("Failed %s: %s", url, exc)
            return FetchResult(response=ResponseInfo(error=f"{url}: {str(exc) or type(exc).__name__}"))

    async def _fetch_with_retries(self, url: str) -> FetchResult:
        session = self._require_session()
        attempts = 0
        while True:
            try:
                async with session.get(url) as resp:
                    if resp.status in self._retry_status and attempts < self.config.retry_times:
                        raise _RetryableStatus(resp.status)
                    return await self._read_page(url, resp)
            except asyncio.TimeoutError:
                # no retry on timeout
                raise
            except (ClientError, _RetryableStatus) as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    raise
                delay = min(self._backoff * 2 ** (attempts - 1), 60)
                logger.debug(
                    "Retry %d/%d for %s after %.2f s (%s)",
                    attempts, self.config.retry_times, url, delay, exc,
                )
                await asyncio.sleep(delay)

    async def _read_page(self, url: str, resp: ClientResponse) -> FetchResult:
        info = ResponseInfo(status=f"{resp.status} {resp.reason or ''}".strip(), status_code=resp.status)
        if not 200 <= resp.status < 300:
            return FetchResult(response=replace(info, error=f"{url}: {info.status}"))
        if resp.content_type not in _HTML_TYPES:
            # recorded, but there is nothing to follow
            return FetchResult(response=info)
        body = await resp.text(errors="replace")
        if not body.strip():
            return FetchResult(response=replace(info, error=f"{url}: nothing in body"))
        return FetchResult(body=body, response=info, links=extract_links(body, str(resp.url)))

    async def check(self, url: str) -> ResponseInfo:
        session = self._require_session()
        try:
            async with session.head(url, allow_redirects=True) as resp:
                return ResponseInfo(
                    status=f"{resp.status} {resp.reason or ''}".strip(), status_code=resp.status
                )
        except asyncio.TimeoutError:
            return ResponseInfo(error=f"{url}: timed out")
        except ClientError as exc:
            return ResponseInfo(error=f"{url}: {str(exc) or type(exc).__name__}")

    async def fetch_robots(self, url: str) -> Optional[str]:
        session = self._require_session()
        try:
            async with session.get(url) as resp:
                if resp.status == 200:
                    return await resp.text(errors="replace")
                logger.debug("robots.txt %s -> HTTP %s", url, resp.status)
                return None
        except (ClientError, asyncio.TimeoutError) as exc:
            logger.warning("Error loading robots.txt: %s", exc)
            return None
