# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from aiohttp import web

from site_spider.config import SpiderConfig
from site_spider.crawler.models import FetchResult, ResponseInfo

#: url -> (body, links); a small slice of golang.org
GOLANG_SITE: Dict[str, Tuple[str, Sequence[str]]] = {
    "http://golang.org/": (
        "The Go Programming Language",
        ["http://golang.org/pkg/", "http://golang.org/cmd/"],
    ),
    "http://golang.org/pkg/": (
        "Packages",
        [
            "http://golang.org/",
            "http://golang.org/cmd/",
            "http://golang.org/pkg/fmt/",
            "http://golang.org/pkg/os/",
        ],
    ),
    "http://golang.org/pkg/fmt/": (
        "Package fmt",
        ["http://golang.org/", "http://golang.org/pkg/"],
    ),
    "http://golang.org/pkg/os/": (
        "Package os",
        ["http://golang.org/", "http://golang.org/pkg/"],
    ),
    "http://golang.org/cmd/": (
        "Commands",
        [
            "http://golang.org/",
            "http://golang.org/pkg/",
            "http://golang.org/cmd/gofmt/",
            "http://golang.org/cmd/pprof/",
        ],
    ),
    "http://golang.org/cmd/gofmt/": (
        "Command gofmt",
        ["http://golang.org/", "http://golang.org/cmd/"],
    ),
    "http://golang.org/cmd/pprof/": (
        "Command pprof",
        ["http://golang.org/", "http://golang.org/cmd/"],
    ),
}


class CannedFetcher:
    """In-memory fetcher: serves a fixed url -> (body, links) mapping."""

    def __init__(
        self,
        pages: Dict[str, Tuple[str, Sequence[str]]],
        robots: Optional[str] = None,
    ) -> None:
        self.pages = pages
        self.robots = robots
        self.calls: List[str] = []
        self.checked: List[str] = []
        self.robots_requests: List[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        if url in self.pages:
            body, links = self.pages[url]
            return FetchResult(body, ResponseInfo("200 OK", 200), list(links))
        return FetchResult(response=ResponseInfo(error=f"not found: {url}"))

    async def check(self, url: str) -> ResponseInfo:
        self.checked.append(url)
        if "broken" in url:
            return ResponseInfo(error=f"{url}: connection refused")
        return ResponseInfo("200 OK", 200)

    async def fetch_robots(self, url: str) -> Optional[str]:
        self.robots_requests.append(url)
        return self.robots


@pytest.fixture()
def golang_fetcher() -> CannedFetcher:
    return CannedFetcher(GOLANG_SITE)


@pytest.fixture()
def fast_config() -> SpiderConfig:
    """Config for golang.org with no politeness delay."""
    return SpiderConfig(
        base_url="http://golang.org/",
        fetch_interval=0,
        jitter=0,
        user_agent="TestAgent/1.0",
        robot_user_agent="TestAgent/1.0",
    )


@pytest.fixture()
def template_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "templates"


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()
