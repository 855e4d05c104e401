# File: tests/test_fetcher.py
# HttpFetcher and full crawls against local aiohttp servers
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from conftest import serve_app
from site_spider.config import SpiderConfig
from site_spider.crawler.fetcher import HttpFetcher
from site_spider.crawler.models import UNLIMITED_DEPTH
from site_spider.crawler.spider import Spider


def make_config(base_url: str, **overrides) -> SpiderConfig:
    values = dict(
        base_url=base_url,
        fetch_interval=0,
        jitter=0,
        timeout=2.0,
        user_agent="TestAgent/1.0",
        robot_user_agent="TestAgent/1.0",
        retry_times=0,
    )
    values.update(overrides)
    return SpiderConfig(**values)


# --------------------------------------------------------------------------- #
#                            Test-server fixtures                             #
# --------------------------------------------------------------------------- #


@pytest_asyncio.fixture
async def test_server(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_root(_):
        return web.Response(
            text=(
                '<a href="/page1">Page1</a>'
                '<a href="docs/">Docs</a>'
                '<a href="http://external.invalid/x">X</a>'
                '<a href="#top">Top</a>'
            ),
            content_type="text/html",
        )

    async def handle_page1(_):
        return web.Response(text='<a href="/private/">Private</a>', content_type="text/html")

    async def handle_docs(_):
        return web.Response(text='<a href="../page1">back</a>', content_type="text/html")

    async def handle_private(_):
        return web.Response(text="<h1>Private</h1>", content_type="text/html")

    async def handle_empty(_):
        return web.Response(text="   ", content_type="text/html")

    async def handle_image(_):
        return web.Response(body=b"\x89PNG", content_type="image/png")

    async def handle_robots(_):
        return web.Response(
            text="User-agent: TestAgent\nDisallow: /private/", content_type="text/plain"
        )

    async def handle_ua(request):
        return web.Response(text=request.headers.get("User-Agent", ""), content_type="text/html")

    app.router.add_get("/", handle_root)
    app.router.add_get("/page1", handle_page1)
    app.router.add_get("/docs/", handle_docs)
    app.router.add_get("/private/", handle_private)
    app.router.add_get("/empty", handle_empty)
    app.router.add_get("/image.png", handle_image)
    app.router.add_get("/robots.txt", handle_robots)
    app.router.add_get("/ua", handle_ua)

    async for url in serve_app(app, unused_tcp_port):
        yield url


# --------------------------------------------------------------------------- #
#                                   Tests                                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_fetch_page_links(test_server: str):
    async with HttpFetcher(make_config(test_server)) as fetcher:
        result = await fetcher.fetch(f"{test_server}/")

    assert result.response.status_code == 200
    assert result.response.status == "200 OK"
    assert result.response.error is None
    assert "Page1" in result.body
    assert result.links == [
        f"{test_server}/page1",
        f"{test_server}/docs/",
        "http://external.invalid/x",
    ]


@pytest.mark.asyncio()
async def test_fetch_sends_user_agent(test_server: str):
    async with HttpFetcher(make_config(test_server)) as fetcher:
        result = await fetcher.fetch(f"{test_server}/ua")
    assert result.body == "TestAgent/1.0"


@pytest.mark.asyncio()
async def test_fetch_404_is_an_error(test_server: str):
    async with HttpFetcher(make_config(test_server)) as fetcher:
        result = await fetcher.fetch(f"{test_server}/missing")

    assert result.response.status_code == 404
    assert result.response.error == f"{test_server}/missing: 404 Not Found"
    assert result.body == ""
    assert result.links == []


@pytest.mark.asyncio()
async def test_fetch_empty_body_is_an_error(test_server: str):
    async with HttpFetcher(make_config(test_server)) as fetcher:
        result = await fetcher.fetch(f"{test_server}/empty")
    assert result.response.error == f"{test_server}/empty: nothing in body"
    assert result.links == []


@pytest.mark.asyncio()
async def test_fetch_non_html_has_no_links(test_server: str):
    async with HttpFetcher(make_config(test_server)) as fetcher:
        result = await fetcher.fetch(f"{test_server}/image.png")
    assert result.response.ok
    assert result.body == ""
    assert result.links == []


@pytest.mark.asyncio()
async def test_fetch_connection_error(unused_tcp_port: int):
    base = f"http://localhost:{unused_tcp_port}"
    async with HttpFetcher(make_config(base)) as fetcher:
        result = await fetcher.fetch(f"{base}/")
        robots = await fetcher.fetch_robots(f"{base}/robots.txt")
        check = await fetcher.check(f"{base}/")

    assert result.response.error
    assert result.links == []
    assert robots is None
    assert check.error


@pytest.mark.asyncio()
async def test_fetch_robots(test_server: str):
    async with HttpFetcher(make_config(test_server)) as fetcher:
        text = await fetcher.fetch_robots(f"{test_server}/robots.txt")
        missing = await fetcher.fetch_robots(f"{test_server}/nope.txt")
    assert "Disallow: /private/" in text
    assert missing is None


@pytest.mark.asyncio()
async def test_check_uses_head(test_server: str):
    async with HttpFetcher(make_config(test_server)) as fetcher:
        ok = await fetcher.check(f"{test_server}/page1")
        missing = await fetcher.check(f"{test_server}/missing")
    assert ok.status_code == 200
    assert ok.error is None
    assert missing.status_code == 404


@pytest.mark.asyncio()
async def test_retry_on_server_error(unused_tcp_port: int):
    app = web.Application()
    call_count = {"n": 0}

    async def flaky(_):
        call_count["n"] += 1
        if call_count["n"] <= 2:
            return web.Response(status=500)
        return web.Response(text="<h1>Recover</h1>", content_type="text/html")

    app.router.add_get("/flaky", flaky)

    async for base in serve_app(app, unused_tcp_port):
        config = make_config(base, retry_times=3)
        async with HttpFetcher(config, backoff=0.01) as fetcher:
            result = await fetcher.fetch(f"{base}/flaky")

    assert result.response.status_code == 200
    assert result.body == "<h1>Recover</h1>"
    assert call_count["n"] == 3


@pytest.mark.asyncio()
async def test_retries_exhausted(unused_tcp_port: int):
    app = web.Application()
    call_count = {"n": 0}

    async def broken(_):
        call_count["n"] += 1
        return web.Response(status=503)

    app.router.add_get("/broken", broken)

    async for base in serve_app(app, unused_tcp_port):
        config = make_config(base, retry_times=2)
        async with HttpFetcher(config, backoff=0.01) as fetcher:
            result = await fetcher.fetch(f"{base}/broken")

    assert call_count["n"] == 3
    assert result.response.status_code == 503
    assert result.response.error


@pytest.mark.asyncio()
async def test_crawl_live_site(test_server: str):
    config = make_config(test_server, check_external_links=False)
    spider = Spider(f"{test_server}/", config)
    message = await spider.crawl(UNLIMITED_DEPTH)

    pages = {p.url: p for p in spider.pages()}
    assert set(pages) == {f"{test_server}/", f"{test_server}/page1", f"{test_server}/docs/"}
    assert pages[f"{test_server}/docs/"].distance == 1
    # blocked by robots.txt for TestAgent
    assert "/private/" in spider.skipped()
    assert spider.external_hosts() == ["external.invalid"]
    assert spider.external_links() == ["http://external.invalid/x"]
    assert message.startswith("3 pages were processed; 1 external links")


@pytest.mark.asyncio()
async def test_crawl_live_site_depth_zero(test_server: str):
    spider = Spider(f"{test_server}/", make_config(test_server, check_external_links=False))
    await spider.crawl(0)
    assert [p.url for p in spider.pages()] == [f"{test_server}/"]
