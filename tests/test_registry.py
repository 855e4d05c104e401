# File: tests/test_registry.py
from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor

from site_spider.crawler.external import ExternalClassifier
from site_spider.crawler.models import Page, ResponseInfo, Site
from site_spider.crawler.registry import URLRegistry
from site_spider.crawler.store import ResultStore


def test_try_admit_found_once():
    registry = URLRegistry()
    assert registry.try_admit_found("http://golang.org/")
    assert not registry.try_admit_found("http://golang.org/")
    assert registry.is_found("http://golang.org/")
    assert registry.found_count() == 1


def test_try_admit_found_concurrent():
    registry = URLRegistry()
    urls = [f"http://golang.org/page{i}/" for i in range(200)]

    def claim(seed: int) -> int:
        order = urls[:]
        random.Random(seed).shuffle(order)
        return sum(registry.try_admit_found(u) for u in order)

    with ThreadPoolExecutor(max_workers=8) as pool:
        admitted = sum(pool.map(claim, range(8)))

    assert admitted == len(urls)
    assert registry.found_count() == len(urls)


def test_record_fetch_and_skip():
    registry = URLRegistry()
    info = ResponseInfo("200 OK", 200)
    registry.record_fetch("http://golang.org/", info)
    registry.record_skip("http://golang.org/pkg/?x=1")
    registry.record_skip("https://golang.org/pkg/")
    assert registry.response_for("http://golang.org/") == info
    assert registry.response_for("http://golang.org/nope") is None
    assert registry.skipped() == ["/pkg/"]


def test_response_info_empty():
    assert ResponseInfo().is_empty
    assert not ResponseInfo(error="boom").is_empty
    assert ResponseInfo("200 OK", 200).ok
    assert not ResponseInfo("404 Not Found", 404).ok


def test_store_keeps_first_page():
    store = ResultStore()
    first = Page("http://golang.org/", 0, "first", ("http://golang.org/pkg/",))
    assert store.add_page(first)
    assert not store.add_page(Page("http://golang.org/", 1, "second"))
    assert store.page("http://golang.org/") == first
    assert store.page_count() == 1


def test_external_hosts_sorted():
    store = ResultStore()
    for host in ("twitter.com", "google.com", "github.com", "linkedin.com"):
        store.add_external(host, f"http://{host}/")
    assert store.external_hosts() == ["github.com", "google.com", "linkedin.com", "twitter.com"]
    assert store.external_links() == [
        "http://github.com/",
        "http://google.com/",
        "http://linkedin.com/",
        "http://twitter.com/",
    ]


def test_claim_external_check_once():
    store = ResultStore()
    store.add_external("github.com", "https://github.com/")
    assert store.claim_external_check("https://github.com/")
    assert not store.claim_external_check("https://github.com/")
    store.record_external("https://github.com/", ResponseInfo("200 OK", 200))
    assert store.external_response("https://github.com/").status_code == 200


def test_classifier_is_idempotent():
    store = ResultStore()
    classifier = ExternalClassifier(Site.from_url("http://golang.org/"), store)

    assert not classifier.is_external("http://golang.org/pkg/")
    assert not classifier.is_external("https://golang.org/pkg/")
    for _ in range(2):
        assert classifier.is_external("https://github.com/golang/go")
        assert classifier.is_external("http://golang.org:8080/")

    assert store.external_hosts() == ["github.com", "golang.org:8080"]
    assert store.external_links() == ["http://golang.org:8080/", "https://github.com/golang/go"]
    assert store.external_counts() == (2, 2)
    assert store.page_count() == 0
