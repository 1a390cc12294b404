import asyncio
from contextlib import asynccontextmanager

import pytest

from markcrawl.domain.job import CrawlJobConfig
from markcrawl.domain.rendered_page import RenderedPage
from markcrawl.exceptions import EngineError, FetchError
from markcrawl.services.job_store import InMemoryJobStore


class FakeFetcher:
    """Serves canned HTML keyed by URL and records every fetch."""

    def __init__(self, pages, fail_urls=(), engine_fail_urls=()):
        self.pages = dict(pages)
        self.fail_urls = set(fail_urls)
        self.engine_fail_urls = set(engine_fail_urls)
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        await asyncio.sleep(0)
        if url in self.engine_fail_urls:
            raise EngineError("browser crashed")
        if url in self.fail_urls or url not in self.pages:
            raise FetchError(url, reason="net::ERR_NAME_NOT_RESOLVED")
        return RenderedPage(url=url, status_code=200, html=self.pages[url])


class FakeRenderEngine:
    def __init__(self, fetcher=None, start_error=None):
        self.fetcher = fetcher or FakeFetcher({})
        self.start_error = start_error
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def session(self):
        if self.start_error is not None:
            raise self.start_error
        self.opened += 1
        try:
            yield self.fetcher
        finally:
            self.closed += 1


async def no_sleep(_seconds):
    await asyncio.sleep(0)


BLOG_SITE = {
    "https://example.com": (
        "<html><head><title>Home</title></head><body>"
        '<nav><a href="/">Home</a><a href="/about">About</a></nav>'
        '<a href="/blog/first-post">First</a>'
        '<a href="/blog/second-post">Second</a>'
        '<a href="https://other.example.org/blog/elsewhere">Elsewhere</a>'
        "</body></html>"
    ),
    "https://example.com/blog/first-post": (
        "<html><head><title>First Post</title></head><body>"
        "<nav>Site menu</nav>"
        "<article><h1>First Post</h1><p>Hello from the first post.</p></article>"
        "</body></html>"
    ),
    "https://example.com/blog/second-post": (
        "<html><head><title>Second Post</title></head><body>"
        "<main><h1>Second Post</h1><p>Second body.</p></main>"
        "</body></html>"
    ),
}


@pytest.fixture
def blog_site():
    return dict(BLOG_SITE)


@pytest.fixture
def job_store():
    return InMemoryJobStore()


@pytest.fixture
def make_config():
    def _make(**overrides):
        fields = dict(
            base_url="https://example.com",
            pattern_rules=(r".*\/blog\/.*",),
            max_depth=1,
            request_delay_ms=0,
            max_concurrent=1,
        )
        fields.update(overrides)
        return CrawlJobConfig(**fields)
    return _make


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_render_engine():
    return FakeRenderEngine


@pytest.fixture
def sleep_stub():
    return no_sleep
