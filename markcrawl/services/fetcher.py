from __future__ import annotations

from typing import AsyncContextManager, Protocol

from markcrawl.domain.rendered_page import RenderedPage


class PageFetcher(Protocol):
    """Render a URL and return its final HTML.

    Implementations raise `FetchError` for anything that goes wrong with a
    single page and `EngineError` when the underlying engine itself is gone.
    """

    async def fetch(self, url: str) -> RenderedPage: ...


class RenderEngine(Protocol):
    """Owns the browser-like engine shared by every fetch of one job.

    `session()` starts the engine, yields a `PageFetcher` bound to it and
    releases it on exit, whatever happened inside.
    """

    def session(self) -> AsyncContextManager[PageFetcher]: ...
