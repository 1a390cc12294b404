from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from markcrawl.domain.rendered_page import RenderedPage
from markcrawl.exceptions import EngineError, FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaywrightHeadlessOptions:
    timeout_ms: int = 30_000
    wait_until: str = "networkidle"  # domcontentloaded | load | networkidle
    headless: bool = True
    launch_args: tuple[str, ...] = field(default=("--no-sandbox", "--disable-setuid-sandbox"))


class PlaywrightPageFetcher:
    """Fetches pages through an already-launched Chromium browser.

    Every fetch gets a fresh browser context so cookies, storage and DOM
    state never leak from one page to the next.
    """

    def __init__(self, browser, *, user_agent: str, options: PlaywrightHeadlessOptions, error_types: tuple = (Exception,)):
        self._browser = browser
        self._user_agent = user_agent
        self._options = options
        self._error_types = error_types

    async def fetch(self, url: str) -> RenderedPage:
        if not self._browser.is_connected():
            raise EngineError("Browser is no longer connected")

        context = None
        try:
            context = await self._browser.new_context(user_agent=self._user_agent)
            page = await context.new_page()
            resp = await page.goto(url, wait_until=self._options.wait_until, timeout=self._options.timeout_ms)
            status = int(resp.status) if resp is not None else 0
            html = await page.content()
        except self._error_types as e:
            if not self._browser.is_connected():
                raise EngineError(f"Browser disconnected while fetching {url}") from e
            raise FetchError(url, e) from e
        finally:
            if context is not None:
                try:
                    await context.close()
                except self._error_types:
                    logger.debug("Could not close browser context for %s", url, exc_info=True)

        if status and not 200 <= status < 300:
            logger.warning("Non-success status for %s: %s", url, status)
        return RenderedPage(url=url, status_code=status, html=html)


class PlaywrightRenderEngine:
    """Headless Chromium render engine backed by Playwright's async API.

    One browser is launched per `session()` and shared by all fetches made
    inside it. Playwright is imported lazily so the rest of the package can
    be imported (and tested) without browser binaries installed.
    """

    def __init__(self, *, user_agent: str, options: Optional[PlaywrightHeadlessOptions] = None):
        self._user_agent = user_agent
        self._options = options or PlaywrightHeadlessOptions()

    @property
    def options(self) -> PlaywrightHeadlessOptions:
        return self._options

    @asynccontextmanager
    async def session(self) -> AsyncIterator[PlaywrightPageFetcher]:
        try:
            from playwright.async_api import Error as PlaywrightError  # type: ignore
            from playwright.async_api import async_playwright  # type: ignore
        except ImportError as e:
            raise EngineError(
                "Headless rendering requires Playwright. "
                "Install 'playwright' and run 'python -m playwright install chromium'."
            ) from e

        try:
            playwright = await async_playwright().start()
        except Exception as e:
            raise EngineError(f"Could not start Playwright: {e}") from e

        browser = None
        try:
            try:
                browser = await playwright.chromium.launch(
                    headless=self._options.headless,
                    args=list(self._options.launch_args),
                )
            except PlaywrightError as e:
                raise EngineError(f"Could not launch Chromium: {e}") from e

            logger.info("Render engine started (headless=%s)", self._options.headless)
            yield PlaywrightPageFetcher(
                browser,
                user_agent=self._user_agent,
                options=self._options,
                error_types=(PlaywrightError,),
            )
        finally:
            if browser is not None:
                try:
                    await browser.close()
                except PlaywrightError:
                    logger.warning("Error closing browser", exc_info=True)
            try:
                await playwright.stop()
            except PlaywrightError:
                logger.warning("Error stopping Playwright", exc_info=True)
            logger.info("Render engine stopped")
