"""Headless Chromium renderer built on Playwright."""

import logging
from typing import List, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, ElementHandle
from playwright.async_api import Error as PlaywrightError

from ..core.exceptions import ExtractionError, NavigationError
from ..core.http_client import DEFAULT_USER_AGENT
from .rendering import Renderer, RenderedPage, PageElement


logger = logging.getLogger(__name__)


async def _query_all(target, selector: str) -> List[PageElement]:
    try:
        handles = await target.query_selector_all(selector)
    except PlaywrightError as e:
        raise ExtractionError(f"Query {selector!r} failed: {e}") from e
    return [PlaywrightElement(handle) for handle in handles]


class PlaywrightElement(PageElement):
    """Element handle wrapper."""

    def __init__(self, handle: ElementHandle):
        self._handle = handle

    async def text(self) -> str:
        content = await self._handle.text_content()
        return (content or "").strip()

    async def attribute(self, name: str) -> Optional[str]:
        return await self._handle.get_attribute(name)

    async def query(self, selector: str) -> List[PageElement]:
        return await _query_all(self._handle, selector)


class PlaywrightPage(RenderedPage):
    """Playwright page wrapper."""

    def __init__(self, page: Page, url: str):
        self._page = page
        self.url = url

    async def query(self, selector: str) -> List[PageElement]:
        return await _query_all(self._page, selector)

    async def content(self) -> str:
        return await self._page.content()

    async def close(self):
        try:
            await self._page.close()
        except PlaywrightError as e:
            logger.debug("Page close failed for %s: %s", self.url, e)


class PlaywrightRenderer(Renderer):
    """One browser + context, launched lazily on first navigation."""

    def __init__(self, headless: bool = True, viewport_width: int = 1920, viewport_height: int = 1080,
                 user_agent: Optional[str] = None, timeout_ms: int = 30000):
        self.headless = headless
        self.viewport = {'width': viewport_width, 'height': viewport_height}
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout_ms = timeout_ms

        self._playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None

    async def _ensure_browser(self):
        if self.context:
            return

        logger.info("Launching Chromium (headless=%s)", self.headless)
        self._playwright = await async_playwright().start()
        self.browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=['--no-sandbox', '--disable-dev-shm-usage']  # Docker compatibility
        )
        self.context = await self.browser.new_context(
            viewport=self.viewport,
            user_agent=self.user_agent,
        )

    async def navigate(self, url: str, settle_ms: int = 0) -> RenderedPage:
        await self._ensure_browser()
        page = await self.context.new_page()

        try:
            # domcontentloaded: ads and trackers must not hold up the load
            await page.goto(url, wait_until='domcontentloaded', timeout=self.timeout_ms)
            if settle_ms:
                await page.wait_for_timeout(settle_ms)
        except PlaywrightError as e:
            await page.close()
            raise NavigationError(url, f"Failed to load {url}: {e}") from e

        return PlaywrightPage(page, url)

    async def close(self):
        """Close context, browser and the Playwright driver."""
        if self.context:
            await self.context.close()
            self.context = None
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
            logger.info("Browser closed")
