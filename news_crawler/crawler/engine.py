"""Crawler engine: drives one site's list pages and detail pages."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ..config import Settings, get_settings
from ..site_config import SiteConfig
from .base import Article
from .detail_extractor import DetailExtractor
from .list_extractor import ListExtractor, ListPageResult
from .pagination import resolve_page_urls
from .rendering import Renderer


logger = logging.getLogger(__name__)

RendererFactory = Callable[[SiteConfig, Settings], Renderer]


def build_renderer(settings: Settings, render_javascript: bool = True,
                   user_agent: Optional[str] = None) -> Renderer:
    """Headless browser when JavaScript must run, plain HTTP otherwise."""
    if render_javascript:
        from .browser import PlaywrightRenderer
        return PlaywrightRenderer(
            headless=settings.headless,
            viewport_width=settings.browser_viewport_width,
            viewport_height=settings.browser_viewport_height,
            user_agent=user_agent,
            timeout_ms=settings.request_timeout,
        )

    from .static_page import HttpRenderer
    return HttpRenderer(user_agent=user_agent, timeout_ms=settings.request_timeout)


def create_renderer(config: SiteConfig, settings: Settings) -> Renderer:
    """Pick the renderer a site needs."""
    return build_renderer(settings, config.render_javascript, config.user_agent)


class CrawlerEngine:
    """
    Crawls one site strictly sequentially.

    List pages are visited in pagination order, candidates in document
    order, and each detail fetch is followed by the site's delay. The
    rendering session is created on first use and kept until ``close()``.
    Do not share one engine between concurrent tasks.
    """

    def __init__(self, config: SiteConfig, settings: Optional[Settings] = None,
                 renderer_factory: Optional[RendererFactory] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.config = config
        self.settings = settings or get_settings()
        self._renderer_factory = renderer_factory or create_renderer
        self._renderer: Optional[Renderer] = None
        self._sleep = sleep

        self.list_extractor = ListExtractor(
            config.list_page, config.base_url, settle_ms=self.settings.list_page_settle_ms
        )
        self.detail_extractor = DetailExtractor(
            config.detail_page, config.name, settle_ms=self.settings.detail_page_settle_ms
        )

        self.page_results: List[ListPageResult] = []
        self.details_fetched = 0
        self.articles_discarded = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def delay_seconds(self) -> float:
        """Per-request delay; sites without their own use ``CRAWL_INTERVAL``."""
        delay = self.config.delay if self.config.delay is not None else self.settings.crawl_interval
        return delay / 1000

    def _get_renderer(self) -> Renderer:
        if self._renderer is None:
            self._renderer = self._renderer_factory(self.config, self.settings)
        return self._renderer

    def _cap_reached(self, collected: int) -> bool:
        return bool(self.config.max_articles) and collected >= self.config.max_articles

    async def crawl(self) -> List[Article]:
        """Return the complete articles found on the site, in crawl order."""
        config = self.config
        logger.info("========== Crawling %s ==========", config.name)
        if config.max_articles:
            logger.info("Article cap: %d", config.max_articles)

        articles: List[Article] = []
        self.page_results = []
        self.details_fetched = 0
        self.articles_discarded = 0

        for page_url in resolve_page_urls(config):
            if self._cap_reached(len(articles)):
                logger.info("Article cap (%d) reached, stopping", config.max_articles)
                break

            page_result = await self.list_extractor.extract(self._get_renderer(), page_url)
            self.page_results.append(page_result)

            for candidate in page_result.candidates:
                if self._cap_reached(len(articles)):
                    logger.info("Article cap (%d) reached, stopping", config.max_articles)
                    break

                article = await self.detail_extractor.extract(
                    self._get_renderer(), candidate.url, candidate
                )
                self.details_fetched += 1

                if article is not None and article.is_complete:
                    articles.append(article)
                else:
                    self.articles_discarded += 1
                    logger.debug("Discarding incomplete article: %s", candidate.url)

                await self._sleep(self.delay_seconds)

        failed_pages = [result.url for result in self.page_results if not result.ok]
        if failed_pages:
            logger.warning("%d list page(s) failed for %s: %s",
                           len(failed_pages), config.name, ", ".join(failed_pages))

        logger.info("========== Finished %s: %d articles ==========", config.name, len(articles))
        return articles

    async def close(self):
        """Release the rendering session, if one was created."""
        if self._renderer is not None:
            renderer, self._renderer = self._renderer, None
            await renderer.close()
