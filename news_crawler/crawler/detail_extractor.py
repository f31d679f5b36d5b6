"""Detail page extraction: one article page -> Article."""

import logging
from datetime import date, datetime
from typing import Optional

from ..core.exceptions import NavigationError
from ..site_config import DetailPageConfig
from .base import Article, CandidateSummary
from .content import ContentExtractor
from .dates import normalize_date
from .fields import first_attribute, first_text
from .rendering import Renderer, RenderedPage


logger = logging.getLogger(__name__)


class DetailExtractor:
    """
    Builds an Article from a detail page.

    Missing detail-page fields fall back to what the list page said about
    the article. Completeness is not judged here: an article with an empty
    title or body is still returned and the engine decides whether to keep it.
    """

    def __init__(self, selectors: DetailPageConfig, source: str, settle_ms: int = 0):
        self.selectors = selectors
        self.source = source
        self.settle_ms = settle_ms
        self.content_extractor = ContentExtractor(
            content_selector=selectors.content_selector,
            use_readability=selectors.use_readability,
        )

    async def extract(self, renderer: Renderer, url: str,
                      candidate: Optional[CandidateSummary] = None) -> Optional[Article]:
        """
        Load a detail page and extract the article.

        Returns:
            The article, or None when the page could not be loaded
        """
        logger.info("Fetching article: %s", url)
        try:
            page = await renderer.navigate(url, settle_ms=self.settle_ms)
        except NavigationError as e:
            logger.error("Article page failed to load, skipping: %s (%s)", url, e)
            return None

        try:
            article = await self._extract_from_page(page, url, candidate)
        finally:
            await page.close()

        logger.info("Extracted article: %s", article.title or url)
        return article

    async def _extract_from_page(self, page: RenderedPage, url: str,
                                 candidate: Optional[CandidateSummary]) -> Article:
        title = await first_text(page, self.selectors.title_selector)
        if not title.present and candidate:
            logger.debug("Detail title missing on %s, using list title", url)

        content = await self.content_extractor.extract(page, url)
        author = await first_text(page, self.selectors.author_selector)

        return Article(
            title=title.or_else(candidate.title if candidate else "") or "",
            url=url,
            source=self.source,
            content=content,
            author=author.or_else(None),
            publish_date=await self._extract_publish_date(page, candidate),
            crawl_date=datetime.utcnow(),
        )

    async def _extract_publish_date(self, page: RenderedPage,
                                    candidate: Optional[CandidateSummary]) -> Optional[date]:
        """Detail page date first, then the list page date; first parse wins."""
        selector = self.selectors.date_selector
        if selector:
            text = await first_text(page, selector)
            parsed = normalize_date(text.value)
            if parsed:
                return parsed

            # <time datetime="..."> often carries a cleaner value than its text
            attr = await first_attribute(page, selector, 'datetime')
            parsed = normalize_date(attr.value)
            if parsed:
                return parsed

        if candidate and candidate.date:
            return normalize_date(candidate.date)

        return None
