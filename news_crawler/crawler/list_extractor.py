"""List page extraction: one rendered list page -> candidate summaries."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urljoin

from ..core.exceptions import ExtractionError, NavigationError
from ..site_config import ListPageConfig
from .base import CandidateSummary
from .fields import first_attribute, first_text
from .rendering import Renderer, PageElement


logger = logging.getLogger(__name__)

_UNRESOLVABLE_PREFIXES = ('#', 'javascript:', 'mailto:')


@dataclass
class ListPageResult:
    """Candidates found on one list page.

    ``error`` is set when the page itself could not be loaded; the crawl
    goes on with the next page.
    """
    url: str
    candidates: List[CandidateSummary] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def resolve_link(href: Optional[str], base_url: str) -> Optional[str]:
    """Make ``href`` absolute against ``base_url``; None if it points nowhere."""
    if not href:
        return None
    href = href.strip()
    if not href or href.lower().startswith(_UNRESOLVABLE_PREFIXES):
        return None
    if href.startswith(('http://', 'https://')):
        return href
    return urljoin(base_url, href)


class ListExtractor:
    """Turns list pages into ``CandidateSummary`` items."""

    def __init__(self, selectors: ListPageConfig, base_url: str, settle_ms: int = 0):
        self.selectors = selectors
        self.base_url = base_url
        self.settle_ms = settle_ms

    async def extract(self, renderer: Renderer, page_url: str) -> ListPageResult:
        """Load a list page and extract every candidate on it, in document order."""
        logger.info("Visiting list page: %s", page_url)
        try:
            page = await renderer.navigate(page_url, settle_ms=self.settle_ms)
        except NavigationError as e:
            logger.error("List page failed to load, skipping: %s (%s)", page_url, e)
            return ListPageResult(url=page_url, error=str(e))

        result = ListPageResult(url=page_url)
        try:
            elements = await page.query(self.selectors.article_selector)
            logger.info("Found %d article elements on %s", len(elements), page_url)

            for index, element in enumerate(elements):
                try:
                    candidate = await self.extract_item(element)
                except Exception as e:
                    logger.warning("Failed to extract item #%d on %s: %s", index, page_url, e)
                    continue
                if candidate:
                    result.candidates.append(candidate)
        except ExtractionError as e:
            logger.error("List page extraction failed on %s: %s", page_url, e)
            result.error = str(e)
        finally:
            await page.close()

        logger.info("Extracted %d candidates from %s", len(result.candidates), page_url)
        return result

    async def extract_item(self, element: PageElement) -> Optional[CandidateSummary]:
        """Extract one candidate; None when it lacks a title or a link."""
        if self.selectors.title_selector:
            title = (await first_text(element, self.selectors.title_selector)).value or ""
        else:
            title = await element.text()

        href = await first_attribute(element, self.selectors.link_selector, 'href')
        url = resolve_link(href.value, self.base_url)

        if not title or not url:
            logger.debug("Dropping list item without title or link (title=%r, href=%r)",
                         title, href.value)
            return None

        date_text = await first_text(element, self.selectors.date_selector)
        description = await first_text(element, self.selectors.description_selector)

        return CandidateSummary(
            title=title,
            url=url,
            date=date_text.or_else(None),
            description=description.or_else(None),
        )
