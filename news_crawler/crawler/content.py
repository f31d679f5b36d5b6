"""Article body extraction: explicit selector or readability."""

import logging
from typing import Optional

from bs4 import BeautifulSoup
from readability.readability import Document

from .fields import first_text
from .rendering import RenderedPage


logger = logging.getLogger(__name__)


class ContentExtractor:
    """
    Extracts the main text of a detail page.

    The mode is fixed per site: with ``use_readability`` the content
    selector is ignored and the whole document goes through readability,
    otherwise the first element matching ``content_selector`` is used.
    Failures in either mode yield an empty string.
    """

    def __init__(self, content_selector: Optional[str] = None, use_readability: bool = False):
        self.content_selector = content_selector
        self.use_readability = use_readability

    async def extract(self, page: RenderedPage, url: str) -> str:
        if self.use_readability:
            return await self.extract_with_readability(page, url)
        return await self.extract_with_selector(page)

    async def extract_with_selector(self, page: RenderedPage) -> str:
        result = await first_text(page, self.content_selector)
        if not result.present:
            logger.warning("Content selector %r found nothing on %s: %s",
                           self.content_selector, page.url, result.error or "empty text")
        return result.value or ""

    async def extract_with_readability(self, page: RenderedPage, url: str) -> str:
        try:
            html = await page.content()
            # url lets readability resolve relative links in the article
            summary_html = Document(html, url=url).summary()
        except Exception as e:
            logger.warning("Readability extraction failed for %s: %s", url, e)
            return ""

        if not summary_html:
            return ""

        soup = BeautifulSoup(summary_html, 'html.parser')
        return soup.get_text(separator='\n', strip=True)
