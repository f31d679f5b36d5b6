"""BeautifulSoup-backed pages and a plain HTTP renderer.

Sites that serve their articles in the initial HTML do not need a
browser; ``HttpRenderer`` fetches them with aiohttp and exposes the
parsed document through the same interface as the Playwright pages.
"""

import asyncio
import logging
from typing import List, Optional

import aiohttp
from bs4 import BeautifulSoup, Tag

from ..core.exceptions import ExtractionError, NavigationError
from ..core.http_client import AsyncHTTPClient, DEFAULT_USER_AGENT
from .rendering import Renderer, RenderedPage, PageElement


logger = logging.getLogger(__name__)

HTML_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'zh-CN,zh;q=0.9,en;q=0.8',
}


def _select(tag, selector: str) -> List[PageElement]:
    try:
        return [HtmlElement(found) for found in tag.select(selector)]
    except Exception as e:
        raise ExtractionError(f"Invalid selector {selector!r}: {e}") from e


class HtmlElement(PageElement):
    """Element of a parsed HTML document."""

    def __init__(self, tag: Tag):
        self._tag = tag

    async def text(self) -> str:
        return self._tag.get_text().strip()

    async def attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            # Multi-valued attributes such as class
            return " ".join(value)
        return value

    async def query(self, selector: str) -> List[PageElement]:
        return _select(self._tag, selector)


class HtmlPage(RenderedPage):
    """A parsed HTML document."""

    def __init__(self, html: str, url: str = ""):
        self.html = html
        self.url = url
        self.soup = BeautifulSoup(html, 'html.parser')

    async def query(self, selector: str) -> List[PageElement]:
        return _select(self.soup, selector)

    async def content(self) -> str:
        return self.html


class HttpRenderer(Renderer):
    """Fetches pages over HTTP without executing JavaScript."""

    def __init__(self, user_agent: Optional[str] = None, timeout_ms: int = 30000):
        self.client = AsyncHTTPClient(
            timeout_seconds=timeout_ms / 1000,
            user_agent=user_agent or DEFAULT_USER_AGENT,
            headers=HTML_HEADERS,
        )

    async def navigate(self, url: str, settle_ms: int = 0) -> RenderedPage:
        try:
            html = await self.client.fetch_text(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NavigationError(url, f"Failed to fetch {url}: {e}") from e
        except (UnicodeDecodeError, LookupError) as e:
            # Unknown charset name in the response headers
            raise NavigationError(url, f"Cannot decode {url}: {e}") from e

        return HtmlPage(html, url)

    async def close(self):
        await self.client.close()
