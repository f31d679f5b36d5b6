"""Abstract page-rendering interfaces used by the extractors.

Extractors only talk to these interfaces, so a headless browser, a plain
HTTP fetch or an in-memory HTML document can all stand behind them.
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class PageElement(ABC):
    """A DOM element on a rendered page."""

    @abstractmethod
    async def text(self) -> str:
        """Return the element's text content, stripped."""
        pass

    @abstractmethod
    async def attribute(self, name: str) -> Optional[str]:
        """Return an attribute value, or None when absent."""
        pass

    @abstractmethod
    async def query(self, selector: str) -> List["PageElement"]:
        """Return all descendants matching a CSS selector."""
        pass

    async def query_one(self, selector: str) -> Optional["PageElement"]:
        """Return the first descendant matching a CSS selector."""
        elements = await self.query(selector)
        return elements[0] if elements else None


class RenderedPage(ABC):
    """A page that has been navigated to and rendered."""

    url: str

    @abstractmethod
    async def query(self, selector: str) -> List[PageElement]:
        """Return all elements matching a CSS selector, in document order."""
        pass

    async def query_one(self, selector: str) -> Optional[PageElement]:
        """Return the first element matching a CSS selector."""
        elements = await self.query(selector)
        return elements[0] if elements else None

    @abstractmethod
    async def content(self) -> str:
        """Return the serialized HTML of the whole document."""
        pass

    async def close(self):
        """Release the page."""
        pass


class Renderer(ABC):
    """Navigates to URLs and hands back rendered pages."""

    @abstractmethod
    async def navigate(self, url: str, settle_ms: int = 0) -> RenderedPage:
        """
        Load a URL.

        Args:
            url: Page to load
            settle_ms: Extra time to let scripts finish after the load event

        Raises:
            NavigationError: The page could not be loaded
        """
        pass

    async def close(self):
        """Release the rendering session."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
