"""Storage gateway interfaces."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from ..crawler.base import Article, CrawlRunLog


class ArticleRepository(ABC):
    """Persistence boundary for articles; enforces URL uniqueness."""

    @abstractmethod
    async def exists_by_url(self, url: str) -> bool:
        pass

    @abstractmethod
    async def find_by_url(self, url: str) -> Optional[Article]:
        pass

    @abstractmethod
    async def save_if_not_exists(self, article: Article) -> bool:
        """
        Insert an article unless its URL is already stored.

        Returns:
            True if the article was newly inserted
        """
        pass

    @abstractmethod
    async def save(self, article: Article) -> None:
        """Insert or update an article keyed by URL."""
        pass

    async def save_batch(self, articles: Sequence[Article]) -> int:
        """Insert new articles; returns how many were newly inserted."""
        count = 0
        for article in articles:
            if await self.save_if_not_exists(article):
                count += 1
        return count

    @abstractmethod
    async def update_summary(self, url: str, summary: str) -> None:
        pass

    @abstractmethod
    async def recent(self, source: str, limit: int = 10) -> List[Article]:
        """Most recently crawled articles of a source."""
        pass

    @abstractmethod
    async def stats(self, source: Optional[str] = None) -> Dict[str, int]:
        """Article counts per source."""
        pass

    async def close(self):
        pass


class CrawlLogRepository(ABC):
    """Records one log entry per crawl run."""

    @abstractmethod
    async def record_run(self, log: CrawlRunLog) -> None:
        pass

    @abstractmethod
    async def recent(self, source: str, limit: int = 10) -> List[CrawlRunLog]:
        pass

    async def close(self):
        pass
