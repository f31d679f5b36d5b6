"""Storage gateways for articles and crawl logs."""

from typing import Tuple

from ..config import Settings
from .base import ArticleRepository, CrawlLogRepository
from .json_repository import JsonArticleRepository, JsonCrawlLogRepository
from .sql_repository import SQLArticleRepository, SQLCrawlLogRepository


async def create_repositories(settings: Settings) -> Tuple[ArticleRepository, CrawlLogRepository]:
    """Build the article and log repositories selected by ``STORAGE_TYPE``."""
    if settings.storage_type == "json":
        return JsonArticleRepository(settings.data_dir), JsonCrawlLogRepository(settings.data_dir)

    from ..database import Database

    database = Database.from_settings(settings)
    await database.init()
    return SQLArticleRepository(database), SQLCrawlLogRepository(database)


__all__ = [
    'ArticleRepository',
    'CrawlLogRepository',
    'JsonArticleRepository',
    'JsonCrawlLogRepository',
    'SQLArticleRepository',
    'SQLCrawlLogRepository',
    'create_repositories',
]
