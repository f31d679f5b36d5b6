"""SQLAlchemy-backed repositories."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..core.exceptions import DatabaseError
from ..crawler.base import Article, CrawlRunLog, RunStatus
from ..database import Database
from .. import models
from .base import ArticleRepository, CrawlLogRepository


logger = logging.getLogger(__name__)


def _to_article(row: models.Article) -> Article:
    return Article(
        title=row.title,
        url=row.url,
        source=row.source,
        content=row.content or "",
        summary=row.summary,
        author=row.author,
        publish_date=row.publish_date,
        crawl_date=row.crawl_date,
        update_date=row.update_date,
    )


class SQLArticleRepository(ArticleRepository):
    """Articles stored in the ``articles`` table."""

    def __init__(self, database: Database):
        self.db = database

    async def exists_by_url(self, url: str) -> bool:
        async with self.db.session() as session:
            result = await session.execute(
                select(models.Article.id).where(models.Article.url == url).limit(1)
            )
            return result.scalar_one_or_none() is not None

    async def find_by_url(self, url: str) -> Optional[Article]:
        async with self.db.session() as session:
            result = await session.execute(select(models.Article).where(models.Article.url == url))
            row = result.scalar_one_or_none()
            return _to_article(row) if row else None

    async def save_if_not_exists(self, article: Article) -> bool:
        # The unique constraint on url makes check-and-insert one atomic step
        now = datetime.utcnow()
        async with self.db.session() as session:
            session.add(models.Article(
                title=article.title,
                url=article.url,
                source=article.source,
                content=article.content,
                summary=article.summary,
                author=article.author,
                publish_date=article.publish_date,
                crawl_date=article.crawl_date or now,
                update_date=now,
            ))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if await self.exists_by_url(article.url):
                    logger.info("Article already stored, skipping: %s", article.url)
                    return False
                raise DatabaseError(f"Failed to save article {article.url}: {e}") from e

        logger.info("Article saved: %s", article.title)
        return True

    async def save(self, article: Article) -> None:
        now = datetime.utcnow()
        async with self.db.session() as session:
            try:
                result = await session.execute(
                    select(models.Article).where(models.Article.url == article.url)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    session.add(models.Article(
                        title=article.title,
                        url=article.url,
                        source=article.source,
                        content=article.content,
                        summary=article.summary,
                        author=article.author,
                        publish_date=article.publish_date,
                        crawl_date=article.crawl_date or now,
                        update_date=now,
                    ))
                else:
                    row.title = article.title
                    row.content = article.content
                    row.summary = article.summary
                    row.author = article.author
                    row.publish_date = article.publish_date
                    row.update_date = now
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to save article {article.url}: {e}") from e

    async def update_summary(self, url: str, summary: str) -> None:
        async with self.db.session() as session:
            try:
                await session.execute(
                    update(models.Article)
                    .where(models.Article.url == url)
                    .values(summary=summary, update_date=datetime.utcnow())
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to update summary for {url}: {e}") from e
        logger.debug("Summary updated: %s", url)

    async def recent(self, source: str, limit: int = 10) -> List[Article]:
        async with self.db.session() as session:
            result = await session.execute(
                select(models.Article)
                .where(models.Article.source == source)
                .order_by(models.Article.crawl_date.desc())
                .limit(limit)
            )
            return [_to_article(row) for row in result.scalars().all()]

    async def stats(self, source: Optional[str] = None) -> Dict[str, int]:
        query = select(models.Article.source, func.count(models.Article.id)).group_by(models.Article.source)
        if source:
            query = query.where(models.Article.source == source)

        async with self.db.session() as session:
            result = await session.execute(query)
            return {name: count for name, count in result.all()}

    async def close(self):
        await self.db.close()


class SQLCrawlLogRepository(CrawlLogRepository):
    """Run logs stored in the ``crawl_logs`` table."""

    def __init__(self, database: Database):
        self.db = database

    async def record_run(self, log: CrawlRunLog) -> None:
        async with self.db.session() as session:
            try:
                session.add(models.CrawlLog(
                    source=log.source,
                    status=log.status.value,
                    articles_found=log.articles_found,
                    articles_saved=log.articles_saved,
                    error_message=log.error_message,
                    start_time=log.start_time,
                    end_time=log.end_time,
                ))
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to record crawl log for {log.source}: {e}") from e

    async def recent(self, source: str, limit: int = 10) -> List[CrawlRunLog]:
        async with self.db.session() as session:
            result = await session.execute(
                select(models.CrawlLog)
                .where(models.CrawlLog.source == source)
                .order_by(models.CrawlLog.id.desc())
                .limit(limit)
            )
            return [
                CrawlRunLog(
                    source=row.source,
                    status=RunStatus(row.status),
                    articles_found=row.articles_found or 0,
                    articles_saved=row.articles_saved or 0,
                    error_message=row.error_message,
                    start_time=row.start_time,
                    end_time=row.end_time,
                )
                for row in result.scalars().all()
            ]
