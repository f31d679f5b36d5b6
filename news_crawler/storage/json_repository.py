"""JSON-file repositories for running without a database."""

import asyncio
import json
import logging
import os
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import aiofiles

from ..core.exceptions import DatabaseError
from ..crawler.base import Article, CrawlRunLog, RunStatus
from .base import ArticleRepository, CrawlLogRepository


logger = logging.getLogger(__name__)

ARTICLES_FILE = "articles.json"
LOGS_FILE = "logs.json"


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, RunStatus):
        return value.value
    return value


def _decode_article(record: Dict[str, Any]) -> Article:
    publish_date = record.get('publish_date')
    return Article(
        title=record.get('title', ''),
        url=record['url'],
        source=record.get('source', ''),
        content=record.get('content') or '',
        summary=record.get('summary'),
        author=record.get('author'),
        publish_date=date.fromisoformat(publish_date) if publish_date else None,
        crawl_date=_parse_datetime(record.get('crawl_date')) or datetime.utcnow(),
        update_date=_parse_datetime(record.get('update_date')),
    )


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class JsonFile:
    """A JSON list on disk with serialized read-modify-write access."""

    def __init__(self, path: str):
        self.path = path
        self.lock = asyncio.Lock()

    async def read(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return []
        try:
            async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
                raw = await f.read()
        except OSError as e:
            raise DatabaseError(f"Failed to read {self.path}: {e}") from e

        if not raw.strip():
            return []
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise DatabaseError(f"Corrupt JSON store {self.path}: {e}") from e

    async def write(self, records: List[Dict[str, Any]]):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        tmp_path = f"{self.path}.tmp"
        async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
            await f.write(json.dumps(records, ensure_ascii=False, indent=2, default=_encode))
        os.replace(tmp_path, self.path)


class JsonArticleRepository(ArticleRepository):
    """Articles kept in ``<data_dir>/articles.json``."""

    def __init__(self, data_dir: str):
        self.file = JsonFile(os.path.join(data_dir, ARTICLES_FILE))

    async def exists_by_url(self, url: str) -> bool:
        records = await self.file.read()
        return any(record.get('url') == url for record in records)

    async def find_by_url(self, url: str) -> Optional[Article]:
        for record in await self.file.read():
            if record.get('url') == url:
                return _decode_article(record)
        return None

    async def save_if_not_exists(self, article: Article) -> bool:
        async with self.file.lock:
            records = await self.file.read()
            if any(record.get('url') == article.url for record in records):
                logger.info("Article already stored, skipping: %s", article.url)
                return False

            now = datetime.utcnow()
            record = asdict(article)
            record.update(update_date=now, created_at=now)
            records.append(record)
            await self.file.write(records)

        logger.info("Article saved: %s", article.title)
        return True

    async def save(self, article: Article) -> None:
        async with self.file.lock:
            records = await self.file.read()
            now = datetime.utcnow()
            record = asdict(article)
            record['update_date'] = now

            for index, existing in enumerate(records):
                if existing.get('url') == article.url:
                    records[index] = {**existing, **record}
                    break
            else:
                record['created_at'] = now
                records.append(record)

            await self.file.write(records)

    async def update_summary(self, url: str, summary: str) -> None:
        async with self.file.lock:
            records = await self.file.read()
            for record in records:
                if record.get('url') == url:
                    record['summary'] = summary
                    record['update_date'] = datetime.utcnow()
                    await self.file.write(records)
                    logger.debug("Summary updated: %s", url)
                    return
        logger.warning("Cannot update summary, article not stored: %s", url)

    async def recent(self, source: str, limit: int = 10) -> List[Article]:
        articles = [_decode_article(r) for r in await self.file.read() if r.get('source') == source]
        articles.sort(key=lambda a: a.crawl_date, reverse=True)
        return articles[:limit]

    async def stats(self, source: Optional[str] = None) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in await self.file.read():
            name = record.get('source', '')
            if source and name != source:
                continue
            counts[name] = counts.get(name, 0) + 1
        return counts


class JsonCrawlLogRepository(CrawlLogRepository):
    """Run logs kept in ``<data_dir>/logs.json``."""

    def __init__(self, data_dir: str):
        self.file = JsonFile(os.path.join(data_dir, LOGS_FILE))

    async def record_run(self, log: CrawlRunLog) -> None:
        async with self.file.lock:
            records = await self.file.read()
            record = asdict(log)
            record['created_at'] = datetime.utcnow()
            records.append(record)
            await self.file.write(records)

    async def recent(self, source: str, limit: int = 10) -> List[CrawlRunLog]:
        logs = [
            CrawlRunLog(
                source=record['source'],
                status=RunStatus(record['status']),
                articles_found=record.get('articles_found', 0),
                articles_saved=record.get('articles_saved', 0),
                error_message=record.get('error_message'),
                start_time=_parse_datetime(record.get('start_time')),
                end_time=_parse_datetime(record.get('end_time')),
            )
            for record in await self.file.read()
            if record.get('source') == source
        ]
        return list(reversed(logs))[:limit]
