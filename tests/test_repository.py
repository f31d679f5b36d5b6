import asyncio
import json
from datetime import date, datetime

import pytest

from news_crawler.crawler.base import Article, CrawlRunLog, RunStatus
from news_crawler.database import Database
from news_crawler.storage import create_repositories
from news_crawler.storage.json_repository import JsonArticleRepository, JsonCrawlLogRepository
from news_crawler.storage.sql_repository import SQLArticleRepository, SQLCrawlLogRepository


def make_article(url="https://news.test/a/1", title="Title", source="test-site"):
    return Article(title=title, url=url, source=source, content="Body",
                   author="Reporter", publish_date=date(2024, 3, 5))


@pytest.fixture
def sql_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path}/articles.db"


def run_sql(sql_url, scenario):
    async def run():
        database = Database(sql_url)
        await database.init()
        try:
            return await scenario(SQLArticleRepository(database), SQLCrawlLogRepository(database))
        finally:
            await database.close()
    return asyncio.run(run())


def run_json(data_dir, scenario):
    return asyncio.run(scenario(JsonArticleRepository(data_dir), JsonCrawlLogRepository(data_dir)))


@pytest.fixture(params=["sql", "json"])
def run_storage(request, sql_url, tmp_path):
    if request.param == "sql":
        return lambda scenario: run_sql(sql_url, scenario)
    return lambda scenario: run_json(str(tmp_path / "data"), scenario)


def test_save_if_not_exists_inserts_once(run_storage):
    async def scenario(articles, logs):
        first = await articles.save_if_not_exists(make_article())
        second = await articles.save_if_not_exists(make_article(title="Changed"))
        stored = await articles.find_by_url("https://news.test/a/1")
        return first, second, stored, await articles.stats()

    first, second, stored, stats = run_storage(scenario)

    assert first is True
    assert second is False
    assert stored.title == "Title"
    assert stored.publish_date == date(2024, 3, 5)
    assert stats == {"test-site": 1}


def test_exists_by_url(run_storage):
    async def scenario(articles, logs):
        before = await articles.exists_by_url("https://news.test/a/1")
        await articles.save_if_not_exists(make_article())
        return before, await articles.exists_by_url("https://news.test/a/1")

    assert run_storage(scenario) == (False, True)


def test_urls_are_compared_exactly(run_storage):
    async def scenario(articles, logs):
        await articles.save_if_not_exists(make_article("https://news.test/a/1"))
        return await articles.save_if_not_exists(make_article("https://news.test/a/1/"))

    assert run_storage(scenario) is True


def test_update_summary(run_storage):
    async def scenario(articles, logs):
        await articles.save_if_not_exists(make_article())
        await articles.update_summary("https://news.test/a/1", "Short summary")
        return await articles.find_by_url("https://news.test/a/1")

    stored = run_storage(scenario)

    assert stored.summary == "Short summary"
    assert stored.update_date is not None


def test_save_upserts(run_storage):
    async def scenario(articles, logs):
        await articles.save(make_article())
        await articles.save(make_article(title="Updated"))
        return await articles.find_by_url("https://news.test/a/1"), await articles.stats()

    stored, stats = run_storage(scenario)

    assert stored.title == "Updated"
    assert stats == {"test-site": 1}


def test_save_batch_counts_new(run_storage):
    async def scenario(articles, logs):
        await articles.save_if_not_exists(make_article("https://news.test/a/1"))
        return await articles.save_batch([
            make_article("https://news.test/a/1"),
            make_article("https://news.test/a/2"),
            make_article("https://news.test/a/3", source="other"),
        ])

    assert run_storage(scenario) == 2


def test_concurrent_saves_store_one_record(run_storage):
    async def scenario(articles, logs):
        results = await asyncio.gather(*[articles.save_if_not_exists(make_article()) for _ in range(3)])
        return results, await articles.stats()

    results, stats = run_storage(scenario)

    assert sorted(results) == [False, False, True]
    assert stats == {"test-site": 1}


def test_recent_and_stats_by_source(run_storage):
    async def scenario(articles, logs):
        for i in range(3):
            article = make_article(f"https://news.test/a/{i}")
            article.crawl_date = datetime(2024, 1, 1 + i)
            await articles.save_if_not_exists(article)
        await articles.save_if_not_exists(make_article("https://other.test/x", source="other"))
        return await articles.recent("test-site", limit=2), await articles.stats("other")

    recent, stats = run_storage(scenario)

    assert [a.url for a in recent] == ["https://news.test/a/2", "https://news.test/a/1"]
    assert stats == {"other": 1}


def test_crawl_log_roundtrip(run_storage):
    async def scenario(articles, logs):
        await logs.record_run(CrawlRunLog(
            source="test-site", articles_found=3, articles_saved=2,
            start_time=datetime(2024, 1, 1, 8), end_time=datetime(2024, 1, 1, 8, 1),
        ))
        await logs.record_run(CrawlRunLog(
            source="test-site", status=RunStatus.FAILED, error_message="boom",
            start_time=datetime(2024, 1, 2, 8), end_time=datetime(2024, 1, 2, 8, 1),
        ))
        return await logs.recent("test-site")

    runs = run_storage(scenario)

    assert [r.status for r in runs] == [RunStatus.FAILED, RunStatus.SUCCESS]
    assert runs[0].error_message == "boom"
    assert runs[1].articles_saved == 2
    assert runs[1].duration_seconds == 60


def test_json_file_layout(tmp_path):
    data_dir = str(tmp_path / "data")

    async def scenario(articles, logs):
        await articles.save_if_not_exists(make_article())
        await logs.record_run(CrawlRunLog(source="test-site", end_time=datetime.utcnow()))

    run_json(data_dir, scenario)

    records = json.loads((tmp_path / "data" / "articles.json").read_text(encoding="utf-8"))
    assert records[0]["url"] == "https://news.test/a/1"
    assert records[0]["publish_date"] == "2024-03-05"
    logs = json.loads((tmp_path / "data" / "logs.json").read_text(encoding="utf-8"))
    assert logs[0]["status"] == "success"


def test_create_repositories_json(settings):
    settings = settings.model_copy(update={"storage_type": "json"})
    articles, logs = asyncio.run(create_repositories(settings))
    assert isinstance(articles, JsonArticleRepository)
    assert isinstance(logs, JsonCrawlLogRepository)


def test_create_repositories_sql(settings):
    async def run():
        articles, logs = await create_repositories(settings)
        try:
            return articles, logs
        finally:
            await articles.close()

    articles, logs = asyncio.run(run())
    assert isinstance(articles, SQLArticleRepository)
    assert isinstance(logs, SQLCrawlLogRepository)
