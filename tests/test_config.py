import pytest
from pydantic import ValidationError

from news_crawler.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.crawl_interval == 2000
    assert settings.request_timeout == 30000
    assert settings.summary_max_retries == 3
    assert settings.summary_content_limit == 3000


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("STORAGE_TYPE", "JSON")
    monkeypatch.setenv("QWEN_API_KEY", "secret")
    monkeypatch.setenv("CRAWL_INTERVAL", "500")

    settings = Settings(_env_file=None)

    assert settings.storage_type == "json"
    assert settings.get_qwen_api_key() == "secret"
    assert "secret" not in repr(settings)
    assert settings.crawl_interval == 500


def test_empty_api_key_disables_summaries():
    assert Settings(_env_file=None, QWEN_API_KEY="").get_qwen_api_key() is None


def test_unknown_storage_type_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, STORAGE_TYPE="mongo")


@pytest.mark.parametrize("url, expected", [
    ("postgresql://u:p@db/news", "postgresql+asyncpg://u:p@db/news"),
    ("sqlite:///data/news.db", "sqlite+aiosqlite:///data/news.db"),
    ("sqlite+aiosqlite:///data/news.db", "sqlite+aiosqlite:///data/news.db"),
])
def test_async_database_url(url, expected):
    assert Settings(_env_file=None, DATABASE_URL=url).get_async_database_url() == expected
