"""Configuration management."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_QWEN_API_URL = "https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Storage
    storage_type: str = Field(default="sql", alias="STORAGE_TYPE")  # "sql" or "json"
    database_url: str = Field(default="sqlite+aiosqlite:///data/news_crawler.db", alias="DATABASE_URL")
    data_dir: str = Field(default="data", alias="DATA_DIR")

    # Qwen summarization API
    qwen_api_key: Optional[SecretStr] = Field(default=None, alias="QWEN_API_KEY")
    qwen_api_url: str = Field(default=DEFAULT_QWEN_API_URL, alias="QWEN_API_URL")
    qwen_model: str = Field(default="qwen-flash", alias="QWEN_MODEL")

    summary_max_retries: int = Field(default=3, alias="SUMMARY_MAX_RETRIES")
    summary_backoff_seconds: float = Field(default=10.0, alias="SUMMARY_BACKOFF_SECONDS")
    summary_call_delay_seconds: float = Field(default=1.0, alias="SUMMARY_CALL_DELAY_SECONDS")
    summary_content_limit: int = Field(default=3000, alias="SUMMARY_CONTENT_LIMIT")

    # Crawler (milliseconds)
    crawl_interval: int = Field(default=2000, alias="CRAWL_INTERVAL")
    request_timeout: int = Field(default=30000, alias="REQUEST_TIMEOUT")
    list_page_settle_ms: int = Field(default=2000, alias="LIST_PAGE_SETTLE_MS")
    detail_page_settle_ms: int = Field(default=1000, alias="DETAIL_PAGE_SETTLE_MS")

    # Browser
    headless: bool = Field(default=True, alias="HEADLESS")
    browser_viewport_width: int = Field(default=1920, alias="BROWSER_VIEWPORT_WIDTH")
    browser_viewport_height: int = Field(default=1080, alias="BROWSER_VIEWPORT_HEIGHT")

    # Application
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file_path: Optional[str] = Field(default=None, alias="LOG_FILE_PATH")
    schedule_interval_minutes: int = Field(default=1440, alias="SCHEDULE_INTERVAL_MINUTES")
    sites_dir: str = Field(default="config/websites", alias="SITES_DIR")

    @field_validator('qwen_api_key', 'log_file_path', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        """Convert empty strings to None for optional fields."""
        if v == '' or v is None:
            return None
        return v

    @field_validator('storage_type')
    @classmethod
    def check_storage_type(cls, v: str) -> str:
        v = v.lower()
        if v not in ('sql', 'json'):
            raise ValueError(f"Unsupported storage type: {v} (expected 'sql' or 'json')")
        return v

    def get_qwen_api_key(self) -> Optional[str]:
        """Return the plain API key, or None when summarization is disabled."""
        return self.qwen_api_key.get_secret_value() if self.qwen_api_key else None

    def get_async_database_url(self) -> str:
        """Return the database URL with an async driver selected."""
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://") and "+aiosqlite" not in url:
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url


@lru_cache()
def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
