"""Per-site crawl configuration and its loader.

Each site is described by one JSON file in the sites directory. Keys use
camelCase (``baseUrl``, ``listPage.articleSelector``...) and are
validated eagerly when the file is loaded, so extraction code never has
to second-guess a missing selector.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

PAGE_PLACEHOLDER = "{page}"


class _SiteModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _required(value: str, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{field_name} must not be empty")
    return value.strip()


class ListPageConfig(_SiteModel):
    """Selectors applied to a list page."""
    article_selector: str
    link_selector: str
    title_selector: Optional[str] = None
    date_selector: Optional[str] = None
    description_selector: Optional[str] = None

    @field_validator('article_selector', 'link_selector')
    @classmethod
    def not_empty(cls, v, info):
        return _required(v, to_camel(info.field_name))


class DetailPageConfig(_SiteModel):
    """Selectors applied to a detail page."""
    title_selector: str
    content_selector: Optional[str] = None
    author_selector: Optional[str] = None
    date_selector: Optional[str] = None
    use_readability: bool = False

    @field_validator('title_selector')
    @classmethod
    def title_not_empty(cls, v):
        return _required(v, 'titleSelector')

    @model_validator(mode='after')
    def content_selector_required(self):
        if not self.use_readability and not (self.content_selector or '').strip():
            raise ValueError("contentSelector must not be empty unless useReadability is set")
        return self


class PaginationConfig(_SiteModel):
    """Static, pattern-based pagination.

    ``next_selector`` is accepted so existing site files load, but
    navigating through on-page "next" controls is not supported.
    A ``0`` for ``start_page`` or ``max_pages`` means "unset" and counts as 1.
    """
    enabled: bool = False
    url_pattern: Optional[str] = None
    start_page: int = Field(default=1, ge=0)
    max_pages: int = Field(default=1, ge=0)
    next_selector: Optional[str] = None

    def page_numbers(self) -> range:
        """Page numbers substituted into ``url_pattern``, in order."""
        return range(self.start_page or 1, (self.max_pages or 1) + 1)

    @model_validator(mode='after')
    def page_range(self):
        if self.enabled and self.url_pattern and not self.page_numbers():
            raise ValueError(
                f"maxPages ({self.max_pages}) must not be lower than startPage ({self.start_page})"
            )
        return self


class SiteConfig(_SiteModel):
    """Immutable description of one crawlable news site."""
    name: str
    base_url: str
    url: str
    list_page: ListPageConfig
    detail_page: DetailPageConfig
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    delay: Optional[int] = Field(default=None, ge=0)  # milliseconds
    user_agent: Optional[str] = None
    max_articles: Optional[int] = Field(default=None, ge=1)
    enabled: bool = True
    render_javascript: bool = True

    @field_validator('name', 'base_url', 'url')
    @classmethod
    def not_empty(cls, v, info):
        return _required(v, to_camel(info.field_name))

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_delay: Optional[int] = None) -> "SiteConfig":
        """Validate a raw site definition, filling in the default delay."""
        data = dict(data)
        if not data.get('delay') and default_delay is not None:
            data['delay'] = default_delay
        if data.get('pagination') is None:
            data.pop('pagination', None)
        return cls.model_validate(data)


class SiteConfigLoader:
    """Loads site definitions from ``*.json`` files in a directory."""

    def __init__(self, sites_dir: str, default_delay: Optional[int] = None):
        self.sites_dir = Path(sites_dir)
        self.default_delay = default_delay
        self._configs: Dict[str, SiteConfig] = {}
        self._loaded = False

    def load(self) -> Dict[str, SiteConfig]:
        """(Re)load every site file. Invalid files are logged and skipped."""
        self._configs = {}
        self._loaded = True

        if not self.sites_dir.is_dir():
            logger.warning("Site config directory does not exist: %s", self.sites_dir)
            return self._configs

        for path in sorted(self.sites_dir.glob("*.json")):
            try:
                config = self.load_file(path)
            except ConfigurationError as e:
                logger.error("Skipping site config %s: %s", path.name, e)
                continue

            if config.name in self._configs:
                logger.warning("Duplicate site name %r in %s, replacing earlier definition",
                               config.name, path.name)
            self._configs[config.name] = config
            logger.info("Loaded site config: %s", config.name)

        return self._configs

    def load_file(self, path: Path) -> SiteConfig:
        """Load and validate a single site file."""
        try:
            data = json.loads(Path(path).read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a JSON object")

        try:
            return SiteConfig.from_dict(data, default_delay=self.default_delay)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid site config {path}: {e}") from e

    def _ensure_loaded(self):
        if not self._loaded:
            self.load()

    def all_sites(self) -> List[SiteConfig]:
        self._ensure_loaded()
        return list(self._configs.values())

    def enabled_sites(self) -> List[SiteConfig]:
        """Return enabled site configs in load order."""
        return [config for config in self.all_sites() if config.enabled]

    def get(self, name: str) -> Optional[SiteConfig]:
        self._ensure_loaded()
        return self._configs.get(name)

    def add(self, config: SiteConfig):
        self._ensure_loaded()
        self._configs[config.name] = config
