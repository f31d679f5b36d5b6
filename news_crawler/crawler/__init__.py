"""Config-driven article crawler."""

from .base import Article, CandidateSummary, CrawlRunLog, RunStatus
from .content import ContentExtractor
from .dates import normalize_date
from .detail_extractor import DetailExtractor
from .engine import CrawlerEngine, build_renderer, create_renderer
from .fields import Extracted, first_text, first_attribute
from .list_extractor import ListExtractor, ListPageResult
from .pagination import resolve_page_urls
from .rendering import Renderer, RenderedPage, PageElement
from .static_page import HtmlPage, HtmlElement, HttpRenderer

__all__ = [
    'Article',
    'CandidateSummary',
    'CrawlRunLog',
    'RunStatus',
    'ContentExtractor',
    'normalize_date',
    'DetailExtractor',
    'CrawlerEngine',
    'build_renderer',
    'create_renderer',
    'Extracted',
    'first_text',
    'first_attribute',
    'ListExtractor',
    'ListPageResult',
    'resolve_page_urls',
    'Renderer',
    'RenderedPage',
    'PageElement',
    'HtmlPage',
    'HtmlElement',
    'HttpRenderer',
]
