import copy
from typing import Dict, List, Optional

import pytest

from news_crawler.config import Settings
from news_crawler.core.exceptions import NavigationError
from news_crawler.crawler.rendering import Renderer, RenderedPage
from news_crawler.crawler.static_page import HtmlPage
from news_crawler.site_config import SiteConfig


BASE_SITE = {
    "name": "test-site",
    "baseUrl": "https://news.test",
    "url": "https://news.test/list",
    "listPage": {
        "articleSelector": ".item",
        "titleSelector": "h3",
        "linkSelector": "a",
        "dateSelector": ".date",
        "descriptionSelector": ".desc",
    },
    "detailPage": {
        "titleSelector": "h1",
        "contentSelector": ".content",
        "authorSelector": ".author",
        "dateSelector": ".time",
    },
    "delay": 500,
}


def make_site(**overrides) -> SiteConfig:
    data = copy.deepcopy(BASE_SITE)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key].update(value)
        else:
            data[key] = value
    return SiteConfig.from_dict(data)


def detail_html(title="Headline", content="Body text", author=None, time=None) -> str:
    parts = [f"<h1>{title}</h1>" if title is not None else ""]
    if author:
        parts.append(f'<span class="author">{author}</span>')
    if time:
        parts.append(f'<span class="time">{time}</span>')
    if content is not None:
        parts.append(f'<div class="content">{content}</div>')
    return f"<html><body>{''.join(parts)}</body></html>"


def list_html(items: List[str]) -> str:
    return "<html><body><ul>" + "".join(items) + "</ul></body></html>"


def list_item(title: str, href: Optional[str], date: str = None, desc: str = None) -> str:
    link = f'<a href="{href}">more</a>' if href is not None else ""
    date_html = f'<span class="date">{date}</span>' if date else ""
    desc_html = f'<p class="desc">{desc}</p>' if desc else ""
    return f'<li class="item"><h3>{title}</h3>{link}{date_html}{desc_html}</li>'


GENERATOR_LIST_URL = "https://www.autonews.test/news/list_162_1.html"
GENERATOR_ARTICLE_URL = "https://www.autonews.test/news/a/0.html"


def news_list_page(count=6):
    items = "".join(
        f'<li class="news-item"><h3><a href="/news/a/{i}.html">Headline number {i}</a></h3>'
        f'<span class="pub-date">2024-03-0{i + 1}</span>'
        f'<p class="summary">A short teaser paragraph for article {i}.</p></li>'
        for i in range(count)
    )
    nav = "".join(f'<a class="nav" href="/s/{i}">Sec{i}</a>' for i in range(3))
    return f'<html><body><div class="menu">{nav}</div><ul class="news-list">{items}</ul></body></html>'


NEWS_DETAIL_PAGE = """
<html><body><div class="page">
  <div class="topnav"><a href="/">Home</a><a href="/news">News</a><a href="/auto">Auto</a></div>
  <div class="header">
    <h1 class="title main">Headline number 0</h1>
    <div class="meta"><span class="time">2024-03-01 10:00</span><span class="writer">作者：张三</span></div>
  </div>
  <div class="article-body">
    <p>The first paragraph of the article has plenty of text in it.</p>
    <p>The second paragraph continues the story with more detail.</p>
    <p>The third paragraph wraps the story up for the reader.</p>
  </div>
  <div class="footer"><p>Copyright</p></div>
</div></body></html>
"""


class FakeRenderer(Renderer):
    """Serves canned HTML per URL and records every navigation."""

    def __init__(self, pages: Dict[str, str], failing: List[str] = None):
        self.pages = pages
        self.failing = set(failing or [])
        self.visited: List[str] = []
        self.closed = False

    async def navigate(self, url: str, settle_ms: int = 0) -> RenderedPage:
        self.visited.append(url)
        if url in self.failing or url not in self.pages:
            raise NavigationError(url)
        return HtmlPage(self.pages[url], url)

    async def close(self):
        self.closed = True


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float):
        self.calls.append(seconds)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        STORAGE_TYPE="sql",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path}/test.db",
        DATA_DIR=str(tmp_path / "data"),
        QWEN_API_KEY="",
        LIST_PAGE_SETTLE_MS=0,
        DETAIL_PAGE_SETTLE_MS=0,
        SITES_DIR=str(tmp_path / "sites"),
    )


@pytest.fixture
def sleep():
    return RecordingSleep()
