import asyncio
from datetime import date

from conftest import FakeRenderer, detail_html, make_site

from news_crawler.crawler.base import CandidateSummary
from news_crawler.crawler.detail_extractor import DetailExtractor


URL = "https://news.test/a/1"
CANDIDATE = CandidateSummary(title="List title", url=URL, date="2024-01-15")


def make_extractor(**detail_overrides):
    config = make_site(detailPage=detail_overrides) if detail_overrides else make_site()
    return DetailExtractor(config.detail_page, config.name)


def test_extracts_all_fields():
    html = detail_html(title="Detail title", content="Body", author="Reporter",
                       time="发布时间：2024年3月5日 ·")
    renderer = FakeRenderer({URL: html})

    article = asyncio.run(make_extractor().extract(renderer, URL, CANDIDATE))

    assert article.title == "Detail title"
    assert article.content == "Body"
    assert article.author == "Reporter"
    assert article.publish_date == date(2024, 3, 5)
    assert article.source == "test-site"
    assert article.url == URL
    assert article.summary is None


def test_title_falls_back_to_list_title():
    renderer = FakeRenderer({URL: detail_html(title=None, content="Body")})

    article = asyncio.run(make_extractor().extract(renderer, URL, CANDIDATE))

    assert article.title == "List title"


def test_date_falls_back_to_list_date():
    renderer = FakeRenderer({URL: detail_html(content="Body", time="sometime")})

    article = asyncio.run(make_extractor().extract(renderer, URL, CANDIDATE))

    assert article.publish_date == date(2024, 1, 15)


def test_date_from_datetime_attribute():
    html = ('<html><body><h1>T</h1><time class="time" datetime="2023-06-01T08:00:00Z">'
            'yesterday</time><div class="content">Body</div></body></html>')
    renderer = FakeRenderer({URL: html})

    article = asyncio.run(make_extractor().extract(renderer, URL, CANDIDATE))

    assert article.publish_date == date(2023, 6, 1)


def test_missing_optional_fields():
    renderer = FakeRenderer({URL: detail_html(content="Body")})
    candidate = CandidateSummary(title="List title", url=URL)

    article = asyncio.run(make_extractor().extract(renderer, URL, candidate))

    assert article.author is None
    assert article.publish_date is None


def test_missing_content_is_returned_incomplete():
    renderer = FakeRenderer({URL: detail_html(content=None)})

    article = asyncio.run(make_extractor().extract(renderer, URL, CANDIDATE))

    assert article.content == ""
    assert not article.is_complete


def test_navigation_failure_returns_none():
    renderer = FakeRenderer({}, failing=[URL])

    assert asyncio.run(make_extractor().extract(renderer, URL, CANDIDATE)) is None
