import asyncio

from news_crawler.crawler.content import ContentExtractor
from news_crawler.crawler.static_page import HtmlPage


PAGE_HTML = """
<html><body>
  <nav>Home | World</nav>
  <div class="content">Main body text</div>
  <div class="content">Second block</div>
</body></html>
"""


def test_selector_mode_uses_first_match():
    extractor = ContentExtractor(content_selector=".content")
    page = HtmlPage(PAGE_HTML, "https://news.test/a/1")

    assert asyncio.run(extractor.extract(page, page.url)) == "Main body text"


def test_selector_mode_without_match_is_empty():
    extractor = ContentExtractor(content_selector=".missing")
    page = HtmlPage(PAGE_HTML, "https://news.test/a/1")

    assert asyncio.run(extractor.extract(page, page.url)) == ""


def test_readability_mode_ignores_selector(mocker):
    document = mocker.patch("news_crawler.crawler.content.Document")
    document.return_value.summary.return_value = "<div><p>Para one</p><p>Para two</p></div>"
    extractor = ContentExtractor(content_selector=".content", use_readability=True)
    page = HtmlPage(PAGE_HTML, "https://news.test/a/1")

    text = asyncio.run(extractor.extract(page, page.url))

    assert text == "Para one\nPara two"
    document.assert_called_once_with(PAGE_HTML, url="https://news.test/a/1")


def test_readability_failure_is_empty(mocker):
    document = mocker.patch("news_crawler.crawler.content.Document")
    document.return_value.summary.side_effect = ValueError("no candidates")
    extractor = ContentExtractor(use_readability=True)
    page = HtmlPage(PAGE_HTML, "https://news.test/a/1")

    assert asyncio.run(extractor.extract(page, page.url)) == ""


def test_readability_empty_summary(mocker):
    document = mocker.patch("news_crawler.crawler.content.Document")
    document.return_value.summary.return_value = ""
    extractor = ContentExtractor(use_readability=True)
    page = HtmlPage(PAGE_HTML, "https://news.test/a/1")

    assert asyncio.run(extractor.extract(page, page.url)) == ""
