import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from playwright.async_api import Error as PlaywrightError

from conftest import detail_html, list_html, list_item, make_site

from news_crawler.core.exceptions import NavigationError
from news_crawler.crawler.browser import PlaywrightRenderer
from news_crawler.crawler.engine import CrawlerEngine, create_renderer
from news_crawler.crawler.static_page import HtmlPage, HttpRenderer


def html_server(pages):
    """Serve ``{path: (status, body_bytes)}``; anything else is a 404."""

    async def handler(request):
        status, body = pages.get(request.path, (404, b"<html><body>Not found</body></html>"))
        return web.Response(status=status, body=body, headers={"Content-Type": "text/html; charset=utf-8"})

    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", handler)
    return TestServer(app)


def fetch(pages, path):
    async def run():
        server = html_server(pages)
        await server.start_server()
        renderer = HttpRenderer(timeout_ms=5000)
        try:
            page = await renderer.navigate(str(server.make_url(path)))
            return page, [await element.text() for element in await page.query("h1")]
        finally:
            await renderer.close()
            await server.close()

    return asyncio.run(run())


def test_http_renderer_parses_page():
    page, titles = fetch({"/news": (200, "<html><body><h1>头条新闻</h1></body></html>".encode("utf-8"))}, "/news")

    assert isinstance(page, HtmlPage)
    assert page.url.endswith("/news")
    assert titles == ["头条新闻"]


def test_http_renderer_not_found_raises_navigation_error():
    with pytest.raises(NavigationError) as excinfo:
        fetch({}, "/missing")

    assert excinfo.value.url.endswith("/missing")


def test_http_renderer_tolerates_bytes_outside_charset():
    page, titles = fetch({"/news": (200, b"<html><body><h1>Caf\xff\xfe news</h1></body></html>")}, "/news")

    assert "�" in page.html
    assert titles[0].startswith("Caf")
    assert titles[0].endswith("news")


def test_http_renderer_timeout_raises_navigation_error(mocker):
    renderer = HttpRenderer()
    mocker.patch.object(renderer.client, "fetch_text", side_effect=asyncio.TimeoutError())

    with pytest.raises(NavigationError):
        asyncio.run(renderer.navigate("https://news.test/slow"))


def test_static_site_crawl_over_http(settings, sleep):
    items = "".join(list_item(f"Story {i}", f"/a/{i}") for i in range(2))
    list_body = list_html([items]).encode("utf-8").replace(b"</ul>", b"<li>\xff</li></ul>")
    pages = {
        "/list": (200, list_body),
        "/a/0": (200, detail_html(title="Story 0", content="First body").encode("utf-8")),
        "/a/1": (200, detail_html(title="Story 1", content="Second body").encode("utf-8")),
    }

    async def run():
        server = html_server(pages)
        await server.start_server()
        root = str(server.make_url("/")).rstrip("/")
        config = make_site(baseUrl=root, url=f"{root}/list", renderJavascript=False)
        try:
            async with CrawlerEngine(config, settings, sleep=sleep) as engine:
                return await engine.crawl()
        finally:
            await server.close()

    articles = asyncio.run(run())

    assert [a.title for a in articles] == ["Story 0", "Story 1"]
    assert [a.content for a in articles] == ["First body", "Second body"]


def test_static_site_list_page_error_is_recorded(settings, sleep):
    async def run():
        server = html_server({"/list": (500, b"<html><body>oops</body></html>")})
        await server.start_server()
        root = str(server.make_url("/")).rstrip("/")
        config = make_site(baseUrl=root, url=f"{root}/list", renderJavascript=False)
        try:
            async with CrawlerEngine(config, settings, sleep=sleep) as engine:
                return await engine.crawl(), engine.page_results
        finally:
            await server.close()

    articles, page_results = asyncio.run(run())

    assert articles == []
    assert len(page_results) == 1
    assert not page_results[0].ok


@pytest.mark.parametrize("render_javascript, expected", [
    (True, PlaywrightRenderer),
    (False, HttpRenderer),
])
def test_create_renderer_follows_render_javascript(settings, render_javascript, expected):
    renderer = create_renderer(make_site(renderJavascript=render_javascript), settings)

    assert isinstance(renderer, expected)
    asyncio.run(renderer.close())


def test_playwright_navigation_failure_closes_page(mocker):
    page = mocker.AsyncMock()
    page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
    renderer = PlaywrightRenderer()
    renderer.context = mocker.MagicMock()
    renderer.context.new_page = mocker.AsyncMock(return_value=page)

    with pytest.raises(NavigationError):
        asyncio.run(renderer.navigate("https://news.test/list", settle_ms=100))

    page.close.assert_awaited_once()
    page.wait_for_timeout.assert_not_awaited()


def test_playwright_navigation_waits_for_settle(mocker):
    page = mocker.AsyncMock()
    renderer = PlaywrightRenderer(timeout_ms=5000)
    renderer.context = mocker.MagicMock()
    renderer.context.new_page = mocker.AsyncMock(return_value=page)

    rendered = asyncio.run(renderer.navigate("https://news.test/list", settle_ms=1500))

    page.goto.assert_awaited_once_with("https://news.test/list", wait_until="domcontentloaded", timeout=5000)
    page.wait_for_timeout.assert_awaited_once_with(1500)
    page.close.assert_not_awaited()
    assert rendered.url == "https://news.test/list"
