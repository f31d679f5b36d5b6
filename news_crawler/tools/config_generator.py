"""Site config generator.

Guesses a starting site config from a list page URL. Article containers
are found by class repetition and link text, the detail page body by
paragraph density. The result is a draft: selectors and especially the
pagination pattern should be checked by hand before relying on it.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from ..core.exceptions import ConfigurationError, NavigationError
from ..crawler.list_extractor import resolve_link
from ..crawler.rendering import Renderer
from ..site_config import PAGE_PLACEHOLDER, SiteConfig


logger = logging.getLogger(__name__)

GENERATED_DELAY_MS = 2000
GENERATED_MAX_ARTICLES = 5
GENERATED_MAX_PAGES = 5

# A list needs enough items to be a list, but menus of hundreds of links are not one
MIN_REPEATS = 5
MAX_REPEATS = 100
MIN_LINK_TEXT = 6
MIN_DESCRIPTION_TEXT = 21
MAX_DATE_TEXT = 50
PARAGRAPH_BONUS = 50
MAX_LINK_DENSITY = 0.5

HEADINGS = ['h1', 'h2', 'h3', 'h4', 'h5']
_IGNORED_CLASS_PREFIXES = ('ng-', 'v-')
_CLASS_RE = re.compile(r'^-?[A-Za-z_][\w-]*$')
_DATE_RE = re.compile(r'\d{4}[-/年]\d{1,2}[-/月]\d{1,2}')
_NUMBER_RE = re.compile(r'\d+')


@dataclass
class ListPageGuess:
    article_selector: str
    title_selector: str
    link_selector: str
    sample_url: str
    date_selector: Optional[str] = None
    description_selector: Optional[str] = None


@dataclass
class DetailPageGuess:
    title_selector: str = 'h1'
    content_selector: Optional[str] = None
    author_selector: Optional[str] = None
    date_selector: Optional[str] = None
    use_readability: bool = True


def _classes(tag: Tag) -> List[str]:
    """Class names usable in a selector, minus framework-generated ones."""
    return [
        name for name in tag.get('class') or []
        if not name.startswith(_IGNORED_CLASS_PREFIXES) and _CLASS_RE.match(name)
    ]


def _class_or_tag(tag: Tag) -> str:
    classes = _classes(tag)
    return f".{classes[0]}" if classes else tag.name


def _tag_with_class(tag: Tag) -> str:
    classes = _classes(tag)
    return f"{tag.name}.{classes[0]}" if classes else tag.name


def _block_selector(tag: Tag) -> Optional[str]:
    """Selector for a content block; None when only the bare tag name is known."""
    classes = _classes(tag)
    if classes:
        return "." + ".".join(classes)
    if tag.get('id') and _CLASS_RE.match(tag['id']):
        return f"#{tag['id']}"
    if tag.name == 'article':
        return 'article'
    return None


def _text(tag: Tag) -> str:
    return tag.get_text(strip=True)


def _is_leaf(tag: Tag) -> bool:
    return tag.find(True) is None


def _is_inside(tag: Tag, ancestor: Tag) -> bool:
    return any(parent is ancestor for parent in tag.parents)


def _root(soup: BeautifulSoup) -> Tag:
    return soup.body or soup


def _has_item_links(elements: List[Tag]) -> bool:
    """At least half of the first items carry a link with real text."""
    sample = elements[:5]
    linked = 0
    for element in sample:
        link = element.find('a')
        if link is not None and len(_text(link)) >= MIN_LINK_TEXT:
            linked += 1
    return linked >= len(sample) * 0.5


def _repeated_groups(root: Tag) -> List[tuple]:
    """(selector, elements) per class, most repeated first."""
    groups: Dict[str, List[Tag]] = {}
    for tag in root.find_all(True):
        for name in _classes(tag):
            groups.setdefault(f".{name}", []).append(tag)

    candidates = [
        (selector, elements) for selector, elements in groups.items()
        if MIN_REPEATS <= len(elements) <= MAX_REPEATS and _has_item_links(elements)
    ]
    candidates.sort(key=lambda item: len(item[1]), reverse=True)
    return candidates


def _guess_item(article_selector: str, elements: List[Tag], page_url: str) -> Optional[ListPageGuess]:
    for element in elements[:3]:
        links = element.find_all('a', href=True)
        if not links:
            continue

        main_link = max(links, key=lambda link: len(_text(link)))
        sample_url = resolve_link(main_link.get('href'), page_url)
        if not sample_url:
            continue

        heading = main_link.find_parent(HEADINGS)
        if heading is not None and _is_inside(heading, element):
            title_selector = _tag_with_class(heading)
            link_selector = f"{title_selector} > a"
            if element.select_one(link_selector) is None:
                link_selector = f"{title_selector} a"
        elif _classes(main_link):
            link_selector = title_selector = f"a.{_classes(main_link)[0]}"
        else:
            link_selector = title_selector = 'a'

        date_selector = None
        for tag in element.find_all(True):
            if _is_leaf(tag) and _DATE_RE.search(tag.get_text()):
                date_selector = _class_or_tag(tag)
                break

        description_selector = None
        main_text = _text(main_link)
        for tag in element.find_all(['p', 'div']):
            text = _text(tag)
            if len(text) >= MIN_DESCRIPTION_TEXT and text != main_text and not _is_inside(main_link, tag):
                description_selector = _class_or_tag(tag)
                break

        return ListPageGuess(
            article_selector=article_selector,
            title_selector=title_selector,
            link_selector=link_selector,
            sample_url=sample_url,
            date_selector=date_selector,
            description_selector=description_selector,
        )
    return None


def analyze_list_page(html: str, page_url: str) -> Optional[ListPageGuess]:
    """
    Guess list page selectors.

    Returns:
        The first repeated container that yields a usable article link,
        or None when the page has no recognizable list
    """
    root = _root(BeautifulSoup(html, 'html.parser'))
    for selector, elements in _repeated_groups(root):
        guess = _guess_item(selector, elements, page_url)
        if guess:
            logger.debug("List container %s (%d items)", selector, len(elements))
            return guess
    return None


def _content_score(block: Tag) -> float:
    paragraphs = block.find_all('p', recursive=False)
    if not paragraphs:
        return 0.0

    score = sum(len(_text(p)) for p in paragraphs) + PARAGRAPH_BONUS * len(paragraphs)

    text_length = len(_text(block))
    link_length = sum(len(_text(link)) for link in block.find_all('a'))
    if text_length and link_length / text_length > MAX_LINK_DENSITY:
        # navigation or related-article lists
        score *= 0.1
    return score


def analyze_detail_page(html: str) -> DetailPageGuess:
    """Guess detail page selectors; falls back to readability for the body."""
    soup = BeautifulSoup(html, 'html.parser')
    root = _root(soup)
    guess = DetailPageGuess()

    heading = root.find('h1')
    if heading is not None:
        guess.title_selector = _tag_with_class(heading)

    best, best_score = None, 0.0
    for block in root.find_all(['div', 'article', 'section']):
        score = _content_score(block)
        if score > best_score:
            best, best_score = block, score

    if best is not None:
        selector = _block_selector(best)
        # Only keep selectors whose first match is the block itself
        if selector and root.select_one(selector) is best:
            guess.content_selector = selector
            guess.use_readability = False

    if heading is not None and heading.parent is not None:
        for tag in heading.parent.find_all(True):
            if tag is heading or not _is_leaf(tag):
                continue
            text = tag.get_text()
            if guess.date_selector is None and _DATE_RE.search(text):
                guess.date_selector = _class_or_tag(tag)
            elif guess.author_selector is None and (
                    '者' in text or any('author' in name for name in _classes(tag))):
                guess.author_selector = _class_or_tag(tag)

    if guess.date_selector is None:
        for tag in root.find_all(True):
            text = tag.get_text()
            if _is_leaf(tag) and len(text) < MAX_DATE_TEXT and _DATE_RE.search(text):
                guess.date_selector = _class_or_tag(tag)
                break

    return guess


def guess_url_pattern(url: str) -> Optional[str]:
    """Replace the last number after the host with ``{page}``."""
    parts = urlsplit(url)
    prefix = f"{parts.scheme}://{parts.netloc}"
    rest = url[len(prefix):]
    matches = list(_NUMBER_RE.finditer(rest))
    if not matches:
        return None
    last = matches[-1]
    return prefix + rest[:last.start()] + PAGE_PLACEHOLDER + rest[last.end():]


def guess_site_name(url: str) -> str:
    host = urlsplit(url).hostname or 'site'
    if host.startswith('www.'):
        host = host[4:]
    return host.split('.')[0]


def build_site_config(url: str, list_guess: ListPageGuess, detail_guess: DetailPageGuess,
                      name: Optional[str] = None, render_javascript: bool = True) -> SiteConfig:
    """Assemble and validate a site config from the page guesses."""
    parts = urlsplit(url)
    url_pattern = guess_url_pattern(url)

    data = {
        'name': name or guess_site_name(url),
        'baseUrl': f"{parts.scheme}://{parts.netloc}",
        'url': url,
        'listPage': {
            'articleSelector': list_guess.article_selector,
            'titleSelector': list_guess.title_selector,
            'linkSelector': list_guess.link_selector,
            'dateSelector': list_guess.date_selector,
            'descriptionSelector': list_guess.description_selector,
        },
        'detailPage': {
            'titleSelector': detail_guess.title_selector,
            'contentSelector': detail_guess.content_selector,
            'authorSelector': detail_guess.author_selector,
            'dateSelector': detail_guess.date_selector,
            'useReadability': detail_guess.use_readability,
        },
        'pagination': {
            'enabled': url_pattern is not None,
            'urlPattern': url_pattern,
            'startPage': 1,
            'maxPages': GENERATED_MAX_PAGES if url_pattern else 1,
        },
        'delay': GENERATED_DELAY_MS,
        'maxArticles': GENERATED_MAX_ARTICLES,
        'enabled': True,
        'renderJavascript': render_javascript,
    }

    try:
        return SiteConfig.from_dict(data)
    except ValidationError as e:
        raise ConfigurationError(f"Generated config for {url} is invalid: {e}") from e


def write_site_config(config: SiteConfig, sites_dir: str, overwrite: bool = False) -> Path:
    """Write ``<sites_dir>/<name>.json`` in the same camelCase format the loader reads."""
    directory = Path(sites_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{config.name}.json"

    if path.exists() and not overwrite:
        raise ConfigurationError(f"{path} already exists")

    data = config.model_dump(mode='json', by_alias=True, exclude_none=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding='utf-8')
    logger.info("Site config written: %s", path)
    return path


class ConfigGenerator:
    """Drafts a site config from a live list page and one of its articles."""

    def __init__(self, renderer: Renderer, settle_ms: int = 2000):
        self.renderer = renderer
        self.settle_ms = settle_ms

    async def generate(self, url: str, name: Optional[str] = None,
                       render_javascript: bool = True) -> SiteConfig:
        """
        Raises:
            NavigationError: The list page could not be loaded
            ConfigurationError: No article list was recognized
        """
        logger.info("Analyzing list page: %s", url)
        list_guess = analyze_list_page(await self._fetch(url), url)
        if list_guess is None:
            raise ConfigurationError(f"Could not identify an article list on {url}")

        logger.info("Analyzing sample article: %s", list_guess.sample_url)
        try:
            detail_guess = analyze_detail_page(await self._fetch(list_guess.sample_url))
        except NavigationError as e:
            logger.warning("Sample article failed to load, using defaults: %s", e)
            detail_guess = DetailPageGuess()

        return build_site_config(url, list_guess, detail_guess, name=name,
                                 render_javascript=render_javascript)

    async def _fetch(self, url: str) -> str:
        page = await self.renderer.navigate(url, settle_ms=self.settle_ms)
        try:
            return await page.content()
        finally:
            await page.close()
