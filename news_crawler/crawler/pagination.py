"""List-page URL resolution."""

from typing import List

from ..site_config import SiteConfig, PAGE_PLACEHOLDER


def resolve_page_urls(config: SiteConfig) -> List[str]:
    """
    Return the ordered list-page URLs to visit for a site.

    Pagination is a static expansion of ``urlPattern`` over
    ``[startPage, maxPages]``, where 0 in either counts as 1; a pattern
    without the ``{page}`` placeholder is used as-is for every page. Without pagination, or
    with pagination but no pattern, only the seed URL is visited.
    """
    pagination = config.pagination

    if not pagination or not pagination.enabled or not pagination.url_pattern:
        return [config.url]

    return [
        pagination.url_pattern.replace(PAGE_PLACEHOLDER, str(page))
        for page in pagination.page_numbers()
    ]
