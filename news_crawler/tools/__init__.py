"""Helper tools for maintaining site configs."""

from .config_generator import (
    ConfigGenerator,
    DetailPageGuess,
    ListPageGuess,
    analyze_detail_page,
    analyze_list_page,
    build_site_config,
    guess_site_name,
    guess_url_pattern,
    write_site_config,
)

__all__ = [
    'ConfigGenerator',
    'DetailPageGuess',
    'ListPageGuess',
    'analyze_detail_page',
    'analyze_list_page',
    'build_site_config',
    'guess_site_name',
    'guess_url_pattern',
    'write_site_config',
]
