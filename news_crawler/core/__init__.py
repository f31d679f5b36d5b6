"""Core infrastructure: exceptions and HTTP client."""

from .exceptions import (
    NewsCrawlerError,
    ConfigurationError,
    DatabaseError,
    NavigationError,
    ExtractionError,
    APIError,
    RateLimitError,
)

__all__ = [
    'NewsCrawlerError',
    'ConfigurationError',
    'DatabaseError',
    'NavigationError',
    'ExtractionError',
    'APIError',
    'RateLimitError',
]
