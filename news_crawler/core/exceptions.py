"""Custom exceptions for the news crawler."""


class NewsCrawlerError(Exception):
    """Base exception for the news crawler."""
    pass


class ConfigurationError(NewsCrawlerError):
    """Configuration related errors."""
    pass


class DatabaseError(NewsCrawlerError):
    """Database related errors."""
    pass


class NavigationError(NewsCrawlerError):
    """A list or detail page could not be loaded."""

    def __init__(self, url: str, message: str = None):
        super().__init__(message or f"Failed to load {url}")
        self.url = url


class ExtractionError(NewsCrawlerError):
    """Content extraction errors."""
    pass


class APIError(NewsCrawlerError):
    """External API errors."""

    def __init__(self, message: str, status_code: int = None, response_text: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class RateLimitError(APIError):
    """The external API asked us to slow down."""

    def __init__(self, message: str = "Rate limit exceeded", response_text: str = None):
        super().__init__(message, status_code=429, response_text=response_text)
