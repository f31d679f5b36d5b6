"""Config-driven news crawler with deduplicated storage and AI summaries."""

__version__ = "1.0.0"
