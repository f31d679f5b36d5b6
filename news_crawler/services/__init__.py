"""Services: summarization and crawl scheduling."""

from .prompts import SummaryPrompts
from .scheduler import CrawlScheduler
from .summarizer import BatchSummary, QwenBackend, SummarizationClient, SummaryBackend

__all__ = [
    'SummaryPrompts',
    'CrawlScheduler',
    'BatchSummary',
    'QwenBackend',
    'SummarizationClient',
    'SummaryBackend',
]
