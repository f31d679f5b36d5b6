"""Data structures passed between crawler components."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class RunStatus(str, Enum):
    """Terminal status of one crawl run."""
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass(frozen=True)
class CandidateSummary:
    """Article stub parsed from a list page, not yet a full article."""
    title: str
    url: str
    date: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Article:
    """Article data structure."""
    title: str
    url: str
    source: str
    content: str = ""
    summary: Optional[str] = None
    author: Optional[str] = None
    publish_date: Optional[date] = None
    crawl_date: datetime = field(default_factory=datetime.utcnow)
    update_date: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        """An article is kept only when both title and content are present."""
        return bool(self.title and self.title.strip() and self.content and self.content.strip())


@dataclass
class CrawlRunLog:
    """Outcome of one crawl run for one site."""
    source: str
    status: RunStatus = RunStatus.SUCCESS
    articles_found: int = 0
    articles_saved: int = 0
    error_message: Optional[str] = None
    start_time: datetime = field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        if not self.end_time:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
