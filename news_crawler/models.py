"""SQLAlchemy models."""

from sqlalchemy import Column, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


class Article(Base):
    """Crawled article."""
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(1000), nullable=False)
    url = Column(String(2000), nullable=False, unique=True)  # Global identity key
    source = Column(String(200), nullable=False, index=True)
    content = Column(Text)
    summary = Column(Text)  # AI summary, filled in after the crawl
    author = Column(String(200))
    publish_date = Column(Date)
    crawl_date = Column(DateTime, default=func.now())
    update_date = Column(DateTime, default=func.now(), onupdate=func.now())
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        Index('idx_articles_publish_date', 'publish_date'),
        Index('idx_articles_crawl_date', 'crawl_date'),
    )


class CrawlLog(Base):
    """One row per crawl run of one site."""
    __tablename__ = "crawl_logs"

    id = Column(Integer, primary_key=True, index=True)
    source = Column(String(200), nullable=False, index=True)
    status = Column(String(50), nullable=False)  # success, failed, partial
    articles_found = Column(Integer, default=0)
    articles_saved = Column(Integer, default=0)
    error_message = Column(Text)
    start_time = Column(DateTime)
    end_time = Column(DateTime)
    created_at = Column(DateTime, default=func.now(), index=True)
