"""Database connection management."""

import logging
import os

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .config import Settings
from .core.exceptions import DatabaseError


logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


class Database:
    """Owns the async engine and session factory for one database URL."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs = {'echo': echo, 'future': True}

        if url.startswith("postgresql+asyncpg://"):
            engine_kwargs.update(
                pool_size=5,
                max_overflow=10,
                pool_pre_ping=True,
                pool_recycle=300,
                connect_args={
                    "server_settings": {"application_name": "news_crawler"},
                    "command_timeout": 60,
                },
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.get_async_database_url())

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def init(self):
        """Create tables and verify the database is reachable."""
        # Import models so they are registered on Base.metadata
        from . import models  # noqa

        self._ensure_sqlite_dir()
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            raise DatabaseError(f"Database initialization failed: {e}") from e

        logger.info("Database ready: %s", make_url(self.url).render_as_string(hide_password=True))

    async def test_connection(self) -> bool:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database connection test failed: %s", e)
            return False

    async def close(self):
        await self.engine.dispose()

    def _ensure_sqlite_dir(self):
        url = make_url(self.url)
        if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
            directory = os.path.dirname(url.database)
            if directory:
                os.makedirs(directory, exist_ok=True)
