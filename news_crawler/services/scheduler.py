"""Crawl pipeline and interval scheduler."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..config import Settings
from ..crawler.base import Article, CrawlRunLog, RunStatus
from ..crawler.engine import CrawlerEngine
from ..site_config import SiteConfig, SiteConfigLoader
from ..storage.base import ArticleRepository, CrawlLogRepository
from ..utils.logging_config import log_operation
from .summarizer import SummarizationClient


logger = logging.getLogger(__name__)

EngineFactory = Callable[[SiteConfig], CrawlerEngine]


class CrawlScheduler:
    """
    Runs the crawl -> store -> summarize pipeline per site.

    All collaborators are passed in; sites are crawled one after another
    and a failing site never stops the others.
    """

    def __init__(self, settings: Settings, site_loader: SiteConfigLoader,
                 articles: ArticleRepository, logs: CrawlLogRepository,
                 summarizer: SummarizationClient,
                 engine_factory: Optional[EngineFactory] = None):
        self.settings = settings
        self.site_loader = site_loader
        self.articles = articles
        self.logs = logs
        self.summarizer = summarizer
        self._engine_factory = engine_factory or (lambda config: CrawlerEngine(config, settings))

        self.running = False
        self._tasks: Dict[str, asyncio.Task] = {}

    async def crawl_site(self, config: SiteConfig) -> CrawlRunLog:
        """Crawl one site, store new articles, summarize them and record the run."""
        run = CrawlRunLog(source=config.name, start_time=datetime.utcnow())
        log_operation(logger, 'crawl_site', 'started', source=config.name, url=config.url)

        try:
            engine = self._engine_factory(config)
            try:
                crawled = await engine.crawl()
            finally:
                await engine.close()

            run.articles_found = len(crawled)
            new_articles = await self._store(crawled)
            run.articles_saved = len(new_articles)
            logger.info("Saved %d new articles for %s", run.articles_saved, config.name)

            if new_articles:
                await self._summarize(new_articles)
            else:
                logger.info("No new articles for %s", config.name)

        except Exception as e:
            run.status = RunStatus.FAILED
            run.error_message = str(e) or e.__class__.__name__
            logger.exception("Crawl failed for %s", config.name)

        run.end_time = datetime.utcnow()
        await self._record(run)

        log_operation(
            logger, 'crawl_site', 'completed' if run.status != RunStatus.FAILED else 'failed',
            source=run.source,
            status=run.status.value,
            found=run.articles_found,
            saved=run.articles_saved,
            elapsed=f"{run.duration_seconds:.2f}s",
        )
        return run

    async def _store(self, crawled: List[Article]) -> List[Article]:
        new_articles = []
        for article in crawled:
            if await self.articles.save_if_not_exists(article):
                new_articles.append(article)
        return new_articles

    async def _summarize(self, new_articles: List[Article]):
        if not self.summarizer.enabled:
            return

        logger.info("Generating summaries for %d new articles", len(new_articles))
        summaries = await self.summarizer.summarize_batch(new_articles)
        for url, summary in summaries.items():
            await self.articles.update_summary(url, summary)

        logger.info("Summaries written: %d (omitted: %d, failed: %d, skipped: %d)",
                    len(summaries), len(summaries.omitted), len(summaries.failed),
                    len(summaries.skipped))

    async def _record(self, run: CrawlRunLog):
        try:
            await self.logs.record_run(run)
        except Exception as e:
            logger.error("Failed to record crawl log for %s: %s", run.source, e)

    async def crawl_all(self) -> List[CrawlRunLog]:
        """Crawl every enabled site sequentially."""
        configs = self.site_loader.enabled_sites()
        logger.info("Crawling %d sites", len(configs))

        runs = []
        for config in configs:
            runs.append(await self.crawl_site(config))

        logger.info("All sites crawled")
        return runs

    async def crawl_by_name(self, name: str) -> Optional[CrawlRunLog]:
        config = self.site_loader.get(name)
        if config is None:
            logger.error("No site config named %r", name)
            return None
        return await self.crawl_site(config)

    async def start(self):
        """Start crawling all sites every ``schedule_interval_minutes``."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        self.running = True
        logger.info("Starting scheduler, interval: %d minutes", self.settings.schedule_interval_minutes)
        self._tasks['main'] = asyncio.create_task(self._scheduler_loop())

    async def stop(self):
        """Stop the scheduler and wait for the loop to exit."""
        if not self.running:
            return

        logger.info("Stopping scheduler")
        self.running = False

        for task in self._tasks.values():
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self._tasks.clear()

    async def wait(self):
        """Block until the scheduler loop ends."""
        task = self._tasks.get('main')
        if task:
            await task

    async def _scheduler_loop(self):
        interval = self.settings.schedule_interval_minutes * 60
        while self.running:
            try:
                await self.crawl_all()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("Scheduled crawl failed: %s", e)

            await asyncio.sleep(interval)
