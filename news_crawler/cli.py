"""Command line interface for the news crawler."""

import asyncio
import sys
from contextlib import asynccontextmanager
from functools import wraps
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import get_settings
from .core.exceptions import ConfigurationError, NavigationError
from .crawler.base import RunStatus
from .crawler.engine import build_renderer
from .services.scheduler import CrawlScheduler
from .services.summarizer import SummarizationClient
from .site_config import SiteConfigLoader
from .storage import create_repositories
from .tools.config_generator import ConfigGenerator, write_site_config
from .utils.logging_config import setup_logging


console = Console()


def async_command(f):
    """Decorator to run async CLI commands."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))
    return wrapper


@asynccontextmanager
async def build_scheduler():
    """Wire settings, storage and summarizer into a scheduler, closing them afterwards."""
    settings = get_settings()
    loader = SiteConfigLoader(settings.sites_dir, default_delay=settings.crawl_interval)
    articles, logs = await create_repositories(settings)
    summarizer = SummarizationClient.from_settings(settings)
    try:
        yield CrawlScheduler(settings, loader, articles, logs, summarizer)
    finally:
        await summarizer.close()
        await articles.close()
        await logs.close()


@click.group()
@click.version_option(version=__version__)
@click.option('--log-level', default=None, help='Override LOG_LEVEL')
def cli(log_level: Optional[str]):
    """Config-driven news crawler with AI summaries."""
    settings = get_settings()
    setup_logging(level=log_level or settings.log_level, log_file=settings.log_file_path)


@cli.command()
@click.option('--site', 'site_name', default=None, help='Crawl only this site')
@async_command
async def crawl(site_name: Optional[str]):
    """Crawl all enabled sites once."""
    async with build_scheduler() as scheduler:
        if site_name:
            run = await scheduler.crawl_by_name(site_name)
            if run is None:
                console.print(f"[red]Unknown site:[/red] {site_name}")
                sys.exit(1)
            runs = [run]
        else:
            runs = await scheduler.crawl_all()

    table = Table(title="Crawl Results")
    table.add_column("Site", style="cyan")
    table.add_column("Status")
    table.add_column("Found", justify="right")
    table.add_column("Saved", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Error")

    for run in runs:
        status_style = "green" if run.status == RunStatus.SUCCESS else "red"
        table.add_row(
            run.source,
            f"[{status_style}]{run.status.value}[/{status_style}]",
            str(run.articles_found),
            str(run.articles_saved),
            f"{run.duration_seconds:.1f}s",
            run.error_message or "",
        )
    console.print(table)

    if any(run.status == RunStatus.FAILED for run in runs):
        sys.exit(1)


@cli.command()
def sites():
    """List configured sites."""
    settings = get_settings()
    loader = SiteConfigLoader(settings.sites_dir, default_delay=settings.crawl_interval)
    configs = loader.all_sites()

    if not configs:
        console.print(f"[yellow]No site configs found in {settings.sites_dir}[/yellow]")
        return

    table = Table(title="Configured Sites")
    table.add_column("Name", style="cyan")
    table.add_column("URL")
    table.add_column("Enabled")
    table.add_column("Pages", justify="right")
    table.add_column("Cap", justify="right")
    table.add_column("Mode")

    for config in configs:
        pagination = config.pagination
        pages = str(len(pagination.page_numbers())) \
            if pagination.enabled and pagination.url_pattern else "1"
        table.add_row(
            config.name,
            config.url,
            "✅" if config.enabled else "❌",
            pages,
            str(config.max_articles or "-"),
            "readability" if config.detail_page.use_readability else "selector",
        )
    console.print(table)


@cli.command()
@async_command
async def check():
    """Check site configs, storage and the summarization API."""
    settings = get_settings()
    ok = True

    loader = SiteConfigLoader(settings.sites_dir, default_delay=settings.crawl_interval)
    enabled = loader.enabled_sites()
    console.print(f"✅ Site configs loaded: {len(enabled)} enabled")

    try:
        articles, logs = await create_repositories(settings)
        await articles.stats()
        await articles.close()
        await logs.close()
        console.print(f"✅ Storage ready ({settings.storage_type})")
    except Exception as e:
        ok = False
        console.print(f"[red]❌ Storage check failed:[/red] {e}")

    summarizer = SummarizationClient.from_settings(settings)
    try:
        if not summarizer.enabled:
            console.print("[yellow]⚠️ QWEN_API_KEY not set, summaries disabled[/yellow]")
        elif await summarizer.test_connection():
            console.print("✅ Summarization API reachable")
        else:
            ok = False
            console.print("[red]❌ Summarization API test failed[/red]")
    finally:
        await summarizer.close()

    if not ok:
        sys.exit(1)


@cli.command()
@async_command
async def schedule():
    """Crawl all sites every SCHEDULE_INTERVAL_MINUTES until interrupted."""
    async with build_scheduler() as scheduler:
        await scheduler.start()
        console.print("[green]Scheduler started, press Ctrl+C to stop[/green]")
        try:
            await scheduler.wait()
        finally:
            await scheduler.stop()


@cli.command()
@click.option('--source', default=None, help='Only this source')
@async_command
async def stats(source: Optional[str]):
    """Show stored article counts per source."""
    settings = get_settings()
    articles, logs = await create_repositories(settings)
    try:
        counts = await articles.stats(source)
    finally:
        await articles.close()
        await logs.close()

    table = Table(title="Stored Articles")
    table.add_column("Source", style="cyan")
    table.add_column("Articles", justify="right")
    for name, count in sorted(counts.items()):
        table.add_row(name, str(count))
    console.print(table)


@cli.command(name='logs')
@click.option('--source', required=True, help='Source name')
@click.option('--limit', default=10, show_default=True)
@async_command
async def show_logs(source: str, limit: int):
    """Show recent crawl runs of a source."""
    settings = get_settings()
    articles, logs = await create_repositories(settings)
    try:
        runs = await logs.recent(source, limit)
    finally:
        await articles.close()
        await logs.close()

    table = Table(title=f"Recent Runs: {source}")
    table.add_column("Started")
    table.add_column("Status")
    table.add_column("Found", justify="right")
    table.add_column("Saved", justify="right")
    table.add_column("Error")
    for run in runs:
        table.add_row(
            run.start_time.strftime('%Y-%m-%d %H:%M:%S') if run.start_time else "-",
            run.status.value,
            str(run.articles_found),
            str(run.articles_saved),
            run.error_message or "",
        )
    console.print(table)


@cli.command(name='generate-config')
@click.argument('url')
@click.option('--name', default=None, help='Site name (default: from the host name)')
@click.option('--output-dir', default=None, help='Directory to write to (default: SITES_DIR)')
@click.option('--http', 'use_http', is_flag=True, help='Fetch without a browser')
@click.option('--force', is_flag=True, help='Overwrite an existing file')
@async_command
async def generate_config(url: str, name: Optional[str], output_dir: Optional[str], use_http: bool, force: bool):
    """Draft a site config from a list page URL."""
    settings = get_settings()
    render_javascript = not use_http
    renderer = build_renderer(settings, render_javascript)
    generator = ConfigGenerator(renderer, settle_ms=settings.list_page_settle_ms)

    try:
        config = await generator.generate(url, name=name, render_javascript=render_javascript)
        path = write_site_config(config, output_dir or settings.sites_dir, overwrite=force)
    except (NavigationError, ConfigurationError) as e:
        console.print(f"[red]❌ Config generation failed:[/red] {e}")
        sys.exit(1)
    finally:
        await renderer.close()

    table = Table(title=f"Generated: {config.name}")
    table.add_column("Field", style="cyan")
    table.add_column("Selector")
    rows = [
        ("articleSelector", config.list_page.article_selector),
        ("titleSelector", config.list_page.title_selector),
        ("linkSelector", config.list_page.link_selector),
        ("list dateSelector", config.list_page.date_selector),
        ("descriptionSelector", config.list_page.description_selector),
        ("detail titleSelector", config.detail_page.title_selector),
        ("contentSelector", config.detail_page.content_selector or "(readability)"),
        ("authorSelector", config.detail_page.author_selector),
        ("detail dateSelector", config.detail_page.date_selector),
        ("urlPattern", config.pagination.url_pattern),
    ]
    for field_name, value in rows:
        table.add_row(field_name, value or "-")
    console.print(table)
    console.print(f"✅ Written to {path}")
    console.print("[yellow]⚠️ Review the selectors and pagination before enabling crawls[/yellow]")


def main():
    cli()


if __name__ == '__main__':
    main()
