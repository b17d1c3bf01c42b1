"""CLI commands for ModernFeed"""

import json

import aiofiles
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import config_path
from .container import Container
from .logging_config import get_logger
from .models import Config

console = Console()
logger = get_logger(__name__)


async def cmd_discover(cfg: Config, url: str):
    """Find subscribable feeds for a URL."""
    async with Container(cfg) as c:
        result = await c.service.discover(url)

    if not result["feeds"]:
        console.print(f"[yellow]No feeds found for {url}[/yellow]")
        return
    if result["directFeed"]:
        console.print("[green]URL is a feed[/green]")
    table = Table(title="Discovered feeds", border_style="blue")
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("URL", style="green")
    for feed in result["feeds"]:
        table.add_row(feed["type"], feed["title"], feed["url"])
    console.print(table)


async def cmd_add(cfg: Config, url: str, category_id: str | None = None):
    """Subscribe to a feed."""
    async with Container(cfg) as c:
        feed = await c.service.add_feed(url, category_id)
        count = await c.article_repo.count(feed["id"])
    console.print(
        f"[green]Added[/green] {feed['title']} [dim]({feed['url']})[/dim], {count} articles"
    )


async def cmd_refresh(cfg: Config):
    """Sync every active feed."""
    async with Container(cfg) as c:
        feeds = await c.feed_repo.list_active()
        console.print(f"Refreshing {len(feeds)} feeds...")
        result = await c.service.refresh()
    console.print(f"[green]Done![/green] New articles: {result['newArticles']}")


async def cmd_feeds(cfg: Config):
    """List subscriptions."""
    async with Container(cfg) as c:
        feeds = await c.service.list_feeds()

    if not feeds:
        console.print("[dim]No feeds. Use 'modernfeed add URL' to subscribe.[/dim]")
        return
    table = Table(title="Feeds", border_style="blue")
    table.add_column("Title", style="cyan")
    table.add_column("Category")
    table.add_column("Unread", justify="right", style="green")
    table.add_column("Errors", justify="right")
    table.add_column("URL", style="dim")
    for feed in feeds:
        errors = feed["errorCount"]
        table.add_row(
            feed["title"][:40],
            feed.get("categoryName") or "",
            str(feed.get("unreadCount") or 0),
            f"[red]{errors}[/red]" if errors else "0",
            feed["url"],
        )
    console.print(table)


async def cmd_health(cfg: Config) -> bool:
    """Report feeds whose consecutive error count reached the threshold."""
    async with Container(cfg) as c:
        report = await c.service.health()

    table = Table(title="Feed Health", show_header=False, border_style="blue")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Total feeds", str(report["totalFeeds"]))
    table.add_row("Failing feeds", str(report["failingFeeds"]))
    console.print(table)

    for feed in report["feedsWithErrors"]:
        console.print(f"  - [red]{feed['title']}[/red]: {feed['url']} ({feed['errorCount']} errors)")

    return report["failingFeeds"] == 0


async def cmd_export(cfg: Config, output: str | None = None):
    """Write subscriptions as OPML to a file or stdout."""
    async with Container(cfg) as c:
        text = await c.service.export_opml()

    if output is None:
        print(text)
        return
    async with aiofiles.open(output, "w", encoding="utf-8") as f:
        await f.write(text)
    console.print(f"OPML written to: {output}")


async def cmd_import(cfg: Config, path: str):
    """Subscribe to every feed listed in an OPML file."""
    async with aiofiles.open(path, encoding="utf-8") as f:
        text = await f.read()

    async with Container(cfg) as c:
        result = await c.service.import_opml(text)

    console.print(
        Panel(
            f"  Imported: {result['imported']}\n"
            f"  Skipped: {result['skipped']}\n"
            f"  Total: {result['total']}",
            title="Import",
            border_style="green",
        )
    )
    for error in result.get("errors", []):
        console.print(f"  [red]{error}[/red]")


async def cmd_extract(cfg: Config, url: str):
    """Print the readable content of an article page."""
    async with Container(cfg) as c:
        result = await c.service.extract_article(url)

    if not result["content"]:
        console.print("[yellow]No readable content found[/yellow]")
        return
    console.print(Panel(result["title"] or url, style="bold blue"))
    if result["byline"]:
        console.print(f"[dim]{result['byline']}[/dim]")
    console.print(result["content"])


def cmd_config(cfg: Config):
    """Show current configuration."""
    console.print(Panel(json.dumps(cfg.model_dump(), indent=2, ensure_ascii=False), title="Current Config"))
    path = config_path()
    console.print(f"\nConfig file: {path}")
    if not path.exists():
        console.print(
            "[dim]No config file found. Using defaults. "
            "Create ~/.modernfeed/config.json to customize.[/dim]"
        )
