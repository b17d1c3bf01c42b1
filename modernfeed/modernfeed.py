#!/usr/bin/env python3
"""
ModernFeed - feed ingestion and sync

Unified CLI for subscription management:
  discover  - Find feeds for a site or feed URL
  add       - Subscribe to a feed
  refresh   - Sync all active feeds
  feeds     - List subscriptions
  health    - Report failing feeds
  export    - Export subscriptions as OPML
  import    - Import subscriptions from OPML
  extract   - Show the readable content of an article page
  config    - Show current configuration
"""

import argparse
import asyncio
import sys

from rich.console import Console

from modernfeed.cli import (
    cmd_add,
    cmd_config,
    cmd_discover,
    cmd_export,
    cmd_extract,
    cmd_feeds,
    cmd_health,
    cmd_import,
    cmd_refresh,
)
from modernfeed.config import load_config
from modernfeed.errors import ModernFeedError
from modernfeed.logging_config import setup_logging

err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ModernFeed - feed ingestion and sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # discover command
    disc_parser = subparsers.add_parser("discover", help="Find feeds for a site or feed URL")
    disc_parser.add_argument("url", help="Site or feed URL")

    # add command
    add_parser = subparsers.add_parser("add", help="Subscribe to a feed")
    add_parser.add_argument("url", help="Feed URL")
    add_parser.add_argument("--category-id", default=None, help="Category to file the feed under")

    subparsers.add_parser("refresh", help="Sync all active feeds")
    subparsers.add_parser("feeds", help="List subscriptions")
    subparsers.add_parser("health", help="Report failing feeds")

    # export command
    exp_parser = subparsers.add_parser("export", help="Export subscriptions as OPML")
    exp_parser.add_argument("-o", "--output", default=None, help="Output file (default: stdout)")

    # import command
    imp_parser = subparsers.add_parser("import", help="Import subscriptions from OPML")
    imp_parser.add_argument("file", help="OPML file")

    # extract command
    ext_parser = subparsers.add_parser("extract", help="Show the readable content of an article")
    ext_parser.add_argument("url", help="Article URL")

    subparsers.add_parser("config", help="Show current configuration")
    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    try:
        cfg = load_config()
    except ValueError as e:
        err_console.print(f"[red]{e}[/red]")
        sys.exit(1)
    setup_logging(cfg.log_level, json_output=args.json_logs)

    try:
        if args.command == "discover":
            asyncio.run(cmd_discover(cfg, args.url))
        elif args.command == "add":
            asyncio.run(cmd_add(cfg, args.url, category_id=args.category_id))
        elif args.command == "refresh":
            asyncio.run(cmd_refresh(cfg))
        elif args.command == "feeds":
            asyncio.run(cmd_feeds(cfg))
        elif args.command == "health":
            healthy = asyncio.run(cmd_health(cfg))
            sys.exit(0 if healthy else 1)
        elif args.command == "export":
            asyncio.run(cmd_export(cfg, output=args.output))
        elif args.command == "import":
            asyncio.run(cmd_import(cfg, args.file))
        elif args.command == "extract":
            asyncio.run(cmd_extract(cfg, args.url))
        elif args.command == "config":
            cmd_config(cfg)
        else:
            parser.print_help()
    except ModernFeedError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except OSError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
