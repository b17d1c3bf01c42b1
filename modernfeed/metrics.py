"""Prometheus-style metrics for feed ingestion."""

import threading
from typing import Any


class Metrics:
    """Thread-safe process-wide counters with Prometheus output format."""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls) -> "Metrics":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self._data_lock = threading.Lock()
        self.feeds_synced_total: int = 0
        self.feed_sync_failures_total: int = 0
        self.articles_created_total: int = 0
        self.discovery_requests_total: int = 0
        self.opml_feeds_imported_total: int = 0
        self.sync_failures_by_feed: dict[str, int] = {}

    def record_sync(self, new_articles: int) -> None:
        with self._data_lock:
            self.feeds_synced_total += 1
            self.articles_created_total += new_articles

    def record_sync_failure(self, feed_id: str) -> None:
        with self._data_lock:
            self.feed_sync_failures_total += 1
            self.sync_failures_by_feed[feed_id] = self.sync_failures_by_feed.get(feed_id, 0) + 1

    def record_discovery(self) -> None:
        with self._data_lock:
            self.discovery_requests_total += 1

    def record_import(self) -> None:
        with self._data_lock:
            self.opml_feeds_imported_total += 1

    def to_prometheus(self) -> str:
        """Export metrics in Prometheus text format."""
        counters = [
            ("feeds_synced_total", "Successful feed syncs", self.feeds_synced_total),
            ("feed_sync_failures_total", "Failed feed syncs", self.feed_sync_failures_total),
            ("articles_created_total", "Articles created by syncs", self.articles_created_total),
            ("discovery_requests_total", "Feed discovery requests", self.discovery_requests_total),
            ("opml_feeds_imported_total", "Feeds imported from OPML", self.opml_feeds_imported_total),
        ]
        with self._data_lock:
            lines = []
            for name, help_text, value in counters:
                lines.append(f"# HELP {name} {help_text}")
                lines.append(f"# TYPE {name} counter")
                lines.append(f"{name} {value}")
                lines.append("")
            lines.append("# HELP feed_sync_failures Failed syncs by feed")
            lines.append("# TYPE feed_sync_failures counter")
            for feed_id, count in sorted(self.sync_failures_by_feed.items()):
                lines.append(f'feed_sync_failures{{feed_id="{feed_id}"}} {count}')
            lines.append("")
            return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Export metrics as dictionary."""
        with self._data_lock:
            return {
                "feeds_synced_total": self.feeds_synced_total,
                "feed_sync_failures_total": self.feed_sync_failures_total,
                "articles_created_total": self.articles_created_total,
                "discovery_requests_total": self.discovery_requests_total,
                "opml_feeds_imported_total": self.opml_feeds_imported_total,
                "sync_failures_by_feed": dict(self.sync_failures_by_feed),
            }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        with self._data_lock:
            self.feeds_synced_total = 0
            self.feed_sync_failures_total = 0
            self.articles_created_total = 0
            self.discovery_requests_total = 0
            self.opml_feeds_imported_total = 0
            self.sync_failures_by_feed = {}


metrics = Metrics()
