"""Feed health aggregation."""

from typing import Any, Iterable

from .models import FeedHealth
from .repositories import FeedRepository

FAILING_THRESHOLD = 3


def summarize_health(
    feeds: Iterable[dict[str, Any]], threshold: int = FAILING_THRESHOLD
) -> FeedHealth:
    """A feed is failing once its consecutive error count reaches ``threshold``."""
    feeds = list(feeds)
    failing = [f for f in feeds if (f.get("error_count") or 0) >= threshold]
    return FeedHealth(
        total_feeds=len(feeds),
        failing_feeds=len(failing),
        feeds_with_errors=failing,
    )


async def feed_health(feed_repo: FeedRepository, threshold: int = FAILING_THRESHOLD) -> FeedHealth:
    return summarize_health(await feed_repo.list_all(), threshold)
