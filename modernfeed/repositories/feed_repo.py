"""Feed repository for subscription records and sync bookkeeping."""

from datetime import datetime
from typing import Any, Optional

from ..database import Database
from ..logging_config import get_logger

logger = get_logger(__name__)


class FeedRepository:
  """Repository for feeds and their per-feed error counters."""

  def __init__(self, db: Database):
    self._db = db

  async def add(self, feed: dict[str, Any]) -> dict[str, Any]:
    return await self._db.add_feed(feed)

  async def get(self, feed_id: str) -> Optional[dict[str, Any]]:
    return await self._db.get_feed(feed_id)

  async def find_by_url(self, url: str) -> Optional[dict[str, Any]]:
    return await self._db.get_feed_by_url(url)

  async def exists(self, url: str) -> bool:
    return await self._db.get_feed_by_url(url) is not None

  async def list_all(self) -> list[dict[str, Any]]:
    return await self._db.list_feeds()

  async def list_active(self) -> list[dict[str, Any]]:
    return await self._db.list_feeds(active_only=True)

  async def update(self, feed_id: str, updates: dict[str, Any]) -> Optional[dict[str, Any]]:
    await self._db.update_feed(feed_id, updates)
    return await self._db.get_feed(feed_id)

  async def delete(self, feed_id: str) -> bool:
    return await self._db.delete_feed(feed_id)

  async def record_success(self, feed_id: str, fetched_at: datetime) -> None:
    await self._db.record_feed_success(feed_id, fetched_at)

  async def record_failure(self, feed_id: str) -> None:
    await self._db.record_feed_failure(feed_id)
