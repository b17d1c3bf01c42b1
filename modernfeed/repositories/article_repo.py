"""Article repository for article-related database operations."""

from typing import Any, Optional

from ..database import Database
from ..logging_config import get_logger

logger = get_logger(__name__)


class ArticleRepository:
  """Repository for article creation, lookup and flag updates."""

  def __init__(self, db: Database):
    self._db = db

  async def add(self, article: dict[str, Any]) -> dict[str, Any] | None:
    """Store a new article; None when (feed_id, guid) is already taken."""
    return await self._db.add_article(article)

  async def get(self, article_id: str) -> dict[str, Any] | None:
    return await self._db.get_article(article_id)

  async def find_by_guid(self, feed_id: str, guid: str) -> dict[str, Any] | None:
    return await self._db.get_article_by_guid(feed_id, guid)

  async def exists(self, feed_id: str, guid: str) -> bool:
    return await self._db.get_article_by_guid(feed_id, guid) is not None

  async def set_flags(
    self,
    article_id: str,
    is_read: Optional[bool] = None,
    is_bookmarked: Optional[bool] = None,
  ) -> dict[str, Any] | None:
    updates: dict[str, Any] = {}
    if is_read is not None:
      updates["is_read"] = is_read
    if is_bookmarked is not None:
      updates["is_bookmarked"] = is_bookmarked
    if updates:
      await self._db.update_article(article_id, updates)
    return await self._db.get_article(article_id)

  async def query(
    self,
    feed_id: str | None = None,
    unread: bool = False,
    bookmarked: bool = False,
    search: str | None = None,
    limit: int = 100,
    offset: int = 0,
  ) -> list[dict[str, Any]]:
    return await self._db.list_articles(
      feed_id=feed_id,
      unread=unread,
      bookmarked=bookmarked,
      search=search,
      limit=limit,
      offset=offset,
    )

  async def mark_all_read(self, feed_id: str | None = None) -> int:
    return await self._db.mark_all_read(feed_id)

  async def count(self, feed_id: str | None = None) -> int:
    return await self._db.count_articles(feed_id)

  async def get_stats(self) -> dict[str, int]:
    return await self._db.get_article_stats()

  async def unread_counts(self) -> dict[str, int]:
    return await self._db.get_unread_counts()
