"""Category repository for folder records."""

from typing import Any, Optional

from ..database import Database
from ..logging_config import get_logger

logger = get_logger(__name__)


class CategoryRepository:
  """Repository for category CRUD and name lookups."""

  def __init__(self, db: Database):
    self._db = db

  async def list_all(self) -> list[dict[str, Any]]:
    return await self._db.list_categories()

  async def get(self, category_id: str) -> Optional[dict[str, Any]]:
    return await self._db.get_category(category_id)

  async def add(
    self, name: str, color: Optional[str] = None, order: Optional[int] = None
  ) -> dict[str, Any]:
    return await self._db.add_category(name, color=color, order=order)

  async def update(self, category_id: str, updates: dict[str, Any]) -> Optional[dict[str, Any]]:
    await self._db.update_category(category_id, updates)
    return await self._db.get_category(category_id)

  async def delete(self, category_id: str) -> bool:
    return await self._db.delete_category(category_id)

  async def find_by_name(self, name: str) -> Optional[dict[str, Any]]:
    wanted = name.lower()
    for category in await self._db.list_categories():
      if category["name"].lower() == wanted:
        return category
    return None

  async def get_or_create(self, name: str) -> dict[str, Any]:
    """Case-insensitive match on name, creating the category when absent."""
    category = await self.find_by_name(name)
    if category is None:
      category = await self._db.add_category(name)
      logger.info("category_created", name=name, id=category["id"])
    return category
