"""Async SQLite storage for feeds, articles and categories."""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

import aiosqlite

from .errors import ConflictError, PersistenceError
from .logging_config import get_logger

logger = get_logger(__name__)

BOOL_COLUMNS = ("is_active", "is_read", "is_bookmarked")

CATEGORY_COLUMNS = ("name", "color", "order")
FEED_COLUMNS = (
    "title", "url", "site_url", "description", "favicon", "category_id",
    "last_fetched", "error_count", "is_active",
)
ARTICLE_FLAG_COLUMNS = ("is_read", "is_bookmarked")

DEFAULT_CATEGORY_COLOR = "#6366f1"


def _new_id() -> str:
    return uuid4().hex


def _to_db(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class Database:
    """Async SQLite database holding the subscription state."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Connect to database and create tables if they don't exist."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self.db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA foreign_keys = ON")
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()
        logger.info("database_connected", path=self.db_path)

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.info("database_closed")

    async def _execute(self, query: str, params: tuple = ()) -> aiosqlite.Cursor:
        """Execute a single query, translating driver errors.

        IntegrityError is left for callers that know which constraint matters.
        """
        if not self._conn:
            raise RuntimeError("Database not connected")
        try:
            return await self._conn.execute(query, params)
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            raise PersistenceError(f"Database error: {e}") from e

    async def _commit(self) -> None:
        try:
            await self._conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Commit failed: {e}") from e

    async def _fetchone(self, query: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        cursor = await self._execute(query, params)
        row = await cursor.fetchone()
        return self._row_to_dict(row) if row else None

    async def _fetchall(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        cursor = await self._execute(query, params)
        rows = await cursor.fetchall()
        return [self._row_to_dict(row) for row in rows]

    async def _update(
        self, table: str, record_id: str, updates: dict[str, Any], allowed: tuple[str, ...]
    ) -> bool:
        set_clauses = []
        values = []
        for key, value in updates.items():
            if key in allowed:
                set_clauses.append(f'"{key}" = ?')
                values.append(_to_db(value))
        if not set_clauses:
            return False
        values.append(record_id)
        cursor = await self._execute(
            f"UPDATE {table} SET {', '.join(set_clauses)} WHERE id = ?", tuple(values)
        )
        await self._commit()
        return cursor.rowcount > 0

    # Categories

    async def list_categories(self) -> list[dict[str, Any]]:
        return await self._fetchall('SELECT * FROM categories ORDER BY "order", name')

    async def get_category(self, category_id: str) -> Optional[dict[str, Any]]:
        return await self._fetchone("SELECT * FROM categories WHERE id = ?", (category_id,))

    async def add_category(
        self, name: str, color: Optional[str] = None, order: Optional[int] = None
    ) -> dict[str, Any]:
        category_id = _new_id()
        await self._execute(
            'INSERT INTO categories (id, name, color, "order") VALUES (?, ?, ?, ?)',
            (category_id, name, color or DEFAULT_CATEGORY_COLOR, order or 0),
        )
        await self._commit()
        logger.debug("category_added", id=category_id, name=name)
        return await self.get_category(category_id)

    async def update_category(self, category_id: str, updates: dict[str, Any]) -> bool:
        return await self._update("categories", category_id, updates, CATEGORY_COLUMNS)

    async def delete_category(self, category_id: str) -> bool:
        """Delete a category. Its feeds keep existing with no category."""
        cursor = await self._execute("DELETE FROM categories WHERE id = ?", (category_id,))
        await self._commit()
        return cursor.rowcount > 0

    # Feeds

    async def list_feeds(self, active_only: bool = False) -> list[dict[str, Any]]:
        """List feeds ordered by title, with category name and unread count."""
        query = """SELECT f.*, c.name AS category_name,
                          (SELECT COUNT(*) FROM articles a
                           WHERE a.feed_id = f.id AND a.is_read = 0) AS unread_count
                   FROM feeds f
                   LEFT JOIN categories c ON c.id = f.category_id"""
        if active_only:
            query += " WHERE f.is_active = 1"
        query += " ORDER BY f.title"
        return await self._fetchall(query)

    async def get_feed(self, feed_id: str) -> Optional[dict[str, Any]]:
        return await self._fetchone("SELECT * FROM feeds WHERE id = ?", (feed_id,))

    async def get_feed_by_url(self, url: str) -> Optional[dict[str, Any]]:
        return await self._fetchone("SELECT * FROM feeds WHERE url = ?", (url,))

    async def add_feed(self, feed: dict[str, Any]) -> dict[str, Any]:
        """Insert a feed. Raises ConflictError if the URL is already stored."""
        feed_id = _new_id()
        try:
            await self._execute(
                """INSERT INTO feeds (
                    id, title, url, site_url, description, favicon,
                    category_id, last_fetched, error_count, is_active
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?)""",
                (
                    feed_id,
                    feed["title"],
                    feed["url"],
                    feed.get("site_url"),
                    feed.get("description"),
                    feed.get("favicon"),
                    feed.get("category_id"),
                    _to_db(feed.get("last_fetched")),
                    int(feed.get("is_active", True)),
                ),
            )
        except sqlite3.IntegrityError as e:
            if "feeds.url" in str(e):
                raise ConflictError(feed["url"]) from e
            raise PersistenceError(f"Cannot store feed: {e}") from e
        await self._commit()
        logger.debug("feed_added", id=feed_id, url=feed["url"])
        return await self.get_feed(feed_id)

    async def update_feed(self, feed_id: str, updates: dict[str, Any]) -> bool:
        return await self._update("feeds", feed_id, updates, FEED_COLUMNS)

    async def delete_feed(self, feed_id: str) -> bool:
        """Delete feed and, through the foreign key, its articles."""
        cursor = await self._execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
        await self._commit()
        return cursor.rowcount > 0

    async def record_feed_success(self, feed_id: str, fetched_at: datetime) -> None:
        await self._execute(
            "UPDATE feeds SET error_count = 0, last_fetched = ? WHERE id = ?",
            (fetched_at.isoformat(), feed_id),
        )
        await self._commit()

    async def record_feed_failure(self, feed_id: str) -> None:
        await self._execute(
            "UPDATE feeds SET error_count = error_count + 1 WHERE id = ?", (feed_id,)
        )
        await self._commit()

    # Articles

    async def add_article(self, article: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Insert an article unless its (feed_id, guid) pair is already stored.

        Returns:
            The stored article, or None if it was a duplicate
        """
        article_id = _new_id()
        try:
            cursor = await self._execute(
                """INSERT INTO articles (
                    id, feed_id, title, url, content, summary, author,
                    image_url, published_at, is_read, is_bookmarked, guid
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(feed_id, guid) DO NOTHING""",
                (
                    article_id,
                    article["feed_id"],
                    article["title"],
                    article.get("url") or "",
                    article.get("content"),
                    article.get("summary"),
                    article.get("author"),
                    article.get("image_url"),
                    _to_db(article.get("published_at")),
                    int(article.get("is_read", False)),
                    int(article.get("is_bookmarked", False)),
                    article["guid"],
                ),
            )
        except sqlite3.IntegrityError as e:
            raise PersistenceError(f"Cannot store article: {e}") from e
        await self._commit()
        if cursor.rowcount == 0:
            return None
        return await self.get_article(article_id)

    async def get_article(self, article_id: str) -> Optional[dict[str, Any]]:
        return await self._fetchone("SELECT * FROM articles WHERE id = ?", (article_id,))

    async def get_article_by_guid(self, feed_id: str, guid: str) -> Optional[dict[str, Any]]:
        return await self._fetchone(
            "SELECT * FROM articles WHERE feed_id = ? AND guid = ?", (feed_id, guid)
        )

    async def update_article(self, article_id: str, updates: dict[str, Any]) -> bool:
        """Update read/bookmark flags. Other fields are immutable once stored."""
        flags = {k: int(bool(v)) for k, v in updates.items() if k in ARTICLE_FLAG_COLUMNS}
        return await self._update("articles", article_id, flags, ARTICLE_FLAG_COLUMNS)

    async def list_articles(
        self,
        feed_id: Optional[str] = None,
        unread: bool = False,
        bookmarked: bool = False,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """List articles newest first with optional filters."""
        query = """SELECT a.*, f.title AS feed_title, f.favicon AS feed_favicon
                   FROM articles a JOIN feeds f ON f.id = a.feed_id WHERE 1=1"""
        params: list = []
        if feed_id:
            query += " AND a.feed_id = ?"
            params.append(feed_id)
        if unread:
            query += " AND a.is_read = 0"
        if bookmarked:
            query += " AND a.is_bookmarked = 1"
        if search:
            query += " AND (a.title LIKE ? OR a.summary LIKE ?)"
            pattern = f"%{search}%"
            params.extend([pattern, pattern])
        query += " ORDER BY a.published_at DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        return await self._fetchall(query, tuple(params))

    async def mark_all_read(self, feed_id: Optional[str] = None) -> int:
        if feed_id:
            cursor = await self._execute(
                "UPDATE articles SET is_read = 1 WHERE feed_id = ? AND is_read = 0", (feed_id,)
            )
        else:
            cursor = await self._execute("UPDATE articles SET is_read = 1 WHERE is_read = 0")
        await self._commit()
        return cursor.rowcount

    async def get_article_stats(self) -> dict[str, int]:
        cursor = await self._execute(
            """SELECT
                 COALESCE(SUM(CASE WHEN is_read = 0 THEN 1 ELSE 0 END), 0),
                 COALESCE(SUM(CASE WHEN is_bookmarked = 1 THEN 1 ELSE 0 END), 0)
               FROM articles"""
        )
        row = await cursor.fetchone()
        return {"unread": row[0], "bookmarked": row[1]}

    async def get_unread_counts(self) -> dict[str, int]:
        cursor = await self._execute(
            "SELECT feed_id, COUNT(*) FROM articles WHERE is_read = 0 GROUP BY feed_id"
        )
        rows = await cursor.fetchall()
        return {row[0]: row[1] for row in rows}

    async def count_articles(self, feed_id: Optional[str] = None) -> int:
        if feed_id:
            cursor = await self._execute(
                "SELECT COUNT(*) FROM articles WHERE feed_id = ?", (feed_id,)
            )
        else:
            cursor = await self._execute("SELECT COUNT(*) FROM articles")
        row = await cursor.fetchone()
        return row[0] if row else 0

    def _row_to_dict(self, row: aiosqlite.Row) -> dict[str, Any]:
        """Convert a row to dict, restoring boolean columns."""
        result = dict(row)
        for key in BOOL_COLUMNS:
            if key in result and result[key] is not None:
                result[key] = bool(result[key])
        return result


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    color TEXT DEFAULT '#6366f1',
    "order" INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS feeds (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    site_url TEXT,
    description TEXT,
    favicon TEXT,
    category_id TEXT REFERENCES categories(id) ON DELETE SET NULL,
    last_fetched DATETIME,
    error_count INTEGER NOT NULL DEFAULT 0,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS articles (
    id TEXT PRIMARY KEY,
    feed_id TEXT NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    url TEXT NOT NULL,
    content TEXT,
    summary TEXT,
    author TEXT,
    image_url TEXT,
    published_at DATETIME,
    is_read INTEGER NOT NULL DEFAULT 0,
    is_bookmarked INTEGER NOT NULL DEFAULT 0,
    guid TEXT NOT NULL,
    UNIQUE (feed_id, guid)
);

CREATE INDEX IF NOT EXISTS idx_articles_published ON articles(published_at);
CREATE INDEX IF NOT EXISTS idx_articles_feed_read ON articles(feed_id, is_read);
CREATE INDEX IF NOT EXISTS idx_feeds_category ON feeds(category_id);
"""
