"""Control surface consumed by API and CLI front ends.

Every method returns plain JSON-ready values with camelCase keys and raises
the errors in :mod:`modernfeed.errors` for single-item failures.
"""

from typing import Any, Awaitable, Callable, Optional

from .context import correlation_scope
from .discovery import FeedDiscoverer
from .errors import InvalidSourceError, NotFoundError
from .health import feed_health
from .logging_config import get_logger
from .opml import render_opml, scan_outlines
from .repositories import ArticleRepository, CategoryRepository, FeedRepository
from .sync import FeedSyncEngine
from .utils import normalize_url

logger = get_logger(__name__)

ExtractFn = Callable[[str], Awaitable[dict[str, Any]]]


def camelize(record: dict[str, Any]) -> dict[str, Any]:
    """Rename snake_case keys of a stored record to camelCase."""
    out = {}
    for key, value in record.items():
        head, *rest = key.split("_")
        out[head + "".join(part.capitalize() for part in rest)] = value
    return out


class FeedService:
    def __init__(
        self,
        engine: FeedSyncEngine,
        discoverer: FeedDiscoverer,
        extract: Optional[ExtractFn] = None,
    ):
        self.engine = engine
        self.discoverer = discoverer
        self._extract = extract

    @property
    def feeds(self) -> FeedRepository:
        return self.engine.feed_repo

    @property
    def articles(self) -> ArticleRepository:
        return self.engine.article_repo

    @property
    def categories(self) -> CategoryRepository:
        return self.engine.category_repo

    # Feeds

    async def discover(self, url: str) -> dict[str, Any]:
        if not url or not url.strip():
            raise InvalidSourceError("", "URL is required")
        result = await self.discoverer.discover(normalize_url(url))
        return result.to_dict()

    async def add_feed(self, url: str, category_id: Optional[str] = None) -> dict[str, Any]:
        if not url or not url.strip():
            raise InvalidSourceError("", "URL is required")
        return camelize(await self.engine.add_feed(url, category_id))

    async def list_feeds(self) -> list[dict[str, Any]]:
        return [camelize(f) for f in await self.feeds.list_all()]

    async def delete_feed(self, feed_id: str) -> None:
        if not await self.feeds.delete(feed_id):
            raise NotFoundError("Feed", feed_id)

    async def refresh(self) -> dict[str, int]:
        with correlation_scope():
            new_articles = await self.engine.refresh_all()
        return {"newArticles": new_articles}

    async def refresh_feed(self, feed_id: str) -> dict[str, Any]:
        result = await self.engine.refresh_feed(feed_id)
        return result.to_dict()

    async def health(self) -> dict[str, Any]:
        report = (await feed_health(self.feeds, self.engine.cfg.failing_threshold)).to_dict()
        report["feedsWithErrors"] = [camelize(f) for f in report["feedsWithErrors"]]
        return report

    # OPML

    async def export_opml(self) -> str:
        return render_opml(await self.feeds.list_all(), await self.categories.list_all())

    async def import_opml(self, text: str) -> dict[str, Any]:
        if not text or not isinstance(text, str):
            raise InvalidSourceError("", "OPML content is required")
        with correlation_scope():
            refs = scan_outlines(text)
            logger.info("opml_import_started", references=len(refs))
            result = await self.engine.import_subscriptions(refs)
        return result.to_dict()

    # Categories

    async def list_categories(self) -> list[dict[str, Any]]:
        return [camelize(c) for c in await self.categories.list_all()]

    async def create_category(
        self, name: str, color: Optional[str] = None, order: Optional[int] = None
    ) -> dict[str, Any]:
        if not name or not name.strip():
            raise ValueError("Category name is required")
        return camelize(await self.categories.add(name.strip(), color=color, order=order))

    async def update_category(self, category_id: str, **updates: Any) -> dict[str, Any]:
        category = await self.categories.update(category_id, updates)
        if category is None:
            raise NotFoundError("Category", category_id)
        return camelize(category)

    async def delete_category(self, category_id: str) -> None:
        if not await self.categories.delete(category_id):
            raise NotFoundError("Category", category_id)

    # Articles

    async def list_articles(
        self,
        feed_id: Optional[str] = None,
        unread: bool = False,
        bookmarked: bool = False,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        rows = await self.articles.query(
            feed_id=feed_id,
            unread=unread,
            bookmarked=bookmarked,
            search=search,
            limit=limit,
            offset=offset,
        )
        return [camelize(r) for r in rows]

    async def get_article(self, article_id: str) -> dict[str, Any]:
        article = await self.articles.get(article_id)
        if article is None:
            raise NotFoundError("Article", article_id)
        return camelize(article)

    async def set_article_flags(
        self,
        article_id: str,
        is_read: Optional[bool] = None,
        is_bookmarked: Optional[bool] = None,
    ) -> dict[str, Any]:
        article = await self.articles.set_flags(
            article_id, is_read=is_read, is_bookmarked=is_bookmarked
        )
        if article is None:
            raise NotFoundError("Article", article_id)
        return camelize(article)

    async def mark_all_read(self, feed_id: Optional[str] = None) -> dict[str, int]:
        return {"marked": await self.articles.mark_all_read(feed_id)}

    async def article_stats(self) -> dict[str, int]:
        return await self.articles.get_stats()

    async def extract_article(self, url: str) -> dict[str, Any]:
        if self._extract is None:
            raise RuntimeError("Content extraction is not configured")
        if not url or not url.strip():
            raise InvalidSourceError("", "URL is required")
        return await self._extract(url.strip())
