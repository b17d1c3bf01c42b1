"""Feed synchronization: fetch, parse, deduplicate and store articles."""

from datetime import datetime
from typing import Any, Callable, Optional

from .errors import ConflictError, InvalidSourceError, NotFoundError
from .executor import bounded_gather
from .logging_config import get_logger
from .metrics import metrics
from .models import ImportResult, SyncConfig, SyncResult
from .opml import OutlineRef
from .parser import ParseFn
from .repositories import ArticleRepository, CategoryRepository, FeedRepository
from .utils import extract_summary, favicon_url, normalize_url, utcnow

logger = get_logger(__name__)

UNTITLED_ARTICLE = "Untitled"
UNTITLED_FEED = "Untitled Feed"


def item_guid(item: dict[str, Any]) -> str:
    """Stable per-feed identity: feed-supplied id, then link, then title."""
    return item.get("guid") or item.get("link") or item.get("title") or ""


def build_article(feed_id: str, item: dict[str, Any], now: datetime) -> dict[str, Any]:
    """Map a parsed feed item onto an article record."""
    content = item.get("content") or item.get("description")
    return {
        "feed_id": feed_id,
        "guid": item_guid(item),
        "title": item.get("title") or UNTITLED_ARTICLE,
        "url": item.get("link") or "",
        "content": content,
        "summary": extract_summary(item.get("description") or item.get("content")),
        "author": item.get("author"),
        "image_url": item.get("image_url"),
        "published_at": item.get("published_at") or now,
        "is_read": False,
        "is_bookmarked": False,
    }


class FeedSyncEngine:
    """Keeps each feed's article set in step with its source.

    The parse function is injected so the engine never holds fetch settings
    of its own.
    """

    def __init__(
        self,
        feed_repo: FeedRepository,
        article_repo: ArticleRepository,
        category_repo: CategoryRepository,
        parse: ParseFn,
        cfg: Optional[SyncConfig] = None,
        favicon: Callable[[str], Optional[str]] = favicon_url,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.feed_repo = feed_repo
        self.article_repo = article_repo
        self.category_repo = category_repo
        self.cfg = cfg or SyncConfig()
        self._parse = parse
        self._favicon = favicon
        self._clock = clock

    async def store_items(self, feed_id: str, items: list[dict[str, Any]], limit: int) -> int:
        """Create articles for unseen items among the first ``limit``.

        Items are handled one at a time in feed order.

        Returns:
            Number of articles created
        """
        created = 0
        now = self._clock()
        for item in items[:limit]:
            article = build_article(feed_id, item, now)
            if await self.article_repo.exists(feed_id, article["guid"]):
                continue
            if await self.article_repo.add(article) is not None:
                created += 1
        return created

    async def sync(self, feed: dict[str, Any]) -> SyncResult:
        """Bring one feed up to date.

        A parse failure bumps the feed's error count and is reported in the
        result rather than raised.
        """
        feed_id = feed["id"]
        try:
            parsed = await self._parse(feed["url"])
        except InvalidSourceError as e:
            await self.feed_repo.record_failure(feed_id)
            metrics.record_sync_failure(feed_id)
            logger.warning("feed_sync_failed", feed_id=feed_id, url=feed["url"], reason=e.reason)
            return SyncResult(feed_id=feed_id, success=False, error=e.reason)

        new_articles = await self.store_items(feed_id, parsed["items"], self.cfg.max_items)
        await self.feed_repo.record_success(feed_id, self._clock())
        metrics.record_sync(new_articles)
        logger.info("feed_synced", feed_id=feed_id, new_articles=new_articles)
        return SyncResult(feed_id=feed_id, success=True, new_articles=new_articles)

    async def _sync_isolated(self, feed: dict[str, Any]) -> SyncResult:
        try:
            return await self.sync(feed)
        except Exception as e:
            logger.error("feed_sync_error", feed_id=feed["id"], error=str(e), exc_info=True)
            metrics.record_sync_failure(feed["id"])
            await self.feed_repo.record_failure(feed["id"])
            return SyncResult(feed_id=feed["id"], success=False, error=str(e))

    async def refresh_feed(self, feed_id: str) -> SyncResult:
        feed = await self.feed_repo.get(feed_id)
        if feed is None:
            raise NotFoundError("Feed", feed_id)
        return await self._sync_isolated(feed)

    async def refresh_all(self) -> int:
        """Sync every active feed, a bounded number at a time.

        Returns:
            Total number of new articles across all feeds
        """
        feeds = await self.feed_repo.list_active()
        outcomes = await bounded_gather(feeds, self._sync_isolated, self.cfg.concurrent_feeds)

        total = 0
        failed = 0
        for outcome in outcomes:
            if isinstance(outcome, SyncResult):
                total += outcome.new_articles
                if not outcome.success:
                    failed += 1
            else:
                failed += 1
        logger.info("refresh_complete", feeds=len(feeds), new_articles=total, failed=failed)
        return total

    async def _create_feed(
        self,
        url: str,
        parsed: dict[str, Any],
        title: Optional[str],
        category_id: Optional[str],
    ) -> dict[str, Any]:
        return await self.feed_repo.add(
            {
                "title": title or parsed.get("title") or UNTITLED_FEED,
                "url": url,
                "site_url": parsed.get("link"),
                "description": parsed.get("description"),
                "favicon": self._favicon(parsed.get("link") or url),
                "category_id": category_id,
                "is_active": True,
            }
        )

    async def add_feed(self, url: str, category_id: Optional[str] = None) -> dict[str, Any]:
        """Subscribe to a feed, storing it only if it parses.

        Raises:
            ConflictError: If the normalized URL is already subscribed
            NotFoundError: If ``category_id`` does not exist
            InvalidSourceError: If the URL cannot be fetched or parsed
        """
        url = normalize_url(url)
        if await self.feed_repo.exists(url):
            raise ConflictError(url)
        if category_id and await self.category_repo.get(category_id) is None:
            raise NotFoundError("Category", category_id)

        parsed = await self._parse(url)
        feed = await self._create_feed(url, parsed, None, category_id)
        new_articles = await self.store_items(feed["id"], parsed["items"], self.cfg.max_items)
        await self.feed_repo.record_success(feed["id"], self._clock())
        logger.info("feed_added", feed_id=feed["id"], url=url, new_articles=new_articles)
        return await self.feed_repo.get(feed["id"])

    async def import_subscriptions(self, refs: list[OutlineRef]) -> ImportResult:
        """Subscribe to each referenced feed independently.

        Existing URLs are skipped. Failures are recorded in ``errors`` and the
        remaining references are still processed.
        """
        result = ImportResult(total=len(refs))

        for ref in refs:
            try:
                if await self.feed_repo.exists(ref.url):
                    result.skipped += 1
                    continue

                try:
                    parsed = await self._parse(ref.url)
                except InvalidSourceError as e:
                    logger.warning("opml_feed_parse_failed", url=ref.url, reason=e.reason)
                    result.errors.append(f"Failed to parse: {ref.url}")
                    continue

                category_id = None
                if ref.category:
                    category = await self.category_repo.get_or_create(ref.category)
                    category_id = category["id"]

                feed = await self._create_feed(ref.url, parsed, ref.title, category_id)
                await self.store_items(feed["id"], parsed["items"], self.cfg.import_max_items)
                await self.feed_repo.record_success(feed["id"], self._clock())
                metrics.record_import()
                result.imported += 1
            except Exception as e:
                logger.error("opml_import_error", url=ref.url, error=str(e))
                result.errors.append(f"Error importing {ref.url}: {e}")

        logger.info(
            "opml_import_complete",
            imported=result.imported,
            skipped=result.skipped,
            total=result.total,
            errors=len(result.errors),
        )
        return result
