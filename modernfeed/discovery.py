"""Feed auto-discovery for ModernFeed.

Discovery runs a short pipeline of strategies over the fetched page: first the
``<link>`` tags the page declares, then probing of conventional feed paths.
The first strategy that returns candidates wins.
"""

from typing import Awaitable, Callable, Optional, Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .errors import InvalidSourceError, TransientFetchError
from .http_client import FetchResponse
from .logging_config import get_logger
from .metrics import metrics
from .models import DiscoveredFeed, DiscoveryResult
from .parser import ParseFn

logger = get_logger(__name__)

FEED_MIME_TYPES = frozenset(["application/rss+xml", "application/atom+xml", "text/xml"])

COMMON_FEED_PATHS = (
    "/feed",
    "/feed/",
    "/rss",
    "/rss.xml",
    "/atom.xml",
    "/feed.xml",
    "/index.xml",
    "/blog/feed",
    "/blog/rss",
)

DEFAULT_FEED_TITLE = "RSS Feed"

FetchPageFn = Callable[[str], Awaitable[FetchResponse]]


class DiscoveryStrategy(Protocol):
    async def find(self, page: FetchResponse) -> list[DiscoveredFeed]: ...


def find_link_candidates(html: str, base_url: str) -> list[DiscoveredFeed]:
    """Collect feeds declared by ``<link type=...>`` elements in a page.

    Args:
        html: Page markup
        base_url: URL the page was served from, for resolving relative hrefs

    Returns:
        Candidates in document order, deduplicated by resolved URL
    """
    soup = BeautifulSoup(html, "html.parser")
    candidates: list[DiscoveredFeed] = []
    seen: set[str] = set()

    for link in soup.find_all("link"):
        mime = (link.get("type") or "").strip().lower()
        href = (link.get("href") or "").strip()
        if mime not in FEED_MIME_TYPES or not href:
            continue

        url = urljoin(base_url, href)
        if url in seen:
            continue
        seen.add(url)

        title = (link.get("title") or "").strip() or DEFAULT_FEED_TITLE
        candidates.append(
            DiscoveredFeed(url=url, title=title, type="Atom" if "atom" in mime else "RSS")
        )

    return candidates


class LinkTagStrategy:
    """Feeds the page advertises in its markup."""

    async def find(self, page: FetchResponse) -> list[DiscoveredFeed]:
        return find_link_candidates(page.text(), page.url)


class PathProbeStrategy:
    """Try well-known feed locations under the site root, stopping at the first hit."""

    def __init__(self, parse: ParseFn, paths: tuple[str, ...] = COMMON_FEED_PATHS):
        self._parse = parse
        self._paths = paths

    async def find(self, page: FetchResponse) -> list[DiscoveredFeed]:
        for path in self._paths:
            feed_url = urljoin(page.url, path)
            try:
                parsed = await self._parse(feed_url)
            except InvalidSourceError as e:
                logger.debug("feed_probe_miss", url=feed_url, reason=e.reason)
                continue
            return [
                DiscoveredFeed(
                    url=feed_url,
                    title=parsed.get("title") or DEFAULT_FEED_TITLE,
                    type="RSS",
                )
            ]
        return []


class FeedDiscoverer:
    """Resolve a URL to one or more subscribable feeds."""

    def __init__(
        self,
        parse: ParseFn,
        fetch_page: FetchPageFn,
        strategies: Optional[list[DiscoveryStrategy]] = None,
    ):
        self._parse = parse
        self._fetch_page = fetch_page
        if strategies is None:
            strategies = [LinkTagStrategy(), PathProbeStrategy(parse)]
        self.strategies = strategies

    async def discover(self, url: str) -> DiscoveryResult:
        """Short-circuit on a direct feed, otherwise search the page.

        Args:
            url: Normalized URL

        Returns:
            DiscoveryResult; ``direct_feed`` is set when ``url`` parsed as a feed
        """
        metrics.record_discovery()
        try:
            parsed = await self._parse(url)
        except InvalidSourceError as e:
            logger.debug("direct_parse_failed", url=url, reason=e.reason)
        else:
            return DiscoveryResult(
                direct_feed=True,
                feeds=[
                    DiscoveredFeed(
                        url=url,
                        title=parsed.get("title") or DEFAULT_FEED_TITLE,
                        type="RSS",
                    )
                ],
            )

        feeds = await self.find_candidates(url)
        logger.info("feeds_discovered", url=url, count=len(feeds))
        return DiscoveryResult(direct_feed=False, feeds=feeds)

    async def find_candidates(self, url: str) -> list[DiscoveredFeed]:
        try:
            page = await self._fetch_page(url)
        except TransientFetchError as e:
            logger.warning("discovery_fetch_failed", url=url, reason=e.reason)
            return []

        if not page.ok:
            logger.info("discovery_page_unavailable", url=url, status=page.status)
            return []

        for strategy in self.strategies:
            found = await strategy.find(page)
            if found:
                return found
        return []
