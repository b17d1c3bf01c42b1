"""RSS/Atom feed fetching and parsing.

Parsing is a plain async function: session, timeout and user agent are passed
in on every call. The sync engine and discoverer receive it as a ``ParseFn``
bound to those settings by the container.
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

import aiohttp
import feedparser

from .errors import InvalidSourceError, TransientFetchError
from .http_client import fetch
from .models import DEFAULT_USER_AGENT
from .utils import _parse_date_flexible, struct_time_to_datetime

ParseFn = Callable[[str], Awaitable[dict[str, Any]]]


async def parse_feed(
    session: aiohttp.ClientSession,
    url: str,
    *,
    timeout: float = 10,
    user_agent: str = DEFAULT_USER_AGENT,
) -> dict[str, Any]:
    """Fetch and parse an RSS/Atom feed.

    Args:
        session: Shared aiohttp session
        url: Feed URL
        timeout: Total request timeout in seconds
        user_agent: Value of the User-Agent header

    Returns:
        Dict with ``title``, ``link``, ``description``, ``version`` and
        ``items`` (see :func:`parse_feed_content`)

    Raises:
        TransientFetchError: On timeout, connection failure or non-2xx status
        InvalidSourceError: If the body is not a recognizable feed
    """
    response = await fetch(session, url, timeout=timeout, user_agent=user_agent)
    if not response.ok:
        raise TransientFetchError(url, f"HTTP {response.status}")
    return parse_feed_content(response.body, url)


def parse_feed_content(content: bytes | str, url: str = "") -> dict[str, Any]:
    """Parse a feed document that has already been fetched.

    Raises:
        InvalidSourceError: If feedparser recognizes neither a feed format nor entries
    """
    parsed = feedparser.parse(content)

    if not parsed.version and not parsed.entries:
        reason = "Not a valid RSS or Atom feed"
        if parsed.bozo and parsed.get("bozo_exception") is not None:
            reason = f"Failed to parse feed: {parsed.bozo_exception}"
        raise InvalidSourceError(url, reason)

    meta = parsed.feed
    return {
        "title": (meta.get("title") or "").strip() or None,
        "link": meta.get("link") or None,
        "description": meta.get("subtitle") or meta.get("description") or None,
        "version": parsed.version or "",
        "items": [_entry_to_item(entry) for entry in parsed.entries],
    }


def _entry_to_item(entry: dict) -> dict[str, Any]:
    content = None
    if entry.get("content"):
        content = entry["content"][0].get("value") or None

    enclosures = entry.get("enclosures") or []
    image_url = next((e.get("href") for e in enclosures if e.get("href")), None)

    return {
        "guid": entry.get("id") or None,
        "link": entry.get("link") or None,
        "title": (entry.get("title") or "").strip() or None,
        "content": content,
        "description": entry.get("summary") or None,
        "author": entry.get("author") or None,
        "image_url": image_url,
        "published_at": _entry_date(entry),
    }


def _entry_date(entry: dict) -> Optional[datetime]:
    for field in ("published_parsed", "updated_parsed"):
        dt = struct_time_to_datetime(entry.get(field))
        if dt:
            return dt
    return _parse_date_flexible(entry.get("published") or entry.get("updated") or "")
