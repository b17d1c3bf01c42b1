"""Utility functions for ModernFeed"""

import html
import re
import time
from datetime import UTC, datetime
from typing import Optional
from urllib.parse import urlparse

SUMMARY_MAX_LENGTH = 200
FAVICON_SERVICE = "https://www.google.com/s2/favicons?domain={host}&sz=32"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_EDGE_RE = re.compile(r"^[\s\u200b]+|[\s\u200b]+$")
_TAG_RE = re.compile(r"<[^>]*>")


def normalize_url(value: str) -> str:
    """Turn user input into a fetchable URL.

    Strips surrounding whitespace and zero-width spaces and prepends
    ``https://`` when no http(s) scheme is present. Never raises: garbage in
    is garbage out, and the fetch that follows reports the failure.
    """
    url = _EDGE_RE.sub("", value or "")
    if not _SCHEME_RE.match(url):
        url = f"https://{url}"
    return url


def strip_tags(text: str) -> str:
    return html.unescape(_TAG_RE.sub("", text)).strip()


def extract_summary(content: Optional[str], max_length: int = SUMMARY_MAX_LENGTH) -> Optional[str]:
    """Plain-text excerpt of at most ``max_length`` characters plus an ellipsis."""
    if not content:
        return None

    text = strip_tags(content)
    if len(text) <= max_length:
        return text

    cut = max_length
    while cut > 0 and not text[cut].isspace():
        cut -= 1
    if cut <= 0:
        cut = max_length
    return text[:cut] + "..."


def xml_escape(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def favicon_url(site_url: str) -> Optional[str]:
    """Favicon service URL for the site's host, or None when there is no host."""
    try:
        host = urlparse(site_url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return FAVICON_SERVICE.format(host=host)


def utcnow() -> datetime:
    return datetime.now(UTC)


def isoformat_z(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    dt = dt.astimezone(UTC) if dt.tzinfo else dt.replace(tzinfo=UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def struct_time_to_datetime(value: Optional[time.struct_time]) -> Optional[datetime]:
    """Convert feedparser's UTC ``*_parsed`` tuples to aware datetimes."""
    if not value:
        return None
    try:
        return datetime(*value[:6], tzinfo=UTC)
    except (TypeError, ValueError):
        return None


def _parse_date_flexible(date_str: str) -> datetime | None:
    """Parse date string with multiple format support."""
    if not date_str:
        return None
    try:
        from dateutil import parser

        dt = parser.parse(date_str)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt
    except (ValueError, OverflowError):
        return None
