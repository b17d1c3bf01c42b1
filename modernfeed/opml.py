"""OPML export and import scanning."""

import html
import re
from datetime import datetime
from typing import Any, Iterable, NamedTuple, Optional

from .utils import isoformat_z, utcnow, xml_escape

OPML_TITLE = "ModernFeed RSS Subscriptions"

_OUTLINE_TAG_RE = re.compile(r"<outline\b[^>]*>", re.IGNORECASE)


class OutlineRef(NamedTuple):
    """A feed reference found in an OPML document."""

    url: str
    title: Optional[str] = None
    category: Optional[str] = None


def render_opml(
    feeds: Iterable[dict[str, Any]],
    categories: Iterable[dict[str, Any]],
    created_at: Optional[datetime] = None,
) -> str:
    """Render subscriptions as an OPML 2.0 document.

    Feeds are grouped under one folder outline per category, in category
    order; categories without feeds are left out. Feeds without a (known)
    category follow the folders at the top level.
    """
    feeds = list(feeds)
    categories = list(categories)
    known = {c["id"] for c in categories}

    by_category: dict[Optional[str], list[dict[str, Any]]] = {}
    for feed in feeds:
        key = feed.get("category_id") if feed.get("category_id") in known else None
        by_category.setdefault(key, []).append(feed)

    out = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<opml version="2.0">\n'
        "  <head>\n"
        f"    <title>{OPML_TITLE}</title>\n"
        f"    <dateCreated>{isoformat_z(created_at or utcnow())}</dateCreated>\n"
        "  </head>\n"
        "  <body>"
    )

    for category in categories:
        category_feeds = by_category.get(category["id"], [])
        if not category_feeds:
            continue
        name = xml_escape(category["name"])
        out += f'\n    <outline text="{name}" title="{name}">'
        for feed in category_feeds:
            out += "\n      " + _feed_outline(feed)
        out += "\n    </outline>"

    for feed in by_category.get(None, []):
        out += "\n    " + _feed_outline(feed)

    out += "\n  </body>\n</opml>"
    return out


def _feed_outline(feed: dict[str, Any]) -> str:
    title = xml_escape(feed["title"])
    line = (
        f'<outline type="rss" text="{title}" title="{title}" '
        f'xmlUrl="{xml_escape(feed["url"])}"'
    )
    if feed.get("site_url"):
        line += f' htmlUrl="{xml_escape(feed["site_url"])}"'
    return line + " />"


def _attr(tag: str, name: str) -> Optional[str]:
    m = re.search(
        rf"(?<![\w:.-]){name}\s*=\s*([\"'])(.*?)\1", tag, re.IGNORECASE | re.DOTALL
    )
    if not m:
        return None
    value = html.unescape(m.group(2)).strip()
    return value or None


def scan_outlines(text: str) -> list[OutlineRef]:
    """Extract feed references from OPML text, tolerating malformed markup.

    Opening ``<outline>`` tags are read as a flat stream in document order.
    A tag with ``xmlUrl`` is a feed. A tag with ``text`` but neither ``type``
    nor ``xmlUrl`` names a folder, and that folder becomes the category of
    every feed after it until the next folder tag. Closing tags are not
    tracked, so a top-level feed placed after a folder inherits the folder's
    name.
    """
    refs: list[OutlineRef] = []
    current_category: Optional[str] = None

    for tag in _OUTLINE_TAG_RE.findall(text):
        xml_url = _attr(tag, "xmlUrl")
        label = _attr(tag, "text")
        if xml_url:
            refs.append(
                OutlineRef(
                    url=xml_url,
                    title=_attr(tag, "title") or label,
                    category=current_category,
                )
            )
        elif label and _attr(tag, "type") is None:
            current_category = label

    return refs
