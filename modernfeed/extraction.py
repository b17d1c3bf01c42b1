"""Reader-mode extraction of full article pages."""

from typing import Any, Optional

import aiohttp
import trafilatura
from bs4 import BeautifulSoup

from .errors import TransientFetchError
from .http_client import fetch
from .logging_config import get_logger
from .models import ExtractConfig
from .utils import extract_summary

logger = get_logger(__name__)

CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    ".post-content",
    ".article-body",
    ".entry",
    ".post",
    "#content",
    ".content",
    "main",
)
MIN_CONTENT_CHARS = 100

EMPTY_EXTRACTION = {
    "content": None,
    "title": None,
    "excerpt": None,
    "byline": None,
    "siteName": None,
}


async def extract_article(
    session: aiohttp.ClientSession, url: str, cfg: Optional[ExtractConfig] = None
) -> dict[str, Any]:
    """Fetch an article page and distill its main content.

    Raises:
        TransientFetchError: On timeout, connection failure or non-2xx status
    """
    cfg = cfg or ExtractConfig()
    response = await fetch(session, url, timeout=cfg.timeout, user_agent=cfg.user_agent)
    if not response.ok:
        raise TransientFetchError(url, f"HTTP {response.status}")
    return extract_readable(response.text(), url)


def extract_readable(html: str, url: str) -> dict[str, Any]:
    """Main content as HTML plus page metadata; all fields None if nothing was found."""
    content = trafilatura.extract(
        html,
        url=url,
        output_format="html",
        include_comments=False,
        include_links=True,
        include_images=True,
        include_tables=True,
    )
    if not content:
        content = _largest_container(html)
    if not content:
        logger.info("extraction_empty", url=url)
        return dict(EMPTY_EXTRACTION)

    meta = trafilatura.extract_metadata(html, default_url=url)
    return {
        "content": content,
        "title": meta.title if meta else None,
        "excerpt": (meta.description if meta else None) or extract_summary(content),
        "byline": meta.author if meta else None,
        "siteName": meta.sitename if meta else None,
    }


def _largest_container(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "nav", "footer", "header", "aside", "iframe"]):
        tag.decompose()
    for sel in CONTENT_SELECTORS:
        el = soup.select_one(sel)
        if el and len(el.get_text(strip=True)) > MIN_CONTENT_CHARS:
            return str(el)
    return None
