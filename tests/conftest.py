"""Shared fixtures for ModernFeed tests."""

import os
import tempfile
from datetime import UTC, datetime

import pytest

from modernfeed.database import Database
from modernfeed.errors import InvalidSourceError
from modernfeed.metrics import metrics
from modernfeed.repositories import ArticleRepository, CategoryRepository, FeedRepository

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)

SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
    <channel>
        <title>Example Blog</title>
        <link>https://example.com/</link>
        <description>Posts about examples</description>
        <item>
            <title>First post</title>
            <link>https://example.com/posts/1</link>
            <guid>post-1</guid>
            <description>&lt;p&gt;Hello &lt;b&gt;world&lt;/b&gt;&lt;/p&gt;</description>
            <author>alice@example.com (Alice)</author>
            <pubDate>Mon, 15 Jan 2024 10:00:00 GMT</pubDate>
            <enclosure url="https://example.com/img/1.jpg" type="image/jpeg" length="100"/>
        </item>
        <item>
            <title>Second post</title>
            <link>https://example.com/posts/2</link>
            <description>Second body</description>
        </item>
    </channel>
</rss>
"""

SAMPLE_ATOM = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
    <title>Atom Example</title>
    <link href="https://atom.example.com/"/>
    <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
    <updated>2024-01-14T18:30:02Z</updated>
    <entry>
        <title>Atom entry</title>
        <link href="https://atom.example.com/entries/1"/>
        <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
        <updated>2024-01-14T18:30:02Z</updated>
        <summary>Short summary</summary>
        <content type="html">&lt;p&gt;Full content&lt;/p&gt;</content>
    </entry>
</feed>
"""


def make_item(n: int, **overrides) -> dict:
    item = {
        "guid": f"guid-{n}",
        "link": f"https://example.com/posts/{n}",
        "title": f"Post {n}",
        "content": None,
        "description": f"Body of post {n}",
        "author": None,
        "image_url": None,
        "published_at": datetime(2024, 1, n % 28 + 1, tzinfo=UTC),
    }
    item.update(overrides)
    return item


def make_parsed(items: list, title: str = "Example Blog", link: str = "https://example.com/", version: str = "rss20") -> dict:
    return {
        "title": title,
        "link": link,
        "description": None,
        "version": version,
        "items": items,
    }


class FakeParser:
    """Stand-in for the network parse function, keyed by URL."""

    def __init__(self, feeds: dict | None = None):
        self.feeds = dict(feeds or {})
        self.calls: list[str] = []

    async def __call__(self, url: str) -> dict:
        self.calls.append(url)
        result = self.feeds.get(url)
        if result is None:
            raise InvalidSourceError(url, "Not a valid RSS or Atom feed")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for general file tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
async def db(temp_dir):
    database = Database(os.path.join(temp_dir, "test.db"))
    await database.connect()
    yield database
    await database.close()


@pytest.fixture
def feed_repo(db):
    return FeedRepository(db)


@pytest.fixture
def article_repo(db):
    return ArticleRepository(db)


@pytest.fixture
def category_repo(db):
    return CategoryRepository(db)


@pytest.fixture
def sample_opml():
    return """<?xml version="1.0" encoding="UTF-8"?>
<opml version="2.0">
    <head>
        <title>Test Feeds</title>
    </head>
    <body>
        <outline text="Tech" title="Tech">
            <outline type="rss" text="Example Feed" title="Example Feed" xmlUrl="https://example.com/feed.xml" htmlUrl="https://example.com"/>
            <outline type="rss" text="Other" xmlUrl="https://other.example.com/rss"/>
        </outline>
    </body>
</opml>
"""
