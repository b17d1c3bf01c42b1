"""ModernFeed - feed ingestion and sync"""

from .config import DEFAULT_CONFIG, load_config
from .container import Container
from .database import Database
from .discovery import FeedDiscoverer
from .errors import (
    ConflictError,
    InvalidSourceError,
    ModernFeedError,
    NotFoundError,
    PersistenceError,
    TransientFetchError,
)
from .executor import bounded_gather
from .health import summarize_health
from .metrics import Metrics, metrics
from .models import (
    Config,
    DiscoveredFeed,
    DiscoveryResult,
    FeedHealth,
    ImportResult,
    SyncConfig,
    SyncResult,
)
from .opml import render_opml, scan_outlines
from .parser import parse_feed, parse_feed_content
from .repositories import ArticleRepository, CategoryRepository, FeedRepository
from .service import FeedService
from .sync import FeedSyncEngine
from .utils import extract_summary, normalize_url

__all__ = [
    "load_config",
    "DEFAULT_CONFIG",
    "Config",
    "SyncConfig",
    "Container",
    "Database",
    "ArticleRepository",
    "FeedRepository",
    "CategoryRepository",
    "FeedDiscoverer",
    "FeedSyncEngine",
    "FeedService",
    "bounded_gather",
    "summarize_health",
    "render_opml",
    "scan_outlines",
    "parse_feed",
    "parse_feed_content",
    "normalize_url",
    "extract_summary",
    "DiscoveredFeed",
    "DiscoveryResult",
    "SyncResult",
    "ImportResult",
    "FeedHealth",
    "ModernFeedError",
    "InvalidSourceError",
    "TransientFetchError",
    "ConflictError",
    "NotFoundError",
    "PersistenceError",
    "Metrics",
    "metrics",
]
