"""Repository layer for ModernFeed."""

from .article_repo import ArticleRepository
from .category_repo import CategoryRepository
from .feed_repo import FeedRepository

__all__ = ["ArticleRepository", "FeedRepository", "CategoryRepository"]
