"""Dependency injection container for ModernFeed."""

import os
from typing import Any

import aiohttp

from .database import Database
from .discovery import FeedDiscoverer
from .extraction import extract_article
from .http_client import FetchResponse, HTTPClient
from .logging_config import get_logger
from .models import Config
from .parser import parse_feed
from .repositories import ArticleRepository, CategoryRepository, FeedRepository
from .service import FeedService
from .sync import FeedSyncEngine

logger = get_logger(__name__)


class Container:
  """DI container for managing ModernFeed dependencies."""

  def __init__(self, config: Config):
    self.config = config
    self._db: Database | None = None
    self._article_repo: ArticleRepository | None = None
    self._feed_repo: FeedRepository | None = None
    self._category_repo: CategoryRepository | None = None
    self._http_client: HTTPClient | None = None
    self._discoverer: FeedDiscoverer | None = None
    self._engine: FeedSyncEngine | None = None
    self._service: FeedService | None = None

  @property
  def db(self) -> Database:
    if self._db is None:
      db_path = self.config["db_path"] or os.path.join(self.config["base_dir"], "modernfeed.db")
      self._db = Database(db_path)
    return self._db

  @property
  def article_repo(self) -> ArticleRepository:
    if self._article_repo is None:
      self._article_repo = ArticleRepository(self.db)
    return self._article_repo

  @property
  def feed_repo(self) -> FeedRepository:
    if self._feed_repo is None:
      self._feed_repo = FeedRepository(self.db)
    return self._feed_repo

  @property
  def category_repo(self) -> CategoryRepository:
    if self._category_repo is None:
      self._category_repo = CategoryRepository(self.db)
    return self._category_repo

  @property
  def http_client(self) -> HTTPClient:
    if self._http_client is None:
      fetch_cfg = self.config["fetch"]
      self._http_client = HTTPClient(
        total_connections=100,
        per_host_connections=self.config["sync"]["concurrent_feeds"],
        connect_timeout=float(fetch_cfg["timeout"]),
        total_timeout=60.0,
      )
    return self._http_client

  @property
  def http_session(self) -> aiohttp.ClientSession:
    return self.http_client.session

  # The session only exists after connect(), so these bind it per call.

  async def parse(self, url: str) -> dict[str, Any]:
    fetch_cfg = self.config["fetch"]
    return await parse_feed(
      self.http_session, url, timeout=fetch_cfg["timeout"], user_agent=fetch_cfg["user_agent"]
    )

  async def fetch_page(self, url: str) -> FetchResponse:
    fetch_cfg = self.config["fetch"]
    return await self.http_client.get(
      url, timeout=fetch_cfg["timeout"], user_agent=fetch_cfg["user_agent"]
    )

  async def extract(self, url: str) -> dict[str, Any]:
    return await extract_article(self.http_session, url, self.config["extract"])

  @property
  def discoverer(self) -> FeedDiscoverer:
    if self._discoverer is None:
      self._discoverer = FeedDiscoverer(self.parse, self.fetch_page)
    return self._discoverer

  @property
  def engine(self) -> FeedSyncEngine:
    if self._engine is None:
      self._engine = FeedSyncEngine(
        self.feed_repo,
        self.article_repo,
        self.category_repo,
        self.parse,
        cfg=self.config["sync"],
      )
    return self._engine

  @property
  def service(self) -> FeedService:
    if self._service is None:
      self._service = FeedService(self.engine, self.discoverer, extract=self.extract)
    return self._service

  async def connect(self) -> None:
    await self.db.connect()
    await self.http_client.connect()
    logger.info("container_connected")

  async def disconnect(self) -> None:
    if self._http_client:
      await self._http_client.disconnect()
      self._http_client = None
    if self._db:
      await self._db.close()
      self._db = None
      logger.info("container_disconnected")

  async def __aenter__(self) -> "Container":
    await self.connect()
    return self

  async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
    await self.disconnect()
