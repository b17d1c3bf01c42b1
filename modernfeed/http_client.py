"""Shared HTTP client with connection pooling for ModernFeed."""

import asyncio
import re
from dataclasses import dataclass

import aiohttp

from .errors import TransientFetchError
from .logging_config import get_logger

logger = get_logger(__name__)

FALLBACK_ENCODINGS = ("utf-8", "iso-8859-1", "cp1252")


@dataclass
class FetchResponse:
  url: str
  status: int
  content_type: str
  body: bytes

  @property
  def ok(self) -> bool:
    return 200 <= self.status < 300

  def text(self) -> str:
    m = re.search(r"charset=([^;\s]+)", self.content_type, re.IGNORECASE)
    if m:
      try:
        return self.body.decode(m.group(1).strip("\"'"))
      except (UnicodeDecodeError, LookupError):
        pass
    for enc in FALLBACK_ENCODINGS:
      try:
        return self.body.decode(enc)
      except UnicodeDecodeError:
        continue
    return self.body.decode("utf-8", errors="replace")


async def fetch(
  session: aiohttp.ClientSession,
  url: str,
  *,
  timeout: float,
  user_agent: str,
) -> FetchResponse:
  """GET ``url`` and read the whole body.

  Non-success statuses are returned, not raised. Timeouts, connection
  failures and malformed URLs raise TransientFetchError.
  """
  client_timeout = aiohttp.ClientTimeout(total=timeout)
  headers = {"User-Agent": user_agent}
  try:
    async with session.get(url, headers=headers, timeout=client_timeout) as resp:
      body = await resp.read()
      return FetchResponse(
        url=str(resp.url),
        status=resp.status,
        content_type=resp.headers.get("Content-Type", ""),
        body=body,
      )
  except asyncio.TimeoutError as e:
    raise TransientFetchError(url, f"Timed out after {timeout}s") from e
  except (aiohttp.ClientError, ValueError) as e:
    raise TransientFetchError(url, f"Request failed: {e}") from e


class HTTPClient:
  """Shared HTTP client with connection pooling."""

  def __init__(
    self,
    total_connections: int = 100,
    per_host_connections: int = 10,
    connect_timeout: float = 10.0,
    total_timeout: float = 60.0,
  ):
    self._total_connections = total_connections
    self._per_host_connections = per_host_connections
    self._connect_timeout = connect_timeout
    self._total_timeout = total_timeout
    self._session: aiohttp.ClientSession | None = None
    self._lock = asyncio.Lock()

  @property
  def session(self) -> aiohttp.ClientSession:
    if self._session is None or self._session.closed:
      raise RuntimeError("HTTPClient not connected. Call connect() first.")
    return self._session

  async def connect(self) -> None:
    async with self._lock:
      if self._session is not None and not self._session.closed:
        return

      connector = aiohttp.TCPConnector(
        limit=self._total_connections,
        limit_per_host=self._per_host_connections,
      )
      timeout = aiohttp.ClientTimeout(
        total=self._total_timeout,
        connect=self._connect_timeout,
      )
      self._session = aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
      )
      logger.info(
        "http_client_connected",
        total_connections=self._total_connections,
        per_host_connections=self._per_host_connections,
      )

  async def disconnect(self) -> None:
    async with self._lock:
      if self._session is not None and not self._session.closed:
        await self._session.close()
        self._session = None
        logger.info("http_client_disconnected")

  async def get(self, url: str, *, timeout: float, user_agent: str) -> FetchResponse:
    return await fetch(self.session, url, timeout=timeout, user_agent=user_agent)

  async def __aenter__(self) -> "HTTPClient":
    await self.connect()
    return self

  async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
    await self.disconnect()
