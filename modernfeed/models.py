"""Pydantic models for ModernFeed configuration and control-surface results."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT = "ModernFeed RSS Reader/1.0"


class FetchConfig(BaseModel):
    timeout: int = 10
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("timeout")
    @classmethod
    def positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)


class ExtractConfig(BaseModel):
    timeout: int = 15
    user_agent: str = "Mozilla/5.0 (compatible; ModernFeed/1.0)"

    @field_validator("timeout")
    @classmethod
    def positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)


class SyncConfig(BaseModel):
    concurrent_feeds: int = 5
    max_items: int = 50
    import_max_items: int = 20
    failing_threshold: int = 3

    @field_validator("concurrent_feeds")
    @classmethod
    def concurrent_range(cls, v: int) -> int:
        if not 1 <= v <= 20:
            raise ValueError("must be between 1 and 20")
        return v

    @field_validator("max_items", "import_max_items", "failing_threshold")
    @classmethod
    def positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)


class Config(BaseModel):
    base_dir: str = "~/.modernfeed"
    db_path: str = ""
    log_level: str = "INFO"
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    extract: ExtractConfig = Field(default_factory=ExtractConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)


# Results returned through the control surface. Field aliases give the
# camelCase keys used by API consumers.


class _Result(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DiscoveredFeed(_Result):
    url: str
    title: str = "RSS Feed"
    type: Literal["RSS", "Atom"] = "RSS"


class DiscoveryResult(_Result):
    direct_feed: bool = Field(default=False, alias="directFeed")
    feeds: list[DiscoveredFeed] = Field(default_factory=list)


class SyncResult(_Result):
    feed_id: str = Field(alias="feedId")
    success: bool
    new_articles: int = Field(default=0, alias="newArticles")
    error: Optional[str] = None


class ImportResult(_Result):
    imported: int = 0
    skipped: int = 0
    total: int = 0
    errors: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if not self.errors:
            data.pop("errors", None)
        return data


class FeedHealth(_Result):
    total_feeds: int = Field(alias="totalFeeds")
    failing_feeds: int = Field(alias="failingFeeds")
    feeds_with_errors: list[dict[str, Any]] = Field(
        default_factory=list, alias="feedsWithErrors"
    )
