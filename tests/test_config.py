"""Tests for configuration validation with pydantic."""

import json
import os

import pytest
from pydantic import ValidationError

from modernfeed import config as config_module
from modernfeed.config import _format_validation_errors, _merge_config, load_config
from modernfeed.models import Config, ExtractConfig, FetchConfig, SyncConfig


class TestFetchConfig:
    def test_default_values(self):
        cfg = FetchConfig()
        assert cfg.timeout == 10
        assert cfg.user_agent == "ModernFeed RSS Reader/1.0"

    def test_timeout_positive(self):
        with pytest.raises(ValidationError) as exc_info:
            FetchConfig(timeout=0)
        assert "must be positive" in str(exc_info.value)

    def test_dict_access(self):
        cfg = FetchConfig(user_agent="Custom/2.0")
        assert cfg["user_agent"] == "Custom/2.0"
        assert cfg.get("missing", "fallback") == "fallback"


class TestExtractConfig:
    def test_default_values(self):
        cfg = ExtractConfig()
        assert cfg.timeout == 15
        assert "ModernFeed" in cfg.user_agent

    def test_timeout_positive(self):
        with pytest.raises(ValidationError):
            ExtractConfig(timeout=-1)


class TestSyncConfig:
    def test_default_values(self):
        cfg = SyncConfig()
        assert cfg.concurrent_feeds == 5
        assert cfg.max_items == 50
        assert cfg.import_max_items == 20
        assert cfg.failing_threshold == 3

    def test_concurrent_range_valid(self):
        SyncConfig(concurrent_feeds=1)
        SyncConfig(concurrent_feeds=20)

    def test_concurrent_feeds_range_invalid_low(self):
        with pytest.raises(ValidationError) as exc_info:
            SyncConfig(concurrent_feeds=0)
        assert "must be between 1 and 20" in str(exc_info.value)

    def test_concurrent_feeds_range_invalid_high(self):
        with pytest.raises(ValidationError) as exc_info:
            SyncConfig(concurrent_feeds=21)
        assert "must be between 1 and 20" in str(exc_info.value)

    def test_counts_positive(self):
        with pytest.raises(ValidationError):
            SyncConfig(max_items=0)
        with pytest.raises(ValidationError):
            SyncConfig(import_max_items=-1)
        with pytest.raises(ValidationError):
            SyncConfig(failing_threshold=0)

    def test_dict_access(self):
        cfg = SyncConfig(max_items=10)
        assert cfg["max_items"] == 10


class TestConfig:
    def test_default_values(self):
        cfg = Config()
        assert cfg.base_dir == "~/.modernfeed"
        assert cfg.db_path == ""
        assert cfg.log_level == "INFO"
        assert isinstance(cfg.fetch, FetchConfig)
        assert isinstance(cfg.extract, ExtractConfig)
        assert isinstance(cfg.sync, SyncConfig)

    def test_nested_config(self):
        cfg = Config(sync={"concurrent_feeds": 8})
        assert cfg.sync.concurrent_feeds == 8

    def test_log_level_normalized(self):
        assert Config(log_level="debug").log_level == "DEBUG"

    def test_log_level_unknown(self):
        with pytest.raises(ValidationError) as exc_info:
            Config(log_level="chatty")
        assert "unknown log level" in str(exc_info.value)

    def test_dict_access_nested(self):
        cfg = Config()
        assert cfg["sync"]["concurrent_feeds"] == 5
        assert cfg["fetch"]["timeout"] == 10


class TestLoadConfig:
    @pytest.fixture
    def home(self, temp_dir, monkeypatch):
        path = os.path.join(temp_dir, ".modernfeed", "config.json")
        monkeypatch.setattr(config_module, "config_path", lambda: config_module.Path(path))
        monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
        for var in (
            "MODERNFEED_BASE_DIR",
            "MODERNFEED_DB_PATH",
            "MODERNFEED_LOG_LEVEL",
            "MODERNFEED_USER_AGENT",
            "MODERNFEED_CONCURRENT_FEEDS",
        ):
            monkeypatch.delenv(var, raising=False)
        return path

    def write_config(self, path, data):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def test_defaults_without_file(self, home):
        cfg = load_config()
        assert cfg.base_dir == os.path.expanduser("~/.modernfeed")
        assert cfg.db_path == os.path.join(cfg.base_dir, "modernfeed.db")

    def test_file_overrides_defaults(self, home, temp_dir):
        self.write_config(home, {"base_dir": temp_dir, "sync": {"max_items": 10}})
        cfg = load_config()
        assert cfg.base_dir == temp_dir
        assert cfg.db_path == os.path.join(temp_dir, "modernfeed.db")
        assert cfg.sync.max_items == 10
        assert cfg.sync.concurrent_feeds == 5

    def test_env_overrides_file(self, home, temp_dir, monkeypatch):
        self.write_config(home, {"sync": {"concurrent_feeds": 3}})
        monkeypatch.setenv("MODERNFEED_CONCURRENT_FEEDS", "7")
        monkeypatch.setenv("MODERNFEED_USER_AGENT", "Env/1.0")
        monkeypatch.setenv("MODERNFEED_DB_PATH", os.path.join(temp_dir, "custom.db"))
        cfg = load_config()
        assert cfg.sync.concurrent_feeds == 7
        assert cfg.fetch.user_agent == "Env/1.0"
        assert cfg.db_path == os.path.join(temp_dir, "custom.db")

    def test_invalid_json_ignored(self, home):
        os.makedirs(os.path.dirname(home), exist_ok=True)
        with open(home, "w", encoding="utf-8") as f:
            f.write("{not json")
        assert load_config().sync.concurrent_feeds == 5

    def test_validation_error(self, home, monkeypatch):
        monkeypatch.setenv("MODERNFEED_CONCURRENT_FEEDS", "99")
        with pytest.raises(ValueError) as exc_info:
            load_config()
        assert "Configuration validation failed" in str(exc_info.value)
        assert "sync -> concurrent_feeds" in str(exc_info.value)


class TestMergeConfig:
    def test_simple_merge(self):
        base = {"a": 1, "b": 2}
        override = {"b": 3, "c": 4}
        result = _merge_config(base, override)
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        base = {"sync": {"max_items": 50, "concurrent_feeds": 5}}
        override = {"sync": {"max_items": 10}}
        result = _merge_config(base, override)
        assert result == {"sync": {"max_items": 10, "concurrent_feeds": 5}}

    def test_empty_base(self):
        result = _merge_config({}, {"a": 1})
        assert result == {"a": 1}


class TestFormatValidationErrors:
    def test_multiple_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            SyncConfig(concurrent_feeds=0, max_items=-1)
        formatted = _format_validation_errors(exc_info.value)
        assert "concurrent_feeds" in formatted
        assert "max_items" in formatted
        assert formatted.startswith("  - ")
