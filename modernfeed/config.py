"""Configuration management for ModernFeed."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from .models import Config

DEFAULT_CONFIG = Config()


def config_path() -> Path:
    return Path.home() / ".modernfeed" / "config.json"


def load_config() -> Config:
    """Load config from ~/.modernfeed/config.json, merge with defaults and env vars."""
    load_dotenv()

    config_data: dict = {}

    path = config_path()
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                user_cfg = json.load(f)
            config_data = _merge_config(config_data, user_cfg)
        except (OSError, json.JSONDecodeError):
            pass

    _apply_env_overrides(config_data)

    base_dir = os.path.expanduser(config_data.get("base_dir", DEFAULT_CONFIG.base_dir))
    config_data["base_dir"] = base_dir

    if config_data.get("db_path"):
        config_data["db_path"] = os.path.expanduser(config_data["db_path"])
    else:
        config_data["db_path"] = os.path.join(base_dir, "modernfeed.db")

    try:
        return Config(**config_data)
    except ValidationError as e:
        error_messages = _format_validation_errors(e)
        raise ValueError(f"Configuration validation failed:\n{error_messages}") from e


def _merge_config(base: dict, override: dict) -> dict:
    """Recursively merge override dict into base dict."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(value, dict) and key in result and isinstance(result[key], dict):
            result[key] = _merge_config(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(cfg: dict) -> None:
    """Apply environment variable overrides to config dict."""
    env_mappings = [
        ("MODERNFEED_BASE_DIR", None, "base_dir"),
        ("MODERNFEED_DB_PATH", None, "db_path"),
        ("MODERNFEED_LOG_LEVEL", None, "log_level"),
        ("MODERNFEED_USER_AGENT", "fetch", "user_agent"),
        ("MODERNFEED_CONCURRENT_FEEDS", "sync", "concurrent_feeds"),
    ]

    for env_var, section, key in env_mappings:
        value = os.environ.get(env_var)
        if value is None:
            continue

        if section is None:
            cfg[key] = value
        else:
            if section not in cfg:
                cfg[section] = {}
            cfg[section][key] = value


def _format_validation_errors(error: ValidationError) -> str:
    """Format pydantic validation errors into user-friendly messages."""
    messages = []
    for err in error.errors():
        loc = " -> ".join(str(x) for x in err["loc"])
        msg = err["msg"]
        messages.append(f"  - {loc}: {msg}")
    return "\n".join(messages)
