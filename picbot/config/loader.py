"""Configuration loading utilities."""

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from picbot.config.schema import Config

# Keys the single-plugin config format kept at the document root
_LEGACY_SEARCH_KEYS = ("accountId", "shortenTimeout", "template")


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".picbot" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            data = _migrate_config(data)
            return Config.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to load config from {}: {}", path, e)
            logger.warning("Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(by_alias=True)

    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def _migrate_config(data: dict) -> dict:
    """Migrate old config formats to current."""
    if not isinstance(data, dict):
        return data

    # Move root-level accountId/shortenTimeout/template -> search.*
    search_cfg = data.setdefault("search", {})
    if not isinstance(search_cfg, dict):
        return data
    for key in _LEGACY_SEARCH_KEYS:
        if key not in data:
            continue
        value = data.pop(key)
        if key not in search_cfg:
            search_cfg[key] = value

    # Move legacy search.shortener -> shortener
    legacy_shortener = search_cfg.pop("shortener", None)
    if isinstance(legacy_shortener, dict) and "shortener" not in data:
        data["shortener"] = legacy_shortener

    return data
