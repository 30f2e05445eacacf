"""Configuration module for picbot."""

from picbot.config.loader import get_config_path, load_config, save_config
from picbot.config.schema import Config

__all__ = ["Config", "get_config_path", "load_config", "save_config"]
