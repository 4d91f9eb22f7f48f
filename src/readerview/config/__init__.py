"""Configuration models and the lazily loaded global settings."""

from __future__ import annotations

from .config import (
    Config,
    HTTPConfig,
    LoggingConfig,
    ParserConfig,
    WebConfig,
    find_config_file,
    load_config,
    settings,
)

__all__ = [
    "Config",
    "HTTPConfig",
    "LoggingConfig",
    "ParserConfig",
    "WebConfig",
    "find_config_file",
    "load_config",
    "settings",
]
