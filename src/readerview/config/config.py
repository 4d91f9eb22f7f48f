"""
Configuration management for readerview using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, List, Literal, Optional, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# Browser-like agent; some sites refuse obvious bots.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

CONFIG_FILE_NAMES = ("readerview.yaml", "readerview.yml", "config.yaml", "config.yml")

# --- Nested Configuration Models ---


class ParserConfig(BaseModel):
    """Extraction engine options."""

    max_elements_to_parse: int = Field(
        default=0, ge=0, description="Abort before any mutation above this many elements. 0 disables the check."
    )
    n_top_candidates: int = Field(default=5, ge=1, description="Number of top candidates kept while scoring.")
    char_threshold: int = Field(
        default=500, ge=0, description="Minimum article text length accepted without relaxing the flags."
    )
    classes_to_preserve: List[str] = Field(
        default_factory=lambda: ["page"], description="Class names kept on elements when keep_classes is off."
    )
    keep_classes: bool = Field(default=False, description="Keep every class attribute in the article content.")
    disable_json_ld: bool = Field(default=False, description="Skip schema.org JSON-LD metadata.")
    debug: bool = Field(default=False, description="Log extraction steps to stderr.")

    @field_validator("classes_to_preserve", mode="before")
    @classmethod
    def split_class_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [name for name in v.replace(",", " ").split() if name]
        return v


class LoggingConfig(BaseModel):
    """Configuration for application logging."""

    level: str = Field(default="WARNING", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    file: Optional[str] = Field(default=None, description="Path to log file. If None, logs to stderr.")
    json_output: bool = Field(default=False, alias="json", description="Render log lines as JSON.")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None or v == "":
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


class HTTPConfig(BaseModel):
    """Configuration for fetching remote pages."""

    timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent string for HTTP requests.")
    max_redirects: int = Field(default=10, ge=0, description="Maximum redirects followed per request.")


class WebConfig(BaseModel):
    """Configuration for the HTTP front end."""

    host: str = Field(default="127.0.0.1", description="Host for the web server.")
    port: int = Field(default=8080, ge=0, le=65535, description="Port for the web server.")
    log_level: Literal["critical", "error", "warning", "info", "debug"] = "info"


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "readerview"
    parser: ParserConfig = Field(default_factory=ParserConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    model_config = SettingsConfigDict(env_prefix="READERVIEW_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls()
        if not isinstance(yaml_data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {path}")
        return cls(**yaml_data)


def find_config_file(directory: Path | None = None) -> Path | None:
    current_dir = directory or Path.cwd()
    for name in CONFIG_FILE_NAMES:
        path = current_dir / name
        if path.is_file():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load an explicit config file, or the one found in the working directory."""
    config_path = path or find_config_file()
    if config_path is None:
        return Config()
    return Config.from_yaml(config_path)


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    Stand-in for :class:`Config` that loads on first attribute access.

    The file found by :func:`find_config_file` is used when it validates;
    otherwise the error is logged and defaults apply.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        cls = type(self)
        if cls._config is None:
            with cls._lock:
                if cls._config is None:
                    cls._config = cls._load()
        return getattr(cls._config, name)

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded configuration; the next access loads it again."""
        with cls._lock:
            cls._config = None

    @staticmethod
    def _load() -> Config:
        config_path = find_config_file()
        if config_path is None:
            log.debug("No readerview config file in %s, using defaults", Path.cwd())
            return Config()
        try:
            return Config.from_yaml(config_path)
        except (ValidationError, ValueError, OSError, yaml.YAMLError) as e:
            log.error("Ignoring invalid config file %s: %s", config_path, e)
            return Config()


settings: "Config" = cast("Config", LazyConfig())
