"""Structured logging for readerview."""

from __future__ import annotations

from .logging import configure_logging, get_debug_logger, get_logger

__all__ = ["configure_logging", "get_debug_logger", "get_logger"]
