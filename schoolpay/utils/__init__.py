"""Shared utilities: configuration and structured logging."""

from .config import Settings, get_settings, reload_settings
from .logging import get_logger

__all__ = ["Settings", "get_settings", "reload_settings", "get_logger"]
