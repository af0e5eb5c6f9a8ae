"""Core utilities for the collector application."""

from collector.app.core.config import Settings, settings
from collector.app.core.logging import get_log_context, get_logger, setup_logging
from collector.app.core.utils import now_ms

__all__ = [
    "Settings",
    "settings",
    "get_logger",
    "get_log_context",
    "setup_logging",
    "now_ms",
]
