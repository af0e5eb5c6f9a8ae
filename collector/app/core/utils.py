"""Utility functions for the collector application."""

import time


def now_ms() -> int:
    """Return wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000
