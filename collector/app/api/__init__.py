"""API endpoints package for the collector."""

from collector.app.api.event import router as event_router

__all__ = [
    "event_router",
]
