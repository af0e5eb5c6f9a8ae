"""Services package for the collector."""

from collector.app.services.event_sink import (
    EventSink,
    LoggingEventSink,
    NullEventSink,
    get_event_sink,
)
from collector.app.services.identity import resolve_client_identity
from collector.app.services.ingestion import (
    EventIngestionService,
    IngestionError,
    IngestionResult,
)
from collector.app.services.rate_limit import (
    MAX_PER_WINDOW,
    WINDOW_MS,
    RateLimitBucket,
    RateLimitRegistry,
)
from collector.app.services.validation import EventRecord, is_valid_body

__all__ = [
    "EventSink",
    "LoggingEventSink",
    "NullEventSink",
    "get_event_sink",
    "resolve_client_identity",
    "EventIngestionService",
    "IngestionError",
    "IngestionResult",
    "MAX_PER_WINDOW",
    "WINDOW_MS",
    "RateLimitBucket",
    "RateLimitRegistry",
    "EventRecord",
    "is_valid_body",
]
