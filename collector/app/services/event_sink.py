"""Sinks for accepted events.

Production deployments write each accepted event to the ``collector.events``
logger; every other environment uses a sink that discards events.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from collector.app.core.config import Settings
from collector.app.core.logging import get_logger
from collector.app.exceptions import EventSinkError
from collector.app.services.validation import EventRecord

EVENT_LOGGER_NAME = "collector.events"
EVENT_LOG_MESSAGE = "[first_party_event]"


def build_event_entry(identity: str, event: EventRecord) -> Dict[str, Any]:
    """Build the record written for an accepted event."""
    return {
        "ip": identity,
        "type": event.type,
        "page": event.page,
        "payload": event.payload if event.payload is not None else {},
        "ts": event.ts,
    }


class EventSink(ABC):
    """Destination for accepted events."""

    @abstractmethod
    def record(self, identity: str, event: EventRecord) -> None:
        """Record one accepted event.

        Raises:
            EventSinkError: If the event could not be written
        """


class LoggingEventSink(EventSink):
    """Writes accepted events as structured log records."""

    def __init__(self, logger_name: str = EVENT_LOGGER_NAME):
        self.logger = get_logger(logger_name)

    def record(self, identity: str, event: EventRecord) -> None:
        entry = build_event_entry(identity, event)
        try:
            self.logger.info(
                EVENT_LOG_MESSAGE,
                extra={
                    "client_id": identity,
                    "event_type": event.type,
                    "page": event.page,
                    "event": entry,
                },
            )
        except Exception as exc:
            raise EventSinkError(f"Failed to log event: {exc}") from exc


class NullEventSink(EventSink):
    """Accepts events and drops them."""

    def record(self, identity: str, event: EventRecord) -> None:
        return None


def get_event_sink(app_settings: Settings) -> EventSink:
    """Select the sink for the configured environment."""
    if app_settings.is_production:
        return LoggingEventSink()
    return NullEventSink()
