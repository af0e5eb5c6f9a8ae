"""Tests for event sinks."""

from unittest.mock import Mock

import pytest

from collector.app.core.config import Settings
from collector.app.exceptions import EventSinkError
from collector.app.services.event_sink import (
    EVENT_LOGGER_NAME,
    LoggingEventSink,
    NullEventSink,
    build_event_entry,
    get_event_sink,
)
from collector.app.services.validation import EventRecord


@pytest.fixture
def event():
    return EventRecord(type="click", page="/compare/a-vs-b", ts=1_700_000_000_000)


def test_entry_defaults_payload(event):
    entry = build_event_entry("1.2.3.4", event)
    assert entry == {
        "ip": "1.2.3.4",
        "type": "click",
        "page": "/compare/a-vs-b",
        "payload": {},
        "ts": 1_700_000_000_000,
    }


def test_entry_keeps_payload():
    event = EventRecord(type="click", page="/", ts=1.5, payload={"provider": "x"})
    assert build_event_entry("a", event)["payload"] == {"provider": "x"}


def test_logging_sink_uses_event_logger():
    assert LoggingEventSink().logger.name == EVENT_LOGGER_NAME


def test_logging_sink_writes_context(event):
    sink = LoggingEventSink()
    sink.logger = Mock()

    sink.record("1.2.3.4", event)

    extra = sink.logger.info.call_args.kwargs["extra"]
    assert extra["client_id"] == "1.2.3.4"
    assert extra["event_type"] == "click"
    assert extra["page"] == "/compare/a-vs-b"


def test_logging_sink_wraps_failures(event):
    sink = LoggingEventSink()
    sink.logger = Mock()
    sink.logger.info.side_effect = RuntimeError("broken handler")

    with pytest.raises(EventSinkError) as exc_info:
        sink.record("1.2.3.4", event)

    assert exc_info.value.status_code == 500
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_null_sink_discards(event):
    assert NullEventSink().record("1.2.3.4", event) is None


@pytest.mark.parametrize(
    ("environment", "expected"),
    [
        ("production", LoggingEventSink),
        ("PRODUCTION", LoggingEventSink),
        ("development", NullEventSink),
        ("test", NullEventSink),
    ],
)
def test_get_event_sink(environment, expected):
    settings = Settings(_env_file=None, environment=environment)
    assert isinstance(get_event_sink(settings), expected)
