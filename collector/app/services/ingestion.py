"""Event ingestion pipeline.

A request goes through four steps, in order:

1. rate limit check for the resolved client identity
2. JSON decoding of the body (skipped entirely when rate limited)
3. body validation
4. recording the event in the configured sink

Every rejection is returned as an ``IngestionResult``; nothing is raised
for bad input or exhausted quota.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from collector.app.core.logging import get_log_context, get_logger
from collector.app.core.utils import now_ms
from collector.app.exceptions import EventSinkError
from collector.app.services.event_sink import EventSink
from collector.app.services.identity import resolve_client_identity
from collector.app.services.rate_limit import RateLimitRegistry
from collector.app.services.validation import is_valid_body

logger = get_logger(__name__)

BodyReader = Callable[[], Awaitable[bytes]]


class IngestionError(str, Enum):
    """Machine-readable rejection codes and their HTTP status."""

    RATE_LIMITED = "rate_limited"
    INVALID_JSON = "invalid_json"
    INVALID_BODY = "invalid_body"
    INTERNAL_ERROR = "internal_error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    IngestionError.RATE_LIMITED: 429,
    IngestionError.INVALID_JSON: 400,
    IngestionError.INVALID_BODY: 400,
    IngestionError.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of one ingestion request."""
    identity: str
    error: Optional[IngestionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.error is None else self.error.status_code

    def to_response(self) -> Dict[str, Any]:
        if self.error is None:
            return {"ok": True}
        return {"ok": False, "error": self.error.value}


def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _parse_int(literal: str) -> Any:
    # Past the int digit limit, decode like a double (which overflows to inf)
    try:
        return int(literal)
    except ValueError:
        return float(literal)


def decode_body(raw: bytes) -> Any:
    """Decode a JSON request body.

    Raises:
        ValueError: If the body is not valid UTF-8 JSON
        RecursionError: If the document nests too deeply to decode
    """
    return json.loads(raw, parse_constant=_reject_constant, parse_int=_parse_int)


class EventIngestionService:
    """Runs the ingestion pipeline against a registry and a sink.

    Both collaborators are injected so tests and the application factory
    control their lifetime.
    """

    def __init__(self, registry: RateLimitRegistry, sink: EventSink):
        self.registry = registry
        self.sink = sink

    async def ingest(
        self,
        headers: Mapping[str, str],
        read_body: BodyReader,
        now: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> IngestionResult:
        """Process one event request.

        Args:
            headers: Request headers used to resolve the client identity
            read_body: Coroutine function returning the raw body; never
                awaited when the client is rate limited
            now: Current time in milliseconds (defaults to the wall clock)
            request_id: Request ID for log correlation

        Returns:
            IngestionResult describing the response to send
        """
        if now is None:
            now = now_ms()
        identity = resolve_client_identity(headers)

        if self.registry.is_rate_limited(identity, now):
            return self._reject(identity, IngestionError.RATE_LIMITED, request_id)

        try:
            data = decode_body(await read_body())
        except (ValueError, RecursionError):
            return self._reject(identity, IngestionError.INVALID_JSON, request_id)

        event = is_valid_body(data)
        if event is None:
            return self._reject(identity, IngestionError.INVALID_BODY, request_id)

        try:
            self.sink.record(identity, event)
        except EventSinkError:
            logger.exception(
                "Failed to record accepted event",
                extra=get_log_context(request_id=request_id, client_id=identity),
            )
            return IngestionResult(identity=identity, error=IngestionError.INTERNAL_ERROR)

        return IngestionResult(identity=identity)

    def _reject(
        self,
        identity: str,
        error: IngestionError,
        request_id: Optional[str],
    ) -> IngestionResult:
        logger.debug(
            f"Event rejected: {error.value}",
            extra=get_log_context(request_id=request_id, client_id=identity, error=error.value),
        )
        return IngestionResult(identity=identity, error=error)
