"""Custom exceptions for the collector application.

Rejected events (rate limited, malformed JSON, invalid body) are ordinary
results, not exceptions. These classes cover internal faults only.
"""


class CollectorException(Exception):
    """Base class for collector exceptions with HTTP status code."""
    status_code: int = 500

    def __init__(self, message: str = "Collector error"):
        self.message = message
        super().__init__(message)


class EventSinkError(CollectorException):
    """Raised when an accepted event could not be written to its sink.

    Maps to HTTP 500 Internal Server Error.
    """
    status_code = 500

    def __init__(self, detail: str = "Failed to record event"):
        self.detail = detail
        super().__init__(detail)
