"""Per-client fixed window rate limiting for event ingestion.

Each client identity gets a bucket counting requests since the start of
its current window. When a request arrives at or after the end of the
window the bucket is reset to a count of one, so up to
``2 * MAX_PER_WINDOW - 1`` requests can pass around a window boundary.
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Optional

from collector.app.core.logging import get_logger

logger = get_logger(__name__)

WINDOW_MS = 60_000
MAX_PER_WINDOW = 120


@dataclass
class RateLimitBucket:
    """Request count for one client within its current window."""
    count: int
    window_started_at: int


class RateLimitRegistry:
    """In-memory registry of rate limit buckets keyed by client identity.

    Suitable for single-instance deployments. State is process local and
    lost on restart.

    Memory:
    - Unbounded by default, one entry per identity ever seen
    - ``max_entries`` turns on LRU eviction of the least recently seen
      identities
    - ``sweep()`` drops buckets whose window has already expired
    """

    def __init__(
        self,
        window_ms: int = WINDOW_MS,
        max_per_window: int = MAX_PER_WINDOW,
        max_entries: Optional[int] = None,
    ):
        """Initialize the registry.

        Args:
            window_ms: Window length in milliseconds
            max_per_window: Requests admitted per identity per window
            max_entries: Maximum number of identities to track (None = no limit)
        """
        self.window_ms = window_ms
        self.max_per_window = max_per_window
        self._max_entries = max_entries
        self._buckets: OrderedDict[str, RateLimitBucket] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def is_rate_limited(self, identity: str, now: int) -> bool:
        """Decide whether a request must be rejected and record it.

        Args:
            identity: Client identity
            now: Current time in milliseconds

        Returns:
            True if the identity has used up its quota for the current window
        """
        with self._lock:
            bucket = self._buckets.get(identity)

            if bucket is None or now - bucket.window_started_at >= self.window_ms:
                self._buckets[identity] = RateLimitBucket(count=1, window_started_at=now)
                self._touch(identity)
                return False

            self._touch(identity)

            # Rejections do not consume quota
            if bucket.count >= self.max_per_window:
                return True

            bucket.count += 1
            return False

    def get_bucket(self, identity: str) -> Optional[RateLimitBucket]:
        """Return a copy of the bucket for ``identity``, if one exists."""
        with self._lock:
            bucket = self._buckets.get(identity)
            return replace(bucket) if bucket is not None else None

    def sweep(self, now: int) -> int:
        """Remove buckets whose window has expired.

        An expired bucket would be reset on its next request anyway, so
        removing it does not change any later decision.

        Returns:
            Number of buckets removed
        """
        with self._lock:
            expired = [
                identity for identity, bucket in self._buckets.items()
                if now - bucket.window_started_at >= self.window_ms
            ]
            for identity in expired:
                del self._buckets[identity]

        if expired:
            logger.debug(f"Swept {len(expired)} expired rate limit buckets")
        return len(expired)

    def _touch(self, identity: str) -> None:
        # Caller holds the lock
        if self._max_entries is None:
            return
        self._buckets.move_to_end(identity)
        while len(self._buckets) > self._max_entries:
            evicted, _ = self._buckets.popitem(last=False)
            logger.debug(f"Evicted rate limit bucket for {evicted}")
