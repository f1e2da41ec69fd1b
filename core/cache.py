"""
Market Data Cache

Explicit, caller-owned TTL cache for parsed Land Registry years and
derived aggregates. Nothing in the scoring core reads from it; the
service that owns the data decides what to cache and for how long.

The web app serves sync endpoints from a threadpool, so every access to
the entry map holds a lock. Expired entries are purged on write.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


logger = logging.getLogger(__name__)


DEFAULT_TTL_SECONDS = 24 * 60 * 60


class MarketDataCache:
    """
    In-memory key/value cache with a per-entry time to live.

    Args:
        ttl_seconds: Lifetime of each entry
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if now >= expires_at:
                self._entries.pop(key, None)
                return None
            return value

    def set(self, key: Hashable, value: Any) -> None:
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            self._entries[key] = (now + self.ttl_seconds, value)

    def _purge_expired(self, now: float) -> int:
        # Caller holds the lock
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Purged %d expired market data cache entries", len(expired))
        return len(expired)

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        """
        Return the cached value, calling loader to fill a miss.

        The loader runs outside the lock; two threads missing the same
        key may both load it, and the last write wins.
        """
        value = self.get(key)
        if value is None:
            value = loader()
            self.set(key, value)
        return value

    def clear(self) -> int:
        """Drop every entry. Returns the number of entries removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d market data cache entries", removed)
        return removed

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for expires_at, _ in self._entries.values() if now < expires_at)
