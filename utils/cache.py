"""
In-memory cache with a time-to-live for upstream API responses.
Instances are created by the application factory and injected into the
services that need them.
"""
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from utils.constants import DEFAULT_CACHE_TTL_SECONDS


class TTLCache:
    """Key/value store whose entries expire a fixed time after being set."""

    def __init__(self, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of an entry in seconds
            clock: Zero-argument callable returning the current time in seconds
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value.

        Returns:
            The stored value, or None if missing or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, timestamp = entry
            if self._clock() - timestamp > self.ttl_seconds:
                del self._entries[key]
                return None

            return value

    def set(self, key: str, value: Any) -> None:
        """Store a value stamped with the current clock time, dropping expired entries."""
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, timestamp) in self._entries.items() if now - timestamp > self.ttl_seconds]
            for k in expired:
                del self._entries[k]
            self._entries[key] = (value, now)

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
