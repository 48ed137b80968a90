"""TTL and LRU bounded caching for RPC responses."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

DEFAULT_CAPACITY = 5000


def make_cache_key(operation: str, signature: str) -> str:
    """
    Build a cache key from an operation name and its argument signature.

    Parameters
    ----------
    operation : str
        Operation name (e.g., 'balance', 'block')
    signature : str
        Stable string encoding of the operation arguments

    Returns
    -------
    str
        Cache key of the form ``operation:signature``

    """
    return f"{operation}:{signature}"


class CacheEntry:
    """
    Cache entry with an absolute expiry.

    Parameters
    ----------
    key : str
        Cache key
    value : Any
        Cached value
    expires_at : float
        Clock reading after which the entry is no longer visible

    """

    __slots__ = ("expires_at", "key", "value")

    def __init__(self, key: str, value: Any, expires_at: float) -> None:
        self.key = key
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        """
        Check if cache entry has expired.

        Parameters
        ----------
        now : float
            Current clock reading

        Returns
        -------
        bool
            True if expired, False otherwise

        """
        return now >= self.expires_at


class RPCCache:
    """
    In-memory cache for RPC responses with TTL and LRU eviction.

    Parameters
    ----------
    ttl : float
        Time-to-live in seconds for every entry
    capacity : int
        Maximum number of entries kept before evicting the least recently used
    clock : Callable[[], float]
        Monotonic clock, injectable for tests

    """

    def __init__(
        self,
        ttl: float = 30.0,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be greater than zero")
        if ttl <= 0:
            raise ValueError("ttl must be greater than zero")
        self.ttl = ttl
        self.capacity = capacity
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """
        Get cached value if it exists and hasn't expired.

        Parameters
        ----------
        key : str
            Cache key

        Returns
        -------
        Any | None
            Cached value if found and valid, None otherwise

        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None

            self._entries.move_to_end(key)  # LRU touch
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """
        Store value in cache, resetting its expiry.

        Parameters
        ----------
        key : str
            Cache key
        value : Any
            Value to cache

        """
        with self._lock:
            self._entries[key] = CacheEntry(key, value, self._clock() + self.ttl)
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._entries.clear()

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries from cache.

        Returns
        -------
        int
            Number of entries removed

        """
        with self._lock:
            now = self._clock()
            expired_keys = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired_keys:
                del self._entries[key]
            return len(expired_keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
