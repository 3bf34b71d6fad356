"""TTL-based caching for JSON-RPC responses."""

import hashlib
import json
import threading
import time
from typing import Any


class CacheEntry:
    """
    Cache entry with TTL support.

    Parameters
    ----------
    value : Any
        Cached value
    ttl : int | None
        Time-to-live in seconds; None never expires
    created_at : float | None
        Creation timestamp. Uses current time if None.

    """

    def __init__(self, value: Any, ttl: int | None, created_at: float | None = None) -> None:
        self.value = value
        self.ttl = ttl
        self.created_at = created_at or time.time()

    def is_expired(self) -> bool:
        """Check if cache entry has expired."""
        if self.ttl is None:
            return False
        return (time.time() - self.created_at) > self.ttl


class RPCCache:
    """
    Thread-safe in-memory cache for JSON-RPC responses.

    Committed transactions, blocks and headers never change, so the provider
    stores them here to avoid refetching previous transactions while
    resolving inputs.

    Parameters
    ----------
    default_ttl : int | None
        Default time-to-live in seconds for cache entries
    max_entries : int
        Oldest entries are evicted beyond this size

    """

    def __init__(self, default_ttl: int | None = 3600, max_entries: int = 10_000) -> None:
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _make_key(self, method: str, params: list[Any]) -> str:
        key_str = json.dumps({"method": method, "params": params}, sort_keys=True)
        return hashlib.sha256(key_str.encode()).hexdigest()

    def get(self, method: str, params: list[Any]) -> Any | None:
        """
        Get cached value if it exists and hasn't expired.

        Parameters
        ----------
        method : str
            RPC method name
        params : list[Any]
            Method parameters

        Returns
        -------
        Any | None
            Cached value if found and valid, None otherwise

        """
        key = self._make_key(method, params)
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.is_expired():
                del self._cache[key]
                return None
            return entry.value

    def set(self, method: str, params: list[Any], value: Any, ttl: int | None = None) -> None:
        """
        Store value in cache with TTL.

        Parameters
        ----------
        method : str
            RPC method name
        params : list[Any]
            Method parameters
        value : Any
            Value to cache
        ttl : int | None
            Time-to-live in seconds. Uses default_ttl if None.

        """
        key = self._make_key(method, params)
        with self._lock:
            if key not in self._cache and len(self._cache) >= self.max_entries:
                # dicts preserve insertion order
                del self._cache[next(iter(self._cache))]
            self._cache[key] = CacheEntry(value, ttl if ttl is not None else self.default_ttl)

    def __len__(self) -> int:
        return len(self._cache)
