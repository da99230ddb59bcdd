"""Explicit time-bounded cache for provider model listings."""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

T = TypeVar("T")


class ModelListCache:
    """Caches the result of provider model-list requests for a fixed TTL.

    The cache is owned by whoever constructs it; there is no module-level
    instance. Concurrent misses for the same key share a single fetch.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for ``key`` if it has not expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    async def get_or_fetch(self, key: str, fetcher: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for ``key`` or store and return ``await fetcher()``.

        A failed fetch is not cached.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = self.get(key)
            if cached is not None:
                return cached
            value = await fetcher()
            self.set(key, value)
            return value

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one entry, or every entry when ``key`` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
