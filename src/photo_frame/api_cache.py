from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger("photo_frame.api_cache")

T = TypeVar("T")


def refresh_interval(hours: int) -> timedelta:
    """Cache lifetime for listing lookups; non-positive hours disable reuse."""
    return timedelta(hours=hours) if hours > 0 else timedelta(milliseconds=1)


class ApiCache:
    """Time-bounded cache for expensive remote listings.

    Concurrent misses for the same key share a single load.
    """

    def __init__(self, ttl: timedelta, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl.total_seconds()
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_or_add(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        cached = self._lookup(key)
        if cached is not None:
            return cached[1]

        lock = self._locks.setdefault(key, asyncio.Lock())
        try:
            async with lock:
                cached = self._lookup(key)
                if cached is not None:
                    return cached[1]

                value = await factory()
                now = self._clock()
                self._prune(now)
                self._entries[key] = (now + self._ttl, value)
                logger.debug({"event": "api_cache.stored", "key": key})
                return value
        finally:
            if self._locks.get(key) is lock:
                del self._locks[key]

    def invalidate(self, key: Optional[str] = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def _prune(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def _lookup(self, key: str) -> Optional[tuple[float, Any]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[0] <= self._clock():
            self._entries.pop(key, None)
            return None
        return entry
