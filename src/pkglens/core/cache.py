"""A small in-memory cache holding one value with expiration."""

from __future__ import annotations

import asyncio
import math
import time
from typing import Awaitable, Callable, Generic, TypeVar

from pkglens.core.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class TTLCache(Generic[T]):
    """Holds a single value until it expires or is invalidated.

    Check, refresh and store happen under one lock, so concurrent callers
    that find the entry stale trigger a single load and share its result.
    The stored value is replaced wholesale and never modified in place.
    """

    def __init__(
        self,
        name: str,
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.ttl = ttl
        self._clock = clock
        self._value: T | None = None
        self._expiry = -math.inf
        self._lock = asyncio.Lock()
        self._generation = 0
        self.loads = 0

    @property
    def fresh(self) -> bool:
        return self._value is not None and self._clock() < self._expiry

    async def get_or_load(self, loader: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value, or await ``loader`` and cache its result.

        Args:
            loader: Coroutine function producing a fresh value.

        Returns:
            Cached or freshly loaded value.
        """
        async with self._lock:
            if self.fresh:
                log.debug(
                    "cache_hit",
                    cache=self.name,
                    expires_in=round(self._expiry - self._clock(), 3)
                )
                return self._value

            log.info("cache_miss", cache=self.name)
            start = time.perf_counter()
            generation = self._generation
            value = await loader()
            self.loads += 1
            if generation != self._generation:
                # invalidated while loading: hand the value out but do not keep it
                log.debug("cache_load_discarded", cache=self.name)
                return value
            self._value = value
            self._expiry = self._clock() + self.ttl
            log.info(
                "cache_set",
                cache=self.name,
                ttl=self.ttl,
                duration_ms=int((time.perf_counter() - start) * 1000)
            )
            return value

    def invalidate(self) -> None:
        """Drop the cached value so the next read reloads."""
        self._value = None
        self._expiry = -math.inf
        self._generation += 1
        log.debug("cache_invalidated", cache=self.name)
