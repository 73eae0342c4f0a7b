"""Resolution cache with single-flight misses.

Keys are CacheKey tuples (era, type hint or "", lowercased name); values are
URL strings. Entity-to-URL mappings for a fixed game database do not change,
so entries are never invalidated, only bounded:

    max_entries  least-recently-used entries are evicted past this size
    ttl          entries older than this many seconds count as misses

Both unset gives an unbounded, append-only cache.

Single-flight: the first caller for a missing key registers a future in
_inflight and runs the resolver; every concurrent caller for the same key
awaits that future instead of resolving again. If the first caller is
cancelled, a waiter that was not cancelled itself becomes the new owner.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from typing import NamedTuple

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    era: str
    type_hint: str
    name: str

    @classmethod
    def build(cls, era: str, type_hint: str | None, clean_name: str) -> CacheKey:
        return cls(era, type_hint or "", clean_name.lower())


class Resolution(BaseModel):
    """A resolver outcome. Non-cacheable outcomes are returned but not stored."""

    url: str
    cacheable: bool = True


Resolver = Callable[[], Awaitable[Resolution]]


class ResolutionCache:
    def __init__(
        self,
        max_entries: int | None = None,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_entries = max_entries or None
        self._ttl = ttl or None
        self._clock = clock
        self._entries: OrderedDict[CacheKey, tuple[str, float]] = OrderedDict()
        self._inflight: dict[CacheKey, asyncio.Future[str]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: CacheKey) -> str | None:
        """Return the stored URL, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        url, stored_at = entry
        if self._ttl is not None and self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return url

    def put(self, key: CacheKey, url: str) -> None:
        self._entries[key] = (url, self._clock())
        self._entries.move_to_end(key)
        if self._max_entries is not None:
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("cache evicted %s", evicted)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict[str, int | float | None]:
        return {
            "entries": len(self._entries),
            "inflight": len(self._inflight),
            "hits": self.hits,
            "misses": self.misses,
            "max_entries": self._max_entries,
            "ttl": self._ttl,
        }

    async def get_or_resolve(self, key: CacheKey, resolver: Resolver) -> str:
        """Return the URL for key, running resolver at most once per miss."""
        url = self.get(key)
        if url is not None:
            self.hits += 1
            logger.debug("cache hit %s", key)
            return url

        pending = self._inflight.get(key)
        if pending is not None:
            try:
                # shield: a cancelled waiter must not cancel the shared lookup
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                task = asyncio.current_task()
                if not pending.cancelled() or (task is not None and task.cancelling()):
                    raise
            # The owner was cancelled, not us: take over the lookup
            logger.debug("in-flight lookup for %s was cancelled, retrying", key)
            return await self.get_or_resolve(key, resolver)

        self.misses += 1
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            resolution = await resolver()
            if resolution.cacheable:
                self.put(key, resolution.url)
            future.set_result(resolution.url)
            return resolution.url
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so a future nobody waited on does not log a warning
            future.exception()
            raise
        finally:
            del self._inflight[key]
