"""MentionResolver: scan → parse → resolve (cached) → rewrite.

rewrite_mentions() is the only entry point the rest of the app uses. It never
raises; the worst outcome is that some links point at a search page.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Any

from .cache import CacheKey, Resolution, ResolutionCache
from .disambiguate import canonical_url, select_candidate
from .lookup import LookupClient, era_scope, search_url
from .mentions import ParsedMention, parse_mention, scan_mentions
from .rewriter import apply_links

logger = logging.getLogger(__name__)


class MentionResolver:
    """Resolves mentions to Wowhead links through a shared ResolutionCache.

    One instance is meant to live for the whole process so concurrent chat
    responses share its cache and in-flight registry.

    Args:
        lookup:                 Search client (anything with LookupClient.search).
        cache:                  Resolution cache; a fresh unbounded one if omitted.
        max_concurrent_lookups: Upper bound on simultaneous outbound lookups.
    """

    def __init__(
        self,
        lookup: LookupClient,
        cache: ResolutionCache | None = None,
        max_concurrent_lookups: int = 8,
    ) -> None:
        self.lookup = lookup
        self.cache = cache if cache is not None else ResolutionCache()
        self._max_concurrent = max(1, max_concurrent_lookups)
        self._semaphores: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, asyncio.Semaphore
        ] = weakref.WeakKeyDictionary()

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> MentionResolver:
        lookup = LookupClient(
            service_domain=config["service_domain"],
            timeout=config["lookup_timeout"],
            user_agent=config["user_agent"],
        )
        cache = ResolutionCache(
            max_entries=config.get("cache_max_entries") or None,
            ttl=config.get("cache_ttl") or None,
        )
        return cls(lookup, cache, config.get("max_concurrent_lookups", 8))

    @property
    def service_domain(self) -> str:
        return self.lookup.service_domain

    def _semaphore(self) -> asyncio.Semaphore:
        # One semaphore per event loop; TestClient and MCP each run their own
        loop = asyncio.get_running_loop()
        sem = self._semaphores.get(loop)
        if sem is None:
            sem = self._semaphores[loop] = asyncio.Semaphore(self._max_concurrent)
        return sem

    def fallback_url(self, clean_name: str, era: str) -> str:
        return search_url(era_scope(era), clean_name, self.service_domain)

    async def resolve(self, mention: ParsedMention, era: str) -> str:
        """Return the URL for one parsed mention, from cache when possible."""
        key = CacheKey.build(era, mention.type_hint, mention.clean_name)
        return await self.cache.get_or_resolve(
            key, lambda: self._resolve_uncached(mention, era)
        )

    async def _resolve_uncached(self, mention: ParsedMention, era: str) -> Resolution:
        name = mention.clean_name
        try:
            async with self._semaphore():
                result = await self.lookup.search(name, era)
        except Exception:
            logger.exception("lookup raised for %r", name)
            return Resolution(url=self.fallback_url(name, era), cacheable=False)

        if result.error:
            # Transport/format failures are not cached so a later call retries
            return Resolution(
                url=search_url(result.scope, name, self.service_domain),
                cacheable=False,
            )

        best = select_candidate(result.candidates, name, mention.type_hint)
        if best is not None and best.id:
            url = canonical_url(result.scope, best, self.service_domain)
            logger.info("resolved %r (hint=%s) → %s", name, mention.type_hint or "none", url)
            return Resolution(url=url)

        logger.warning("no direct match for %r (hint=%s)", name, mention.type_hint or "none")
        return Resolution(url=search_url(result.scope, name, self.service_domain))

    async def resolve_all(self, text: str, era: str) -> dict[str, str]:
        """Resolve every distinct mention in text concurrently.

        Returns {raw mention text: url}. Raw variants sharing a CacheKey
        (e.g. "Thrall" and " thrall ") resolve through a single task.
        """
        by_key: dict[CacheKey, ParsedMention] = {}
        raw_keys: dict[str, CacheKey] = {}
        for mention in scan_mentions(text):
            if mention.raw in raw_keys:
                continue
            parsed = parse_mention(mention.raw)
            key = CacheKey.build(era, parsed.type_hint, parsed.clean_name)
            raw_keys[mention.raw] = key
            by_key.setdefault(key, parsed)

        if not by_key:
            return {}

        keys = list(by_key)
        urls = await asyncio.gather(*(self.resolve(by_key[k], era) for k in keys))
        resolved = dict(zip(keys, urls))
        return {raw: resolved[key] for raw, key in raw_keys.items()}

    async def rewrite_mentions(self, text: str, era: str) -> str:
        """Replace every {{mention}} in text with a markdown link. Never raises."""

        def fallback(name: str) -> str:
            return self.fallback_url(name, era)

        try:
            links = await self.resolve_all(text, era)
        except Exception:
            logger.exception("mention resolution failed; using search links")
            links = {}
        return apply_links(text, links, fallback)
