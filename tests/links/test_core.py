"""Tests for MentionResolver with a stubbed lookup service."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from wow_oracle.links import (
    LookupClient,
    MentionResolver,
    ParsedMention,
    ResolutionCache,
)

ITEM, SPELL, NPC = 3, 6, 1

THRALL = {"Thrall": [(4949, "Thrall", NPC)]}


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------

async def test_resolve_is_idempotent_and_cached(stub_resolver) -> None:
    resolver, lookup = stub_resolver(THRALL)
    mention = ParsedMention(clean_name="Thrall")

    first = await resolver.resolve(mention, "Classic")
    second = await resolver.resolve(mention, "Classic")

    assert first == second == "https://classic.wowhead.com/npc=4949"
    assert len(lookup.calls) == 1


async def test_cache_key_ignores_name_case(stub_resolver) -> None:
    resolver, lookup = stub_resolver(THRALL)
    await resolver.resolve(ParsedMention(clean_name="Thrall"), "Classic")
    await resolver.resolve(ParsedMention(clean_name="THRALL"), "Classic")
    assert len(lookup.calls) == 1


async def test_same_name_in_different_eras_resolves_separately(stub_resolver) -> None:
    resolver, lookup = stub_resolver(THRALL)
    tbc = await resolver.resolve(ParsedMention(clean_name="Thrall"), "TBC")
    retail = await resolver.resolve(ParsedMention(clean_name="Thrall"), "Retail")
    assert tbc == "https://tbc.wowhead.com/npc=4949"
    assert retail == "https://www.wowhead.com/npc=4949"
    assert len(lookup.calls) == 2


async def test_forced_type_selects_matching_candidate(stub_resolver) -> None:
    resolver, _ = stub_resolver({"X": [(1, "X", ITEM), (2, "X", SPELL)]})
    url = await resolver.resolve(ParsedMention(clean_name="X", type_hint="spell"), "Retail")
    assert url == "https://www.wowhead.com/spell=2"


async def test_forced_type_without_match_falls_back_to_search(stub_resolver) -> None:
    resolver, _ = stub_resolver({"X": [(1, "X", ITEM), (2, "X", SPELL)]})
    url = await resolver.resolve(ParsedMention(clean_name="X", type_hint="npc"), "Retail")
    assert url == "https://www.wowhead.com/search?q=X"


async def test_exact_match_priority_prefers_item(stub_resolver) -> None:
    resolver, _ = stub_resolver({"Thrall": [(1, "Thrall", NPC), (2, "Thrall", ITEM)]})
    url = await resolver.resolve(ParsedMention(clean_name="Thrall"), "Classic")
    assert url == "https://classic.wowhead.com/item=2"


async def test_zero_id_candidate_falls_back_to_search(stub_resolver) -> None:
    resolver, _ = stub_resolver({"Ghost": [(0, "Ghost", NPC)]})
    url = await resolver.resolve(ParsedMention(clean_name="Ghost"), "Classic")
    assert url == "https://classic.wowhead.com/search?q=Ghost"


async def test_no_match_fallback_is_cached(stub_resolver) -> None:
    resolver, lookup = stub_resolver()
    mention = ParsedMention(clean_name="Nonexistent Thing")
    first = await resolver.resolve(mention, "WotLK")
    second = await resolver.resolve(mention, "WotLK")
    assert first == second == "https://wotlk.wowhead.com/search?q=Nonexistent%20Thing"
    assert len(lookup.calls) == 1


async def test_lookup_failure_falls_back_and_is_retried_later(stub_resolver) -> None:
    resolver, lookup = stub_resolver(error="transport")
    mention = ParsedMention(clean_name="Foo")
    assert await resolver.resolve(mention, "TBC") == "https://tbc.wowhead.com/search?q=Foo"
    await resolver.resolve(mention, "TBC")
    assert len(lookup.calls) == 2


async def test_lookup_exception_never_propagates(stub_resolver) -> None:
    resolver, lookup = stub_resolver()
    lookup.search = AsyncMock(side_effect=RuntimeError("unexpected"))
    url = await resolver.resolve(ParsedMention(clean_name="Foo"), "Retail")
    assert url == "https://www.wowhead.com/search?q=Foo"


async def test_http_500_with_real_client_falls_back() -> None:
    bad_resp = MagicMock()
    bad_resp.status_code = 500
    bad_resp.raise_for_status.side_effect = httpx.HTTPStatusError(
        "", request=MagicMock(), response=bad_resp
    )
    resolver = MentionResolver(LookupClient(), ResolutionCache())
    with patch("httpx.AsyncClient.get", AsyncMock(return_value=bad_resp)):
        url = await resolver.resolve(ParsedMention(clean_name="Foo"), "TBC")
    assert url == "https://tbc.wowhead.com/search?q=Foo"


# ---------------------------------------------------------------------------
# rewrite_mentions
# ---------------------------------------------------------------------------

async def test_rewrite_end_to_end(stub_resolver) -> None:
    resolver, _ = stub_resolver({
        "The Unstoppable Force": [(12345, "The Unstoppable Force", ITEM)],
        "Thrall": [(777, "Thrall's Warband", NPC)],
    })
    text = "Use {{item:The Unstoppable Force}} and {{Thrall}} for this."

    result = await resolver.rewrite_mentions(text, "WotLK")

    assert result == (
        "Use [The Unstoppable Force](https://wotlk.wowhead.com/item=12345) "
        "and [Thrall](https://wotlk.wowhead.com/npc=777) for this."
    )


async def test_rewrite_duplicates_resolve_once(stub_resolver) -> None:
    resolver, lookup = stub_resolver(THRALL)
    text = "{{Thrall}} meets {{Thrall}} who meets {{Thrall}}."

    result = await resolver.rewrite_mentions(text, "Classic")

    link = "[Thrall](https://classic.wowhead.com/npc=4949)"
    assert result == f"{link} meets {link} who meets {link}."
    assert lookup.calls == [("Thrall", "Classic")]


async def test_rewrite_strips_type_hint_even_on_fallback(stub_resolver) -> None:
    resolver, _ = stub_resolver(error="format")
    result = await resolver.rewrite_mentions("Learn {{spell:Shadow Mastery}}.", "Classic")
    assert result == "Learn [Shadow Mastery](https://classic.wowhead.com/search?q=Shadow%20Mastery)."


async def test_rewrite_variants_sharing_a_key_use_one_lookup(stub_resolver) -> None:
    resolver, lookup = stub_resolver(THRALL)
    result = await resolver.rewrite_mentions("{{Thrall}} and {{ thrall }}", "Classic")
    assert result == (
        "[Thrall](https://classic.wowhead.com/npc=4949) and "
        "[thrall](https://classic.wowhead.com/npc=4949)"
    )
    assert len(lookup.calls) == 1


async def test_rewrite_text_without_mentions_makes_no_lookups(stub_resolver) -> None:
    resolver, lookup = stub_resolver()
    assert await resolver.rewrite_mentions("Just lore.", "Retail") == "Just lore."
    assert lookup.calls == []


async def test_rewrite_distinct_mentions_run_concurrently(stub_resolver) -> None:
    resolver, lookup = stub_resolver({"A": [(1, "A", ITEM)], "B": [(2, "B", ITEM)]})
    lookup.gate = asyncio.Event()

    task = asyncio.create_task(resolver.rewrite_mentions("{{A}} {{B}}", "Retail"))
    await asyncio.sleep(0.01)
    # Both lookups started before either finished
    assert sorted(lookup.calls) == [("A", "Retail"), ("B", "Retail")]
    lookup.gate.set()
    assert await task == "[A](https://www.wowhead.com/item=1) [B](https://www.wowhead.com/item=2)"


async def test_concurrent_rewrites_share_in_flight_lookup(stub_resolver) -> None:
    resolver, lookup = stub_resolver(THRALL)
    lookup.gate = asyncio.Event()

    first = asyncio.create_task(resolver.rewrite_mentions("Ask {{Thrall}}.", "Classic"))
    second = asyncio.create_task(resolver.rewrite_mentions("{{thrall}} knows.", "Classic"))
    await asyncio.sleep(0.01)
    lookup.gate.set()

    assert await first == "Ask [Thrall](https://classic.wowhead.com/npc=4949)."
    assert await second == "[thrall](https://classic.wowhead.com/npc=4949) knows."
    assert len(lookup.calls) == 1


async def test_cancelled_rewrite_does_not_break_rewrite_waiting_on_same_key(
    stub_resolver,
) -> None:
    resolver, lookup = stub_resolver(THRALL)
    lookup.gate = asyncio.Event()

    owner = asyncio.create_task(resolver.rewrite_mentions("{{Thrall}}", "Classic"))
    await asyncio.sleep(0.01)
    waiter = asyncio.create_task(resolver.rewrite_mentions("Ask {{Thrall}}.", "Classic"))
    await asyncio.sleep(0.01)
    assert len(lookup.calls) == 1

    owner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await owner
    await asyncio.sleep(0.01)
    lookup.gate.set()

    assert await waiter == "Ask [Thrall](https://classic.wowhead.com/npc=4949)."
    # The waiter took over and ran its own lookup
    assert len(lookup.calls) == 2
    assert resolver.cache.stats()["inflight"] == 0


async def test_max_concurrent_lookups_bounds_fan_out(stub_resolver) -> None:
    resolver, lookup = stub_resolver(max_concurrent_lookups=2)
    lookup.gate = asyncio.Event()

    task = asyncio.create_task(resolver.rewrite_mentions("{{A}} {{B}} {{C}} {{D}}", "Retail"))
    await asyncio.sleep(0.01)
    assert len(lookup.calls) == 2
    lookup.gate.set()
    await task
    assert len(lookup.calls) == 4


async def test_rewrite_never_raises_on_internal_error(stub_resolver) -> None:
    resolver, _ = stub_resolver()
    with patch.object(resolver, "resolve_all", AsyncMock(side_effect=RuntimeError("boom"))):
        result = await resolver.rewrite_mentions("See {{Thrall}}.", "Retail")
    assert result == "See [Thrall](https://www.wowhead.com/search?q=Thrall)."


def test_from_config_builds_bounded_cache() -> None:
    config = {
        "service_domain": "example.org",
        "lookup_timeout": 3.0,
        "user_agent": "UA",
        "max_concurrent_lookups": 4,
        "cache_max_entries": 50,
        "cache_ttl": 0.0,
    }
    resolver = MentionResolver.from_config(config)
    assert resolver.service_domain == "example.org"
    stats = resolver.cache.stats()
    assert stats["max_entries"] == 50
    assert stats["ttl"] is None
