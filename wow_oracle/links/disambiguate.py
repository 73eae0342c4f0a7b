"""Pick one lookup candidate for a mention.

Forced type (type hint present): first candidate of that type, else nothing.
A wrong-type pick would be worse than a search link.

No hint: exact name matches (case-insensitive) ranked by TYPE_PRIORITY; with
no exact match, the service's own top-ranked result.
"""

from __future__ import annotations

from collections.abc import Sequence

from .lookup import LookupCandidate

# Wowhead type codes → URL slugs
TYPE_SLUGS: dict[int, str] = {
    1: "npc",
    2: "object",
    3: "item",
    5: "quest",
    6: "spell",
    10: "achievement",
}

# Items and spells are asked about far more often than NPCs or objects.
# Achievements are deliberately absent and rank with unmapped types.
TYPE_PRIORITY = ("item", "spell", "quest", "npc", "object")

DEFAULT_SLUG = "item"


def type_slug(candidate: LookupCandidate) -> str | None:
    return TYPE_SLUGS.get(candidate.type_code)


def _priority(candidate: LookupCandidate) -> int:
    slug = type_slug(candidate)
    if slug in TYPE_PRIORITY:
        return TYPE_PRIORITY.index(slug)
    return len(TYPE_PRIORITY)


def select_candidate(
    candidates: Sequence[LookupCandidate],
    clean_name: str,
    type_hint: str | None = None,
) -> LookupCandidate | None:
    """Return the best candidate, or None when nothing qualifies."""
    if not candidates:
        return None

    if type_hint:
        for candidate in candidates:
            if type_slug(candidate) == type_hint:
                return candidate
        return None

    wanted = clean_name.lower()
    exact = [c for c in candidates if c.name.lower() == wanted]
    if exact:
        # min() keeps the first of equal-priority matches, i.e. service order
        return min(exact, key=_priority)
    return candidates[0]


def canonical_url(scope: str, candidate: LookupCandidate, service_domain: str) -> str:
    """Direct entity link, e.g. https://wotlk.wowhead.com/item=12345."""
    slug = type_slug(candidate) or DEFAULT_SLUG
    return f"https://{scope}.{service_domain}/{slug}={candidate.id}"
