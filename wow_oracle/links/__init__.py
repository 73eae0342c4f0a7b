"""Mention resolution pipeline: {{mentions}} in LLM output → Wowhead links.

Steps for one rewrite_mentions(text, era) call:
  1. Scan — find {{...}} spans left to right (mentions.scan_mentions).
  2. Parse — split an optional type hint from the display name
     ({{spell:Shadow Mastery}} → "Shadow Mastery", hint "spell").
  3. Resolve — one task per distinct (era, hint, lowercased name) key,
     run concurrently through the shared ResolutionCache. A miss calls the
     Wowhead search-suggestion endpoint (lookup.LookupClient) and picks a
     candidate (disambiguate.select_candidate).
  4. Rewrite — replace every occurrence, duplicates included, with
     [clean name](url) once all keys are resolved.

Link formats (scope is the era subdomain: www, tbc, wotlk, classic):
  canonical  https://{scope}.wowhead.com/{type}={id}
  fallback   https://{scope}.wowhead.com/search?q={name}

Failures never propagate: lookup errors, unmatched names and unexpected
exceptions all end in the fallback search link.
"""

from .cache import CacheKey, Resolution, ResolutionCache  # noqa: F401
from .core import MentionResolver  # noqa: F401
from .disambiguate import (  # noqa: F401
    TYPE_PRIORITY,
    TYPE_SLUGS,
    canonical_url,
    select_candidate,
)
from .lookup import (  # noqa: F401
    ERA_SCOPES,
    LookupCandidate,
    LookupClient,
    LookupResult,
    era_scope,
    search_url,
)
from .mentions import (  # noqa: F401
    TYPE_TOKENS,
    Mention,
    ParsedMention,
    parse_mention,
    scan_mentions,
)
from .rewriter import apply_links  # noqa: F401
