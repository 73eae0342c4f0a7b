"""Wowhead search-suggestion client.

One GET per lookup:

    https://{scope}.wowhead.com/search/suggestions-template?q=<name>

Response: {"results": [{"id": 19019, "name": "...", "type": 3, ...}, ...]}

The body is validated against LookupResponse. Transport failures (network,
timeout, non-2xx) and format failures (bad JSON, schema violation) are caught
here and come back as an empty candidate list with LookupResult.error set.
Nothing raised by httpx or pydantic leaves this module.
"""

from __future__ import annotations

import logging
from typing import Literal
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_DOMAIN = "wowhead.com"
DEFAULT_USER_AGENT = "AzerothOracle/0.1 (+mention resolver)"

ERA_SCOPES: dict[str, str] = {
    "Retail": "www",
    "TBC": "tbc",
    "WotLK": "wotlk",
    "Classic": "classic",
    "Vanilla": "classic",
    "Anniversary": "classic",
}
DEFAULT_SCOPE = "classic"

LookupFailure = Literal["transport", "format"]


def era_scope(era: str) -> str:
    """Map an era token to its Wowhead subdomain. Unknown eras use Classic."""
    return ERA_SCOPES.get(era, DEFAULT_SCOPE)


def encode_query(value: str) -> str:
    """Percent-encode like JavaScript's encodeURIComponent (space → %20)."""
    return quote(value, safe="!~*'()")


def search_url(scope: str, name: str, service_domain: str = DEFAULT_SERVICE_DOMAIN) -> str:
    """Degraded link: the site's search page for name."""
    return f"https://{scope}.{service_domain}/search?q={encode_query(name)}"


# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------

class LookupCandidate(BaseModel):
    """One ranked search result."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    type_code: int = Field(alias="type")


class LookupResponse(BaseModel):
    results: list[LookupCandidate]


class LookupResult(BaseModel):
    scope: str
    candidates: list[LookupCandidate] = Field(default_factory=list)
    error: LookupFailure | None = None


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class LookupClient:
    """Async client for the era-scoped search-suggestion endpoint.

    Args:
        service_domain: Domain under which era subdomains live.
        timeout:        Per-request HTTP timeout in seconds.
        user_agent:     Client identifier sent with every request.
    """

    def __init__(
        self,
        service_domain: str = DEFAULT_SERVICE_DOMAIN,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.service_domain = service_domain
        self._timeout = timeout
        self._user_agent = user_agent

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "User-Agent": self._user_agent}

    def suggestions_url(self, scope: str, name: str) -> str:
        return (
            f"https://{scope}.{self.service_domain}"
            f"/search/suggestions-template?q={encode_query(name)}"
        )

    async def search(self, clean_name: str, era: str) -> LookupResult:
        scope = era_scope(era)
        url = self.suggestions_url(scope, clean_name)
        logger.debug("lookup era=%s url=%s", era, url)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url, headers=self._headers())
                resp.raise_for_status()
        except httpx.TimeoutException:
            logger.warning("lookup timed out after %ss for %r", self._timeout, clean_name)
            return LookupResult(scope=scope, error="transport")
        except httpx.HTTPStatusError as e:
            logger.warning(
                "lookup returned HTTP %d for %r", e.response.status_code, clean_name
            )
            return LookupResult(scope=scope, error="transport")
        except httpx.HTTPError as e:
            logger.warning("lookup failed for %r: %s", clean_name, e)
            return LookupResult(scope=scope, error="transport")

        try:
            parsed = LookupResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.warning("lookup response for %r is malformed: %s", clean_name, e)
            return LookupResult(scope=scope, error="format")

        return LookupResult(scope=scope, candidates=parsed.results)
