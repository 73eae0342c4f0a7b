import asyncio

import pytest

from wow_oracle import mcp_server
from wow_oracle.links import (
    LookupCandidate,
    LookupResult,
    MentionResolver,
    ResolutionCache,
    era_scope,
)


class StubLLM:
    """Deterministic LLM stand-in for tests.

    Provide a dict mapping stage name → list of responses (in call order).
    A response that is an Exception instance is raised instead of returned.
    """

    def __init__(self, responses: dict[str, list]) -> None:
        self._queues: dict[str, list] = {k: list(v) for k, v in responses.items()}
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, stage: str, prompt: str) -> str:
        self.calls.append((stage, prompt))
        queue = self._queues.get(stage)
        if not queue:
            raise AssertionError(
                f"StubLLM: unexpected call to stage={stage!r} "
                f"(no responses queued). calls so far: {self.calls}"
            )
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class StubLookup:
    """Lookup service stand-in: name → list of (id, name, type_code).

    error:  every search returns this failure kind ("transport" / "format").
    gate:   when set to an asyncio.Event, searches block until it is set.
    """

    service_domain = "wowhead.com"

    def __init__(
        self,
        responses: dict[str, list[tuple[int, str, int]]] | None = None,
        error: str | None = None,
    ) -> None:
        self.responses = responses or {}
        self.error = error
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple[str, str]] = []

    async def search(self, clean_name: str, era: str) -> LookupResult:
        self.calls.append((clean_name, era))
        if self.gate is not None:
            await self.gate.wait()
        if self.error:
            return LookupResult(scope=era_scope(era), error=self.error)
        rows = self.responses.get(clean_name, [])
        return LookupResult(
            scope=era_scope(era),
            candidates=[LookupCandidate(id=i, name=n, type=t) for i, n, t in rows],
        )


@pytest.fixture
def stub_llm():
    """Factory: stub_llm({"oracle": ["answer"]}) → StubLLM."""
    return StubLLM


@pytest.fixture
def stub_resolver():
    """Factory: stub_resolver({"Thrall": [(4949, "Thrall", 1)]}) → (resolver, lookup).

    error= is passed to StubLookup; other keyword arguments go to MentionResolver.
    """

    def _make(
        responses: dict[str, list[tuple[int, str, int]]] | None = None,
        error: str | None = None,
        **kwargs,
    ):
        lookup = StubLookup(responses, error=error)
        return MentionResolver(lookup, ResolutionCache(), **kwargs), lookup

    return _make


@pytest.fixture(autouse=True)
def reset_mcp_resolver():
    """Each test starts without a process-wide MCP resolver."""
    mcp_server._resolver = None
    yield
    mcp_server._resolver = None
