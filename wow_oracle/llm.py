"""LLM client — HTTP connection to a completion backend.

The oracle injects an LLM callable matching the protocol:

    async def __call__(self, stage: str, prompt: str) -> str: ...

`stage` names the caller ("oracle", "verify", "suggestions"). HttpLLM only
uses it for logging.

    HttpLLM   — real HTTP client for KoboldCpp or OpenAI-compatible chat
                backends. Selected by provider_format.
    EchoLLM   — returns the prompt back unchanged. Useful for smoke-testing
                the routes without a running model.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str) -> str: ...


ProviderFormat = Literal["koboldcpp", "openai"]


class HttpLLM:
    """Async HTTP client for completion backends.

    Supported formats:
      "koboldcpp"  — POST /api/v1/generate        {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}
      "openai"     — POST /v1/chat/completions    {"model": ..., "messages": [...]}
                     Response: {"choices": [{"message": {"content": "..."}}]}

    Args:
        provider_url:    Base URL of the backend, e.g. "http://localhost:5001".
        api_key:         Bearer token, or empty string if not required.
        provider_format: Wire format to use. Defaults to "koboldcpp".
        model:           Model identifier, used only by the openai format.
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "koboldcpp",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> HttpLLM:
        return cls(
            provider_url=config["provider_url"],
            api_key=config.get("api_key", ""),
            provider_format=config.get("provider_format", "koboldcpp"),
            model=config.get("model", ""),
            timeout=config.get("llm_timeout", 120.0),
        )

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, prompt: str) -> tuple[str, dict]:
        if self._format == "openai":
            url = f"{self._base_url}/v1/chat/completions"
            body: dict = {"messages": [{"role": "user", "content": prompt}]}
            if self._model:
                body["model"] = self._model
            return url, body

        url = f"{self._base_url}/api/v1/generate"
        return url, {"prompt": prompt}

    def _parse_response(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise LLMError("Unexpected response format from LLM backend")

        if self._format == "openai":
            choices = data.get("choices")
            try:
                content = choices[0]["message"]["content"]
            except (TypeError, KeyError, IndexError):
                raise LLMError("Unexpected response format from OpenAI-compatible backend")
            return content or ""

        results = data.get("results")
        if not results or "text" not in results[0]:
            raise LLMError("Unexpected response format from KoboldCpp backend")
        return results[0]["text"]

    async def __call__(self, stage: str, prompt: str) -> str:
        url, body = self._build_request(prompt)
        logger.debug("llm call stage=%s url=%s prompt_len=%d", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM backend request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned invalid JSON") from e

        text = self._parse_response(data)
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


class EchoLLM:
    """Returns the prompt text as-is. No network calls."""

    async def __call__(self, stage: str, prompt: str) -> str:
        logger.debug("EchoLLM stage=%s prompt_len=%d", stage, len(prompt))
        return prompt


class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
