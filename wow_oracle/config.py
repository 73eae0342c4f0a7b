"""App configuration: defaults merged with environment overrides.

Environment variables (usually from .env, loaded by create_app):

  LLM_PROVIDER_URL        text/chat completion backend base URL
  LLM_API_KEY             bearer token for the backend (optional)
  LLM_PROVIDER_FORMAT     "koboldcpp" or "openai"
  LLM_MODEL               model name, openai format only
  LLM_TIMEOUT             seconds
  LOOKUP_SERVICE_DOMAIN   domain holding the era subdomains
  LOOKUP_TIMEOUT          seconds per search-suggestion request
  LOOKUP_USER_AGENT       client identifier sent to the lookup service
  LOOKUP_MAX_CONCURRENCY  simultaneous outbound lookups
  LINK_CACHE_MAX_ENTRIES  resolution cache size cap, 0 = unbounded
  LINK_CACHE_TTL          resolution cache entry lifetime in seconds, 0 = forever
"""

import os
from collections.abc import Mapping
from typing import Any

from wow_oracle.links.lookup import DEFAULT_SERVICE_DOMAIN, DEFAULT_USER_AGENT

_CONFIG_DEFAULTS: dict[str, Any] = {
    "provider_url": "http://localhost:5001",
    "api_key": "",
    "provider_format": "koboldcpp",
    "model": "",
    "llm_timeout": 120.0,
    "service_domain": DEFAULT_SERVICE_DOMAIN,
    "lookup_timeout": 10.0,
    "user_agent": DEFAULT_USER_AGENT,
    "max_concurrent_lookups": 8,
    "cache_max_entries": 10000,
    "cache_ttl": 0.0,
}

_ENV_KEYS: dict[str, str] = {
    "provider_url": "LLM_PROVIDER_URL",
    "api_key": "LLM_API_KEY",
    "provider_format": "LLM_PROVIDER_FORMAT",
    "model": "LLM_MODEL",
    "llm_timeout": "LLM_TIMEOUT",
    "service_domain": "LOOKUP_SERVICE_DOMAIN",
    "lookup_timeout": "LOOKUP_TIMEOUT",
    "user_agent": "LOOKUP_USER_AGENT",
    "max_concurrent_lookups": "LOOKUP_MAX_CONCURRENCY",
    "cache_max_entries": "LINK_CACHE_MAX_ENTRIES",
    "cache_ttl": "LINK_CACHE_TTL",
}

PROVIDER_FORMATS = ("koboldcpp", "openai")


class ConfigError(ValueError):
    """Raised when an environment override cannot be used."""


def load_config(env: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return defaults merged with any overrides found in env (default: os.environ)."""
    if env is None:
        env = os.environ
    config = dict(_CONFIG_DEFAULTS)
    for key, var in _ENV_KEYS.items():
        raw = env.get(var)
        if raw is None or raw == "":
            continue
        default = _CONFIG_DEFAULTS[key]
        try:
            if isinstance(default, int):
                config[key] = int(raw)
            elif isinstance(default, float):
                config[key] = float(raw)
            else:
                config[key] = raw
        except ValueError:
            raise ConfigError(f"{var} must be a number, got {raw!r}")

    if config["provider_format"] not in PROVIDER_FORMATS:
        raise ConfigError(
            f"LLM_PROVIDER_FORMAT must be one of {', '.join(PROVIDER_FORMATS)}"
        )
    return config


def public_config(config: dict[str, Any]) -> dict[str, Any]:
    """Config safe to return from the API: api_key masked."""
    shown = dict(config)
    if shown.get("api_key"):
        shown["api_key"] = "***"
    return shown
