"""Tests for load_config and public_config."""

import pytest

from wow_oracle.config import ConfigError, load_config, public_config


def test_defaults_when_env_empty():
    config = load_config({})
    assert config["provider_url"] == "http://localhost:5001"
    assert config["provider_format"] == "koboldcpp"
    assert config["service_domain"] == "wowhead.com"
    assert config["max_concurrent_lookups"] == 8
    assert config["cache_max_entries"] == 10000
    assert config["cache_ttl"] == 0.0


def test_env_overrides_are_coerced():
    config = load_config({
        "LLM_PROVIDER_URL": "http://gpu:5001",
        "LLM_PROVIDER_FORMAT": "openai",
        "LOOKUP_TIMEOUT": "2.5",
        "LOOKUP_MAX_CONCURRENCY": "3",
        "LINK_CACHE_TTL": "3600",
    })
    assert config["provider_url"] == "http://gpu:5001"
    assert config["provider_format"] == "openai"
    assert config["lookup_timeout"] == 2.5
    assert config["max_concurrent_lookups"] == 3
    assert config["cache_ttl"] == 3600.0


def test_empty_env_value_keeps_default():
    assert load_config({"LOOKUP_SERVICE_DOMAIN": ""})["service_domain"] == "wowhead.com"


def test_non_numeric_override_raises():
    with pytest.raises(ConfigError, match="LINK_CACHE_MAX_ENTRIES"):
        load_config({"LINK_CACHE_MAX_ENTRIES": "lots"})


def test_unknown_provider_format_raises():
    with pytest.raises(ConfigError, match="LLM_PROVIDER_FORMAT"):
        load_config({"LLM_PROVIDER_FORMAT": "gemini"})


def test_public_config_masks_api_key():
    config = load_config({"LLM_API_KEY": "secret"})
    shown = public_config(config)
    assert shown["api_key"] == "***"
    assert config["api_key"] == "secret"


def test_public_config_leaves_empty_key():
    assert public_config(load_config({}))["api_key"] == ""
