"""
Tests for configuration management in `sysdiag/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level and format coercion to the expected Literals
- Cache TTL, collection and triage overrides
- get_config cache behavior
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from sysdiag.config import (
    AppConfig,
    CacheConfig,
    CollectionConfig,
    LoggingConfig,
    TriageConfig,
    get_config,
    load_config_from_env,
)

ENV_VARS = (
    "ENVIRONMENT",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "ALERTS_CACHE_TTL_SECONDS",
    "THERMAL_CACHE_TTL_SECONDS",
    "CONNECTIVITY_CACHE_TTL_SECONDS",
    "COLLECTOR_TIMEOUT_SECONDS",
    "COMMAND_TIMEOUT_SECONDS",
    "DISK_PATH",
    "CONNECTIVITY_HOST",
    "CONNECTIVITY_PORT",
    "MAX_NEXT_STEPS",
)


@pytest.fixture(autouse=True)
def clear_config_cache() -> Iterator[None]:
    """Ensure get_config cache is cleared before and after each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_load_config_production_defaults() -> None:
    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.logging.format == "json"
    assert config.cache.alerts_ttl_seconds == 3.0
    assert config.cache.thermal_ttl_seconds == 10.0
    assert config.cache.connectivity_ttl_seconds == 30.0
    assert config.collection.collector_timeout_seconds == 5.0
    assert config.collection.command_timeout_seconds == 4.0
    assert config.collection.connectivity_host == "8.8.8.8"
    assert config.collection.connectivity_port == 53
    assert config.triage.max_next_steps == 2


def test_load_config_dev_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "dev")

    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"


def test_explicit_log_format_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("LOG_FORMAT", "json")

    assert load_config_from_env().logging.format == "json"


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "unknown")
    config = load_config_from_env()
    assert config.logging.level == "INFO"

    # Known level should pass through
    monkeypatch.setenv("LOG_LEVEL", "error")
    config = load_config_from_env()
    assert config.logging.level == "ERROR"


def test_overrides_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALERTS_CACHE_TTL_SECONDS", "1.5")
    monkeypatch.setenv("COLLECTOR_TIMEOUT_SECONDS", "2")
    monkeypatch.setenv("COMMAND_TIMEOUT_SECONDS", "1.5")
    monkeypatch.setenv("DISK_PATH", "/srv")
    monkeypatch.setenv("CONNECTIVITY_HOST", "1.1.1.1")
    monkeypatch.setenv("CONNECTIVITY_PORT", "443")
    monkeypatch.setenv("MAX_NEXT_STEPS", "3")

    config = load_config_from_env()

    assert config.cache.alerts_ttl_seconds == 1.5
    assert config.collection.collector_timeout_seconds == 2.0
    assert config.collection.command_timeout_seconds == 1.5
    assert config.collection.disk_path == "/srv"
    assert config.collection.connectivity_host == "1.1.1.1"
    assert config.collection.connectivity_port == 443
    assert config.triage.max_next_steps == 3


def test_invalid_values_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALERTS_CACHE_TTL_SECONDS", "0")

    with pytest.raises(ValueError):
        load_config_from_env()


def test_sub_config_bounds() -> None:
    with pytest.raises(ValueError):
        CacheConfig(thermal_ttl_seconds=-1)
    with pytest.raises(ValueError):
        CollectionConfig(connectivity_port=70000)
    with pytest.raises(ValueError):
        TriageConfig(max_next_steps=0)


def test_command_timeout_cannot_outlast_collector(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(ValueError, match="must not exceed"):
        CollectionConfig(collector_timeout_seconds=5.0, command_timeout_seconds=10.0)

    monkeypatch.setenv("COLLECTOR_TIMEOUT_SECONDS", "2")
    with pytest.raises(ValueError):
        load_config_from_env()


def test_get_config_cache() -> None:
    # First call populates cache
    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(environment="production", debug=True, logging=LoggingConfig())
