"""Unit tests for environment-driven configuration."""

from __future__ import annotations

from market_extremes.settings import (
    DEFAULT_THRESHOLDS,
    FetchSettings,
    MarketSettings,
    load_market_settings,
    parse_env_bool,
    parse_env_float,
    parse_env_int,
    parse_env_list,
)
from market_extremes.settings.settings import DEFAULT_BASE_URL, FALLBACK_BASE_URL


def test_env_parsers_fall_back_and_clamp() -> None:
    env = {"FLAG": "yes", "COUNT": "500", "BAD": "abc", "RATIO": "-1", "LIST": "a, b,,c"}

    assert parse_env_bool("FLAG", environ=env) is True
    assert parse_env_bool("MISSING", True, environ=env) is True
    assert parse_env_int("COUNT", 5, 1, 50, environ=env) == 50
    assert parse_env_int("BAD", 5, 1, 50, environ=env) == 5
    assert parse_env_float("RATIO", 0.5, 0.0, 1.0, environ=env) == 0.0
    assert parse_env_list("LIST", environ=env) == ["a", "b", "c"]


def test_fetch_settings_defaults() -> None:
    settings = FetchSettings.from_env(environ={})

    assert settings == FetchSettings()
    assert settings.batch_size == 5
    assert settings.retry_attempts == 2
    assert settings.retry_delay_seconds == 0.5


def test_fetch_settings_from_env() -> None:
    settings = FetchSettings.from_env(
        environ={
            "MARKET_EXTREMES_FETCH_BATCH_SIZE": "8",
            "MARKET_EXTREMES_FETCH_RETRIES": "4",
            "MARKET_EXTREMES_CACHE_TTL_SECONDS": "30",
        }
    )

    assert settings.batch_size == 8
    assert settings.retry_attempts == 4
    assert settings.cache_ttl_seconds == 30.0


def test_market_settings_without_key() -> None:
    settings = load_market_settings(environ={})

    assert settings.has_api_key is False
    assert settings.base_url == FALLBACK_BASE_URL
    assert settings.environment == "development"
    assert settings.log_level == "INFO"
    assert settings.log_file is None


def test_polygon_key_selects_polygon_host() -> None:
    settings = MarketSettings.from_env(environ={"POLYGON_API_KEY": "pk", "MARKET_EXTREMES_LOG_LEVEL": "debug"})

    assert settings.api_key == "pk"
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.log_level == "DEBUG"


def test_massive_key_and_base_url_override() -> None:
    settings = MarketSettings.from_env(
        environ={
            "MASSIVE_API_KEY": "mk",
            "MARKET_EXTREMES_BASE_URL": "https://example.test/",
            "MARKET_EXTREMES_LOG_JSON": "true",
        }
    )

    assert settings.api_key == "mk"
    assert settings.base_url == "https://example.test"
    assert settings.log_json is True


def test_default_thresholds() -> None:
    assert DEFAULT_THRESHOLDS.hot_days == 3
    assert DEFAULT_THRESHOLDS.cold_days == 15
    assert DEFAULT_THRESHOLDS.regime_majority == 0.6
    assert DEFAULT_THRESHOLDS.alignment_coverage == 0.5
