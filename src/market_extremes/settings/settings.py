"""Runtime configuration for the extremes engine and its fetch layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .environment import parse_env_bool, parse_env_float, parse_env_int, parse_env_str

DEFAULT_BASE_URL = "https://api.polygon.io"
FALLBACK_BASE_URL = "https://api.massive.com"


@dataclass(frozen=True)
class Thresholds:
    """Every tunable cut-off used by alignment, breadth and signal derivation."""

    # Coverage gates
    alignment_coverage: float = 0.5      # symbol kept when present on > 50% of axis dates
    breadth_window_coverage: float = 0.5  # symbol valid on a date when >= 50% of window present

    # Trader breadth buckets (days since high, close basis)
    hot_days: int = 3
    cold_days: int = 15

    # Regime
    regime_majority: float = 0.6
    high_confidence_ratio: float = 0.8

    # Rejection severity (delta = close days - intraday days)
    rejection_mild: int = 2
    rejection_notable: int = 5
    recent_rows: int = 10

    # Breadth extremes
    washed_out_pct: float = 20.0
    max_divergences: int = 3


DEFAULT_THRESHOLDS = Thresholds()


@dataclass(frozen=True)
class FetchSettings:
    """Bulk fetch pacing against the upstream provider."""

    batch_size: int = 5
    retry_attempts: int = 2
    retry_delay_seconds: float = 0.5
    batch_delay_seconds: float = 0.1
    cache_ttl_seconds: float = 300.0
    cache_max_entries: int = 512

    @classmethod
    def from_env(cls, *, environ: Mapping[str, str] | None = None) -> "FetchSettings":
        return cls(
            batch_size=parse_env_int("MARKET_EXTREMES_FETCH_BATCH_SIZE", 5, 1, 50, environ=environ),
            retry_attempts=parse_env_int("MARKET_EXTREMES_FETCH_RETRIES", 2, 0, 10, environ=environ),
            retry_delay_seconds=parse_env_float(
                "MARKET_EXTREMES_FETCH_RETRY_DELAY_SECONDS",
                0.5,
                0.0,
                60.0,
                environ=environ,
            ),
            batch_delay_seconds=parse_env_float(
                "MARKET_EXTREMES_FETCH_BATCH_DELAY_SECONDS",
                0.1,
                0.0,
                60.0,
                environ=environ,
            ),
            cache_ttl_seconds=parse_env_float(
                "MARKET_EXTREMES_CACHE_TTL_SECONDS",
                300.0,
                0.0,
                86_400.0,
                environ=environ,
            ),
            cache_max_entries=parse_env_int(
                "MARKET_EXTREMES_CACHE_MAX_ENTRIES",
                512,
                1,
                100_000,
                environ=environ,
            ),
        )


@dataclass(frozen=True)
class MarketSettings:
    environment: str
    api_key: str | None
    base_url: str
    request_timeout_seconds: int
    log_level: str
    log_json: bool
    log_file: str | None
    fetch: FetchSettings

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls, *, environ: Mapping[str, str] | None = None) -> "MarketSettings":
        massive_key = parse_env_str("MASSIVE_API_KEY", "", environ=environ)
        polygon_key = parse_env_str("POLYGON_API_KEY", "", environ=environ)
        # Polygon keys go to the Polygon host, Massive keys to the Massive host.
        default_url = DEFAULT_BASE_URL if polygon_key else FALLBACK_BASE_URL
        base_url = parse_env_str("MARKET_EXTREMES_BASE_URL", default_url, environ=environ)
        log_file = parse_env_str("MARKET_EXTREMES_LOG_FILE", "", environ=environ)

        return cls(
            environment=parse_env_str(
                "MARKET_EXTREMES_ENV",
                parse_env_str("ENVIRONMENT", "development", environ=environ),
                environ=environ,
            ).lower(),
            api_key=(massive_key or polygon_key) or None,
            base_url=base_url.rstrip("/"),
            request_timeout_seconds=parse_env_int(
                "MARKET_EXTREMES_REQUEST_TIMEOUT_SECONDS",
                20,
                1,
                300,
                environ=environ,
            ),
            log_level=parse_env_str("MARKET_EXTREMES_LOG_LEVEL", "INFO", environ=environ).upper(),
            log_json=parse_env_bool("MARKET_EXTREMES_LOG_JSON", False, environ=environ),
            log_file=log_file or None,
            fetch=FetchSettings.from_env(environ=environ),
        )


def load_market_settings(*, environ: Mapping[str, str] | None = None) -> MarketSettings:
    return MarketSettings.from_env(environ=environ)
