from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from market_extremes.data_pipeline.errors import (
    ConfigurationError,
    FetchError,
    NoDataError,
    RateLimitedError,
)
from market_extremes.data_pipeline.logging_utils import log_event
from market_extremes.data_pipeline.normalize import bars_from_aggregates
from market_extremes.data_pipeline.types import BarSequence
from market_extremes.settings.settings import MarketSettings

try:
    import httpx
except Exception as exc:  # pragma: no cover - environment dependency path
    raise ImportError("httpx is required for the daily bars client") from exc

LOGGER = logging.getLogger(__name__)

# Index tickers use the provider's "I:" namespace.
TICKER_MAPPING: dict[str, str] = {
    "IXIC": "I:COMP",
    "DJI": "I:DJI",
    "SPX": "I:SPX",
    "NDX": "I:NDX",
    "RUT": "I:RUT",
    "SOX": "I:SOX",
}


def normalize_symbol(symbol: str) -> str:
    cleaned = str(symbol or "").strip().upper()
    if cleaned.startswith("I:"):
        return cleaned
    return TICKER_MAPPING.get(cleaned, cleaned)


class PolygonBarsClient:
    """Daily aggregate bars from the Polygon/Massive REST API."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.polygon.io",
        timeout_seconds: float = 20.0,
        http_client: httpx.Client | None = None,
        today: date | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = http_client
        self._today = today
        self.logger = logger or LOGGER

    @classmethod
    def from_settings(cls, settings: MarketSettings, **kwargs) -> "PolygonBarsClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout_seconds=settings.request_timeout_seconds,
            **kwargs,
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "PolygonBarsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __call__(self, symbol: str, days: int) -> BarSequence:
        return self.fetch_daily_bars(symbol, days)

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout_seconds, follow_redirects=True)
        return self._client

    def fetch_daily_bars(self, symbol: str, days: int = 252) -> BarSequence:
        """Return up to ``days`` most recent sessions in ascending date order."""
        if not self.api_key:
            raise ConfigurationError("MASSIVE_API_KEY is not configured")

        ticker = normalize_symbol(symbol)
        to_date = self._today or datetime.now(timezone.utc).date()
        # Calendar span wide enough to cover weekends and holidays.
        from_date = to_date - timedelta(days=int(days * 1.5))
        url = f"{self.base_url}/v2/aggs/ticker/{ticker}/range/1/day/{from_date.isoformat()}/{to_date.isoformat()}"
        params = {"adjusted": "true", "sort": "desc", "limit": 50000, "apiKey": self.api_key}

        try:
            response = self._http().get(url, params=params)
        except httpx.HTTPError as exc:
            log_event(self.logger, "daily_bars_transport_error", symbol=symbol, error=str(exc))
            raise FetchError(f"Failed to fetch data for {symbol}: {exc}", symbol=symbol) from exc

        if response.status_code == 429:
            log_event(self.logger, "daily_bars_rate_limited", symbol=symbol)
            raise RateLimitedError(
                f"Failed to fetch data for {symbol}: HTTP 429 rate limited",
                status_code=429,
                symbol=symbol,
            )
        if response.status_code >= 400:
            log_event(
                self.logger,
                "daily_bars_http_error",
                symbol=symbol,
                status_code=response.status_code,
                response_snippet=response.text[:500],
            )
            raise FetchError(
                f"Failed to fetch data for {symbol}: HTTP {response.status_code}",
                status_code=response.status_code,
                symbol=symbol,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"Failed to decode JSON for {symbol}: {exc}", symbol=symbol) from exc

        results = payload.get("results") if isinstance(payload, dict) else None
        if not results:
            raise NoDataError(f"No data returned for {symbol}")
        return bars_from_aggregates(results, days=days)
