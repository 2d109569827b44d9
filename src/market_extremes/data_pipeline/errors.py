from __future__ import annotations


class MarketDataError(Exception):
    """Base error for the market data fetch layer."""


class FetchError(MarketDataError):
    """Raised when a remote fetch operation fails."""

    def __init__(self, message: str, *, status_code: int | None = None, symbol: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.symbol = symbol


class RateLimitedError(FetchError):
    """Raised when the upstream provider answers with HTTP 429."""


class NoDataError(MarketDataError):
    """Raised when a fetch or a whole universe yields no usable bars."""


class ConfigurationError(MarketDataError):
    """Raised when the upstream client is missing required configuration."""
