"""
Market data acquisition: upstream client, bulk fetch orchestration and
multi-symbol date alignment.
"""

from __future__ import annotations

from .align import AlignedUniverse, align_bars_by_date
from .client import PolygonBarsClient, normalize_symbol
from .errors import (
    ConfigurationError,
    FetchError,
    MarketDataError,
    NoDataError,
    RateLimitedError,
)
from .fetcher import BulkFetcher, classify_fetch_error, is_rate_limit_error
from .normalize import bars_from_aggregates, bars_to_frame, frame_to_bars
from .types import (
    BarSequence,
    BulkFetchResult,
    DailyBar,
    FetchProgress,
    SymbolFetchOutcome,
)

__all__ = [
    "AlignedUniverse",
    "BarSequence",
    "BulkFetchResult",
    "BulkFetcher",
    "ConfigurationError",
    "DailyBar",
    "FetchError",
    "FetchProgress",
    "MarketDataError",
    "NoDataError",
    "PolygonBarsClient",
    "RateLimitedError",
    "SymbolFetchOutcome",
    "align_bars_by_date",
    "bars_from_aggregates",
    "bars_to_frame",
    "classify_fetch_error",
    "frame_to_bars",
    "is_rate_limit_error",
    "normalize_symbol",
]
