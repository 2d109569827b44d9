"""
Market Extremes - rolling distance-from-extreme metrics, market breadth and
regime signals over daily price bars.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .common.enums import Basis, BreadthMetric, Confidence, RegimeLabel, RejectionSeverity
from .common.ttl_cache import TTLCache
from .common.universes import UNIVERSES, Universe, list_universes, resolve_universe
from .data_pipeline import (
    AlignedUniverse,
    BulkFetcher,
    BulkFetchResult,
    DailyBar,
    PolygonBarsClient,
    align_bars_by_date,
)
from .engines import (
    BreadthEntry,
    BreadthSeries,
    RollingMetric,
    SignalSummary,
    build_heatmap,
    compute_breadth,
    compute_metrics,
    find_peak_day,
    find_top_peaks,
    find_window_around_peak,
    summarize,
)
from .services import BreadthReport, HeatmapReport, MarketExtremesService
from .settings import DEFAULT_THRESHOLDS, FetchSettings, MarketSettings, Thresholds, load_market_settings

__all__ = [
    "__version__",
    "AlignedUniverse",
    "Basis",
    "BreadthEntry",
    "BreadthMetric",
    "BreadthReport",
    "BreadthSeries",
    "BulkFetchResult",
    "BulkFetcher",
    "Confidence",
    "DEFAULT_THRESHOLDS",
    "DailyBar",
    "FetchSettings",
    "HeatmapReport",
    "MarketExtremesService",
    "MarketSettings",
    "PolygonBarsClient",
    "RegimeLabel",
    "RejectionSeverity",
    "RollingMetric",
    "SignalSummary",
    "TTLCache",
    "Thresholds",
    "UNIVERSES",
    "Universe",
    "align_bars_by_date",
    "build_heatmap",
    "compute_breadth",
    "compute_metrics",
    "find_peak_day",
    "find_top_peaks",
    "find_window_around_peak",
    "list_universes",
    "load_market_settings",
    "resolve_universe",
    "summarize",
]
