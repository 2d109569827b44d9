from __future__ import annotations

from market_extremes.engines.breadth import (
    breadth_to_frame,
    calculate_average_breadth,
    compute_breadth,
    get_breadth_on_date,
    get_symbols_at_extreme,
)
from market_extremes.engines.errors import (
    EngineDataError,
    EngineError,
    EngineValidationError,
)
from market_extremes.engines.extremes import (
    analyze_breadth_extremes,
    analyze_washed_out,
    find_peak_day,
    find_top_peaks,
    find_window_around_peak,
)
from market_extremes.engines.heatmap import HEATMAP_FIELDS, HeatmapData, build_heatmap
from market_extremes.engines.rolling_metrics import compute_days_since_series, compute_metrics
from market_extremes.engines.signals import (
    DIVERGENCE_RULES,
    BreadthStats,
    ConfirmationSignal,
    DivergenceSignal,
    RegimeInfo,
    RejectionSignal,
    SignalSummary,
    compute_breadth_stats,
    compute_recent_rejection_rate,
    compute_regime,
    detect_confirmations,
    detect_divergences,
    detect_rejections,
    extract_latest_row,
    get_all_recent_rejections,
    summarize,
)
from market_extremes.engines.types import (
    BreadthEntry,
    BreadthExtremes,
    BreadthSeries,
    PeakResult,
    RollingMetric,
    WashedOutAnalysis,
    WindowResult,
)

__all__ = [
    "DIVERGENCE_RULES",
    "HEATMAP_FIELDS",
    "BreadthEntry",
    "BreadthExtremes",
    "BreadthSeries",
    "BreadthStats",
    "ConfirmationSignal",
    "DivergenceSignal",
    "EngineDataError",
    "EngineError",
    "EngineValidationError",
    "HeatmapData",
    "PeakResult",
    "RegimeInfo",
    "RejectionSignal",
    "RollingMetric",
    "SignalSummary",
    "WashedOutAnalysis",
    "WindowResult",
    "analyze_breadth_extremes",
    "analyze_washed_out",
    "breadth_to_frame",
    "build_heatmap",
    "calculate_average_breadth",
    "compute_breadth",
    "compute_breadth_stats",
    "compute_days_since_series",
    "compute_metrics",
    "compute_recent_rejection_rate",
    "compute_regime",
    "detect_confirmations",
    "detect_divergences",
    "detect_rejections",
    "extract_latest_row",
    "find_peak_day",
    "find_top_peaks",
    "find_window_around_peak",
    "get_all_recent_rejections",
    "get_breadth_on_date",
    "get_symbols_at_extreme",
    "summarize",
]
