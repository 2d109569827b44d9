"""Peak days, peak-centred windows and top-N readings over a breadth series."""

from __future__ import annotations

from collections.abc import Sequence

from market_extremes.common.enums import BreadthMetric
from market_extremes.engines.breadth import series_entries
from market_extremes.engines.errors import EngineValidationError, require_positive_int
from market_extremes.engines.types import (
    BreadthEntry,
    BreadthExtremes,
    BreadthSeries,
    PeakResult,
    WashedOutAnalysis,
    WindowResult,
)
from market_extremes.settings.settings import DEFAULT_THRESHOLDS

SeriesLike = BreadthSeries | Sequence[BreadthEntry]


def _resolve_metric(metric: BreadthMetric | str) -> BreadthMetric:
    resolved = BreadthMetric.coerce(metric)
    if resolved is None:
        raise EngineValidationError(f"metric must be 'new_lows' or 'new_highs', got {metric!r}")
    return resolved


def _value(entry: BreadthEntry, metric: BreadthMetric) -> float:
    return entry.pct_at_high if metric is BreadthMetric.NEW_HIGHS else entry.pct_at_low


def _to_peak(entry: BreadthEntry, metric: BreadthMetric) -> PeakResult:
    if metric is BreadthMetric.NEW_HIGHS:
        return PeakResult(
            date=entry.date,
            value=entry.pct_at_high,
            count=entry.count_at_high,
            count_valid=entry.count_valid,
            symbols=entry.high_symbols,
        )
    return PeakResult(
        date=entry.date,
        value=entry.pct_at_low,
        count=entry.count_at_low,
        count_valid=entry.count_valid,
        symbols=entry.low_symbols,
    )


def _peak_index(entries: Sequence[BreadthEntry], metric: BreadthMetric) -> int | None:
    peak_index: int | None = None
    peak_value = float("-inf")
    for idx, entry in enumerate(entries):
        value = _value(entry, metric)
        # Strict > keeps the first occurrence on ties.
        if value > peak_value:
            peak_value = value
            peak_index = idx
    return peak_index


def find_peak_day(series: SeriesLike, metric: BreadthMetric | str = BreadthMetric.NEW_LOWS) -> PeakResult | None:
    """Day with the highest reading for ``metric``; ``None`` for an empty series."""
    resolved = _resolve_metric(metric)
    entries = series_entries(series)
    index = _peak_index(entries, resolved)
    if index is None:
        return None
    return _to_peak(entries[index], resolved)


def find_window_around_peak(
    series: SeriesLike,
    metric: BreadthMetric | str = BreadthMetric.NEW_LOWS,
    window_days: int = 100,
) -> WindowResult | None:
    """A ``window_days``-wide slice centred on the peak.

    Near either end of the series the window slides inward so it keeps its
    full width. A series shorter than ``window_days`` yields a window over
    the whole series.
    """
    window_days = require_positive_int("window_days", window_days)
    resolved = _resolve_metric(metric)
    entries = series_entries(series)
    peak_index = _peak_index(entries, resolved)
    if peak_index is None:
        return None

    total = len(entries)
    start = peak_index - window_days // 2
    start = max(0, min(start, total - window_days))
    end = min(total, start + window_days)
    window = entries[start:end]

    values = [_value(entry, resolved) for entry in window]
    peak = entries[peak_index]
    return WindowResult(
        window_start=window[0].date,
        window_end=window[-1].date,
        peak_date=peak.date,
        peak_value=_value(peak, resolved),
        avg_value=float(sum(values) / len(values)) if values else 0.0,
        window_days=window_days,
        trading_days=len(window),
    )


def find_top_peaks(
    series: SeriesLike,
    metric: BreadthMetric | str = BreadthMetric.NEW_LOWS,
    top_n: int = 5,
) -> list[PeakResult]:
    """The ``top_n`` highest readings, ties in chronological order.

    Adjacent days are not de-duplicated, so a multi-day plateau can fill
    several slots.
    """
    resolved = _resolve_metric(metric)
    if isinstance(top_n, bool) or not isinstance(top_n, int) or top_n < 0:
        raise EngineValidationError(f"top_n must be a non-negative integer, got {top_n!r}")
    peaks = [_to_peak(entry, resolved) for entry in series_entries(series)]
    peaks.sort(key=lambda peak: peak.value, reverse=True)
    return peaks[:top_n]


def analyze_washed_out(
    series: SeriesLike,
    threshold: float = DEFAULT_THRESHOLDS.washed_out_pct,
) -> WashedOutAnalysis:
    """Whether the latest new-low reading sits at or above ``threshold`` percent."""
    entries = series_entries(series)
    if not entries:
        return WashedOutAnalysis(
            is_washed_out=False,
            threshold=threshold,
            current_value=0.0,
            days_above_threshold=0,
            peak_value=0.0,
            peak_date=None,
        )

    peak = find_peak_day(entries, BreadthMetric.NEW_LOWS)
    current_value = entries[-1].pct_at_low
    return WashedOutAnalysis(
        is_washed_out=current_value >= threshold,
        threshold=threshold,
        current_value=current_value,
        days_above_threshold=sum(1 for entry in entries if entry.pct_at_low >= threshold),
        peak_value=peak.value if peak is not None else 0.0,
        peak_date=peak.date if peak is not None else None,
    )


def analyze_breadth_extremes(
    series: SeriesLike,
    metric: BreadthMetric | str = BreadthMetric.NEW_LOWS,
    window_days: int = 100,
) -> BreadthExtremes | None:
    peak = find_peak_day(series, metric)
    if peak is None:
        return None
    window = find_window_around_peak(series, metric, window_days)
    if window is None:
        return None
    return BreadthExtremes(peak=peak, window=window, series=list(series_entries(series)))
