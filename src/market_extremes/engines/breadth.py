"""
Rolling breadth: share of a universe printing new lows/highs each day.

For each axis date ``t`` with at least ``lookback_days`` prior dates:

    new low  : close(t) <= min(close over the previous lookback_days dates)
    new high : close(t) >= max(close over the previous lookback_days dates)

Ties with the prior extreme count as new extremes. A symbol only counts
toward ``count_valid`` on dates where it has a bar and at least half of the
prior window populated.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

import numpy as np
import pandas as pd

from market_extremes.common.enums import BreadthMetric
from market_extremes.data_pipeline.align import AlignedUniverse
from market_extremes.engines.errors import EngineValidationError, require_positive_int
from market_extremes.engines.types import BreadthEntry, BreadthSeries
from market_extremes.settings.settings import DEFAULT_THRESHOLDS

logger = logging.getLogger(__name__)


def compute_breadth(
    aligned: AlignedUniverse,
    lookback_days: int = 100,
    *,
    window_coverage: float = DEFAULT_THRESHOLDS.breadth_window_coverage,
) -> BreadthSeries:
    """Compute the breadth series over an aligned universe.

    The output is shorter than the axis by ``lookback_days`` entries.
    """
    lookback_days = require_positive_int("lookback_days", lookback_days)
    symbols = list(aligned.valid_symbols) or list(aligned.bars_by_symbol)
    if not symbols:
        raise EngineValidationError("Breadth requires at least one aligned symbol")

    closes: dict[str, np.ndarray] = {}
    present: dict[str, np.ndarray] = {}
    for symbol in symbols:
        row = aligned.bars_by_symbol[symbol]
        closes[symbol] = np.array([np.nan if bar is None else bar.close for bar in row], dtype=float)
        present[symbol] = np.array([bar is not None for bar in row], dtype=bool)

    min_present = lookback_days * window_coverage
    entries: list[BreadthEntry] = []
    covered: set[str] = set()

    for i in range(lookback_days, len(aligned.dates)):
        low_symbols: list[str] = []
        high_symbols: list[str] = []
        count_valid = 0

        for symbol in symbols:
            if not present[symbol][i]:
                continue
            window_mask = present[symbol][i - lookback_days : i]
            window = closes[symbol][i - lookback_days : i][window_mask]
            if window.size < min_present or window.size == 0:
                continue

            count_valid += 1
            covered.add(symbol)
            current = closes[symbol][i]
            if current <= np.min(window):
                low_symbols.append(symbol)
            if current >= np.max(window):
                high_symbols.append(symbol)

        pct_at_low = len(low_symbols) / count_valid * 100.0 if count_valid > 0 else 0.0
        pct_at_high = len(high_symbols) / count_valid * 100.0 if count_valid > 0 else 0.0
        entries.append(
            BreadthEntry(
                date=aligned.dates[i],
                pct_at_low=pct_at_low,
                pct_at_high=pct_at_high,
                count_at_low=len(low_symbols),
                count_at_high=len(high_symbols),
                count_valid=count_valid,
                low_symbols=tuple(low_symbols),
                high_symbols=tuple(high_symbols),
            )
        )

    logger.debug(
        "Breadth computed: %d entries, %d/%d symbols covered", len(entries), len(covered), len(symbols)
    )
    return BreadthSeries(
        entries=entries,
        lookback_days=lookback_days,
        total_symbols=len(symbols),
        symbols_covered=len(covered),
    )


def series_entries(series: BreadthSeries | Sequence[BreadthEntry]) -> Sequence[BreadthEntry]:
    return series.entries if isinstance(series, BreadthSeries) else series


def get_breadth_on_date(series: BreadthSeries | Sequence[BreadthEntry], on: date) -> BreadthEntry | None:
    for entry in series_entries(series):
        if entry.date == on:
            return entry
    return None


def get_symbols_at_extreme(
    series: BreadthSeries | Sequence[BreadthEntry],
    on: date,
    metric: BreadthMetric | str = BreadthMetric.NEW_LOWS,
) -> list[str]:
    entry = get_breadth_on_date(series, on)
    if entry is None:
        return []
    if BreadthMetric.coerce(metric) is BreadthMetric.NEW_HIGHS:
        return list(entry.high_symbols)
    return list(entry.low_symbols)


def calculate_average_breadth(
    series: BreadthSeries | Sequence[BreadthEntry],
    start: date,
    end: date,
    metric: BreadthMetric | str = BreadthMetric.NEW_LOWS,
) -> float:
    """Mean percentage over entries dated in ``[start, end]``; 0 when none."""
    use_highs = BreadthMetric.coerce(metric) is BreadthMetric.NEW_HIGHS
    values = [
        entry.pct_at_high if use_highs else entry.pct_at_low
        for entry in series_entries(series)
        if start <= entry.date <= end
    ]
    if not values:
        return 0.0
    return float(sum(values) / len(values))


def breadth_to_frame(series: BreadthSeries | Sequence[BreadthEntry]) -> pd.DataFrame:
    """Breadth entries as a date-indexed frame; symbol sets kept as lists."""
    rows = [entry.to_dict() for entry in series_entries(series)]
    columns = [
        "pct_at_low",
        "pct_at_high",
        "count_at_low",
        "count_at_high",
        "count_valid",
        "low_symbols",
        "high_symbols",
    ]
    if not rows:
        return pd.DataFrame(columns=columns, index=pd.DatetimeIndex([], name="date"))
    frame = pd.DataFrame(rows)
    frame.index = pd.DatetimeIndex(pd.to_datetime(frame.pop("date")), name="date")
    return frame[columns]
