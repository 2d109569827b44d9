"""
Rolling distance-from-extreme metrics
=====================================

For every bar, looks back over a trailing window of ``lookback`` bars (the
current bar included) and reports:

    rolling_high / rolling_low   max(high) / min(low) over the window
    pct_from_high / pct_from_low signed % distance of the compared value
    days_since_high / _low       bars since the compared value last touched
                                 the rolling extreme inside the window

The rolling extremes always come from the intraday high/low fields. The
basis only switches the value compared against them: the close under
``"close"``, the high (or low) under ``"intraday"``. A close-basis reading
therefore measures a closing price against a level that may only have been
touched intraday.

A single bar is its own extreme: distance 0 and day count 0 on both sides,
whatever the basis. Otherwise, when no bar inside the window touched the
extreme, the day count saturates at ``lookback - 1``. Histories shorter
than ``lookback`` are computed over the truncated window; early readings
under-count true historical extremes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from market_extremes.common.enums import Basis
from market_extremes.data_pipeline.types import DailyBar
from market_extremes.engines.errors import EngineValidationError, require_positive_int
from market_extremes.engines.types import RollingMetric

logger = logging.getLogger(__name__)


def resolve_basis(basis: Basis | str) -> Basis:
    resolved = Basis.coerce(basis)
    if resolved is None:
        raise EngineValidationError(f"basis must be 'close' or 'intraday', got {basis!r}")
    return resolved


def _periods_since(touched: np.ndarray, start: int, index: int, saturate: int) -> int:
    hits = np.flatnonzero(touched)
    if hits.size == 0:
        return saturate
    return index - (start + int(hits[-1]))


def _single_bar_metric(bar: DailyBar, value: float) -> RollingMetric:
    return RollingMetric(
        days_since_high=0,
        days_since_low=0,
        pct_from_high=0.0,
        pct_from_low=0.0,
        rolling_high=float(bar.high),
        rolling_low=float(bar.low),
        current_value=float(value),
    )


def compute_metrics(
    bars: Sequence[DailyBar],
    lookback: int,
    basis: Basis | str = Basis.CLOSE,
) -> list[RollingMetric]:
    """Compute one :class:`RollingMetric` per bar, index-aligned to ``bars``."""
    lookback = require_positive_int("lookback", lookback)
    resolved = resolve_basis(basis)
    if not bars:
        return []

    highs = np.array([bar.high for bar in bars], dtype=float)
    lows = np.array([bar.low for bar in bars], dtype=float)
    if resolved is Basis.CLOSE:
        closes = np.array([bar.close for bar in bars], dtype=float)
        up_values, down_values = closes, closes
    else:
        up_values, down_values = highs, lows

    if len(bars) < lookback:
        logger.debug("Short history: %d bars for lookback %d", len(bars), lookback)

    if len(bars) == 1:
        return [_single_bar_metric(bars[0], up_values[0])]

    saturate = lookback - 1
    metrics: list[RollingMetric] = []
    # NaN and zero prices propagate as NaN/inf rather than raising.
    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(len(bars)):
            start = max(0, i - lookback + 1)
            rolling_high = np.max(highs[start : i + 1])
            rolling_low = np.min(lows[start : i + 1])
            value_high = up_values[i]
            value_low = down_values[i]

            days_since_high = _periods_since(up_values[start : i + 1] >= rolling_high, start, i, saturate)
            days_since_low = _periods_since(down_values[start : i + 1] <= rolling_low, start, i, saturate)

            pct_from_high = (rolling_high - value_high) / rolling_high * 100.0
            pct_from_low = (value_low - rolling_low) / rolling_low * 100.0

            metrics.append(
                RollingMetric(
                    days_since_high=days_since_high,
                    days_since_low=days_since_low,
                    pct_from_high=float(pct_from_high),
                    pct_from_low=float(pct_from_low),
                    rolling_high=float(rolling_high),
                    rolling_low=float(rolling_low),
                    current_value=float(value_high),
                )
            )
    return metrics


def compute_days_since_series(
    bars: Sequence[DailyBar],
    lookback: int,
    basis: Basis | str = Basis.CLOSE,
) -> list[int]:
    """Days since rolling high only, the compact heatmap cell value."""
    return [metric.days_since_high for metric in compute_metrics(bars, lookback, basis)]
