"""Unit tests for rolling distance-from-extreme metrics."""

from __future__ import annotations

import math

import pytest

from market_extremes.common.enums import Basis
from market_extremes.engines.errors import EngineValidationError
from market_extremes.engines.rolling_metrics import compute_days_since_series, compute_metrics


def _spike_closes() -> list[float]:
    closes = [100.0] * 31
    closes[20] = 110.0
    return closes


def test_output_is_index_aligned(bar_factory) -> None:
    bars = bar_factory([100.0 + i for i in range(40)])
    metrics = compute_metrics(bars, 10)

    assert len(metrics) == len(bars)


def test_empty_input_returns_empty_list() -> None:
    assert compute_metrics([], 10) == []


@pytest.mark.parametrize("basis", [Basis.CLOSE, Basis.INTRADAY])
def test_single_bar_is_its_own_extreme(bar_factory, basis: Basis) -> None:
    bars = bar_factory([100.0], highs=[105.0], lows=[95.0])

    (metric,) = compute_metrics(bars, 10, basis)

    assert metric.days_since_high == 0
    assert metric.days_since_low == 0
    assert metric.pct_from_high == 0.0
    assert metric.pct_from_low == 0.0
    assert metric.rolling_high == 105.0
    assert metric.rolling_low == 95.0


def test_flat_prices_are_always_at_both_extremes(bar_factory) -> None:
    metrics = compute_metrics(bar_factory([50.0] * 25), 10)

    assert all(m.days_since_high == 0 for m in metrics)
    assert all(m.days_since_low == 0 for m in metrics)
    assert all(m.pct_from_high == 0.0 and m.pct_from_low == 0.0 for m in metrics)


def test_spike_counts_days_since_high(bar_factory) -> None:
    metrics = compute_metrics(bar_factory(_spike_closes()), 10)

    assert metrics[20].days_since_high == 0
    assert metrics[20].rolling_high == 110.0
    assert metrics[25].days_since_high == 5
    assert metrics[25].pct_from_high == pytest.approx((110.0 - 100.0) / 110.0 * 100.0)
    assert metrics[25].days_since_low == 0
    # The spike has left the 10-bar window by index 30.
    assert metrics[30].rolling_high == 100.0
    assert metrics[30].days_since_high == 0


def test_short_history_uses_truncated_window(bar_factory) -> None:
    metrics = compute_metrics(bar_factory([10.0, 12.0, 11.0]), 10)

    assert len(metrics) == 3
    assert metrics[2].rolling_high == 12.0
    assert metrics[2].rolling_low == 10.0
    assert metrics[2].days_since_high == 1
    assert metrics[2].days_since_low == 2


def test_close_basis_saturates_when_close_never_reaches_intraday_high(bar_factory) -> None:
    closes = [100.0] * 12
    bars = bar_factory(closes, highs=[101.0] * 12)
    metrics = compute_metrics(bars, 5, Basis.CLOSE)

    assert all(m.days_since_high == 4 for m in metrics)
    assert all(m.rolling_high == 101.0 for m in metrics)
    assert all(m.current_value == 100.0 for m in metrics)


def test_intraday_basis_compares_high_and_low(bar_factory) -> None:
    closes = [100.0] * 12
    bars = bar_factory(closes, highs=[101.0] * 12, lows=[99.0] * 12)
    metrics = compute_metrics(bars, 5, "intraday")

    assert all(m.days_since_high == 0 for m in metrics)
    assert all(m.days_since_low == 0 for m in metrics)
    assert metrics[-1].current_value == 101.0


def test_percentages_are_non_negative_for_sane_prices(sample_bars_by_symbol) -> None:
    for bars in sample_bars_by_symbol.values():
        for basis in (Basis.CLOSE, Basis.INTRADAY):
            for metric in compute_metrics(bars, 20, basis):
                assert metric.pct_from_high >= 0.0
                assert metric.pct_from_low >= 0.0
                assert 0 <= metric.days_since_high <= 19
                assert 0 <= metric.days_since_low <= 19


def test_nan_close_propagates_without_raising(bar_factory) -> None:
    bars = bar_factory([100.0, float("nan")], highs=[100.0, 100.0], lows=[100.0, 100.0])
    metrics = compute_metrics(bars, 5)

    assert math.isnan(metrics[1].pct_from_high)
    assert metrics[1].days_since_high == 1


@pytest.mark.parametrize("lookback", [0, -3])
def test_non_positive_lookback_raises(bar_factory, lookback: int) -> None:
    with pytest.raises(EngineValidationError):
        compute_metrics(bar_factory([1.0, 2.0]), lookback)


def test_unknown_basis_raises(bar_factory) -> None:
    with pytest.raises(EngineValidationError):
        compute_metrics(bar_factory([1.0, 2.0]), 5, "vwap")


def test_days_since_series_matches_full_metrics(bar_factory) -> None:
    bars = bar_factory(_spike_closes())

    assert compute_days_since_series(bars, 10) == [m.days_since_high for m in compute_metrics(bars, 10)]
