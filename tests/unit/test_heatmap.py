"""Unit tests for heatmap assembly on the shared date axis."""

from __future__ import annotations

import math

import pytest

from market_extremes.common.enums import Basis
from market_extremes.data_pipeline.align import align_bars_by_date
from market_extremes.engines.errors import EngineValidationError
from market_extremes.engines.heatmap import build_heatmap
from market_extremes.engines.rolling_metrics import compute_metrics


def test_metrics_are_axis_length_for_every_symbol(sample_bars_by_symbol) -> None:
    aligned = align_bars_by_date(sample_bars_by_symbol)
    heatmap = build_heatmap(aligned, 63)

    assert heatmap.basis is Basis.CLOSE
    assert list(heatmap.metrics) == aligned.valid_symbols
    for series in heatmap.metrics.values():
        assert len(series) == len(aligned.dates)
        assert all(metric is not None for metric in series)


def test_gaps_stay_empty_and_windows_skip_them(bar_factory) -> None:
    closes = [100.0 + i for i in range(10)]
    full = bar_factory(closes)
    gappy = [bar for idx, bar in enumerate(full) if idx != 4]
    aligned = align_bars_by_date({"FULL": full, "GAPPY": gappy})

    heatmap = build_heatmap(aligned, 3, "intraday")

    assert heatmap.metrics["GAPPY"][4] is None
    expected = compute_metrics(gappy, 3, Basis.INTRADAY)
    assert heatmap.metrics["GAPPY"][5] == expected[4]
    assert heatmap.metrics["FULL"][5] == compute_metrics(full, 3, Basis.INTRADAY)[5]


def test_tail_and_frame(bar_factory) -> None:
    full = bar_factory([100.0 + i for i in range(10)])
    aligned = align_bars_by_date({"FULL": full, "PART": full[:7]})
    heatmap = build_heatmap(aligned, 5).tail(4)

    assert len(heatmap.dates) == 4
    assert all(len(series) == 4 for series in heatmap.metrics.values())

    frame = heatmap.to_frame("days_since_high")
    assert frame.shape == (4, 2)
    assert frame["FULL"].tolist() == [0.0, 0.0, 0.0, 0.0]
    assert math.isnan(frame["PART"].iloc[-1])

    with pytest.raises(ValueError):
        heatmap.to_frame("volume")


def test_invalid_arguments_raise(sample_bars_by_symbol) -> None:
    aligned = align_bars_by_date(sample_bars_by_symbol)

    with pytest.raises(EngineValidationError):
        build_heatmap(aligned, 0)
    with pytest.raises(EngineValidationError):
        build_heatmap(aligned, 10, "weekly")
