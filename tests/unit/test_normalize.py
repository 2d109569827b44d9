"""Unit tests for aggregate payload and frame conversions."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pandas as pd
import pytest

from market_extremes.data_pipeline.normalize import bars_from_aggregates, bars_to_frame, frame_to_bars


def _epoch_ms(day: date) -> int:
    return int(datetime(day.year, day.month, day.day, 5, tzinfo=timezone.utc).timestamp() * 1000)


def _row(day: date, close: float) -> dict[str, float]:
    return {"t": _epoch_ms(day), "o": close, "h": close + 1, "l": close - 1, "c": close, "v": 1000}


def test_aggregates_are_sorted_deduplicated_and_trimmed() -> None:
    rows = [
        _row(date(2024, 3, 6), 103.0),
        _row(date(2024, 3, 4), 101.0),
        _row(date(2024, 3, 5), 102.0),
        _row(date(2024, 3, 5), 102.5),
    ]

    bars = bars_from_aggregates(rows)
    assert [bar.date for bar in bars] == [date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 6)]
    assert bars[1].close == 102.5
    assert bars[0].high == 102.0

    assert [bar.date for bar in bars_from_aggregates(rows, days=2)] == [date(2024, 3, 5), date(2024, 3, 6)]


def test_missing_volume_defaults_to_zero() -> None:
    row = _row(date(2024, 3, 4), 10.0)
    del row["v"]

    assert bars_from_aggregates([row])[0].volume == 0.0


def test_frame_conversion(bar_factory) -> None:
    bars = bar_factory([10.0, 11.0, 12.0])
    frame = bars_to_frame(bars)

    assert list(frame.columns) == ["open", "high", "low", "close", "volume"]
    assert frame.index.name == "date"
    assert frame_to_bars(frame) == bars
    assert bars_to_frame([]).empty
    assert frame_to_bars(pd.DataFrame()) == []


def test_frame_to_bars_accepts_title_case_without_volume() -> None:
    frame = pd.DataFrame(
        {"Open": [1.0], "High": [2.0], "Low": [0.5], "Close": [1.5]},
        index=pd.DatetimeIndex(["2024-01-02"]),
    )

    bar = frame_to_bars(frame)[0]
    assert bar.date == date(2024, 1, 2)
    assert bar.volume == 0.0


def test_frame_without_ohlc_is_rejected() -> None:
    frame = pd.DataFrame({"close": [1.0]}, index=pd.DatetimeIndex(["2024-01-02"]))

    with pytest.raises(ValueError):
        frame_to_bars(frame)
