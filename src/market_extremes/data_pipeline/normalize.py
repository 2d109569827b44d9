"""Conversions between upstream payloads, ``DailyBar`` sequences and frames."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, timezone
from typing import Any

import pandas as pd

from market_extremes.data_pipeline.types import BarSequence, DailyBar

BAR_COLUMNS = ["open", "high", "low", "close", "volume"]


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        # Aggregate timestamps are epoch milliseconds.
        return datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc).date()
    return pd.Timestamp(value).date()


def bar_from_aggregate(row: Mapping[str, Any]) -> DailyBar:
    """Build a bar from one ``{t, o, h, l, c, v}`` aggregate record."""
    return DailyBar(
        date=_to_date(row["t"]),
        open=float(row["o"]),
        high=float(row["h"]),
        low=float(row["l"]),
        close=float(row["c"]),
        volume=float(row.get("v") or 0),
    )


def bars_from_aggregates(results: Iterable[Mapping[str, Any]], days: int | None = None) -> BarSequence:
    """Normalize aggregate records to an ascending, de-duplicated bar list.

    When ``days`` is given only the most recent ``days`` sessions are kept.
    """
    by_date: dict[date, DailyBar] = {}
    for row in results:
        bar = bar_from_aggregate(row)
        by_date[bar.date] = bar
    bars = [by_date[key] for key in sorted(by_date)]
    if days is not None and days >= 0:
        bars = bars[-days:] if days else []
    return bars


def bars_to_frame(bars: Sequence[DailyBar]) -> pd.DataFrame:
    """Return bars as a DatetimeIndex-ed OHLCV frame."""
    if not bars:
        return pd.DataFrame(columns=BAR_COLUMNS, index=pd.DatetimeIndex([], name="date"))
    frame = pd.DataFrame(
        [[bar.open, bar.high, bar.low, bar.close, bar.volume] for bar in bars],
        columns=BAR_COLUMNS,
        index=pd.DatetimeIndex([pd.Timestamp(bar.date) for bar in bars], name="date"),
    )
    return frame.astype(float)


def frame_to_bars(frame: pd.DataFrame) -> BarSequence:
    """Inverse of :func:`bars_to_frame`; accepts upper- or lower-case OHLCV columns."""
    if frame.empty:
        return []
    renamed = frame.rename(columns={col: str(col).lower() for col in frame.columns})
    missing = [col for col in ("open", "high", "low", "close") if col not in renamed.columns]
    if missing:
        raise ValueError(f"Frame is missing OHLC columns: {missing}")
    if "volume" not in renamed.columns:
        renamed = renamed.assign(volume=0.0)
    renamed = renamed.sort_index()
    renamed = renamed[~renamed.index.duplicated(keep="last")]
    return [
        DailyBar(
            date=_to_date(idx),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for idx, row in zip(renamed.index, renamed.itertuples(index=False))
    ]
