"""Shared pytest fixtures for market_extremes tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date

import numpy as np
import pandas as pd
import pytest

from market_extremes.data_pipeline.types import DailyBar

BarFactory = Callable[..., list[DailyBar]]


def make_bars(
    closes: Sequence[float],
    *,
    start: str = "2024-01-02",
    highs: Sequence[float] | None = None,
    lows: Sequence[float] | None = None,
    dates: Sequence[date] | None = None,
) -> list[DailyBar]:
    """Business-day bars; high/low default to the close."""
    if dates is None:
        dates = [ts.date() for ts in pd.bdate_range(start=start, periods=len(closes))]
    highs = list(highs) if highs is not None else list(closes)
    lows = list(lows) if lows is not None else list(closes)
    return [
        DailyBar(
            date=dates[i],
            open=float(closes[i]),
            high=float(highs[i]),
            low=float(lows[i]),
            close=float(closes[i]),
            volume=1_000_000.0,
        )
        for i in range(len(closes))
    ]


@pytest.fixture
def bar_factory() -> BarFactory:
    return make_bars


@pytest.fixture
def sample_bars_by_symbol() -> dict[str, list[DailyBar]]:
    """Random-walk daily bars for a handful of symbols on a shared calendar."""
    dates = [ts.date() for ts in pd.bdate_range(start="2023-01-02", periods=252)]
    tickers = ["AAPL", "MSFT", "NVDA", "AMZN", "META"]

    bars: dict[str, list[DailyBar]] = {}
    for idx, ticker in enumerate(tickers):
        rng = np.random.default_rng(seed=2024 + idx)
        base_price = float(rng.uniform(50.0, 300.0))
        returns = rng.normal(0.0005, 0.02, len(dates))
        closes = base_price * np.cumprod(1 + returns)
        bars[ticker] = [
            DailyBar(
                date=day,
                open=float(closes[i] * rng.uniform(0.99, 1.01)),
                high=float(closes[i] * rng.uniform(1.00, 1.03)),
                low=float(closes[i] * rng.uniform(0.97, 1.00)),
                close=float(closes[i]),
                volume=float(rng.integers(100_000, 10_000_000)),
            )
            for i, day in enumerate(dates)
        ]
    return bars


@pytest.fixture
def no_sleep() -> Callable[[float], None]:
    def _sleep(_seconds: float) -> None:
        return None

    return _sleep
