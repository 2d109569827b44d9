"""Date alignment of per-symbol bar sequences onto a shared trading axis."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date

import numpy as np
import pandas as pd

from market_extremes.data_pipeline.logging_utils import log_event
from market_extremes.data_pipeline.types import DailyBar
from market_extremes.settings.settings import DEFAULT_THRESHOLDS

LOGGER = logging.getLogger(__name__)


@dataclass
class AlignedUniverse:
    """Shared ascending date axis plus one axis-length bar list per symbol."""

    dates: list[date]
    bars_by_symbol: dict[str, list[DailyBar | None]] = field(default_factory=dict)
    valid_symbols: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.dates)

    def slice_tail(self, count: int) -> "AlignedUniverse":
        """Keep only the last ``count`` axis dates for every symbol."""
        if count <= 0:
            return AlignedUniverse(
                dates=[],
                bars_by_symbol={symbol: [] for symbol in self.valid_symbols},
                valid_symbols=list(self.valid_symbols),
            )
        return AlignedUniverse(
            dates=self.dates[-count:],
            bars_by_symbol={symbol: bars[-count:] for symbol, bars in self.bars_by_symbol.items()},
            valid_symbols=list(self.valid_symbols),
        )

    def compact_bars(self, symbol: str) -> list[DailyBar]:
        """Present bars for ``symbol`` with gaps removed."""
        return [bar for bar in self.bars_by_symbol.get(symbol, []) if bar is not None]

    def close_frame(self) -> pd.DataFrame:
        """Closes as a dates x symbols frame, NaN where a symbol has no bar."""
        index = pd.DatetimeIndex([pd.Timestamp(d) for d in self.dates], name="date")
        data = {
            symbol: [np.nan if bar is None else bar.close for bar in self.bars_by_symbol[symbol]]
            for symbol in self.valid_symbols
        }
        return pd.DataFrame(data, index=index, columns=list(self.valid_symbols), dtype=float)


def align_bars_by_date(
    bars_by_symbol: Mapping[str, Sequence[DailyBar]],
    *,
    coverage: float = DEFAULT_THRESHOLDS.alignment_coverage,
) -> AlignedUniverse:
    """Align symbols onto the sorted union of their dates.

    A symbol is retained only when it has a bar on strictly more than
    ``coverage`` of the axis dates. Gaps stay ``None``; nothing is
    interpolated.
    """
    all_dates: set[date] = set()
    for bars in bars_by_symbol.values():
        for bar in bars:
            all_dates.add(bar.date)

    dates = sorted(all_dates)
    date_index = {value: idx for idx, value in enumerate(dates)}

    aligned: dict[str, list[DailyBar | None]] = {}
    valid_symbols: list[str] = []
    dropped: list[str] = []

    for symbol, bars in bars_by_symbol.items():
        if not bars:
            continue

        row: list[DailyBar | None] = [None] * len(dates)
        for bar in bars:
            row[date_index[bar.date]] = bar

        valid_count = sum(1 for bar in row if bar is not None)
        if valid_count > len(dates) * coverage:
            aligned[symbol] = row
            valid_symbols.append(symbol)
        else:
            dropped.append(symbol)

    log_event(
        LOGGER,
        "alignment_complete",
        axis_length=len(dates),
        retained=len(valid_symbols),
        dropped=dropped,
    )
    return AlignedUniverse(dates=dates, bars_by_symbol=aligned, valid_symbols=valid_symbols)
