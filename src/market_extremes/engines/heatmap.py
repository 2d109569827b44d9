"""Per-symbol rolling metrics re-indexed onto a shared date axis."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import numpy as np
import pandas as pd

from market_extremes.common.enums import Basis
from market_extremes.data_pipeline.align import AlignedUniverse
from market_extremes.engines.errors import require_positive_int
from market_extremes.engines.rolling_metrics import compute_metrics, resolve_basis
from market_extremes.engines.types import RollingMetric

HEATMAP_FIELDS = (
    "days_since_high",
    "days_since_low",
    "pct_from_high",
    "pct_from_low",
    "rolling_high",
    "rolling_low",
    "current_value",
)


@dataclass
class HeatmapData:
    dates: list[date]
    metrics: dict[str, list[RollingMetric | None]]
    lookback: int
    basis: Basis

    def tail(self, count: int) -> "HeatmapData":
        if count <= 0:
            return HeatmapData(
                dates=[],
                metrics={symbol: [] for symbol in self.metrics},
                lookback=self.lookback,
                basis=self.basis,
            )
        return HeatmapData(
            dates=self.dates[-count:],
            metrics={symbol: series[-count:] for symbol, series in self.metrics.items()},
            lookback=self.lookback,
            basis=self.basis,
        )

    def to_frame(self, field: str = "days_since_high") -> pd.DataFrame:
        """One metric field as a dates x symbols frame, NaN on gaps."""
        if field not in HEATMAP_FIELDS:
            raise ValueError(f"Unknown heatmap field: {field}")
        index = pd.DatetimeIndex([pd.Timestamp(d) for d in self.dates], name="date")
        data = {
            symbol: [np.nan if metric is None else getattr(metric, field) for metric in series]
            for symbol, series in self.metrics.items()
        }
        return pd.DataFrame(data, index=index, columns=list(self.metrics), dtype=float)


def build_heatmap(
    aligned: AlignedUniverse,
    lookback: int,
    basis: Basis | str = Basis.CLOSE,
) -> HeatmapData:
    """Run the rolling engine on each symbol's present bars and map back to the axis.

    Windows count trading sessions the symbol actually has; axis gaps are
    skipped, not treated as bars.
    """
    lookback = require_positive_int("lookback", lookback)
    resolved = resolve_basis(basis)
    metrics: dict[str, list[RollingMetric | None]] = {}
    for symbol in aligned.valid_symbols:
        row = aligned.bars_by_symbol[symbol]
        positions = [idx for idx, bar in enumerate(row) if bar is not None]
        computed = compute_metrics([row[idx] for idx in positions], lookback, resolved)
        series: list[RollingMetric | None] = [None] * len(aligned.dates)
        for idx, metric in zip(positions, computed):
            series[idx] = metric
        metrics[symbol] = series
    return HeatmapData(dates=list(aligned.dates), metrics=metrics, lookback=lookback, basis=resolved)
