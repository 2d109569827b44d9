from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any


@dataclass(frozen=True)
class RollingMetric:
    """Distance-from-extreme readings for one bar under one basis."""

    days_since_high: int
    days_since_low: int
    pct_from_high: float
    pct_from_low: float
    rolling_high: float
    rolling_low: float
    current_value: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BreadthEntry:
    date: date
    pct_at_low: float
    pct_at_high: float
    count_at_low: int
    count_at_high: int
    count_valid: int
    low_symbols: tuple[str, ...] = ()
    high_symbols: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["date"] = self.date.isoformat()
        payload["low_symbols"] = list(self.low_symbols)
        payload["high_symbols"] = list(self.high_symbols)
        return payload


@dataclass
class BreadthSeries:
    entries: list[BreadthEntry]
    lookback_days: int
    total_symbols: int
    symbols_covered: int

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class PeakResult:
    date: date
    value: float
    count: int
    count_valid: int
    symbols: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "value": self.value,
            "count": self.count,
            "count_valid": self.count_valid,
            "symbols": list(self.symbols),
        }


@dataclass(frozen=True)
class WindowResult:
    window_start: date
    window_end: date
    peak_date: date
    peak_value: float
    avg_value: float
    window_days: int
    trading_days: int

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        for key in ("window_start", "window_end", "peak_date"):
            payload[key] = payload[key].isoformat()
        return payload


@dataclass(frozen=True)
class WashedOutAnalysis:
    is_washed_out: bool
    threshold: float
    current_value: float
    days_above_threshold: int
    peak_value: float
    peak_date: date | None


@dataclass
class BreadthExtremes:
    peak: PeakResult
    window: WindowResult
    series: list[BreadthEntry] = field(default_factory=list)
