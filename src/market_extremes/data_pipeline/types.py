from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(frozen=True)
class DailyBar:
    """One trading session for one symbol."""

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


BarSequence = list[DailyBar]
FetchCallable = Callable[[str, int], BarSequence]


@dataclass(frozen=True)
class FetchProgress:
    """Progress snapshot reported between fetch batches."""

    total: int
    completed: int
    failed: int
    current_batch: int
    total_batches: int
    message: str


ProgressCallback = Callable[[FetchProgress], None]


@dataclass
class SymbolFetchOutcome:
    """Result of one symbol's attempt sequence."""

    symbol: str
    bars: BarSequence
    error: str | None = None
    classification: str | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return bool(self.bars)


@dataclass
class BulkFetchResult:
    """Partial-failure tolerant result of a bulk fetch."""

    bars_by_symbol: dict[str, BarSequence]
    succeeded: list[str]
    failed: list[str]
    rate_limited: bool
    fetch_time_ms: float
    errors: list[dict[str, Any]] = field(default_factory=list)
