"""In-process facade wiring bulk fetch, alignment and the engines together."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from market_extremes.common.enums import Basis, BreadthMetric
from market_extremes.common.universes import Universe, resolve_universe
from market_extremes.data_pipeline.align import AlignedUniverse, align_bars_by_date
from market_extremes.data_pipeline.errors import NoDataError
from market_extremes.data_pipeline.fetcher import BulkFetcher
from market_extremes.data_pipeline.logging_utils import log_event
from market_extremes.data_pipeline.types import BulkFetchResult, ProgressCallback
from market_extremes.engines.breadth import compute_breadth
from market_extremes.engines.errors import EngineValidationError, require_positive_int
from market_extremes.engines.extremes import (
    analyze_washed_out,
    find_peak_day,
    find_top_peaks,
    find_window_around_peak,
)
from market_extremes.engines.heatmap import HeatmapData, build_heatmap
from market_extremes.engines.signals import SignalSummary, summarize
from market_extremes.engines.types import BreadthSeries, PeakResult, WashedOutAnalysis, WindowResult
from market_extremes.settings.settings import DEFAULT_THRESHOLDS, Thresholds

LOGGER = logging.getLogger(__name__)

MIN_LOOKBACK_DAYS = 10
MAX_LOOKBACK_DAYS = 252
MIN_SEARCH_DAYS = 100
MAX_SEARCH_DAYS = 1000
# Calendar padding so holidays do not eat into the requested trading history.
FETCH_PADDING_DAYS = 30


@dataclass
class BreadthReport:
    universe: Universe
    lookback_days: int
    search_days: int
    window_days: int
    metric: BreadthMetric
    constituents_used: int
    failed_tickers: list[str]
    series: BreadthSeries
    peak: PeakResult | None
    window: WindowResult | None
    top_peaks: list[PeakResult]
    washed_out: WashedOutAnalysis
    fetch_time_ms: float
    rate_limited: bool

    def to_dict(self, *, include_series: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "universe": self.universe.to_dict(),
            "params": {
                "lookback_days": self.lookback_days,
                "search_days": self.search_days,
                "window_days": self.window_days,
                "metric": self.metric.value,
            },
            "constituents_used": self.constituents_used,
            "constituents_total": len(self.universe.symbols),
            "failed_tickers": list(self.failed_tickers),
            "symbols_covered": self.series.symbols_covered,
            "peak": self.peak.to_dict() if self.peak else None,
            "window": self.window.to_dict() if self.window else None,
            "top_peaks": [peak.to_dict() for peak in self.top_peaks],
            "washed_out": _jsonable(asdict(self.washed_out)),
            "fetch_time_ms": round(self.fetch_time_ms, 1),
            "rate_limited": self.rate_limited,
        }
        if include_series:
            payload["series"] = [entry.to_dict() for entry in self.series.entries]
        return payload


@dataclass
class HeatmapReport:
    dates: list[date]
    close: HeatmapData
    intraday: HeatmapData
    summary: SignalSummary | None
    failed_tickers: list[str] = field(default_factory=list)
    fetch_time_ms: float = 0.0
    rate_limited: bool = False

    @property
    def symbols(self) -> list[str]:
        return list(self.close.metrics)

    def to_dict(self) -> dict[str, Any]:
        def cells(heatmap: HeatmapData) -> dict[str, list[int | None]]:
            return {
                symbol: [None if metric is None else metric.days_since_high for metric in series]
                for symbol, series in heatmap.metrics.items()
            }

        return {
            "dates": [value.isoformat() for value in self.dates],
            "lookback": self.close.lookback,
            "close": cells(self.close),
            "intraday": cells(self.intraday),
            "summary": _jsonable(asdict(self.summary)) if self.summary is not None else None,
            "failed_tickers": list(self.failed_tickers),
            "fetch_time_ms": round(self.fetch_time_ms, 1),
            "rate_limited": self.rate_limited,
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class MarketExtremesService:
    """Breadth and heatmap reports over a pluggable :class:`BulkFetcher`."""

    def __init__(
        self,
        fetcher: BulkFetcher,
        *,
        thresholds: Thresholds | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.logger = logger or LOGGER

    def _align(self, fetched: BulkFetchResult, label: str) -> AlignedUniverse:
        if not fetched.bars_by_symbol:
            raise NoDataError(f"No price data fetched for {label}")
        aligned = align_bars_by_date(fetched.bars_by_symbol, coverage=self.thresholds.alignment_coverage)
        if not aligned.valid_symbols:
            raise NoDataError(f"No symbols in {label} had enough history after alignment")
        return aligned

    def breadth_report(
        self,
        universe_id: str,
        lookback_days: int = 100,
        search_days: int = 500,
        window_days: int = 100,
        metric: BreadthMetric | str = BreadthMetric.NEW_LOWS,
        top_n: int = 5,
        on_progress: ProgressCallback | None = None,
    ) -> BreadthReport:
        """Fetch a universe, compute its breadth series and locate the extremes."""
        universe = resolve_universe(universe_id)
        if universe is None:
            raise EngineValidationError(
                f"Unknown universe: {universe_id!r}",
                user_message=f"Universe '{universe_id}' is not supported",
            )
        lookback_days = require_positive_int("lookback_days", lookback_days)
        search_days = require_positive_int("search_days", search_days)
        window_days = require_positive_int("window_days", window_days)
        if isinstance(top_n, bool) or not isinstance(top_n, int) or top_n < 0:
            raise EngineValidationError(f"top_n must be a non-negative integer, got {top_n!r}")
        if not MIN_LOOKBACK_DAYS <= lookback_days <= MAX_LOOKBACK_DAYS:
            raise EngineValidationError(
                f"lookback_days must be between {MIN_LOOKBACK_DAYS} and {MAX_LOOKBACK_DAYS}, got {lookback_days}"
            )
        if not MIN_SEARCH_DAYS <= search_days <= MAX_SEARCH_DAYS:
            raise EngineValidationError(
                f"search_days must be between {MIN_SEARCH_DAYS} and {MAX_SEARCH_DAYS}, got {search_days}"
            )
        resolved_metric = BreadthMetric.coerce(metric)
        if resolved_metric is None:
            raise EngineValidationError(f"metric must be 'new_lows' or 'new_highs', got {metric!r}")

        fetched = self.fetcher.fetch_bulk(
            universe.symbols,
            search_days + lookback_days + FETCH_PADDING_DAYS,
            on_progress=on_progress,
        )
        aligned = self._align(fetched, universe.label).slice_tail(search_days + lookback_days)

        series = compute_breadth(
            aligned,
            lookback_days,
            window_coverage=self.thresholds.breadth_window_coverage,
        )
        report = BreadthReport(
            universe=universe,
            lookback_days=lookback_days,
            search_days=search_days,
            window_days=window_days,
            metric=resolved_metric,
            constituents_used=len(aligned.valid_symbols),
            failed_tickers=list(fetched.failed),
            series=series,
            peak=find_peak_day(series, resolved_metric),
            window=find_window_around_peak(series, resolved_metric, window_days),
            top_peaks=find_top_peaks(series, resolved_metric, top_n),
            washed_out=analyze_washed_out(series, self.thresholds.washed_out_pct),
            fetch_time_ms=fetched.fetch_time_ms,
            rate_limited=fetched.rate_limited,
        )
        log_event(
            self.logger,
            "breadth_report_complete",
            universe=universe.id,
            entries=len(series),
            constituents_used=report.constituents_used,
            failed=len(report.failed_tickers),
            peak_date=report.peak.date.isoformat() if report.peak else None,
        )
        return report

    def heatmap_report(
        self,
        symbols: Sequence[str],
        days: int = 63,
        lookback: int = 63,
        on_progress: ProgressCallback | None = None,
    ) -> HeatmapReport:
        """Close and intraday heatmaps over the last ``days`` sessions plus signals."""
        days = require_positive_int("days", days)
        lookback = require_positive_int("lookback", lookback)
        if not symbols:
            raise EngineValidationError("At least one symbol is required")

        fetched = self.fetcher.fetch_bulk(symbols, days + lookback, on_progress=on_progress)
        aligned = self._align(fetched, ", ".join(symbols))

        close = build_heatmap(aligned, lookback, Basis.CLOSE).tail(days)
        intraday = build_heatmap(aligned, lookback, Basis.INTRADAY).tail(days)
        summary = summarize(close.metrics, intraday.metrics, close.dates, self.thresholds)

        log_event(
            self.logger,
            "heatmap_report_complete",
            symbols=len(close.metrics),
            sessions=len(close.dates),
            regime=summary.regime.label.value if summary else None,
        )
        return HeatmapReport(
            dates=list(close.dates),
            close=close,
            intraday=intraday,
            summary=summary,
            failed_tickers=list(fetched.failed),
            fetch_time_ms=fetched.fetch_time_ms,
            rate_limited=fetched.rate_limited,
        )
