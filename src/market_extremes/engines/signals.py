"""
Trader signals from paired close/intraday rolling metrics
=========================================================

Days since the rolling high are the primary reading:

    Confirmed breakout : intraday days == 0 and close days == 0
    Rejected breakout  : intraday days == 0 and close days  > 0
    Hot / Cold         : close days <= hot_days / >= cold_days

Regime comes from the close basis (end-of-day is authoritative):

    hot share  >= majority -> Risk-On
    cold share >= majority -> Risk-Off
    otherwise              -> Narrow / Mixed
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date

from market_extremes.common.enums import Confidence, RegimeLabel, RejectionSeverity
from market_extremes.engines.types import RollingMetric
from market_extremes.settings.settings import DEFAULT_THRESHOLDS, Thresholds

MetricsBySymbol = Mapping[str, Sequence[RollingMetric | None]]

_SEVERITY_ORDER = {
    RejectionSeverity.STRONG: 0,
    RejectionSeverity.NOTABLE: 1,
    RejectionSeverity.MILD: 2,
}
_CONFIDENCE_ORDER = {Confidence.HIGH: 0, Confidence.MEDIUM: 1, Confidence.LOW: 2}


@dataclass(frozen=True)
class BreadthStats:
    hot_count: int
    cold_count: int
    neutral_count: int
    total: int


@dataclass(frozen=True)
class RegimeInfo:
    label: RegimeLabel
    breadth: BreadthStats
    confidence: Confidence


@dataclass(frozen=True)
class ConfirmationSignal:
    symbol: str
    date: date | None


@dataclass(frozen=True)
class RejectionSignal:
    symbol: str
    high_days: int
    close_days: int
    delta: int
    severity: RejectionSeverity
    date: date | None


@dataclass(frozen=True)
class DivergenceRule:
    type: str
    title: str
    description: str
    leader: str
    laggard: str
    leader_threshold: int   # leader days must be <= this
    laggard_threshold: int  # laggard days must be >= this
    confidence: Confidence


@dataclass(frozen=True)
class DivergenceSignal:
    type: str
    title: str
    description: str
    confidence: Confidence
    leader: str
    laggard: str
    leader_days: int
    laggard_days: int


@dataclass(frozen=True)
class RejectionRate:
    rate: float
    count: int
    sessions: int


@dataclass
class SignalSummary:
    regime: RegimeInfo
    confirmations: list[ConfirmationSignal]
    rejections: list[RejectionSignal]
    recent_rejection_rate: float
    total_recent_sessions: int
    divergences: list[DivergenceSignal] = field(default_factory=list)

    @property
    def confirmed_symbols(self) -> list[str]:
        return [signal.symbol for signal in self.confirmations]

    @property
    def rejected_symbols(self) -> list[str]:
        return [signal.symbol for signal in self.rejections]


DIVERGENCE_RULES: tuple[DivergenceRule, ...] = (
    DivergenceRule(
        type="small-caps-lagging",
        title="Small Caps Lagging",
        description="RUT far from highs while SPX/NDX near highs - risk appetite narrowing",
        leader="SPX",
        laggard="RUT",
        leader_threshold=3,
        laggard_threshold=15,
        confidence=Confidence.HIGH,
    ),
    DivergenceRule(
        type="semis-leading",
        title="Semis Leading",
        description="SOX leading broad market - tech/AI momentum",
        leader="SOX",
        laggard="SPX",
        leader_threshold=3,
        laggard_threshold=10,
        confidence=Confidence.MEDIUM,
    ),
    DivergenceRule(
        type="growth-leading",
        title="Growth Over Value",
        description="NDX leading DJI - growth stocks outperforming",
        leader="NDX",
        laggard="DJI",
        leader_threshold=3,
        laggard_threshold=10,
        confidence=Confidence.MEDIUM,
    ),
    DivergenceRule(
        type="dow-leading",
        title="Blue Chips Leading",
        description="DJI leading NDX - rotation to defensives/value",
        leader="DJI",
        laggard="NDX",
        leader_threshold=3,
        laggard_threshold=10,
        confidence=Confidence.MEDIUM,
    ),
    DivergenceRule(
        type="breadth-divergence",
        title="Breadth Divergence",
        description="RUT lagging while IXIC leads - narrow market leadership",
        leader="IXIC",
        laggard="RUT",
        leader_threshold=5,
        laggard_threshold=12,
        confidence=Confidence.LOW,
    ),
)


def _row_count(metrics: MetricsBySymbol) -> int:
    return max((len(series) for series in metrics.values()), default=0)


def extract_row(metrics: MetricsBySymbol, index: int, field_name: str = "days_since_high") -> dict[str, int]:
    """Per-symbol readings at axis ``index``; symbols with no bar there are omitted."""
    row: dict[str, int] = {}
    for symbol, series in metrics.items():
        if -len(series) <= index < len(series) and series[index] is not None:
            row[symbol] = getattr(series[index], field_name)
    return row


def extract_latest_row(metrics: MetricsBySymbol, field_name: str = "days_since_high") -> dict[str, int]:
    return extract_row(metrics, _row_count(metrics) - 1, field_name)


def compute_breadth_stats(latest_row: Mapping[str, int | None], thresholds: Thresholds = DEFAULT_THRESHOLDS) -> BreadthStats:
    hot_count = 0
    cold_count = 0
    for days in latest_row.values():
        if days is None:
            continue
        if days <= thresholds.hot_days:
            hot_count += 1
        elif days >= thresholds.cold_days:
            cold_count += 1
    total = len(latest_row)
    return BreadthStats(
        hot_count=hot_count,
        cold_count=cold_count,
        neutral_count=total - hot_count - cold_count,
        total=total,
    )


def compute_regime(breadth: BreadthStats, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> RegimeInfo:
    if breadth.total <= 0:
        return RegimeInfo(label=RegimeLabel.NARROW_MIXED, breadth=breadth, confidence=Confidence.LOW)

    hot_ratio = breadth.hot_count / breadth.total
    cold_ratio = breadth.cold_count / breadth.total

    if hot_ratio >= thresholds.regime_majority:
        label = RegimeLabel.RISK_ON
        winning = hot_ratio
    elif cold_ratio >= thresholds.regime_majority:
        label = RegimeLabel.RISK_OFF
        winning = cold_ratio
    else:
        return RegimeInfo(label=RegimeLabel.NARROW_MIXED, breadth=breadth, confidence=Confidence.LOW)

    confidence = Confidence.HIGH if winning >= thresholds.high_confidence_ratio else Confidence.MEDIUM
    return RegimeInfo(label=label, breadth=breadth, confidence=confidence)


def rejection_severity(delta: int, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> RejectionSeverity:
    if delta <= thresholds.rejection_mild:
        return RejectionSeverity.MILD
    if delta <= thresholds.rejection_notable:
        return RejectionSeverity.NOTABLE
    return RejectionSeverity.STRONG


def detect_rejections(
    high_row: Mapping[str, int],
    close_row: Mapping[str, int],
    on: date | None = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> list[RejectionSignal]:
    """Symbols that touched a new intraday high but closed below it, strongest first."""
    rejections: list[RejectionSignal] = []
    for symbol, high_days in high_row.items():
        close_days = close_row.get(symbol)
        if high_days is None or close_days is None:
            continue
        if high_days == 0 and close_days > 0:
            delta = close_days - high_days
            rejections.append(
                RejectionSignal(
                    symbol=symbol,
                    high_days=high_days,
                    close_days=close_days,
                    delta=delta,
                    severity=rejection_severity(delta, thresholds),
                    date=on,
                )
            )
    rejections.sort(key=lambda signal: (_SEVERITY_ORDER[signal.severity], -signal.delta))
    return rejections


def detect_confirmations(
    high_row: Mapping[str, int],
    close_row: Mapping[str, int],
    on: date | None = None,
) -> list[ConfirmationSignal]:
    confirmations: list[ConfirmationSignal] = []
    for symbol, high_days in high_row.items():
        close_days = close_row.get(symbol)
        if high_days is None or close_days is None:
            continue
        if high_days == 0 and close_days == 0:
            confirmations.append(ConfirmationSignal(symbol=symbol, date=on))
    return confirmations


def _recent_rows(
    intraday_metrics: MetricsBySymbol,
    close_metrics: MetricsBySymbol,
    dates: Sequence[date] | None,
    thresholds: Thresholds,
):
    total_rows = len(dates) if dates is not None else max(_row_count(intraday_metrics), _row_count(close_metrics))
    recent = min(thresholds.recent_rows, total_rows)
    for index in range(total_rows - recent, total_rows):
        on = dates[index] if dates is not None else None
        yield on, extract_row(intraday_metrics, index), extract_row(close_metrics, index)


def compute_recent_rejection_rate(
    intraday_metrics: MetricsBySymbol,
    close_metrics: MetricsBySymbol,
    dates: Sequence[date] | None = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> RejectionRate:
    """Average rejections per session over the last ``recent_rows`` sessions."""
    count = 0
    sessions = 0
    for on, high_row, close_row in _recent_rows(intraday_metrics, close_metrics, dates, thresholds):
        count += len(detect_rejections(high_row, close_row, on, thresholds))
        sessions += 1
    return RejectionRate(rate=count / sessions if sessions > 0 else 0.0, count=count, sessions=sessions)


def get_all_recent_rejections(
    intraday_metrics: MetricsBySymbol,
    close_metrics: MetricsBySymbol,
    dates: Sequence[date] | None = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> list[RejectionSignal]:
    """Every rejection over the recent sessions, newest session first."""
    collected: list[tuple[int, RejectionSignal]] = []
    for position, (on, high_row, close_row) in enumerate(
        _recent_rows(intraday_metrics, close_metrics, dates, thresholds)
    ):
        collected.extend((position, signal) for signal in detect_rejections(high_row, close_row, on, thresholds))
    collected.sort(key=lambda item: (-item[0], _SEVERITY_ORDER[item[1].severity]))
    return [signal for _, signal in collected]


def detect_divergences(
    latest_close_row: Mapping[str, int],
    max_results: int = DEFAULT_THRESHOLDS.max_divergences,
    rules: Sequence[DivergenceRule] = DIVERGENCE_RULES,
) -> list[DivergenceSignal]:
    """Leader/laggard index pairs pulling apart, highest confidence first."""
    divergences: list[DivergenceSignal] = []
    for rule in rules:
        leader_days = latest_close_row.get(rule.leader)
        laggard_days = latest_close_row.get(rule.laggard)
        if leader_days is None or laggard_days is None:
            continue
        if leader_days <= rule.leader_threshold and laggard_days >= rule.laggard_threshold:
            divergences.append(
                DivergenceSignal(
                    type=rule.type,
                    title=rule.title,
                    description=rule.description,
                    confidence=rule.confidence,
                    leader=rule.leader,
                    laggard=rule.laggard,
                    leader_days=leader_days,
                    laggard_days=laggard_days,
                )
            )
    divergences.sort(key=lambda signal: _CONFIDENCE_ORDER[signal.confidence])
    return divergences[:max_results]


def summarize(
    close_metrics: MetricsBySymbol,
    intraday_metrics: MetricsBySymbol,
    dates: Sequence[date] | None = None,
    thresholds: Thresholds | None = None,
) -> SignalSummary | None:
    """Regime, confirmations, rejections and divergences at the latest row.

    Returns ``None`` when there is no row to read.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    total_rows = len(dates) if dates is not None else max(_row_count(close_metrics), _row_count(intraday_metrics))
    if total_rows == 0:
        return None

    latest_index = total_rows - 1
    latest_date = dates[latest_index] if dates is not None else None
    latest_high_row = extract_row(intraday_metrics, latest_index)
    latest_close_row = extract_row(close_metrics, latest_index)

    breadth = compute_breadth_stats(latest_close_row, thresholds)
    regime = compute_regime(breadth, thresholds)
    confirmations = detect_confirmations(latest_high_row, latest_close_row, latest_date)
    rejections = detect_rejections(latest_high_row, latest_close_row, latest_date, thresholds)
    recent = compute_recent_rejection_rate(intraday_metrics, close_metrics, dates, thresholds)

    return SignalSummary(
        regime=regime,
        confirmations=confirmations,
        rejections=rejections,
        recent_rejection_rate=recent.rate,
        total_recent_sessions=recent.sessions,
        divergences=detect_divergences(latest_close_row, thresholds.max_divergences),
    )
