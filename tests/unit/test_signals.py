"""Unit tests for breakout, regime and divergence signals."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from market_extremes.common.enums import Confidence, RegimeLabel, RejectionSeverity
from market_extremes.engines.signals import (
    BreadthStats,
    compute_breadth_stats,
    compute_recent_rejection_rate,
    compute_regime,
    detect_confirmations,
    detect_divergences,
    detect_rejections,
    extract_latest_row,
    get_all_recent_rejections,
    rejection_severity,
    summarize,
)
from market_extremes.engines.types import RollingMetric


def _metric(days_since_high: int) -> RollingMetric:
    return RollingMetric(
        days_since_high=days_since_high,
        days_since_low=10,
        pct_from_high=float(days_since_high),
        pct_from_low=5.0,
        rolling_high=110.0,
        rolling_low=90.0,
        current_value=100.0,
    )


def _latest(rows: dict[str, int | None]) -> dict[str, list[RollingMetric | None]]:
    return {symbol: [None if days is None else _metric(days)] for symbol, days in rows.items()}


def test_summarize_returns_none_without_rows() -> None:
    assert summarize({}, {}) is None
    assert summarize({"SPX": []}, {"SPX": []}) is None


def test_confirmation_and_rejection() -> None:
    close = _latest({"SPX": 0, "NDX": 4, "DJI": 7})
    intraday = _latest({"SPX": 0, "NDX": 0, "DJI": 7})

    summary = summarize(close, intraday, dates=[date(2024, 6, 3)])

    assert summary.confirmed_symbols == ["SPX"]
    assert summary.confirmations[0].date == date(2024, 6, 3)
    assert summary.rejected_symbols == ["NDX"]
    rejection = summary.rejections[0]
    assert rejection.delta == 4
    assert rejection.severity is RejectionSeverity.NOTABLE


@pytest.mark.parametrize(
    ("rows", "label", "confidence"),
    [
        ({"A": 0, "B": 1, "C": 2, "D": 3, "E": 20}, RegimeLabel.RISK_ON, Confidence.HIGH),
        ({"A": 0, "B": 1, "C": 2, "D": 8, "E": 20}, RegimeLabel.RISK_ON, Confidence.MEDIUM),
        ({"A": 15, "B": 16, "C": 30, "D": 8, "E": 1}, RegimeLabel.RISK_OFF, Confidence.MEDIUM),
        ({"A": 0, "B": 1, "C": 15, "D": 16, "E": 8}, RegimeLabel.NARROW_MIXED, Confidence.LOW),
    ],
)
def test_regime_thresholds(rows: dict[str, int], label: RegimeLabel, confidence: Confidence) -> None:
    stats = compute_breadth_stats(rows)
    regime = compute_regime(stats)

    assert regime.label is label
    assert regime.confidence is confidence
    assert stats.hot_count + stats.cold_count + stats.neutral_count == stats.total == 5


def test_regime_with_no_symbols_is_mixed() -> None:
    regime = compute_regime(BreadthStats(hot_count=0, cold_count=0, neutral_count=0, total=0))

    assert regime.label is RegimeLabel.NARROW_MIXED
    assert regime.confidence is Confidence.LOW


def test_symbols_without_latest_bar_are_skipped() -> None:
    close = _latest({"SPX": 0, "NDX": 1, "RUT": None})
    summary = summarize(close, close)

    assert summary.regime.breadth.total == 2
    assert summary.regime.label is RegimeLabel.RISK_ON
    assert extract_latest_row(close) == {"SPX": 0, "NDX": 1}


@pytest.mark.parametrize(
    ("delta", "severity"),
    [(1, RejectionSeverity.MILD), (2, RejectionSeverity.MILD), (3, RejectionSeverity.NOTABLE),
     (5, RejectionSeverity.NOTABLE), (6, RejectionSeverity.STRONG)],
)
def test_rejection_severity(delta: int, severity: RejectionSeverity) -> None:
    assert rejection_severity(delta) is severity


def test_rejections_sorted_by_severity_then_delta() -> None:
    high_row = {"A": 0, "B": 0, "C": 0, "D": 0}
    close_row = {"A": 1, "B": 9, "C": 4, "D": 12}

    rejections = detect_rejections(high_row, close_row)

    assert [r.symbol for r in rejections] == ["D", "B", "C", "A"]
    assert detect_confirmations(high_row, close_row) == []


def test_divergences_sorted_and_capped() -> None:
    row = {"SPX": 1, "RUT": 20, "NDX": 2, "DJI": 12, "SOX": 0, "IXIC": 3}

    divergences = detect_divergences(row)

    assert [d.type for d in divergences] == ["small-caps-lagging", "growth-leading", "breadth-divergence"]
    assert [d.confidence for d in divergences] == [Confidence.HIGH, Confidence.MEDIUM, Confidence.LOW]
    assert divergences[0].leader_days == 1
    assert divergences[0].laggard_days == 20
    assert len(detect_divergences(row, max_results=2)) == 2


def test_divergence_needs_both_legs() -> None:
    assert detect_divergences({"SPX": 0}) == []
    assert detect_divergences({"SPX": 4, "RUT": 30}) == []


def test_recent_rejection_rate_uses_last_sessions() -> None:
    rows = 12
    dates = [date(2024, 1, 1) + timedelta(days=i) for i in range(rows)]
    close_days = [0] * rows
    for index in (0, 3, 11):
        close_days[index] = 4
    intraday = {"SPX": [_metric(0) for _ in range(rows)]}
    close = {"SPX": [_metric(days) for days in close_days]}

    rate = compute_recent_rejection_rate(intraday, close, dates)

    assert rate.sessions == 10
    assert rate.count == 2
    assert rate.rate == pytest.approx(0.2)

    recent = get_all_recent_rejections(intraday, close, dates)
    assert [r.date for r in recent] == [dates[11], dates[3]]

    summary = summarize(close, intraday, dates)
    assert summary.recent_rejection_rate == pytest.approx(0.2)
    assert summary.total_recent_sessions == 10
    assert summary.rejected_symbols == ["SPX"]
