"""Performance — period parsing, windows and change metrics."""

from datetime import date

import pytest

from finanwas.core.domain_types import PerformancePeriod
from finanwas.core.performance import (
    chart_points, parse_period, performance_metrics, period_start,
)
from tests.core.fakes import FakeSnapshot


def test_parse_period_defaults_to_all():
    assert parse_period(None) == PerformancePeriod.ALL
    assert parse_period("6M") == PerformancePeriod.SIX_MONTHS


def test_parse_period_rejects_unknown():
    with pytest.raises(ValueError):
        parse_period("2W")


def test_period_start_windows():
    today = date(2026, 3, 31)
    assert period_start(PerformancePeriod.ONE_MONTH, today) == date(2026, 3, 1)
    assert period_start(PerformancePeriod.ONE_YEAR, today) == date(2025, 3, 31)
    assert period_start(PerformancePeriod.ALL, today) is None


def test_metrics_over_snapshots():
    snapshots = [
        FakeSnapshot(date(2026, 3, 1), 100),
        FakeSnapshot(date(2026, 3, 2), 110),
        FakeSnapshot(date(2026, 3, 3), 105),
        FakeSnapshot(date(2026, 3, 4), 120),
    ]
    metrics = performance_metrics(snapshots)
    assert metrics["startValue"] == 100
    assert metrics["endValue"] == 120
    assert metrics["absoluteChange"] == 20
    assert metrics["percentChange"] == pytest.approx(20)
    assert metrics["bestDay"] == {"date": "2026-03-04", "change": 15}
    assert metrics["worstDay"] == {"date": "2026-03-03", "change": -5}


def test_metrics_without_snapshots():
    metrics = performance_metrics([])
    assert metrics["percentChange"] == 0.0
    assert metrics["bestDay"] is None


def test_single_snapshot_has_no_change():
    metrics = performance_metrics([FakeSnapshot(date(2026, 3, 1), 100)])
    assert metrics["absoluteChange"] == 0
    assert metrics["bestDay"] is None


def test_chart_points_keep_order():
    points = chart_points([
        FakeSnapshot(date(2026, 3, 1), 100, 90, 10, 11.1),
        FakeSnapshot(date(2026, 3, 2), 95, 90, 5, 5.5),
    ])
    assert [p["date"] for p in points] == ["2026-03-01", "2026-03-02"]
    assert points[0] == {
        "date": "2026-03-01", "value": 100, "cost": 90,
        "gainLoss": 10, "gainLossPercentage": 11.1,
    }
