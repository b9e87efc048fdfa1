"""Performance — period windows, chart points and change metrics over snapshots.

Invariants:
    - period_start("ALL") is None (no lower bound)
    - Chart points are in the snapshots' order (callers pass them ascending)
    - Metrics over fewer than two snapshots report zero change
"""

from collections.abc import Sequence
from datetime import date, timedelta

from finanwas.core.domain_types import PerformancePeriod
from finanwas.core.repository_protocols import SnapshotLike

_PERIOD_DAYS = {
    PerformancePeriod.ONE_MONTH: 30,
    PerformancePeriod.THREE_MONTHS: 90,
    PerformancePeriod.SIX_MONTHS: 180,
    PerformancePeriod.ONE_YEAR: 365,
}

INVALID_PERIOD_MESSAGE = "Período inválido. Opciones válidas: 1M, 3M, 6M, 1Y, ALL"


def parse_period(value: str | None) -> PerformancePeriod:
    """Parse a period string. Raises ValueError on anything unknown."""
    return PerformancePeriod(value or PerformancePeriod.ALL.value)


def period_start(period: PerformancePeriod, today: date) -> date | None:
    days = _PERIOD_DAYS.get(period)
    return today - timedelta(days=days) if days else None


def chart_points(snapshots: Sequence[SnapshotLike]) -> list[dict]:
    return [
        {
            "date": s.snapshot_date.isoformat(),
            "value": s.total_value,
            "cost": s.total_cost,
            "gainLoss": s.total_gain_loss,
            "gainLossPercentage": s.gain_loss_percentage,
        }
        for s in snapshots
    ]


def performance_metrics(snapshots: Sequence[SnapshotLike]) -> dict:
    """First/last value, absolute and percent change, best and worst day."""
    if not snapshots:
        return {
            "startValue": 0.0, "endValue": 0.0,
            "absoluteChange": 0.0, "percentChange": 0.0,
            "bestDay": None, "worstDay": None,
        }

    start = snapshots[0].total_value
    end = snapshots[-1].total_value
    best = None
    worst = None
    for prev, cur in zip(snapshots, snapshots[1:]):
        change = cur.total_value - prev.total_value
        day = {"date": cur.snapshot_date.isoformat(), "change": change}
        if best is None or change > best["change"]:
            best = day
        if worst is None or change < worst["change"]:
            worst = day

    return {
        "startValue": start,
        "endValue": end,
        "absoluteChange": end - start,
        "percentChange": (end - start) / start * 100 if start > 0 else 0.0,
        "bestDay": best,
        "worstDay": worst,
    }
