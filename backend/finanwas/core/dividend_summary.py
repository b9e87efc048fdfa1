"""Dividend Summary — pure aggregation of a user's dividend payments.

Invariants:
    - Year boundaries use the payment_date calendar year relative to `today`
    - by_month keys are "YYYY-MM"; by_asset keyed by str(asset_id)
    - average_per_payment is 0 for an empty list
"""

from collections.abc import Callable, Sequence
from datetime import date

from finanwas.core.repository_protocols import DividendLike


def summarize_dividends(
    payments: Sequence[DividendLike],
    today: date,
    asset_info: Callable[[object], tuple[str, str | None]] | None = None,
) -> dict:
    """Aggregate payments. asset_info(asset_id) -> (name, ticker) labels by_asset rows."""
    total = 0.0
    ytd = 0.0
    last_year = 0.0
    withholding = 0.0
    reinvested = 0.0
    by_asset: dict[str, dict] = {}
    by_month: dict[str, float] = {}

    for p in payments:
        amount = p.total_amount
        total += amount
        withholding += p.withholding_tax or 0.0
        if p.reinvested:
            reinvested += amount
        if p.payment_date.year == today.year:
            ytd += amount
        elif p.payment_date.year == today.year - 1:
            last_year += amount

        key = str(p.asset_id)
        if key not in by_asset:
            name, ticker = asset_info(p.asset_id) if asset_info else ("", None)
            by_asset[key] = {
                "assetName": name,
                "ticker": ticker,
                "totalAmount": 0.0,
                "paymentCount": 0,
                "lastPaymentDate": None,
            }
        row = by_asset[key]
        row["totalAmount"] += amount
        row["paymentCount"] += 1
        paid = p.payment_date.isoformat()
        if row["lastPaymentDate"] is None or paid > row["lastPaymentDate"]:
            row["lastPaymentDate"] = paid

        month = p.payment_date.strftime("%Y-%m")
        by_month[month] = by_month.get(month, 0.0) + amount

    return {
        "totalReceived": total,
        "totalYTD": ytd,
        "totalLastYear": last_year,
        "totalWithholdingTax": withholding,
        "averagePerPayment": total / len(payments) if payments else 0.0,
        "paymentCount": len(payments),
        "byAsset": by_asset,
        "byMonth": dict(sorted(by_month.items())),
        "totalReinvested": reinvested,
    }


def income_in_range(
    payments: Sequence[DividendLike], start: date, end: date,
) -> float:
    return sum(p.total_amount for p in payments if start <= p.payment_date <= end)
