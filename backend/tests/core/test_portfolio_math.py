"""Portfolio Math — valuation, gains, conversion and the portfolio summary.

Tests:
    - current_price falls back to purchase_price
    - Zero denominators give 0, not errors
    - Conversion routes through USD and is identity without rates
    - Summary totals and per-type buckets in the base currency
"""

from datetime import datetime, timezone

import pytest

from finanwas.core.portfolio_math import (
    calculate_asset_distribution, calculate_asset_gain, calculate_compound_interest,
    calculate_portfolio_gain, calculate_portfolio_total, calculate_roi,
    calculate_weighted_average, convert_amount, snapshot_breakdown, summarize_portfolio,
)
from tests.core.fakes import FakeAsset

RATES = {"USD": 1.0, "ARS": 1000.0, "EUR": 0.9}


def test_total_uses_purchase_price_without_quote():
    assets = [
        FakeAsset(quantity=10, purchase_price=100, current_price=120),
        FakeAsset(quantity=2, purchase_price=50),
    ]
    assert calculate_portfolio_total(assets) == 1300


def test_portfolio_gain_fraction():
    gain, fraction = calculate_portfolio_gain([
        FakeAsset(quantity=10, purchase_price=100, current_price=150),
    ])
    assert gain == 500
    assert fraction == pytest.approx(0.5)


def test_zero_cost_yields_zero_fraction():
    assert calculate_portfolio_gain([]) == (0.0, 0.0)
    assert calculate_asset_gain(0, 100, 120) == (0.0, 0.0)
    assert calculate_roi(100, 0) == 0.0


def test_asset_gain_and_roi():
    gain, fraction = calculate_asset_gain(4, 25, 20)
    assert gain == -20
    assert fraction == pytest.approx(-0.2)
    assert calculate_roi(110, 100) == pytest.approx(0.1)


def test_weighted_average():
    assert calculate_weighted_average([(10, 1), (20, 3)]) == pytest.approx(17.5)
    assert calculate_weighted_average([]) == 0.0


def test_distribution_by_type():
    dist = calculate_asset_distribution([
        FakeAsset(type="Acción", quantity=3, purchase_price=100),
        FakeAsset(type="Bono", quantity=1, purchase_price=100),
    ])
    assert dist == {"Acción": pytest.approx(0.75), "Bono": pytest.approx(0.25)}
    assert calculate_asset_distribution([]) == {}


def test_compound_interest_monthly():
    assert calculate_compound_interest(1000, 0.12, 1) == pytest.approx(1126.825, rel=1e-4)


def test_convert_amount_via_usd():
    assert convert_amount(10, "USD", "ARS", RATES) == pytest.approx(10_000)
    assert convert_amount(50_000, "ARS", "USD", RATES) == pytest.approx(50)
    assert convert_amount(100, "USD", "USD", RATES) == 100


def test_convert_amount_identity_without_rates():
    assert convert_amount(100, "USD", "ARS", None) == 100
    assert convert_amount(100, "USD", "ARS", {}) == 100


def test_summarize_portfolio_in_base_currency():
    updated = datetime(2026, 3, 1, 12, tzinfo=timezone.utc)
    assets = [
        FakeAsset(
            type="Acción", currency="USD", quantity=10, purchase_price=100,
            current_price=120, current_price_updated_at=updated,
        ),
        FakeAsset(type="Plazo Fijo", currency="ARS", quantity=1, purchase_price=50_000),
    ]
    summary = summarize_portfolio(assets, "ARS", RATES)

    assert summary["currency"] == "ARS"
    assert summary["assetCount"] == 2
    assert summary["totalInvested"] == pytest.approx(1_050_000)
    assert summary["currentValue"] == pytest.approx(1_250_000)
    assert summary["gainLoss"] == pytest.approx(200_000)
    assert summary["gainLossPercentage"] == pytest.approx(200_000 / 1_050_000 * 100)
    assert summary["assetsByType"]["Acción"]["count"] == 1
    assert summary["assetsByType"]["Plazo Fijo"]["currentValue"] == pytest.approx(50_000)
    assert summary["lastUpdated"] == updated.isoformat()


def test_summarize_empty_portfolio():
    summary = summarize_portfolio([], "USD", RATES)
    assert summary["totalInvested"] == 0
    assert summary["currentValue"] == 0
    assert summary["gainLossPercentage"] == 0.0
    assert summary["assetsByType"] == {}
    assert summary["lastUpdated"] is None


def test_snapshot_breakdown_shape():
    summary = summarize_portfolio(
        [FakeAsset(type="ETF", quantity=2, purchase_price=10, current_price=15)], "USD", None,
    )
    assert snapshot_breakdown(summary) == {"ETF": {"count": 1, "value": 30, "cost": 20}}
