"""Portfolio Health Score — component weights, ratings and recommendations.

Tests:
    - Empty portfolio scores without dividing by zero
    - A diversified, aligned portfolio rates at the top
    - Concentration surfaces in recommendations with the percentage
    - Never more than 5 recommendations
"""

from datetime import datetime, timedelta, timezone

from finanwas.core.health_score import (
    asset_sector, average_volatility, calculate_health_score, rating_for,
)
from tests.core.fakes import FakeAsset, FakeProfile

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _asset(ticker, asset_type="Acción", **kw):
    defaults = dict(
        quantity=10, purchase_price=100, current_price=110,
        dividend_yield=3.0, updated_at=NOW - timedelta(days=1),
    )
    defaults.update(kw)
    return FakeAsset(type=asset_type, ticker=ticker, name=ticker or asset_type, **defaults)


def _diversified():
    return [
        _asset("AAPL"), _asset("JPM"), _asset("JNJ"), _asset("XOM"), _asset("NEE"),
        _asset("SPY", "ETF"), _asset(None, "Bono"), _asset(None, "Efectivo"),
    ]


def test_empty_portfolio_scores_safely():
    result = calculate_health_score([], None, NOW)
    data = result.to_dict()
    assert data["breakdown"]["performance"]["score"] == 0
    assert data["breakdown"]["diversification"]["details"]["assetCount"] == 0
    assert data["breakdown"]["riskManagement"]["score"] == 23
    assert data["totalScore"] == 34
    assert data["rating"] == "Necesita Mejoras"
    assert data["color"] == "red"
    assert len(data["recommendations"]) == 5
    assert data["recommendations"][0].startswith("Considera agregar más activos")


def test_diversified_aligned_portfolio_rates_excellent():
    result = calculate_health_score(_diversified(), FakeProfile(risk_tolerance="moderado"), NOW)
    assert result.total_score >= 85
    assert result.rating in ("Excelente", "Muy Bueno")
    assert result.breakdown["diversification"].score == 35
    assert result.breakdown["bestPractices"].score == 15
    assert result.breakdown["riskManagement"].details["riskAlignmentScore"] == 100
    assert len(result.recommendations) == 1
    assert result.recommendations[0].startswith("¡Excelente!")


def test_concentrated_portfolio_flags_largest_position():
    result = calculate_health_score([_asset("AAPL")], None, NOW)
    details = result.breakdown["diversification"].details
    assert details["maxConcentration"] == 100.0
    assert details["concentrationScore"] == 0
    assert len(result.recommendations) <= 5


def test_stale_portfolio_loses_contribution_points():
    stale = [_asset("AAPL", updated_at=NOW - timedelta(days=90))]
    result = calculate_health_score(stale, None, NOW)
    assert result.breakdown["bestPractices"].details["hasRecentActivity"] is False
    assert result.breakdown["bestPractices"].details["contributionScore"] == 50


def test_emergency_fund_from_profile():
    result = calculate_health_score(
        [_asset("AAPL")], FakeProfile(has_emergency_fund=True), NOW,
    )
    assert result.breakdown["bestPractices"].details["hasEmergencyFund"] is True


def test_sector_lookup_falls_back_to_type():
    assert asset_sector(FakeAsset(ticker="msft")) == "Technology"
    assert asset_sector(FakeAsset(type="Crypto", ticker="BTC")) == "Cryptocurrency"
    assert asset_sector(FakeAsset(type="Acción", ticker="GGAL")) == "Acción"


def test_average_volatility_weighted_by_value():
    assets = [
        FakeAsset(type="Efectivo", quantity=1, purchase_price=100),
        FakeAsset(type="Crypto", quantity=1, purchase_price=100),
    ]
    assert average_volatility(assets) == 2.5
    assert average_volatility([]) == 0.0


def test_cedear_uses_its_own_weight():
    assert average_volatility([FakeAsset(type="Cedear", quantity=1, purchase_price=50)]) == 3
    assert average_volatility([FakeAsset(type="Desconocido", quantity=1, purchase_price=50)]) == 2


def test_rating_thresholds():
    assert rating_for(90) == ("Excelente", "green")
    assert rating_for(75) == ("Muy Bueno", "lightgreen")
    assert rating_for(60) == ("Bueno", "yellow")
    assert rating_for(40) == ("Regular", "orange")
    assert rating_for(39) == ("Necesita Mejoras", "red")
