"""Portfolio Health Score — pure 0-100 rating over four weighted components.

Invariants:
    - Components are pre-weighted: diversification 35, risk 30, performance 20,
      best practices 15; total_score is the rounded sum
    - Empty portfolio never divides by zero
    - At most 5 recommendations, never zero (positive fallback message)

Design Decisions:
    - Lookup tables at module level: thresholds readable at a glance
    - Value uses `current_price or purchase_price` (a 0 price counts as unknown)
    - `now` injectable so the 30-day activity window is testable
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta, timezone
from collections.abc import Sequence

from finanwas.core.dates import ensure_utc
from finanwas.core.repository_protocols import AssetLike, ProfileLike
from finanwas.core.rounding import round_half_up

ASSET_SECTORS: dict[str, tuple[str, ...]] = {
    "Technology": ("AAPL", "MSFT", "GOOGL", "META", "NVDA", "AMD", "INTC", "CSCO"),
    "Finance": ("JPM", "BAC", "WFC", "GS", "MS", "C", "BLK", "V", "MA"),
    "Healthcare": ("JNJ", "UNH", "PFE", "ABBV", "TMO", "MRK", "LLY", "DHR"),
    "Consumer": ("AMZN", "TSLA", "WMT", "HD", "MCD", "NKE", "SBUX", "TGT"),
    "Energy": ("XOM", "CVX", "COP", "SLB", "EOG", "MPC", "PSX", "VLO"),
    "Real Estate": ("AMT", "PLD", "CCI", "EQIX", "PSA", "DLR", "SPG", "O"),
    "Utilities": ("NEE", "DUK", "SO", "D", "AEP", "EXC", "SRE", "XEL"),
    "Materials": ("LIN", "APD", "ECL", "SHW", "NEM", "FCX", "NUE", "DD"),
    "Industrials": ("BA", "HON", "UNP", "UPS", "RTX", "LMT", "CAT", "GE"),
    "Communications": ("T", "VZ", "TMUS", "DIS", "CMCSA", "NFLX", "CHTR"),
}

DEFAULT_TYPE_SECTORS: dict[str, str] = {
    "Crypto": "Cryptocurrency",
    "Efectivo": "Cash",
    "Bono": "Fixed Income",
    "ON": "Fixed Income",
    "Plazo Fijo": "Fixed Income",
    "Fondo Común": "Mixed",
    "ETF": "Mixed",
    "Otro": "Other",
}

VOLATILITY_WEIGHTS: dict[str, float] = {
    "Efectivo": 0,
    "Plazo Fijo": 0,
    "Bono": 1,
    "ON": 1,
    "Fondo Común": 2,
    "Acción": 3,
    "ETF": 2,
    "Cedear": 3,
    "Crypto": 5,
    "Otro": 2,
}
DEFAULT_VOLATILITY = 2

EXPECTED_VOLATILITY: dict[str, tuple[float, float]] = {
    "conservador": (0.0, 1.5),
    "moderado": (1.0, 3.0),
    "agresivo": (2.0, 5.0),
}

RATINGS: tuple[tuple[int, str, str], ...] = (
    (90, "Excelente", "green"),
    (75, "Muy Bueno", "lightgreen"),
    (60, "Bueno", "yellow"),
    (40, "Regular", "orange"),
)


@dataclass
class ComponentScore:
    score: int
    details: dict = field(default_factory=dict)


@dataclass
class HealthScoreResult:
    total_score: int
    rating: str
    color: str
    breakdown: dict[str, ComponentScore]
    recommendations: list[str]

    def to_dict(self) -> dict:
        return {
            "totalScore": self.total_score,
            "rating": self.rating,
            "color": self.color,
            "breakdown": {k: asdict(v) for k, v in self.breakdown.items()},
            "recommendations": self.recommendations,
        }


def _value(asset: AssetLike) -> float:
    return asset.quantity * (asset.current_price or asset.purchase_price)


def asset_sector(asset: AssetLike) -> str:
    if asset.ticker:
        ticker = asset.ticker.upper()
        for sector, tickers in ASSET_SECTORS.items():
            if ticker in tickers:
                return sector
    return DEFAULT_TYPE_SECTORS.get(asset.type, asset.type)


def _asset_count_score(n: int) -> int:
    if n == 0:
        return 0
    if n < 3:
        return 20
    if n < 5:
        return 40
    if n < 8:
        return 60
    if n <= 20:
        return 100
    return max(80, 100 - (n - 20) * 2)


def _max_allocation(assets: Sequence[AssetLike]) -> float:
    total = sum(_value(a) for a in assets)
    if total <= 0:
        return 0.0
    return max(_value(a) / total * 100 for a in assets)


def score_diversification(assets: Sequence[AssetLike]) -> ComponentScore:
    asset_count = len(assets)
    asset_count_score = _asset_count_score(asset_count)

    sector_count = len({asset_sector(a) for a in assets})
    sector_score = (0, 20, 40, 60, 80, 100)[min(sector_count, 5)]

    type_count = len({a.type for a in assets})
    type_score = (0, 30, 60, 80, 100)[min(type_count, 4)]

    max_concentration = _max_allocation(assets) if assets else 0.0
    concentration_score = 100
    if assets and max_concentration > 0:
        if max_concentration > 50:
            concentration_score = 0
        elif max_concentration > 40:
            concentration_score = 30
        elif max_concentration > 30:
            concentration_score = 60
        elif max_concentration > 20:
            concentration_score = 80

    score = (
        asset_count_score * 0.4
        + sector_score * 0.3
        + type_score * 0.2
        + concentration_score * 0.1
    ) * 0.35
    return ComponentScore(round_half_up(score), {
        "assetCount": asset_count,
        "assetCountScore": asset_count_score,
        "sectorCount": sector_count,
        "sectorDiversityScore": sector_score,
        "assetTypeCount": type_count,
        "assetTypeDiversityScore": type_score,
        "maxConcentration": round_half_up(max_concentration, 1),
        "concentrationScore": concentration_score,
    })


def average_volatility(assets: Sequence[AssetLike]) -> float:
    total = 0.0
    weighted = 0.0
    for asset in assets:
        value = _value(asset)
        total += value
        weighted += value * VOLATILITY_WEIGHTS.get(asset.type, DEFAULT_VOLATILITY)
    return weighted / total if total > 0 else 0.0


def score_risk(
    assets: Sequence[AssetLike], profile: ProfileLike | None,
) -> ComponentScore:
    avg = average_volatility(assets)
    volatility_score = max(0.0, min(100.0, 100 - avg * 20))

    alignment = 50.0
    has_profile = False
    if profile is not None and profile.risk_tolerance:
        has_profile = True
        expected = EXPECTED_VOLATILITY.get(profile.risk_tolerance)
        if expected:
            low, high = expected
            if low <= avg <= high:
                alignment = 100.0
            elif avg < low:
                alignment = max(60.0, 100 - (low - avg) * 15)
            else:
                alignment = max(30.0, 100 - (avg - high) * 20)

    score = (volatility_score * 0.5 + alignment * 0.5) * 0.30
    return ComponentScore(round_half_up(score), {
        "volatilityScore": round_half_up(volatility_score),
        "riskAlignmentScore": round_half_up(alignment),
        "hasRiskProfile": has_profile,
    })


def _total_return_score(pct: float) -> float:
    if pct >= 20:
        return 100
    if pct >= 10:
        return 85
    if pct >= 5:
        return 70
    if pct >= 0:
        return 50 + pct * 4
    if pct >= -5:
        return 50 + pct * 5
    if pct >= -10:
        return 25
    return max(0.0, 25 + (pct + 10))


def _dividend_yield_score(avg_yield: float) -> int:
    if avg_yield >= 5:
        return 100
    if avg_yield >= 3:
        return 80
    if avg_yield >= 2:
        return 60
    if avg_yield >= 1:
        return 40
    if avg_yield > 0:
        return 20
    return 0


def score_performance(assets: Sequence[AssetLike]) -> ComponentScore:
    if not assets:
        return ComponentScore(0, {
            "positiveAssetsCount": 0,
            "totalAssetsCount": 0,
            "positiveReturnsRatio": 0,
            "totalReturnPercentage": 0,
            "totalReturnScore": 0,
            "avgDividendYield": 0,
            "dividendYieldScore": 0,
        })

    positive = 0
    invested = 0.0
    current = 0.0
    for asset in assets:
        cost = asset.quantity * asset.purchase_price
        value = _value(asset)
        invested += cost
        current += value
        if value > cost:
            positive += 1

    ratio = positive / len(assets) * 100
    total_return = (current - invested) / invested * 100 if invested > 0 else 0.0
    return_score = _total_return_score(total_return)

    yields = [a.dividend_yield for a in assets if a.dividend_yield and a.dividend_yield > 0]
    avg_yield = sum(yields) / len(yields) if yields else 0.0
    yield_score = _dividend_yield_score(avg_yield)

    score = (ratio * 0.4 + return_score * 0.3 + yield_score * 0.3) * 0.20
    return ComponentScore(round_half_up(score), {
        "positiveAssetsCount": positive,
        "totalAssetsCount": len(assets),
        "positiveReturnsRatio": round_half_up(ratio, 1),
        "totalReturnPercentage": round_half_up(total_return, 2),
        "totalReturnScore": round_half_up(return_score),
        "avgDividendYield": round_half_up(avg_yield, 2),
        "dividendYieldScore": yield_score,
    })


def score_best_practices(
    assets: Sequence[AssetLike],
    profile: ProfileLike | None,
    now: datetime | None = None,
) -> ComponentScore:
    now = now or datetime.now(timezone.utc)
    has_emergency_fund = any(
        a.type == "Efectivo" and a.quantity > 0 for a in assets
    ) or bool(profile is not None and profile.has_emergency_fund)
    emergency_score = 100 if has_emergency_fund else 0

    cutoff = now - timedelta(days=30)
    has_recent = any(
        (ensure_utc(a.updated_at) or cutoff - timedelta(days=1)) >= cutoff
        for a in assets
    )
    contribution_score = 100 if has_recent else 50

    meets_target = True
    rebalancing_score = 100
    if assets:
        max_alloc = _max_allocation(assets)
        if max_alloc > 40:
            meets_target = False
            rebalancing_score = 50
        elif max_alloc > 30:
            meets_target = False
            rebalancing_score = 75

    score = (
        emergency_score * 0.4 + contribution_score * 0.3 + rebalancing_score * 0.3
    ) * 0.15
    return ComponentScore(round_half_up(score), {
        "hasEmergencyFund": has_emergency_fund,
        "emergencyFundScore": emergency_score,
        "hasRecentActivity": has_recent,
        "contributionScore": contribution_score,
        "diversificationMeetsTarget": meets_target,
        "rebalancingScore": rebalancing_score,
    })


def rating_for(score: int) -> tuple[str, str]:
    for threshold, rating, color in RATINGS:
        if score >= threshold:
            return rating, color
    return "Necesita Mejoras", "red"


def build_recommendations(breakdown: dict[str, ComponentScore]) -> list[str]:
    div = breakdown["diversification"].details
    risk = breakdown["riskManagement"].details
    perf = breakdown["performance"].details
    best = breakdown["bestPractices"].details
    recs: list[str] = []

    if div["assetCount"] < 5:
        recs.append(
            "Considera agregar más activos a tu portafolio. "
            "Un mínimo de 5-10 activos ayuda a reducir el riesgo."
        )
    if div["maxConcentration"] > 30:
        recs.append(
            f"Tu activo más grande representa {div['maxConcentration']}% del portafolio. "
            "Considera rebalancear para reducir la concentración."
        )
    if div["sectorCount"] < 3:
        recs.append(
            "Diversifica en más sectores para reducir el riesgo sectorial. "
            "Apunta a 3-5 sectores diferentes."
        )
    if div["assetTypeCount"] < 2:
        recs.append(
            "Considera diversificar en diferentes tipos de activos "
            "(acciones, ETFs, bonos) para mejor balance."
        )
    if not risk["hasRiskProfile"]:
        recs.append(
            "Completa tu perfil de inversor para recibir recomendaciones "
            "personalizadas sobre riesgo."
        )
    if risk["riskAlignmentScore"] < 70:
        recs.append(
            "Tu portafolio puede no estar alineado con tu tolerancia al riesgo. "
            "Revisa tus inversiones."
        )
    if perf["positiveReturnsRatio"] < 50:
        recs.append(
            "Más del 50% de tus activos están en pérdida. "
            "Considera revisar tu estrategia de inversión."
        )
    if perf["totalReturnPercentage"] < 0:
        recs.append(
            "Tu portafolio tiene retornos negativos. "
            "Evalúa si tus inversiones actuales siguen siendo apropiadas."
        )
    if perf["avgDividendYield"] == 0 and perf["totalAssetsCount"] > 0:
        recs.append(
            "Considera añadir activos que generen ingresos pasivos a través de dividendos."
        )
    if not best["hasEmergencyFund"]:
        recs.append(
            "Establece un fondo de emergencia antes de invertir agresivamente. "
            "Se recomienda 3-6 meses de gastos."
        )
    if not best["hasRecentActivity"]:
        recs.append(
            "No has actualizado tu portafolio recientemente. "
            "Considera revisar y ajustar tus inversiones regularmente."
        )
    if not best["diversificationMeetsTarget"]:
        recs.append(
            "Rebalancea tu portafolio para mantener una mejor distribución de activos."
        )

    if not recs:
        recs.append(
            "¡Excelente! Tu portafolio está bien diversificado y balanceado. "
            "Continúa monitoreando regularmente."
        )
    return recs[:5]


def calculate_health_score(
    assets: Sequence[AssetLike],
    profile: ProfileLike | None = None,
    now: datetime | None = None,
) -> HealthScoreResult:
    """Compute the full health score for a portfolio. Pure, no IO."""
    breakdown = {
        "diversification": score_diversification(assets),
        "riskManagement": score_risk(assets, profile),
        "performance": score_performance(assets),
        "bestPractices": score_best_practices(assets, profile, now),
    }
    total = round_half_up(sum(c.score for c in breakdown.values()))
    rating, color = rating_for(total)
    return HealthScoreResult(
        total_score=total,
        rating=rating,
        color=color,
        breakdown=breakdown,
        recommendations=build_recommendations(breakdown),
    )
