"""Portfolio Math — pure valuation, gain and currency-conversion arithmetic.

Invariants:
    - Current value falls back to purchase_price when current_price is None
    - Percentages are 0 (never NaN/inf) when the denominator is 0
    - convert_amount() routes through USD; unknown currencies use rate 1
    - summarize_portfolio() on an empty list returns all-zero totals

Design Decisions:
    - Rates passed in (USD-based dict) instead of fetched: no IO in core;
      None means "rates unavailable" and every conversion becomes identity
    - Ratios returned as fractions (0.25), summary percentages as 0-100
"""

from collections.abc import Iterable, Sequence

from finanwas.core.dates import ensure_utc
from finanwas.core.repository_protocols import AssetLike


def asset_price(asset: AssetLike) -> float:
    return asset.current_price if asset.current_price is not None else asset.purchase_price


def asset_cost(asset: AssetLike) -> float:
    return asset.quantity * asset.purchase_price


def asset_value(asset: AssetLike) -> float:
    return asset.quantity * asset_price(asset)


def calculate_roi(current_value: float, initial_value: float) -> float:
    if initial_value == 0:
        return 0.0
    return (current_value - initial_value) / initial_value


def calculate_portfolio_total(assets: Iterable[AssetLike]) -> float:
    return sum(asset_value(a) for a in assets)


def calculate_portfolio_gain(assets: Iterable[AssetLike]) -> tuple[float, float]:
    """Return (total_gain, total_gain_fraction)."""
    total_cost = 0.0
    total_value = 0.0
    for asset in assets:
        total_cost += asset_cost(asset)
        total_value += asset_value(asset)
    gain = total_value - total_cost
    return gain, (gain / total_cost if total_cost > 0 else 0.0)


def calculate_asset_gain(
    quantity: float, purchase_price: float, current_price: float | None = None,
) -> tuple[float, float]:
    """Return (gain, gain_fraction) for a single position."""
    price = current_price if current_price is not None else purchase_price
    cost = quantity * purchase_price
    gain = quantity * price - cost
    return gain, (gain / cost if cost > 0 else 0.0)


def calculate_weighted_average(pairs: Iterable[tuple[float, float]]) -> float:
    """Weighted mean of (value, weight) pairs; 0 when total weight is 0."""
    pairs = list(pairs)
    total_weight = sum(w for _, w in pairs)
    if total_weight == 0:
        return 0.0
    return sum(v * w for v, w in pairs) / total_weight


def calculate_asset_distribution(assets: Sequence[AssetLike]) -> dict[str, float]:
    """Fraction of total value per asset type. Empty when total is 0."""
    total = calculate_portfolio_total(assets)
    if total == 0:
        return {}
    distribution: dict[str, float] = {}
    for asset in assets:
        distribution[asset.type] = distribution.get(asset.type, 0.0) + asset_value(asset)
    return {k: v / total for k, v in distribution.items()}


def calculate_compound_interest(
    principal: float, rate: float, years: float, compounding_frequency: int = 12,
) -> float:
    return principal * (1 + rate / compounding_frequency) ** (compounding_frequency * years)


def convert_amount(
    amount: float, from_currency: str, to_currency: str,
    rates: dict[str, float] | None,
) -> float:
    """Convert via USD-based rates. Identity when rates are unavailable."""
    if from_currency == to_currency or not rates:
        return amount
    from_rate = rates.get(from_currency, 1.0) or 1.0
    to_rate = rates.get(to_currency, 1.0)
    return amount / from_rate * to_rate


def summarize_portfolio(
    assets: Sequence[AssetLike],
    base_currency: str,
    rates: dict[str, float] | None,
) -> dict:
    """Totals, per-type breakdown and gain/loss expressed in base_currency."""
    total_invested = 0.0
    total_current = 0.0
    by_type: dict[str, dict] = {}
    last_updated = None

    for asset in assets:
        invested = convert_amount(asset_cost(asset), asset.currency, base_currency, rates)
        current = convert_amount(asset_value(asset), asset.currency, base_currency, rates)
        total_invested += invested
        total_current += current

        bucket = by_type.setdefault(
            asset.type, {"count": 0, "invested": 0.0, "currentValue": 0.0},
        )
        bucket["count"] += 1
        bucket["invested"] += invested
        bucket["currentValue"] += current

        updated = ensure_utc(asset.current_price_updated_at)
        if updated and (last_updated is None or updated > last_updated):
            last_updated = updated

    gain_loss = total_current - total_invested
    return {
        "currency": base_currency,
        "assetCount": len(assets),
        "totalInvested": total_invested,
        "currentValue": total_current,
        "gainLoss": gain_loss,
        "gainLossPercentage": (
            gain_loss / total_invested * 100 if total_invested > 0 else 0.0
        ),
        "assetsByType": by_type,
        "lastUpdated": last_updated.isoformat() if last_updated else None,
    }


def snapshot_breakdown(summary: dict) -> dict[str, dict]:
    """Reshape summary assetsByType into the persisted {count, value, cost} form."""
    return {
        asset_type: {
            "count": data["count"],
            "value": data["currentValue"],
            "cost": data["invested"],
        }
        for asset_type, data in summary["assetsByType"].items()
    }
