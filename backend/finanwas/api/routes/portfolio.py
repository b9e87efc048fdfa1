"""Portfolio Routes — assets CRUD, summary, prices, snapshots, performance, health, CSV.

Invariants:
    - Fixed sub-paths are registered before /{asset_id} so they never parse as ids
    - Summary currency defaults to the user's preferred currency, then ARS
    - Exchange rate outage degrades to unconverted sums, never to an error
    - Data-changing operations are audited after they commit
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import current_user, request_meta
from finanwas.core.csv_export import generate_portfolio_csv
from finanwas.core.dates import parse_iso_date, utc_today
from finanwas.core.domain_types import CURRENCIES, DEFAULT_CURRENCY
from finanwas.core.errors import ValidationFailedError
from finanwas.core.health_score import calculate_health_score
from finanwas.core.investor_type import calculate_investor_type
from finanwas.core.performance import (
    INVALID_PERIOD_MESSAGE, chart_points, parse_period, performance_metrics, period_start,
)
from finanwas.infrastructure.database import get_db
from finanwas.infrastructure.exchange_rates import ExchangeRateService, get_exchange_rate_service
from finanwas.infrastructure.stock_quotes import StockQuoteService, get_stock_quote_service
from finanwas.models.user import User
from finanwas.schemas.portfolio import AssetCreate, AssetUpdate, SnapshotRequest
from finanwas.services import audit_log
from finanwas.services.portfolio import PortfolioService
from finanwas.services.profiles import ProfileService
from finanwas.services.snapshots import SnapshotService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/portfolio", tags=["portfolio"])


async def _base_currency(db: AsyncSession, user: User, requested: str | None) -> str:
    if requested:
        currency = requested.strip().upper()
        if currency not in CURRENCIES:
            raise ValidationFailedError("Moneda inválida", field="currency")
        return currency
    profile = await ProfileService(db).get(user.id)
    return (profile.preferred_currency if profile else None) or DEFAULT_CURRENCY


@router.get("")
async def list_assets(
    currency: str | None = Query(None),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
    fx: ExchangeRateService = Depends(get_exchange_rate_service),
):
    service = PortfolioService(db)
    assets = await service.list_assets(user.id)
    base = await _base_currency(db, user, currency)
    return {
        "assets": [a.to_dict() for a in assets],
        "summary": await service.summary(user.id, base, await fx.get_rates()),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_asset(
    body: AssetCreate, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    asset = await PortfolioService(db).create_asset(user.id, body.model_dump())
    await audit_log.log_asset_change(
        db, user.id, "create", asset.id, request_meta(request),
        {"type": asset.type, "ticker": asset.ticker, "name": asset.name},
    )
    return {"asset": asset.to_dict()}


@router.post("/refresh-prices")
async def refresh_prices(
    request: Request,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
    quotes: StockQuoteService = Depends(get_stock_quote_service),
):
    result = await PortfolioService(db).refresh_prices(user.id, quotes)
    if result["updated"] or result["failed"]:
        await audit_log.log_price_refresh(
            db, user.id, result["updated"], result["failed"], request_meta(request),
        )
    return {"success": True, **result}


@router.post("/snapshot")
async def create_snapshot(
    body: SnapshotRequest | None = None,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
    fx: ExchangeRateService = Depends(get_exchange_rate_service),
):
    body = body or SnapshotRequest()
    snapshot_date = None
    if body.date:
        try:
            snapshot_date = parse_iso_date(body.date)
        except ValueError:
            raise ValidationFailedError("Fecha inválida", field="date")
    summary = await PortfolioService(db).summary(user.id, body.currency, await fx.get_rates())
    snapshot = await SnapshotService(db).save_snapshot(user.id, summary, snapshot_date)
    return {"success": True, "snapshot": snapshot.to_dict()}


@router.get("/performance")
async def performance(
    period: str = Query("ALL"),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        parsed = parse_period(period)
    except ValueError:
        raise ValidationFailedError(INVALID_PERIOD_MESSAGE, field="period")
    today = utc_today()
    snapshots = await SnapshotService(db).get_snapshots(
        user.id, period_start(parsed, today), today,
    )
    return {
        "period": parsed.value,
        "data": chart_points(snapshots),
        "metrics": performance_metrics(snapshots),
    }


@router.get("/health-score")
async def health_score(user: User = Depends(current_user), db: AsyncSession = Depends(get_db)):
    assets = await PortfolioService(db).list_assets(user.id)
    profile = await ProfileService(db).get(user.id)
    result = calculate_health_score(assets, profile)
    investor = calculate_investor_type(profile)
    return {
        **result.to_dict(),
        "investorType": investor.value if investor else None,
    }


@router.get("/export")
async def export_csv(
    request: Request, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    assets = await PortfolioService(db).list_assets(user.id)
    content = generate_portfolio_csv(assets)
    await audit_log.log_data_export(db, user.id, "csv", request_meta(request))
    filename = f"portfolio-{utc_today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{asset_id}")
async def get_asset(
    asset_id: UUID, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    asset = await PortfolioService(db).get_asset(user.id, asset_id)
    return {"asset": asset.to_dict()}


@router.put("/{asset_id}")
async def update_asset(
    asset_id: UUID, body: AssetUpdate, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True)
    asset = await PortfolioService(db).update_asset(user.id, asset_id, changes)
    await audit_log.log_asset_change(
        db, user.id, "update", asset.id, request_meta(request),
        {"fields": sorted(changes)},
    )
    return {"asset": asset.to_dict()}


@router.delete("/{asset_id}")
async def delete_asset(
    asset_id: UUID, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    asset = await PortfolioService(db).delete_asset(user.id, asset_id)
    await audit_log.log_asset_change(
        db, user.id, "delete", asset_id, request_meta(request),
        {"name": asset.name, "ticker": asset.ticker},
    )
    return {"success": True, "message": "Activo eliminado"}
