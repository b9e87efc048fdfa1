"""Dividend Routes — payment CRUD plus summary and date-range income."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import current_user, request_meta
from finanwas.core.dates import utc_today
from finanwas.core.errors import ValidationFailedError
from finanwas.infrastructure.database import get_db
from finanwas.models.user import User
from finanwas.schemas.portfolio import DividendCreate, DividendUpdate
from finanwas.services import audit_log
from finanwas.services.dividends import DividendService

router = APIRouter(prefix="/api/v1/dividends", tags=["dividends"])


@router.get("")
async def list_dividends(
    summary: bool = Query(False),
    asset_id: UUID | None = Query(None, alias="assetId"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    service = DividendService(db)
    payments = await service.list_payments(user.id, asset_id)
    result = {"dividends": [p.to_dict() for p in payments]}
    if summary:
        result["summary"] = await service.summary(user.id, utc_today())
    if start_date or end_date:
        start = start_date or date.min
        end = end_date or utc_today()
        if start > end:
            raise ValidationFailedError("Rango de fechas inválido", field="startDate")
        result["income"] = await service.income(user.id, start, end)
    return result


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_dividend(
    body: DividendCreate, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    payment = await DividendService(db).create_payment(user.id, body.model_dump())
    await audit_log.log_dividend_change(
        db, user.id, "create", payment.id, request_meta(request),
        {"asset_id": str(payment.asset_id), "total_amount": payment.total_amount},
    )
    return {"dividend": payment.to_dict()}


@router.get("/{dividend_id}")
async def get_dividend(
    dividend_id: UUID, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    payment = await DividendService(db).get_payment(user.id, dividend_id)
    return {"dividend": payment.to_dict()}


@router.put("/{dividend_id}")
async def update_dividend(
    dividend_id: UUID, body: DividendUpdate, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True)
    payment = await DividendService(db).update_payment(user.id, dividend_id, changes)
    await audit_log.log_dividend_change(
        db, user.id, "update", payment.id, request_meta(request), {"fields": sorted(changes)},
    )
    return {"dividend": payment.to_dict()}


@router.delete("/{dividend_id}")
async def delete_dividend(
    dividend_id: UUID, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    await DividendService(db).delete_payment(user.id, dividend_id)
    await audit_log.log_dividend_change(db, user.id, "delete", dividend_id, request_meta(request))
    return {"success": True, "message": "Dividendo eliminado"}
