"""Dividend Service — user-scoped dividend payments and their summary.

Invariants:
    - A payment can only be attached to an asset the user owns
    - Creating a payment copies total_amount into the asset's last_dividend_amount
    - Listing is newest payment_date first
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.dividend_summary import summarize_dividends, income_in_range
from finanwas.core.errors import ResourceNotFoundError
from finanwas.models.dividend_payment import DividendPayment
from finanwas.models.portfolio_asset import PortfolioAsset
from finanwas.services.portfolio import PortfolioService

PAYMENT_FIELDS = (
    "payment_date", "amount_per_share", "total_amount", "currency",
    "payment_type", "shares_received", "reinvested", "withholding_tax", "notes",
)


class DividendService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_payments(
        self, user_id: uuid.UUID, asset_id: uuid.UUID | None = None,
    ) -> list[DividendPayment]:
        query = select(DividendPayment).where(DividendPayment.user_id == user_id)
        if asset_id is not None:
            query = query.where(DividendPayment.asset_id == asset_id)
        result = await self.db.execute(
            query.order_by(DividendPayment.payment_date.desc()),
        )
        return list(result.scalars().all())

    async def get_payment(
        self, user_id: uuid.UUID, payment_id: uuid.UUID,
    ) -> DividendPayment:
        result = await self.db.execute(
            select(DividendPayment)
            .where(DividendPayment.id == payment_id)
            .where(DividendPayment.user_id == user_id),
        )
        payment = result.scalar_one_or_none()
        if payment is None:
            raise ResourceNotFoundError(
                "dividend", str(payment_id), "Dividendo no encontrado",
            )
        return payment

    async def create_payment(self, user_id: uuid.UUID, data: dict) -> DividendPayment:
        asset = await PortfolioService(self.db).get_asset(user_id, data["asset_id"])
        payment = DividendPayment(user_id=user_id, asset_id=asset.id)
        for key in PAYMENT_FIELDS:
            if key in data and data[key] is not None:
                setattr(payment, key, data[key])
        self.db.add(payment)
        asset.last_dividend_amount = payment.total_amount
        asset.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(payment)
        return payment

    async def update_payment(
        self, user_id: uuid.UUID, payment_id: uuid.UUID, changes: dict,
    ) -> DividendPayment:
        payment = await self.get_payment(user_id, payment_id)
        for key, value in changes.items():
            if key in PAYMENT_FIELDS:
                setattr(payment, key, value)
        payment.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(payment)
        return payment

    async def delete_payment(self, user_id: uuid.UUID, payment_id: uuid.UUID) -> None:
        payment = await self.get_payment(user_id, payment_id)
        await self.db.delete(payment)
        await self.db.commit()

    async def summary(self, user_id: uuid.UUID, today: date) -> dict:
        payments = await self.list_payments(user_id)
        result = await self.db.execute(
            select(PortfolioAsset.id, PortfolioAsset.name, PortfolioAsset.ticker)
            .where(PortfolioAsset.user_id == user_id),
        )
        labels = {row.id: (row.name, row.ticker) for row in result}
        return summarize_dividends(
            payments, today, lambda asset_id: labels.get(asset_id, ("", None)),
        )

    async def income(self, user_id: uuid.UUID, start: date, end: date) -> float:
        return income_in_range(await self.list_payments(user_id), start, end)
