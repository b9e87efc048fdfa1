"""Portfolio Service — user-scoped asset CRUD, summary and price refresh.

Invariants:
    - Every query filters by user_id; another user's asset is indistinguishable
      from a missing one (ResourceNotFoundError)
    - Price updates always stamp current_price_updated_at
    - refresh_prices() only touches assets with a ticker, and only those whose
      quote came back with a price

Design Decisions:
    - Exchange rates and quotes injected: routes pass the cached singletons,
      tests pass fakes
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.domain_types import PriceSource
from finanwas.core.errors import ResourceNotFoundError
from finanwas.core.portfolio_math import summarize_portfolio
from finanwas.models.portfolio_asset import PortfolioAsset

logger = logging.getLogger(__name__)

ASSET_NOT_FOUND = "Activo no encontrado"

EDITABLE_FIELDS = (
    "type", "ticker", "name", "quantity", "purchase_price", "purchase_date",
    "currency", "current_price", "notes", "dividend_yield",
    "dividend_frequency", "next_dividend_date", "last_dividend_amount",
)


class PortfolioService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_assets(self, user_id: uuid.UUID) -> list[PortfolioAsset]:
        result = await self.db.execute(
            select(PortfolioAsset)
            .where(PortfolioAsset.user_id == user_id)
            .order_by(PortfolioAsset.created_at.desc()),
        )
        return list(result.scalars().all())

    async def get_asset(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> PortfolioAsset:
        result = await self.db.execute(
            select(PortfolioAsset)
            .where(PortfolioAsset.id == asset_id)
            .where(PortfolioAsset.user_id == user_id),
        )
        asset = result.scalar_one_or_none()
        if asset is None:
            raise ResourceNotFoundError("asset", str(asset_id), ASSET_NOT_FOUND)
        return asset

    async def create_asset(self, user_id: uuid.UUID, data: dict) -> PortfolioAsset:
        asset = PortfolioAsset(user_id=user_id, price_source=PriceSource.MANUAL.value)
        for key in EDITABLE_FIELDS:
            if key in data:
                setattr(asset, key, data[key])
        if asset.current_price is not None:
            asset.current_price_updated_at = datetime.now(timezone.utc)
        self.db.add(asset)
        await self.db.commit()
        await self.db.refresh(asset)
        return asset

    async def update_asset(
        self, user_id: uuid.UUID, asset_id: uuid.UUID, changes: dict,
    ) -> PortfolioAsset:
        asset = await self.get_asset(user_id, asset_id)
        for key, value in changes.items():
            if key in EDITABLE_FIELDS:
                setattr(asset, key, value)
        if "current_price" in changes:
            asset.current_price_updated_at = datetime.now(timezone.utc)
            asset.price_source = PriceSource.MANUAL.value
        asset.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(asset)
        return asset

    async def delete_asset(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> PortfolioAsset:
        asset = await self.get_asset(user_id, asset_id)
        await self.db.delete(asset)
        await self.db.commit()
        return asset

    async def summary(
        self, user_id: uuid.UUID, base_currency: str, rates: dict | None,
    ) -> dict:
        assets = await self.list_assets(user_id)
        return summarize_portfolio(assets, base_currency, rates)

    async def refresh_prices(self, user_id: uuid.UUID, quote_service) -> dict:
        """Pull Yahoo Finance quotes for every tickered asset."""
        assets = await self.list_assets(user_id)
        tickered = [a for a in assets if a.ticker]
        if not tickered:
            return {
                "updated": 0,
                "failed": 0,
                "assets": [],
                "message": "No hay activos con ticker para actualizar",
            }

        quotes = await quote_service.get_quotes([a.ticker for a in tickered])
        updated = []
        failed = 0
        for asset in tickered:
            quote = quotes.get(asset.ticker.strip().upper())
            if quote is None or not quote.price:
                failed += 1
                logger.info("No quote for asset", extra={"ticker": asset.ticker})
                continue
            _apply_price(asset, quote.price, PriceSource.YAHOO_FINANCE.value)
            updated.append(asset)

        if updated:
            await self.db.commit()
            for asset in updated:
                await self.db.refresh(asset)

        return {
            "updated": len(updated),
            "failed": failed,
            "assets": [a.to_dict() for a in updated],
            "message": f"Actualizado {len(updated)} de {len(tickered)} activos",
        }


def _apply_price(asset: PortfolioAsset, price: float, source: str) -> None:
    now = datetime.now(timezone.utc)
    asset.current_price = price
    asset.current_price_updated_at = now
    asset.price_source = source
    asset.updated_at = now
