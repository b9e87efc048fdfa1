"""Snapshot Service — daily portfolio valuations for the performance chart.

Invariants:
    - One row per (user_id, snapshot_date): saving twice overwrites the first
    - Range queries return ascending snapshot_date
    - cleanup_old_snapshots() deletes strictly older than today - retention_days
"""

import logging
import uuid
from datetime import date, timedelta

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.dates import utc_today
from finanwas.core.portfolio_math import snapshot_breakdown
from finanwas.models.portfolio_snapshot import PortfolioSnapshot

logger = logging.getLogger(__name__)


class SnapshotService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save_snapshot(
        self, user_id: uuid.UUID, summary: dict, snapshot_date: date | None = None,
    ) -> PortfolioSnapshot:
        """Upsert today's (or snapshot_date's) valuation from a portfolio summary."""
        day = snapshot_date or utc_today()
        result = await self.db.execute(
            select(PortfolioSnapshot)
            .where(PortfolioSnapshot.user_id == user_id)
            .where(PortfolioSnapshot.snapshot_date == day),
        )
        snapshot = result.scalar_one_or_none()
        if snapshot is None:
            snapshot = PortfolioSnapshot(user_id=user_id, snapshot_date=day)
            self.db.add(snapshot)

        snapshot.total_value = summary["currentValue"]
        snapshot.total_cost = summary["totalInvested"]
        snapshot.total_gain_loss = summary["gainLoss"]
        snapshot.gain_loss_percentage = summary["gainLossPercentage"]
        snapshot.currency = summary["currency"]
        snapshot.asset_breakdown = snapshot_breakdown(summary)
        await self.db.commit()
        await self.db.refresh(snapshot)
        return snapshot

    async def get_snapshots(
        self, user_id: uuid.UUID, start: date | None = None, end: date | None = None,
    ) -> list[PortfolioSnapshot]:
        query = select(PortfolioSnapshot).where(PortfolioSnapshot.user_id == user_id)
        if start is not None:
            query = query.where(PortfolioSnapshot.snapshot_date >= start)
        if end is not None:
            query = query.where(PortfolioSnapshot.snapshot_date <= end)
        result = await self.db.execute(query.order_by(PortfolioSnapshot.snapshot_date))
        return list(result.scalars().all())

    async def latest(self, user_id: uuid.UUID) -> PortfolioSnapshot | None:
        result = await self.db.execute(
            select(PortfolioSnapshot)
            .where(PortfolioSnapshot.user_id == user_id)
            .order_by(PortfolioSnapshot.snapshot_date.desc())
            .limit(1),
        )
        return result.scalar_one_or_none()

    async def cleanup_old_snapshots(
        self, retention_days: int = 365, today: date | None = None,
    ) -> int:
        cutoff = (today or utc_today()) - timedelta(days=retention_days)
        result = await self.db.execute(
            delete(PortfolioSnapshot).where(PortfolioSnapshot.snapshot_date < cutoff),
        )
        await self.db.commit()
        deleted = result.rowcount or 0
        logger.info(f"Deleted {deleted} snapshots older than {cutoff.isoformat()}")
        return deleted
