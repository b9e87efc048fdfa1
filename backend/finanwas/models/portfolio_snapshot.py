"""PortfolioSnapshot ORM — daily valuation of a user's whole portfolio.

Invariants:
    - (user_id, snapshot_date) is unique: re-snapshotting a day overwrites it
    - asset_breakdown maps asset type -> {count, value, cost}
"""

import uuid
from datetime import date, datetime

from sqlalchemy import (
    String, Float, Date, DateTime, JSON, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from finanwas.db.base import Base, utcnow


class PortfolioSnapshot(Base):
    __tablename__ = "portfolio_performance_snapshots"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "snapshot_date", name="uq_snapshot_user_date",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    snapshot_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_gain_loss: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    gain_loss_percentage: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0,
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="ARS")
    asset_breakdown: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "snapshot_date": self.snapshot_date.isoformat(),
            "total_value": self.total_value,
            "total_cost": self.total_cost,
            "total_gain_loss": self.total_gain_loss,
            "gain_loss_percentage": self.gain_loss_percentage,
            "currency": self.currency,
            "asset_breakdown": self.asset_breakdown,
        }
