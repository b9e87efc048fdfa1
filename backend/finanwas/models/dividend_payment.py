"""DividendPayment ORM — a received dividend for a portfolio asset.

Invariants:
    - user_id always equals the owning asset's user_id
    - payment_type is "cash", "stock" or "drip"
"""

import uuid
from datetime import date, datetime

from sqlalchemy import String, Text, Float, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from finanwas.db.base import Base, utcnow


class DividendPayment(Base):
    __tablename__ = "dividend_payments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolio_assets.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount_per_share: Mapped[float] = mapped_column(Float, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    payment_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default="cash",
    )
    shares_received: Mapped[float | None] = mapped_column(Float, nullable=True)
    reinvested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    withholding_tax: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    asset: Mapped["PortfolioAsset"] = relationship(
        "PortfolioAsset", back_populates="dividends", lazy="noload",
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "asset_id": str(self.asset_id),
            "payment_date": self.payment_date.isoformat(),
            "amount_per_share": self.amount_per_share,
            "total_amount": self.total_amount,
            "currency": self.currency,
            "payment_type": self.payment_type,
            "shares_received": self.shares_received,
            "reinvested": self.reinvested,
            "withholding_tax": self.withholding_tax,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
