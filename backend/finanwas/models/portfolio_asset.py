"""PortfolioAsset ORM — one holding in a user's portfolio.

Invariants:
    - quantity > 0 and purchase_price > 0 (enforced at the schema layer)
    - current_price is None until a manual or provider update happens
    - price_source is "manual" or "yahoo-finance"

Design Decisions:
    - Float over Numeric: values feed float arithmetic in core/portfolio_math.py
    - dividends cascade on delete: payments are meaningless without the asset
"""

import uuid
from datetime import date, datetime

from sqlalchemy import String, Text, Float, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from finanwas.db.base import Base, utcnow


class PortfolioAsset(Base):
    __tablename__ = "portfolio_assets"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    ticker: Mapped[str | None] = mapped_column(String(20), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    purchase_price: Mapped[float] = mapped_column(Float, nullable=False)
    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    current_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    current_price_updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    price_source: Mapped[str] = mapped_column(
        String(30), nullable=False, default="manual",
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    dividend_yield: Mapped[float | None] = mapped_column(Float, nullable=True)
    dividend_frequency: Mapped[str | None] = mapped_column(String(20), nullable=True)
    next_dividend_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_dividend_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    dividends: Mapped[list["DividendPayment"]] = relationship(
        "DividendPayment", back_populates="asset",
        cascade="all, delete-orphan", lazy="noload", passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "type": self.type,
            "ticker": self.ticker,
            "name": self.name,
            "quantity": self.quantity,
            "purchase_price": self.purchase_price,
            "purchase_date": self.purchase_date.isoformat(),
            "currency": self.currency,
            "current_price": self.current_price,
            "current_price_updated_at": (
                self.current_price_updated_at.isoformat()
                if self.current_price_updated_at else None
            ),
            "price_source": self.price_source,
            "notes": self.notes,
            "dividend_yield": self.dividend_yield,
            "dividend_frequency": self.dividend_frequency,
            "next_dividend_date": (
                self.next_dividend_date.isoformat() if self.next_dividend_date else None
            ),
            "last_dividend_amount": self.last_dividend_amount,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
