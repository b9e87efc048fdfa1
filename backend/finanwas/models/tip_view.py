"""TipView ORM — which daily tips a user has seen or saved."""

import uuid
from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from finanwas.db.base import Base, utcnow


class TipView(Base):
    __tablename__ = "tip_views"
    __table_args__ = (
        UniqueConstraint("user_id", "tip_id", name="uq_tip_views_user_tip"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    tip_id: Mapped[str] = mapped_column(String(50), nullable=False)
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    saved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_dict(self) -> dict:
        return {
            "tip_id": self.tip_id,
            "viewed_at": self.viewed_at.isoformat() if self.viewed_at else None,
            "saved": self.saved,
        }
