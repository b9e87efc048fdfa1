"""UserProfile ORM — investor questionnaire answers, one row per user.

Invariants:
    - user_id is unique (1:1 with users)
    - questionnaire_completed_at set the first time questionnaire_completed turns true
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from finanwas.db.base import Base, utcnow


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    knowledge_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    main_goal: Mapped[str | None] = mapped_column(String(100), nullable=True)
    risk_tolerance: Mapped[str | None] = mapped_column(String(50), nullable=True)
    has_debt: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    has_emergency_fund: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    has_investments: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    income_range: Mapped[str | None] = mapped_column(String(50), nullable=True)
    expense_range: Mapped[str | None] = mapped_column(String(50), nullable=True)
    investment_horizon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    questionnaire_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    questionnaire_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    preferred_currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="ARS",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    PROFILE_FIELDS = (
        "country", "knowledge_level", "main_goal", "risk_tolerance",
        "has_debt", "has_emergency_fund", "has_investments",
        "income_range", "expense_range", "investment_horizon",
        "questionnaire_completed", "preferred_currency",
    )

    def to_dict(self) -> dict:
        data = {f: getattr(self, f) for f in self.PROFILE_FIELDS}
        data["id"] = str(self.id)
        data["user_id"] = str(self.user_id)
        data["questionnaire_completed_at"] = (
            self.questionnaire_completed_at.isoformat()
            if self.questionnaire_completed_at else None
        )
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data
