"""LessonProgress ORM — per-user, per-lesson reading progress.

Invariants:
    - (user_id, course_slug, lesson_slug) is unique
    - progress_percentage in [0, 100], never decreases
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    String, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from finanwas.db.base import Base, utcnow


class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "course_slug", "lesson_slug",
            name="uq_lesson_progress_user_lesson",
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
    course_slug: Mapped[str] = mapped_column(String(200), nullable=False)
    lesson_slug: Mapped[str] = mapped_column(String(200), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    time_spent_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    progress_percentage: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "course_slug": self.course_slug,
            "lesson_slug": self.lesson_slug,
            "completed": self.completed,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "time_spent_seconds": self.time_spent_seconds,
            "last_accessed_at": (
                self.last_accessed_at.isoformat() if self.last_accessed_at else None
            ),
            "view_count": self.view_count,
            "progress_percentage": self.progress_percentage,
        }
