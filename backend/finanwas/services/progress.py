"""Progress Service — lesson start/complete/time/reading persistence.

Invariants:
    - One row per (user, course, lesson); start and complete upsert it
    - update_time_spent() and update_reading_progress() require a started lesson
      (ResourceNotFoundError)
    - progress_percentage is clamped to [0, 100] and never decreases
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.errors import ResourceNotFoundError, ValidationFailedError
from finanwas.core.learning_stats import learning_stats, course_progress
from finanwas.core.rounding import round_half_up
from finanwas.models.lesson_progress import LessonProgress


class ProgressService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_progress(
        self, user_id: uuid.UUID, course_slug: str | None = None,
    ) -> list[LessonProgress]:
        query = select(LessonProgress).where(LessonProgress.user_id == user_id)
        if course_slug:
            query = query.where(LessonProgress.course_slug == course_slug)
        result = await self.db.execute(
            query.order_by(LessonProgress.last_accessed_at.desc()),
        )
        return list(result.scalars().all())

    async def _find(
        self, user_id: uuid.UUID, course_slug: str, lesson_slug: str,
    ) -> LessonProgress | None:
        result = await self.db.execute(
            select(LessonProgress)
            .where(LessonProgress.user_id == user_id)
            .where(LessonProgress.course_slug == course_slug)
            .where(LessonProgress.lesson_slug == lesson_slug),
        )
        return result.scalar_one_or_none()

    async def start_lesson(
        self, user_id: uuid.UUID, course_slug: str, lesson_slug: str,
    ) -> LessonProgress:
        now = datetime.now(timezone.utc)
        row = await self._find(user_id, course_slug, lesson_slug)
        if row is None:
            row = LessonProgress(
                user_id=user_id,
                course_slug=course_slug,
                lesson_slug=lesson_slug,
                started_at=now,
                last_accessed_at=now,
                view_count=1,
                time_spent_seconds=0,
                progress_percentage=0,
                completed=False,
            )
            self.db.add(row)
        else:
            row.view_count = (row.view_count or 0) + 1
            row.last_accessed_at = now
        await self.db.commit()
        return row

    async def mark_complete(
        self, user_id: uuid.UUID, course_slug: str, lesson_slug: str,
    ) -> LessonProgress:
        now = datetime.now(timezone.utc)
        row = await self._find(user_id, course_slug, lesson_slug)
        if row is None:
            row = LessonProgress(
                user_id=user_id,
                course_slug=course_slug,
                lesson_slug=lesson_slug,
                started_at=now,
                view_count=1,
                time_spent_seconds=0,
            )
            self.db.add(row)
        row.completed = True
        row.completed_at = now
        row.progress_percentage = 100
        row.last_accessed_at = now
        await self.db.commit()
        return row

    async def update_time_spent(
        self, user_id: uuid.UUID, course_slug: str, lesson_slug: str, seconds: int,
    ) -> LessonProgress:
        if seconds is None or seconds < 0:
            raise ValidationFailedError(
                "El tiempo debe ser un número positivo", field="timeSpentSeconds",
            )
        row = await self._find(user_id, course_slug, lesson_slug)
        if row is None:
            raise ResourceNotFoundError(
                "lesson_progress", f"{course_slug}/{lesson_slug}", "Lección no iniciada",
            )
        row.time_spent_seconds = (row.time_spent_seconds or 0) + int(seconds)
        row.last_accessed_at = datetime.now(timezone.utc)
        await self.db.commit()
        return row

    async def update_reading_progress(
        self, user_id: uuid.UUID, course_slug: str, lesson_slug: str, percentage: float,
    ) -> LessonProgress:
        clamped = min(max(round_half_up(percentage), 0), 100)
        row = await self._find(user_id, course_slug, lesson_slug)
        if row is None:
            raise ResourceNotFoundError(
                "lesson_progress", f"{course_slug}/{lesson_slug}", "Lección no iniciada",
            )
        if clamped > (row.progress_percentage or 0):
            row.progress_percentage = clamped
            row.last_accessed_at = datetime.now(timezone.utc)
            await self.db.commit()
        return row

    async def stats(self, user_id: uuid.UUID, today: date) -> dict:
        return learning_stats(await self.list_progress(user_id), today)

    async def course_progress(
        self, user_id: uuid.UUID, course_slug: str, total_lessons: int,
    ) -> dict:
        rows = await self.list_progress(user_id, course_slug)
        return course_progress(rows, course_slug, total_lessons)
