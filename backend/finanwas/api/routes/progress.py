"""Progress Routes — lesson start, completion, time and reading progress."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import current_user
from finanwas.core.dates import utc_today
from finanwas.infrastructure.database import get_db
from finanwas.models.user import User
from finanwas.schemas.learning import LessonRef, ReadingProgressUpdate, TimeSpentUpdate
from finanwas.services.progress import ProgressService

router = APIRouter(prefix="/api/v1/progress", tags=["progress"])


@router.get("")
async def list_progress(
    course_slug: str | None = Query(None, alias="courseSlug"),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await ProgressService(db).list_progress(user.id, course_slug)
    return {"progress": [r.to_dict() for r in rows]}


@router.post("")
async def mark_complete(
    body: LessonRef, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await ProgressService(db).mark_complete(user.id, body.course_slug, body.lesson_slug)
    return {"success": True, "progress": row.to_dict()}


@router.post("/start")
async def start_lesson(
    body: LessonRef, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await ProgressService(db).start_lesson(user.id, body.course_slug, body.lesson_slug)
    return {"success": True, "progress": row.to_dict()}


@router.post("/time")
async def update_time(
    body: TimeSpentUpdate, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await ProgressService(db).update_time_spent(
        user.id, body.course_slug, body.lesson_slug, body.time_spent_seconds,
    )
    return {"success": True, "progress": row.to_dict()}


@router.post("/reading")
async def update_reading(
    body: ReadingProgressUpdate, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await ProgressService(db).update_reading_progress(
        user.id, body.course_slug, body.lesson_slug, body.percentage,
    )
    return {"success": True, "progress": row.to_dict()}


@router.get("/stats")
async def stats(user: User = Depends(current_user), db: AsyncSession = Depends(get_db)):
    return {"stats": await ProgressService(db).stats(user.id, utc_today())}
