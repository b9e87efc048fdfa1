"""Course Routes — course catalog, lesson content and glossary from disk.

Invariants:
    - Course detail lists lessons without their markdown body
    - Signed-in users additionally get their completion figures per course
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import optional_user
from finanwas.config import get_settings
from finanwas.core.errors import ResourceNotFoundError
from finanwas.infrastructure.course_content import CourseRepository
from finanwas.infrastructure.database import get_db
from finanwas.models.user import User
from finanwas.services.progress import ProgressService

router = APIRouter(prefix="/api/v1", tags=["courses"])


def course_repository() -> CourseRepository:
    return CourseRepository(get_settings().content_dir)


@router.get("/courses")
async def list_courses(repo: CourseRepository = Depends(course_repository)):
    courses = repo.list_courses()
    return {"courses": courses, "total": len(courses)}


@router.get("/courses/{course_slug}")
async def get_course(
    course_slug: str,
    repo: CourseRepository = Depends(course_repository),
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_db),
):
    course = repo.get_course(course_slug)
    if course is None:
        raise ResourceNotFoundError("course", course_slug, "Curso no encontrado")
    lessons = repo.list_lessons(course_slug)
    result = {"course": course, "lessons": lessons}
    if user is not None:
        result["progress"] = await ProgressService(db).course_progress(
            user.id, course_slug, len(lessons),
        )
    return result


@router.get("/courses/{course_slug}/lessons/{lesson_slug}")
async def get_lesson(
    course_slug: str, lesson_slug: str,
    repo: CourseRepository = Depends(course_repository),
):
    lesson = repo.get_lesson(course_slug, lesson_slug)
    if lesson is None:
        raise ResourceNotFoundError(
            "lesson", f"{course_slug}/{lesson_slug}", "Lección no encontrada",
        )
    return {"lesson": lesson}


@router.get("/glossary")
async def glossary(repo: CourseRepository = Depends(course_repository)):
    terms = repo.glossary_terms()
    if terms is None:
        raise ResourceNotFoundError("glossary", "terms", "Glosario no encontrado")
    return {"terms": terms, "total": len(terms)}
