"""Course Routes — catalog, lesson content and glossary read from a content tree."""

import json

import pytest

from finanwas.api.routes.courses import course_repository
from finanwas.infrastructure.course_content import CourseRepository
from finanwas.main import app


def _write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")


@pytest.fixture
def content_root(tmp_path):
    courses = tmp_path / "courses"
    _write_json(courses / "inversiones" / "metadata.json", {"title": "Inversiones", "order": 2})
    _write_json(courses / "ahorro" / "metadata.json", {"title": "Ahorro", "order": 1})
    _write_json(courses / "ahorro" / "intro" / "metadata.json", {"title": "Intro", "order": 1})
    (courses / "ahorro" / "presupuesto").mkdir(parents=True)
    (courses / "ahorro" / "presupuesto" / "lesson.md").write_text(
        "---\ntitle: Presupuesto\norder: 2\n---\n# Armá tu presupuesto\n", encoding="utf-8",
    )
    _write_json(tmp_path / "glossary" / "terms.json", {"terms": [{"term": "CEDEAR"}]})
    return tmp_path


@pytest.fixture
def repo(content_root):
    app.dependency_overrides[course_repository] = lambda: CourseRepository(content_root)
    yield
    app.dependency_overrides.pop(course_repository, None)


async def test_list_courses_sorted_by_order(client, repo):
    res = await client.get("/api/v1/courses")

    assert res.status_code == 200
    assert [c["slug"] for c in res.json()["courses"]] == ["ahorro", "inversiones"]
    assert res.json()["total"] == 2


async def test_course_detail_anonymous(client, repo):
    res = await client.get("/api/v1/courses/ahorro")

    body = res.json()
    assert body["course"]["title"] == "Ahorro"
    assert [lesson["slug"] for lesson in body["lessons"]] == ["intro", "presupuesto"]
    assert "content" not in body["lessons"][1]
    assert "progress" not in body


async def test_course_detail_includes_progress_for_user(client, repo, user_headers):
    await client.post(
        "/api/v1/progress", headers=user_headers,
        json={"courseSlug": "ahorro", "lessonSlug": "intro"},
    )

    res = await client.get("/api/v1/courses/ahorro", headers=user_headers)

    progress = res.json()["progress"]
    assert progress["completedLessons"] == 1
    assert progress["totalLessons"] == 2
    assert progress["percentage"] == 50


async def test_lesson_frontmatter_and_body(client, repo):
    res = await client.get("/api/v1/courses/ahorro/lessons/presupuesto")

    lesson = res.json()["lesson"]
    assert lesson["title"] == "Presupuesto"
    assert lesson["course_slug"] == "ahorro"
    assert lesson["content"].startswith("# Armá tu presupuesto")


async def test_missing_course_and_lesson(client, repo):
    course = await client.get("/api/v1/courses/cripto")
    assert course.status_code == 404
    assert course.json()["error"]["message"] == "Curso no encontrado"

    lesson = await client.get("/api/v1/courses/ahorro/lessons/nada")
    assert lesson.status_code == 404
    assert lesson.json()["error"]["message"] == "Lección no encontrada"


async def test_glossary(client, repo, content_root):
    res = await client.get("/api/v1/glossary")
    assert res.json()["terms"] == [{"term": "CEDEAR"}]

    (content_root / "glossary" / "terms.json").unlink()
    missing = await client.get("/api/v1/glossary")
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Glosario no encontrado"


def test_repository_rejects_traversal(content_root):
    repo = CourseRepository(content_root)
    assert repo.get_course("..") is None
    assert repo.get_lesson("ahorro", "../inversiones") is None
    assert repo.lesson_count("ahorro") == 2


async def test_shipped_content_is_served(client):
    courses = await client.get("/api/v1/courses")
    assert "finanzas-basicas" in [c["slug"] for c in courses.json()["courses"]]

    lesson = await client.get("/api/v1/courses/finanzas-basicas/lessons/que-es-el-ahorro")
    assert lesson.status_code == 200
    assert lesson.json()["lesson"]["content"]

    glossary = await client.get("/api/v1/glossary")
    assert glossary.json()["total"] > 0


@pytest.mark.parametrize("content", [42, "terms", {"terms": "CEDEAR"}])
def test_malformed_glossary_is_treated_as_missing(content_root, content):
    _write_json(content_root / "glossary" / "terms.json", content)
    assert CourseRepository(content_root).glossary_terms() is None


def test_glossary_accepts_a_bare_list(content_root):
    _write_json(content_root / "glossary" / "terms.json", [{"term": "ON"}])
    assert CourseRepository(content_root).glossary_terms() == [{"term": "ON"}]


def test_course_metadata_must_be_an_object(content_root):
    _write_json(content_root / "courses" / "ahorro" / "metadata.json", ["no", "es", "objeto"])
    repo = CourseRepository(content_root)

    assert repo.get_course("ahorro") is None
    assert "ahorro" not in [c["slug"] for c in repo.list_courses()]
