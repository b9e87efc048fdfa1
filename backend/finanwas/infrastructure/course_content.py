"""Course Content Loader — courses, lessons and glossary read from the content directory.

Invariants:
    - Layout: <root>/courses/<course>/metadata.json and
      <root>/courses/<course>/<lesson>/{metadata.json, lesson.md}
    - Courses and lessons sorted by "order" (missing order sorts last)
    - YAML frontmatter in lesson.md overrides metadata.json keys
    - Slugs containing path separators or ".." are rejected (None)

Design Decisions:
    - Filesystem over DB: content is versioned with the code
    - PyYAML safe_load for frontmatter: no arbitrary object construction
"""

import json
import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_FRONTMATTER_DELIMITER = "---"


def _safe_slug(slug: str) -> bool:
    return bool(slug) and "/" not in slug and "\\" not in slug and ".." not in slug


def _read_json(path: Path) -> dict | list | None:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
        return None


def _read_metadata(path: Path) -> dict | None:
    data = _read_json(path)
    if data is not None and not isinstance(data, dict):
        logger.error(f"Expected a JSON object in {path}")
        return None
    return data


def split_frontmatter(text: str) -> tuple[dict, str]:
    """Split a markdown document into (frontmatter dict, body)."""
    if not text.startswith(_FRONTMATTER_DELIMITER):
        return {}, text
    parts = text.split(_FRONTMATTER_DELIMITER, 2)
    if len(parts) < 3:
        return {}, text
    try:
        meta = yaml.safe_load(parts[1]) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Invalid lesson frontmatter: {e}")
        return {}, text
    if not isinstance(meta, dict):
        return {}, text
    return meta, parts[2].lstrip("\n")


def _order_key(item: dict) -> tuple:
    order = item.get("order")
    return (order is None, order if isinstance(order, (int, float)) else 0, item["slug"])


class CourseRepository:
    """Read-only access to course content on disk."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.courses_dir = self.root / "courses"

    def list_courses(self) -> list[dict]:
        if not self.courses_dir.is_dir():
            return []
        courses = []
        for entry in self.courses_dir.iterdir():
            if not entry.is_dir():
                continue
            meta = _read_metadata(entry / "metadata.json")
            if meta is None:
                continue
            courses.append({**meta, "slug": entry.name})
        return sorted(courses, key=_order_key)

    def get_course(self, course_slug: str) -> dict | None:
        if not _safe_slug(course_slug):
            return None
        meta = _read_metadata(self.courses_dir / course_slug / "metadata.json")
        if meta is None:
            return None
        return {**meta, "slug": course_slug}

    def list_lessons(self, course_slug: str) -> list[dict]:
        if not _safe_slug(course_slug):
            return []
        course_dir = self.courses_dir / course_slug
        if not course_dir.is_dir():
            return []
        lessons = []
        for entry in course_dir.iterdir():
            if not entry.is_dir():
                continue
            meta = _read_metadata(entry / "metadata.json") or {}
            lesson_md = entry / "lesson.md"
            if lesson_md.is_file():
                front, _ = split_frontmatter(lesson_md.read_text(encoding="utf-8"))
                meta = {**meta, **front}
            if not meta:
                continue
            lessons.append({**meta, "slug": entry.name, "course_slug": course_slug})
        return sorted(lessons, key=_order_key)

    def get_lesson(self, course_slug: str, lesson_slug: str) -> dict | None:
        if not (_safe_slug(course_slug) and _safe_slug(lesson_slug)):
            return None
        lesson_dir = self.courses_dir / course_slug / lesson_slug
        if not lesson_dir.is_dir():
            return None
        meta = _read_metadata(lesson_dir / "metadata.json") or {}
        content = ""
        lesson_md = lesson_dir / "lesson.md"
        if lesson_md.is_file():
            front, content = split_frontmatter(lesson_md.read_text(encoding="utf-8"))
            meta = {**meta, **front}
        if not meta and not content:
            return None
        return {
            **meta,
            "slug": lesson_slug,
            "course_slug": course_slug,
            "content": content,
        }

    def lesson_count(self, course_slug: str) -> int:
        return len(self.list_lessons(course_slug))

    def glossary_terms(self) -> list | None:
        data = _read_json(self.root / "glossary" / "terms.json")
        if data is None:
            return None
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("terms", []), list):
            return data.get("terms", [])
        logger.error("Glossary file has an unexpected shape")
        return None
