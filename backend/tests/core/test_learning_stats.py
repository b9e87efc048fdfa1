"""Learning Stats — totals, averages and day streaks."""

from datetime import date, datetime, timezone

from finanwas.core.learning_stats import course_progress, learning_stats
from tests.core.fakes import FakeProgress

TODAY = date(2026, 3, 10)


def _row(day: int, lesson: str, completed=False, pct=0, seconds=60, course="ahorro"):
    return FakeProgress(
        course_slug=course, lesson_slug=lesson,
        last_accessed_at=datetime(2026, 3, day, 15, tzinfo=timezone.utc),
        completed=completed, time_spent_seconds=seconds, progress_percentage=pct,
    )


def test_stats_and_streaks():
    rows = [
        _row(10, "l1", completed=True, pct=100),
        _row(9, "l2", completed=True, pct=100),
        _row(8, "l3", pct=50),
        _row(5, "l4"),
        _row(4, "l5", pct=50),
    ]
    stats = learning_stats(rows, TODAY)
    assert stats["totalTimeSpentSeconds"] == 300
    assert stats["lessonsCompleted"] == 2
    assert stats["lessonsStarted"] == 5
    assert stats["averageProgress"] == 60
    assert stats["currentStreak"] == 3
    assert stats["longestStreak"] == 3
    assert stats["lastActivity"] == "2026-03-10T15:00:00+00:00"


def test_streak_survives_until_yesterday():
    stats = learning_stats([_row(9, "l1"), _row(8, "l2")], TODAY)
    assert stats["currentStreak"] == 2


def test_streak_broken_after_a_gap():
    stats = learning_stats([_row(7, "l1"), _row(6, "l2")], TODAY)
    assert stats["currentStreak"] == 0
    assert stats["longestStreak"] == 2


def test_same_day_counts_once():
    stats = learning_stats([_row(10, "l1"), _row(10, "l2")], TODAY)
    assert stats["currentStreak"] == 1


def test_no_rows():
    stats = learning_stats([], TODAY)
    assert stats["averageProgress"] == 0
    assert stats["currentStreak"] == 0
    assert stats["lastActivity"] is None


def test_course_progress_percentage():
    rows = [
        _row(10, "l1", completed=True),
        _row(10, "l2"),
        _row(10, "x1", completed=True, course="inversiones"),
    ]
    assert course_progress(rows, "ahorro", 4) == {
        "courseSlug": "ahorro", "completedLessons": 1, "totalLessons": 4, "percentage": 25,
    }
    assert course_progress(rows, "ahorro", 0)["percentage"] == 0
