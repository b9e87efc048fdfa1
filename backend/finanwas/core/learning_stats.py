"""Learning Stats — aggregate lesson progress rows into totals and streaks.

Invariants:
    - Streaks count distinct calendar days (UTC) of last_accessed_at
    - current_streak is 0 unless the latest active day is today or yesterday
    - average_progress is 0 with no rows
"""

from collections.abc import Sequence
from datetime import date, timedelta

from finanwas.core.dates import ensure_utc
from finanwas.core.repository_protocols import ProgressLike
from finanwas.core.rounding import round_half_up


def _streaks(days: list[date], today: date) -> tuple[int, int]:
    """(current, longest) over sorted-descending distinct days."""
    if not days:
        return 0, 0

    longest = 1
    run = 1
    for newer, older in zip(days, days[1:]):
        if (newer - older).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1

    current = 0
    if days[0] in (today, today - timedelta(days=1)):
        current = 1
        for newer, older in zip(days, days[1:]):
            if (newer - older).days != 1:
                break
            current += 1
    return current, longest


def learning_stats(rows: Sequence[ProgressLike], today: date) -> dict:
    accessed = [ensure_utc(r.last_accessed_at) for r in rows if r.last_accessed_at]
    days = sorted({d.date() for d in accessed}, reverse=True)
    current, longest = _streaks(days, today)
    last_activity = max(accessed) if accessed else None

    return {
        "totalTimeSpentSeconds": sum(r.time_spent_seconds or 0 for r in rows),
        "lessonsCompleted": sum(1 for r in rows if r.completed),
        "lessonsStarted": len(rows),
        "averageProgress": (
            round_half_up(sum(r.progress_percentage or 0 for r in rows) / len(rows))
            if rows else 0
        ),
        "currentStreak": current,
        "longestStreak": longest,
        "lastActivity": last_activity.isoformat() if last_activity else None,
    }


def course_progress(
    rows: Sequence[ProgressLike], course_slug: str, total_lessons: int,
) -> dict:
    completed = sum(
        1 for r in rows if r.course_slug == course_slug and r.completed
    )
    return {
        "courseSlug": course_slug,
        "completedLessons": completed,
        "totalLessons": total_lessons,
        "percentage": (
            round_half_up(completed / total_lessons * 100) if total_lessons > 0 else 0
        ),
    }
