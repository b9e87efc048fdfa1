"""Progress Routes — lesson start, completion, time spent and reading progress.

Invariants:
    - Starting twice bumps view_count on the same row
    - Time requires a started lesson and a non-negative value
    - Reading progress is clamped to [0, 100], never decreases and needs a started lesson
"""

import pytest

LESSON = {"courseSlug": "finanzas-basicas", "lessonSlug": "que-es-el-ahorro"}


async def test_start_lesson_twice_counts_views(client, user_headers):
    first = await client.post("/api/v1/progress/start", headers=user_headers, json=LESSON)
    second = await client.post("/api/v1/progress/start", headers=user_headers, json=LESSON)

    assert first.status_code == 200
    assert first.json()["progress"]["view_count"] == 1
    assert second.json()["progress"]["view_count"] == 2
    assert second.json()["progress"]["id"] == first.json()["progress"]["id"]
    assert second.json()["progress"]["completed"] is False


async def test_mark_complete_without_start(client, user_headers):
    res = await client.post("/api/v1/progress", headers=user_headers, json=LESSON)

    progress = res.json()["progress"]
    assert progress["completed"] is True
    assert progress["completed_at"] is not None
    assert progress["progress_percentage"] == 100


async def test_time_spent_accumulates(client, user_headers):
    await client.post("/api/v1/progress/start", headers=user_headers, json=LESSON)

    await client.post(
        "/api/v1/progress/time", headers=user_headers,
        json={**LESSON, "timeSpentSeconds": 120},
    )
    res = await client.post(
        "/api/v1/progress/time", headers=user_headers,
        json={**LESSON, "timeSpentSeconds": 30},
    )

    assert res.json()["progress"]["time_spent_seconds"] == 150


async def test_time_spent_requires_started_lesson(client, user_headers):
    res = await client.post(
        "/api/v1/progress/time", headers=user_headers,
        json={**LESSON, "timeSpentSeconds": 10},
    )
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Lección no iniciada"


async def test_time_spent_rejects_negative(client, user_headers):
    await client.post("/api/v1/progress/start", headers=user_headers, json=LESSON)
    res = await client.post(
        "/api/v1/progress/time", headers=user_headers,
        json={**LESSON, "timeSpentSeconds": -5},
    )
    assert res.status_code == 400


@pytest.mark.parametrize("sent, expected", [(150, 100), (-20, 0), (42.4, 42), (42.5, 43)])
async def test_reading_progress_is_clamped(client, user_headers, sent, expected):
    await client.post("/api/v1/progress/start", headers=user_headers, json=LESSON)
    res = await client.post(
        "/api/v1/progress/reading", headers=user_headers,
        json={**LESSON, "percentage": sent},
    )
    assert res.status_code == 200
    assert res.json()["progress"]["progress_percentage"] == expected


async def test_reading_progress_never_decreases(client, user_headers):
    await client.post("/api/v1/progress/start", headers=user_headers, json=LESSON)
    await client.post(
        "/api/v1/progress/reading", headers=user_headers, json={**LESSON, "percentage": 70},
    )
    res = await client.post(
        "/api/v1/progress/reading", headers=user_headers, json={**LESSON, "percentage": 30},
    )
    assert res.json()["progress"]["progress_percentage"] == 70


async def test_list_filters_by_course_and_stats(client, user_headers):
    await client.post("/api/v1/progress", headers=user_headers, json=LESSON)
    await client.post(
        "/api/v1/progress/start", headers=user_headers,
        json={"courseSlug": "inversiones", "lessonSlug": "bonos"},
    )

    listed = await client.get(
        "/api/v1/progress", headers=user_headers,
        params={"courseSlug": "finanzas-basicas"},
    )
    assert [p["lesson_slug"] for p in listed.json()["progress"]] == ["que-es-el-ahorro"]

    stats = (await client.get("/api/v1/progress/stats", headers=user_headers)).json()["stats"]
    assert stats["lessonsStarted"] == 2
    assert stats["lessonsCompleted"] == 1
    assert stats["lastActivity"] is not None


async def test_progress_requires_auth(client):
    res = await client.post("/api/v1/progress/start", json=LESSON)
    assert res.status_code == 401


async def test_reading_progress_requires_started_lesson(client, user_headers):
    res = await client.post(
        "/api/v1/progress/reading", headers=user_headers,
        json={**LESSON, "percentage": 40},
    )

    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Lección no iniciada"
    listed = await client.get("/api/v1/progress", headers=user_headers)
    assert listed.json()["progress"] == []
