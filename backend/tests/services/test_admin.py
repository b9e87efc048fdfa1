"""Admin Routes — guarded listings, invitation codes, error log and audit trail."""

import pytest

from finanwas.models.error_log import ErrorLog


@pytest.mark.parametrize("path", [
    "/api/v1/admin/users", "/api/v1/admin/codes",
    "/api/v1/admin/errors", "/api/v1/admin/audit-logs",
])
async def test_admin_routes_are_guarded(client, user_headers, path):
    anonymous = await client.get(path)
    assert anonymous.status_code == 401

    forbidden = await client.get(path, headers=user_headers)
    assert forbidden.status_code == 403


async def test_list_users_with_stats(client, admin_headers, user):
    res = await client.get("/api/v1/admin/users", headers=admin_headers, params={"stats": "true"})

    assert res.status_code == 200
    body = res.json()
    assert {u["email"] for u in body["users"]} == {"admin@example.com", "ana@example.com"}
    assert all("password_hash" not in u for u in body["users"])
    assert body["stats"]["totalUsers"] == 2
    assert body["stats"]["usersByRole"] == {"admin": 1, "user": 1}


async def test_create_code_is_listed_and_audited(client, admin_headers):
    created = await client.post("/api/v1/admin/codes", headers=admin_headers)
    assert created.status_code == 201
    code = created.json()["code"]["code"]
    assert len(code) == 8

    codes = await client.get("/api/v1/admin/codes", headers=admin_headers)
    listed = {c["code"]: c for c in codes.json()["codes"]}
    assert listed[code]["used_at"] is None
    assert listed[code]["used_by_email"] is None

    logs = await client.get(
        "/api/v1/admin/audit-logs", headers=admin_headers,
        params={"action": "admin.create_invitation_code"},
    )
    entry = logs.json()["logs"][0]
    assert entry["metadata"]["code"] == code
    assert entry["user_email"] == "admin@example.com"


async def test_used_code_shows_redeemer(client, admin_headers, invitation_code):
    await client.post("/api/v1/auth/register", json={
        "code": invitation_code.code, "email": "nuevo@example.com",
        "password": "Tango7Delta9", "name": "Nuevo",
    })
    client.cookies.clear()

    codes = await client.get("/api/v1/admin/codes", headers=admin_headers)
    listed = {c["code"]: c for c in codes.json()["codes"]}
    assert listed[invitation_code.code]["used_by_email"] == "nuevo@example.com"


async def test_errors_list_and_resolve(client, admin_headers, test_db, admin_user):
    entry = ErrorLog(level="error", source="client", message="TypeError: x is undefined")
    test_db.add(entry)
    test_db.add(ErrorLog(level="warning", source="api", message="Slow quote"))
    await test_db.commit()

    listed = await client.get(
        "/api/v1/admin/errors", headers=admin_headers, params={"level": "error"},
    )
    assert [e["message"] for e in listed.json()["errors"]] == ["TypeError: x is undefined"]
    assert listed.json()["stats"]["total"] == 2
    assert listed.json()["stats"]["unresolved"] == 2

    resolved = await client.patch(
        "/api/v1/admin/errors", headers=admin_headers,
        json={"errorId": str(entry.id), "resolved": True},
    )
    assert resolved.json()["error"]["resolved"] is True
    assert resolved.json()["error"]["resolved_by"] == str(admin_user.id)

    reopened = await client.patch(
        "/api/v1/admin/errors", headers=admin_headers,
        json={"errorId": str(entry.id), "resolved": False},
    )
    assert reopened.json()["error"]["resolved_at"] is None


async def test_resolve_unknown_error(client, admin_headers):
    res = await client.patch(
        "/api/v1/admin/errors", headers=admin_headers,
        json={"errorId": "00000000-0000-0000-0000-000000000000", "resolved": True},
    )
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Error no encontrado"


async def test_audit_log_filters_search_and_detail(client, admin_headers, user):
    await client.post(
        "/api/v1/auth/login", json={"email": user.email, "password": "Tango7Delta9"},
    )
    client.cookies.clear()
    await client.post(
        "/api/v1/auth/login", json={"email": user.email, "password": "Wrong7Pass9"},
    )

    failures = await client.get(
        "/api/v1/admin/audit-logs", headers=admin_headers,
        params={"category": "authentication", "status": "failure", "stats": "true"},
    )
    body = failures.json()
    assert body["total"] == 1
    assert body["logs"][0]["action"] == "user.login"
    assert body["stats"]["totalEvents"] >= 2

    by_user = await client.get(
        "/api/v1/admin/audit-logs", headers=admin_headers, params={"userId": str(user.id)},
    )
    assert {log["user_email"] for log in by_user.json()["logs"]} == {"ana@example.com"}

    searched = await client.get(
        "/api/v1/admin/audit-logs", headers=admin_headers, params={"q": "login"},
    )
    assert searched.json()["total"] == 2

    log_id = body["logs"][0]["id"]
    detail = await client.get(f"/api/v1/admin/audit-logs/{log_id}", headers=admin_headers)
    assert detail.json()["log"]["id"] == log_id


async def test_audit_log_detail_not_found(client, admin_headers):
    res = await client.get(
        "/api/v1/admin/audit-logs/00000000-0000-0000-0000-000000000000",
        headers=admin_headers,
    )
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Registro no encontrado"
