"""Two-Factor Routes — setup, enable, login verification, backup codes, disable.

Invariants:
    - setup persists nothing
    - enable requires a valid TOTP for the proposed secret
    - A backup code works exactly once
"""

import pyotp
import pytest
from sqlalchemy import select

from finanwas.infrastructure import two_factor
from finanwas.models.user import User
from tests.services.helpers import auth_headers

SECRET = "JBSWY3DPEHPK3PXPJBSWY3DP"


@pytest.fixture
async def two_factor_user(user, test_db):
    codes = two_factor.generate_backup_codes()
    user.two_factor_enabled = True
    user.two_factor_secret = SECRET
    user.two_factor_backup_codes = two_factor.hash_backup_codes(codes)
    await test_db.commit()
    return user, codes


async def _reload(test_db, user_id) -> User:
    return (await test_db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True),
    )).scalar_one()


async def test_setup_returns_secret_and_qr_without_saving(client, user, user_headers, test_db):
    res = await client.post("/api/v1/auth/2fa/setup", headers=user_headers)

    assert res.status_code == 200
    body = res.json()
    assert len(body["secret"]) >= 16
    assert body["qrCode"].startswith("data:image/png;base64,")
    assert (await _reload(test_db, user.id)).two_factor_secret is None


async def test_enable_with_valid_token(client, user, user_headers, test_db):
    res = await client.post(
        "/api/v1/auth/2fa/enable", headers=user_headers,
        json={"secret": SECRET, "token": pyotp.TOTP(SECRET).now()},
    )

    assert res.status_code == 200
    codes = res.json()["backupCodes"]
    assert len(codes) == 8
    assert all(len(c) == 14 and c.count("-") == 2 for c in codes)

    stored = await _reload(test_db, user.id)
    assert stored.two_factor_enabled is True
    assert stored.two_factor_secret == SECRET
    assert codes[0] not in stored.two_factor_backup_codes


async def test_enable_rejects_invalid_token(client, user_headers, monkeypatch):
    monkeypatch.setattr(two_factor, "verify_totp", lambda secret, token: False)
    res = await client.post(
        "/api/v1/auth/2fa/enable", headers=user_headers,
        json={"secret": SECRET, "token": "123456"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Código de verificación inválido"


async def test_enable_rejects_malformed_token(client, user_headers):
    res = await client.post(
        "/api/v1/auth/2fa/enable", headers=user_headers,
        json={"secret": SECRET, "token": "12ab"},
    )
    assert res.status_code == 400


async def test_setup_refused_when_already_enabled(client, two_factor_user):
    user, _ = two_factor_user
    res = await client.post("/api/v1/auth/2fa/setup", headers=auth_headers(user))
    assert res.status_code == 400


async def test_verify_totp_issues_cookie(client, two_factor_user):
    user, _ = two_factor_user
    res = await client.post(
        "/api/v1/auth/2fa/verify",
        json={"userId": str(user.id), "token": pyotp.TOTP(SECRET).now()},
    )
    assert res.status_code == 200
    assert "auth-token" in res.cookies
    assert "remainingBackupCodes" not in res.json()


async def test_backup_code_is_single_use(client, two_factor_user, test_db):
    user, codes = two_factor_user
    payload = {"userId": str(user.id), "token": codes[3].lower(), "isBackupCode": True}

    first = await client.post("/api/v1/auth/2fa/verify", json=payload)
    assert first.status_code == 200
    assert first.json()["remainingBackupCodes"] == 7
    assert len((await _reload(test_db, user.id)).two_factor_backup_codes) == 7

    second = await client.post("/api/v1/auth/2fa/verify", json=payload)
    assert second.status_code == 401
    assert second.json()["error"]["message"] == "Código inválido"


async def test_verify_for_user_without_two_factor(client, user):
    res = await client.post(
        "/api/v1/auth/2fa/verify", json={"userId": str(user.id), "token": "123456"},
    )
    assert res.status_code == 401


async def test_disable_requires_password(client, two_factor_user, test_db):
    user, _ = two_factor_user
    headers = auth_headers(user)

    wrong = await client.post(
        "/api/v1/auth/2fa/disable", headers=headers, json={"password": "Wrong7Pass9"},
    )
    assert wrong.status_code == 401

    ok = await client.post(
        "/api/v1/auth/2fa/disable", headers=headers, json={"password": "Tango7Delta9"},
    )
    assert ok.status_code == 200
    stored = await _reload(test_db, user.id)
    assert stored.two_factor_enabled is False
    assert stored.two_factor_secret is None
    assert stored.two_factor_backup_codes is None
