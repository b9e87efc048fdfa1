"""Two-Factor Routes — TOTP setup, enable, disable and login verification.

Invariants:
    - setup never persists anything: the secret is stored only once /enable
      proves the user can produce a valid code for it
    - Backup codes are returned in plaintext exactly once (on /enable)
    - A consumed backup code is removed before the session cookie is issued
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import current_user, enforce_rate_limit, request_meta, set_auth_cookie
from finanwas.core.errors import AuthenticationError, BusinessRuleError, ValidationFailedError
from finanwas.infrastructure import two_factor
from finanwas.infrastructure.database import get_db
from finanwas.infrastructure.security import verify_password
from finanwas.models.user import User
from finanwas.schemas.auth import (
    TwoFactorDisableRequest, TwoFactorEnableRequest, TwoFactorVerifyRequest,
)
from finanwas.services import audit_log
from finanwas.services.users import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth/2fa", tags=["two-factor"])


@router.post("/setup")
async def setup(user: User = Depends(current_user)):
    if user.two_factor_enabled:
        raise BusinessRuleError("La autenticación de dos factores ya está habilitada", "2FA_ENABLED")
    secret = two_factor.generate_secret()
    uri = two_factor.provisioning_uri(secret, user.email)
    return {"secret": secret, "qrCode": two_factor.qr_code_data_url(uri)}


@router.post("/enable")
async def enable(
    body: TwoFactorEnableRequest, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    if user.two_factor_enabled:
        raise BusinessRuleError("La autenticación de dos factores ya está habilitada", "2FA_ENABLED")
    if not two_factor.verify_totp(body.secret, body.token):
        raise ValidationFailedError("Código de verificación inválido", field="token")

    codes = two_factor.generate_backup_codes()
    await UserService(db).enable_two_factor(
        user, body.secret, two_factor.hash_backup_codes(codes),
    )
    await audit_log.log_two_factor(db, user.id, "enable", True, request_meta(request))
    logger.info("2FA enabled", extra={"user_id": str(user.id)})
    return {
        "success": True,
        "backupCodes": codes,
        "message": "Autenticación de dos factores habilitada",
    }


@router.post("/disable")
async def disable(
    body: TwoFactorDisableRequest, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    if not user.two_factor_enabled:
        raise BusinessRuleError("La autenticación de dos factores no está habilitada", "2FA_DISABLED")
    meta = request_meta(request)
    if not verify_password(body.password, user.password_hash):
        await audit_log.log_two_factor(db, user.id, "disable", False, meta)
        raise AuthenticationError("Contraseña incorrecta")

    await UserService(db).disable_two_factor(user)
    await audit_log.log_two_factor(db, user.id, "disable", True, meta)
    return {"success": True, "message": "Autenticación de dos factores deshabilitada"}


@router.post("/verify")
async def verify(
    body: TwoFactorVerifyRequest, request: Request, response: Response,
    db: AsyncSession = Depends(get_db),
):
    enforce_rate_limit(request, "2fa_verify", preset="login")
    users = UserService(db)
    user = await users.find_by_id(body.user_id)
    if user is None or not user.two_factor_enabled:
        raise AuthenticationError("Verificación inválida")

    meta = request_meta(request)
    remaining = None
    if body.is_backup_code:
        index = two_factor.match_backup_code(body.token, user.two_factor_backup_codes)
        valid = index is not None
        if valid:
            remaining = await users.consume_backup_code(user, index)
    else:
        valid = two_factor.verify_totp(user.two_factor_secret, body.token)

    if not valid:
        await audit_log.log_two_factor(
            db, user.id, "verify", False, meta,
            {"method": "backup_code" if body.is_backup_code else "totp"},
        )
        raise AuthenticationError("Código inválido")

    await users.touch_last_login(user)
    set_auth_cookie(response, user)
    await audit_log.log_two_factor(
        db, user.id, "verify", True, meta,
        {"method": "backup_code" if body.is_backup_code else "totp"},
    )
    result = {"success": True, "user": user.to_public()}
    if remaining is not None:
        result["remainingBackupCodes"] = remaining
    return result
