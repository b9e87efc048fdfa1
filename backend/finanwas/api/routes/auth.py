"""Auth Routes — login, registration, invitation codes, current user and logout.

Invariants:
    - Unknown email and wrong password produce the same 401 message
    - Users with 2FA enabled get no cookie from /login (second step: /auth/2fa/verify)
    - Every login attempt is audited, success or failure
    - login and register are rate limited per client IP
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import (
    clear_auth_cookie, current_user, enforce_rate_limit, optional_user,
    request_meta, set_auth_cookie,
)
from finanwas.core.errors import AuthenticationError, BusinessRuleError, ValidationFailedError
from finanwas.core.sanitize import sanitize_email, sanitize_string
from finanwas.core.validators import is_valid_email, validate_password
from finanwas.infrastructure.database import get_db
from finanwas.infrastructure.security import verify_password
from finanwas.models.user import User
from finanwas.schemas.auth import LoginRequest, RegisterRequest, ValidateCodeRequest
from finanwas.services import audit_log
from finanwas.services.users import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

INVALID_CREDENTIALS = "Email o contraseña incorrectos"
INVALID_CODE = "Código de invitación inválido o ya utilizado"


@router.post("/login")
async def login(
    body: LoginRequest, request: Request, response: Response,
    db: AsyncSession = Depends(get_db),
):
    enforce_rate_limit(request, "login")
    email = sanitize_email(body.email)
    if not email or not body.password:
        raise ValidationFailedError("Email y contraseña son requeridos")

    meta = request_meta(request)
    if not is_valid_email(email):
        await audit_log.log_login(db, None, email, False, meta, "invalid_email")
        raise AuthenticationError(INVALID_CREDENTIALS)

    users = UserService(db)
    user = await users.find_by_email(email)
    if user is None or not verify_password(body.password, user.password_hash):
        await audit_log.log_login(
            db, user.id if user else None, email, False, meta,
            "unknown_user" if user is None else "wrong_password",
        )
        raise AuthenticationError(INVALID_CREDENTIALS)

    if user.two_factor_enabled:
        return {
            "success": True,
            "requires2FA": True,
            "userId": str(user.id),
            "email": user.email,
            "name": user.name,
        }

    await users.touch_last_login(user)
    set_auth_cookie(response, user)
    await audit_log.log_login(db, user.id, email, True, meta)
    logger.info("User logged in", extra={"user_id": str(user.id)})
    return {"success": True, "user": user.to_public()}


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest, request: Request, response: Response,
    db: AsyncSession = Depends(get_db),
):
    enforce_rate_limit(request, "register")
    code = sanitize_string(body.code, 50)
    name = sanitize_string(body.name, 255)
    email = sanitize_email(body.email)

    if not (code and name and email and body.password):
        raise ValidationFailedError("Todos los campos son requeridos")
    if not is_valid_email(email):
        raise ValidationFailedError("Email inválido", field="email")
    check = validate_password(body.password)
    if not check.is_valid:
        raise ValidationFailedError(". ".join(check.errors), field="password")

    users = UserService(db)
    if await users.get_unused_code(code) is None:
        raise BusinessRuleError(INVALID_CODE, "INVALID_INVITATION_CODE")
    if await users.find_by_email(email) is not None:
        raise BusinessRuleError("El email ya está registrado", "EMAIL_TAKEN")

    user = await users.register(email, body.password, name, code)
    set_auth_cookie(response, user)
    await audit_log.log_register(db, user.id, email, request_meta(request))
    logger.info("User registered", extra={"user_id": str(user.id)})
    return {"success": True, "user": user.to_public()}


@router.post("/validate-code")
async def validate_code(body: ValidateCodeRequest, db: AsyncSession = Depends(get_db)):
    code = sanitize_string(body.code, 50)
    if not code:
        raise ValidationFailedError("El código es requerido", field="code")
    if await UserService(db).get_unused_code(code) is None:
        raise BusinessRuleError(INVALID_CODE, "INVALID_INVITATION_CODE")
    return {"valid": True}


@router.get("/me")
async def me(user: User = Depends(current_user)):
    return {"user": user.to_public()}


@router.post("/logout")
async def logout(
    request: Request, response: Response,
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_db),
):
    clear_auth_cookie(response)
    if user is not None:
        await audit_log.log_logout(db, user.id, request_meta(request))
    return {"success": True, "message": "Sesión cerrada"}
