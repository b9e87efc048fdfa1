"""Route Dependencies — current user resolution, admin guard, rate limiting, cookies.

Invariants:
    - Token read from the auth cookie first, then "Authorization: Bearer"
    - A token whose user no longer exists is treated as unauthenticated
    - require_admin raises PermissionDeniedError (403) for non-admins
    - The auth cookie is httpOnly, SameSite=Lax, path "/", secure only in production

Design Decisions:
    - One process-wide RateLimiter: counters shared by every router
"""

import logging

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.config import get_settings
from finanwas.core.domain_types import Role
from finanwas.core.errors import (
    AuthenticationError, PermissionDeniedError, RateLimitExceededError,
)
from finanwas.core.rate_limit import (
    RATE_LIMITS, RateLimiter, client_ip, rate_limit_message,
)
from finanwas.infrastructure.database import get_db
from finanwas.infrastructure.security import create_token, verify_token
from finanwas.models.user import User
from finanwas.services.audit_log import RequestMeta
from finanwas.services.users import UserService

logger = logging.getLogger(__name__)

rate_limiter = RateLimiter()


def request_meta(request: Request) -> RequestMeta:
    return RequestMeta(
        ip_address=client_ip(request.headers),
        user_agent=request.headers.get("user-agent"),
    )


def read_token(request: Request) -> str | None:
    token = request.cookies.get(get_settings().auth_cookie_name)
    if token:
        return token
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return None


async def optional_user(
    request: Request, db: AsyncSession = Depends(get_db),
) -> User | None:
    payload = verify_token(read_token(request))
    if payload is None:
        return None
    return await UserService(db).find_by_id(payload.user_id)


async def current_user(user: User | None = Depends(optional_user)) -> User:
    if user is None:
        raise AuthenticationError()
    return user


async def require_admin(user: User = Depends(current_user)) -> User:
    if user.role != Role.ADMIN:
        logger.warning("Non-admin access to admin route", extra={"user_id": str(user.id)})
        raise PermissionDeniedError()
    return user


def enforce_rate_limit(request: Request, endpoint: str, preset: str | None = None) -> None:
    """Count one request for (client IP, endpoint); raise 429 past the limit."""
    config = RATE_LIMITS[preset or endpoint]
    result = rate_limiter.check(client_ip(request.headers), endpoint, config)
    if not result.allowed:
        seconds = rate_limiter.seconds_until_reset(result)
        raise RateLimitExceededError(rate_limit_message(seconds), seconds)


def set_auth_cookie(response: Response, user: User) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=create_token(str(user.id), user.email, user.role),
        max_age=settings.jwt_expiry_days * 24 * 3600,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def clear_auth_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
