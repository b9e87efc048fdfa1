"""Security Primitives — bcrypt password hashing and HS256 JWT session tokens.

Invariants:
    - Passwords hashed with bcrypt (cost from settings, default 10)
    - verify_password never raises: malformed hashes count as a mismatch
    - Token payload is {userId, email, role, iat, exp}; expiry from settings (7 days)
    - verify_token returns None for expired, tampered or malformed tokens

Design Decisions:
    - PyJWT + bcrypt directly (no passlib): two calls each, nothing to wrap
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from finanwas.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    email: str
    role: str


def hash_password(password: str, rounds: int | None = None) -> str:
    rounds = rounds or get_settings().bcrypt_rounds
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"), password_hash.encode("utf-8"),
        )
    except ValueError:
        logger.warning("Malformed password hash encountered")
        return False


def create_token(user_id: str, email: str, role: str) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "userId": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expiry_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str | None) -> TokenPayload | None:
    if not token:
        return None
    settings = get_settings()
    try:
        data = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Expired auth token presented")
        return None
    except jwt.InvalidTokenError:
        return None
    if not all(k in data for k in ("userId", "email", "role")):
        return None
    return TokenPayload(data["userId"], data["email"], data["role"])
