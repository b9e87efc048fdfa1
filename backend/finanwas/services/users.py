"""User Service — accounts, invitation codes and two-factor persistence.

Invariants:
    - Emails compared lowercased
    - Invitation code consumption is a conditional UPDATE (used_at IS NULL);
      inside the same transaction as the user insert; losing the race rolls
      both back and raises
    - Registration always leaves a user_profiles row behind

Design Decisions:
    - Service class over free functions: shares the AsyncSession like the
      handler classes do
"""

import logging
import secrets
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.domain_types import Role
from finanwas.core.errors import BusinessRuleError
from finanwas.infrastructure.security import hash_password
from finanwas.models.invitation_code import InvitationCode
from finanwas.models.user import User
from finanwas.models.user_profile import UserProfile

logger = logging.getLogger(__name__)

INVITATION_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
INVITATION_CODE_LENGTH = 8


class UserService:
    """Account persistence operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == email.lower()),
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: uuid.UUID | str) -> User | None:
        try:
            uid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            return None
        return await self.db.get(User, uid)

    async def get_unused_code(self, code: str) -> InvitationCode | None:
        result = await self.db.execute(
            select(InvitationCode)
            .where(InvitationCode.code == code)
            .where(InvitationCode.used_at.is_(None)),
        )
        return result.scalar_one_or_none()

    async def register(
        self, email: str, password: str, name: str, code: str,
    ) -> User:
        """Create user, consume invitation code, create empty profile."""
        user = User(
            email=email.lower(),
            password_hash=hash_password(password),
            name=name,
            role=Role.USER.value,
        )
        self.db.add(user)
        await self.db.flush()

        claimed = await self.db.execute(
            update(InvitationCode)
            .where(InvitationCode.code == code)
            .where(InvitationCode.used_at.is_(None))
            .values(used_at=datetime.now(timezone.utc), used_by=user.id),
        )
        if claimed.rowcount != 1:
            await self.db.rollback()
            logger.warning("Invitation code consumed concurrently", extra={"action": "register"})
            raise BusinessRuleError(
                "Código de invitación inválido o ya utilizado", "INVALID_INVITATION_CODE",
            )

        self.db.add(UserProfile(user_id=user.id))
        await self.db.commit()
        return user

    async def create_user(
        self, email: str, password: str, name: str, role: str = Role.USER.value,
    ) -> User:
        """Direct creation (maintenance CLI), no invitation code."""
        user = User(
            email=email.lower(),
            password_hash=hash_password(password),
            name=name,
            role=role,
        )
        self.db.add(user)
        await self.db.flush()
        self.db.add(UserProfile(user_id=user.id))
        await self.db.commit()
        return user

    async def touch_last_login(self, user: User) -> None:
        user.last_login = datetime.now(timezone.utc)
        await self.db.commit()

    async def enable_two_factor(
        self, user: User, secret: str, hashed_backup_codes: list[str],
    ) -> None:
        user.two_factor_secret = secret
        user.two_factor_backup_codes = hashed_backup_codes
        user.two_factor_enabled = True
        await self.db.commit()

    async def disable_two_factor(self, user: User) -> None:
        user.two_factor_secret = None
        user.two_factor_backup_codes = None
        user.two_factor_enabled = False
        await self.db.commit()

    async def change_password(self, user: User, new_password: str) -> None:
        user.password_hash = hash_password(new_password)
        await self.db.commit()

    async def consume_backup_code(self, user: User, index: int) -> int:
        """Remove the used backup code; returns how many remain."""
        remaining = list(user.two_factor_backup_codes or [])
        remaining.pop(index)
        user.two_factor_backup_codes = remaining
        await self.db.commit()
        return len(remaining)

    async def generate_invitation_code(self, max_attempts: int = 5) -> InvitationCode:
        code = _random_code()
        for _ in range(max_attempts):
            exists = await self.db.execute(
                select(InvitationCode.id).where(InvitationCode.code == code),
            )
            if exists.scalar_one_or_none() is None:
                break
            code = _random_code()
        else:
            raise BusinessRuleError(
                "No se pudo generar un código único", "CODE_GENERATION_FAILED",
            )
        invitation = InvitationCode(code=code)
        self.db.add(invitation)
        await self.db.commit()
        return invitation


def _random_code() -> str:
    return "".join(
        secrets.choice(INVITATION_CODE_ALPHABET) for _ in range(INVITATION_CODE_LENGTH)
    )
