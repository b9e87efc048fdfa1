"""Admin Service — user listing, user statistics and invitation code listing.

Invariants:
    - User rows go out through User.to_public(): no password hash, no 2FA data
    - activeUsers counts last_login within ACTIVE_WINDOW_DAYS
    - averageLoginFrequency averages days-since-signup (min 1) over users
      who have logged in at least once
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.dates import ensure_utc
from finanwas.models.invitation_code import InvitationCode
from finanwas.models.user import User
from finanwas.models.user_profile import UserProfile

ACTIVE_WINDOW_DAYS = 30


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def user_stats(db: AsyncSession, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    users = await list_users(db)
    completed = (await db.execute(
        select(UserProfile.user_id).where(UserProfile.questionnaire_completed.is_(True)),
    )).scalars().all()

    active_since = now - timedelta(days=ACTIVE_WINDOW_DAYS)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    by_role: dict[str, int] = {}
    active = 0
    new_this_month = 0
    login_ages = []
    for user in users:
        by_role[user.role] = by_role.get(user.role, 0) + 1
        created = ensure_utc(user.created_at)
        last_login = ensure_utc(user.last_login)
        if last_login and last_login >= active_since:
            active += 1
        if created and created >= month_start:
            new_this_month += 1
        if last_login and created:
            login_ages.append(max((now - created).days, 1))

    return {
        "totalUsers": len(users),
        "activeUsers": active,
        "newUsersThisMonth": new_this_month,
        "usersWithCompletedQuestionnaire": len(completed),
        "usersByRole": by_role,
        "averageLoginFrequency": (
            round(sum(login_ages) / len(login_ages), 2) if login_ages else 0
        ),
    }


async def list_invitation_codes(db: AsyncSession) -> list[dict]:
    result = await db.execute(
        select(InvitationCode, User.email)
        .outerjoin(User, User.id == InvitationCode.used_by)
        .order_by(InvitationCode.created_at.desc()),
    )
    return [
        {
            "id": str(code.id),
            "code": code.code,
            "created_at": code.created_at.isoformat() if code.created_at else None,
            "used_at": code.used_at.isoformat() if code.used_at else None,
            "used_by": str(code.used_by) if code.used_by else None,
            "used_by_email": email,
        }
        for code, email in result.all()
    ]
