"""Data Export — everything stored about one user, as a single JSON document.

Invariants:
    - Never includes password hash, 2FA secret or backup codes
    - Sections always present (empty list / None when there is no data)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.models.invitation_code import InvitationCode
from finanwas.models.user import User
from finanwas.services.goals import GoalService
from finanwas.services.notes import NoteService
from finanwas.services.portfolio import PortfolioService
from finanwas.services.profiles import ProfileService
from finanwas.services.progress import ProgressService
from finanwas.services.tips import TipService


def export_filename(extension: str, now: datetime | None = None) -> str:
    day = (now or datetime.now(timezone.utc)).date().isoformat()
    return f"finanwas-data-export-{day}.{extension}"


async def build_user_export(db: AsyncSession, user: User) -> dict:
    user_id: uuid.UUID = user.id
    profile = await ProfileService(db).get(user_id)
    codes = (await db.execute(
        select(InvitationCode).where(InvitationCode.used_by == user_id),
    )).scalars().all()

    return {
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "user": user.to_public(),
        "profile": profile.to_dict() if profile else None,
        "portfolio": [a.to_dict() for a in await PortfolioService(db).list_assets(user_id)],
        "goals": [
            {**g.to_dict(), "contributions": [c.to_dict() for c in g.contributions]}
            for g in await GoalService(db).list_goals(user_id)
        ],
        "lessonProgress": [
            p.to_dict() for p in await ProgressService(db).list_progress(user_id)
        ],
        "tips": [v.to_dict() for v in await TipService(db).list_views(user_id)],
        "notes": [n.to_dict() for n in await NoteService(db).list_notes(user_id)],
        "invitationCodesUsed": [
            {
                "code": c.code,
                "used_at": c.used_at.isoformat() if c.used_at else None,
            }
            for c in codes
        ],
    }
