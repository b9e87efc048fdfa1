"""Profile Service — get-or-create and partial update of the investor questionnaire."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.models.user_profile import UserProfile


class ProfileService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> UserProfile | None:
        result = await self.db.execute(
            select(UserProfile).where(UserProfile.user_id == user_id),
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, user_id: uuid.UUID) -> UserProfile:
        profile = await self.get(user_id)
        if profile is None:
            profile = UserProfile(user_id=user_id)
            self.db.add(profile)
            await self.db.commit()
            await self.db.refresh(profile)
        return profile

    async def update(self, user_id: uuid.UUID, changes: dict) -> UserProfile:
        """Apply only the provided fields; stamp questionnaire completion once."""
        profile = await self.get_or_create(user_id)
        for key, value in changes.items():
            if key in UserProfile.PROFILE_FIELDS:
                setattr(profile, key, value)
        if changes.get("questionnaire_completed") and not profile.questionnaire_completed_at:
            profile.questionnaire_completed_at = datetime.now(timezone.utc)
        profile.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(profile)
        return profile
