"""Tip Service — tip of the day selection and saved-tip bookkeeping."""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.errors import BusinessRuleError, ResourceNotFoundError
from finanwas.core.tips_catalog import TIPS_BY_ID, Tip, select_tip_of_the_day
from finanwas.models.tip_view import TipView


class TipService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_views(self, user_id: uuid.UUID) -> list[TipView]:
        result = await self.db.execute(
            select(TipView)
            .where(TipView.user_id == user_id)
            .order_by(TipView.viewed_at.desc()),
        )
        return list(result.scalars().all())

    async def _find(self, user_id: uuid.UUID, tip_id: str) -> TipView | None:
        result = await self.db.execute(
            select(TipView)
            .where(TipView.user_id == user_id)
            .where(TipView.tip_id == tip_id),
        )
        return result.scalar_one_or_none()

    async def tip_of_the_day(
        self, user_id: uuid.UUID, knowledge_level: str | None, today: date,
    ) -> tuple[Tip, TipView]:
        """Pick today's tip and record the view (idempotent per tip)."""
        viewed = {v.tip_id for v in await self.list_views(user_id)}
        tip = select_tip_of_the_day(knowledge_level, viewed, today)
        view = await self._find(user_id, tip.id)
        if view is None:
            view = TipView(user_id=user_id, tip_id=tip.id, saved=False)
            self.db.add(view)
        else:
            view.viewed_at = datetime.now(timezone.utc)
        await self.db.commit()
        return tip, view

    async def toggle_saved(self, user_id: uuid.UUID, tip_id: str) -> TipView:
        if tip_id not in TIPS_BY_ID:
            raise ResourceNotFoundError("tip", tip_id, "Consejo no encontrado")
        view = await self._find(user_id, tip_id)
        if view is None:
            raise BusinessRuleError(
                "Debes ver el consejo antes de guardarlo", "TIP_NOT_VIEWED",
            )
        view.saved = not view.saved
        await self.db.commit()
        return view

    async def saved_tips(self, user_id: uuid.UUID) -> list[dict]:
        return [
            TIPS_BY_ID[v.tip_id].to_dict()
            for v in await self.list_views(user_id)
            if v.saved and v.tip_id in TIPS_BY_ID
        ]
