"""Goal Service — savings goals and contributions, scoped by user.

Invariants:
    - add_contribution() rejects amount <= 0 before touching the DB
    - completed_at is stamped the first time current_amount reaches target
    - Deleting a goal cascades to its contributions (ORM delete-orphan)
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.errors import ResourceNotFoundError, ValidationFailedError
from finanwas.core.goal_progress import goal_progress, reached_target
from finanwas.models.savings_goal import SavingsGoal, SavingsContribution

GOAL_FIELDS = ("name", "target_amount", "current_amount", "currency", "target_date")


class GoalService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_goals(self, user_id: uuid.UUID) -> list[SavingsGoal]:
        result = await self.db.execute(
            select(SavingsGoal)
            .where(SavingsGoal.user_id == user_id)
            .order_by(SavingsGoal.created_at.desc()),
        )
        return list(result.scalars().all())

    async def get_goal(self, user_id: uuid.UUID, goal_id: uuid.UUID) -> SavingsGoal:
        result = await self.db.execute(
            select(SavingsGoal)
            .where(SavingsGoal.id == goal_id)
            .where(SavingsGoal.user_id == user_id),
        )
        goal = result.scalar_one_or_none()
        if goal is None:
            raise ResourceNotFoundError("goal", str(goal_id), "Meta no encontrada")
        return goal

    async def create_goal(self, user_id: uuid.UUID, data: dict) -> SavingsGoal:
        goal = SavingsGoal(user_id=user_id, current_amount=0.0, contributions=[])
        for key in GOAL_FIELDS:
            if data.get(key) is not None:
                setattr(goal, key, data[key])
        if reached_target(goal.current_amount, goal.target_amount):
            goal.completed_at = datetime.now(timezone.utc)
        self.db.add(goal)
        await self.db.commit()
        return goal

    async def update_goal(
        self, user_id: uuid.UUID, goal_id: uuid.UUID, changes: dict,
    ) -> SavingsGoal:
        goal = await self.get_goal(user_id, goal_id)
        for key, value in changes.items():
            if key in GOAL_FIELDS:
                setattr(goal, key, value)
        self._sync_completion(goal)
        goal.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        return goal

    async def delete_goal(self, user_id: uuid.UUID, goal_id: uuid.UUID) -> None:
        goal = await self.get_goal(user_id, goal_id)
        await self.db.delete(goal)
        await self.db.commit()

    async def add_contribution(
        self,
        user_id: uuid.UUID,
        goal_id: uuid.UUID,
        amount: float,
        contribution_date: date | None = None,
        notes: str | None = None,
    ) -> tuple[SavingsGoal, SavingsContribution]:
        if amount is None or amount <= 0:
            raise ValidationFailedError("El monto debe ser mayor a 0", field="amount")
        goal = await self.get_goal(user_id, goal_id)
        contribution = SavingsContribution(
            amount=amount,
            contribution_date=contribution_date or datetime.now(timezone.utc).date(),
            notes=notes,
        )
        goal.contributions.append(contribution)
        goal.current_amount = (goal.current_amount or 0.0) + amount
        self._sync_completion(goal)
        goal.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        return goal, contribution

    async def list_contributions(
        self, user_id: uuid.UUID, goal_id: uuid.UUID,
    ) -> list[SavingsContribution]:
        goal = await self.get_goal(user_id, goal_id)
        return list(goal.contributions)

    @staticmethod
    def _sync_completion(goal: SavingsGoal) -> None:
        if goal.completed_at is None and reached_target(goal.current_amount, goal.target_amount):
            goal.completed_at = datetime.now(timezone.utc)


def goal_to_dict(goal: SavingsGoal, today: date, with_contributions: bool = False) -> dict:
    data = goal.to_dict()
    data["progress"] = goal_progress(
        goal.current_amount, goal.target_amount, goal.target_date, today,
    )
    if with_contributions:
        data["contributions"] = [c.to_dict() for c in goal.contributions]
    return data
