"""Goal Routes — savings goals, progress and contributions."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import current_user, request_meta
from finanwas.core.dates import parse_iso_date, utc_today
from finanwas.core.errors import ValidationFailedError
from finanwas.infrastructure.database import get_db
from finanwas.models.user import User
from finanwas.schemas.goals import ContributionCreate, GoalCreate, GoalUpdate
from finanwas.services import audit_log
from finanwas.services.goals import GoalService, goal_to_dict

router = APIRouter(prefix="/api/v1/goals", tags=["goals"])


@router.get("")
async def list_goals(user: User = Depends(current_user), db: AsyncSession = Depends(get_db)):
    today = utc_today()
    goals = await GoalService(db).list_goals(user.id)
    return {"goals": [goal_to_dict(g, today) for g in goals]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_goal(
    body: GoalCreate, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    goal = await GoalService(db).create_goal(user.id, body.model_dump())
    await audit_log.log_goal_change(
        db, user.id, "create", goal.id, request_meta(request),
        {"name": goal.name, "target_amount": goal.target_amount},
    )
    return {"goal": goal_to_dict(goal, utc_today())}


@router.get("/{goal_id}")
async def get_goal(
    goal_id: UUID, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    goal = await GoalService(db).get_goal(user.id, goal_id)
    return {"goal": goal_to_dict(goal, utc_today(), with_contributions=True)}


@router.put("/{goal_id}")
async def update_goal(
    goal_id: UUID, body: GoalUpdate, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True)
    goal = await GoalService(db).update_goal(user.id, goal_id, changes)
    await audit_log.log_goal_change(
        db, user.id, "update", goal.id, request_meta(request), {"fields": sorted(changes)},
    )
    return {"goal": goal_to_dict(goal, utc_today())}


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: UUID, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    await GoalService(db).delete_goal(user.id, goal_id)
    await audit_log.log_goal_change(db, user.id, "delete", goal_id, request_meta(request))
    return {"success": True, "message": "Meta eliminada"}


@router.get("/{goal_id}/contributions")
async def list_contributions(
    goal_id: UUID, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    contributions = await GoalService(db).list_contributions(user.id, goal_id)
    return {"contributions": [c.to_dict() for c in contributions]}


@router.post("/{goal_id}/contributions", status_code=status.HTTP_201_CREATED)
async def add_contribution(
    goal_id: UUID, body: ContributionCreate, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    contribution_date = None
    if body.date:
        try:
            contribution_date = parse_iso_date(body.date)
        except ValueError:
            raise ValidationFailedError("Fecha inválida", field="date")
    goal, contribution = await GoalService(db).add_contribution(
        user.id, goal_id, body.amount, contribution_date, body.notes,
    )
    await audit_log.log_goal_change(
        db, user.id, "contribution", goal.id, request_meta(request), {"amount": body.amount},
    )
    return {
        "goal": goal_to_dict(goal, utc_today()),
        "contribution": contribution.to_dict(),
    }
