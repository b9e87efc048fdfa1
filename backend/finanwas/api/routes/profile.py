"""Profile & Tips Routes — investor questionnaire and the tip of the day."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import current_user, request_meta
from finanwas.core.dates import utc_today
from finanwas.core.investor_type import calculate_investor_type
from finanwas.infrastructure.database import get_db
from finanwas.models.user import User
from finanwas.schemas.profile import ProfileUpdate
from finanwas.services import audit_log
from finanwas.services.profiles import ProfileService
from finanwas.services.tips import TipService

router = APIRouter(prefix="/api/v1", tags=["profile"])


def _profile_response(profile) -> dict:
    investor = calculate_investor_type(profile)
    return {
        "profile": profile.to_dict(),
        "investorType": investor.value if investor else None,
    }


@router.get("/profile")
async def get_profile(user: User = Depends(current_user), db: AsyncSession = Depends(get_db)):
    return _profile_response(await ProfileService(db).get_or_create(user.id))


@router.put("/profile")
async def update_profile(
    body: ProfileUpdate, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True)
    profile = await ProfileService(db).update(user.id, changes)
    await audit_log.log_profile_update(db, user.id, sorted(changes), request_meta(request))
    return _profile_response(profile)


@router.get("/tips/today")
async def tip_of_the_day(
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    profile = await ProfileService(db).get(user.id)
    tip, view = await TipService(db).tip_of_the_day(
        user.id, profile.knowledge_level if profile else None, utc_today(),
    )
    return {"tip": tip.to_dict(), "saved": view.saved}


@router.get("/tips/saved")
async def saved_tips(user: User = Depends(current_user), db: AsyncSession = Depends(get_db)):
    return {"tips": await TipService(db).saved_tips(user.id)}


@router.post("/tips/{tip_id}/save")
async def toggle_saved_tip(
    tip_id: str, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await TipService(db).toggle_saved(user.id, tip_id)
    return {"success": True, "tipId": tip_id, "saved": view.saved}
