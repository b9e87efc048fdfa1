"""Monitoring Routes — error reports from the browser and other clients.

Invariants:
    - Anonymous reports accepted; the user is attached when a valid cookie is present
    - Always answers {success: true}: reporting never fails the caller
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import optional_user, request_meta
from finanwas.infrastructure.database import get_db
from finanwas.models.user import User
from finanwas.schemas.monitoring import ErrorReport
from finanwas.services.error_log import record_error

router = APIRouter(prefix="/api/v1/monitoring", tags=["monitoring"])


@router.post("/log")
async def log_error(
    body: ErrorReport, request: Request,
    user: User | None = Depends(optional_user),
    db: AsyncSession = Depends(get_db),
):
    meta = request_meta(request)
    await record_error(
        db,
        level=body.level,
        source=body.source,
        message=body.message,
        stack_trace=body.stack_trace,
        error_code=body.error_code,
        user_id=user.id if user else None,
        url=body.url,
        user_agent=meta.user_agent,
        ip_address=meta.ip_address,
        metadata=body.metadata,
    )
    return {"success": True}
