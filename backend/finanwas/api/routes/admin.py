"""Admin Routes — users, invitation codes, error log and audit trail.

Invariants:
    - Every route depends on require_admin (401 anonymous, 403 non-admin)
    - Admin actions that change state are audited under the admin's id
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import request_meta, require_admin
from finanwas.core.errors import ResourceNotFoundError
from finanwas.infrastructure.database import get_db
from finanwas.models.user import User
from finanwas.schemas.monitoring import ErrorResolve
from finanwas.services import admin, audit_log, error_log
from finanwas.services.users import UserService

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/users")
async def list_users(
    stats: bool = Query(False),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    users = await admin.list_users(db)
    result = {"users": [u.to_public() for u in users]}
    if stats:
        result["stats"] = await admin.user_stats(db)
    return result


@router.get("/codes")
async def list_codes(_admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return {"codes": await admin.list_invitation_codes(db)}


@router.post("/codes", status_code=status.HTTP_201_CREATED)
async def create_code(
    request: Request,
    current_admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    code = await UserService(db).generate_invitation_code()
    await audit_log.log_admin_action(
        db, current_admin.id, "create_invitation_code", request_meta(request),
        resource_type="invitation_code", resource_id=str(code.id),
        metadata={"code": code.code},
    )
    return {
        "success": True,
        "code": {
            "id": str(code.id),
            "code": code.code,
            "created_at": code.created_at.isoformat() if code.created_at else None,
        },
    }


@router.get("/errors")
async def list_errors(
    level: str | None = Query(None),
    source: str | None = Query(None),
    resolved: bool | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    errors = await error_log.list_errors(db, level, source, resolved, limit)
    return {
        "errors": [e.to_dict() for e in errors],
        "stats": await error_log.error_stats(db),
    }


@router.patch("/errors")
async def resolve_error(
    body: ErrorResolve, request: Request,
    current_admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    entry = await error_log.set_resolved(db, body.error_id, body.resolved, current_admin.id)
    await audit_log.log_admin_action(
        db, current_admin.id, "resolve_error", request_meta(request),
        resource_type="error_log", resource_id=str(entry.id),
        metadata={"resolved": body.resolved},
    )
    return {"success": True, "error": entry.to_dict()}


@router.get("/audit-logs")
async def audit_logs(
    stats: bool = Query(False),
    q: str | None = Query(None, max_length=200),
    user_id: UUID | None = Query(None, alias="userId"),
    category: str | None = Query(None),
    action: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    resource_type: str | None = Query(None, alias="resourceType"),
    resource_id: str | None = Query(None, alias="resourceId"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if q:
        logs = await audit_log.search_audit_logs(db, q, limit)
    else:
        logs = await audit_log.get_audit_logs(db, audit_log.AuditFilters(
            user_id=user_id, category=category, action=action, status=status_filter,
            resource_type=resource_type, resource_id=resource_id,
            start_date=start_date, end_date=end_date, limit=limit, offset=offset,
        ))
    result = {"logs": logs, "total": len(logs)}
    if stats:
        result["stats"] = await audit_log.get_audit_stats(db)
    return result


@router.get("/audit-logs/{log_id}")
async def audit_log_detail(
    log_id: UUID, _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    entry = await audit_log.get_audit_log(db, log_id)
    if entry is None:
        raise ResourceNotFoundError("audit_log", str(log_id), "Registro no encontrado")
    return {"log": entry}
