"""User Routes — own account, activity trail and data export.

Invariants:
    - Activity metadata passes through strip_sensitive() before leaving the API
    - export-data is audited in both formats
    - Password changes are audited whether they succeed or not
"""

import json
import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import current_user, enforce_rate_limit, request_meta
from finanwas.core.csv_export import generate_portfolio_csv
from finanwas.core.errors import AuthenticationError, ValidationFailedError
from finanwas.core.validators import validate_password
from finanwas.infrastructure.database import get_db
from finanwas.infrastructure.security import verify_password
from finanwas.models.user import User
from finanwas.schemas.auth import PasswordChangeRequest
from finanwas.services import audit_log
from finanwas.services.export import build_user_export, export_filename
from finanwas.services.portfolio import PortfolioService
from finanwas.services.profiles import ProfileService
from finanwas.services.users import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/user", tags=["user"])


@router.get("/me")
async def me(user: User = Depends(current_user), db: AsyncSession = Depends(get_db)):
    profile = await ProfileService(db).get(user.id)
    return {"user": user.to_public(), "profile": profile.to_dict() if profile else None}


@router.get("/activity")
async def activity(
    activity_type: str = Query("all", alias="type", pattern="^(all|security)$"),
    limit: int = Query(50, ge=1, le=100),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    if activity_type == "security":
        entries = await audit_log.get_security_events(db, user.id, limit)
    else:
        entries = await audit_log.get_user_timeline(db, user.id, limit)
    for entry in entries:
        entry["metadata"] = audit_log.strip_sensitive(entry["metadata"])
    return {"activity": entries, "total": len(entries)}


@router.get("/export-data")
async def export_data(
    request: Request,
    export_format: str = Query("json", alias="format", pattern="^(json|csv)$"),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    if export_format == "csv":
        assets = await PortfolioService(db).list_assets(user.id)
        content = generate_portfolio_csv(assets)
        media_type = "text/csv; charset=utf-8"
    else:
        content = json.dumps(await build_user_export(db, user), ensure_ascii=False, indent=2)
        media_type = "application/json"

    await audit_log.log_data_export(db, user.id, export_format, request_meta(request))
    logger.info("User data exported", extra={"user_id": str(user.id)})
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(export_format)}"',
        },
    )


@router.post("/password")
async def change_password(
    body: PasswordChangeRequest, request: Request,
    user: User = Depends(current_user), db: AsyncSession = Depends(get_db),
):
    enforce_rate_limit(request, "password_change", preset="password_reset")
    if not (body.old_password and body.new_password):
        raise ValidationFailedError("Todos los campos son requeridos")
    meta = request_meta(request)
    if not verify_password(body.old_password, user.password_hash):
        await audit_log.log_password_change(db, user.id, False, meta)
        raise AuthenticationError("Contraseña actual incorrecta")
    if body.new_password == body.old_password:
        raise ValidationFailedError(
            "La nueva contraseña debe ser distinta a la actual", field="newPassword",
        )
    check = validate_password(body.new_password)
    if not check.is_valid:
        raise ValidationFailedError(". ".join(check.errors), field="newPassword")

    await UserService(db).change_password(user, body.new_password)
    await audit_log.log_password_change(db, user.id, True, meta)
    logger.info("Password changed", extra={"user_id": str(user.id)})
    return {"success": True, "message": "Contraseña actualizada"}
