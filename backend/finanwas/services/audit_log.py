"""Audit Log Service — write and query the security/data-change trail.

Invariants:
    - log_audit_event() never raises: a failed insert rolls back its own savepoint
      only, so objects the caller already loaded stay usable
    - Callers commit their own work before auditing (audit commit is separate)
    - Query results are newest first and carry the actor's email and name
    - Activity shown back to users never includes SENSITIVE_KEYS in metadata

Design Decisions:
    - Same AsyncSession as the request: no second connection per request
    - Helpers per action keep action strings and categories in one place
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, func, or_, String, cast
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.domain_types import AuditCategory, AuditStatus
from finanwas.models.audit_log import AuditLog
from finanwas.models.user import User

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = frozenset({
    "password", "oldPassword", "newPassword", "password_hash",
    "secret", "backupCodes", "two_factor_secret",
})

SECURITY_ACTIONS = (
    "user.password_change", "user.2fa_enable", "user.2fa_disable", "user.2fa_verify",
)


@dataclass
class RequestMeta:
    """Client info captured from the HTTP request."""
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass
class AuditFilters:
    user_id: uuid.UUID | None = None
    category: str | None = None
    action: str | None = None
    status: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = 100
    offset: int = 0


async def log_audit_event(
    db: AsyncSession,
    action: str,
    category: AuditCategory | str,
    user_id: uuid.UUID | None = None,
    resource_type: str | None = None,
    resource_id: str | None = None,
    metadata: dict | None = None,
    meta: RequestMeta | None = None,
    status: AuditStatus | str = AuditStatus.SUCCESS,
) -> bool:
    """Persist one audit entry. Returns False (and logs) instead of raising."""
    meta = meta or RequestMeta()
    entry = AuditLog(
        user_id=user_id,
        action=action,
        category=AuditCategory(category).value,
        resource_type=resource_type,
        resource_id=resource_id,
        extra=metadata or {},
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
        status=AuditStatus(status).value,
    )
    try:
        async with db.begin_nested():
            db.add(entry)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error(
            f"Failed to write audit event: {e}",
            extra={"action": action, "user_id": str(user_id) if user_id else None},
        )
        return False
    return True


# ── Action helpers ───────────────────────────────────────────────

async def log_login(
    db: AsyncSession, user_id: uuid.UUID | None, email: str,
    success: bool, meta: RequestMeta, reason: str | None = None,
) -> bool:
    metadata = {"email": email}
    if reason:
        metadata["reason"] = reason
    return await log_audit_event(
        db, "user.login", AuditCategory.AUTHENTICATION, user_id=user_id,
        metadata=metadata, meta=meta,
        status=AuditStatus.SUCCESS if success else AuditStatus.FAILURE,
    )


async def log_logout(db: AsyncSession, user_id: uuid.UUID, meta: RequestMeta) -> bool:
    return await log_audit_event(
        db, "user.logout", AuditCategory.AUTHENTICATION, user_id=user_id, meta=meta,
    )


async def log_register(
    db: AsyncSession, user_id: uuid.UUID, email: str, meta: RequestMeta,
) -> bool:
    return await log_audit_event(
        db, "user.register", AuditCategory.AUTHENTICATION, user_id=user_id,
        resource_type="user", resource_id=str(user_id),
        metadata={"email": email}, meta=meta,
    )


async def log_password_change(
    db: AsyncSession, user_id: uuid.UUID, success: bool, meta: RequestMeta,
) -> bool:
    return await log_audit_event(
        db, "user.password_change", AuditCategory.AUTHENTICATION, user_id=user_id,
        meta=meta, status=AuditStatus.SUCCESS if success else AuditStatus.FAILURE,
    )


async def log_two_factor(
    db: AsyncSession, user_id: uuid.UUID, event: str,
    success: bool, meta: RequestMeta, metadata: dict | None = None,
) -> bool:
    """event is one of "enable", "disable", "verify"."""
    return await log_audit_event(
        db, f"user.2fa_{event}", AuditCategory.AUTHENTICATION, user_id=user_id,
        metadata=metadata, meta=meta,
        status=AuditStatus.SUCCESS if success else AuditStatus.FAILURE,
    )


async def log_asset_change(
    db: AsyncSession, user_id: uuid.UUID, operation: str,
    asset_id: uuid.UUID, meta: RequestMeta, metadata: dict | None = None,
) -> bool:
    """operation is one of "create", "update", "delete"."""
    return await log_audit_event(
        db, f"portfolio.asset_{operation}", AuditCategory.PORTFOLIO, user_id=user_id,
        resource_type="portfolio_asset", resource_id=str(asset_id),
        metadata=metadata, meta=meta,
    )


async def log_price_refresh(
    db: AsyncSession, user_id: uuid.UUID, updated: int, failed: int, meta: RequestMeta,
) -> bool:
    return await log_audit_event(
        db, "portfolio.price_refresh", AuditCategory.PORTFOLIO, user_id=user_id,
        metadata={"updated": updated, "failed": failed}, meta=meta,
    )


async def log_dividend_change(
    db: AsyncSession, user_id: uuid.UUID, operation: str,
    dividend_id: uuid.UUID, meta: RequestMeta, metadata: dict | None = None,
) -> bool:
    return await log_audit_event(
        db, f"portfolio.dividend_{operation}", AuditCategory.PORTFOLIO, user_id=user_id,
        resource_type="dividend_payment", resource_id=str(dividend_id),
        metadata=metadata, meta=meta,
    )


async def log_goal_change(
    db: AsyncSession, user_id: uuid.UUID, operation: str,
    goal_id: uuid.UUID, meta: RequestMeta, metadata: dict | None = None,
) -> bool:
    """operation is one of "create", "update", "delete", "contribution"."""
    return await log_audit_event(
        db, f"goal.{operation}", AuditCategory.GOAL, user_id=user_id,
        resource_type="savings_goal", resource_id=str(goal_id),
        metadata=metadata, meta=meta,
    )


async def log_profile_update(
    db: AsyncSession, user_id: uuid.UUID, fields: list[str], meta: RequestMeta,
) -> bool:
    return await log_audit_event(
        db, "settings.profile_update", AuditCategory.SETTINGS, user_id=user_id,
        resource_type="user_profile", metadata={"fields": fields}, meta=meta,
    )


async def log_data_export(
    db: AsyncSession, user_id: uuid.UUID, export_format: str, meta: RequestMeta,
) -> bool:
    return await log_audit_event(
        db, "data.export", AuditCategory.EXPORT, user_id=user_id,
        metadata={"format": export_format}, meta=meta,
    )


async def log_admin_action(
    db: AsyncSession, admin_id: uuid.UUID, action: str, meta: RequestMeta,
    resource_type: str | None = None, resource_id: str | None = None,
    metadata: dict | None = None,
) -> bool:
    return await log_audit_event(
        db, f"admin.{action}", AuditCategory.ADMIN, user_id=admin_id,
        resource_type=resource_type, resource_id=resource_id,
        metadata=metadata, meta=meta,
    )


# ── Queries ──────────────────────────────────────────────────────

def strip_sensitive(metadata: dict | None) -> dict:
    return {k: v for k, v in (metadata or {}).items() if k not in SENSITIVE_KEYS}


def _entry_with_user(row) -> dict:
    entry, email, name = row
    data = entry.to_dict()
    data["user_email"] = email
    data["user_name"] = name
    return data


def _joined():
    return (
        select(AuditLog, User.email, User.name)
        .outerjoin(User, User.id == AuditLog.user_id)
    )


async def get_audit_logs(db: AsyncSession, filters: AuditFilters) -> list[dict]:
    query = _joined()
    if filters.user_id is not None:
        query = query.where(AuditLog.user_id == filters.user_id)
    if filters.category:
        query = query.where(AuditLog.category == filters.category)
    if filters.action:
        query = query.where(AuditLog.action == filters.action)
    if filters.status:
        query = query.where(AuditLog.status == filters.status)
    if filters.resource_type:
        query = query.where(AuditLog.resource_type == filters.resource_type)
    if filters.resource_id:
        query = query.where(AuditLog.resource_id == filters.resource_id)
    if filters.start_date:
        query = query.where(AuditLog.created_at >= filters.start_date)
    if filters.end_date:
        query = query.where(AuditLog.created_at <= filters.end_date)
    result = await db.execute(
        query.order_by(AuditLog.created_at.desc())
        .limit(filters.limit).offset(filters.offset),
    )
    return [_entry_with_user(row) for row in result.all()]


async def get_audit_log(db: AsyncSession, log_id: uuid.UUID) -> dict | None:
    result = await db.execute(_joined().where(AuditLog.id == log_id))
    row = result.first()
    return _entry_with_user(row) if row else None


async def get_user_timeline(
    db: AsyncSession, user_id: uuid.UUID, limit: int = 50,
) -> list[dict]:
    return await get_audit_logs(db, AuditFilters(user_id=user_id, limit=limit))


async def get_security_events(
    db: AsyncSession, user_id: uuid.UUID, limit: int = 20,
) -> list[dict]:
    result = await db.execute(
        _joined()
        .where(AuditLog.user_id == user_id)
        .where(or_(
            AuditLog.category == AuditCategory.AUTHENTICATION.value,
            AuditLog.action.in_(SECURITY_ACTIONS),
        ))
        .order_by(AuditLog.created_at.desc())
        .limit(limit),
    )
    return [_entry_with_user(row) for row in result.all()]


async def get_audit_stats(db: AsyncSession, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    total = (await db.execute(select(func.count(AuditLog.id)))).scalar_one()
    by_category = {
        category: count
        for category, count in (await db.execute(
            select(AuditLog.category, func.count(AuditLog.id))
            .group_by(AuditLog.category),
        )).all()
    }
    recent_failures = (await db.execute(
        select(func.count(AuditLog.id))
        .where(AuditLog.status == AuditStatus.FAILURE.value)
        .where(AuditLog.created_at >= now - timedelta(hours=24)),
    )).scalar_one()
    return {
        "totalEvents": total,
        "eventsByCategory": by_category,
        "recentFailures": recent_failures,
    }


async def search_audit_logs(db: AsyncSession, term: str, limit: int = 100) -> list[dict]:
    pattern = f"%{term}%"
    result = await db.execute(
        _joined()
        .where(or_(
            AuditLog.action.ilike(pattern),
            AuditLog.resource_id.ilike(pattern),
            cast(AuditLog.extra, String).ilike(pattern),
        ))
        .order_by(AuditLog.created_at.desc())
        .limit(limit),
    )
    return [_entry_with_user(row) for row in result.all()]
