"""Error Log Service — persist reported errors and serve the admin error panel.

Invariants:
    - message truncated to MAX_MESSAGE_LENGTH, stack trace to MAX_STACK_LENGTH
    - record_error() never raises into the caller; failures roll back a savepoint only
    - Resolving stamps resolved_at/resolved_by; un-resolving clears both
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.errors import ResourceNotFoundError
from finanwas.models.error_log import ErrorLog

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000
MAX_STACK_LENGTH = 10000


async def record_error(
    db: AsyncSession,
    level: str,
    source: str,
    message: str,
    stack_trace: str | None = None,
    error_code: str | None = None,
    user_id: uuid.UUID | None = None,
    url: str | None = None,
    user_agent: str | None = None,
    ip_address: str | None = None,
    metadata: dict | None = None,
) -> bool:
    entry = ErrorLog(
        level=level,
        source=source,
        message=message[:MAX_MESSAGE_LENGTH],
        stack_trace=stack_trace[:MAX_STACK_LENGTH] if stack_trace else None,
        error_code=error_code,
        user_id=user_id,
        url=url,
        user_agent=user_agent,
        ip_address=ip_address,
        extra=metadata or {},
        resolved=False,
    )
    try:
        async with db.begin_nested():
            db.add(entry)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to store error log: {e}", extra={"error_code": error_code})
        return False
    return True


async def list_errors(
    db: AsyncSession,
    level: str | None = None,
    source: str | None = None,
    resolved: bool | None = None,
    limit: int = 100,
) -> list[ErrorLog]:
    query = select(ErrorLog)
    if level:
        query = query.where(ErrorLog.level == level)
    if source:
        query = query.where(ErrorLog.source == source)
    if resolved is not None:
        query = query.where(ErrorLog.resolved.is_(resolved))
    result = await db.execute(query.order_by(ErrorLog.created_at.desc()).limit(limit))
    return list(result.scalars().all())


async def error_stats(db: AsyncSession) -> dict:
    rows = (await db.execute(
        select(ErrorLog.level, func.count(ErrorLog.id)).group_by(ErrorLog.level),
    )).all()
    by_level = {level: count for level, count in rows}
    unresolved = (await db.execute(
        select(func.count(ErrorLog.id)).where(ErrorLog.resolved.is_(False)),
    )).scalar_one()
    return {
        "total": sum(by_level.values()),
        "byLevel": by_level,
        "unresolved": unresolved,
    }


async def set_resolved(
    db: AsyncSession, error_id: uuid.UUID, resolved: bool, admin_id: uuid.UUID,
) -> ErrorLog:
    entry = await db.get(ErrorLog, error_id)
    if entry is None:
        raise ResourceNotFoundError("error_log", str(error_id), "Error no encontrado")
    entry.resolved = resolved
    if resolved:
        entry.resolved_at = datetime.now(timezone.utc)
        entry.resolved_by = admin_id
    else:
        entry.resolved_at = None
        entry.resolved_by = None
    await db.commit()
    return entry
