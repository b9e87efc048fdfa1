"""Health & Readiness Checks — liveness plus database and course-content checks.

Invariants:
    - GET /api/v1/health/ answers 200 whenever the process is up
    - GET /api/v1/health/ready answers 503 unless the database responds
    - Missing course content is reported but does not fail readiness

Design Decisions:
    - db_manager read through the module at call time: it is created in the lifespan
"""

import logging
from pathlib import Path

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from finanwas.config import get_settings
from finanwas.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "finanwas-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness_check():
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    content_ok = (Path(get_settings().content_dir) / "courses").is_dir()
    checks = {
        "database": "healthy" if db_ok else "unavailable",
        "content": "present" if content_ok else "missing",
    }
    if not db_ok:
        logger.warning("Readiness check failed: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
                "checks": checks,
            },
        )
    return {"status": "ready", "checks": checks}
