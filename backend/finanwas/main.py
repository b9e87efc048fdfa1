"""Finanwas API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FinanwasError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py; this module only wires things
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finanwas.api.error_handlers import register_error_handlers
from finanwas.api.routes import (
    admin, auth, courses, dividends, goals, health, market, monitoring,
    notes, portfolio, profile, progress, two_factor, user,
)
from finanwas.config import get_settings
from finanwas.infrastructure import database
from finanwas.infrastructure.observability import RequestContextMiddleware, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Finanwas API started")
    yield
    logger.info("Finanwas API shutting down")
    if database.db_manager is not None:
        await database.db_manager.dispose()


app = FastAPI(title="Finanwas API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(two_factor.router)
app.include_router(user.router)
app.include_router(profile.router)
app.include_router(courses.router)
app.include_router(progress.router)
app.include_router(portfolio.router)
app.include_router(dividends.router)
app.include_router(goals.router)
app.include_router(notes.router)
app.include_router(market.router)
app.include_router(admin.router)
app.include_router(monitoring.router)

register_error_handlers(app)
