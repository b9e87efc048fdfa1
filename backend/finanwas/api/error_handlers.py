"""Error Handlers — global exception handlers for the Finanwas API.

Invariants:
    - FinanwasError → structured JSON with error code, message, severity
    - RateLimitExceededError additionally sets the Retry-After header
    - RequestValidationError → 400 with field-level error details
    - Exception (catch-all) → 500, never leaks internal details
    - Every 5xx is also stored in the error log with source "server"

Design Decisions:
    - Three-layer handler: domain (FinanwasError), validation (Pydantic), catch-all (Exception)
    - Kept out of main.py so the app module only wires things together
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from finanwas.core.domain_types import ErrorLevel, ErrorSource
from finanwas.core.errors import FinanwasError, ErrorSeverity, RateLimitExceededError
from finanwas.core.rate_limit import client_ip
from finanwas.infrastructure import database
from finanwas.services.error_log import record_error

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(FinanwasError)
    async def finanwas_error_handler(request: Request, exc: FinanwasError):
        """Handle all Finanwas domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        if exc.http_status >= 500:
            await _persist_server_error(request, exc, exc.code)
        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(exc.context.retry_after_seconds)}
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(), headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        await _persist_server_error(request, exc, "INTERNAL_ERROR")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "Error interno del servidor",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


async def _persist_server_error(request: Request, exc: Exception, code: str) -> None:
    """Store a 5xx in the error log; a missing or failing database only logs."""
    manager = database.db_manager
    if manager is None:
        return
    async with manager.session() as db:
        await record_error(
            db,
            level=ErrorLevel.CRITICAL.value,
            source=ErrorSource.SERVER.value,
            message=str(exc) or type(exc).__name__,
            stack_trace="".join(traceback.format_exception(exc)),
            error_code=code,
            url=str(request.url.path),
            user_agent=request.headers.get("user-agent"),
            ip_address=client_ip(request.headers),
            metadata={"method": request.method},
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    errors = exc.errors()
    first = errors[0]["msg"] if errors else "Datos inválidos"
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": first.removeprefix("Value error, "),
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in errors
            ],
        },
    }
