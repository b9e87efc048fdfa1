"""Structured Logging — JSON log lines, request ids and per-request access logs.

Invariants:
    - Every record carries timestamp, level, logger and message
    - Records emitted while serving a request carry its request_id
    - Known extra fields (user_id, path, error_code, action, ticker...) surfaced when set
    - Each response echoes X-Request-ID (client-supplied one kept, else generated)

Design Decisions:
    - request_id lives in a ContextVar: survives awaits without threading it through calls
    - Access log is one line per request after the response, with duration_ms
    - yfinance is chatty on delisted tickers: its logger is capped at ERROR
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

_EXTRA_FIELDS = (
    "user_id", "method", "path", "status_code", "duration_ms",
    "error_code", "action", "ticker", "attempt",
)

access_logger = logging.getLogger("finanwas.access")


class RequestIdFilter(logging.Filter):
    """Stamp the current request id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            log["request_id"] = request_id
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of the request and log its outcome."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_ctx.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            access_logger.exception(
                f"{request.method} {request.url.path} failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            access_logger.info(
                f"{request.method} {request.url.path} {response.status_code}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        finally:
            request_id_ctx.reset(token)
        return response


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure the root logger once; repeated calls replace the handler."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(request_id)s]: %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if getattr(existing, "_finanwas", False):
            logging.root.removeHandler(existing)
    handler._finanwas = True
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("yfinance").setLevel(logging.ERROR)
