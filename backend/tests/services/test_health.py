"""Health & Readiness Checks — plus request-id propagation and JSON log lines."""

import json
import logging

import finanwas.infrastructure.database as db_module
from finanwas.infrastructure.observability import (
    JSONFormatter, RequestIdFilter, request_id_ctx,
)


async def test_liveness(client):
    res = await client.get("/api/v1/health/")

    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
    assert res.json()["service"] == "finanwas-api"


async def test_readiness_with_database(client):
    res = await client.get("/api/v1/health/ready")

    assert res.status_code == 200
    assert res.json()["checks"] == {"database": "healthy", "content": "present"}


async def test_readiness_without_database(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)

    res = await client.get("/api/v1/health/ready")

    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"
    assert res.json()["checks"]["database"] == "unavailable"


async def test_request_id_is_echoed_or_generated(client):
    supplied = await client.get("/api/v1/health/", headers={"X-Request-ID": "abc123"})
    generated = await client.get("/api/v1/health/")

    assert supplied.headers["X-Request-ID"] == "abc123"
    assert len(generated.headers["X-Request-ID"]) == 32


def test_json_formatter_includes_request_id_and_extras():
    record = logging.LogRecord(
        "finanwas.test", logging.WARNING, __file__, 1, "Quote lookup failed", None, None,
    )
    record.ticker = "YPF"
    token = request_id_ctx.set("req-1")
    try:
        RequestIdFilter().filter(record)
    finally:
        request_id_ctx.reset(token)

    line = json.loads(JSONFormatter().format(record))

    assert line["request_id"] == "req-1"
    assert line["ticker"] == "YPF"
    assert line["level"] == "WARNING"
