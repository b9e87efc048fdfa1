"""Monitoring Routes — client error reports land in the error log."""

import httpx
from sqlalchemy import select

from finanwas.infrastructure.dollar_rates import DollarRateService, get_dollar_rate_service
from finanwas.main import app
from finanwas.models.error_log import ErrorLog


async def _stored(test_db) -> list[ErrorLog]:
    result = await test_db.execute(
        select(ErrorLog).execution_options(populate_existing=True),
    )
    return list(result.scalars().all())


async def test_anonymous_report_is_stored(client, test_db):
    res = await client.post("/api/v1/monitoring/log", json={
        "level": "error",
        "source": "client",
        "message": "Cannot read properties of undefined",
        "stackTrace": "at Portfolio (portfolio.js:10)",
        "url": "/dashboard",
        "metadata": {"component": "Portfolio"},
    }, headers={"User-Agent": "pytest-browser", "X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

    assert res.json() == {"success": True}
    [entry] = await _stored(test_db)
    assert entry.user_id is None
    assert entry.stack_trace.startswith("at Portfolio")
    assert entry.user_agent == "pytest-browser"
    assert entry.ip_address == "203.0.113.7"
    assert entry.extra == {"component": "Portfolio"}
    assert entry.resolved is False


async def test_report_attaches_signed_in_user(client, user, user_headers, test_db):
    await client.post("/api/v1/monitoring/log", headers=user_headers, json={
        "level": "warning", "source": "api", "message": "Cotización lenta",
        "errorCode": "SLOW_QUOTE",
    })

    [entry] = await _stored(test_db)
    assert entry.user_id == user.id
    assert entry.error_code == "SLOW_QUOTE"


async def test_long_messages_are_truncated(client, test_db):
    await client.post("/api/v1/monitoring/log", json={
        "level": "critical", "source": "server", "message": "x" * 6000,
    })

    [entry] = await _stored(test_db)
    assert len(entry.message) == 5000


async def test_unknown_level_rejected(client):
    res = await client.post("/api/v1/monitoring/log", json={
        "level": "debug", "source": "client", "message": "hola",
    })
    assert res.status_code == 400


async def test_server_errors_are_recorded(client, test_db):
    service = DollarRateService(
        "https://dolarapi.test/v1/dolares",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )
    app.dependency_overrides[get_dollar_rate_service] = lambda: service

    res = await client.get("/api/v1/market/dollar")

    assert res.status_code == 503
    [entry] = await _stored(test_db)
    assert entry.source == "server"
    assert entry.level == "critical"
    assert entry.error_code == "EXTERNAL_SERVICE_ERROR"
    assert entry.url == "/api/v1/market/dollar"
