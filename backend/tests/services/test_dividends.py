"""Dividend Routes — payments tied to owned assets, summary and income ranges."""

import pytest

from tests.services.helpers import asset_payload, auth_headers


@pytest.fixture
async def asset_id(client, user_headers):
    res = await client.post(
        "/api/v1/portfolio", headers=user_headers,
        json=asset_payload(ticker="KO", name="Coca-Cola"),
    )
    return res.json()["asset"]["id"]


def _payment(asset_id, **overrides):
    payload = {
        "asset_id": asset_id,
        "payment_date": "2026-02-10",
        "amount_per_share": 0.5,
        "total_amount": 5.0,
    }
    payload.update(overrides)
    return payload


async def test_create_payment_updates_asset(client, user_headers, asset_id):
    res = await client.post(
        "/api/v1/dividends", headers=user_headers,
        json=_payment(asset_id, withholding_tax=0.5),
    )

    assert res.status_code == 201
    dividend = res.json()["dividend"]
    assert dividend["currency"] == "USD"
    assert dividend["payment_type"] == "cash"
    assert dividend["withholding_tax"] == 0.5

    asset = await client.get(f"/api/v1/portfolio/{asset_id}", headers=user_headers)
    assert asset.json()["asset"]["last_dividend_amount"] == 5.0


async def test_payment_type_is_a_closed_set(client, user_headers, asset_id):
    drip = await client.post(
        "/api/v1/dividends", headers=user_headers,
        json=_payment(asset_id, payment_type="drip", shares_received=0.1),
    )
    bogus = await client.post(
        "/api/v1/dividends", headers=user_headers,
        json=_payment(asset_id, payment_type="bonus"),
    )

    assert drip.json()["dividend"]["payment_type"] == "drip"
    assert bogus.status_code == 400


async def test_cannot_attach_payment_to_foreign_asset(client, asset_id, make_user):
    other = await make_user(email="otro@example.com", name="Otro")
    res = await client.post(
        "/api/v1/dividends", headers=auth_headers(other), json=_payment(asset_id),
    )
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Activo no encontrado"


async def test_list_newest_first_with_summary(client, user_headers, asset_id):
    for day, amount in (("2024-06-01", 2.0), ("2026-01-05", 3.0), ("2025-03-01", 4.0)):
        await client.post(
            "/api/v1/dividends", headers=user_headers,
            json=_payment(asset_id, payment_date=day, total_amount=amount),
        )

    res = await client.get("/api/v1/dividends?summary=true", headers=user_headers)

    body = res.json()
    assert [d["payment_date"] for d in body["dividends"]] == [
        "2026-01-05", "2025-03-01", "2024-06-01",
    ]
    summary = body["summary"]
    assert summary["totalReceived"] == pytest.approx(9.0)
    assert summary["paymentCount"] == 3
    assert summary["byAsset"][asset_id]["assetName"] == "Coca-Cola"
    assert summary["byAsset"][asset_id]["ticker"] == "KO"


async def test_income_in_date_range(client, user_headers, asset_id):
    for day in ("2025-01-10", "2025-06-10", "2026-01-10"):
        await client.post(
            "/api/v1/dividends", headers=user_headers,
            json=_payment(asset_id, payment_date=day, total_amount=10.0),
        )

    res = await client.get(
        "/api/v1/dividends?startDate=2025-01-01&endDate=2025-12-31", headers=user_headers,
    )
    assert res.json()["income"] == pytest.approx(20.0)

    bad = await client.get(
        "/api/v1/dividends?startDate=2025-12-31&endDate=2025-01-01", headers=user_headers,
    )
    assert bad.status_code == 400


async def test_filter_by_asset(client, user_headers, asset_id):
    other = await client.post(
        "/api/v1/portfolio", headers=user_headers,
        json=asset_payload(ticker="PEP", name="PepsiCo"),
    )
    other_id = other.json()["asset"]["id"]
    await client.post("/api/v1/dividends", headers=user_headers, json=_payment(asset_id))
    await client.post("/api/v1/dividends", headers=user_headers, json=_payment(other_id))

    res = await client.get(f"/api/v1/dividends?assetId={other_id}", headers=user_headers)

    assert [d["asset_id"] for d in res.json()["dividends"]] == [other_id]


async def test_update_and_delete_payment(client, user_headers, asset_id):
    created = await client.post(
        "/api/v1/dividends", headers=user_headers, json=_payment(asset_id),
    )
    dividend_id = created.json()["dividend"]["id"]

    updated = await client.put(
        f"/api/v1/dividends/{dividend_id}", headers=user_headers,
        json={"reinvested": True, "payment_type": "drip", "shares_received": 0.1},
    )
    assert updated.json()["dividend"]["reinvested"] is True
    assert updated.json()["dividend"]["payment_type"] == "drip"

    deleted = await client.delete(f"/api/v1/dividends/{dividend_id}", headers=user_headers)
    assert deleted.json()["message"] == "Dividendo eliminado"

    missing = await client.get(f"/api/v1/dividends/{dividend_id}", headers=user_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Dividendo no encontrado"


async def test_rejects_non_positive_total(client, user_headers, asset_id):
    res = await client.post(
        "/api/v1/dividends", headers=user_headers, json=_payment(asset_id, total_amount=0),
    )
    assert res.status_code == 400


async def test_deleting_asset_removes_its_payments(client, user_headers, asset_id):
    await client.post("/api/v1/dividends", headers=user_headers, json=_payment(asset_id))

    await client.delete(f"/api/v1/portfolio/{asset_id}", headers=user_headers)

    res = await client.get("/api/v1/dividends", headers=user_headers)
    assert res.json()["dividends"] == []
