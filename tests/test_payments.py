import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from models.enums import UserRole


@pytest.fixture
async def prop(landlord, create_property):
    return await create_property(landlord)


@pytest.fixture
def create_payment(client, prop):
    async def _create(payer, **overrides):
        payload = {
            "property_id": prop["id"],
            "type": "RENT",
            "method": "BANK_TRANSFER",
            "amount": "1500",
            **overrides,
        }
        resp = await client.post("/api/payments", json=payload, headers=payer.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


async def test_tenant_pays_as_self(landlord, tenant, create_payment):
    payment = await create_payment(tenant, late_fee="25", processing_fee="2.50")
    assert payment["tenant_id"] == tenant.id
    assert payment["landlord_id"] == landlord.id
    assert payment["status"] == "PENDING"
    assert payment["version"] == 0
    assert payment["retry_count"] == 0
    assert payment["payment_reference"].startswith("PAY-")
    assert Decimal(payment["total_amount"]) == Decimal("1527.50")


async def test_landlord_records_for_tenant(client, landlord, tenant, make_user, prop, create_payment):
    resp = await client.post(
        "/api/payments",
        json={"property_id": prop["id"], "type": "RENT", "amount": "1500"},
        headers=landlord.headers,
    )
    assert resp.status_code == 400

    payment = await create_payment(landlord, tenant_id=tenant.id)
    assert payment["tenant_id"] == tenant.id

    other = await make_user("otto", UserRole.LANDLORD)
    resp = await client.post(
        "/api/payments",
        json={
            "property_id": prop["id"],
            "tenant_id": tenant.id,
            "type": "RENT",
            "amount": "1500",
        },
        headers=other.headers,
    )
    assert resp.status_code == 403


async def test_payment_validation(client, tenant, prop):
    resp = await client.post(
        "/api/payments",
        json={"property_id": prop["id"], "type": "RENT", "amount": "0"},
        headers=tenant.headers,
    )
    assert resp.status_code == 422

    resp = await client.post(
        "/api/payments",
        json={"property_id": str(uuid.uuid4()), "type": "RENT", "amount": "10"},
        headers=tenant.headers,
    )
    assert resp.status_code == 400


async def test_stale_version_conflicts(client, tenant, create_payment):
    payment = await create_payment(tenant)
    url = f"/api/payments/{payment['id']}"

    resp = await client.put(
        url, json={"version": 0, "amount": "1600"}, headers=tenant.headers
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 1
    assert Decimal(resp.json()["total_amount"]) == Decimal("1600")

    resp = await client.put(
        url, json={"version": 0, "amount": "1700"}, headers=tenant.headers
    )
    assert resp.status_code == 409

    current = (await client.get(url, headers=tenant.headers)).json()
    assert Decimal(current["amount"]) == Decimal("1600")
    assert current["version"] == 1


async def test_complete_sets_processed_at(client, landlord, tenant, create_payment):
    payment = await create_payment(tenant)
    url = f"/api/payments/{payment['id']}/status"

    resp = await client.patch(url, json={"status": "COMPLETED"}, headers=tenant.headers)
    assert resp.status_code == 403

    resp = await client.patch(
        url, json={"status": "COMPLETED", "version": 0}, headers=landlord.headers
    )
    completed = resp.json()
    assert completed["status"] == "COMPLETED"
    assert completed["processed_at"] is not None
    assert completed["payment_date"] is not None

    resp = await client.patch(url, json={"status": "PENDING"}, headers=landlord.headers)
    assert resp.status_code == 400


async def test_failure_schedules_retry(client, landlord, tenant, create_payment):
    payment = await create_payment(tenant)
    url = f"/api/payments/{payment['id']}/fail"

    resp = await client.patch(
        url, json={"reason": "Card declined", "version": 0}, headers=landlord.headers
    )
    failed = resp.json()
    assert failed["status"] == "FAILED"
    assert failed["failure_reason"] == "Card declined"
    assert failed["retry_count"] == 1
    assert failed["next_retry_at"] is not None

    resp = await client.patch(
        url, json={"reason": "Again", "version": 1}, headers=landlord.headers
    )
    assert resp.json()["retry_count"] == 2

    resp = await client.patch(url, json={"reason": "Stale", "version": 0}, headers=landlord.headers)
    assert resp.status_code == 409


async def test_total_is_scoped_to_caller(client, landlord, tenant, admin, make_user, create_payment):
    first = await create_payment(tenant, amount="1000")
    await create_payment(tenant, amount="500")
    await client.patch(
        f"/api/payments/{first['id']}/status",
        json={"status": "COMPLETED"},
        headers=landlord.headers,
    )

    resp = await client.get("/api/payments/total", headers=tenant.headers)
    assert Decimal(resp.json()["total"]) == Decimal("1000")

    resp = await client.get("/api/payments/total?status=PENDING", headers=admin.headers)
    assert Decimal(resp.json()["total"]) == Decimal("500")

    outsider = await make_user("nina", UserRole.TENANT)
    resp = await client.get("/api/payments/total", headers=outsider.headers)
    assert Decimal(resp.json()["total"]) == Decimal("0")


async def test_lookups_and_access(client, landlord, tenant, admin, make_user, prop, create_payment):
    payment = await create_payment(tenant)

    resp = await client.get(
        f"/api/payments/reference/{payment['payment_reference']}", headers=landlord.headers
    )
    assert resp.json()["id"] == payment["id"]

    page = (
        await client.get(f"/api/payments/property/{prop['id']}", headers=landlord.headers)
    ).json()
    assert page["total"] == 1

    count = await client.get("/api/payments/status/PENDING/count", headers=admin.headers)
    assert count.json() == {"count": 1}

    stranger = await make_user("stan", UserRole.TENANT)
    resp = await client.get(f"/api/payments/{payment['id']}", headers=stranger.headers)
    assert resp.status_code == 403


async def test_delete_is_for_landlord(client, landlord, tenant, create_payment):
    payment = await create_payment(tenant)
    url = f"/api/payments/{payment['id']}"
    assert (await client.delete(url, headers=tenant.headers)).status_code == 403
    assert (await client.delete(url, headers=landlord.headers)).status_code == 204
    assert (await client.get(url, headers=landlord.headers)).status_code == 404


async def test_offset_due_date_is_stored_as_utc(client, tenant, create_payment):
    due_utc = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(hours=1)
    local = due_utc.astimezone(timezone(timedelta(hours=5)))
    payment = await create_payment(tenant, due_date=local.isoformat())

    stored = datetime.fromisoformat(payment["due_date"])
    assert stored.replace(tzinfo=None) == due_utc.replace(tzinfo=None)

    overdue = (await client.get("/api/payments/overdue", headers=tenant.headers)).json()
    assert [p["id"] for p in overdue] == [payment["id"]]


async def test_admin_search_and_counts(client, landlord, tenant, admin, prop, create_payment):
    rent = await create_payment(
        tenant, late_fee="25", transaction_id="TXN-1", payment_description="March rent"
    )
    deposit = await create_payment(
        tenant, type="SECURITY_DEPOSIT", method="CASH", amount="800", processing_fee="3"
    )
    await client.patch(
        f"/api/payments/{deposit['id']}/fail",
        json={"reason": "Bounced", "version": 0},
        headers=landlord.headers,
    )

    async def found(**query):
        resp = await client.get("/api/payments/search", params=query, headers=admin.headers)
        assert resp.status_code == 200, resp.text
        return [p["id"] for p in resp.json()["items"]]

    assert await found(method="BANK_TRANSFER") == [rent["id"]]
    assert await found(withLateFee="true") == [rent["id"]]
    assert await found(withProcessingFee="true") == [deposit["id"]]
    assert await found(description="march") == [rent["id"]]
    assert await found(minTotal="1000", maxTotal="2000") == [rent["id"]]
    assert await found(retriesAbove=0) == [deposit["id"]]
    assert len(await found(withLateFee="false")) == 2

    resp = await client.get(
        "/api/payments/search",
        params={"minTotal": "2000", "maxTotal": "1000"},
        headers=admin.headers,
    )
    assert resp.status_code == 400
    resp = await client.get("/api/payments/search", headers=tenant.headers)
    assert resp.status_code == 403

    resp = await client.get("/api/payments/transaction/TXN-1", headers=tenant.headers)
    assert resp.json()["id"] == rent["id"]
    resp = await client.get("/api/payments/transaction/TXN-404", headers=tenant.headers)
    assert resp.status_code == 404

    count = await client.get("/api/payments/type/RENT/count", headers=admin.headers)
    assert count.json() == {"count": 1}
    count = await client.get("/api/payments/type/RENT/count", headers=landlord.headers)
    assert count.status_code == 403

    count = await client.get(f"/api/payments/property/{prop['id']}/count", headers=landlord.headers)
    assert count.json() == {"count": 2}
