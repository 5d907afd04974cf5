import uuid
from decimal import Decimal

import pytest

from models.enums import UserRole


@pytest.fixture
def approved_application(client, landlord, tenant, create_property, create_listing, create_application):
    async def _approved(**property_overrides):
        prop = await create_property(landlord, **property_overrides)
        listing = await create_listing(landlord, prop["id"])
        application = await create_application(tenant, listing["id"])
        resp = await client.patch(
            f"/api/applications/{application['id']}/review",
            json={"status": "APPROVED"},
            headers=landlord.headers,
        )
        assert resp.status_code == 200
        return application

    return _approved


@pytest.fixture
def create_agreement(client, landlord):
    async def _create(application_id, **overrides):
        payload = {
            "application_id": application_id,
            "start_date": "2026-01-01",
            **overrides,
        }
        resp = await client.post(
            "/api/agreements", json=payload, headers=landlord.headers
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


async def test_create_from_approved_application(
    landlord, tenant, approved_application, create_agreement
):
    application = await approved_application()
    agreement = await create_agreement(application["id"])

    assert agreement["status"] == "DRAFT"
    assert agreement["agreement_number"].startswith("AGR-")
    assert agreement["tenant_id"] == tenant.id
    assert agreement["landlord_id"] == landlord.id
    assert Decimal(agreement["rent_amount"]) == Decimal("1500")
    assert agreement["lease_term_months"] == 12
    assert agreement["end_date"] == "2026-12-31"
    assert agreement["signed_by_tenant"] is False


async def test_create_requires_approval_and_is_unique(
    client, landlord, tenant, approved_application, create_agreement,
    create_property, create_listing, create_application,
):
    prop = await create_property(landlord)
    listing = await create_listing(landlord, prop["id"])
    pending = await create_application(tenant, listing["id"])
    resp = await client.post(
        "/api/agreements",
        json={"application_id": pending["id"], "start_date": "2026-01-01"},
        headers=landlord.headers,
    )
    assert resp.status_code == 400

    application = await approved_application()
    await create_agreement(application["id"])
    resp = await client.post(
        "/api/agreements",
        json={"application_id": application["id"], "start_date": "2026-02-01"},
        headers=landlord.headers,
    )
    assert resp.status_code == 409

    resp = await client.post(
        "/api/agreements",
        json={"application_id": application["id"], "start_date": "2026-02-01"},
        headers=tenant.headers,
    )
    assert resp.status_code == 403


async def test_end_date_needs_a_term(client, landlord, approved_application, create_agreement):
    application = await approved_application(lease_term_months=None)
    resp = await client.post(
        "/api/agreements",
        json={"application_id": application["id"], "start_date": "2026-01-01"},
        headers=landlord.headers,
    )
    assert resp.status_code == 400

    agreement = await create_agreement(application["id"], end_date="2026-06-30")
    assert agreement["end_date"] == "2026-06-30"


async def test_end_before_start_is_rejected(client, landlord, approved_application):
    application = await approved_application()
    resp = await client.post(
        "/api/agreements",
        json={
            "application_id": application["id"],
            "start_date": "2026-05-01",
            "end_date": "2026-04-01",
        },
        headers=landlord.headers,
    )
    assert resp.status_code == 422


async def test_signing_flow(
    client, landlord, tenant, make_user, approved_application, create_agreement
):
    agreement = await create_agreement((await approved_application())["id"])
    url = f"/api/agreements/{agreement['id']}/sign"

    stranger = await make_user("sid", UserRole.TENANT)
    resp = await client.patch(url, json={"signature": "Sid"}, headers=stranger.headers)
    assert resp.status_code == 403

    resp = await client.patch(url, json={"signature": "Tom"}, headers=tenant.headers)
    assert resp.json()["status"] == "PENDING_SIGNATURE"
    assert resp.json()["signed_by_tenant"] is True

    resp = await client.patch(url, json={"signature": "Tom"}, headers=tenant.headers)
    assert resp.status_code == 400

    resp = await client.patch(url, json={"signature": "Lana"}, headers=landlord.headers)
    signed = resp.json()
    assert signed["status"] == "ACTIVE"
    assert signed["signed_at"] is not None
    assert signed["effective_date"] == "2026-01-01"

    resp = await client.patch(url, json={"signature": "Lana"}, headers=landlord.headers)
    assert resp.status_code == 400

    resp = await client.put(
        f"/api/agreements/{agreement['id']}",
        json={"rent_amount": "1400"},
        headers=landlord.headers,
    )
    assert resp.status_code == 400


async def test_edit_while_draft(client, landlord, approved_application, create_agreement):
    agreement = await create_agreement((await approved_application())["id"])
    url = f"/api/agreements/{agreement['id']}"

    resp = await client.put(
        url, json={"rent_amount": "1450", "pet_policy": "Cats only"}, headers=landlord.headers
    )
    assert resp.status_code == 200
    assert Decimal(resp.json()["rent_amount"]) == Decimal("1450")
    assert resp.json()["end_date"] == agreement["end_date"]

    resp = await client.put(url, json={"end_date": "2025-01-01"}, headers=landlord.headers)
    assert resp.status_code == 400


async def test_new_lease_term_moves_end_date(
    client, landlord, approved_application, create_agreement
):
    agreement = await create_agreement(
        (await approved_application())["id"], status="ACTIVE", signed_by_tenant=True
    )
    assert agreement["status"] == "DRAFT"
    assert agreement["signed_by_tenant"] is False
    assert agreement["end_date"] == "2026-12-31"
    url = f"/api/agreements/{agreement['id']}"

    resp = await client.put(url, json={"lease_term_months": 6}, headers=landlord.headers)
    assert resp.json()["end_date"] == "2026-06-30"

    resp = await client.put(url, json={"start_date": "2026-03-01"}, headers=landlord.headers)
    assert resp.json()["end_date"] == "2026-08-31"

    resp = await client.put(
        url,
        json={"lease_term_months": 12, "end_date": "2027-01-15"},
        headers=landlord.headers,
    )
    assert resp.json()["end_date"] == "2027-01-15"


async def test_terminate(client, landlord, tenant, approved_application, create_agreement):
    agreement = await create_agreement((await approved_application())["id"])
    url = f"/api/agreements/{agreement['id']}/terminate"

    resp = await client.patch(url, json={"reason": "Moving"}, headers=tenant.headers)
    assert resp.status_code == 403

    resp = await client.patch(
        url,
        json={"reason": "Moving", "termination_date": "2026-03-31"},
        headers=landlord.headers,
    )
    terminated = resp.json()
    assert terminated["status"] == "TERMINATED"
    assert terminated["termination_reason"] == "Moving"
    assert terminated["termination_date"] == "2026-03-31"

    resp = await client.patch(url, json={"reason": "Again"}, headers=landlord.headers)
    assert resp.status_code == 400


async def test_lookups(client, landlord, tenant, admin, approved_application, create_agreement):
    agreement = await create_agreement((await approved_application())["id"])

    resp = await client.get(
        f"/api/agreements/number/{agreement['agreement_number']}", headers=tenant.headers
    )
    assert resp.json()["id"] == agreement["id"]

    page = (
        await client.get(f"/api/agreements/tenant/{tenant.id}", headers=tenant.headers)
    ).json()
    assert page["total"] == 1

    count = await client.get("/api/agreements/status/DRAFT/count", headers=admin.headers)
    assert count.json() == {"count": 1}

    ranged = await client.get(
        "/api/agreements/rent-range?minRent=1000&maxRent=2000", headers=admin.headers
    )
    assert len(ranged.json()) == 1


async def test_delete(client, landlord):
    url = f"/api/agreements/{uuid.uuid4()}"
    assert (await client.delete(url, headers=landlord.headers)).status_code == 404


async def test_admin_search_and_status_lookups(
    client, admin, landlord, tenant, approved_application, create_agreement
):
    signed = await create_agreement(
        (await approved_application())["id"],
        utilities_included=True,
        pet_policy="Cats allowed",
        payment_due_day=1,
    )
    for user, name in ((tenant, "Tom"), (landlord, "Lana")):
        await client.patch(
            f"/api/agreements/{signed['id']}/sign",
            json={"signature": name},
            headers=user.headers,
        )
    draft = await create_agreement(
        (await approved_application())["id"],
        start_date="2026-06-01",
        lease_term_months=6,
        security_deposit="900",
        smoking_policy="No smoking",
    )

    async def found(**query):
        resp = await client.get("/api/agreements/search", params=query, headers=admin.headers)
        assert resp.status_code == 200, resp.text
        return [a["id"] for a in resp.json()["items"]]

    assert await found(startFrom="2026-05-01") == [draft["id"]]
    assert await found(endTo="2026-11-30") == [draft["id"]]
    assert await found(leaseTerm=12) == [signed["id"]]
    assert await found(paymentDueDay=1) == [signed["id"]]
    assert await found(maxDeposit="1000") == [draft["id"]]
    assert await found(signedByTenant="true") == [signed["id"]]
    assert await found(utilitiesIncluded="true", petPolicy="cats") == [signed["id"]]
    assert await found(smokingPolicy="no smoking") == [draft["id"]]
    assert len(await found()) == 2

    resp = await client.get(
        "/api/agreements/search",
        params={"minDeposit": "2000", "maxDeposit": "1000"},
        headers=admin.headers,
    )
    assert resp.status_code == 400
    resp = await client.get("/api/agreements/search", headers=landlord.headers)
    assert resp.status_code == 403

    active = (await client.get("/api/agreements/active", headers=landlord.headers)).json()
    assert [a["id"] for a in active] == [signed["id"]]
    assert (await client.get("/api/agreements/active", headers=tenant.headers)).status_code == 403

    count = await client.get(
        f"/api/agreements/property/{signed['property_id']}/count", headers=landlord.headers
    )
    assert count.json() == {"count": 1}

    await client.patch(
        f"/api/agreements/{draft['id']}/sign", json={"signature": "Tom"}, headers=tenant.headers
    )
    url = "/api/agreements/overdue-signatures"
    stale = (await client.get(url, params={"days": 0}, headers=admin.headers)).json()
    assert [a["id"] for a in stale] == [draft["id"]]
    assert (await client.get(url, headers=admin.headers)).json() == []
