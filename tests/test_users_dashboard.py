import uuid
from decimal import Decimal

from tests.conftest import PASSWORD


async def test_admin_lists_users_by_role(client, admin, landlord, tenant):
    page = (await client.get("/api/users", headers=admin.headers)).json()
    assert page["total"] == 3

    page = (await client.get("/api/users?role=LANDLORD", headers=admin.headers)).json()
    assert [u["username"] for u in page["items"]] == ["lana"]
    assert "password" not in page["items"][0]

    resp = await client.get("/api/users", headers=tenant.headers)
    assert resp.status_code == 403


async def test_exists_checks_are_public(client, tenant):
    assert (await client.get("/api/users/exists/username/tom")).json() == {"exists": True}
    assert (await client.get("/api/users/exists/username/nobody")).json() == {
        "exists": False
    }
    resp = await client.get("/api/users/exists/email/tom@example.com")
    assert resp.json() == {"exists": True}


async def test_self_or_admin_reads(client, admin, landlord, tenant):
    url = f"/api/users/{tenant.id}"
    assert (await client.get(url, headers=tenant.headers)).status_code == 200
    assert (await client.get(url, headers=admin.headers)).status_code == 200
    assert (await client.get(url, headers=landlord.headers)).status_code == 403

    missing = await client.get(f"/api/users/{uuid.uuid4()}", headers=admin.headers)
    assert missing.status_code == 404


async def test_self_update(client, tenant, landlord):
    url = f"/api/users/{tenant.id}"
    resp = await client.put(
        url, json={"phone": "555-0100", "bio": "Quiet tenant"}, headers=tenant.headers
    )
    assert resp.status_code == 200
    assert resp.json()["bio"] == "Quiet tenant"

    resp = await client.put(url, json={"role": "ADMIN"}, headers=tenant.headers)
    assert resp.status_code == 403

    resp = await client.put(url, json={"email": "LANA@example.com"}, headers=tenant.headers)
    assert resp.status_code == 409

    resp = await client.put(url, json={"password": "n3w-password"}, headers=tenant.headers)
    assert resp.status_code == 200
    login = await client.post(
        "/api/auth/login", json={"username": "tom", "password": "n3w-password"}
    )
    assert login.status_code == 200
    login = await client.post("/api/auth/login", json={"username": "tom", "password": PASSWORD})
    assert login.status_code == 401


async def test_admin_updates_and_deletes(client, admin, tenant):
    url = f"/api/users/{tenant.id}"
    resp = await client.put(
        url, json={"identity_verified": True}, headers=admin.headers
    )
    assert resp.json()["identity_verified"] is True

    assert (await client.delete(url, headers=tenant.headers)).status_code == 403
    assert (await client.delete(url, headers=admin.headers)).status_code == 204
    assert (await client.get(url, headers=admin.headers)).status_code == 404


async def test_dashboard_is_role_aware(
    client, admin, landlord, tenant, create_property, create_listing, create_application
):
    prop = await create_property(landlord)
    listing = await create_listing(landlord, prop["id"])
    await create_application(tenant, listing["id"])
    await client.post(
        "/api/payments",
        json={"property_id": prop["id"], "type": "RENT", "amount": "1500"},
        headers=tenant.headers,
    )

    mine = (await client.get("/api/dashboard", headers=landlord.headers)).json()
    assert mine["role"] == "LANDLORD"
    assert mine["properties"] == 1
    assert mine["available_properties"] == 1
    assert mine["active_listings"] == 1
    assert mine["listings"] == 1
    assert mine["agreements"] == 0
    assert mine["pending_applications"] == 1
    assert mine["pending_payments"] == 1
    assert mine["users"] is None

    theirs = (await client.get("/api/dashboard", headers=tenant.headers)).json()
    assert theirs["role"] == "TENANT"
    assert theirs["properties"] == 0
    assert theirs["applications"] == 1
    assert theirs["agreements"] == 0
    assert Decimal(theirs["completed_payment_total"]) == Decimal("0")

    everything = (await client.get("/api/dashboard", headers=admin.headers)).json()
    assert everything["users"] == 3
    assert everything["payments"] == 1
    assert everything["listings"] == 1
    assert everything["agreements"] == 0

    assert (await client.get("/api/dashboard")).status_code == 401


async def test_role_count_is_admin_only(client, admin, landlord, tenant):
    resp = await client.get("/api/users/role/LANDLORD/count", headers=admin.headers)
    assert resp.json() == {"count": 1}
    resp = await client.get("/api/users/role/LANDLORD/count", headers=tenant.headers)
    assert resp.status_code == 403
