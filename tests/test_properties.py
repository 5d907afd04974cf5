import uuid
from decimal import Decimal

from app import app
from models.enums import UserRole
from tests.conftest import PROPERTY


async def test_create_defaults_to_available(client, landlord, create_property):
    prop = await create_property(landlord)
    assert prop["status"] == "AVAILABLE"
    assert prop["landlord_id"] == landlord.id
    assert prop["property_type"] == "APARTMENT"
    assert Decimal(prop["rent_amount"]) == Decimal("1500")

    resp = await client.get(f"/api/properties/{prop['id']}")
    assert resp.status_code == 200
    fetched = resp.json()
    for field in ("title", "address", "city", "amenities", "bedrooms", "pets_allowed"):
        assert fetched[field] == prop[field]


async def test_posted_status_is_ignored_on_create(landlord, create_property):
    prop = await create_property(landlord, status="RENTED")
    assert prop["status"] == "AVAILABLE"


async def test_create_requires_landlord_or_admin(client, tenant):
    resp = await client.post("/api/properties", json=PROPERTY, headers=tenant.headers)
    assert resp.status_code == 403

    resp = await client.post("/api/properties", json=PROPERTY)
    assert resp.status_code == 401


async def test_admin_creates_for_landlord(client, admin, landlord):
    payload = {**PROPERTY, "landlord_id": landlord.id}
    resp = await client.post("/api/properties", json=payload, headers=admin.headers)
    assert resp.status_code == 201
    assert resp.json()["landlord_id"] == landlord.id

    payload["landlord_id"] = str(uuid.uuid4())
    resp = await client.post("/api/properties", json=payload, headers=admin.headers)
    assert resp.status_code == 400


async def test_invalid_rent_is_rejected(client, landlord):
    resp = await client.post(
        "/api/properties",
        json={**PROPERTY, "rent_amount": "-5"},
        headers=landlord.headers,
    )
    assert resp.status_code == 422


async def test_partial_update_keeps_absent_fields(client, landlord, create_property):
    prop = await create_property(landlord)
    resp = await client.put(
        f"/api/properties/{prop['id']}",
        json={"title": "Renovated", "description": None},
        headers=landlord.headers,
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["title"] == "Renovated"
    assert updated["description"] is None
    assert updated["address"] == prop["address"]
    assert updated["amenities"] == prop["amenities"]
    assert Decimal(updated["rent_amount"]) == Decimal("1500")


async def test_update_rejects_empty_and_null_required(client, landlord, create_property):
    prop = await create_property(landlord)
    url = f"/api/properties/{prop['id']}"
    assert (await client.put(url, json={}, headers=landlord.headers)).status_code == 400
    resp = await client.put(url, json={"title": None}, headers=landlord.headers)
    assert resp.status_code == 400


async def test_only_owner_may_modify(client, landlord, make_user, create_property):
    prop = await create_property(landlord)
    intruder = await make_user("ivan", UserRole.LANDLORD)
    url = f"/api/properties/{prop['id']}"

    assert (
        await client.put(url, json={"title": "Mine"}, headers=intruder.headers)
    ).status_code == 403
    assert (await client.delete(url, headers=intruder.headers)).status_code == 403


async def test_status_change_and_lookup(client, landlord, create_property):
    prop = await create_property(landlord)
    await create_property(landlord, title="Second")

    resp = await client.patch(
        f"/api/properties/{prop['id']}/status",
        json={"status": "RENTED"},
        headers=landlord.headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "RENTED"

    rented = (await client.get("/api/properties/status/RENTED")).json()
    assert [p["id"] for p in rented] == [prop["id"]]
    assert (await client.get("/api/properties/status/OFF_MARKET")).json() == []
    count = await client.get("/api/properties/status/AVAILABLE/count")
    assert count.json() == {"count": 1}

    bad = await client.get("/api/properties/status/DEMOLISHED")
    assert bad.status_code == 422


async def test_delete_then_missing(client, landlord, create_property):
    prop = await create_property(landlord)
    url = f"/api/properties/{prop['id']}"
    assert (await client.delete(url, headers=landlord.headers)).status_code == 204
    assert (await client.get(url)).status_code == 404
    assert (await client.delete(url, headers=landlord.headers)).status_code == 404


async def test_public_search_and_ranges(client, landlord, create_property):
    await create_property(landlord, rent_amount="1000", city="Springfield")
    await create_property(landlord, rent_amount="2000", city="Shelbyville")
    await create_property(landlord, rent_amount="2500", bedrooms=4)

    resp = await client.get("/api/properties/rent-range?minRent=1000&maxRent=2000")
    assert sorted(Decimal(p["rent_amount"]) for p in resp.json()) == [
        Decimal("1000"),
        Decimal("2000"),
    ]

    page = (await client.get("/api/properties/search?minBedrooms=3")).json()
    assert page["total"] == 1

    page = (await client.get("/api/properties/search?city=shelbyville")).json()
    assert [p["city"] for p in page["items"]] == ["Shelbyville"]

    resp = await client.get("/api/properties/rent-range?minRent=3000&maxRent=1000")
    assert resp.status_code == 400


async def test_pagination_and_sorting(client, landlord, create_property):
    for rent in ("1200", "900", "1800"):
        await create_property(landlord, rent_amount=rent)

    page = (
        await client.get("/api/properties?size=2&sortBy=rentAmount&sortDir=asc")
    ).json()
    assert page["total"] == 3
    assert page["total_pages"] == 2
    assert [Decimal(p["rent_amount"]) for p in page["items"]] == [
        Decimal("900"),
        Decimal("1200"),
    ]

    second = (
        await client.get("/api/properties?page=1&size=2&sortBy=rentAmount&sortDir=asc")
    ).json()
    assert [Decimal(p["rent_amount"]) for p in second["items"]] == [Decimal("1800")]

    assert (await client.get("/api/properties?sortBy=password")).status_code == 400
    assert (await client.get("/api/properties?size=500")).status_code == 422


async def test_near_and_amenities(client, landlord, create_property):
    close = await create_property(landlord, latitude=40.0, longitude=-90.0)
    await create_property(landlord, latitude=10.0, longitude=10.0, amenities=["pool"])

    near = (
        await client.get("/api/properties/near?latitude=40.1&longitude=-90.1&radius=0.5")
    ).json()
    assert [p["id"] for p in near] == [close["id"]]

    pools = (await client.get("/api/properties/amenities?amenities=pool")).json()
    assert len(pools) == 1


async def test_amenity_match_is_literal(client, landlord, create_property):
    cafe = await create_property(landlord, amenities=["café", "rooftop_deck"])
    await create_property(landlord)

    async def matching(value):
        resp = await client.get("/api/properties/amenities", params={"amenities": value})
        return [p["id"] for p in resp.json()]

    assert await matching("café") == [cafe["id"]]
    assert await matching("rooftop_deck") == [cafe["id"]]
    assert await matching("%") == []
    assert await matching("park_ng") == []


async def test_analytics_is_admin_only(client, admin, landlord, create_property):
    await create_property(landlord)
    assert (
        await client.get("/api/properties/analytics", headers=landlord.headers)
    ).status_code == 403
    resp = await client.get("/api/properties/analytics", headers=admin.headers)
    assert resp.json() == {"total": 1, "available": 1, "rented": 0}


async def test_landlord_lookup(client, landlord, create_property):
    await create_property(landlord)
    page = (await client.get(f"/api/properties/landlord/{landlord.id}")).json()
    assert page["total"] == 1
    count = (await client.get(f"/api/properties/landlord/{landlord.id}/count")).json()
    assert count == {"count": 1}


def test_collection_routes_are_mounted():
    routes = {
        (route.path, method)
        for route in app.routes
        for method in getattr(route, "methods", None) or ()
    }
    for resource in ("properties", "listings", "applications", "agreements", "payments"):
        assert (f"/api/{resource}", "GET") in routes
        assert (f"/api/{resource}", "POST") in routes
    assert ("/api/users", "GET") in routes
    assert ("/api/dashboard", "GET") in routes
