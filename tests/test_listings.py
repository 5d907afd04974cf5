import uuid
from datetime import timedelta
from decimal import Decimal

from models.enums import UserRole
from models.utils import utcnow


async def test_rent_search_scenario(client, landlord, create_property, create_listing):
    prop = await create_property(landlord, rent_amount="1500")
    assert prop["status"] == "AVAILABLE"
    listing = await create_listing(landlord, prop["id"])

    page = (await client.get("/api/listings/search?minRent=1000&maxRent=2000")).json()
    assert [item["id"] for item in page["items"]] == [listing["id"]]

    page = (await client.get("/api/listings/search?minRent=1600")).json()
    assert page["items"] == []
    assert page["total"] == 0

    ranged = (await client.get("/api/listings/rent-range?minRent=1500&maxRent=1500")).json()
    assert [item["id"] for item in ranged] == [listing["id"]]


async def test_listing_inherits_property_terms(landlord, create_property, create_listing):
    prop = await create_property(landlord, rent_amount="1750", lease_term_months=6)
    listing = await create_listing(landlord, prop["id"])
    assert listing["landlord_id"] == landlord.id
    assert Decimal(listing["rent_amount"]) == Decimal("1750")
    assert listing["lease_term_months"] == 6
    assert listing["status"] == "ACTIVE"
    assert listing["type"] == "RENT"
    assert listing["view_count"] == 0

    own = await create_listing(landlord, prop["id"], rent_amount="1600")
    assert Decimal(own["rent_amount"]) == Decimal("1600")


async def test_listing_needs_existing_owned_property(
    client, landlord, make_user, create_property
):
    resp = await client.post(
        "/api/listings",
        json={"property_id": str(uuid.uuid4()), "title": "Ghost"},
        headers=landlord.headers,
    )
    assert resp.status_code == 400

    prop = await create_property(landlord)
    other = await make_user("olga", UserRole.LANDLORD)
    resp = await client.post(
        "/api/listings",
        json={"property_id": prop["id"], "title": "Not mine"},
        headers=other.headers,
    )
    assert resp.status_code == 403


async def test_view_count_and_popular(client, landlord, create_property, create_listing):
    prop = await create_property(landlord)
    quiet = await create_listing(landlord, prop["id"], title="Quiet")
    busy = await create_listing(landlord, prop["id"], title="Busy")

    for _ in range(3):
        resp = await client.post(f"/api/listings/{busy['id']}/view")
    assert resp.json()["view_count"] == 3

    popular = (await client.get("/api/listings/popular")).json()
    assert [item["id"] for item in popular["items"]] == [busy["id"], quiet["id"]]


async def test_featured_flag(client, landlord, create_property, create_listing):
    listing = await create_listing(landlord, (await create_property(landlord))["id"])
    url = f"/api/listings/{listing['id']}/featured"

    past = (utcnow() - timedelta(days=1)).isoformat()
    resp = await client.patch(
        url, json={"is_featured": True, "featured_until": past}, headers=landlord.headers
    )
    assert resp.status_code == 400

    future = (utcnow() + timedelta(days=7)).isoformat()
    resp = await client.patch(
        url, json={"is_featured": True, "featured_until": future}, headers=landlord.headers
    )
    assert resp.status_code == 200
    assert resp.json()["is_featured"] is True

    assert (await client.get("/api/listings/featured/count")).json() == {"count": 1}

    resp = await client.patch(url, json={"is_featured": False}, headers=landlord.headers)
    assert resp.json()["featured_until"] is None


async def test_update_validates_featured_until(client, landlord, create_property, create_listing):
    listing = await create_listing(
        landlord, (await create_property(landlord))["id"], status="INACTIVE"
    )
    assert listing["status"] == "ACTIVE"
    url = f"/api/listings/{listing['id']}"

    past = (utcnow() - timedelta(days=1)).isoformat()
    resp = await client.put(
        url, json={"is_featured": True, "featured_until": past}, headers=landlord.headers
    )
    assert resp.status_code == 400
    assert (await client.get(url)).json()["is_featured"] is False

    resp = await client.post(
        "/api/listings",
        json={"property_id": listing["property_id"], "title": "Old", "featured_until": past},
        headers=landlord.headers,
    )
    assert resp.status_code == 400

    future = (utcnow() + timedelta(days=3)).isoformat()
    resp = await client.put(url, json={"featured_until": future}, headers=landlord.headers)
    assert resp.status_code == 200
    assert resp.json()["featured_until"] is None


async def test_status_and_counts(client, landlord, create_property, create_listing):
    prop = await create_property(landlord)
    first = await create_listing(landlord, prop["id"])
    await create_listing(landlord, prop["id"])

    resp = await client.patch(
        f"/api/listings/{first['id']}/status",
        json={"status": "INACTIVE"},
        headers=landlord.headers,
    )
    assert resp.json()["status"] == "INACTIVE"

    assert (await client.get("/api/listings/active/count")).json() == {"count": 1}
    inactive = (await client.get("/api/listings/status/INACTIVE")).json()
    assert [item["id"] for item in inactive] == [first["id"]]
    assert (await client.get("/api/listings/status/EXPIRED")).json() == []
    count = (await client.get("/api/listings/status/INACTIVE/count")).json()
    assert count == {"count": 1}
    assert len((await client.get("/api/listings/lease-term/12")).json()) == 2
    assert (await client.get("/api/listings/lease-term/6")).json() == []
    city = (await client.get("/api/listings/city/springfield/count")).json()
    assert city == {"count": 1}


async def test_update_is_partial(client, landlord, create_property, create_listing):
    listing = await create_listing(
        landlord, (await create_property(landlord))["id"], description="Bright"
    )
    resp = await client.put(
        f"/api/listings/{listing['id']}",
        json={"title": "Brighter"},
        headers=landlord.headers,
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Brighter"
    assert resp.json()["description"] == "Bright"


async def test_delete_missing_listing(client, landlord):
    resp = await client.delete(f"/api/listings/{uuid.uuid4()}", headers=landlord.headers)
    assert resp.status_code == 404


async def test_property_joined_filters(client, landlord, create_property, create_listing):
    pets = await create_property(landlord, pets_allowed=True, bedrooms=3)
    no_pets = await create_property(landlord, pets_allowed=False, bedrooms=1)
    await create_listing(landlord, pets["id"])
    await create_listing(landlord, no_pets["id"], type="SUBLET")

    page = (await client.get("/api/listings/search?petsAllowed=true")).json()
    assert page["total"] == 1
    page = (await client.get("/api/listings/search?type=SUBLET")).json()
    assert page["total"] == 1
    page = (await client.get("/api/listings/search?minBedrooms=2")).json()
    assert page["total"] == 1
    page = (await client.get("/api/listings/search")).json()
    assert page["total"] == 2
