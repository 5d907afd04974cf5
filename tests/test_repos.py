from datetime import timedelta
from decimal import Decimal

import pytest

from core.errors import ConflictError, ValidationError
from core.paginate import PageParams
from models.enums import (
    ApplicationStatus,
    PaymentStatus,
    PaymentType,
    PropertyStatus,
    SortDirection,
    UserRole,
)
from models.models import User
from models.utils import utcnow
from repos.application_repo import ApplicationRepo
from repos.listing_repo import ListingRepo
from repos.payment_repo import PaymentRepo
from repos.property_repo import PropertyRepo
from repos.user_repo import UserRepo


async def add_user(db, username, role):
    user = User(username=username, email=f"{username}@example.com", role=role)
    user.set_password("s3cret-pass")
    return await UserRepo(db).create(user)


async def add_property(db, landlord, **fields):
    values = dict(
        landlord_id=landlord.id,
        title="Flat",
        address="1 Main St",
        city="Springfield",
        state="IL",
        zip_code="62701",
        rent_amount=Decimal("1500"),
        security_deposit=Decimal("1500"),
        bedrooms=2,
        bathrooms=1,
    )
    values.update(fields)
    return await PropertyRepo(db).create(**values)


async def add_listing(db, prop, **fields):
    values = dict(
        property_id=prop.id,
        landlord_id=prop.landlord_id,
        title="Listing",
        rent_amount=prop.rent_amount,
        security_deposit=prop.security_deposit,
    )
    values.update(fields)
    return await ListingRepo(db).create(**values)


@pytest.fixture
async def owners(db):
    landlord = await add_user(db, "landlord", UserRole.LANDLORD)
    tenant = await add_user(db, "tenant", UserRole.TENANT)
    return landlord, tenant


async def test_create_then_get_returns_input(db, owners):
    landlord, _ = owners
    prop = await add_property(db, landlord, amenities=["gym"], pets_allowed=True)
    fetched = await PropertyRepo(db).get_by_id(prop.id)
    assert fetched.title == "Flat"
    assert fetched.rent_amount == Decimal("1500.00")
    assert fetched.amenities == ["gym"]
    assert fetched.pets_allowed is True
    assert fetched.status == PropertyStatus.AVAILABLE
    assert fetched.created_at is not None


async def test_find_by_status_returns_exact_set(db, owners):
    landlord, _ = owners
    repo = PropertyRepo(db)
    available = await add_property(db, landlord, title="A")
    rented = await add_property(db, landlord, title="B", status=PropertyStatus.RENTED)

    assert [p.id for p in await repo.find_by_status(PropertyStatus.AVAILABLE)] == [
        available.id
    ]
    assert [p.id for p in await repo.find_by_status(PropertyStatus.RENTED)] == [
        rented.id
    ]
    assert await repo.find_by_status(PropertyStatus.OFF_MARKET) == []
    assert await repo.count_by_status(PropertyStatus.UNDER_MAINTENANCE) == 0


async def test_rent_range_is_inclusive(db, owners):
    landlord, _ = owners
    repo = PropertyRepo(db)
    await add_property(db, landlord, rent_amount=Decimal("1000"))
    await add_property(db, landlord, rent_amount=Decimal("2000"))
    await add_property(db, landlord, rent_amount=Decimal("2500"))

    found = await repo.find_by_rent_range(Decimal("1000"), Decimal("2000"))
    assert sorted(p.rent_amount for p in found) == [Decimal("1000"), Decimal("2000")]
    assert len(await repo.find_by_rent_range(None, None)) == 3
    assert len(await repo.find_by_rent_range(Decimal("2000"), None)) == 2


async def test_search_ignores_unset_filters(db, owners):
    landlord, _ = owners
    repo = PropertyRepo(db)
    await add_property(db, landlord, city="Springfield", bedrooms=3, pets_allowed=True)
    await add_property(db, landlord, city="Shelbyville", bedrooms=1)
    await add_property(db, landlord, city="Springfield", status=PropertyStatus.RENTED)

    async def total(**filters):
        _, count = await repo.page_search(PageParams(), **filters)
        return count

    assert await total() == 2
    assert await total(city="springfield") == 1
    assert await total(min_bedrooms=2, pets_allowed=True) == 1
    assert await total(city="Capital City") == 0


async def test_near_and_amenities(db, owners):
    landlord, _ = owners
    repo = PropertyRepo(db)
    close = await add_property(
        db, landlord, latitude=40.0, longitude=-90.0, amenities=["pool"]
    )
    await add_property(db, landlord, latitude=45.0, longitude=-90.0, amenities=["gym"])
    await add_property(db, landlord)

    near = await repo.find_near(40.1, -90.1, 0.5)
    assert [p.id for p in near] == [close.id]
    assert [p.id for p in await repo.find_by_amenities(["pool", "sauna"])] == [close.id]
    assert len(await repo.find_by_amenities([])) == 3


async def test_page_sorting_and_unknown_column(db, owners):
    landlord, _ = owners
    repo = PropertyRepo(db)
    for rent in ("1200", "900", "1800"):
        await add_property(db, landlord, rent_amount=Decimal(rent))

    params = PageParams(page=0, size=2, sort_by="rentAmount", sort_dir=SortDirection.ASC)
    rows, total = await repo.page_by_landlord(landlord.id, params)
    assert total == 3
    assert [r.rent_amount for r in rows] == [Decimal("900"), Decimal("1200")]

    with pytest.raises(ValidationError):
        await repo.page_by_landlord(landlord.id, PageParams(sort_by="nope"))


async def test_listing_search_uses_listing_rent(db, owners):
    landlord, _ = owners
    prop = await add_property(db, landlord, rent_amount=Decimal("1500"))
    listing = await add_listing(db, prop)
    repo = ListingRepo(db)

    included, _ = await repo.page_search(
        PageParams(), min_rent=Decimal("1000"), max_rent=Decimal("2000")
    )
    assert [item.id for item in included] == [listing.id]
    _, total = await repo.page_search(PageParams(), min_rent=Decimal("1600"))
    assert total == 0
    assert await repo.count_active_by_city("SPRINGFIELD") == 1


async def test_view_count_increment(db, owners):
    landlord, _ = owners
    listing = await add_listing(db, await add_property(db, landlord))
    repo = ListingRepo(db)
    await repo.increment_view_count(listing.id)
    await repo.increment_view_count(listing.id)
    listing = await repo.refresh(listing)
    assert listing.view_count == 2


async def test_credit_score_range(db, owners):
    landlord, tenant = owners
    listing = await add_listing(db, await add_property(db, landlord))
    repo = ApplicationRepo(db)
    application = await repo.create(
        tenant_id=tenant.id,
        property_id=listing.property_id,
        listing_id=listing.id,
        credit_score=700,
        monthly_income=Decimal("4000"),
    )

    assert [a.id for a in await repo.find_by_credit_score_range(650, 750)] == [
        application.id
    ]
    assert await repo.find_by_credit_score_range(710, 800) == []
    assert len(await repo.find_by_credit_score_range(700, 700)) == 1
    assert len(await repo.find_by_income_range(Decimal("4000"), None)) == 1


async def test_application_landlord_lookups(db, owners):
    landlord, tenant = owners
    other = await add_user(db, "other", UserRole.LANDLORD)
    mine = await add_listing(db, await add_property(db, landlord))
    theirs = await add_listing(db, await add_property(db, other))
    repo = ApplicationRepo(db)
    for listing in (mine, theirs):
        await repo.create(
            tenant_id=tenant.id,
            property_id=listing.property_id,
            listing_id=listing.id,
        )

    assert await repo.count_by_tenant(tenant.id) == 2
    assert len(await repo.find_by_landlord(landlord.id)) == 1
    assert await repo.count_by_landlord(other.id, ApplicationStatus.PENDING) == 1
    assert len(await repo.find_needing_review()) == 2
    assert await repo.find_overdue(days=7) == []


async def add_payment(db, prop, tenant, **fields):
    values = dict(
        tenant_id=tenant.id,
        landlord_id=prop.landlord_id,
        property_id=prop.id,
        type=PaymentType.RENT,
        amount=Decimal("1500"),
    )
    values.update(fields)
    return await PaymentRepo(db).create(**values)


async def test_payment_defaults_and_sums(db, owners):
    landlord, tenant = owners
    prop = await add_property(db, landlord)
    repo = PaymentRepo(db)

    assert await repo.sum_amount(status=PaymentStatus.COMPLETED) == Decimal("0.00")

    first = await add_payment(db, prop, tenant, late_fee=Decimal("25"))
    assert first.version == 0
    assert first.total_amount == Decimal("1525.00")
    assert first.payment_reference.startswith("PAY-")

    await add_payment(
        db, prop, tenant, amount=Decimal("500"), status=PaymentStatus.COMPLETED
    )
    assert await repo.sum_amount(status=PaymentStatus.COMPLETED) == Decimal("500.00")
    assert await repo.sum_amount(tenant_id=tenant.id) == Decimal("2000.00")
    assert len(await repo.find_by_amount_range(Decimal("500"), Decimal("1500"))) == 2


async def test_payment_overdue_and_retry_queries(db, owners):
    landlord, tenant = owners
    prop = await add_property(db, landlord)
    repo = PaymentRepo(db)
    now = utcnow()
    late = await add_payment(db, prop, tenant, due_date=now - timedelta(days=2))
    await add_payment(db, prop, tenant, due_date=now + timedelta(days=2))
    failed = await add_payment(
        db,
        prop,
        tenant,
        status=PaymentStatus.FAILED,
        next_retry_at=now - timedelta(minutes=1),
    )

    assert [p.id for p in await repo.find_overdue()] == [late.id]
    assert await repo.count_overdue(landlord_id=landlord.id) == 1
    assert [p.id for p in await repo.find_scheduled_for_retry()] == [failed.id]
    assert len(await repo.find_due_between(now, now + timedelta(days=3))) == 1


async def test_concurrent_payment_updates_conflict(session_factory, owners):
    landlord, tenant = owners
    async with session_factory() as setup:
        prop = await add_property(setup, landlord)
        payment = await add_payment(setup, prop, tenant)

    async with session_factory() as first, session_factory() as second:
        mine = await PaymentRepo(first).get_by_id(payment.id)
        theirs = await PaymentRepo(second).get_by_id(payment.id)
        assert mine.version == theirs.version == 0

        mine.amount = Decimal("1600")
        saved = await PaymentRepo(first).save(mine)
        assert saved.version == 1

        theirs.amount = Decimal("1700")
        with pytest.raises(ConflictError):
            await PaymentRepo(second).save(theirs)

    async with session_factory() as check:
        final = await PaymentRepo(check).get_by_id(payment.id)
        assert final.amount == Decimal("1600.00")
        assert final.total_amount == Decimal("1600.00")
        assert final.version == 1


async def test_duplicate_username_is_conflict(db, owners):
    with pytest.raises(ConflictError):
        await add_user(db, "landlord", UserRole.TENANT)
