from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import NullPool

import models.event_listener  # noqa: F401
from app import app
from core.get_db import Base, build_engine, build_sessionmaker, get_db_async
from models.enums import UserRole, UserType
from models.models import User

PASSWORD = "s3cret-pass"

PROPERTY = {
    "title": "Sunny two bedroom",
    "description": "Close to the park",
    "address": "12 Elm Street",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "rent_amount": "1500",
    "security_deposit": "1500",
    "bedrooms": 2,
    "bathrooms": 1,
    "property_type": "apartment",
    "amenities": ["parking", "gym"],
    "lease_term_months": 12,
    "pets_allowed": True,
    "latitude": 39.78,
    "longitude": -89.65,
}


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'rental_test.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_async] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(client, session_factory):
    """Register a user through the API (admins are seeded, since the role
    cannot be self-assigned) and return its id and auth headers."""

    async def _make(username: str, role: UserRole = UserRole.TENANT):
        if role == UserRole.ADMIN:
            async with session_factory() as session:
                user = User(
                    username=username,
                    email=f"{username}@example.com",
                    first_name="Ada",
                    last_name="Admin",
                    role=UserRole.ADMIN,
                    user_type=UserType.ADMIN,
                )
                user.set_password(PASSWORD)
                session.add(user)
                await session.commit()
            resp = await client.post(
                "/api/auth/login", json={"username": username, "password": PASSWORD}
            )
        else:
            resp = await client.post(
                "/api/auth/register",
                json={
                    "username": username,
                    "email": f"{username}@example.com",
                    "password": PASSWORD,
                    "first_name": username,
                    "last_name": "Example",
                    "user_type": role.value,
                },
            )
        assert resp.status_code in (200, 201), resp.text
        # login sets a cookie; tests authenticate with explicit headers only
        client.cookies.clear()
        data = resp.json()["data"]
        return SimpleNamespace(
            id=data["id"], username=username, headers=bearer(data["token"])
        )

    return _make


@pytest.fixture
async def landlord(make_user):
    return await make_user("lana", UserRole.LANDLORD)


@pytest.fixture
async def tenant(make_user):
    return await make_user("tom", UserRole.TENANT)


@pytest.fixture
async def admin(make_user):
    return await make_user("root", UserRole.ADMIN)


@pytest.fixture
def create_property(client):
    async def _create(owner, **overrides):
        resp = await client.post(
            "/api/properties", json={**PROPERTY, **overrides}, headers=owner.headers
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


@pytest.fixture
def create_listing(client):
    async def _create(owner, property_id, **overrides):
        payload = {"property_id": property_id, "title": "Great place", **overrides}
        resp = await client.post("/api/listings", json=payload, headers=owner.headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


@pytest.fixture
def create_application(client):
    async def _create(applicant, listing_id, **overrides):
        payload = {
            "listing_id": listing_id,
            "monthly_income": "4200",
            "credit_score": 700,
            **overrides,
        }
        resp = await client.post(
            "/api/applications", json=payload, headers=applicant.headers
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
