from jose import jwt

from core.settings import settings
from tests.conftest import PASSWORD, bearer

REGISTRATION = {
    "username": "jane",
    "email": "Jane@Example.com",
    "password": PASSWORD,
    "first_name": "jane",
    "last_name": "doe",
    "user_type": "LANDLORD",
    "company_name": "Doe Homes",
}


async def test_register_returns_token_and_profile(client):
    resp = await client.post("/api/auth/register", json=REGISTRATION)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["username"] == "jane"
    assert data["email"] == "jane@example.com"
    assert data["first_name"] == "Jane"
    assert data["role"] == "LANDLORD"

    claims = jwt.decode(data["token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["sub"] == data["id"]
    assert claims["username"] == "jane"
    assert claims["role"] == "LANDLORD"
    assert claims["type"] == "access"


async def test_register_duplicates_conflict(client):
    assert (await client.post("/api/auth/register", json=REGISTRATION)).status_code == 201

    same_name = {**REGISTRATION, "email": "other@example.com"}
    resp = await client.post("/api/auth/register", json=same_name)
    assert resp.status_code == 409

    same_email = {**REGISTRATION, "username": "janet", "email": "JANE@example.com"}
    resp = await client.post("/api/auth/register", json=same_email)
    assert resp.status_code == 409


async def test_admin_cannot_be_self_assigned(client):
    payload = {**REGISTRATION, "username": "sneaky", "email": "s@example.com"}
    payload["user_type"] = "ADMIN"
    resp = await client.post("/api/auth/register", json=payload)
    assert resp.status_code == 201
    assert resp.json()["data"]["role"] == "USER"


async def test_register_rejects_bad_body(client):
    resp = await client.post(
        "/api/auth/register", json={**REGISTRATION, "email": "not-an-email"}
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["details"][0]["field"] == "email"


async def test_login_with_username_or_email(client):
    await client.post("/api/auth/register", json=REGISTRATION)

    resp = await client.post(
        "/api/auth/login", json={"username": "jane", "password": PASSWORD}
    )
    assert resp.status_code == 200
    assert "access_token" in resp.cookies

    resp = await client.post(
        "/api/auth/login", json={"username": "jane@example.com", "password": PASSWORD}
    )
    assert resp.status_code == 200


async def test_login_bad_credentials(client):
    await client.post("/api/auth/register", json=REGISTRATION)
    resp = await client.post(
        "/api/auth/login", json={"username": "jane", "password": "wrong-pass"}
    )
    assert resp.status_code == 401
    resp = await client.post(
        "/api/auth/login", json={"username": "nobody", "password": PASSWORD}
    )
    assert resp.status_code == 401


async def test_me_with_header_and_cookie(client):
    token = (await client.post("/api/auth/register", json=REGISTRATION)).json()["data"][
        "token"
    ]
    resp = await client.get("/api/auth/me", headers=bearer(token))
    assert resp.status_code == 200
    assert resp.json()["company_name"] == "Doe Homes"

    await client.post("/api/auth/login", json={"username": "jane", "password": PASSWORD})
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 200
    assert resp.json()["username"] == "jane"

    client.cookies.clear()
    assert (await client.get("/api/auth/me")).status_code == 401


async def test_invalid_token_is_unauthorized(client):
    resp = await client.get("/api/auth/me", headers=bearer("not-a-token"))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


async def test_health(client):
    resp = await client.get("/health")
    assert resp.json() == {"status": "ok"}
