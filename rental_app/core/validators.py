import uuid
from datetime import datetime, timedelta, timezone

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt

from .errors import UnauthorizedError
from .settings import settings


def create_access_token(user_id: uuid.UUID, username: str, role: str) -> str:
    expires = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_EXPIRE_MINUTES
    )
    return jwt.encode(
        {
            "sub": str(user_id),
            "username": username,
            "role": role,
            "type": "access",
            "exp": expires,
        },
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def decode_http_access_token(token: str) -> uuid.UUID:
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
    )
    if payload.get("type") != "access":
        raise JWTError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token missing user ID")

    try:
        return uuid.UUID(user_id)
    except ValueError:
        raise JWTError("Invalid user ID format in token")


def extract_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return request.cookies.get("access_token")


async def jwt_protect(request: Request) -> uuid.UUID:
    token = extract_token(request)
    if not token:
        raise UnauthorizedError("Not authenticated")

    try:
        return decode_http_access_token(token)
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except JWTError:
        raise UnauthorizedError("Invalid token")
