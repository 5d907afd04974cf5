import logging

from fastapi.responses import JSONResponse

from core.errors import ConflictError, UnauthorizedError
from core.settings import settings
from core.validators import create_access_token
from models.enums import USER_TYPE_TO_ROLE, UserRole
from models.models import User
from repos.user_repo import UserRepo
from schemas.schema import AuthResponse, LoginData, UserOut

logger = logging.getLogger(__name__)

ACCESS_EXPIRE_MINUTES = settings.ACCESS_EXPIRE_MINUTES
SECURE_COOKIES = settings.SECURE_COOKIES


class AuthService:
    def __init__(self, db):
        self.repo: UserRepo = UserRepo(db)

    async def register(self, data) -> JSONResponse:
        if await self.repo.exists_by_username(data.username):
            raise ConflictError("Username already taken")
        if await self.repo.exists_by_email(data.email):
            raise ConflictError("Email already registered")

        profile = data.model_dump(
            exclude={"password", "user_type", "username", "email"}, exclude_none=True
        )
        user = User(
            username=data.username,
            email=data.email,
            role=USER_TYPE_TO_ROLE.get(data.user_type, UserRole.USER),
            user_type=data.user_type,
            **profile,
        )
        user.set_password(raw_password=data.password)
        await self.repo.create(user)
        logger.info(f"User {user.username} registered as {user.role.value}")

        access_token = create_access_token(user.id, user.username, user.role.value)
        body = AuthResponse(
            message="Registration successful",
            data=self.login_data(user, access_token),
        )
        return JSONResponse(body.model_dump(mode="json"), status_code=201)

    async def login(self, data) -> JSONResponse:
        user = await self.repo.get_by_login(data.username)
        if not user or not user.check_password(raw_password=data.password):
            logger.warning(f"Failed login for {data.username}")
            raise UnauthorizedError("Invalid credentials")

        access_token = create_access_token(user.id, user.username, user.role.value)
        body = AuthResponse(
            message="Login successful", data=self.login_data(user, access_token)
        )
        response = JSONResponse(body.model_dump(mode="json"), status_code=200)
        response.set_cookie(
            key="access_token",
            value=access_token,
            httponly=True,
            secure=SECURE_COOKIES,
            samesite="lax",
            max_age=ACCESS_EXPIRE_MINUTES * 60,
        )
        return response

    async def logout(self) -> JSONResponse:
        response = JSONResponse({"success": True, "message": "Logged out"})
        response.delete_cookie("access_token")
        return response

    async def me(self, current_user) -> UserOut:
        return UserOut.model_validate(current_user)

    @staticmethod
    def login_data(user: User, token: str) -> LoginData:
        return LoginData(
            token=token,
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )
