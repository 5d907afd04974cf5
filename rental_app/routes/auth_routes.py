from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import UserCreate, UserLoginInput
from services.auth_service import AuthService

router = APIRouter(tags=["User Authentication"])


@cbv(router)
class AuthRoutes:
    @router.post("/auth/register", status_code=201)
    @safe_handler
    async def register(
        self,
        data: UserCreate,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await AuthService(db).register(data)

    @router.post("/auth/login")
    @safe_handler
    async def login(
        self,
        data: UserLoginInput,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await AuthService(db).login(data)

    @router.post("/auth/logout")
    @safe_handler
    async def logout(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AuthService(db).logout()

    @router.get("/auth/me")
    @safe_handler
    async def me(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AuthService(db).me(current_user)
