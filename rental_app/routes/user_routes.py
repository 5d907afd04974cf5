import uuid
from typing import Optional

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.paginate import PageParams, page_params
from core.safe_handler import safe_handler
from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from models.enums import UserRole
from models.models import User
from schemas.schema import UserAdminUpdate
from services.user_service import UserService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["Users"])


@cbv(router=router)
class UserRoutes:
    @router.get("/users")
    @safe_handler
    async def get_all(
        self,
        role: Optional[UserRole] = None,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await UserService(db).list_users(params, current_user, role)

    @router.get("/users/exists/username/{username}")
    @safe_handler
    async def username_exists(
        self,
        username: str,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await UserService(db).exists_by_username(username)

    @router.get("/users/exists/email/{email}")
    @safe_handler
    async def email_exists(
        self,
        email: str,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await UserService(db).exists_by_email(email)

    @router.get("/users/role/{role}/count")
    @safe_handler
    async def count_by_role(
        self,
        role: UserRole,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).count_by_role(role, current_user)

    @router.get("/users/{user_id}")
    @safe_handler
    async def get_one(
        self,
        user_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).get_user(user_id, current_user)

    @router.put("/users/{user_id}")
    @safe_handler
    async def update(
        self,
        user_id: uuid.UUID,
        data: UserAdminUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).update_user(user_id, current_user, data)

    @router.delete("/users/{user_id}", status_code=204)
    @safe_handler
    async def delete_user(
        self,
        user_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        await UserService(db).delete_user(user_id, current_user)
