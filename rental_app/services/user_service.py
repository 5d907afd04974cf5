import logging
import uuid

from core.check_permission import CheckRolePermission
from core.errors import ConflictError, NotFoundError, ValidationError
from core.mapper import ORMMapper
from core.paginate import PageParams, PaginatePage
from models.enums import UserRole
from models.models import User
from repos.user_repo import UserRepo
from schemas.schema import CountOut, UserAdminUpdate, UserOut, UserUpdate

logger = logging.getLogger(__name__)

ADMIN_ONLY = set(UserAdminUpdate.model_fields) - set(UserUpdate.model_fields)


class UserService:
    def __init__(self, db):
        self.repo: UserRepo = UserRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def get_or_404(self, user_id: uuid.UUID) -> User:
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def list_users(self, params: PageParams, current_user, role: UserRole | None = None):
        await self.permission.check_admin(current_user)
        rows, total = await self.repo.page_all(params, role)
        return self.paginate.build(rows, total, params, UserOut)

    async def count_by_role(self, role: UserRole, current_user) -> CountOut:
        await self.permission.check_admin(current_user)
        return CountOut(count=await self.repo.count_by_role(role))

    async def get_user(self, user_id: uuid.UUID, current_user) -> UserOut:
        await self.permission.check_self_or_admin(current_user, user_id)
        return self.mapper.one(await self.get_or_404(user_id), UserOut)

    async def update_user(self, user_id: uuid.UUID, current_user, data) -> UserOut:
        await self.permission.check_self_or_admin(current_user, user_id)
        user = await self.get_or_404(user_id)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields provided for update.")
        if ADMIN_ONLY & update_data.keys():
            await self.permission.check_admin(current_user)

        email = update_data.get("email")
        if email:
            email = update_data["email"] = email.strip().lower()
        if email and email != user.email and await self.repo.exists_by_email(email):
            raise ConflictError("Email already registered")

        password = update_data.pop("password", None)
        self.mapper.apply(user, update_data, required=("email", "role"))
        if password:
            user.set_password(raw_password=password)
        user = await self.repo.save(user)
        logger.info(f"User {user.username} updated by {current_user.username}")
        return self.mapper.one(user, UserOut)

    async def delete_user(self, user_id: uuid.UUID, current_user) -> None:
        await self.permission.check_admin(current_user)
        user = await self.get_or_404(user_id)
        await self.repo.delete(user)
        logger.info(f"User {user_id} deleted by {current_user.username}")

    async def exists_by_username(self, username: str) -> dict:
        return {"exists": await self.repo.exists_by_username(username)}

    async def exists_by_email(self, email: str) -> dict:
        return {"exists": await self.repo.exists_by_email(email)}
