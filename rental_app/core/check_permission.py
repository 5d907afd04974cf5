import uuid
from typing import Iterable

from models.enums import UserRole

from .errors import ForbiddenError


class CheckRolePermission:
    async def check_admin(self, current_user):
        if current_user.role != UserRole.ADMIN:
            raise ForbiddenError("Access Denied.")

    async def check_authenticated(self, current_user):
        if current_user is None or current_user.role not in set(UserRole):
            raise ForbiddenError("Access Denied")

    async def check_roles(self, current_user, roles: Iterable[UserRole]):
        await self.check_authenticated(current_user)
        allowed = set(roles)
        if current_user.role not in allowed:
            names = ", ".join(sorted(r.value for r in allowed))
            raise ForbiddenError(f"Access Denied. Requires one of: {names}")

    async def check_owner_or_admin(
        self, current_user, *owner_ids: uuid.UUID | None
    ):
        await self.check_authenticated(current_user)
        if current_user.role == UserRole.ADMIN:
            return
        if current_user.id not in {o for o in owner_ids if o is not None}:
            raise ForbiddenError("You are not allowed to access this resource")

    async def check_self_or_admin(self, current_user, user_id: uuid.UUID):
        await self.check_owner_or_admin(current_user, user_id)
