from typing import Optional

from sqlalchemy import func, or_, select

from core.paginate import PageParams
from models.enums import UserRole
from models.models import User

from .base_repo import BaseRepo


class UserRepo(BaseRepo[User]):
    model = User

    async def get_by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            select(User).where(func.lower(User.username) == username.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        email_payload = email.strip().lower()
        result = await self.db.execute(select(User).where(User.email == email_payload))
        return result.scalar_one_or_none()

    async def get_by_login(self, identifier: str) -> User | None:
        ident = identifier.strip().lower()
        result = await self.db.execute(
            select(User).where(
                or_(func.lower(User.username) == ident, User.email == ident)
            )
        )
        return result.scalars().first()

    async def exists_by_username(self, username: str) -> bool:
        return await self.get_by_username(username) is not None

    async def exists_by_email(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def create(self, user: User) -> User:
        return await self.save(user)

    async def page_all(self, params: PageParams, role: Optional[UserRole] = None):
        clauses = [User.role == role] if role else []
        return await self.page_where(params, *clauses)

    async def count_by_role(self, role: UserRole) -> int:
        return await self.count_where(User.role == role)

    async def count_all(self) -> int:
        return await self.count_where()
