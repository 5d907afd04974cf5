import logging
import uuid
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from core.errors import ConflictError
from core.filters import conjunction
from core.paginate import PageParams, PaginatePage
from core.get_db import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepo(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db):
        self.db = db
        self.paginate: PaginatePage = PaginatePage()

    async def get_by_id(self, obj_id: uuid.UUID) -> Optional[ModelT]:
        result = await self.db.execute(select(self.model).where(self.model.id == obj_id))
        return result.scalar_one_or_none()

    async def list_where(self, *clauses, order_by=None) -> List[ModelT]:
        stmt = select(self.model).where(conjunction(*clauses))
        stmt = stmt.order_by(*(order_by or [self.model.created_at.desc()]))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def page_where(self, params: PageParams, *clauses, stmt: Select | None = None):
        stmt = stmt if stmt is not None else select(self.model)
        return await self.paginate.fetch(
            self.db, stmt.where(conjunction(*clauses)), self.model, params
        )

    async def count_where(self, *clauses, stmt: Select | None = None) -> int:
        base = stmt if stmt is not None else select(self.model)
        inner = base.where(conjunction(*clauses)).subquery()
        result = await self.db.execute(select(func.count()).select_from(inner))
        return result.scalar_one()

    async def save(self, obj: ModelT) -> ModelT:
        self.db.add(obj)
        try:
            await self.db.commit()
        except StaleDataError:
            await self.db.rollback()
            logger.warning(f"Stale write rejected for {obj.__class__.__name__}")
            raise ConflictError(
                f"{obj.__class__.__name__} was modified by another request. Reload and retry."
            )
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Integrity error on {obj.__class__.__name__}: {e.orig if e.orig else e}"
            )
            raise ConflictError(
                f"{obj.__class__.__name__} conflicts with existing data"
            )
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelT) -> None:
        try:
            await self.db.delete(obj)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(
                f"{obj.__class__.__name__} is still referenced and cannot be deleted"
            )
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def refresh(self, obj: ModelT) -> ModelT:
        await self.db.refresh(obj)
        return obj
