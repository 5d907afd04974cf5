import math
import re
from typing import Generic, List, Type, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select

from models.enums import SortDirection

from .errors import ValidationError
from .settings import settings

T = TypeVar("T", bound=BaseModel)


class PageParams(BaseModel):
    page: int = 0
    size: int = settings.DEFAULT_PAGE_SIZE
    sort_by: str = "created_at"
    sort_dir: SortDirection = SortDirection.DESC


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    size: int
    total_pages: int


def page_params(
    page: int = Query(0, ge=0),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_dir: SortDirection = Query(SortDirection.DESC, alias="sortDir"),
) -> PageParams:
    return PageParams(page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)


class PaginatePage:
    @staticmethod
    def column_name(sort_by: str) -> str:
        # accept camelCase names from clients, e.g. rentAmount
        return re.sub(r"(?<!^)(?=[A-Z])", "_", sort_by).lower()

    def order_by(self, stmt: Select, model, params: PageParams) -> Select:
        name = self.column_name(params.sort_by)
        if name not in model.__table__.columns.keys():
            raise ValidationError(f"Cannot sort by '{params.sort_by}'")
        column = getattr(model, name)
        ordering = column.asc() if params.sort_dir == SortDirection.ASC else column.desc()
        return stmt.order_by(ordering, model.id.asc())

    async def fetch(self, db, stmt: Select, model, params: PageParams):
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await db.execute(count_stmt)).scalar_one()

        ordered = self.order_by(stmt, model, params)
        result = await db.execute(
            ordered.offset(params.page * params.size).limit(params.size)
        )
        return result.scalars().all(), total

    def build(self, rows, total: int, params: PageParams, schema: Type[T]) -> Page[T]:
        return Page[schema](
            items=[schema.model_validate(row) for row in rows],
            total=total,
            page=params.page,
            size=params.size,
            total_pages=math.ceil(total / params.size) if params.size else 0,
        )
