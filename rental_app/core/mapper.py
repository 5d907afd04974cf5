from typing import Iterable, Type, TypeVar

from pydantic import BaseModel

from .errors import ValidationError

T = TypeVar("T", bound=BaseModel)


class ORMMapper:
    @staticmethod
    def one(item, schema: Type[T]) -> T:
        return schema.model_validate(item)

    @staticmethod
    def many(items: Iterable, schema: Type[T]) -> list[T]:
        return [schema.model_validate(item) for item in items]

    @staticmethod
    def apply(target, changes: dict, *, required: Iterable[str] = ()) -> list[str]:
        """Copy a patch onto an ORM object and return the touched field names.

        ``changes`` must come from ``model_dump(exclude_unset=True)`` so absent
        fields are never touched. An explicit ``None`` clears the field unless
        it is listed in ``required``.
        """
        required = set(required)
        for field, value in changes.items():
            if value is None and field in required:
                raise ValidationError(f"{field} cannot be null")
        for field, value in changes.items():
            try:
                setattr(target, field, value)
            except ValueError as e:
                raise ValidationError(str(e))
        return list(changes)
