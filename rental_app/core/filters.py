"""Typed building blocks for optional query filters.

Every helper returns ``None`` when its filter value is unset, and
:func:`conjunction` drops ``None`` clauses, so a query built from any
combination of optional filters degrades to "match everything" for the
filters the caller left out. Range helpers are inclusive on both bounds.
"""

import json
from typing import Any, Iterable, Optional

from sqlalchemy import String, and_, cast, or_, true
from sqlalchemy.sql.elements import ColumnElement

from .errors import ValidationError


def equals(column, value: Any) -> Optional[ColumnElement]:
    if value is None:
        return None
    return column == value


def at_least(column, value: Any) -> Optional[ColumnElement]:
    if value is None:
        return None
    return column >= value


def at_most(column, value: Any) -> Optional[ColumnElement]:
    if value is None:
        return None
    return column <= value


def greater_than(column, value: Any) -> Optional[ColumnElement]:
    if value is None:
        return None
    return column > value


def less_than(column, value: Any) -> Optional[ColumnElement]:
    if value is None:
        return None
    return column < value


def between(column, low: Any, high: Any) -> Optional[ColumnElement]:
    """Inclusive range. Either bound may be ``None`` for a one-sided range."""
    if low is None and high is None:
        return None
    return conjunction(at_least(column, low), at_most(column, high))


def contains(column, text: Optional[str]) -> Optional[ColumnElement]:
    if not text:
        return None
    return column.ilike(f"%{escape_like(text)}%", escape="\\")


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def any_in_json_list(column, values: Optional[Iterable[str]]) -> Optional[ColumnElement]:
    """Match rows whose JSON string list holds at least one of ``values``.

    The list is compared in its serialized form so the clause runs unchanged
    on SQLite and PostgreSQL. Each value is encoded the way the engine stores
    it (non-ASCII kept as is) and LIKE wildcards in it match literally.
    """
    wanted = [v for v in (values or []) if v]
    if not wanted:
        return None
    serialized = cast(column, String)
    patterns = [escape_like(json.dumps(v, ensure_ascii=False)) for v in wanted]
    return or_(*(serialized.like(f"%{p}%", escape="\\") for p in patterns))


def within_radius(
    lat_column,
    lon_column,
    latitude: Optional[float],
    longitude: Optional[float],
    radius: Optional[float],
) -> Optional[ColumnElement]:
    """Flat-plane distance check in degrees.

    ``sqrt((lat1-lat2)^2 + (lon1-lon2)^2) <= radius`` is evaluated squared so
    no SQL ``sqrt`` is needed. This treats latitude/longitude as a plane and
    is only an approximation of real geographic distance.
    """
    if latitude is None or longitude is None or radius is None:
        return None
    d_lat = lat_column - latitude
    d_lon = lon_column - longitude
    return and_(
        lat_column.is_not(None),
        lon_column.is_not(None),
        d_lat * d_lat + d_lon * d_lon <= radius * radius,
    )


def conjunction(*clauses: Optional[ColumnElement]) -> ColumnElement:
    present = [c for c in clauses if c is not None]
    if not present:
        return true()
    if len(present) == 1:
        return present[0]
    return and_(*present)


def ensure_range(low: Any, high: Any, *, field: str) -> None:
    if low is not None and high is not None and low > high:
        raise ValidationError(f"Invalid {field} range: minimum exceeds maximum")
