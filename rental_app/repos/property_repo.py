import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import func

from core.filters import (
    any_in_json_list,
    at_least,
    between,
    equals,
    within_radius,
)
from core.paginate import PageParams
from models.enums import PropertyStatus
from models.models import Property
from models.utils import utcnow

from .base_repo import BaseRepo


class PropertyRepo(BaseRepo[Property]):
    model = Property

    async def create(self, **fields) -> Property:
        return await self.save(Property(**fields))

    async def page_by_landlord(self, landlord_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Property.landlord_id == landlord_id)

    async def count_by_landlord(self, landlord_id: uuid.UUID) -> int:
        return await self.count_where(Property.landlord_id == landlord_id)

    async def find_by_status(self, status: PropertyStatus) -> List[Property]:
        return await self.list_where(Property.status == status)

    async def count_by_status(self, status: PropertyStatus) -> int:
        return await self.count_where(Property.status == status)

    async def count_by_landlord_and_status(
        self, landlord_id: uuid.UUID, status: PropertyStatus
    ) -> int:
        return await self.count_where(
            Property.landlord_id == landlord_id, Property.status == status
        )

    async def count_all(self) -> int:
        return await self.count_where()

    async def find_by_attributes(
        self,
        *,
        city: Optional[str] = None,
        state: Optional[str] = None,
        property_type: Optional[str] = None,
        furnishing_status: Optional[str] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[int] = None,
        pets_allowed: Optional[bool] = None,
        smoking_allowed: Optional[bool] = None,
        lease_term_months: Optional[int] = None,
        status: Optional[PropertyStatus] = None,
    ) -> List[Property]:
        """Exact-match lookup; every argument left as ``None`` is ignored."""
        return await self.list_where(
            equals(func.lower(Property.city), city.lower() if city else None),
            equals(func.lower(Property.state), state.lower() if state else None),
            equals(Property.property_type, property_type.upper() if property_type else None),
            equals(
                Property.furnishing_status,
                furnishing_status.upper() if furnishing_status else None,
            ),
            equals(Property.bedrooms, bedrooms),
            equals(Property.bathrooms, bathrooms),
            equals(Property.pets_allowed, pets_allowed),
            equals(Property.smoking_allowed, smoking_allowed),
            equals(Property.lease_term_months, lease_term_months),
            equals(Property.status, status),
        )

    async def find_by_rent_range(
        self, min_rent: Optional[Decimal], max_rent: Optional[Decimal]
    ) -> List[Property]:
        return await self.list_where(between(Property.rent_amount, min_rent, max_rent))

    def search_clauses(
        self,
        *,
        city: Optional[str] = None,
        state: Optional[str] = None,
        min_rent: Optional[Decimal] = None,
        max_rent: Optional[Decimal] = None,
        min_bedrooms: Optional[int] = None,
        min_bathrooms: Optional[int] = None,
        pets_allowed: Optional[bool] = None,
        smoking_allowed: Optional[bool] = None,
        property_type: Optional[str] = None,
    ):
        return (
            Property.status == PropertyStatus.AVAILABLE,
            equals(func.lower(Property.city), city.lower() if city else None),
            equals(func.lower(Property.state), state.lower() if state else None),
            between(Property.rent_amount, min_rent, max_rent),
            at_least(Property.bedrooms, min_bedrooms),
            at_least(Property.bathrooms, min_bathrooms),
            equals(Property.pets_allowed, pets_allowed),
            equals(Property.smoking_allowed, smoking_allowed),
            equals(Property.property_type, property_type.upper() if property_type else None),
        )

    async def page_search(self, params: PageParams, **filters):
        return await self.page_where(params, *self.search_clauses(**filters))

    async def find_near(
        self, latitude: float, longitude: float, radius: float
    ) -> List[Property]:
        return await self.list_where(
            Property.status == PropertyStatus.AVAILABLE,
            within_radius(
                Property.latitude, Property.longitude, latitude, longitude, radius
            ),
        )

    async def page_featured(self, params: PageParams):
        return await self.page_where(params, Property.status == PropertyStatus.AVAILABLE)

    async def find_expiring_soon(self, days: int) -> List[Property]:
        cutoff: date = utcnow().date() + timedelta(days=days)
        return await self.list_where(
            Property.status == PropertyStatus.AVAILABLE,
            Property.available_date.is_not(None),
            Property.available_date <= cutoff,
            order_by=[Property.available_date.asc()],
        )

    async def find_by_amenities(self, amenities: Iterable[str]) -> List[Property]:
        return await self.list_where(any_in_json_list(Property.amenities, amenities))
