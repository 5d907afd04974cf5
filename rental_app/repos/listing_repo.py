import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import func, select, update

from core.filters import (
    any_in_json_list,
    at_least,
    between,
    equals,
    within_radius,
)
from core.paginate import PageParams
from models.enums import ListingStatus, ListingType
from models.models import Listing, Property

from .base_repo import BaseRepo

ACTIVE = Listing.status == ListingStatus.ACTIVE


class ListingRepo(BaseRepo[Listing]):
    model = Listing

    def with_property(self):
        return select(Listing).join(Property, Listing.property_id == Property.id)

    async def list_joined(self, *clauses, order_by=None) -> List[Listing]:
        stmt = self.with_property().where(*(c for c in clauses if c is not None))
        stmt = stmt.order_by(*(order_by or [Listing.created_at.desc()]))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **fields) -> Listing:
        return await self.save(Listing(**fields))

    async def page_by_landlord(self, landlord_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Listing.landlord_id == landlord_id)

    async def count_by_landlord(self, landlord_id: uuid.UUID) -> int:
        return await self.count_where(Listing.landlord_id == landlord_id)

    async def count_active_by_landlord(self, landlord_id: uuid.UUID) -> int:
        return await self.count_where(Listing.landlord_id == landlord_id, ACTIVE)

    async def find_by_property(self, property_id: uuid.UUID) -> List[Listing]:
        return await self.list_where(Listing.property_id == property_id)

    async def find_by_status(self, status: ListingStatus) -> List[Listing]:
        return await self.list_where(Listing.status == status)

    async def count_by_status(self, status: ListingStatus) -> int:
        return await self.count_where(Listing.status == status)

    async def find_by_type(self, listing_type: ListingType) -> List[Listing]:
        return await self.list_where(Listing.type == listing_type)

    async def page_active(self, params: PageParams):
        return await self.page_where(params, ACTIVE)

    async def count_active(self) -> int:
        return await self.count_where(ACTIVE)

    async def page_featured(self, params: PageParams):
        return await self.page_where(params, Listing.is_featured.is_(True), ACTIVE)

    async def count_featured(self) -> int:
        return await self.count_where(Listing.is_featured.is_(True), ACTIVE)

    async def find_by_rent_range(
        self, min_rent: Optional[Decimal], max_rent: Optional[Decimal]
    ) -> List[Listing]:
        return await self.list_where(between(Listing.rent_amount, min_rent, max_rent))

    async def find_available_after(self, available: date) -> List[Listing]:
        return await self.list_where(Listing.available_date >= available, ACTIVE)

    async def find_by_lease_term(self, lease_term_months: int) -> List[Listing]:
        return await self.list_where(Listing.lease_term_months == lease_term_months)

    async def find_expiring_before(self, cutoff: datetime) -> List[Listing]:
        return await self.list_where(
            ACTIVE,
            Listing.expires_at.is_not(None),
            Listing.expires_at <= cutoff,
            order_by=[Listing.expires_at.asc()],
        )

    async def page_popular(self, params: PageParams):
        stmt = select(Listing).where(ACTIVE)
        total = await self.count_where(ACTIVE)
        result = await self.db.execute(
            stmt.order_by(Listing.view_count.desc(), Listing.created_at.desc())
            .offset(params.page * params.size)
            .limit(params.size)
        )
        return list(result.scalars().all()), total

    async def count_all(self) -> int:
        return await self.count_where()

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
        furnishing_status: Optional[str] = None,
        listing_type: Optional[ListingType] = None,
    ):
        """Filters over the listing and its property; rent is the listing's own rent."""
        return (
            ACTIVE,
            equals(func.lower(Property.city), city.lower() if city else None),
            equals(func.lower(Property.state), state.lower() if state else None),
            between(Listing.rent_amount, min_rent, max_rent),
            at_least(Property.bedrooms, min_bedrooms),
            at_least(Property.bathrooms, min_bathrooms),
            equals(Property.pets_allowed, pets_allowed),
            equals(Property.smoking_allowed, smoking_allowed),
            equals(Property.property_type, property_type.upper() if property_type else None),
            equals(
                Property.furnishing_status,
                furnishing_status.upper() if furnishing_status else None,
            ),
            equals(Listing.type, listing_type),
        )

    async def page_search(self, params: PageParams, **filters):
        return await self.page_where(
            params, *self.search_clauses(**filters), stmt=self.with_property()
        )

    async def count_active_by_city(self, city: str) -> int:
        return await self.count_where(
            ACTIVE,
            func.lower(Property.city) == city.lower(),
            stmt=self.with_property(),
        )

    async def find_near(
        self, latitude: float, longitude: float, radius: float
    ) -> List[Listing]:
        return await self.list_joined(
            ACTIVE,
            within_radius(
                Property.latitude, Property.longitude, latitude, longitude, radius
            ),
        )

    async def find_by_amenities(self, amenities: Iterable[str]) -> List[Listing]:
        return await self.list_joined(
            ACTIVE, any_in_json_list(Property.amenities, amenities)
        )

    async def increment_view_count(self, listing_id: uuid.UUID) -> None:
        # atomic increment in the database
        await self.db.execute(
            update(Listing)
            .where(Listing.id == listing_id)
            .values(view_count=Listing.view_count + 1)
        )
        await self.db.commit()
