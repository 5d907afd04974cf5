import logging
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from core.check_permission import CheckRolePermission
from core.errors import NotFoundError, ValidationError
from core.filters import ensure_range
from core.mapper import ORMMapper
from core.paginate import PageParams, PaginatePage
from core.settings import settings
from models.enums import ListingStatus, ListingType, UserRole
from models.models import Listing
from models.utils import naive_utc, utcnow
from policy.status_policy import StatusPolicy
from repos.listing_repo import ListingRepo
from repos.property_repo import PropertyRepo
from schemas.schema import CountOut, ListingOut

logger = logging.getLogger(__name__)

MANAGERS = (UserRole.LANDLORD, UserRole.ADMIN)
REQUIRED_FIELDS = ("title", "rent_amount", "security_deposit", "type", "is_featured")


class ListingService:
    def __init__(self, db):
        self.repo: ListingRepo = ListingRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def get_or_404(self, listing_id: uuid.UUID) -> Listing:
        listing = await self.repo.get_by_id(listing_id)
        if not listing:
            raise NotFoundError("Listing not found")
        return listing

    @staticmethod
    def check_featured_until(featured_until: Optional[datetime]) -> None:
        if featured_until is not None and featured_until <= utcnow():
            raise ValidationError("featured_until must be in the future")

    async def check_owner(self, listing_id: uuid.UUID, current_user) -> Listing:
        listing = await self.get_or_404(listing_id)
        await self.permission.check_owner_or_admin(current_user, listing.landlord_id)
        return listing

    async def create_listing(self, data, current_user) -> ListingOut:
        await self.permission.check_roles(current_user, MANAGERS)
        prop = await self.property_repo.get_by_id(data.property_id)
        if not prop:
            raise ValidationError("Property does not exist")
        await self.permission.check_owner_or_admin(current_user, prop.landlord_id)

        fields = data.model_dump()
        # listing terms default to the property's
        fields["rent_amount"] = fields["rent_amount"] or prop.rent_amount
        fields["security_deposit"] = fields["security_deposit"] or prop.security_deposit
        fields["available_date"] = fields["available_date"] or prop.available_date
        fields["lease_term_months"] = (
            fields["lease_term_months"] or prop.lease_term_months
        )
        self.check_featured_until(fields["featured_until"])
        if not fields["is_featured"]:
            fields["featured_until"] = None

        listing = await self.repo.create(
            landlord_id=prop.landlord_id, status=ListingStatus.ACTIVE, **fields
        )
        logger.info(f"Listing {listing.id} created for property {prop.id}")
        return self.mapper.one(listing, ListingOut)

    async def get_listing(self, listing_id: uuid.UUID) -> ListingOut:
        return self.mapper.one(await self.get_or_404(listing_id), ListingOut)

    async def list_listings(self, params: PageParams):
        rows, total = await self.repo.page_where(params)
        return self.paginate.build(rows, total, params, ListingOut)

    async def update_listing(
        self, listing_id: uuid.UUID, current_user, data
    ) -> ListingOut:
        listing = await self.check_owner(listing_id, current_user)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields provided for update.")

        self.check_featured_until(update_data.get("featured_until"))
        self.mapper.apply(listing, update_data, required=REQUIRED_FIELDS)
        if not listing.is_featured:
            listing.featured_until = None
        listing = await self.repo.save(listing)
        return self.mapper.one(listing, ListingOut)

    async def update_status(
        self, listing_id: uuid.UUID, status: ListingStatus, current_user
    ) -> ListingOut:
        listing = await self.check_owner(listing_id, current_user)
        StatusPolicy.ensure(listing.status, status, entity="Listing")
        previous = listing.status
        listing.status = status
        listing = await self.repo.save(listing)
        logger.info(f"Listing {listing.id} status {previous.value} -> {status.value}")
        return self.mapper.one(listing, ListingOut)

    async def set_featured(
        self,
        listing_id: uuid.UUID,
        is_featured: bool,
        featured_until: Optional[datetime],
        current_user,
    ) -> ListingOut:
        listing = await self.check_owner(listing_id, current_user)
        featured_until = naive_utc(featured_until)
        self.check_featured_until(featured_until)
        listing.is_featured = is_featured
        listing.featured_until = featured_until if is_featured else None
        listing = await self.repo.save(listing)
        return self.mapper.one(listing, ListingOut)

    async def increment_view_count(self, listing_id: uuid.UUID) -> ListingOut:
        listing = await self.get_or_404(listing_id)
        await self.repo.increment_view_count(listing_id)
        listing = await self.repo.refresh(listing)
        return self.mapper.one(listing, ListingOut)

    async def delete_listing(self, listing_id: uuid.UUID, current_user) -> None:
        listing = await self.check_owner(listing_id, current_user)
        await self.repo.delete(listing)
        logger.info(f"Listing {listing_id} deleted by {current_user.username}")

    async def get_by_landlord(self, landlord_id: uuid.UUID, params: PageParams):
        rows, total = await self.repo.page_by_landlord(landlord_id, params)
        return self.paginate.build(rows, total, params, ListingOut)

    async def get_by_property(self, property_id: uuid.UUID) -> List[ListingOut]:
        return self.mapper.many(await self.repo.find_by_property(property_id), ListingOut)

    async def get_by_status(self, status: ListingStatus) -> List[ListingOut]:
        return self.mapper.many(await self.repo.find_by_status(status), ListingOut)

    async def get_by_type(self, listing_type: ListingType) -> List[ListingOut]:
        return self.mapper.many(await self.repo.find_by_type(listing_type), ListingOut)

    async def get_active(self, params: PageParams):
        rows, total = await self.repo.page_active(params)
        return self.paginate.build(rows, total, params, ListingOut)

    async def get_featured(self, params: PageParams):
        rows, total = await self.repo.page_featured(params)
        return self.paginate.build(rows, total, params, ListingOut)

    async def get_popular(self, params: PageParams):
        rows, total = await self.repo.page_popular(params)
        return self.paginate.build(rows, total, params, ListingOut)

    async def get_by_rent_range(
        self, min_rent: Optional[Decimal], max_rent: Optional[Decimal]
    ) -> List[ListingOut]:
        ensure_range(min_rent, max_rent, field="rent")
        return self.mapper.many(
            await self.repo.find_by_rent_range(min_rent, max_rent), ListingOut
        )

    async def get_available_after(self, available: date) -> List[ListingOut]:
        return self.mapper.many(
            await self.repo.find_available_after(available), ListingOut
        )

    async def get_by_lease_term(self, lease_term_months: int) -> List[ListingOut]:
        return self.mapper.many(
            await self.repo.find_by_lease_term(lease_term_months), ListingOut
        )

    async def get_expiring_soon(self) -> List[ListingOut]:
        cutoff = utcnow() + timedelta(days=settings.LISTING_EXPIRING_DAYS)
        return self.mapper.many(await self.repo.find_expiring_before(cutoff), ListingOut)

    async def search(self, params: PageParams, **filters):
        ensure_range(filters.get("min_rent"), filters.get("max_rent"), field="rent")
        rows, total = await self.repo.page_search(params, **filters)
        return self.paginate.build(rows, total, params, ListingOut)

    async def get_near(
        self, latitude: float, longitude: float, radius: float
    ) -> List[ListingOut]:
        if radius <= 0:
            raise ValidationError("Radius must be positive")
        return self.mapper.many(
            await self.repo.find_near(latitude, longitude, radius), ListingOut
        )

    async def get_by_amenities(self, amenities: Iterable[str]) -> List[ListingOut]:
        return self.mapper.many(await self.repo.find_by_amenities(amenities), ListingOut)

    async def count_active(self) -> CountOut:
        return CountOut(count=await self.repo.count_active())

    async def count_by_status(self, status: ListingStatus) -> CountOut:
        return CountOut(count=await self.repo.count_by_status(status))

    async def count_featured(self) -> CountOut:
        return CountOut(count=await self.repo.count_featured())

    async def count_active_by_city(self, city: str) -> CountOut:
        return CountOut(count=await self.repo.count_active_by_city(city))
