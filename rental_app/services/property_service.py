import logging
import uuid
from decimal import Decimal
from typing import Iterable, List, Optional

from core.check_permission import CheckRolePermission
from core.errors import NotFoundError, ValidationError
from core.filters import ensure_range
from core.mapper import ORMMapper
from core.paginate import PageParams, PaginatePage
from core.settings import settings
from models.enums import PropertyStatus, UserRole
from models.models import Property
from policy.status_policy import StatusPolicy
from repos.property_repo import PropertyRepo
from repos.user_repo import UserRepo
from schemas.schema import CountOut, PropertyOut

logger = logging.getLogger(__name__)

MANAGERS = (UserRole.LANDLORD, UserRole.ADMIN)
REQUIRED_FIELDS = (
    "title",
    "address",
    "city",
    "state",
    "zip_code",
    "rent_amount",
    "security_deposit",
    "bedrooms",
    "bathrooms",
    "amenities",
    "image_urls",
    "pets_allowed",
    "smoking_allowed",
)


class PropertyService:
    def __init__(self, db):
        self.repo: PropertyRepo = PropertyRepo(db)
        self.user_repo: UserRepo = UserRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def get_or_404(self, property_id: uuid.UUID) -> Property:
        prop = await self.repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        return prop

    async def check_owner(self, property_id: uuid.UUID, current_user) -> Property:
        prop = await self.get_or_404(property_id)
        await self.permission.check_owner_or_admin(current_user, prop.landlord_id)
        return prop

    async def create_property(self, data, current_user) -> PropertyOut:
        await self.permission.check_roles(current_user, MANAGERS)

        landlord_id = current_user.id
        if data.landlord_id and data.landlord_id != current_user.id:
            await self.permission.check_admin(current_user)
            if not await self.user_repo.get_by_id(data.landlord_id):
                raise ValidationError("Landlord does not exist")
            landlord_id = data.landlord_id

        fields = data.model_dump(exclude={"landlord_id"})
        prop = await self.repo.create(
            landlord_id=landlord_id, status=PropertyStatus.AVAILABLE, **fields
        )
        logger.info(f"Property {prop.id} created by {current_user.username}")
        return self.mapper.one(prop, PropertyOut)

    async def get_property(self, property_id: uuid.UUID) -> PropertyOut:
        return self.mapper.one(await self.get_or_404(property_id), PropertyOut)

    async def list_properties(self, params: PageParams):
        rows, total = await self.repo.page_where(params)
        return self.paginate.build(rows, total, params, PropertyOut)

    async def update_property(
        self, property_id: uuid.UUID, current_user, data
    ) -> PropertyOut:
        prop = await self.check_owner(property_id, current_user)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields provided for update.")

        self.mapper.apply(prop, update_data, required=REQUIRED_FIELDS)
        prop = await self.repo.save(prop)
        return self.mapper.one(prop, PropertyOut)

    async def update_status(
        self, property_id: uuid.UUID, status: PropertyStatus, current_user
    ) -> PropertyOut:
        prop = await self.check_owner(property_id, current_user)
        StatusPolicy.ensure(prop.status, status, entity="Property")
        previous = prop.status
        prop.status = status
        prop = await self.repo.save(prop)
        logger.info(f"Property {prop.id} status {previous.value} -> {status.value}")
        return self.mapper.one(prop, PropertyOut)

    async def delete_property(self, property_id: uuid.UUID, current_user) -> None:
        prop = await self.check_owner(property_id, current_user)
        await self.repo.delete(prop)
        logger.info(f"Property {property_id} deleted by {current_user.username}")

    async def get_by_landlord(self, landlord_id: uuid.UUID, params: PageParams):
        rows, total = await self.repo.page_by_landlord(landlord_id, params)
        return self.paginate.build(rows, total, params, PropertyOut)

    async def get_by_status(self, status: PropertyStatus) -> List[PropertyOut]:
        return self.mapper.many(await self.repo.find_by_status(status), PropertyOut)

    async def get_by_attributes(self, **filters) -> List[PropertyOut]:
        return self.mapper.many(
            await self.repo.find_by_attributes(**filters), PropertyOut
        )

    async def get_by_rent_range(
        self, min_rent: Optional[Decimal], max_rent: Optional[Decimal]
    ) -> List[PropertyOut]:
        ensure_range(min_rent, max_rent, field="rent")
        return self.mapper.many(
            await self.repo.find_by_rent_range(min_rent, max_rent), PropertyOut
        )

    async def search(self, params: PageParams, **filters):
        ensure_range(filters.get("min_rent"), filters.get("max_rent"), field="rent")
        rows, total = await self.repo.page_search(params, **filters)
        return self.paginate.build(rows, total, params, PropertyOut)

    async def get_near(
        self, latitude: float, longitude: float, radius: float
    ) -> List[PropertyOut]:
        if radius <= 0:
            raise ValidationError("Radius must be positive")
        return self.mapper.many(
            await self.repo.find_near(latitude, longitude, radius), PropertyOut
        )

    async def get_featured(self, params: PageParams):
        rows, total = await self.repo.page_featured(params)
        return self.paginate.build(rows, total, params, PropertyOut)

    async def get_expiring_soon(self, current_user) -> List[PropertyOut]:
        await self.permission.check_roles(current_user, MANAGERS)
        rows = await self.repo.find_expiring_soon(settings.PROPERTY_EXPIRING_DAYS)
        if current_user.role != UserRole.ADMIN:
            rows = [p for p in rows if p.landlord_id == current_user.id]
        return self.mapper.many(rows, PropertyOut)

    async def get_by_amenities(self, amenities: Iterable[str]) -> List[PropertyOut]:
        return self.mapper.many(await self.repo.find_by_amenities(amenities), PropertyOut)

    async def count_by_landlord(self, landlord_id: uuid.UUID) -> CountOut:
        return CountOut(count=await self.repo.count_by_landlord(landlord_id))

    async def count_by_status(self, status: PropertyStatus) -> CountOut:
        return CountOut(count=await self.repo.count_by_status(status))

    async def analytics(self, current_user) -> dict:
        await self.permission.check_admin(current_user)
        return {
            "total": await self.repo.count_all(),
            "available": await self.repo.count_by_status(PropertyStatus.AVAILABLE),
            "rented": await self.repo.count_by_status(PropertyStatus.RENTED),
        }
