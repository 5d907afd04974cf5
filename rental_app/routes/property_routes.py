import uuid
from decimal import Decimal
from typing import List, Optional

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.paginate import PageParams, page_params
from core.safe_handler import safe_handler
from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from models.enums import PropertyStatus
from models.models import User
from schemas.schema import PropertyCreate, PropertyStatusUpdate, PropertyUpdate
from services.property_service import PropertyService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["Property Management"])


@cbv(router=router)
class PropertyRoutes:
    @router.post("/properties", status_code=201)
    @safe_handler
    async def create(
        self,
        data: PropertyCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).create_property(
            data=data, current_user=current_user
        )

    @router.get("/properties")
    @safe_handler
    async def get_all(
        self,
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await PropertyService(db).list_properties(params)

    @router.get("/properties/search")
    @safe_handler
    async def search(
        self,
        city: Optional[str] = None,
        state: Optional[str] = None,
        min_rent: Optional[Decimal] = Query(None, alias="minRent"),
        max_rent: Optional[Decimal] = Query(None, alias="maxRent"),
        min_bedrooms: Optional[int] = Query(None, alias="minBedrooms"),
        min_bathrooms: Optional[int] = Query(None, alias="minBathrooms"),
        pets_allowed: Optional[bool] = Query(None, alias="petsAllowed"),
        smoking_allowed: Optional[bool] = Query(None, alias="smokingAllowed"),
        property_type: Optional[str] = Query(None, alias="propertyType"),
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await PropertyService(db).search(
            params,
            city=city,
            state=state,
            min_rent=min_rent,
            max_rent=max_rent,
            min_bedrooms=min_bedrooms,
            min_bathrooms=min_bathrooms,
            pets_allowed=pets_allowed,
            smoking_allowed=smoking_allowed,
            property_type=property_type,
        )

    @router.get("/properties/filter")
    @safe_handler
    async def filter_by_attributes(
        self,
        city: Optional[str] = None,
        state: Optional[str] = None,
        property_type: Optional[str] = Query(None, alias="propertyType"),
        furnishing_status: Optional[str] = Query(None, alias="furnishingStatus"),
        bedrooms: Optional[int] = None,
        bathrooms: Optional[int] = None,
        pets_allowed: Optional[bool] = Query(None, alias="petsAllowed"),
        smoking_allowed: Optional[bool] = Query(None, alias="smokingAllowed"),
        lease_term_months: Optional[int] = Query(None, alias="leaseTermMonths"),
        status: Optional[PropertyStatus] = None,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).get_by_attributes(
            city=city,
            state=state,
            property_type=property_type,
            furnishing_status=furnishing_status,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            pets_allowed=pets_allowed,
            smoking_allowed=smoking_allowed,
            lease_term_months=lease_term_months,
            status=status,
        )

    @router.get("/properties/rent-range")
    @safe_handler
    async def by_rent_range(
        self,
        min_rent: Optional[Decimal] = Query(None, alias="minRent"),
        max_rent: Optional[Decimal] = Query(None, alias="maxRent"),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).get_by_rent_range(min_rent, max_rent)

    @router.get("/properties/near")
    @safe_handler
    async def near(
        self,
        latitude: float = Query(..., ge=-90, le=90),
        longitude: float = Query(..., ge=-180, le=180),
        radius: float = Query(..., gt=0),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).get_near(latitude, longitude, radius)

    @router.get("/properties/featured")
    @safe_handler
    async def featured(
        self,
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await PropertyService(db).get_featured(params)

    @router.get("/properties/amenities")
    @safe_handler
    async def by_amenities(
        self,
        amenities: List[str] = Query(...),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).get_by_amenities(amenities)

    @router.get("/properties/expiring-soon")
    @safe_handler
    async def expiring_soon(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).get_expiring_soon(current_user)

    @router.get("/properties/analytics")
    @safe_handler
    async def analytics(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).analytics(current_user)

    @router.get("/properties/status/{status}")
    @safe_handler
    async def by_status(
        self,
        status: PropertyStatus,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).get_by_status(status)

    @router.get("/properties/status/{status}/count")
    @safe_handler
    async def count_by_status(
        self,
        status: PropertyStatus,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).count_by_status(status)

    @router.get("/properties/landlord/{landlord_id}")
    @safe_handler
    async def by_landlord(
        self,
        landlord_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await PropertyService(db).get_by_landlord(landlord_id, params)

    @router.get("/properties/landlord/{landlord_id}/count")
    @safe_handler
    async def count_by_landlord(
        self,
        landlord_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).count_by_landlord(landlord_id)

    @router.get("/properties/{property_id}")
    @safe_handler
    async def get_one(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).get_property(property_id)

    @router.put("/properties/{property_id}")
    @safe_handler
    async def update(
        self,
        property_id: uuid.UUID,
        data: PropertyUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).update_property(
            property_id=property_id, current_user=current_user, data=data
        )

    @router.patch("/properties/{property_id}/status")
    @safe_handler
    async def update_status(
        self,
        property_id: uuid.UUID,
        data: PropertyStatusUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PropertyService(db).update_status(
            property_id, data.status, current_user
        )

    @router.delete("/properties/{property_id}", status_code=204)
    @safe_handler
    async def delete_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        await PropertyService(db).delete_property(
            property_id=property_id, current_user=current_user
        )
