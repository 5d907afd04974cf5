import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.paginate import PageParams, page_params
from core.safe_handler import safe_handler
from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from models.enums import ListingStatus, ListingType
from models.models import User
from schemas.schema import (
    ListingCreate,
    ListingFeatureUpdate,
    ListingStatusUpdate,
    ListingUpdate,
)
from services.listing_service import ListingService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["Listings"])


@cbv(router=router)
class ListingRoutes:
    @router.post("/listings", status_code=201)
    @safe_handler
    async def create(
        self,
        data: ListingCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ListingService(db).create_listing(
            data=data, current_user=current_user
        )

    @router.get("/listings")
    @safe_handler
    async def get_all(
        self,
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await ListingService(db).list_listings(params)

    @router.get("/listings/search")
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
        furnishing_status: Optional[str] = Query(None, alias="furnishingStatus"),
        listing_type: Optional[ListingType] = Query(None, alias="type"),
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await ListingService(db).search(
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
            furnishing_status=furnishing_status,
            listing_type=listing_type,
        )

    @router.get("/listings/active")
    @safe_handler
    async def active(
        self,
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await ListingService(db).get_active(params)

    @router.get("/listings/active/count")
    @safe_handler
    async def count_active(self, db: AsyncSession = Depends(get_db_async)):
        return await ListingService(db).count_active()

    @router.get("/listings/featured")
    @safe_handler
    async def featured(
        self,
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await ListingService(db).get_featured(params)

    @router.get("/listings/featured/count")
    @safe_handler
    async def count_featured(self, db: AsyncSession = Depends(get_db_async)):
        return await ListingService(db).count_featured()

    @router.get("/listings/popular")
    @safe_handler
    async def popular(
        self,
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await ListingService(db).get_popular(params)

    @router.get("/listings/rent-range")
    @safe_handler
    async def by_rent_range(
        self,
        min_rent: Optional[Decimal] = Query(None, alias="minRent"),
        max_rent: Optional[Decimal] = Query(None, alias="maxRent"),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_by_rent_range(min_rent, max_rent)

    @router.get("/listings/available-after")
    @safe_handler
    async def available_after(
        self,
        available: date = Query(..., alias="date"),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_available_after(available)

    @router.get("/listings/lease-term/{lease_term_months}")
    @safe_handler
    async def by_lease_term(
        self,
        lease_term_months: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_by_lease_term(lease_term_months)

    @router.get("/listings/expiring-soon")
    @safe_handler
    async def expiring_soon(self, db: AsyncSession = Depends(get_db_async)):
        return await ListingService(db).get_expiring_soon()

    @router.get("/listings/near")
    @safe_handler
    async def near(
        self,
        latitude: float = Query(..., ge=-90, le=90),
        longitude: float = Query(..., ge=-180, le=180),
        radius: float = Query(..., gt=0),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_near(latitude, longitude, radius)

    @router.get("/listings/amenities")
    @safe_handler
    async def by_amenities(
        self,
        amenities: List[str] = Query(...),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_by_amenities(amenities)

    @router.get("/listings/city/{city}/count")
    @safe_handler
    async def count_by_city(self, city: str, db: AsyncSession = Depends(get_db_async)):
        return await ListingService(db).count_active_by_city(city)

    @router.get("/listings/status/{status}")
    @safe_handler
    async def by_status(
        self,
        status: ListingStatus,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_by_status(status)

    @router.get("/listings/status/{status}/count")
    @safe_handler
    async def count_by_status(
        self,
        status: ListingStatus,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).count_by_status(status)

    @router.get("/listings/type/{listing_type}")
    @safe_handler
    async def by_type(
        self,
        listing_type: ListingType,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_by_type(listing_type)

    @router.get("/listings/landlord/{landlord_id}")
    @safe_handler
    async def by_landlord(
        self,
        landlord_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        params: PageParams = Depends(page_params),
    ):
        return await ListingService(db).get_by_landlord(landlord_id, params)

    @router.get("/listings/property/{property_id}")
    @safe_handler
    async def by_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_by_property(property_id)

    @router.get("/listings/{listing_id}")
    @safe_handler
    async def get_one(
        self,
        listing_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).get_listing(listing_id)

    @router.post("/listings/{listing_id}/view")
    @safe_handler
    async def record_view(
        self,
        listing_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ListingService(db).increment_view_count(listing_id)

    @router.put("/listings/{listing_id}")
    @safe_handler
    async def update(
        self,
        listing_id: uuid.UUID,
        data: ListingUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ListingService(db).update_listing(
            listing_id=listing_id, current_user=current_user, data=data
        )

    @router.patch("/listings/{listing_id}/status")
    @safe_handler
    async def update_status(
        self,
        listing_id: uuid.UUID,
        data: ListingStatusUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ListingService(db).update_status(
            listing_id, data.status, current_user
        )

    @router.patch("/listings/{listing_id}/featured")
    @safe_handler
    async def set_featured(
        self,
        listing_id: uuid.UUID,
        data: ListingFeatureUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ListingService(db).set_featured(
            listing_id, data.is_featured, data.featured_until, current_user
        )

    @router.delete("/listings/{listing_id}", status_code=204)
    @safe_handler
    async def delete_listing(
        self,
        listing_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        await ListingService(db).delete_listing(
            listing_id=listing_id, current_user=current_user
        )
