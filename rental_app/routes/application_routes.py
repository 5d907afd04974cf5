import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.paginate import PageParams, page_params
from core.safe_handler import safe_handler
from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from models.enums import ApplicationStatus
from models.models import User
from schemas.schema import (
    ApplicationCreate,
    ApplicationFeeUpdate,
    ApplicationReview,
    ApplicationStatusUpdate,
    ApplicationUpdate,
)
from services.application_service import ApplicationService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["Rental Applications"])


@cbv(router=router)
class ApplicationRoutes:
    @router.post("/applications", status_code=201)
    @safe_handler
    async def create(
        self,
        data: ApplicationCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).create_application(
            data=data, current_user=current_user
        )

    @router.get("/applications")
    @safe_handler
    async def get_all(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await ApplicationService(db).list_applications(params, current_user)

    @router.get("/applications/needing-review")
    @safe_handler
    async def needing_review(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_needing_review(current_user)

    @router.get("/applications/overdue")
    @safe_handler
    async def overdue(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_overdue(current_user)

    @router.get("/applications/analytics")
    @safe_handler
    async def analytics(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).analytics(current_user)

    @router.get("/applications/credit-score-range")
    @safe_handler
    async def by_credit_score(
        self,
        min_score: Optional[int] = Query(None, alias="minScore"),
        max_score: Optional[int] = Query(None, alias="maxScore"),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_credit_score_range(
            min_score, max_score, current_user
        )

    @router.get("/applications/income-range")
    @safe_handler
    async def by_income(
        self,
        min_income: Optional[Decimal] = Query(None, alias="minIncome"),
        max_income: Optional[Decimal] = Query(None, alias="maxIncome"),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_income_range(
            min_income, max_income, current_user
        )

    @router.get("/applications/created-between")
    @safe_handler
    async def created_between(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_created_between(
            start, end, current_user
        )

    @router.get("/applications/pending")
    @safe_handler
    async def pending(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_pending(current_user)

    @router.get("/applications/needing-review/landlord/{landlord_id}")
    @safe_handler
    async def needing_review_by_landlord(
        self,
        landlord_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_needing_review_by_landlord(
            landlord_id, current_user
        )

    @router.get("/applications/move-in-date")
    @safe_handler
    async def by_move_in_date(
        self,
        move_in_date: date = Query(..., alias="moveInDate"),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_move_in_date(move_in_date, current_user)

    @router.get("/applications/lease-term/{lease_term}")
    @safe_handler
    async def by_lease_term(
        self,
        lease_term: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_lease_term(lease_term, current_user)

    @router.get("/applications/with-pets")
    @safe_handler
    async def with_pets(
        self,
        min_pets: int = Query(1, alias="minPetsCount", ge=1),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_with_pets(min_pets, current_user)

    @router.get("/applications/occupants/{occupants}")
    @safe_handler
    async def by_occupants(
        self,
        occupants: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_occupants(occupants, current_user)

    @router.get("/applications/employment-status/{employment_status}")
    @safe_handler
    async def by_employment_status(
        self,
        employment_status: str,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_employment_status(
            employment_status, current_user
        )

    @router.get("/applications/employer/{employer}")
    @safe_handler
    async def by_employer(
        self,
        employer: str,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_employer(employer, current_user)

    @router.get("/applications/fee-status/{fee_paid}")
    @safe_handler
    async def by_fee_status(
        self,
        fee_paid: bool,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_fee_status(fee_paid, current_user)

    @router.get("/applications/review-date-range")
    @safe_handler
    async def reviewed_between(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_reviewed_between(start, end, current_user)

    @router.get("/applications/reviewer/{reviewer_id}")
    @safe_handler
    async def by_reviewer(
        self,
        reviewer_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_reviewer(reviewer_id, current_user)

    @router.get("/applications/status/{status}")
    @safe_handler
    async def by_status(
        self,
        status: ApplicationStatus,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await ApplicationService(db).get_by_status(status, params, current_user)

    @router.get("/applications/status/{status}/count")
    @safe_handler
    async def count_by_status(
        self,
        status: ApplicationStatus,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).count_by_status(status, current_user)

    @router.get("/applications/tenant/{tenant_id}")
    @safe_handler
    async def by_tenant(
        self,
        tenant_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await ApplicationService(db).get_by_tenant(
            tenant_id, params, current_user
        )

    @router.get("/applications/landlord/{landlord_id}")
    @safe_handler
    async def by_landlord(
        self,
        landlord_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await ApplicationService(db).get_by_landlord(
            landlord_id, params, current_user
        )

    @router.get("/applications/property/{property_id}")
    @safe_handler
    async def by_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_property(property_id, current_user)

    @router.get("/applications/listing/{listing_id}")
    @safe_handler
    async def by_listing(
        self,
        listing_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_by_listing(listing_id, current_user)

    @router.get("/applications/{application_id}")
    @safe_handler
    async def get_one(
        self,
        application_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).get_application(
            application_id, current_user
        )

    @router.get("/applications/{application_id}/validate")
    @safe_handler
    async def validate(
        self,
        application_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).validate_application(
            application_id, current_user
        )

    @router.put("/applications/{application_id}")
    @safe_handler
    async def update(
        self,
        application_id: uuid.UUID,
        data: ApplicationUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).update_application(
            application_id=application_id, current_user=current_user, data=data
        )

    @router.patch("/applications/{application_id}/status")
    @safe_handler
    async def update_status(
        self,
        application_id: uuid.UUID,
        data: ApplicationStatusUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).update_status(
            application_id, data.status, current_user
        )

    @router.patch("/applications/{application_id}/review")
    @safe_handler
    async def review(
        self,
        application_id: uuid.UUID,
        data: ApplicationReview,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).review_application(
            application_id, data, current_user
        )

    @router.patch("/applications/{application_id}/fee-paid")
    @safe_handler
    async def fee_paid(
        self,
        application_id: uuid.UUID,
        data: ApplicationFeeUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ApplicationService(db).update_fee_status(
            application_id, data.fee_paid, current_user
        )

    @router.delete("/applications/{application_id}", status_code=204)
    @safe_handler
    async def delete_application(
        self,
        application_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        await ApplicationService(db).delete_application(application_id, current_user)
