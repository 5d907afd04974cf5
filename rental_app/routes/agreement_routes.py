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
from models.enums import AgreementStatus
from models.models import User
from schemas.schema import (
    AgreementCreate,
    AgreementSign,
    AgreementStatusUpdate,
    AgreementTerminate,
    AgreementUpdate,
)
from services.agreement_service import AgreementService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["Rental Agreements"])


@cbv(router=router)
class AgreementRoutes:
    @router.post("/agreements", status_code=201)
    @safe_handler
    async def create(
        self,
        data: AgreementCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).create_agreement(
            data=data, current_user=current_user
        )

    @router.get("/agreements")
    @safe_handler
    async def get_all(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await AgreementService(db).list_agreements(params, current_user)

    @router.get("/agreements/pending-signatures")
    @safe_handler
    async def pending_signatures(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).get_pending_signatures(current_user)

    @router.get("/agreements/expiring")
    @safe_handler
    async def expiring(
        self,
        days: int = Query(30, ge=0),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).get_expiring(days, current_user)

    @router.get("/agreements/renewal")
    @safe_handler
    async def needing_renewal(
        self,
        start: date,
        end: date,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).get_needing_renewal(start, end, current_user)

    @router.get("/agreements/active")
    @safe_handler
    async def active(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).get_active(current_user)

    @router.get("/agreements/overdue-signatures")
    @safe_handler
    async def overdue_signatures(
        self,
        days: int = Query(7, ge=0),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).get_overdue_signatures(days, current_user)

    @router.get("/agreements/search")
    @safe_handler
    async def search(
        self,
        start_from: Optional[date] = Query(None, alias="startFrom"),
        start_to: Optional[date] = Query(None, alias="startTo"),
        end_from: Optional[date] = Query(None, alias="endFrom"),
        end_to: Optional[date] = Query(None, alias="endTo"),
        lease_term_months: Optional[int] = Query(None, alias="leaseTerm"),
        payment_due_day: Optional[int] = Query(None, alias="paymentDueDay"),
        min_deposit: Optional[Decimal] = Query(None, alias="minDeposit"),
        max_deposit: Optional[Decimal] = Query(None, alias="maxDeposit"),
        signed_by_tenant: Optional[bool] = Query(None, alias="signedByTenant"),
        signed_by_landlord: Optional[bool] = Query(None, alias="signedByLandlord"),
        signed_from: Optional[datetime] = Query(None, alias="signedFrom"),
        signed_to: Optional[datetime] = Query(None, alias="signedTo"),
        created_from: Optional[datetime] = Query(None, alias="createdFrom"),
        created_to: Optional[datetime] = Query(None, alias="createdTo"),
        utilities_included: Optional[bool] = Query(None, alias="utilitiesIncluded"),
        pet_policy: Optional[str] = Query(None, alias="petPolicy"),
        smoking_policy: Optional[str] = Query(None, alias="smokingPolicy"),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await AgreementService(db).search(
            params,
            current_user,
            start_from=start_from,
            start_to=start_to,
            end_from=end_from,
            end_to=end_to,
            lease_term_months=lease_term_months,
            payment_due_day=payment_due_day,
            min_deposit=min_deposit,
            max_deposit=max_deposit,
            signed_by_tenant=signed_by_tenant,
            signed_by_landlord=signed_by_landlord,
            signed_from=signed_from,
            signed_to=signed_to,
            created_from=created_from,
            created_to=created_to,
            utilities_included=utilities_included,
            pet_policy=pet_policy,
            smoking_policy=smoking_policy,
        )

    @router.get("/agreements/rent-range")
    @safe_handler
    async def by_rent_range(
        self,
        min_rent: Optional[Decimal] = Query(None, alias="minRent"),
        max_rent: Optional[Decimal] = Query(None, alias="maxRent"),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).get_by_rent_range(
            min_rent, max_rent, current_user
        )

    @router.get("/agreements/number/{agreement_number}")
    @safe_handler
    async def by_number(
        self,
        agreement_number: str,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).get_by_number(agreement_number, current_user)

    @router.get("/agreements/status/{status}")
    @safe_handler
    async def by_status(
        self,
        status: AgreementStatus,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await AgreementService(db).get_by_status(status, params, current_user)

    @router.get("/agreements/status/{status}/count")
    @safe_handler
    async def count_by_status(
        self,
        status: AgreementStatus,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).count_by_status(status, current_user)

    @router.get("/agreements/tenant/{tenant_id}")
    @safe_handler
    async def by_tenant(
        self,
        tenant_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await AgreementService(db).get_by_tenant(tenant_id, params, current_user)

    @router.get("/agreements/landlord/{landlord_id}")
    @safe_handler
    async def by_landlord(
        self,
        landlord_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await AgreementService(db).get_by_landlord(
            landlord_id, params, current_user
        )

    @router.get("/agreements/property/{property_id}")
    @safe_handler
    async def by_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await AgreementService(db).get_by_property(
            property_id, params, current_user
        )

    @router.get("/agreements/property/{property_id}/count")
    @safe_handler
    async def count_by_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).count_by_property(property_id, current_user)

    @router.get("/agreements/{agreement_id}")
    @safe_handler
    async def get_one(
        self,
        agreement_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).get_agreement(agreement_id, current_user)

    @router.put("/agreements/{agreement_id}")
    @safe_handler
    async def update(
        self,
        agreement_id: uuid.UUID,
        data: AgreementUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).update_agreement(
            agreement_id=agreement_id, current_user=current_user, data=data
        )

    @router.patch("/agreements/{agreement_id}/status")
    @safe_handler
    async def update_status(
        self,
        agreement_id: uuid.UUID,
        data: AgreementStatusUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).update_status(
            agreement_id, data.status, current_user
        )

    @router.patch("/agreements/{agreement_id}/sign")
    @safe_handler
    async def sign(
        self,
        agreement_id: uuid.UUID,
        data: AgreementSign,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).sign(
            agreement_id, data.signature, current_user
        )

    @router.patch("/agreements/{agreement_id}/terminate")
    @safe_handler
    async def terminate(
        self,
        agreement_id: uuid.UUID,
        data: AgreementTerminate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AgreementService(db).terminate(
            agreement_id, data.reason, data.termination_date, current_user
        )

    @router.delete("/agreements/{agreement_id}", status_code=204)
    @safe_handler
    async def delete_agreement(
        self,
        agreement_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        await AgreementService(db).delete_agreement(agreement_id, current_user)
