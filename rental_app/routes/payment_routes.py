import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.paginate import PageParams, page_params
from core.safe_handler import safe_handler
from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from models.enums import PaymentMethod, PaymentStatus, PaymentType
from models.models import User
from schemas.schema import (
    PaymentCreate,
    PaymentFailure,
    PaymentStatusUpdate,
    PaymentUpdate,
)
from services.payment_service import PaymentService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["Payments"])


@cbv(router=router)
class PaymentRoutes:
    @router.post("/payments", status_code=201)
    @safe_handler
    async def create(
        self,
        data: PaymentCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).create_payment(
            data=data, current_user=current_user
        )

    @router.get("/payments")
    @safe_handler
    async def get_all(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await PaymentService(db).list_payments(params, current_user)

    @router.get("/payments/overdue")
    @safe_handler
    async def overdue(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_overdue(current_user)

    @router.get("/payments/due")
    @safe_handler
    async def due_between(
        self,
        start: datetime,
        end: datetime,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_due_between(start, end, current_user)

    @router.get("/payments/retry-scheduled")
    @safe_handler
    async def retry_scheduled(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_scheduled_for_retry(current_user)

    @router.get("/payments/total")
    @safe_handler
    async def total(
        self,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        property_id: Optional[uuid.UUID] = Query(None, alias="propertyId"),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).total_paid(current_user, status, property_id)

    @router.get("/payments/search")
    @safe_handler
    async def search(
        self,
        method: Optional[PaymentMethod] = None,
        min_total: Optional[Decimal] = Query(None, alias="minTotal"),
        max_total: Optional[Decimal] = Query(None, alias="maxTotal"),
        paid_from: Optional[datetime] = Query(None, alias="paidFrom"),
        paid_to: Optional[datetime] = Query(None, alias="paidTo"),
        due_from: Optional[datetime] = Query(None, alias="dueFrom"),
        due_to: Optional[datetime] = Query(None, alias="dueTo"),
        created_from: Optional[datetime] = Query(None, alias="createdFrom"),
        created_to: Optional[datetime] = Query(None, alias="createdTo"),
        processed_from: Optional[datetime] = Query(None, alias="processedFrom"),
        processed_to: Optional[datetime] = Query(None, alias="processedTo"),
        with_late_fee: Optional[bool] = Query(None, alias="withLateFee"),
        with_processing_fee: Optional[bool] = Query(None, alias="withProcessingFee"),
        description: Optional[str] = None,
        retries_above: Optional[int] = Query(None, alias="retriesAbove", ge=0),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await PaymentService(db).search(
            params,
            current_user,
            method=method,
            min_total=min_total,
            max_total=max_total,
            paid_from=paid_from,
            paid_to=paid_to,
            due_from=due_from,
            due_to=due_to,
            created_from=created_from,
            created_to=created_to,
            processed_from=processed_from,
            processed_to=processed_to,
            with_late_fee=with_late_fee,
            with_processing_fee=with_processing_fee,
            description=description,
            retries_above=retries_above,
        )

    @router.get("/payments/amount-range")
    @safe_handler
    async def by_amount_range(
        self,
        min_amount: Optional[Decimal] = Query(None, alias="minAmount"),
        max_amount: Optional[Decimal] = Query(None, alias="maxAmount"),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_by_amount_range(
            min_amount, max_amount, current_user
        )

    @router.get("/payments/reference/{reference}")
    @safe_handler
    async def by_reference(
        self,
        reference: str,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_by_reference(reference, current_user)

    @router.get("/payments/transaction/{transaction_id}")
    @safe_handler
    async def by_transaction_id(
        self,
        transaction_id: str,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_by_transaction_id(transaction_id, current_user)

    @router.get("/payments/status/{status}")
    @safe_handler
    async def by_status(
        self,
        status: PaymentStatus,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await PaymentService(db).get_by_status(status, params, current_user)

    @router.get("/payments/status/{status}/count")
    @safe_handler
    async def count_by_status(
        self,
        status: PaymentStatus,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).count_by_status(status, current_user)

    @router.get("/payments/type/{payment_type}")
    @safe_handler
    async def by_type(
        self,
        payment_type: PaymentType,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await PaymentService(db).get_by_type(payment_type, params, current_user)

    @router.get("/payments/type/{payment_type}/count")
    @safe_handler
    async def count_by_type(
        self,
        payment_type: PaymentType,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).count_by_type(payment_type, current_user)

    @router.get("/payments/tenant/{tenant_id}")
    @safe_handler
    async def by_tenant(
        self,
        tenant_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await PaymentService(db).get_by_tenant(tenant_id, params, current_user)

    @router.get("/payments/landlord/{landlord_id}")
    @safe_handler
    async def by_landlord(
        self,
        landlord_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await PaymentService(db).get_by_landlord(
            landlord_id, params, current_user
        )

    @router.get("/payments/property/{property_id}")
    @safe_handler
    async def by_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        params: PageParams = Depends(page_params),
    ):
        return await PaymentService(db).get_by_property(
            property_id, params, current_user
        )

    @router.get("/payments/property/{property_id}/count")
    @safe_handler
    async def count_by_property(
        self,
        property_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).count_by_property(property_id, current_user)

    @router.get("/payments/agreement/{agreement_id}")
    @safe_handler
    async def by_agreement(
        self,
        agreement_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_by_agreement(agreement_id, current_user)

    @router.get("/payments/{payment_id}")
    @safe_handler
    async def get_one(
        self,
        payment_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).get_payment(payment_id, current_user)

    @router.put("/payments/{payment_id}")
    @safe_handler
    async def update(
        self,
        payment_id: uuid.UUID,
        data: PaymentUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).update_payment(
            payment_id=payment_id, current_user=current_user, data=data
        )

    @router.patch("/payments/{payment_id}/status")
    @safe_handler
    async def update_status(
        self,
        payment_id: uuid.UUID,
        data: PaymentStatusUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).update_status(
            payment_id, data.status, data.version, current_user
        )

    @router.patch("/payments/{payment_id}/fail")
    @safe_handler
    async def mark_failed(
        self,
        payment_id: uuid.UUID,
        data: PaymentFailure,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await PaymentService(db).mark_failed(
            payment_id, data.reason, data.version, current_user
        )

    @router.delete("/payments/{payment_id}", status_code=204)
    @safe_handler
    async def delete_payment(
        self,
        payment_id: uuid.UUID,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        await PaymentService(db).delete_payment(payment_id, current_user)
