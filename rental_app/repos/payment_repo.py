import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select

from core.filters import between, conjunction, contains, equals, greater_than
from core.paginate import PageParams
from models.enums import PaymentMethod, PaymentStatus, PaymentType
from models.models import Payment
from models.utils import utcnow

from .base_repo import BaseRepo

PENDING = Payment.status == PaymentStatus.PENDING


class PaymentRepo(BaseRepo[Payment]):
    model = Payment

    async def create(self, **fields) -> Payment:
        return await self.save(Payment(**fields))

    async def get_by_reference(self, reference: str) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment).where(Payment.payment_reference == reference)
        )
        return result.scalar_one_or_none()

    async def get_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment).where(Payment.transaction_id == transaction_id)
        )
        return result.scalars().first()

    async def page_by_tenant(self, tenant_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Payment.tenant_id == tenant_id)

    async def count_by_tenant(
        self, tenant_id: uuid.UUID, status: Optional[PaymentStatus] = None
    ) -> int:
        return await self.count_where(
            Payment.tenant_id == tenant_id, equals(Payment.status, status)
        )

    async def page_by_landlord(self, landlord_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Payment.landlord_id == landlord_id)

    async def count_by_landlord(
        self, landlord_id: uuid.UUID, status: Optional[PaymentStatus] = None
    ) -> int:
        return await self.count_where(
            Payment.landlord_id == landlord_id, equals(Payment.status, status)
        )

    async def page_by_property(self, property_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Payment.property_id == property_id)

    async def count_by_property(self, property_id: uuid.UUID) -> int:
        return await self.count_where(Payment.property_id == property_id)

    async def find_by_agreement(self, agreement_id: uuid.UUID) -> List[Payment]:
        return await self.list_where(Payment.agreement_id == agreement_id)

    async def page_by_status(self, status: PaymentStatus, params: PageParams):
        return await self.page_where(params, Payment.status == status)

    async def count_by_status(self, status: PaymentStatus) -> int:
        return await self.count_where(Payment.status == status)

    async def page_by_type(self, payment_type: PaymentType, params: PageParams):
        return await self.page_where(params, Payment.type == payment_type)

    async def count_by_type(self, payment_type: PaymentType) -> int:
        return await self.count_where(Payment.type == payment_type)

    async def find_by_amount_range(
        self, min_amount: Optional[Decimal], max_amount: Optional[Decimal]
    ) -> List[Payment]:
        return await self.list_where(between(Payment.amount, min_amount, max_amount))

    async def find_overdue(self, tenant_id: Optional[uuid.UUID] = None) -> List[Payment]:
        return await self.list_where(
            PENDING,
            Payment.due_date.is_not(None),
            Payment.due_date < utcnow(),
            equals(Payment.tenant_id, tenant_id),
            order_by=[Payment.due_date.asc()],
        )

    async def count_overdue(
        self,
        tenant_id: Optional[uuid.UUID] = None,
        landlord_id: Optional[uuid.UUID] = None,
    ) -> int:
        return await self.count_where(
            PENDING,
            Payment.due_date.is_not(None),
            Payment.due_date < utcnow(),
            equals(Payment.tenant_id, tenant_id),
            equals(Payment.landlord_id, landlord_id),
        )

    async def find_due_between(self, start: datetime, end: datetime) -> List[Payment]:
        return await self.list_where(
            PENDING,
            Payment.due_date.is_not(None),
            between(Payment.due_date, start, end),
            order_by=[Payment.due_date.asc()],
        )

    async def find_scheduled_for_retry(
        self, as_of: Optional[datetime] = None
    ) -> List[Payment]:
        return await self.list_where(
            Payment.status == PaymentStatus.FAILED,
            Payment.next_retry_at.is_not(None),
            Payment.next_retry_at <= (as_of or utcnow()),
            order_by=[Payment.next_retry_at.asc()],
        )

    def search_clauses(
        self,
        *,
        method: Optional[PaymentMethod] = None,
        min_total: Optional[Decimal] = None,
        max_total: Optional[Decimal] = None,
        paid_from: Optional[datetime] = None,
        paid_to: Optional[datetime] = None,
        due_from: Optional[datetime] = None,
        due_to: Optional[datetime] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        processed_from: Optional[datetime] = None,
        processed_to: Optional[datetime] = None,
        with_late_fee: Optional[bool] = None,
        with_processing_fee: Optional[bool] = None,
        description: Optional[str] = None,
        retries_above: Optional[int] = None,
    ):
        """``with_*`` flags only narrow when true; ``retries_above`` is exclusive."""
        return (
            equals(Payment.method, method),
            between(Payment.total_amount, min_total, max_total),
            between(Payment.payment_date, paid_from, paid_to),
            between(Payment.due_date, due_from, due_to),
            between(Payment.created_at, created_from, created_to),
            between(Payment.processed_at, processed_from, processed_to),
            greater_than(Payment.late_fee, 0) if with_late_fee else None,
            greater_than(Payment.processing_fee, 0) if with_processing_fee else None,
            contains(Payment.payment_description, description),
            greater_than(Payment.retry_count, retries_above),
        )

    async def page_search(self, params: PageParams, **filters):
        return await self.page_where(params, *self.search_clauses(**filters))

    async def sum_amount(
        self,
        *,
        status: Optional[PaymentStatus] = None,
        tenant_id: Optional[uuid.UUID] = None,
        landlord_id: Optional[uuid.UUID] = None,
        property_id: Optional[uuid.UUID] = None,
    ) -> Decimal:
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            conjunction(
                equals(Payment.status, status),
                equals(Payment.tenant_id, tenant_id),
                equals(Payment.landlord_id, landlord_id),
                equals(Payment.property_id, property_id),
            )
        )
        total = (await self.db.execute(stmt)).scalar_one()
        return Decimal(str(total or 0)).quantize(Decimal("0.01"))

    async def count_all(self) -> int:
        return await self.count_where()
