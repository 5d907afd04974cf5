import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from core.check_permission import CheckRolePermission
from core.errors import ConflictError, NotFoundError, ValidationError
from core.filters import ensure_range
from core.mapper import ORMMapper
from core.paginate import PageParams, PaginatePage
from core.settings import settings
from models.enums import PaymentStatus, PaymentType, UserRole
from models.models import Payment
from models.utils import naive_utc, retry_backoff, utcnow
from policy.status_policy import StatusPolicy
from repos.agreement_repo import AgreementRepo
from repos.payment_repo import PaymentRepo
from repos.property_repo import PropertyRepo
from repos.user_repo import UserRepo
from schemas.schema import CountOut, PaymentOut, SumOut

logger = logging.getLogger(__name__)

PAYERS = (UserRole.TENANT, UserRole.LANDLORD, UserRole.ADMIN)
MANAGERS = (UserRole.LANDLORD, UserRole.ADMIN)
REQUIRED_FIELDS = ("type", "amount", "late_fee", "processing_fee")


class PaymentService:
    def __init__(self, db):
        self.repo: PaymentRepo = PaymentRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.agreement_repo: AgreementRepo = AgreementRepo(db)
        self.user_repo: UserRepo = UserRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def get_or_404(self, payment_id: uuid.UUID) -> Payment:
        payment = await self.repo.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    async def check_party(self, payment_id: uuid.UUID, current_user) -> Payment:
        payment = await self.get_or_404(payment_id)
        await self.permission.check_owner_or_admin(
            current_user, payment.tenant_id, payment.landlord_id
        )
        return payment

    async def check_landlord(self, payment_id: uuid.UUID, current_user) -> Payment:
        await self.permission.check_roles(current_user, MANAGERS)
        payment = await self.get_or_404(payment_id)
        await self.permission.check_owner_or_admin(current_user, payment.landlord_id)
        return payment

    @staticmethod
    def check_version(payment: Payment, expected: Optional[int]):
        if expected is not None and expected != payment.version:
            logger.warning(
                f"Payment {payment.id} conflict: expected v{expected}, found v{payment.version}"
            )
            raise ConflictError(
                "Payment was modified by another request. Reload and retry."
            )

    async def create_payment(self, data, current_user) -> PaymentOut:
        await self.permission.check_roles(current_user, PAYERS)
        prop = await self.property_repo.get_by_id(data.property_id)
        if not prop:
            raise ValidationError("Property does not exist")

        if current_user.role == UserRole.TENANT:
            tenant_id = current_user.id
        else:
            await self.permission.check_owner_or_admin(current_user, prop.landlord_id)
            if not data.tenant_id:
                raise ValidationError("tenant_id is required")
            if not await self.user_repo.get_by_id(data.tenant_id):
                raise ValidationError("Tenant does not exist")
            tenant_id = data.tenant_id

        if data.agreement_id:
            agreement = await self.agreement_repo.get_by_id(data.agreement_id)
            if not agreement:
                raise ValidationError("Agreement does not exist")
            if agreement.property_id != prop.id:
                raise ValidationError("Agreement does not belong to this property")
        if data.payment_reference and await self.repo.get_by_reference(
            data.payment_reference
        ):
            raise ConflictError("Payment reference already in use")

        fields = data.model_dump(exclude={"tenant_id", "property_id"})
        payment = await self.repo.create(
            tenant_id=tenant_id,
            landlord_id=prop.landlord_id,
            property_id=prop.id,
            status=PaymentStatus.PENDING,
            **fields,
        )
        logger.info(
            f"Payment {payment.payment_reference} created for {payment.total_amount}"
        )
        return self.mapper.one(payment, PaymentOut)

    async def get_payment(self, payment_id: uuid.UUID, current_user) -> PaymentOut:
        return self.mapper.one(await self.check_party(payment_id, current_user), PaymentOut)

    async def get_by_reference(self, reference: str, current_user) -> PaymentOut:
        payment = await self.repo.get_by_reference(reference)
        if not payment:
            raise NotFoundError("Payment not found")
        await self.permission.check_owner_or_admin(
            current_user, payment.tenant_id, payment.landlord_id
        )
        return self.mapper.one(payment, PaymentOut)

    async def get_by_transaction_id(self, transaction_id: str, current_user) -> PaymentOut:
        payment = await self.repo.get_by_transaction_id(transaction_id)
        if not payment:
            raise NotFoundError("Payment not found")
        await self.permission.check_owner_or_admin(
            current_user, payment.tenant_id, payment.landlord_id
        )
        return self.mapper.one(payment, PaymentOut)

    async def list_payments(self, params: PageParams, current_user):
        await self.permission.check_authenticated(current_user)
        if current_user.role == UserRole.ADMIN:
            rows, total = await self.repo.page_where(params)
        elif current_user.role == UserRole.LANDLORD:
            rows, total = await self.repo.page_by_landlord(current_user.id, params)
        else:
            rows, total = await self.repo.page_by_tenant(current_user.id, params)
        return self.paginate.build(rows, total, params, PaymentOut)

    async def update_payment(
        self, payment_id: uuid.UUID, current_user, data
    ) -> PaymentOut:
        payment = await self.check_party(payment_id, current_user)
        self.check_version(payment, data.version)
        update_data = data.model_dump(exclude_unset=True, exclude={"version"})
        if not update_data:
            raise ValidationError("No fields provided for update.")

        self.mapper.apply(payment, update_data, required=REQUIRED_FIELDS)
        payment = await self.repo.save(payment)
        return self.mapper.one(payment, PaymentOut)

    async def update_status(
        self,
        payment_id: uuid.UUID,
        status: PaymentStatus,
        version: Optional[int],
        current_user,
    ) -> PaymentOut:
        payment = await self.check_landlord(payment_id, current_user)
        self.check_version(payment, version)
        StatusPolicy.ensure(payment.status, status, entity="Payment")

        previous = payment.status
        payment.status = status
        if status == PaymentStatus.COMPLETED:
            payment.processed_at = utcnow()
            payment.payment_date = payment.payment_date or payment.processed_at
            payment.next_retry_at = None
        payment = await self.repo.save(payment)
        logger.info(
            f"Payment {payment.payment_reference} status {previous.value} -> {status.value}"
        )
        return self.mapper.one(payment, PaymentOut)

    async def mark_failed(
        self, payment_id: uuid.UUID, reason: str, version: Optional[int], current_user
    ) -> PaymentOut:
        payment = await self.check_landlord(payment_id, current_user)
        self.check_version(payment, version)
        StatusPolicy.ensure(payment.status, PaymentStatus.FAILED, entity="Payment")

        payment.status = PaymentStatus.FAILED
        payment.failure_reason = reason
        payment.retry_count = (payment.retry_count or 0) + 1
        payment.next_retry_at = utcnow() + retry_backoff(
            payment.retry_count, settings.PAYMENT_RETRY_BASE_MINUTES
        )
        payment = await self.repo.save(payment)
        logger.info(
            f"Payment {payment.payment_reference} failed (attempt {payment.retry_count}), "
            f"next retry at {payment.next_retry_at.isoformat()}"
        )
        return self.mapper.one(payment, PaymentOut)

    async def delete_payment(self, payment_id: uuid.UUID, current_user) -> None:
        payment = await self.check_landlord(payment_id, current_user)
        await self.repo.delete(payment)
        logger.info(f"Payment {payment_id} deleted by {current_user.username}")

    async def get_by_tenant(self, tenant_id: uuid.UUID, params: PageParams, current_user):
        await self.permission.check_self_or_admin(current_user, tenant_id)
        rows, total = await self.repo.page_by_tenant(tenant_id, params)
        return self.paginate.build(rows, total, params, PaymentOut)

    async def get_by_landlord(
        self, landlord_id: uuid.UUID, params: PageParams, current_user
    ):
        await self.permission.check_self_or_admin(current_user, landlord_id)
        rows, total = await self.repo.page_by_landlord(landlord_id, params)
        return self.paginate.build(rows, total, params, PaymentOut)

    async def get_by_property(
        self, property_id: uuid.UUID, params: PageParams, current_user
    ):
        prop = await self.property_repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        await self.permission.check_owner_or_admin(current_user, prop.landlord_id)
        rows, total = await self.repo.page_by_property(property_id, params)
        return self.paginate.build(rows, total, params, PaymentOut)

    async def get_by_agreement(
        self, agreement_id: uuid.UUID, current_user
    ) -> List[PaymentOut]:
        agreement = await self.agreement_repo.get_by_id(agreement_id)
        if not agreement:
            raise NotFoundError("Agreement not found")
        await self.permission.check_owner_or_admin(
            current_user, agreement.tenant_id, agreement.landlord_id
        )
        return self.mapper.many(
            await self.repo.find_by_agreement(agreement_id), PaymentOut
        )

    async def get_by_status(self, status: PaymentStatus, params: PageParams, current_user):
        await self.permission.check_admin(current_user)
        rows, total = await self.repo.page_by_status(status, params)
        return self.paginate.build(rows, total, params, PaymentOut)

    async def get_by_type(self, payment_type: PaymentType, params: PageParams, current_user):
        await self.permission.check_admin(current_user)
        rows, total = await self.repo.page_by_type(payment_type, params)
        return self.paginate.build(rows, total, params, PaymentOut)

    async def get_by_amount_range(
        self, min_amount: Optional[Decimal], max_amount: Optional[Decimal], current_user
    ) -> List[PaymentOut]:
        await self.permission.check_admin(current_user)
        ensure_range(min_amount, max_amount, field="amount")
        return self.mapper.many(
            await self.repo.find_by_amount_range(min_amount, max_amount), PaymentOut
        )

    async def get_due_between(
        self, start: datetime, end: datetime, current_user
    ) -> List[PaymentOut]:
        await self.permission.check_authenticated(current_user)
        start, end = naive_utc(start), naive_utc(end)
        ensure_range(start, end, field="date")
        rows = await self.repo.find_due_between(start, end)
        if current_user.role != UserRole.ADMIN:
            rows = [
                p for p in rows if current_user.id in (p.tenant_id, p.landlord_id)
            ]
        return self.mapper.many(rows, PaymentOut)

    async def get_overdue(self, current_user) -> List[PaymentOut]:
        await self.permission.check_authenticated(current_user)
        if current_user.role == UserRole.ADMIN:
            rows = await self.repo.find_overdue()
        elif current_user.role == UserRole.LANDLORD:
            rows = [
                p for p in await self.repo.find_overdue() if p.landlord_id == current_user.id
            ]
        else:
            rows = await self.repo.find_overdue(tenant_id=current_user.id)
        return self.mapper.many(rows, PaymentOut)

    async def get_scheduled_for_retry(self, current_user) -> List[PaymentOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(await self.repo.find_scheduled_for_retry(), PaymentOut)

    async def count_by_status(self, status: PaymentStatus, current_user) -> CountOut:
        await self.permission.check_admin(current_user)
        return CountOut(count=await self.repo.count_by_status(status))

    async def count_by_property(self, property_id: uuid.UUID, current_user) -> CountOut:
        prop = await self.property_repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        await self.permission.check_owner_or_admin(current_user, prop.landlord_id)
        return CountOut(count=await self.repo.count_by_property(property_id))

    async def count_by_type(self, payment_type: PaymentType, current_user) -> CountOut:
        await self.permission.check_admin(current_user)
        return CountOut(count=await self.repo.count_by_type(payment_type))

    async def search(self, params: PageParams, current_user, **filters):
        await self.permission.check_admin(current_user)
        filters = {
            k: naive_utc(v) if isinstance(v, datetime) else v for k, v in filters.items()
        }
        ensure_range(filters.get("min_total"), filters.get("max_total"), field="total")
        for name in ("paid", "due", "created", "processed"):
            ensure_range(
                filters.get(f"{name}_from"), filters.get(f"{name}_to"), field=f"{name} date"
            )
        rows, total = await self.repo.page_search(params, **filters)
        return self.paginate.build(rows, total, params, PaymentOut)

    async def total_paid(
        self,
        current_user,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        property_id: Optional[uuid.UUID] = None,
    ) -> SumOut:
        """Sum of payment amounts visible to the caller, 0 when nothing matches."""
        await self.permission.check_authenticated(current_user)
        if current_user.role == UserRole.ADMIN:
            total = await self.repo.sum_amount(status=status, property_id=property_id)
        elif current_user.role == UserRole.LANDLORD:
            total = await self.repo.sum_amount(
                status=status, landlord_id=current_user.id, property_id=property_id
            )
        else:
            total = await self.repo.sum_amount(
                status=status, tenant_id=current_user.id, property_id=property_id
            )
        return SumOut(total=total)
