import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select

from core.filters import between, contains, equals
from core.paginate import PageParams
from models.enums import AgreementStatus
from models.models import Agreement

from .base_repo import BaseRepo

ACTIVE = Agreement.status == AgreementStatus.ACTIVE
PENDING_SIGNATURE = Agreement.status == AgreementStatus.PENDING_SIGNATURE


class AgreementRepo(BaseRepo[Agreement]):
    model = Agreement

    async def create(self, **fields) -> Agreement:
        return await self.save(Agreement(**fields))

    async def page_by_tenant(self, tenant_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Agreement.tenant_id == tenant_id)

    async def count_by_tenant(
        self, tenant_id: uuid.UUID, status: Optional[AgreementStatus] = None
    ) -> int:
        return await self.count_where(
            Agreement.tenant_id == tenant_id, equals(Agreement.status, status)
        )

    async def page_by_landlord(self, landlord_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Agreement.landlord_id == landlord_id)

    async def count_by_landlord(
        self, landlord_id: uuid.UUID, status: Optional[AgreementStatus] = None
    ) -> int:
        return await self.count_where(
            Agreement.landlord_id == landlord_id, equals(Agreement.status, status)
        )

    async def page_by_property(self, property_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Agreement.property_id == property_id)

    async def count_by_property(self, property_id: uuid.UUID) -> int:
        return await self.count_where(Agreement.property_id == property_id)

    async def find_by_status(self, status: AgreementStatus) -> List[Agreement]:
        return await self.list_where(Agreement.status == status)

    async def page_by_status(self, status: AgreementStatus, params: PageParams):
        return await self.page_where(params, Agreement.status == status)

    async def count_by_status(self, status: AgreementStatus) -> int:
        return await self.count_where(Agreement.status == status)

    async def find_active(self) -> List[Agreement]:
        return await self.list_where(ACTIVE)

    async def get_by_number(self, agreement_number: str) -> Optional[Agreement]:
        result = await self.db.execute(
            select(Agreement).where(Agreement.agreement_number == agreement_number)
        )
        return result.scalar_one_or_none()

    async def get_by_application(self, application_id: uuid.UUID) -> Optional[Agreement]:
        result = await self.db.execute(
            select(Agreement).where(Agreement.application_id == application_id)
        )
        return result.scalar_one_or_none()

    async def find_expiring_before(self, cutoff: date) -> List[Agreement]:
        return await self.list_where(
            ACTIVE, Agreement.end_date <= cutoff, order_by=[Agreement.end_date.asc()]
        )

    async def find_needing_renewal(self, start: date, end: date) -> List[Agreement]:
        return await self.list_where(
            ACTIVE,
            between(Agreement.end_date, start, end),
            order_by=[Agreement.end_date.asc()],
        )

    async def find_by_rent_range(
        self, min_rent: Optional[Decimal], max_rent: Optional[Decimal]
    ) -> List[Agreement]:
        return await self.list_where(between(Agreement.rent_amount, min_rent, max_rent))

    async def find_pending_tenant_signature(self) -> List[Agreement]:
        return await self.list_where(
            PENDING_SIGNATURE, Agreement.signed_by_tenant.is_(False)
        )

    async def find_pending_landlord_signature(self) -> List[Agreement]:
        return await self.list_where(
            PENDING_SIGNATURE, Agreement.signed_by_landlord.is_(False)
        )

    async def find_overdue_signatures(self, cutoff: datetime) -> List[Agreement]:
        return await self.list_where(
            PENDING_SIGNATURE,
            Agreement.created_at < cutoff,
            order_by=[Agreement.created_at.asc()],
        )

    def search_clauses(
        self,
        *,
        start_from: Optional[date] = None,
        start_to: Optional[date] = None,
        end_from: Optional[date] = None,
        end_to: Optional[date] = None,
        lease_term_months: Optional[int] = None,
        payment_due_day: Optional[int] = None,
        min_deposit: Optional[Decimal] = None,
        max_deposit: Optional[Decimal] = None,
        signed_by_tenant: Optional[bool] = None,
        signed_by_landlord: Optional[bool] = None,
        signed_from: Optional[datetime] = None,
        signed_to: Optional[datetime] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        utilities_included: Optional[bool] = None,
        pet_policy: Optional[str] = None,
        smoking_policy: Optional[str] = None,
    ):
        return (
            between(Agreement.start_date, start_from, start_to),
            between(Agreement.end_date, end_from, end_to),
            equals(Agreement.lease_term_months, lease_term_months),
            equals(Agreement.payment_due_day, payment_due_day),
            between(Agreement.security_deposit, min_deposit, max_deposit),
            equals(Agreement.signed_by_tenant, signed_by_tenant),
            equals(Agreement.signed_by_landlord, signed_by_landlord),
            between(Agreement.signed_at, signed_from, signed_to),
            between(Agreement.created_at, created_from, created_to),
            equals(Agreement.utilities_included, utilities_included),
            contains(Agreement.pet_policy, pet_policy),
            contains(Agreement.smoking_policy, smoking_policy),
        )

    async def page_search(self, params: PageParams, **filters):
        return await self.page_where(params, *self.search_clauses(**filters))

    async def count_all(self) -> int:
        return await self.count_where()
