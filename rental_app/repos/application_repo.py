import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select

from core.filters import at_least, between, conjunction, contains, equals
from core.paginate import PageParams
from models.enums import ApplicationStatus
from models.models import Application, Property
from models.utils import utcnow

from .base_repo import BaseRepo

NEEDS_REVIEW = Application.status.in_(
    [ApplicationStatus.PENDING, ApplicationStatus.UNDER_REVIEW]
)


class ApplicationRepo(BaseRepo[Application]):
    model = Application

    def for_landlord(self):
        return select(Application).join(
            Property, Application.property_id == Property.id
        )

    async def create(self, **fields) -> Application:
        return await self.save(Application(**fields))

    async def page_by_tenant(self, tenant_id: uuid.UUID, params: PageParams):
        return await self.page_where(params, Application.tenant_id == tenant_id)

    async def count_by_tenant(self, tenant_id: uuid.UUID) -> int:
        return await self.count_where(Application.tenant_id == tenant_id)

    async def find_by_property(self, property_id: uuid.UUID) -> List[Application]:
        return await self.list_where(Application.property_id == property_id)

    async def find_by_listing(self, listing_id: uuid.UUID) -> List[Application]:
        return await self.list_where(Application.listing_id == listing_id)

    async def find_by_tenant_and_listing(
        self, tenant_id: uuid.UUID, listing_id: uuid.UUID
    ) -> List[Application]:
        return await self.list_where(
            Application.tenant_id == tenant_id, Application.listing_id == listing_id
        )

    async def find_by_landlord(
        self, landlord_id: uuid.UUID, status: Optional[ApplicationStatus] = None
    ) -> List[Application]:
        stmt = self.for_landlord().where(
            conjunction(
                Property.landlord_id == landlord_id, equals(Application.status, status)
            )
        )
        result = await self.db.execute(stmt.order_by(Application.created_at.desc()))
        return list(result.scalars().all())

    async def page_by_landlord(self, landlord_id: uuid.UUID, params: PageParams):
        return await self.page_where(
            params, Property.landlord_id == landlord_id, stmt=self.for_landlord()
        )

    async def count_by_landlord(
        self, landlord_id: uuid.UUID, status: Optional[ApplicationStatus] = None
    ) -> int:
        return await self.count_where(
            Property.landlord_id == landlord_id,
            equals(Application.status, status),
            stmt=self.for_landlord(),
        )

    async def find_pending_by_landlord(self, landlord_id: uuid.UUID) -> List[Application]:
        return await self.find_by_landlord(landlord_id, ApplicationStatus.PENDING)

    async def find_needing_review_by_landlord(
        self, landlord_id: uuid.UUID
    ) -> List[Application]:
        stmt = self.for_landlord().where(Property.landlord_id == landlord_id, NEEDS_REVIEW)
        result = await self.db.execute(stmt.order_by(Application.created_at.asc()))
        return list(result.scalars().all())

    async def find_by_status(self, status: ApplicationStatus) -> List[Application]:
        return await self.list_where(Application.status == status)

    async def page_by_status(self, status: ApplicationStatus, params: PageParams):
        return await self.page_where(params, Application.status == status)

    async def count_by_status(self, status: ApplicationStatus) -> int:
        return await self.count_where(Application.status == status)

    async def find_needing_review(self) -> List[Application]:
        return await self.list_where(
            NEEDS_REVIEW, order_by=[Application.created_at.asc()]
        )

    async def find_created_between(
        self, start: Optional[datetime], end: Optional[datetime]
    ) -> List[Application]:
        return await self.list_where(between(Application.created_at, start, end))

    async def find_by_move_in_date(self, move_in_date: date) -> List[Application]:
        return await self.list_where(Application.move_in_date == move_in_date)

    async def find_by_lease_term(self, lease_term: int) -> List[Application]:
        return await self.list_where(Application.lease_term_preference == lease_term)

    async def find_by_income_range(
        self, min_income: Optional[Decimal], max_income: Optional[Decimal]
    ) -> List[Application]:
        return await self.list_where(
            Application.monthly_income.is_not(None),
            between(Application.monthly_income, min_income, max_income),
        )

    async def find_by_credit_score_range(
        self, min_score: Optional[int], max_score: Optional[int]
    ) -> List[Application]:
        return await self.list_where(
            Application.credit_score.is_not(None),
            between(Application.credit_score, min_score, max_score),
        )

    async def find_with_pets(self, min_pets: int = 1) -> List[Application]:
        return await self.list_where(at_least(Application.pets_count, min_pets))

    async def count_with_pets(self, min_pets: int = 1) -> int:
        return await self.count_where(at_least(Application.pets_count, min_pets))

    async def find_by_occupants(self, occupants: int) -> List[Application]:
        return await self.list_where(Application.occupants_count == occupants)

    async def find_by_employment_status(self, status: str) -> List[Application]:
        return await self.list_where(Application.employment_status.ilike(status))

    async def find_by_employer(self, employer: str) -> List[Application]:
        return await self.list_where(contains(Application.employer_name, employer))

    async def find_by_fee_status(self, fee_paid: bool) -> List[Application]:
        return await self.list_where(Application.fee_paid.is_(fee_paid))

    async def find_reviewed_between(
        self, start: Optional[datetime], end: Optional[datetime]
    ) -> List[Application]:
        return await self.list_where(
            Application.reviewed_at.is_not(None),
            between(Application.reviewed_at, start, end),
        )

    async def find_by_reviewer(self, reviewer_id: uuid.UUID) -> List[Application]:
        return await self.list_where(Application.reviewed_by == reviewer_id)

    async def find_overdue(self, days: int) -> List[Application]:
        cutoff = utcnow() - timedelta(days=days)
        return await self.list_where(
            Application.status == ApplicationStatus.PENDING,
            Application.created_at < cutoff,
            order_by=[Application.created_at.asc()],
        )

    async def count_overdue(self, days: int) -> int:
        cutoff = utcnow() - timedelta(days=days)
        return await self.count_where(
            Application.status == ApplicationStatus.PENDING,
            Application.created_at < cutoff,
        )

    async def count_all(self) -> int:
        return await self.count_where()
