import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from core.check_permission import CheckRolePermission
from core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from core.filters import ensure_range
from core.mapper import ORMMapper
from core.paginate import PageParams, PaginatePage
from core.settings import settings
from models.enums import ApplicationStatus, ListingStatus, UserRole
from models.models import Application
from models.utils import naive_utc, utcnow
from policy.status_policy import StatusPolicy
from repos.application_repo import ApplicationRepo
from repos.listing_repo import ListingRepo
from repos.property_repo import PropertyRepo
from repos.user_repo import UserRepo
from schemas.schema import ApplicationOut, ApplicationValidation, CountOut

logger = logging.getLogger(__name__)

EDITABLE = {ApplicationStatus.PENDING, ApplicationStatus.UNDER_REVIEW}
OPEN = EDITABLE | {ApplicationStatus.APPROVED}
REVIEWERS = (UserRole.LANDLORD, UserRole.ADMIN)
REQUIRED_FIELDS = ("pets_count", "occupants_count")


class ApplicationService:
    def __init__(self, db):
        self.repo: ApplicationRepo = ApplicationRepo(db)
        self.listing_repo: ListingRepo = ListingRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.user_repo: UserRepo = UserRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def get_or_404(self, application_id: uuid.UUID) -> Application:
        application = await self.repo.get_by_id(application_id)
        if not application:
            raise NotFoundError("Application not found")
        return application

    async def landlord_of(self, application: Application) -> Optional[uuid.UUID]:
        prop = await self.property_repo.get_by_id(application.property_id)
        return prop.landlord_id if prop else None

    async def check_party(self, application_id: uuid.UUID, current_user) -> Application:
        """Tenant who applied, landlord of the property, or an admin."""
        application = await self.get_or_404(application_id)
        await self.permission.check_owner_or_admin(
            current_user, application.tenant_id, await self.landlord_of(application)
        )
        return application

    async def check_tenant(self, application_id: uuid.UUID, current_user) -> Application:
        application = await self.get_or_404(application_id)
        await self.permission.check_owner_or_admin(current_user, application.tenant_id)
        return application

    async def check_landlord(
        self, application_id: uuid.UUID, current_user
    ) -> Application:
        await self.permission.check_roles(current_user, REVIEWERS)
        application = await self.get_or_404(application_id)
        await self.permission.check_owner_or_admin(
            current_user, await self.landlord_of(application)
        )
        return application

    async def create_application(self, data, current_user) -> ApplicationOut:
        await self.permission.check_roles(
            current_user, (UserRole.TENANT, UserRole.ADMIN)
        )
        tenant_id = current_user.id
        if current_user.role == UserRole.ADMIN and data.tenant_id:
            if not await self.user_repo.get_by_id(data.tenant_id):
                raise ValidationError("Tenant does not exist")
            tenant_id = data.tenant_id

        listing = await self.listing_repo.get_by_id(data.listing_id)
        if not listing:
            raise ValidationError("Listing does not exist")
        if listing.status != ListingStatus.ACTIVE:
            raise ValidationError("Listing is not accepting applications")

        existing = await self.repo.find_by_tenant_and_listing(tenant_id, listing.id)
        if any(a.status in OPEN for a in existing):
            raise ConflictError("You already have an open application for this listing")

        fields = data.model_dump(exclude={"tenant_id", "listing_id"})
        application = await self.repo.create(
            tenant_id=tenant_id,
            listing_id=listing.id,
            property_id=listing.property_id,
            status=ApplicationStatus.PENDING,
            **fields,
        )
        logger.info(f"Application {application.id} submitted for listing {listing.id}")
        return self.mapper.one(application, ApplicationOut)

    async def get_application(
        self, application_id: uuid.UUID, current_user
    ) -> ApplicationOut:
        application = await self.check_party(application_id, current_user)
        return self.mapper.one(application, ApplicationOut)

    async def list_applications(self, params: PageParams, current_user):
        await self.permission.check_authenticated(current_user)
        if current_user.role == UserRole.ADMIN:
            rows, total = await self.repo.page_where(params)
        elif current_user.role == UserRole.LANDLORD:
            rows, total = await self.repo.page_by_landlord(current_user.id, params)
        else:
            rows, total = await self.repo.page_by_tenant(current_user.id, params)
        return self.paginate.build(rows, total, params, ApplicationOut)

    async def update_application(
        self, application_id: uuid.UUID, current_user, data
    ) -> ApplicationOut:
        application = await self.check_tenant(application_id, current_user)
        if application.status not in EDITABLE:
            raise ValidationError(
                f"Application can no longer be edited ({application.status.value})"
            )
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields provided for update.")

        self.mapper.apply(application, update_data, required=REQUIRED_FIELDS)
        application = await self.repo.save(application)
        return self.mapper.one(application, ApplicationOut)

    async def update_status(
        self, application_id: uuid.UUID, status: ApplicationStatus, current_user
    ) -> ApplicationOut:
        application = await self.get_or_404(application_id)
        landlord_id = await self.landlord_of(application)

        is_tenant = current_user.id == application.tenant_id
        if current_user.role != UserRole.ADMIN and current_user.id != landlord_id:
            if not is_tenant:
                raise ForbiddenError("You are not allowed to access this resource")
            if status != ApplicationStatus.WITHDRAWN:
                raise ForbiddenError("Applicants may only withdraw an application")

        StatusPolicy.ensure(application.status, status, entity="Application")
        previous = application.status
        application.status = status
        application = await self.repo.save(application)
        logger.info(
            f"Application {application.id} status {previous.value} -> {status.value}"
        )
        return self.mapper.one(application, ApplicationOut)

    async def review_application(
        self, application_id: uuid.UUID, data, current_user
    ) -> ApplicationOut:
        application = await self.check_landlord(application_id, current_user)
        StatusPolicy.ensure(application.status, data.status, entity="Application")

        application.status = data.status
        application.rejection_reason = (
            data.rejection_reason if data.status == ApplicationStatus.REJECTED else None
        )
        application.reviewed_by = current_user.id
        application.reviewed_at = utcnow()
        application = await self.repo.save(application)
        logger.info(
            f"Application {application.id} reviewed by {current_user.username}: "
            f"{data.status.value}"
        )
        return self.mapper.one(application, ApplicationOut)

    async def update_fee_status(
        self, application_id: uuid.UUID, fee_paid: bool, current_user
    ) -> ApplicationOut:
        await self.permission.check_roles(current_user, (UserRole.TENANT, UserRole.ADMIN))
        application = await self.check_tenant(application_id, current_user)
        application.fee_paid = fee_paid
        application = await self.repo.save(application)
        return self.mapper.one(application, ApplicationOut)

    async def validate_application(
        self, application_id: uuid.UUID, current_user
    ) -> ApplicationValidation:
        application = await self.check_party(application_id, current_user)
        errors = []
        if not await self.user_repo.get_by_id(application.tenant_id):
            errors.append("Tenant is required")
        if not await self.property_repo.get_by_id(application.property_id):
            errors.append("Property is required")
        if application.monthly_income is None or application.monthly_income <= 0:
            errors.append("Monthly income must be positive")
        if application.credit_score is None or not 300 <= application.credit_score <= 850:
            errors.append("Credit score must be between 300 and 850")
        return ApplicationValidation(valid=not errors, errors=errors)

    async def delete_application(self, application_id: uuid.UUID, current_user) -> None:
        application = await self.check_tenant(application_id, current_user)
        await self.repo.delete(application)
        logger.info(f"Application {application_id} deleted by {current_user.username}")

    async def get_by_tenant(
        self, tenant_id: uuid.UUID, params: PageParams, current_user
    ):
        await self.permission.check_self_or_admin(current_user, tenant_id)
        rows, total = await self.repo.page_by_tenant(tenant_id, params)
        return self.paginate.build(rows, total, params, ApplicationOut)

    async def get_by_landlord(
        self, landlord_id: uuid.UUID, params: PageParams, current_user
    ):
        await self.permission.check_self_or_admin(current_user, landlord_id)
        rows, total = await self.repo.page_by_landlord(landlord_id, params)
        return self.paginate.build(rows, total, params, ApplicationOut)

    async def get_by_property(
        self, property_id: uuid.UUID, current_user
    ) -> List[ApplicationOut]:
        prop = await self.property_repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        await self.permission.check_owner_or_admin(current_user, prop.landlord_id)
        return self.mapper.many(
            await self.repo.find_by_property(property_id), ApplicationOut
        )

    async def get_by_listing(
        self, listing_id: uuid.UUID, current_user
    ) -> List[ApplicationOut]:
        listing = await self.listing_repo.get_by_id(listing_id)
        if not listing:
            raise NotFoundError("Listing not found")
        await self.permission.check_owner_or_admin(current_user, listing.landlord_id)
        return self.mapper.many(await self.repo.find_by_listing(listing_id), ApplicationOut)

    async def get_by_status(self, status: ApplicationStatus, params: PageParams, current_user):
        await self.permission.check_admin(current_user)
        rows, total = await self.repo.page_by_status(status, params)
        return self.paginate.build(rows, total, params, ApplicationOut)

    async def get_needing_review(self, current_user) -> List[ApplicationOut]:
        await self.permission.check_roles(current_user, REVIEWERS)
        if current_user.role == UserRole.ADMIN:
            rows = await self.repo.find_needing_review()
        else:
            rows = await self.repo.find_needing_review_by_landlord(current_user.id)
        return self.mapper.many(rows, ApplicationOut)

    async def get_by_credit_score_range(
        self, min_score: Optional[int], max_score: Optional[int], current_user
    ) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        ensure_range(min_score, max_score, field="credit score")
        return self.mapper.many(
            await self.repo.find_by_credit_score_range(min_score, max_score),
            ApplicationOut,
        )

    async def get_by_income_range(
        self, min_income: Optional[Decimal], max_income: Optional[Decimal], current_user
    ) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        ensure_range(min_income, max_income, field="income")
        return self.mapper.many(
            await self.repo.find_by_income_range(min_income, max_income),
            ApplicationOut,
        )

    async def get_created_between(
        self, start: Optional[datetime], end: Optional[datetime], current_user
    ) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        start, end = naive_utc(start), naive_utc(end)
        ensure_range(start, end, field="date")
        return self.mapper.many(
            await self.repo.find_created_between(start, end), ApplicationOut
        )

    async def get_overdue(self, current_user) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(
            await self.repo.find_overdue(settings.APPLICATION_REVIEW_OVERDUE_DAYS),
            ApplicationOut,
        )

    async def get_pending(self, current_user) -> List[ApplicationOut]:
        await self.permission.check_roles(current_user, REVIEWERS)
        if current_user.role == UserRole.ADMIN:
            rows = await self.repo.find_by_status(ApplicationStatus.PENDING)
        else:
            rows = await self.repo.find_pending_by_landlord(current_user.id)
        return self.mapper.many(rows, ApplicationOut)

    async def get_needing_review_by_landlord(
        self, landlord_id: uuid.UUID, current_user
    ) -> List[ApplicationOut]:
        await self.permission.check_self_or_admin(current_user, landlord_id)
        return self.mapper.many(
            await self.repo.find_needing_review_by_landlord(landlord_id), ApplicationOut
        )

    async def get_by_move_in_date(self, move_in_date: date, current_user) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(
            await self.repo.find_by_move_in_date(move_in_date), ApplicationOut
        )

    async def get_by_lease_term(self, lease_term: int, current_user) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(await self.repo.find_by_lease_term(lease_term), ApplicationOut)

    async def get_with_pets(self, min_pets: int, current_user) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(await self.repo.find_with_pets(min_pets), ApplicationOut)

    async def get_by_occupants(self, occupants: int, current_user) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(await self.repo.find_by_occupants(occupants), ApplicationOut)

    async def get_by_employment_status(
        self, employment_status: str, current_user
    ) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(
            await self.repo.find_by_employment_status(employment_status), ApplicationOut
        )

    async def get_by_employer(self, employer: str, current_user) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(await self.repo.find_by_employer(employer), ApplicationOut)

    async def get_by_fee_status(self, fee_paid: bool, current_user) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        return self.mapper.many(await self.repo.find_by_fee_status(fee_paid), ApplicationOut)

    async def get_reviewed_between(
        self, start: Optional[datetime], end: Optional[datetime], current_user
    ) -> List[ApplicationOut]:
        await self.permission.check_admin(current_user)
        start, end = naive_utc(start), naive_utc(end)
        ensure_range(start, end, field="review date")
        return self.mapper.many(
            await self.repo.find_reviewed_between(start, end), ApplicationOut
        )

    async def get_by_reviewer(
        self, reviewer_id: uuid.UUID, current_user
    ) -> List[ApplicationOut]:
        await self.permission.check_self_or_admin(current_user, reviewer_id)
        return self.mapper.many(await self.repo.find_by_reviewer(reviewer_id), ApplicationOut)

    async def count_by_status(self, status: ApplicationStatus, current_user) -> CountOut:
        await self.permission.check_admin(current_user)
        return CountOut(count=await self.repo.count_by_status(status))

    async def analytics(self, current_user) -> dict:
        await self.permission.check_admin(current_user)
        return {
            "total": await self.repo.count_all(),
            "pending": await self.repo.count_by_status(ApplicationStatus.PENDING),
            "overdue": await self.repo.count_overdue(
                settings.APPLICATION_REVIEW_OVERDUE_DAYS
            ),
            "with_pets": await self.repo.count_with_pets(),
        }
