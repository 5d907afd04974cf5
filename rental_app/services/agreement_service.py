import logging
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from core.check_permission import CheckRolePermission
from core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from core.filters import ensure_range
from core.mapper import ORMMapper
from core.paginate import PageParams, PaginatePage
from models.enums import AgreementStatus, ApplicationStatus, UserRole
from models.models import Agreement
from models.utils import calculate_end_date, naive_utc, utcnow
from policy.status_policy import StatusPolicy
from repos.agreement_repo import AgreementRepo
from repos.application_repo import ApplicationRepo
from repos.listing_repo import ListingRepo
from repos.property_repo import PropertyRepo
from schemas.schema import AgreementOut, CountOut

logger = logging.getLogger(__name__)

MANAGERS = (UserRole.LANDLORD, UserRole.ADMIN)
UNSIGNED = {AgreementStatus.DRAFT, AgreementStatus.PENDING_SIGNATURE}
REQUIRED_FIELDS = (
    "start_date",
    "end_date",
    "rent_amount",
    "security_deposit",
    "utilities_included",
)


class AgreementService:
    def __init__(self, db):
        self.repo: AgreementRepo = AgreementRepo(db)
        self.application_repo: ApplicationRepo = ApplicationRepo(db)
        self.listing_repo: ListingRepo = ListingRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def get_or_404(self, agreement_id: uuid.UUID) -> Agreement:
        agreement = await self.repo.get_by_id(agreement_id)
        if not agreement:
            raise NotFoundError("Agreement not found")
        return agreement

    async def check_party(self, agreement_id: uuid.UUID, current_user) -> Agreement:
        agreement = await self.get_or_404(agreement_id)
        await self.permission.check_owner_or_admin(
            current_user, agreement.tenant_id, agreement.landlord_id
        )
        return agreement

    async def check_landlord(self, agreement_id: uuid.UUID, current_user) -> Agreement:
        await self.permission.check_roles(current_user, MANAGERS)
        agreement = await self.get_or_404(agreement_id)
        await self.permission.check_owner_or_admin(current_user, agreement.landlord_id)
        return agreement

    async def create_agreement(self, data, current_user) -> AgreementOut:
        await self.permission.check_roles(current_user, MANAGERS)
        application = await self.application_repo.get_by_id(data.application_id)
        if not application:
            raise ValidationError("Application does not exist")
        prop = await self.property_repo.get_by_id(application.property_id)
        if not prop:
            raise ValidationError("Property does not exist")
        await self.permission.check_owner_or_admin(current_user, prop.landlord_id)

        if application.status != ApplicationStatus.APPROVED:
            raise ValidationError("Only approved applications can become agreements")
        if await self.repo.get_by_application(application.id):
            raise ConflictError("An agreement already exists for this application")
        if data.agreement_number and await self.repo.get_by_number(data.agreement_number):
            raise ConflictError("Agreement number already in use")

        listing = await self.listing_repo.get_by_id(application.listing_id)
        fields = data.model_dump(exclude={"application_id"}, exclude_none=True)
        fields.setdefault(
            "rent_amount", listing.rent_amount if listing else prop.rent_amount
        )
        fields.setdefault(
            "security_deposit",
            listing.security_deposit if listing else prop.security_deposit,
        )
        fields.setdefault(
            "lease_term_months",
            application.lease_term_preference
            or (listing.lease_term_months if listing else None)
            or prop.lease_term_months,
        )
        if fields.get("lease_term_months") is None:
            fields.pop("lease_term_months")
        if "end_date" not in fields:
            end_date = calculate_end_date(
                data.start_date, fields.get("lease_term_months")
            )
            if end_date is None:
                raise ValidationError("Provide end_date or lease_term_months")
            fields["end_date"] = end_date

        agreement = await self.repo.create(
            tenant_id=application.tenant_id,
            landlord_id=prop.landlord_id,
            property_id=prop.id,
            application_id=application.id,
            status=AgreementStatus.DRAFT,
            **fields,
        )
        logger.info(
            f"Agreement {agreement.agreement_number} created for application {application.id}"
        )
        return self.mapper.one(agreement, AgreementOut)

    async def get_agreement(self, agreement_id: uuid.UUID, current_user) -> AgreementOut:
        return self.mapper.one(
            await self.check_party(agreement_id, current_user), AgreementOut
        )

    async def get_by_number(self, agreement_number: str, current_user) -> AgreementOut:
        agreement = await self.repo.get_by_number(agreement_number)
        if not agreement:
            raise NotFoundError("Agreement not found")
        await self.permission.check_owner_or_admin(
            current_user, agreement.tenant_id, agreement.landlord_id
        )
        return self.mapper.one(agreement, AgreementOut)

    async def list_agreements(self, params: PageParams, current_user):
        await self.permission.check_authenticated(current_user)
        if current_user.role == UserRole.ADMIN:
            rows, total = await self.repo.page_where(params)
        elif current_user.role == UserRole.LANDLORD:
            rows, total = await self.repo.page_by_landlord(current_user.id, params)
        else:
            rows, total = await self.repo.page_by_tenant(current_user.id, params)
        return self.paginate.build(rows, total, params, AgreementOut)

    async def update_agreement(
        self, agreement_id: uuid.UUID, current_user, data
    ) -> AgreementOut:
        agreement = await self.check_landlord(agreement_id, current_user)
        if agreement.status not in UNSIGNED:
            raise ValidationError(
                f"Agreement can no longer be edited ({agreement.status.value})"
            )
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields provided for update.")

        self.mapper.apply(agreement, update_data, required=REQUIRED_FIELDS)
        if "end_date" not in update_data and (
            "lease_term_months" in update_data or "start_date" in update_data
        ):
            end_date = calculate_end_date(
                agreement.start_date, agreement.lease_term_months
            )
            if end_date is not None:
                agreement.end_date = end_date
        if agreement.end_date < agreement.start_date:
            raise ValidationError("End date cannot be before start date.")
        agreement = await self.repo.save(agreement)
        return self.mapper.one(agreement, AgreementOut)

    async def update_status(
        self, agreement_id: uuid.UUID, status: AgreementStatus, current_user
    ) -> AgreementOut:
        agreement = await self.check_landlord(agreement_id, current_user)
        StatusPolicy.ensure(agreement.status, status, entity="Agreement")
        previous = agreement.status
        agreement.status = status
        agreement = await self.repo.save(agreement)
        logger.info(
            f"Agreement {agreement.agreement_number} status {previous.value} -> {status.value}"
        )
        return self.mapper.one(agreement, AgreementOut)

    async def sign(self, agreement_id: uuid.UUID, signature: str, current_user) -> AgreementOut:
        agreement = await self.get_or_404(agreement_id)
        if agreement.status not in UNSIGNED:
            raise ValidationError(
                f"Agreement cannot be signed ({agreement.status.value})"
            )

        if current_user.id == agreement.tenant_id:
            if agreement.signed_by_tenant:
                raise ValidationError("Tenant has already signed")
            agreement.signed_by_tenant = True
            agreement.tenant_signature = signature
        elif current_user.id == agreement.landlord_id:
            if agreement.signed_by_landlord:
                raise ValidationError("Landlord has already signed")
            agreement.signed_by_landlord = True
            agreement.landlord_signature = signature
        else:
            raise ForbiddenError("Only the tenant or landlord may sign")

        if agreement.fully_signed:
            agreement.signed_at = utcnow()
            agreement.effective_date = agreement.effective_date or agreement.start_date
            agreement.status = AgreementStatus.ACTIVE
        else:
            agreement.status = AgreementStatus.PENDING_SIGNATURE

        agreement = await self.repo.save(agreement)
        logger.info(
            f"Agreement {agreement.agreement_number} signed by {current_user.username}"
        )
        return self.mapper.one(agreement, AgreementOut)

    async def terminate(
        self,
        agreement_id: uuid.UUID,
        reason: str,
        termination_date: Optional[date],
        current_user,
    ) -> AgreementOut:
        agreement = await self.check_landlord(agreement_id, current_user)
        if agreement.status == AgreementStatus.TERMINATED:
            raise ValidationError("Agreement is already terminated")
        StatusPolicy.ensure(
            agreement.status, AgreementStatus.TERMINATED, entity="Agreement"
        )
        agreement.status = AgreementStatus.TERMINATED
        agreement.termination_reason = reason
        agreement.termination_date = termination_date or utcnow().date()
        agreement = await self.repo.save(agreement)
        logger.info(f"Agreement {agreement.agreement_number} terminated")
        return self.mapper.one(agreement, AgreementOut)

    async def delete_agreement(self, agreement_id: uuid.UUID, current_user) -> None:
        agreement = await self.check_landlord(agreement_id, current_user)
        await self.repo.delete(agreement)
        logger.info(f"Agreement {agreement_id} deleted by {current_user.username}")

    async def get_by_tenant(self, tenant_id: uuid.UUID, params: PageParams, current_user):
        await self.permission.check_self_or_admin(current_user, tenant_id)
        rows, total = await self.repo.page_by_tenant(tenant_id, params)
        return self.paginate.build(rows, total, params, AgreementOut)

    async def get_by_landlord(
        self, landlord_id: uuid.UUID, params: PageParams, current_user
    ):
        await self.permission.check_self_or_admin(current_user, landlord_id)
        rows, total = await self.repo.page_by_landlord(landlord_id, params)
        return self.paginate.build(rows, total, params, AgreementOut)

    async def get_by_property(
        self, property_id: uuid.UUID, params: PageParams, current_user
    ):
        prop = await self.property_repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        await self.permission.check_owner_or_admin(current_user, prop.landlord_id)
        rows, total = await self.repo.page_by_property(property_id, params)
        return self.paginate.build(rows, total, params, AgreementOut)

    async def get_by_status(self, status: AgreementStatus, params: PageParams, current_user):
        await self.permission.check_admin(current_user)
        rows, total = await self.repo.page_by_status(status, params)
        return self.paginate.build(rows, total, params, AgreementOut)

    async def get_expiring(self, days: int, current_user) -> List[AgreementOut]:
        await self.permission.check_roles(current_user, MANAGERS)
        rows = await self.repo.find_expiring_before(utcnow().date() + timedelta(days=days))
        if current_user.role != UserRole.ADMIN:
            rows = [a for a in rows if a.landlord_id == current_user.id]
        return self.mapper.many(rows, AgreementOut)

    async def get_needing_renewal(
        self, start: date, end: date, current_user
    ) -> List[AgreementOut]:
        await self.permission.check_roles(current_user, MANAGERS)
        ensure_range(start, end, field="date")
        rows = await self.repo.find_needing_renewal(start, end)
        if current_user.role != UserRole.ADMIN:
            rows = [a for a in rows if a.landlord_id == current_user.id]
        return self.mapper.many(rows, AgreementOut)

    async def get_pending_signatures(self, current_user) -> List[AgreementOut]:
        await self.permission.check_authenticated(current_user)
        if current_user.role == UserRole.ADMIN:
            rows = await self.repo.find_by_status(AgreementStatus.PENDING_SIGNATURE)
        elif current_user.role == UserRole.LANDLORD:
            rows = [
                a
                for a in await self.repo.find_pending_landlord_signature()
                if a.landlord_id == current_user.id
            ]
        else:
            rows = [
                a
                for a in await self.repo.find_pending_tenant_signature()
                if a.tenant_id == current_user.id
            ]
        return self.mapper.many(rows, AgreementOut)

    async def get_by_rent_range(
        self, min_rent: Optional[Decimal], max_rent: Optional[Decimal], current_user
    ) -> List[AgreementOut]:
        await self.permission.check_admin(current_user)
        ensure_range(min_rent, max_rent, field="rent")
        return self.mapper.many(
            await self.repo.find_by_rent_range(min_rent, max_rent), AgreementOut
        )

    async def count_by_property(self, property_id: uuid.UUID, current_user) -> CountOut:
        prop = await self.property_repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        await self.permission.check_owner_or_admin(current_user, prop.landlord_id)
        return CountOut(count=await self.repo.count_by_property(property_id))

    async def get_active(self, current_user) -> List[AgreementOut]:
        await self.permission.check_roles(current_user, MANAGERS)
        rows = await self.repo.find_active()
        if current_user.role != UserRole.ADMIN:
            rows = [a for a in rows if a.landlord_id == current_user.id]
        return self.mapper.many(rows, AgreementOut)

    async def get_overdue_signatures(self, days: int, current_user) -> List[AgreementOut]:
        await self.permission.check_admin(current_user)
        cutoff = utcnow() - timedelta(days=days)
        return self.mapper.many(
            await self.repo.find_overdue_signatures(cutoff), AgreementOut
        )

    async def search(self, params: PageParams, current_user, **filters):
        await self.permission.check_admin(current_user)
        filters = {
            k: naive_utc(v) if isinstance(v, datetime) else v for k, v in filters.items()
        }
        ensure_range(filters.get("min_deposit"), filters.get("max_deposit"), field="deposit")
        for name in ("start", "end", "signed", "created"):
            ensure_range(
                filters.get(f"{name}_from"), filters.get(f"{name}_to"), field=f"{name} date"
            )
        rows, total = await self.repo.page_search(params, **filters)
        return self.paginate.build(rows, total, params, AgreementOut)

    async def count_by_status(self, status: AgreementStatus, current_user) -> CountOut:
        await self.permission.check_admin(current_user)
        return CountOut(count=await self.repo.count_by_status(status))
