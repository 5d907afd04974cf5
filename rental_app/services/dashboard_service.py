from core.check_permission import CheckRolePermission
from models.enums import (
    AgreementStatus,
    ApplicationStatus,
    PaymentStatus,
    PropertyStatus,
    UserRole,
)
from repos.agreement_repo import AgreementRepo
from repos.application_repo import ApplicationRepo
from repos.listing_repo import ListingRepo
from repos.payment_repo import PaymentRepo
from repos.property_repo import PropertyRepo
from repos.user_repo import UserRepo
from schemas.schema import DashboardSummary


class DashboardService:
    """Role-aware summary counts for the signed-in user."""

    def __init__(self, db):
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.listing_repo: ListingRepo = ListingRepo(db)
        self.application_repo: ApplicationRepo = ApplicationRepo(db)
        self.agreement_repo: AgreementRepo = AgreementRepo(db)
        self.payment_repo: PaymentRepo = PaymentRepo(db)
        self.user_repo: UserRepo = UserRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()

    async def summary(self, current_user) -> DashboardSummary:
        await self.permission.check_authenticated(current_user)
        if current_user.role == UserRole.ADMIN:
            return await self.admin_summary()
        if current_user.role == UserRole.LANDLORD:
            return await self.landlord_summary(current_user.id)
        return await self.tenant_summary(current_user)

    async def admin_summary(self) -> DashboardSummary:
        return DashboardSummary(
            role=UserRole.ADMIN,
            properties=await self.property_repo.count_all(),
            available_properties=await self.property_repo.count_by_status(
                PropertyStatus.AVAILABLE
            ),
            listings=await self.listing_repo.count_all(),
            active_listings=await self.listing_repo.count_active(),
            applications=await self.application_repo.count_all(),
            pending_applications=await self.application_repo.count_by_status(
                ApplicationStatus.PENDING
            ),
            agreements=await self.agreement_repo.count_all(),
            active_agreements=await self.agreement_repo.count_by_status(
                AgreementStatus.ACTIVE
            ),
            payments=await self.payment_repo.count_all(),
            pending_payments=await self.payment_repo.count_by_status(
                PaymentStatus.PENDING
            ),
            overdue_payments=await self.payment_repo.count_overdue(),
            completed_payment_total=await self.payment_repo.sum_amount(
                status=PaymentStatus.COMPLETED
            ),
            users=await self.user_repo.count_all(),
        )

    async def landlord_summary(self, landlord_id) -> DashboardSummary:
        return DashboardSummary(
            role=UserRole.LANDLORD,
            properties=await self.property_repo.count_by_landlord(landlord_id),
            available_properties=await self.property_repo.count_by_landlord_and_status(
                landlord_id, PropertyStatus.AVAILABLE
            ),
            listings=await self.listing_repo.count_by_landlord(landlord_id),
            active_listings=await self.listing_repo.count_active_by_landlord(
                landlord_id
            ),
            applications=await self.application_repo.count_by_landlord(landlord_id),
            pending_applications=await self.application_repo.count_by_landlord(
                landlord_id, ApplicationStatus.PENDING
            ),
            agreements=await self.agreement_repo.count_by_landlord(landlord_id),
            active_agreements=await self.agreement_repo.count_by_landlord(
                landlord_id, AgreementStatus.ACTIVE
            ),
            payments=await self.payment_repo.count_by_landlord(landlord_id),
            pending_payments=await self.payment_repo.count_by_landlord(
                landlord_id, PaymentStatus.PENDING
            ),
            overdue_payments=await self.payment_repo.count_overdue(
                landlord_id=landlord_id
            ),
            completed_payment_total=await self.payment_repo.sum_amount(
                status=PaymentStatus.COMPLETED, landlord_id=landlord_id
            ),
        )

    async def tenant_summary(self, current_user) -> DashboardSummary:
        tenant_id = current_user.id
        return DashboardSummary(
            role=current_user.role,
            applications=await self.application_repo.count_by_tenant(tenant_id),
            agreements=await self.agreement_repo.count_by_tenant(tenant_id),
            active_agreements=await self.agreement_repo.count_by_tenant(
                tenant_id, AgreementStatus.ACTIVE
            ),
            payments=await self.payment_repo.count_by_tenant(tenant_id),
            pending_payments=await self.payment_repo.count_by_tenant(
                tenant_id, PaymentStatus.PENDING
            ),
            overdue_payments=await self.payment_repo.count_overdue(tenant_id=tenant_id),
            completed_payment_total=await self.payment_repo.sum_amount(
                status=PaymentStatus.COMPLETED, tenant_id=tenant_id
            ),
        )
