from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from typing_extensions import Annotated

from models.enums import (
    AgreementStatus,
    ApplicationStatus,
    ListingStatus,
    ListingType,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    PropertyStatus,
    UserRole,
    UserType,
)
from models.utils import naive_utc

PositiveMoney = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]
NonNegativeMoney = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
UtcDateTime = Annotated[datetime, AfterValidator(naive_utc)]


class ORMOut(BaseModel):
    model_config = {"from_attributes": True}


# Users and auth


class UserBase(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str):
        if not value.strip():
            raise ValueError("Username cannot be empty.")
        if " " in value.strip():
            raise ValueError("Username cannot contain spaces.")
        return value.strip()


class UserProfileFields(BaseModel):
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, max_length=20)
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    company_name: Optional[str] = None
    license_number: Optional[str] = None
    tax_id: Optional[str] = None
    employment_status: Optional[str] = None
    employer_name: Optional[str] = None
    employer_phone: Optional[str] = Field(None, max_length=20)
    monthly_income: Optional[PositiveMoney] = None
    credit_score: Optional[int] = Field(None, ge=300, le=850)
    rental_history: Optional[str] = None


class UserCreate(UserBase, UserProfileFields):
    password: str = Field(
        ..., min_length=6, json_schema_extra={"type": "string", "format": "password"}
    )
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    user_type: Optional[UserType] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        return value.strip() if isinstance(value, str) else value


class UserLoginInput(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(
        ..., min_length=1, json_schema_extra={"type": "string", "format": "password"}
    )


class UserUpdate(UserProfileFields):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=6)


class UserAdminUpdate(UserUpdate):
    role: Optional[UserRole] = None
    user_type: Optional[UserType] = None
    email_verified: Optional[bool] = None
    phone_verified: Optional[bool] = None
    identity_verified: Optional[bool] = None
    landlord_background_check_passed: Optional[bool] = None
    tenant_background_check_passed: Optional[bool] = None


class UserPublicSchema(ORMOut):
    id: uuid.UUID
    username: str
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    user_type: Optional[UserType] = None


class UserOut(UserPublicSchema, UserProfileFields):
    email_verified: bool
    phone_verified: bool
    identity_verified: bool
    landlord_background_check_passed: bool
    tenant_background_check_passed: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LoginData(BaseModel):
    token: str
    token_type: str = "bearer"
    id: uuid.UUID
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[LoginData] = None


# Properties


class PropertyBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    rent_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    security_deposit: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    bedrooms: int = Field(..., gt=0)
    bathrooms: int = Field(..., gt=0)
    square_footage: Optional[int] = Field(None, gt=0)
    property_type: Optional[str] = Field(None, max_length=50)
    furnishing_status: Optional[str] = Field(None, max_length=50)
    amenities: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list)
    available_date: Optional[date] = None
    lease_term_months: Optional[int] = Field(None, gt=0)
    pets_allowed: bool = False
    smoking_allowed: bool = False
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("property_type", "furnishing_status")
    @classmethod
    def upper_labels(cls, v):
        return v.strip().upper() if v else v


class PropertyCreate(PropertyBase):
    landlord_id: Optional[uuid.UUID] = None


class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, min_length=1, max_length=20)
    rent_amount: Optional[PositiveMoney] = None
    security_deposit: Optional[PositiveMoney] = None
    bedrooms: Optional[int] = Field(None, gt=0)
    bathrooms: Optional[int] = Field(None, gt=0)
    square_footage: Optional[int] = Field(None, gt=0)
    property_type: Optional[str] = Field(None, max_length=50)
    furnishing_status: Optional[str] = Field(None, max_length=50)
    amenities: Optional[List[str]] = None
    image_urls: Optional[List[str]] = None
    available_date: Optional[date] = None
    lease_term_months: Optional[int] = Field(None, gt=0)
    pets_allowed: Optional[bool] = None
    smoking_allowed: Optional[bool] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("property_type", "furnishing_status")
    @classmethod
    def upper_labels(cls, v):
        return v.strip().upper() if v else v


class PropertyOut(ORMOut):
    id: uuid.UUID
    landlord_id: uuid.UUID
    title: str
    description: Optional[str] = None
    address: str
    city: str
    state: str
    zip_code: str
    rent_amount: Decimal
    security_deposit: Decimal
    bedrooms: int
    bathrooms: int
    square_footage: Optional[int] = None
    property_type: Optional[str] = None
    furnishing_status: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list)
    available_date: Optional[date] = None
    lease_term_months: Optional[int] = None
    pets_allowed: bool
    smoking_allowed: bool
    status: PropertyStatus
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class PropertyStatusUpdate(BaseModel):
    status: PropertyStatus


# Listings


class ListingCreate(BaseModel):
    property_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    rent_amount: Optional[PositiveMoney] = None
    security_deposit: Optional[PositiveMoney] = None
    available_date: Optional[date] = None
    lease_term_months: Optional[int] = Field(None, gt=0)
    type: ListingType = ListingType.RENT
    expires_at: Optional[UtcDateTime] = None
    is_featured: bool = False
    featured_until: Optional[UtcDateTime] = None


class ListingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    rent_amount: Optional[PositiveMoney] = None
    security_deposit: Optional[PositiveMoney] = None
    available_date: Optional[date] = None
    lease_term_months: Optional[int] = Field(None, gt=0)
    type: Optional[ListingType] = None
    expires_at: Optional[UtcDateTime] = None
    is_featured: Optional[bool] = None
    featured_until: Optional[UtcDateTime] = None


class ListingOut(ORMOut):
    id: uuid.UUID
    property_id: uuid.UUID
    landlord_id: uuid.UUID
    title: str
    description: Optional[str] = None
    rent_amount: Decimal
    security_deposit: Decimal
    available_date: Optional[date] = None
    lease_term_months: Optional[int] = None
    status: ListingStatus
    type: ListingType
    expires_at: Optional[datetime] = None
    featured_until: Optional[datetime] = None
    is_featured: bool
    view_count: int
    created_at: datetime
    updated_at: datetime


class ListingStatusUpdate(BaseModel):
    status: ListingStatus


class ListingFeatureUpdate(BaseModel):
    is_featured: bool
    featured_until: Optional[UtcDateTime] = None


# Applications


class ApplicationFields(BaseModel):
    cover_letter: Optional[str] = None
    monthly_income: Optional[PositiveMoney] = None
    employment_status: Optional[str] = Field(None, max_length=100)
    employer_name: Optional[str] = Field(None, max_length=255)
    employer_phone: Optional[str] = Field(None, max_length=20)
    rental_history: Optional[str] = None
    credit_score: Optional[int] = Field(None, ge=300, le=850)
    pet_types: Optional[str] = Field(None, max_length=255)
    move_in_date: Optional[date] = None
    lease_term_preference: Optional[int] = Field(None, gt=0)
    application_fee: Optional[NonNegativeMoney] = None


class ApplicationCreate(ApplicationFields):
    listing_id: uuid.UUID
    tenant_id: Optional[uuid.UUID] = None
    pets_count: int = Field(0, ge=0)
    occupants_count: int = Field(1, ge=1)


class ApplicationUpdate(ApplicationFields):
    pets_count: Optional[int] = Field(None, ge=0)
    occupants_count: Optional[int] = Field(None, ge=1)


class ApplicationOut(ORMOut):
    id: uuid.UUID
    tenant_id: uuid.UUID
    property_id: uuid.UUID
    listing_id: uuid.UUID
    status: ApplicationStatus
    cover_letter: Optional[str] = None
    monthly_income: Optional[Decimal] = None
    employment_status: Optional[str] = None
    employer_name: Optional[str] = None
    employer_phone: Optional[str] = None
    rental_history: Optional[str] = None
    credit_score: Optional[int] = None
    pets_count: int
    pet_types: Optional[str] = None
    occupants_count: int
    move_in_date: Optional[date] = None
    lease_term_preference: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[uuid.UUID] = None
    rejection_reason: Optional[str] = None
    application_fee: Optional[Decimal] = None
    fee_paid: bool
    created_at: datetime
    updated_at: datetime


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationReview(BaseModel):
    status: ApplicationStatus
    rejection_reason: Optional[str] = None

    @model_validator(mode="after")
    def require_reason_on_reject(self):
        if self.status == ApplicationStatus.REJECTED and not (
            self.rejection_reason and self.rejection_reason.strip()
        ):
            raise ValueError("A rejection reason is required when rejecting.")
        if self.status not in {
            ApplicationStatus.UNDER_REVIEW,
            ApplicationStatus.APPROVED,
            ApplicationStatus.REJECTED,
        }:
            raise ValueError("Review outcome must be UNDER_REVIEW, APPROVED or REJECTED.")
        return self


class ApplicationFeeUpdate(BaseModel):
    fee_paid: bool


class ApplicationValidation(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


# Agreements


class AgreementTerms(BaseModel):
    lease_term_months: Optional[int] = Field(None, gt=0)
    payment_due_day: Optional[int] = Field(None, ge=1, le=31)
    late_fee: Optional[NonNegativeMoney] = None
    pet_deposit: Optional[NonNegativeMoney] = None
    utilities_included: Optional[bool] = None
    utilities_details: Optional[str] = None
    maintenance_responsibility: Optional[str] = None
    pet_policy: Optional[str] = None
    smoking_policy: Optional[str] = None
    guest_policy: Optional[str] = None
    effective_date: Optional[date] = None


class AgreementCreate(AgreementTerms):
    application_id: uuid.UUID
    agreement_number: Optional[str] = Field(None, min_length=1, max_length=50)
    start_date: date
    end_date: Optional[date] = None
    rent_amount: Optional[PositiveMoney] = None
    security_deposit: Optional[PositiveMoney] = None

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, v, info: ValidationInfo):
        start = info.data.get("start_date")
        if v is not None and start is not None and v < start:
            raise ValueError("End date cannot be before start date.")
        return v


class AgreementUpdate(AgreementTerms):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rent_amount: Optional[PositiveMoney] = None
    security_deposit: Optional[PositiveMoney] = None


class AgreementOut(ORMOut):
    id: uuid.UUID
    agreement_number: str
    tenant_id: uuid.UUID
    landlord_id: uuid.UUID
    property_id: uuid.UUID
    application_id: uuid.UUID
    status: AgreementStatus
    start_date: date
    end_date: date
    rent_amount: Decimal
    security_deposit: Decimal
    lease_term_months: Optional[int] = None
    payment_due_day: Optional[int] = None
    late_fee: Optional[Decimal] = None
    pet_deposit: Optional[Decimal] = None
    utilities_included: bool
    utilities_details: Optional[str] = None
    maintenance_responsibility: Optional[str] = None
    pet_policy: Optional[str] = None
    smoking_policy: Optional[str] = None
    guest_policy: Optional[str] = None
    signed_at: Optional[datetime] = None
    signed_by_tenant: bool
    signed_by_landlord: bool
    effective_date: Optional[date] = None
    termination_date: Optional[date] = None
    termination_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AgreementStatusUpdate(BaseModel):
    status: AgreementStatus


class AgreementSign(BaseModel):
    signature: str = Field(..., min_length=1)


class AgreementTerminate(BaseModel):
    reason: str = Field(..., min_length=1)
    termination_date: Optional[date] = None


# Payments


class PaymentCreate(BaseModel):
    property_id: uuid.UUID
    tenant_id: Optional[uuid.UUID] = None
    agreement_id: Optional[uuid.UUID] = None
    payment_reference: Optional[str] = Field(None, min_length=1, max_length=50)
    type: PaymentType
    method: Optional[PaymentMethod] = None
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    late_fee: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    processing_fee: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    payment_date: Optional[UtcDateTime] = None
    due_date: Optional[UtcDateTime] = None
    transaction_id: Optional[str] = Field(None, max_length=100)
    card_last_four: Optional[str] = Field(None, pattern=r"^\d{4}$")
    bank_account_last_four: Optional[str] = Field(None, pattern=r"^\d{4}$")
    payment_description: Optional[str] = None


class PaymentUpdate(BaseModel):
    version: Optional[int] = Field(
        None, ge=0, description="Version last read by the client"
    )
    type: Optional[PaymentType] = None
    method: Optional[PaymentMethod] = None
    amount: Optional[PositiveMoney] = None
    late_fee: Optional[NonNegativeMoney] = None
    processing_fee: Optional[NonNegativeMoney] = None
    payment_date: Optional[UtcDateTime] = None
    due_date: Optional[UtcDateTime] = None
    transaction_id: Optional[str] = Field(None, max_length=100)
    card_last_four: Optional[str] = Field(None, pattern=r"^\d{4}$")
    bank_account_last_four: Optional[str] = Field(None, pattern=r"^\d{4}$")
    payment_description: Optional[str] = None


class PaymentOut(ORMOut):
    id: uuid.UUID
    payment_reference: str
    tenant_id: uuid.UUID
    landlord_id: uuid.UUID
    property_id: uuid.UUID
    agreement_id: Optional[uuid.UUID] = None
    type: PaymentType
    status: PaymentStatus
    method: Optional[PaymentMethod] = None
    amount: Decimal
    late_fee: Decimal
    processing_fee: Decimal
    total_amount: Decimal
    payment_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    transaction_id: Optional[str] = None
    card_last_four: Optional[str] = None
    bank_account_last_four: Optional[str] = None
    payment_description: Optional[str] = None
    failure_reason: Optional[str] = None
    retry_count: int
    next_retry_at: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    version: Optional[int] = Field(None, ge=0)


class PaymentFailure(BaseModel):
    reason: str = Field(..., min_length=1)
    version: Optional[int] = Field(None, ge=0)


# Aggregates


class CountOut(BaseModel):
    count: int


class SumOut(BaseModel):
    total: Decimal


class DashboardSummary(BaseModel):
    role: UserRole
    properties: int = 0
    available_properties: int = 0
    listings: int = 0
    active_listings: int = 0
    applications: int = 0
    pending_applications: int = 0
    agreements: int = 0
    active_agreements: int = 0
    payments: int = 0
    pending_payments: int = 0
    overdue_payments: int = 0
    completed_payment_total: Decimal = Decimal("0")
    users: Optional[int] = None
