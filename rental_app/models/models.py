import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from bcrypt import checkpw, gensalt, hashpw
from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from core.get_db import Base

from .enums import (
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
from .utils import utcnow


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False), nullable=False, default=UserRole.USER
    )
    user_type: Mapped[Optional[UserType]] = mapped_column(
        Enum(UserType, native_enum=False), nullable=True
    )

    phone: Mapped[Optional[str]] = mapped_column(String(20))
    address: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    state: Mapped[Optional[str]] = mapped_column(String(100))
    zip_code: Mapped[Optional[str]] = mapped_column(String(20))
    profile_image: Mapped[Optional[str]] = mapped_column(String(500))
    bio: Mapped[Optional[str]] = mapped_column(Text)

    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    phone_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    identity_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    company_name: Mapped[Optional[str]] = mapped_column(String(255))
    license_number: Mapped[Optional[str]] = mapped_column(String(100))
    tax_id: Mapped[Optional[str]] = mapped_column(String(100))
    landlord_background_check_passed: Mapped[bool] = mapped_column(
        Boolean, default=False
    )

    employment_status: Mapped[Optional[str]] = mapped_column(String(100))
    employer_name: Mapped[Optional[str]] = mapped_column(String(255))
    employer_phone: Mapped[Optional[str]] = mapped_column(String(20))
    monthly_income: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    credit_score: Mapped[Optional[int]] = mapped_column(Integer)
    rental_history: Mapped[Optional[str]] = mapped_column(Text)
    tenant_background_check_passed: Mapped[bool] = mapped_column(
        Boolean, default=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    properties: Mapped[List["Property"]] = relationship(
        "Property",
        back_populates="landlord",
        cascade="all",
        passive_deletes=True,
    )
    listings: Mapped[List["Listing"]] = relationship(
        "Listing",
        back_populates="landlord",
        cascade="all",
        passive_deletes=True,
    )
    applications: Mapped[List["Application"]] = relationship(
        "Application",
        back_populates="tenant",
        foreign_keys="Application.tenant_id",
        cascade="all",
        passive_deletes=True,
    )
    tenant_agreements: Mapped[List["Agreement"]] = relationship(
        "Agreement",
        back_populates="tenant",
        foreign_keys="Agreement.tenant_id",
        cascade="all",
        passive_deletes=True,
    )
    landlord_agreements: Mapped[List["Agreement"]] = relationship(
        "Agreement",
        back_populates="landlord",
        foreign_keys="Agreement.landlord_id",
        cascade="all",
        passive_deletes=True,
    )
    tenant_payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="tenant",
        foreign_keys="Payment.tenant_id",
        cascade="all",
        passive_deletes=True,
    )
    landlord_payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="landlord",
        foreign_keys="Payment.landlord_id",
        cascade="all",
        passive_deletes=True,
    )

    def set_password(self, raw_password: str):
        salt = gensalt()
        self.hashed_password = hashpw(raw_password.encode("utf-8"), salt).decode(
            "utf-8"
        )

    def check_password(self, raw_password: str) -> bool:
        return checkpw(
            raw_password.encode("utf-8"), self.hashed_password.encode("utf-8")
        )

    def normalize(self) -> None:
        self.username = self.username.strip()
        self.email = self.email.strip().lower()
        if self.first_name:
            self.first_name = self.first_name.strip().title()
        if self.last_name:
            self.last_name = self.last_name.strip().title()

    def __repr__(self):
        return f"<User {self.username} ({self.id})>"

    @validates("credit_score")
    def validate_credit_score(self, key, value):
        if value is not None and not 300 <= value <= 850:
            raise ValueError("Credit score must be between 300 and 850.")
        return value


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    landlord: Mapped["User"] = relationship("User", back_populates="properties")

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)

    rent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    square_footage: Mapped[Optional[int]] = mapped_column(Integer)

    property_type: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    furnishing_status: Mapped[Optional[str]] = mapped_column(String(50))
    amenities: Mapped[List[str]] = mapped_column(JSON, default=list)
    image_urls: Mapped[List[str]] = mapped_column(JSON, default=list)

    available_date: Mapped[Optional[date]] = mapped_column(Date)
    lease_term_months: Mapped[Optional[int]] = mapped_column(Integer)
    pets_allowed: Mapped[bool] = mapped_column(Boolean, default=False)
    smoking_allowed: Mapped[bool] = mapped_column(Boolean, default=False)

    status: Mapped[PropertyStatus] = mapped_column(
        Enum(PropertyStatus, native_enum=False),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True,
    )
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    listings: Mapped[List["Listing"]] = relationship(
        "Listing",
        back_populates="property",
        cascade="all",
        passive_deletes=True,
    )
    applications: Mapped[List["Application"]] = relationship(
        "Application",
        back_populates="property",
        cascade="all",
        passive_deletes=True,
    )
    agreements: Mapped[List["Agreement"]] = relationship(
        "Agreement",
        back_populates="property",
        cascade="all",
        passive_deletes=True,
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="property",
        cascade="all",
        passive_deletes=True,
    )

    @validates("rent_amount", "security_deposit")
    def validate_amount(self, key, value):
        if value is not None and value <= 0:
            raise ValueError(f"{key} must be positive.")
        return value

    @validates("bedrooms", "bathrooms", "square_footage")
    def validate_counts(self, key, value):
        if value is not None and value <= 0:
            raise ValueError(f"{key} must be positive.")
        return value

    def __repr__(self):
        return f"<Property {self.title} ({self.id})>"


class Listing(Base):
    __tablename__ = "listings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property: Mapped["Property"] = relationship("Property", back_populates="listings")

    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    landlord: Mapped["User"] = relationship("User", back_populates="listings")

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    available_date: Mapped[Optional[date]] = mapped_column(Date)
    lease_term_months: Mapped[Optional[int]] = mapped_column(Integer)

    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus, native_enum=False),
        nullable=False,
        default=ListingStatus.ACTIVE,
        index=True,
    )
    type: Mapped[ListingType] = mapped_column(
        Enum(ListingType, native_enum=False),
        nullable=False,
        default=ListingType.RENT,
    )

    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    featured_until: Mapped[Optional[datetime]] = mapped_column(DateTime)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    applications: Mapped[List["Application"]] = relationship(
        "Application",
        back_populates="listing",
        cascade="all",
        passive_deletes=True,
    )

    @validates("rent_amount", "security_deposit")
    def validate_amount(self, key, value):
        if value is not None and value <= 0:
            raise ValueError(f"{key} must be positive.")
        return value

    def __repr__(self):
        return f"<Listing {self.title} ({self.id})>"


class Application(Base):
    __tablename__ = "applications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant: Mapped["User"] = relationship(
        "User", back_populates="applications", foreign_keys=[tenant_id]
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property: Mapped["Property"] = relationship(
        "Property", back_populates="applications"
    )

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    listing: Mapped["Listing"] = relationship("Listing", back_populates="applications")

    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, native_enum=False),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )

    cover_letter: Mapped[Optional[str]] = mapped_column(Text)
    monthly_income: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    employment_status: Mapped[Optional[str]] = mapped_column(String(100))
    employer_name: Mapped[Optional[str]] = mapped_column(String(255))
    employer_phone: Mapped[Optional[str]] = mapped_column(String(20))
    rental_history: Mapped[Optional[str]] = mapped_column(Text)
    credit_score: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    pets_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pet_types: Mapped[Optional[str]] = mapped_column(String(255))
    occupants_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    move_in_date: Mapped[Optional[date]] = mapped_column(Date)
    lease_term_preference: Mapped[Optional[int]] = mapped_column(Integer)

    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text)

    application_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    fee_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    agreement: Mapped[Optional["Agreement"]] = relationship(
        "Agreement",
        back_populates="application",
        uselist=False,
        cascade="all",
        passive_deletes=True,
    )

    @validates("credit_score")
    def validate_credit_score(self, key, value):
        if value is not None and not 300 <= value <= 850:
            raise ValueError("Credit score must be between 300 and 850.")
        return value

    @validates("monthly_income")
    def validate_income(self, key, value):
        if value is not None and value <= 0:
            raise ValueError("Monthly income must be positive.")
        return value

    @validates("pets_count")
    def validate_pets(self, key, value):
        if value is not None and value < 0:
            raise ValueError("Pets count cannot be negative.")
        return value

    @validates("occupants_count")
    def validate_occupants(self, key, value):
        if value is not None and value < 1:
            raise ValueError("Occupants count must be at least 1.")
        return value


class Agreement(Base):
    __tablename__ = "agreements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    agreement_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant: Mapped["User"] = relationship(
        "User", back_populates="tenant_agreements", foreign_keys=[tenant_id]
    )
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    landlord: Mapped["User"] = relationship(
        "User", back_populates="landlord_agreements", foreign_keys=[landlord_id]
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property: Mapped["Property"] = relationship("Property", back_populates="agreements")
    application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    application: Mapped["Application"] = relationship(
        "Application", back_populates="agreement"
    )

    status: Mapped[AgreementStatus] = mapped_column(
        Enum(AgreementStatus, native_enum=False),
        nullable=False,
        default=AgreementStatus.DRAFT,
        index=True,
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    lease_term_months: Mapped[Optional[int]] = mapped_column(Integer)
    payment_due_day: Mapped[Optional[int]] = mapped_column(Integer)
    late_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    pet_deposit: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    utilities_included: Mapped[bool] = mapped_column(Boolean, default=False)
    utilities_details: Mapped[Optional[str]] = mapped_column(Text)
    maintenance_responsibility: Mapped[Optional[str]] = mapped_column(Text)
    pet_policy: Mapped[Optional[str]] = mapped_column(Text)
    smoking_policy: Mapped[Optional[str]] = mapped_column(Text)
    guest_policy: Mapped[Optional[str]] = mapped_column(Text)

    signed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    signed_by_tenant: Mapped[bool] = mapped_column(Boolean, default=False)
    signed_by_landlord: Mapped[bool] = mapped_column(Boolean, default=False)
    tenant_signature: Mapped[Optional[str]] = mapped_column(Text)
    landlord_signature: Mapped[Optional[str]] = mapped_column(Text)

    effective_date: Mapped[Optional[date]] = mapped_column(Date)
    termination_date: Mapped[Optional[date]] = mapped_column(Date)
    termination_reason: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    payments: Mapped[List["Payment"]] = relationship(
        "Payment", back_populates="agreement", passive_deletes=True
    )

    @validates("rent_amount", "security_deposit")
    def validate_amount(self, key, value):
        if value is not None and value <= 0:
            raise ValueError(f"{key} must be positive.")
        return value

    @validates("late_fee", "pet_deposit")
    def validate_fee(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} cannot be negative.")
        return value

    @validates("payment_due_day")
    def validate_due_day(self, key, value):
        if value is not None and not 1 <= value <= 31:
            raise ValueError("Payment due day must be between 1 and 31.")
        return value

    @hybrid_property
    def fully_signed(self) -> bool:
        return bool(self.signed_by_tenant and self.signed_by_landlord)

    def __repr__(self):
        return f"<Agreement {self.agreement_number} ({self.id})>"


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    payment_reference: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant: Mapped["User"] = relationship(
        "User", back_populates="tenant_payments", foreign_keys=[tenant_id]
    )
    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    landlord: Mapped["User"] = relationship(
        "User", back_populates="landlord_payments", foreign_keys=[landlord_id]
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property: Mapped["Property"] = relationship("Property", back_populates="payments")
    agreement_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("agreements.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    agreement: Mapped[Optional["Agreement"]] = relationship(
        "Agreement", back_populates="payments"
    )

    type: Mapped[PaymentType] = mapped_column(
        Enum(PaymentType, native_enum=False), nullable=False, index=True
    )
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, native_enum=False),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    method: Mapped[Optional[PaymentMethod]] = mapped_column(
        Enum(PaymentMethod, native_enum=False), nullable=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    late_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    processing_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    card_last_four: Mapped[Optional[str]] = mapped_column(String(4))
    bank_account_last_four: Mapped[Optional[str]] = mapped_column(String(4))
    payment_description: Mapped[Optional[str]] = mapped_column(Text)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text)

    retry_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    next_retry_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": lambda current: 0 if current is None else current + 1,
    }

    @validates("amount")
    def validate_amount(self, key, value):
        if value is not None and value <= 0:
            raise ValueError("Payment amount must be positive.")
        return value

    @validates("late_fee", "processing_fee")
    def validate_fee(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} cannot be negative.")
        return value

    def compute_total(self) -> Decimal:
        return (
            Decimal(str(self.amount or 0))
            + Decimal(str(self.late_fee or 0))
            + Decimal(str(self.processing_fee or 0))
        )

    def __repr__(self):
        return f"<Payment {self.payment_reference} v{self.version} ({self.id})>"
