from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    TENANT = "TENANT"
    LANDLORD = "LANDLORD"
    ADMIN = "ADMIN"


class UserType(str, Enum):
    LANDLORD = "LANDLORD"
    TENANT = "TENANT"
    ADMIN = "ADMIN"


class PropertyStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"
    UNDER_MAINTENANCE = "UNDER_MAINTENANCE"
    OFF_MARKET = "OFF_MARKET"


class ListingStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"
    RENTED = "RENTED"


class ListingType(str, Enum):
    RENT = "RENT"
    SALE = "SALE"
    SUBLET = "SUBLET"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class AgreementStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_SIGNATURE = "PENDING_SIGNATURE"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    TERMINATED = "TERMINATED"
    RENEWED = "RENEWED"


class PaymentType(str, Enum):
    RENT = "RENT"
    SECURITY_DEPOSIT = "SECURITY_DEPOSIT"
    PET_DEPOSIT = "PET_DEPOSIT"
    LATE_FEE = "LATE_FEE"
    UTILITY = "UTILITY"
    MAINTENANCE = "MAINTENANCE"
    APPLICATION_FEE = "APPLICATION_FEE"
    OTHER = "OTHER"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    CASH = "CASH"
    CHECK = "CHECK"
    DIGITAL_WALLET = "DIGITAL_WALLET"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# self-registration never grants ADMIN
USER_TYPE_TO_ROLE = {
    UserType.LANDLORD: UserRole.LANDLORD,
    UserType.TENANT: UserRole.TENANT,
}
