from enum import Enum
from typing import Dict, FrozenSet, Type

from core.errors import ValidationError
from models.enums import (
    AgreementStatus,
    ApplicationStatus,
    ListingStatus,
    PaymentStatus,
    PropertyStatus,
)

A = ApplicationStatus
G = AgreementStatus
P = PaymentStatus

TRANSITIONS: Dict[Type[Enum], Dict[Enum, FrozenSet[Enum]]] = {
    ApplicationStatus: {
        A.PENDING: frozenset({A.UNDER_REVIEW, A.APPROVED, A.REJECTED, A.WITHDRAWN}),
        A.UNDER_REVIEW: frozenset({A.PENDING, A.APPROVED, A.REJECTED, A.WITHDRAWN}),
        A.APPROVED: frozenset({A.WITHDRAWN}),
        A.REJECTED: frozenset(),
        A.WITHDRAWN: frozenset(),
    },
    AgreementStatus: {
        G.DRAFT: frozenset({G.PENDING_SIGNATURE, G.ACTIVE, G.TERMINATED}),
        G.PENDING_SIGNATURE: frozenset({G.DRAFT, G.ACTIVE, G.TERMINATED}),
        G.ACTIVE: frozenset({G.EXPIRED, G.TERMINATED, G.RENEWED}),
        G.EXPIRED: frozenset({G.RENEWED}),
        G.TERMINATED: frozenset(),
        G.RENEWED: frozenset(),
    },
    PaymentStatus: {
        P.PENDING: frozenset({P.PROCESSING, P.COMPLETED, P.FAILED, P.CANCELLED}),
        P.PROCESSING: frozenset({P.COMPLETED, P.FAILED, P.CANCELLED}),
        P.FAILED: frozenset({P.PENDING, P.PROCESSING, P.CANCELLED}),
        P.COMPLETED: frozenset({P.REFUNDED, P.PARTIALLY_REFUNDED}),
        P.PARTIALLY_REFUNDED: frozenset({P.REFUNDED}),
        P.CANCELLED: frozenset(),
        P.REFUNDED: frozenset(),
    },
}

# operational flags, any value may follow any other
UNRESTRICTED = frozenset({PropertyStatus, ListingStatus})


class StatusPolicy:
    @staticmethod
    def can_transition(current: Enum, target: Enum) -> bool:
        if current == target:
            return True
        enum_cls = type(target)
        if enum_cls in UNRESTRICTED:
            return True
        table = TRANSITIONS.get(enum_cls)
        if table is None:
            return False
        return target in table.get(current, frozenset())

    @staticmethod
    def allowed_from(current: Enum) -> FrozenSet[Enum]:
        enum_cls = type(current)
        if enum_cls in UNRESTRICTED:
            return frozenset(enum_cls)
        return TRANSITIONS.get(enum_cls, {}).get(current, frozenset())

    @classmethod
    def ensure(cls, current: Enum, target: Enum, *, entity: str):
        if not cls.can_transition(current, target):
            allowed = ", ".join(sorted(s.value for s in cls.allowed_from(current)))
            raise ValidationError(
                f"Illegal {entity} status transition {current.value} -> {target.value}. "
                f"Allowed: {allowed or 'none (terminal status)'}"
            )
