from __future__ import annotations

import enum

from app.errors import IllegalPaymentTransitionError, IllegalStatusTransitionError


class ContractStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


INITIAL_STATUS = ContractStatus.PENDING
INITIAL_PAYMENT_STATUS = PaymentStatus.PENDING

# Rentals whose end date may still be pushed back
EXTENDABLE_STATUSES = frozenset({ContractStatus.CONFIRMED, ContractStatus.ACTIVE})

# Rental status edges. Cancellation is only legal before the rental begins.
STATUS_TRANSITIONS: dict[ContractStatus, frozenset[ContractStatus]] = {
    ContractStatus.PENDING: frozenset({ContractStatus.CONFIRMED, ContractStatus.CANCELLED}),
    ContractStatus.CONFIRMED: frozenset({ContractStatus.ACTIVE, ContractStatus.CANCELLED}),
    ContractStatus.ACTIVE: frozenset({ContractStatus.COMPLETED}),
    ContractStatus.COMPLETED: frozenset(),
    ContractStatus.CANCELLED: frozenset(),
}

# Payment edges. Any non-refunded state may be refunded; PAID never regresses.
PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PARTIAL, PaymentStatus.REFUNDED}),
    PaymentStatus.PARTIAL: frozenset({PaymentStatus.PAID, PaymentStatus.REFUNDED}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


def is_terminal(status: ContractStatus) -> bool:
    return not STATUS_TRANSITIONS[status]


def can_transition_status(current: ContractStatus, requested: ContractStatus) -> bool:
    return requested in STATUS_TRANSITIONS[current]


def can_transition_payment(current: PaymentStatus, requested: PaymentStatus) -> bool:
    return requested in PAYMENT_TRANSITIONS[current]


def transition_status(current: ContractStatus, requested: ContractStatus) -> ContractStatus:
    """Validate a rental status change against the current value.

    Returns the new status; raises IllegalStatusTransitionError naming both
    states otherwise. Holds no state of its own.
    """
    current = ContractStatus(current)
    requested = ContractStatus(requested)
    if not can_transition_status(current, requested):
        raise IllegalStatusTransitionError(current, requested)
    return requested


def transition_payment(current: PaymentStatus, requested: PaymentStatus) -> PaymentStatus:
    """Validate a payment status change. Independent of the rental status."""
    current = PaymentStatus(current)
    requested = PaymentStatus(requested)
    if not can_transition_payment(current, requested):
        raise IllegalPaymentTransitionError(current, requested)
    return requested
