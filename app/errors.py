"""Custom domain exceptions for the reservation engine."""

# Stable, machine-readable error codes for API consumers.
NOT_FOUND = "NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_RANGE = "INVALID_RANGE"
PAST_START_DATE = "PAST_START_DATE"
EXCESSIVE_DURATION = "EXCESSIVE_DURATION"
INVALID_RATE = "INVALID_RATE"
INVALID_ACCESSORY = "INVALID_ACCESSORY"
INVALID_PRICE = "INVALID_PRICE"
VEHICLE_UNAVAILABLE = "VEHICLE_UNAVAILABLE"
ILLEGAL_STATUS_TRANSITION = "ILLEGAL_STATUS_TRANSITION"
ILLEGAL_PAYMENT_TRANSITION = "ILLEGAL_PAYMENT_TRANSITION"
CONTRACT_NOT_EDITABLE = "CONTRACT_NOT_EDITABLE"
CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    code: str = VALIDATION_ERROR


class NotFoundError(DomainError):
    """Raised when a requested contract, vehicle or client does not exist."""

    code = NOT_FOUND


class DomainValidationError(DomainError):
    """Raised when business rules or domain validation fail (e.g. invalid dates, missing required fields)."""

    code = VALIDATION_ERROR


class InvalidRangeError(DomainValidationError):
    """Raised when a date range has an invalid endpoint or ends before it starts."""

    code = INVALID_RANGE


class PastStartDateError(DomainValidationError):
    code = PAST_START_DATE


class ExcessiveDurationError(DomainValidationError):
    code = EXCESSIVE_DURATION


class InvalidRateError(DomainValidationError):
    code = INVALID_RATE


class InvalidAccessoryError(DomainValidationError):
    code = INVALID_ACCESSORY


class InvalidPriceError(DomainValidationError):
    """Raised when a manual total or deposit breaks the price invariants."""

    code = INVALID_PRICE


class VehicleUnavailableError(DomainError):
    """Raised when a vehicle cannot be booked for the requested range.

    Carries the conflicting contracts so callers can explain which dates are
    blocked. ``vehicle_unavailable`` is set when the vehicle itself is out of
    service, independently of any booking.
    """

    code = VEHICLE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        conflicting_contracts: list | None = None,
        vehicle_unavailable: bool = False,
    ):
        super().__init__(message)
        self.conflicting_contracts = list(conflicting_contracts or [])
        self.vehicle_unavailable = vehicle_unavailable


class IllegalStatusTransitionError(DomainError):
    code = ILLEGAL_STATUS_TRANSITION

    def __init__(self, current, requested):
        super().__init__(
            f"Cannot transition contract status from {current.value} to {requested.value}"
        )
        self.current = current
        self.requested = requested


class IllegalPaymentTransitionError(DomainError):
    code = ILLEGAL_PAYMENT_TRANSITION

    def __init__(self, current, requested):
        super().__init__(
            f"Cannot transition payment status from {current.value} to {requested.value}"
        )
        self.current = current
        self.requested = requested


class ContractNotEditableError(DomainError):
    """Raised when editing fields of a contract that is no longer pending."""

    code = CONTRACT_NOT_EDITABLE


class ConcurrencyConflictError(DomainError):
    """Raised when the per-vehicle exclusion domain or a row lock cannot be acquired."""

    code = CONCURRENCY_CONFLICT
