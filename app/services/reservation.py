import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

import app.repositories.client as client_repo
import app.repositories.contract as contract_repo
import app.repositories.vehicle as vehicle_repo
from app.core.config import settings
from app.core.locking import vehicle_locks
from app.db.models.contract import Contract as ContractModel
from app.db.models.vehicle import Vehicle as VehicleModel
from app.domain import contract_lifecycle
from app.domain.availability import (
    VEHICLE_UNAVAILABLE,
    AvailabilityDay,
    AvailabilityIndex,
    ContractSpan,
)
from app.domain.contract_lifecycle import EXTENDABLE_STATUSES, ContractStatus, PaymentStatus
from app.domain.date_range import DateRange, to_calendar_date
from app.domain.deposit import DepositPolicy
from app.domain.pricing import Accessory, calculate_price
from app.errors import (
    ConcurrencyConflictError,
    ContractNotEditableError,
    DomainValidationError,
    ExcessiveDurationError,
    InvalidPriceError,
    InvalidRangeError,
    NotFoundError,
    PastStartDateError,
    VehicleUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityCheck:
    available: bool
    vehicle_unavailable: bool = False
    conflicting_contracts: list[ContractSpan] = field(default_factory=list)


def _deposit_policy() -> DepositPolicy:
    return DepositPolicy(rate=settings.reservation_deposit_rate)


def validate_booking_range(date_range: DateRange, today: date | None = None) -> None:
    """
    Business rules a range must satisfy to be booked, on top of DateRange's own.

    Raises:
        PastStartDateError: If the range starts before today
        ExcessiveDurationError: If the range spans more than the configured maximum
    """
    today = today or date.today()
    if date_range.start < today:
        raise PastStartDateError(
            f"Start date ({date_range.start.isoformat()}) cannot be in the past"
        )
    max_days = settings.reservation_max_duration_days
    if date_range.duration_days > max_days:
        raise ExcessiveDurationError(
            f"Contract duration cannot exceed {max_days} days ({date_range.duration_days} requested)"
        )


def _get_vehicle_or_raise(
    db: Session, vehicle_id: int, for_update: bool = False
) -> VehicleModel:
    vehicle = vehicle_repo.get_vehicle_by_id(db, vehicle_id, for_update=for_update)
    if not vehicle:
        raise NotFoundError(f"Vehicle with id {vehicle_id} not found")
    return vehicle


def _build_index(
    db: Session, vehicle_id: int, exclude_contract_id: int | None = None
) -> AvailabilityIndex:
    contracts = contract_repo.get_contracts_for_vehicle(db, vehicle_id)
    return AvailabilityIndex.build(
        vehicle_id, contracts, exclude_contract_id=exclude_contract_id
    )


def _raise_conflict(vehicle_id: int, date_range: DateRange, conflicts: list[ContractSpan]):
    logger.warning(
        "Vehicle %s unavailable for %s: conflicts with contracts %s",
        vehicle_id,
        date_range,
        [c.id for c in conflicts],
    )
    raise VehicleUnavailableError(
        f"Vehicle {vehicle_id} is not available from {date_range.start.isoformat()} "
        f"to {date_range.end.isoformat()}",
        conflicting_contracts=conflicts,
    )


@contextmanager
def _unit_of_work(db: Session) -> Iterator[None]:
    """Roll back on any failure so no partial contract or stale row lock survives."""
    try:
        yield
    except OperationalError as e:
        db.rollback()
        logger.warning("Database contention while writing contract: %s", e)
        raise ConcurrencyConflictError(
            "The reservation could not be saved due to concurrent activity, please retry"
        ) from e
    except Exception:
        db.rollback()
        raise


def get_contract(db: Session, contract_id: int) -> ContractModel:
    contract = contract_repo.get_contract_by_id(db, contract_id)
    if not contract:
        raise NotFoundError("Contract not found")
    return contract


def check_availability(
    db: Session,
    vehicle_id: int,
    date_range: DateRange,
    exclude_contract_id: int | None = None,
) -> AvailabilityCheck:
    """
    Advisory availability check used by the UI before submitting a booking.

    Does not take the vehicle's booking lock: create_contract remains the
    final authority. ``available`` combines the calendar with the vehicle's
    operational state.
    """
    vehicle = _get_vehicle_or_raise(db, vehicle_id)
    index = _build_index(db, vehicle_id, exclude_contract_id=exclude_contract_id)
    return AvailabilityCheck(
        available=vehicle.is_operational and index.is_range_available(date_range),
        vehicle_unavailable=not vehicle.is_operational,
        conflicting_contracts=index.conflicting_contracts(date_range),
    )


def _apply_vehicle_state(
    vehicle: VehicleModel, days: list[AvailabilityDay]
) -> list[AvailabilityDay]:
    if vehicle.is_operational:
        return days
    return [replace(day, available=False, reason=VEHICLE_UNAVAILABLE) for day in days]


def get_month_view(
    db: Session, vehicle_id: int, year: int, month: int
) -> list[AvailabilityDay]:
    """Day-by-day availability of a vehicle for one calendar month."""
    vehicle = _get_vehicle_or_raise(db, vehicle_id)
    days = _build_index(db, vehicle_id).month_view(year, month)
    return _apply_vehicle_state(vehicle, days)


def get_range_view(
    db: Session, vehicle_id: int, date_range: DateRange
) -> list[AvailabilityDay]:
    """Day-by-day availability of a vehicle over an arbitrary range."""
    max_days = settings.reservation_max_duration_days
    if date_range.duration_days > max_days:
        raise ExcessiveDurationError(f"Calendar range cannot exceed {max_days} days")
    vehicle = _get_vehicle_or_raise(db, vehicle_id)
    days = _build_index(db, vehicle_id).range_view(date_range)
    return _apply_vehicle_state(vehicle, days)


def create_contract(
    db: Session,
    vehicle_id: int,
    client_id: int,
    date_range: DateRange,
    accessories: Sequence[Accessory] = (),
    daily_rate: int | None = None,
    manual_total_override: int | None = None,
    notes: str | None = None,
    today: date | None = None,
) -> ContractModel:
    """
    Book a vehicle. The only way contracts come into existence.

    - Validates the range (not in the past, not longer than the maximum)
    - Validates vehicle and client exist
    - Snapshots the vehicle's daily rate unless one is given
    - Rejects the booking if the vehicle is out of service or any day of the
      range is covered by a non-cancelled contract
    - Prices the rental, applies a positive manual total if given, and derives
      the deposit from the deposit policy
    - Persists the contract as PENDING / payment PENDING

    The availability check and the insert run inside the vehicle's exclusion
    domain, so two overlapping bookings for the same vehicle can never both
    succeed. Bookings for different vehicles do not block each other.

    Raises:
        PastStartDateError, ExcessiveDurationError: If the range is not bookable
        NotFoundError: If vehicle or client doesn't exist
        InvalidRateError, InvalidAccessoryError: If pricing inputs are invalid
        VehicleUnavailableError: If the vehicle can't be booked for the range
        ConcurrencyConflictError: If the vehicle lock or a database lock times out
    """
    validate_booking_range(date_range, today=today)
    for accessory in accessories:
        accessory.validate()
    # Unknown vehicles never get a lock entry
    _get_vehicle_or_raise(db, vehicle_id)

    with vehicle_locks.hold(vehicle_id, settings.reservation_lock_timeout_seconds):
        with _unit_of_work(db):
            vehicle = _get_vehicle_or_raise(db, vehicle_id, for_update=True)
            if not client_repo.client_exists(db, client_id):
                raise NotFoundError(f"Client with id {client_id} not found")

            if not vehicle.is_operational:
                logger.warning("Vehicle %s is not operational, booking rejected", vehicle_id)
                raise VehicleUnavailableError(
                    f"Vehicle {vehicle_id} is currently out of service",
                    vehicle_unavailable=True,
                )

            index = _build_index(db, vehicle_id)
            if not index.is_range_available(date_range):
                _raise_conflict(vehicle_id, date_range, index.conflicting_contracts(date_range))

            rate = daily_rate if daily_rate is not None else vehicle.daily_rate
            quote = calculate_price(rate, date_range, accessories)
            if manual_total_override is not None and manual_total_override > 0:
                total_price = manual_total_override
            else:
                total_price = quote.total_price
            deposit = _deposit_policy().deposit_for(total_price)

            try:
                contract = contract_repo.create_contract(
                    db,
                    vehicle_id=vehicle_id,
                    client_id=client_id,
                    start_date=date_range.start,
                    end_date=date_range.end,
                    daily_rate=rate,
                    total_price=total_price,
                    deposit=deposit,
                    status=contract_lifecycle.INITIAL_STATUS.value,
                    payment_status=contract_lifecycle.INITIAL_PAYMENT_STATUS.value,
                    accessories=accessories,
                    notes=notes,
                )
            except IntegrityError:
                # Storage-level overlap guard fired: another writer won the race.
                db.rollback()
                conflicts = _build_index(db, vehicle_id).conflicting_contracts(date_range)
                if conflicts:
                    _raise_conflict(vehicle_id, date_range, conflicts)
                raise

    logger.info(
        "Created contract %s for vehicle %s (%s), total %s, deposit %s",
        contract.id,
        vehicle_id,
        date_range,
        contract.total_price,
        contract.deposit,
    )
    return contract


def _ensure_pending(contract: ContractModel) -> None:
    if ContractStatus(contract.status) != ContractStatus.PENDING:
        raise ContractNotEditableError(
            f"Contract {contract.id} is {contract.status} and can no longer be edited"
        )


def _plan_update(
    contract: ContractModel, update_fields: dict, today: date | None
) -> tuple[dict, DateRange | None]:
    """Work out the column changes of a pending edit from the locked row."""
    current_range = DateRange(contract.start_date, contract.end_date)
    new_range = DateRange(
        update_fields.get("start_date") or contract.start_date,
        update_fields.get("end_date") or contract.end_date,
    )
    range_changed = new_range != current_range
    if range_changed:
        validate_booking_range(new_range, today=today)

    accessories_given = update_fields.get("accessories") is not None
    if accessories_given:
        accessories = list(update_fields["accessories"])
    else:
        accessories = [
            Accessory(a.name, a.unit_price_per_day, a.quantity)
            for a in contract.accessories
        ]

    update_dict = {}
    if range_changed:
        update_dict["start_date"] = new_range.start
        update_dict["end_date"] = new_range.end
    if accessories_given:
        update_dict["accessories"] = accessories
    if "notes" in update_fields:
        update_dict["notes"] = update_fields["notes"]

    total_price = contract.total_price
    if update_fields.get("total_price") is not None:
        total_price = update_fields["total_price"]
        if total_price <= 0:
            raise InvalidPriceError("Total price must be greater than 0")
        update_dict["total_price"] = total_price
    elif range_changed or accessories_given:
        total_price = calculate_price(contract.daily_rate, new_range, accessories).total_price
        update_dict["total_price"] = total_price

    if update_fields.get("deposit") is not None:
        deposit = update_fields["deposit"]
        if not DepositPolicy.is_valid(deposit, total_price):
            raise InvalidPriceError("Deposit must be between 0 and the total price")
        update_dict["deposit"] = deposit
    elif total_price != contract.total_price:
        update_dict["deposit"] = _deposit_policy().deposit_for(total_price)

    return update_dict, new_range if range_changed else None


def update_contract(
    db: Session,
    contract_id: int,
    today: date | None = None,
    **update_fields,
) -> ContractModel:
    """
    Edit a contract before it is confirmed.

    Accepted fields: start_date, end_date, accessories, total_price, deposit, notes.

    - Only PENDING contracts are editable
    - A new range is re-validated and re-checked for availability (ignoring
      the contract itself) inside the vehicle's exclusion domain
    - Price is recomputed from the stored daily rate snapshot when the range
      or accessories change, unless an explicit total_price (> 0) is given
    - An explicit deposit must stay within [0, total_price]; otherwise the
      deposit policy is re-applied whenever the total changes

    Only fields explicitly provided in update_fields will be updated. Prices
    are derived from the row as re-read under the lock.

    Raises:
        NotFoundError: If contract doesn't exist
        ContractNotEditableError: If the contract is no longer PENDING
        InvalidAccessoryError: If any new accessory is invalid
        InvalidPriceError: If total_price or deposit break the price invariants
        VehicleUnavailableError: If the new range conflicts with another contract
    """
    existing = get_contract(db, contract_id)
    _ensure_pending(existing)
    if update_fields.get("accessories") is not None:
        for accessory in update_fields["accessories"]:
            accessory.validate()

    vehicle_id = existing.vehicle_id
    with vehicle_locks.hold(vehicle_id, settings.reservation_lock_timeout_seconds):
        with _unit_of_work(db):
            _get_vehicle_or_raise(db, vehicle_id, for_update=True)
            contract = contract_repo.get_contract_by_id(db, contract_id, for_update=True)
            # A concurrent confirmation or edit may have landed since the first read
            _ensure_pending(contract)
            update_dict, new_range = _plan_update(contract, update_fields, today)
            if new_range is not None:
                index = _build_index(db, vehicle_id, exclude_contract_id=contract_id)
                if not index.is_range_available(new_range):
                    _raise_conflict(vehicle_id, new_range, index.conflicting_contracts(new_range))
            contract = contract_repo.update_contract(db, contract_id=contract_id, **update_dict)

    logger.info("Updated pending contract %s: %s", contract_id, sorted(update_dict))
    return contract


def extend_contract(
    db: Session,
    contract_id: int,
    new_end_date: date,
    additional_price: int | None = None,
    today: date | None = None,
) -> ContractModel:
    """
    Push back the end date of a confirmed or active rental.

    The extra days must be free (the contract itself is ignored). Their price
    is added to the total: the given ``additional_price`` if any, otherwise
    the stored daily rate and accessories over the extra days. The deposit
    already agreed is left untouched.

    Raises:
        NotFoundError: If contract doesn't exist
        ContractNotEditableError: If the contract is not CONFIRMED or ACTIVE
        InvalidRangeError: If the new end date is not after the current one or is in the past
        ExcessiveDurationError: If the extended rental exceeds the maximum duration
        InvalidPriceError: If additional_price is negative
        VehicleUnavailableError: If the extra days are booked
    """
    new_end_date = to_calendar_date(new_end_date, "New end date")
    today = today or date.today()
    if new_end_date < today:
        raise InvalidRangeError(
            f"New end date ({new_end_date.isoformat()}) cannot be in the past"
        )
    if additional_price is not None and additional_price < 0:
        raise InvalidPriceError("Additional price cannot be negative")

    existing = get_contract(db, contract_id)
    vehicle_id = existing.vehicle_id
    with vehicle_locks.hold(vehicle_id, settings.reservation_lock_timeout_seconds):
        with _unit_of_work(db):
            _get_vehicle_or_raise(db, vehicle_id, for_update=True)
            contract = contract_repo.get_contract_by_id(db, contract_id, for_update=True)
            status = ContractStatus(contract.status)
            if status not in EXTENDABLE_STATUSES:
                raise ContractNotEditableError(
                    f"Contract {contract_id} is {contract.status}; only confirmed or "
                    "active contracts can be extended"
                )
            if new_end_date <= contract.end_date:
                raise InvalidRangeError(
                    f"New end date ({new_end_date.isoformat()}) must be after the "
                    f"current end date ({contract.end_date.isoformat()})"
                )
            extended = DateRange(contract.start_date, new_end_date)
            max_days = settings.reservation_max_duration_days
            if extended.duration_days > max_days:
                raise ExcessiveDurationError(
                    f"Contract duration cannot exceed {max_days} days "
                    f"({extended.duration_days} requested)"
                )

            index = _build_index(db, vehicle_id, exclude_contract_id=contract_id)
            if not index.is_range_available(extended):
                _raise_conflict(vehicle_id, extended, index.conflicting_contracts(extended))

            if additional_price is None:
                accessories = [
                    Accessory(a.name, a.unit_price_per_day, a.quantity)
                    for a in contract.accessories
                ]
                # Billed days between the old and new end dates
                additional_price = calculate_price(
                    contract.daily_rate,
                    DateRange(contract.end_date, new_end_date),
                    accessories,
                ).total_price
            previous_end = contract.end_date
            contract = contract_repo.update_contract(
                db,
                contract_id=contract_id,
                end_date=new_end_date,
                total_price=contract.total_price + additional_price,
            )

    logger.info(
        "Extended contract %s from %s to %s (+%s)",
        contract_id,
        previous_end,
        new_end_date,
        additional_price,
    )
    return contract


def transition_status(
    db: Session,
    contract_id: int,
    new_status: ContractStatus,
    reason: str | None = None,
) -> ContractModel:
    """
    Move a contract along the rental lifecycle.

    A ``reason`` may accompany a cancellation and is stored with the contract.

    Raises:
        NotFoundError: If contract doesn't exist
        IllegalStatusTransitionError: If the transition is not allowed from the current status
        DomainValidationError: If a reason is given for anything but a cancellation
    """
    new_status = ContractStatus(new_status)
    if reason is not None and new_status != ContractStatus.CANCELLED:
        raise DomainValidationError("A reason can only be recorded when cancelling")

    with _unit_of_work(db):
        contract = contract_repo.get_contract_by_id(db, contract_id, for_update=True)
        if not contract:
            raise NotFoundError("Contract not found")
        current = ContractStatus(contract.status)
        target = contract_lifecycle.transition_status(current, new_status)
        changes = {"status": target.value}
        if target == ContractStatus.CANCELLED:
            changes["cancellation_reason"] = reason
        contract = contract_repo.update_contract(db, contract_id=contract_id, **changes)

    logger.info("Contract %s status %s -> %s", contract_id, current.value, target.value)
    return contract


def transition_payment(
    db: Session, contract_id: int, new_payment_status: PaymentStatus
) -> ContractModel:
    """
    Move a contract along the payment lifecycle (independent of rental status).

    Raises:
        NotFoundError: If contract doesn't exist
        IllegalPaymentTransitionError: If the transition is not allowed from the current payment status
    """
    with _unit_of_work(db):
        contract = contract_repo.get_contract_by_id(db, contract_id, for_update=True)
        if not contract:
            raise NotFoundError("Contract not found")
        current = PaymentStatus(contract.payment_status)
        target = contract_lifecycle.transition_payment(current, new_payment_status)
        contract = contract_repo.update_contract(
            db, contract_id=contract_id, payment_status=target.value
        )

    logger.info(
        "Contract %s payment %s -> %s", contract_id, current.value, target.value
    )
    return contract
