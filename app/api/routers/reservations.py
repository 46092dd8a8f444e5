from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
import app.repositories.contract as contract_repo
from app.domain.contract_lifecycle import ContractStatus, PaymentStatus
from app.domain.date_range import DateRange
from app.schemas.pagination import PaginatedResponse
from app.schemas.reservation import (
    Contract,
    ContractStats,
    PaymentUpdate,
    ReservationCreate,
    ReservationExtend,
    ReservationUpdate,
    StatusUpdate,
)
from app.services import reservation as reservation_service
from app.services.contract_stats import get_contract_stats

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", response_model=Contract, status_code=status.HTTP_201_CREATED)
def create_reservation(
    reservation_data: ReservationCreate,
    db: Session = Depends(get_db),
):
    """
    Book a vehicle for an inclusive date range.

    Fails with VEHICLE_UNAVAILABLE (409) and the conflicting contracts when
    any requested day is already booked.
    """
    contract = reservation_service.create_contract(
        db,
        vehicle_id=reservation_data.vehicle_id,
        client_id=reservation_data.client_id,
        date_range=DateRange(reservation_data.start_date, reservation_data.end_date),
        accessories=[a.to_domain() for a in reservation_data.accessories],
        daily_rate=reservation_data.daily_rate,
        manual_total_override=reservation_data.manual_total,
        notes=reservation_data.notes,
    )
    return Contract.model_validate(contract)


@router.get("", response_model=PaginatedResponse[Contract])
def get_all_reservations(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    vehicle_id: int | None = Query(None, description="Filter by vehicle ID"),
    client_id: int | None = Query(None, description="Filter by client ID"),
    status: ContractStatus | None = Query(None, description="Filter by rental status"),
    payment_status: PaymentStatus | None = Query(
        None, description="Filter by payment status"
    ),
    db: Session = Depends(get_db),
):
    """
    Get all reservations with pagination and optional filters, latest start date first.
    """
    contracts, total = contract_repo.get_all_contracts_paginated(
        db,
        page=page,
        page_size=page_size,
        vehicle_id=vehicle_id,
        client_id=client_id,
        status=status.value if status else None,
        payment_status=payment_status.value if payment_status else None,
    )

    return PaginatedResponse(
        items=[Contract.model_validate(contract) for contract in contracts],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/stats", response_model=ContractStats)
def get_reservation_stats(db: Session = Depends(get_db)):
    """Counts per status and revenue figures for the dashboard."""
    return ContractStats.model_validate(get_contract_stats(db))


@router.get("/{contract_id}", response_model=Contract)
def get_reservation_by_id(
    contract_id: int,
    db: Session = Depends(get_db),
):
    contract = reservation_service.get_contract(db, contract_id)
    return Contract.model_validate(contract)


@router.put("/{contract_id}", response_model=Contract)
def update_reservation_by_id(
    contract_id: int,
    reservation_data: ReservationUpdate,
    db: Session = Depends(get_db),
):
    """
    Edit a reservation that is still PENDING.

    Fields not included in the request are not updated.
    """
    update_data = reservation_data.model_dump(exclude_unset=True)
    if reservation_data.accessories is not None:
        update_data["accessories"] = [a.to_domain() for a in reservation_data.accessories]
    contract = reservation_service.update_contract(db, contract_id=contract_id, **update_data)
    return Contract.model_validate(contract)


@router.put("/{contract_id}/status", response_model=Contract)
def update_reservation_status(
    contract_id: int,
    status_data: StatusUpdate,
    db: Session = Depends(get_db),
):
    """
    Move a reservation along PENDING -> CONFIRMED -> ACTIVE -> COMPLETED,
    or cancel it before it becomes ACTIVE.
    A reason may be given when cancelling.
    """
    contract = reservation_service.transition_status(
        db, contract_id, status_data.status, reason=status_data.reason
    )
    return Contract.model_validate(contract)


@router.put("/{contract_id}/payment", response_model=Contract)
def update_reservation_payment(
    contract_id: int,
    payment_data: PaymentUpdate,
    db: Session = Depends(get_db),
):
    """
    Record payment progress: PENDING -> PARTIAL -> PAID, or REFUNDED from any
    non-refunded state.
    """
    contract = reservation_service.transition_payment(
        db, contract_id, payment_data.payment_status
    )
    return Contract.model_validate(contract)


@router.post("/{contract_id}/extend", response_model=Contract)
def extend_reservation(
    contract_id: int,
    extend_data: ReservationExtend,
    db: Session = Depends(get_db),
):
    """
    Push back the end date of a CONFIRMED or ACTIVE reservation, if the extra
    days are free. The extra days' price is added to the total.
    """
    contract = reservation_service.extend_contract(
        db,
        contract_id,
        new_end_date=extend_data.new_end_date,
        additional_price=extend_data.additional_price,
    )
    return Contract.model_validate(contract)
