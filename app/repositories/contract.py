from collections.abc import Sequence
from datetime import date, datetime

from sqlalchemy.orm import Session, selectinload

from app.db.models.contract import Contract as ContractModel
from app.db.models.contract import ContractAccessory as ContractAccessoryModel
from app.domain.contract_lifecycle import ContractStatus
from app.domain.pricing import Accessory
from app.errors import NotFoundError


def get_contract_by_id(
    db: Session, contract_id: int, for_update: bool = False
) -> ContractModel | None:
    """
    Get a contract by ID.

    With for_update=True the row is locked for the current transaction and
    reloaded, so values read earlier in the session are not trusted.
    """
    query = db.query(ContractModel).filter(ContractModel.id == contract_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    return query.first()


def get_all_contracts(db: Session) -> list[ContractModel]:
    """Get all contracts."""
    return db.query(ContractModel).all()


def get_contracts_for_vehicle(
    db: Session, vehicle_id: int, include_cancelled: bool = False
) -> list[ContractModel]:
    """
    Get the contracts of a vehicle, ordered by start date.

    Cancelled contracts never occupy the calendar, so they are left out
    unless explicitly requested.
    """
    query = db.query(ContractModel).filter(ContractModel.vehicle_id == vehicle_id)
    if not include_cancelled:
        query = query.filter(ContractModel.status != ContractStatus.CANCELLED.value)
    return query.order_by(ContractModel.start_date, ContractModel.id).all()


def _build_accessories(accessories: Sequence[Accessory]) -> list[ContractAccessoryModel]:
    return [
        ContractAccessoryModel(
            position=position,
            name=accessory.name,
            unit_price_per_day=accessory.unit_price_per_day,
            quantity=accessory.quantity,
        )
        for position, accessory in enumerate(accessories)
    ]


def create_contract(
    db: Session,
    vehicle_id: int,
    client_id: int,
    start_date: date,
    end_date: date,
    daily_rate: int,
    total_price: int,
    deposit: int,
    status: str,
    payment_status: str,
    accessories: Sequence[Accessory] = (),
    notes: str | None = None,
) -> ContractModel:
    """Create a new contract in the database. Pure data access - no business logic."""
    now = datetime.now()
    db_contract = ContractModel(
        vehicle_id=vehicle_id,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        daily_rate=daily_rate,
        total_price=total_price,
        deposit=deposit,
        status=status,
        payment_status=payment_status,
        notes=notes,
        created_at=now,
        updated_at=now,
        accessories=_build_accessories(accessories),
    )
    db.add(db_contract)
    db.commit()
    db.refresh(db_contract)
    return db_contract


def update_contract(
    db: Session,
    contract_id: int,
    **kwargs,
) -> ContractModel:
    """
    Update a contract. Only updates fields that are explicitly provided.

    To clear a field (set to None), explicitly pass it with None value.
    Fields not provided are not updated. ``accessories`` replaces the whole list.
    """
    contract = get_contract_by_id(db, contract_id)
    if not contract:
        raise NotFoundError("Contract not found")

    for field in (
        "start_date",
        "end_date",
        "total_price",
        "deposit",
        "status",
        "payment_status",
        "notes",  # Can be None to clear
        "cancellation_reason",
    ):
        if field in kwargs:
            setattr(contract, field, kwargs[field])
    if "accessories" in kwargs:
        contract.accessories = _build_accessories(kwargs["accessories"])
    contract.updated_at = datetime.now()

    db.commit()
    db.refresh(contract)
    return contract


def get_all_contracts_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    vehicle_id: int | None = None,
    client_id: int | None = None,
    status: str | None = None,
    payment_status: str | None = None,
) -> tuple[list[ContractModel], int]:
    """
    Get all contracts with pagination and optional filters.

    Args:
        page: Page number (1-indexed)
        page_size: Number of items per page
        vehicle_id: Optional filter by vehicle ID
        client_id: Optional filter by client ID
        status: Optional filter by rental status
        payment_status: Optional filter by payment status

    Returns:
        Tuple of (list of contracts, total count)
    """
    query = db.query(ContractModel)

    if vehicle_id is not None:
        query = query.filter(ContractModel.vehicle_id == vehicle_id)
    if client_id is not None:
        query = query.filter(ContractModel.client_id == client_id)
    if status is not None:
        query = query.filter(ContractModel.status == status)
    if payment_status is not None:
        query = query.filter(ContractModel.payment_status == payment_status)

    total = query.count()
    skip = (page - 1) * page_size
    contracts = (
        query.options(selectinload(ContractModel.accessories))
        .order_by(ContractModel.start_date.desc(), ContractModel.id.desc())
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return contracts, total
