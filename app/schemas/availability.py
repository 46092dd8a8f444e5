import datetime as dt

from pydantic import BaseModel, ConfigDict

from app.domain.contract_lifecycle import ContractStatus


class ConflictingContract(BaseModel):
    """A contract blocking some of the requested days."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    start_date: dt.date
    end_date: dt.date
    status: ContractStatus


class AvailabilityDay(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    available: bool
    contract_id: int | None = None
    reason: str | None = None


class AvailabilityCheck(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    available: bool
    vehicle_unavailable: bool = False
    conflicting_contracts: list[ConflictingContract] = []
