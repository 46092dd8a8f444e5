import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.contract_lifecycle import ContractStatus, PaymentStatus
from app.domain.pricing import Accessory as AccessoryValue


class Accessory(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    unit_price_per_day: int
    quantity: int = 1

    def to_domain(self) -> AccessoryValue:
        return AccessoryValue(
            name=self.name,
            unit_price_per_day=self.unit_price_per_day,
            quantity=self.quantity,
        )


class Contract(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vehicle_id: int
    client_id: int
    start_date: dt.date
    end_date: dt.date
    daily_rate: int
    total_price: int
    deposit: int
    status: ContractStatus
    payment_status: PaymentStatus
    notes: str | None = None
    cancellation_reason: str | None = None
    accessories: list[Accessory] = []
    created_at: dt.datetime
    updated_at: dt.datetime


class ReservationCreate(BaseModel):
    vehicle_id: int
    client_id: int
    start_date: dt.date = Field(..., description="First rental day (YYYY-MM-DD)")
    end_date: dt.date = Field(..., description="Last rental day (YYYY-MM-DD), inclusive")
    accessories: list[Accessory] = []
    daily_rate: int | None = Field(
        None, description="Rate override; defaults to the vehicle's current daily rate"
    )
    manual_total: int | None = Field(
        None, description="Operator override of the computed total; ignored unless > 0"
    )
    notes: str | None = None


class ReservationUpdate(BaseModel):
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    accessories: list[Accessory] | None = None
    total_price: int | None = None
    deposit: int | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def validate_something_to_update(self):
        """Reject empty update bodies."""
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class StatusUpdate(BaseModel):
    status: ContractStatus
    reason: str | None = Field(None, description="Why the reservation is cancelled (CANCELLED only)")


class ReservationExtend(BaseModel):
    new_end_date: dt.date = Field(..., description="New last rental day (YYYY-MM-DD), inclusive")
    additional_price: int | None = Field(
        None, description="Price of the extra days; computed from the booked rate when omitted"
    )


class PaymentUpdate(BaseModel):
    payment_status: PaymentStatus


class ContractStats(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_contracts: int
    status_counts: dict[str, int]
    total_revenue: int
    paid_revenue: int
    pending_revenue: int
    average_contract_value: float
    average_rental_duration: float
