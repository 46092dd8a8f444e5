from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.domain.date_range import DateRange
from app.schemas.availability import AvailabilityCheck, AvailabilityDay
from app.services import reservation as reservation_service

router = APIRouter(prefix="/vehicles", tags=["availability"])


@router.get("/{vehicle_id}/availability", response_model=list[AvailabilityDay])
def get_vehicle_month_availability(
    vehicle_id: int,
    year: int = Query(..., ge=1900, le=2100, description="Year"),
    month: int = Query(..., ge=1, le=12, description="Month (1-12)"),
    db: Session = Depends(get_db),
):
    """
    One entry per day of the month. A day is unavailable when a non-cancelled
    contract covers it or the vehicle is out of service.
    """
    days = reservation_service.get_month_view(db, vehicle_id, year, month)
    return [AvailabilityDay.model_validate(day) for day in days]


@router.get("/{vehicle_id}/availability/check", response_model=AvailabilityCheck)
def check_vehicle_availability(
    vehicle_id: int,
    start_date: date = Query(..., description="First day (YYYY-MM-DD)"),
    end_date: date = Query(..., description="Last day (YYYY-MM-DD), inclusive"),
    exclude_contract_id: int | None = Query(
        None, description="Ignore this contract (when editing its dates)"
    ),
    db: Session = Depends(get_db),
):
    """
    Advisory check before submitting a reservation. The reservation itself
    remains the final authority.
    """
    result = reservation_service.check_availability(
        db,
        vehicle_id,
        DateRange(start_date, end_date),
        exclude_contract_id=exclude_contract_id,
    )
    return AvailabilityCheck.model_validate(result)


@router.get("/{vehicle_id}/calendar", response_model=list[AvailabilityDay])
def get_vehicle_calendar(
    vehicle_id: int,
    start_date: date = Query(..., description="First day (YYYY-MM-DD)"),
    end_date: date = Query(..., description="Last day (YYYY-MM-DD), inclusive"),
    db: Session = Depends(get_db),
):
    """Day-by-day availability over an arbitrary range."""
    days = reservation_service.get_range_view(db, vehicle_id, DateRange(start_date, end_date))
    return [AvailabilityDay.model_validate(day) for day in days]
