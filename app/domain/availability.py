from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any

from app.domain.contract_lifecycle import ContractStatus
from app.domain.date_range import DateRange
from app.errors import DomainValidationError

BOOKED = "BOOKED"
VEHICLE_UNAVAILABLE = "VEHICLE_UNAVAILABLE"


@dataclass(frozen=True, slots=True)
class ContractSpan:
    """Immutable snapshot of the calendar-relevant part of a contract."""

    id: int
    vehicle_id: int
    start_date: date
    end_date: date
    status: ContractStatus

    @classmethod
    def from_contract(cls, contract: Any) -> ContractSpan:
        return cls(
            id=contract.id,
            vehicle_id=contract.vehicle_id,
            start_date=contract.start_date,
            end_date=contract.end_date,
            status=ContractStatus(contract.status),
        )

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


@dataclass(frozen=True, slots=True)
class AvailabilityDay:
    date: date
    available: bool
    contract_id: int | None = None
    reason: str | None = None


def is_blocking(contract: Any) -> bool:
    """Only non-cancelled contracts occupy calendar days."""
    return ContractStatus(contract.status) != ContractStatus.CANCELLED


class AvailabilityIndex:
    """Contract-driven calendar coverage for a single vehicle.

    A derived read model: build it from the vehicle's contracts, query it as
    often as needed, and rebuild it after any contract of that vehicle is
    created, cancelled or re-dated. It knows nothing about the vehicle's own
    operational state; callers combine the two signals.

    Contracts are duck-typed: anything with ``id``, ``vehicle_id``,
    ``status``, ``start_date`` and ``end_date`` works (ORM rows included).
    They are snapshotted as ContractSpan on build, so the index stays valid
    after the originating session is rolled back or closed.
    """

    def __init__(self, vehicle_id: int, coverage: dict[date, list[ContractSpan]]):
        self.vehicle_id = vehicle_id
        self._coverage = coverage

    @classmethod
    def build(
        cls,
        vehicle_id: int,
        contracts: Iterable[Any],
        exclude_contract_id: int | None = None,
    ) -> AvailabilityIndex:
        coverage: dict[date, list[ContractSpan]] = {}
        for contract in contracts:
            if contract.vehicle_id != vehicle_id or not is_blocking(contract):
                continue
            if exclude_contract_id is not None and contract.id == exclude_contract_id:
                continue
            span = ContractSpan.from_contract(contract)
            # Overlaps are not re-detected here; a doubly covered day is just covered.
            for day in span.date_range.expand_inclusive_days():
                coverage.setdefault(day, []).append(span)
        return cls(vehicle_id, coverage)

    @property
    def covered_days(self) -> frozenset[date]:
        return frozenset(self._coverage)

    def is_available(self, day: date) -> bool:
        return day not in self._coverage

    def is_range_available(self, date_range: DateRange) -> bool:
        return all(self.is_available(day) for day in date_range.expand_inclusive_days())

    def conflicting_contracts(self, date_range: DateRange) -> list[ContractSpan]:
        """Distinct contracts covering any day of ``date_range``, earliest first."""
        seen: dict[int, ContractSpan] = {}
        for day in date_range.expand_inclusive_days():
            for span in self._coverage.get(day, ()):
                seen.setdefault(span.id, span)
        return sorted(seen.values(), key=lambda c: (c.start_date, c.id))

    def range_view(self, date_range: DateRange) -> list[AvailabilityDay]:
        days = []
        for day in date_range.expand_inclusive_days():
            covering = self._coverage.get(day)
            if covering:
                days.append(AvailabilityDay(day, False, covering[0].id, BOOKED))
            else:
                days.append(AvailabilityDay(day, True))
        return days

    def month_view(self, year: int, month: int) -> list[AvailabilityDay]:
        if not 1 <= month <= 12:
            raise DomainValidationError("Month must be between 1 and 12")
        last_day = calendar.monthrange(year, month)[1]
        return self.range_view(DateRange(date(year, month, 1), date(year, month, last_day)))
