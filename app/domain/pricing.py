from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from app.domain.date_range import DateRange
from app.errors import InvalidAccessoryError, InvalidRateError


@dataclass(frozen=True, slots=True)
class Accessory:
    """An extra billed per day on top of the vehicle rate (GPS, child seat...)."""

    name: str
    unit_price_per_day: int
    quantity: int = 1

    def validate(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidAccessoryError("Accessory name must not be empty")
        if self.unit_price_per_day < 0:
            raise InvalidAccessoryError(
                f"Accessory '{self.name}' price cannot be negative"
            )
        if self.quantity < 1:
            raise InvalidAccessoryError(
                f"Accessory '{self.name}' quantity must be at least 1"
            )


@dataclass(frozen=True, slots=True)
class PriceQuote:
    total_days: int
    base_price: int
    accessories_price: int
    total_price: int


def calculate_price(
    daily_rate: int,
    date_range: DateRange,
    accessories: Sequence[Accessory] = (),
) -> PriceQuote:
    """Price a rental. Pure and deterministic.

    All accessories are validated before anything is summed, so a bad entry
    never produces a partial total.
    """
    if daily_rate is None or daily_rate <= 0:
        raise InvalidRateError(f"Daily rate must be greater than 0 (got {daily_rate})")
    for accessory in accessories:
        accessory.validate()

    total_days = date_range.duration_days_for_pricing()
    base_price = daily_rate * total_days
    accessories_price = sum(
        acc.unit_price_per_day * acc.quantity * total_days for acc in accessories
    )
    return PriceQuote(
        total_days=total_days,
        base_price=base_price,
        accessories_price=accessories_price,
        total_price=base_price + accessories_price,
    )
