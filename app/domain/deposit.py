from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True, slots=True)
class DepositPolicy:
    """Defines the upfront portion of a contract's total price.

    Semantics (intentionally centralized):
    - deposit = rate * total_price, rounded half-up to a whole currency unit
    - clamped to [0, total_price]
    """

    rate: Decimal = Decimal("0.3")

    def deposit_for(self, total_price: int) -> int:
        deposit = int(
            (Decimal(total_price) * Decimal(self.rate)).quantize(
                Decimal(1), rounding=ROUND_HALF_UP
            )
        )
        return min(max(deposit, 0), total_price)

    @staticmethod
    def is_valid(deposit: int, total_price: int) -> bool:
        return 0 <= deposit <= total_price
