from dataclasses import dataclass, field

from sqlalchemy.orm import Session

import app.repositories.contract as contract_repo
from app.domain.contract_lifecycle import ContractStatus, PaymentStatus
from app.domain.date_range import DateRange


@dataclass
class ContractStats:
    total_contracts: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)
    total_revenue: int = 0
    paid_revenue: int = 0
    pending_revenue: int = 0
    average_contract_value: float = 0.0
    average_rental_duration: float = 0.0


def get_contract_stats(db: Session) -> ContractStats:
    """
    Aggregate figures for the admin dashboard.

    Revenue only counts non-cancelled contracts. Paid revenue is the total of
    PAID contracts; pending revenue is everything not yet paid nor refunded.
    Durations are measured in billed days.
    """
    contracts = contract_repo.get_all_contracts(db)
    stats = ContractStats(
        total_contracts=len(contracts),
        status_counts={status.value: 0 for status in ContractStatus},
    )

    billable_days = 0
    billable = 0
    for contract in contracts:
        stats.status_counts[contract.status] += 1
        if contract.status == ContractStatus.CANCELLED.value:
            continue
        billable += 1
        stats.total_revenue += contract.total_price
        billable_days += DateRange(
            contract.start_date, contract.end_date
        ).duration_days_for_pricing()
        if contract.payment_status == PaymentStatus.PAID.value:
            stats.paid_revenue += contract.total_price
        elif contract.payment_status != PaymentStatus.REFUNDED.value:
            stats.pending_revenue += contract.total_price

    if billable:
        stats.average_contract_value = round(stats.total_revenue / billable, 2)
        stats.average_rental_duration = round(billable_days / billable, 2)
    return stats
