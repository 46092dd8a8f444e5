import itertools

import pytest

from app.domain.contract_lifecycle import (
    ContractStatus,
    PaymentStatus,
    is_terminal,
    transition_payment,
    transition_status,
)
from app.errors import IllegalPaymentTransitionError, IllegalStatusTransitionError

LEGAL_STATUS_EDGES = {
    (ContractStatus.PENDING, ContractStatus.CONFIRMED),
    (ContractStatus.CONFIRMED, ContractStatus.ACTIVE),
    (ContractStatus.ACTIVE, ContractStatus.COMPLETED),
    (ContractStatus.PENDING, ContractStatus.CANCELLED),
    (ContractStatus.CONFIRMED, ContractStatus.CANCELLED),
}

LEGAL_PAYMENT_EDGES = {
    (PaymentStatus.PENDING, PaymentStatus.PARTIAL),
    (PaymentStatus.PARTIAL, PaymentStatus.PAID),
    (PaymentStatus.PENDING, PaymentStatus.REFUNDED),
    (PaymentStatus.PARTIAL, PaymentStatus.REFUNDED),
    (PaymentStatus.PAID, PaymentStatus.REFUNDED),
}


@pytest.mark.parametrize(
    "current,requested", list(itertools.product(ContractStatus, repeat=2))
)
def test_status_transition_table_is_exhaustive(current, requested):
    if (current, requested) in LEGAL_STATUS_EDGES:
        assert transition_status(current, requested) == requested
    else:
        with pytest.raises(IllegalStatusTransitionError) as exc_info:
            transition_status(current, requested)
        assert exc_info.value.current == current
        assert exc_info.value.requested == requested


@pytest.mark.parametrize(
    "current,requested", list(itertools.product(PaymentStatus, repeat=2))
)
def test_payment_transition_table_is_exhaustive(current, requested):
    if (current, requested) in LEGAL_PAYMENT_EDGES:
        assert transition_payment(current, requested) == requested
    else:
        with pytest.raises(IllegalPaymentTransitionError):
            transition_payment(current, requested)


def test_completed_contract_cannot_be_cancelled():
    with pytest.raises(IllegalStatusTransitionError, match="COMPLETED to CANCELLED"):
        transition_status(ContractStatus.COMPLETED, ContractStatus.CANCELLED)


def test_active_contract_cannot_be_cancelled():
    with pytest.raises(IllegalStatusTransitionError):
        transition_status(ContractStatus.ACTIVE, ContractStatus.CANCELLED)


def test_paid_does_not_regress_to_partial():
    with pytest.raises(IllegalPaymentTransitionError, match="PAID to PARTIAL"):
        transition_payment(PaymentStatus.PAID, PaymentStatus.PARTIAL)


def test_accepts_stored_string_values():
    assert transition_status("PENDING", "CONFIRMED") == ContractStatus.CONFIRMED
    assert transition_payment("PARTIAL", "PAID") == PaymentStatus.PAID


def test_terminal_states():
    assert is_terminal(ContractStatus.COMPLETED)
    assert is_terminal(ContractStatus.CANCELLED)
    assert not is_terminal(ContractStatus.PENDING)
    assert not is_terminal(ContractStatus.ACTIVE)
