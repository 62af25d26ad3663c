import pytest

from storefront.domain.status import (
    ADMIN_QUOTATION_STATUSES,
    ORDER_TRANSITIONS,
    OrderStatus,
    QuotationStatus,
)


@pytest.mark.parametrize(
    "status, cancellable",
    [
        (OrderStatus.PENDING, True),
        (OrderStatus.CONFIRMED, True),
        (OrderStatus.PROCESSING, True),
        (OrderStatus.SHIPPED, False),
        (OrderStatus.DELIVERED, False),
        (OrderStatus.CANCELLED, False),
    ],
)
def test_cancellable_statuses(status, cancellable):
    assert status.is_cancellable is cancellable


def test_terminal_order_statuses():
    terminal = {status for status, targets in ORDER_TRANSITIONS.items() if not targets}

    assert terminal == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def test_forward_only_order_flow():
    assert OrderStatus.PENDING.can_transition_to(OrderStatus.CONFIRMED)
    assert not OrderStatus.PENDING.can_transition_to(OrderStatus.SHIPPED)
    assert not OrderStatus.SHIPPED.can_transition_to(OrderStatus.PROCESSING)


def test_converted_is_terminal_and_not_admin_settable():
    assert QuotationStatus.APPROVED.can_transition_to(QuotationStatus.CONVERTED)
    assert not QuotationStatus.PENDING.can_transition_to(QuotationStatus.CONVERTED)
    assert not any(QuotationStatus.CONVERTED.can_transition_to(s) for s in QuotationStatus)
    assert QuotationStatus.CONVERTED not in ADMIN_QUOTATION_STATUSES
