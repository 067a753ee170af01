"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.order.creation import OrderCreationService
from ordering.order.events import (
    OrderCreated,
    OrderItemAdded,
    PaymentFailed,
    PaymentInitiated,
    PaymentSuccessful,
)
from ordering.order.order import Order
from ordering.order.payment import OrderPaymentService
from protean import current_domain
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderCreated": OrderCreated,
    "OrderItemAdded": OrderItemAdded,
    "PaymentInitiated": PaymentInitiated,
    "PaymentSuccessful": PaymentSuccessful,
    "PaymentFailed": PaymentFailed,
}


@pytest.fixture()
def outcome():
    """Container for the result or error of the last When step."""
    return {"result": None, "exc": None}


def load_order(order_id):
    return current_domain.repository_for(Order).get(order_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an order for "{email}"'), target_fixture="order_id")
def _(email, recorder, gateway):
    return OrderCreationService().create_order(email, [])


@given(parsers.cfparse('the order contains {quantity:d} of "{product}"'))
def _(order_id, quantity, product):
    order = load_order(order_id)
    order.add_item(product, quantity)
    order.clear_events()
    current_domain.repository_for(Order).add(order)


@given("the order has been paid", target_fixture="first_payment")
def _(order_id):
    return OrderPaymentService().process_payment(order_id, "card")


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order total is {total:f}"))
def _(order_id, total):
    order = load_order(order_id)
    if order.total_amount == 0 and order.items:
        order.calculate_total_amount()
    assert order.total_amount == pytest.approx(total)


@then("the order is paid")
def _(order_id):
    assert load_order(order_id).is_paid is True


@then("the order is not paid")
def _(order_id):
    order = load_order(order_id)
    assert order.is_paid is False
    assert order.transaction_id is None


@then("the order has a transaction id")
def _(order_id, outcome):
    order = load_order(order_id)
    assert order.transaction_id
    assert order.transaction_id == outcome["result"].transaction_id


@then(parsers.cfparse('a "{event_name}" event was published'))
def _(recorder, event_name):
    event_cls = _ORDER_EVENT_CLASSES[event_name]
    assert any(isinstance(e, event_cls) for e in recorder.events)
