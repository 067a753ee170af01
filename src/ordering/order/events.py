"""Domain events for the Order aggregate.

Events are raised synchronously inside the aggregate method that causes the
transition and wait on the aggregate until the publisher drains them. Each
carries its own ``event_id`` and ``occurred_at``, assigned at construction.
"""

from datetime import UTC, datetime
from uuid import uuid4

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


def _new_event_id() -> str:
    return str(uuid4())


def _utc_now() -> datetime:
    return datetime.now(UTC)


@ordering.event(part_of="Order")
class OrderCreated:
    """A new order was opened for a customer."""

    __version__ = "v1"

    event_id: String(default=_new_event_id)
    occurred_at: DateTime(default=_utc_now)
    order_id: Identifier(required=True)
    customer_email: String(required=True)
    item_count: Integer(default=0)


@ordering.event(part_of="Order")
class OrderItemAdded:
    """A line item was appended to an order."""

    __version__ = "v1"

    event_id: String(default=_new_event_id)
    occurred_at: DateTime(default=_utc_now)
    order_id: Identifier(required=True)
    product_name: String(required=True)
    quantity: Integer(required=True)
    customer_email: String(required=True)


@ordering.event(part_of="Order")
class PaymentInitiated:
    """A payment attempt started for an order."""

    __version__ = "v1"

    event_id: String(default=_new_event_id)
    occurred_at: DateTime(default=_utc_now)
    order_id: Identifier(required=True)
    amount: Float(required=True)
    currency: String(required=True, max_length=3)
    customer_email: String(required=True)
    payment_method: String(required=True)


@ordering.event(part_of="Order")
class PaymentSuccessful:
    """The gateway confirmed the payment and the order is now paid."""

    __version__ = "v1"

    event_id: String(default=_new_event_id)
    occurred_at: DateTime(default=_utc_now)
    order_id: Identifier(required=True)
    transaction_id: String(required=True)
    processed_amount: Float(required=True)
    payment_date: DateTime(required=True)
    customer_email: String(required=True)


@ordering.event(part_of="Order")
class PaymentFailed:
    """The gateway rejected a payment attempt. The order stays unpaid."""

    __version__ = "v1"

    event_id: String(default=_new_event_id)
    occurred_at: DateTime(default=_utc_now)
    order_id: Identifier(required=True)
    attempted_amount: Float(required=True)
    currency: String(required=True, max_length=3)
    customer_email: String(required=True)
    failure_reason: String(required=True)
    payment_method: String(required=True)


DOMAIN_EVENT_TYPES = (
    OrderCreated,
    OrderItemAdded,
    PaymentInitiated,
    PaymentSuccessful,
    PaymentFailed,
)
