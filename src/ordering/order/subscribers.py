"""Event handlers for Order domain events.

Each handler reacts to exactly one event kind. Their side effects
(notifications, fraud screening, fulfillment triggers, inventory and revenue
bookkeeping) are recorded as structured log entries bound to the order and
event ids; the systems that would act on them live outside this context.
"""

import structlog
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.events import (
    OrderCreated,
    OrderItemAdded,
    PaymentFailed,
    PaymentInitiated,
    PaymentSuccessful,
)
from ordering.order.order import Order

logger = structlog.get_logger(__name__)

HIGH_RISK_THRESHOLD = 1000.00
HIGH_PRIORITY_THRESHOLD = 500.00
PROCESSING_FEE_RATE = 0.029
STANDARD_DELIVERY_ESTIMATE = "3-5 business days"


def risk_level(amount: float) -> str:
    return "HIGH" if amount > HIGH_RISK_THRESHOLD else "LOW"


def fulfillment_priority(amount: float) -> str:
    return "HIGH" if amount > HIGH_PRIORITY_THRESHOLD else "STANDARD"


def transaction_fee(amount: float) -> float:
    return round(amount * PROCESSING_FEE_RATE, 2)


def _bind(event):
    return logger.bind(
        event_type=type(event).__name__,
        event_id=event.event_id,
        order_id=event.order_id,
    )


@ordering.event_handler(part_of=Order)
class OrderCreatedSubscriber:
    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        log = _bind(event)
        log.info("Order created", customer_email=event.customer_email, item_count=event.item_count)
        log.info("Welcome notification queued", channel="EMAIL", recipient=event.customer_email)
        log.info("Order analytics recorded", metric="orders_created", occurred_at=event.occurred_at.isoformat())


@ordering.event_handler(part_of=Order)
class OrderItemAddedSubscriber:
    @handle(OrderItemAdded)
    def on_order_item_added(self, event: OrderItemAdded) -> None:
        log = _bind(event)
        log.info("Order item added", product_name=event.product_name, quantity=event.quantity)
        log.info(
            "Inventory reservation requested",
            product_name=event.product_name,
            quantity=event.quantity,
            reservation_status="RESERVED",
        )
        log.info(
            "Recommendations refreshed",
            customer_email=event.customer_email,
            product_name=event.product_name,
        )


@ordering.event_handler(part_of=Order)
class PaymentInitiatedSubscriber:
    @handle(PaymentInitiated)
    def on_payment_initiated(self, event: PaymentInitiated) -> None:
        log = _bind(event)
        log.info(
            "Payment initiated",
            amount=event.amount,
            currency=event.currency,
            payment_method=event.payment_method,
        )
        log.info(
            "Fraud check performed",
            customer_email=event.customer_email,
            amount=event.amount,
            risk_level=risk_level(event.amount),
        )
        log.info(
            "Payment audit recorded",
            audit_action="PAYMENT_INITIATED",
            amount=event.amount,
            currency=event.currency,
            payment_method=event.payment_method,
        )


@ordering.event_handler(part_of=Order)
class PaymentSuccessfulSubscriber:
    @handle(PaymentSuccessful)
    def on_payment_successful(self, event: PaymentSuccessful) -> None:
        log = _bind(event).bind(transaction_id=event.transaction_id)
        amount = event.processed_amount
        log.info("Payment successful", processed_amount=amount, payment_date=event.payment_date.isoformat())
        log.info(
            "Fulfillment triggered",
            priority=fulfillment_priority(amount),
            estimated_delivery=STANDARD_DELIVERY_ESTIMATE,
        )
        log.info(
            "Payment confirmation queued",
            notification_type="PAYMENT_CONFIRMATION",
            channel="EMAIL",
            recipient=event.customer_email,
        )
        log.info(
            "Revenue recorded",
            gross_amount=amount,
            transaction_fee=transaction_fee(amount),
            net_amount=round(amount - transaction_fee(amount), 2),
        )
        log.info("Inventory committed", inventory_status="ALLOCATED")


@ordering.event_handler(part_of=Order)
class PaymentFailedSubscriber:
    @handle(PaymentFailed)
    def on_payment_failed(self, event: PaymentFailed) -> None:
        log = _bind(event)
        log.warning(
            "Payment failed",
            attempted_amount=event.attempted_amount,
            currency=event.currency,
            payment_method=event.payment_method,
            failure_reason=event.failure_reason,
        )
        log.info(
            "Payment failure notification queued",
            notification_type="PAYMENT_FAILED",
            channel="EMAIL",
            recipient=event.customer_email,
        )
        log.info("Inventory reservation released", inventory_status="RELEASED")
        log.info("Payment retry evaluated", failure_reason=event.failure_reason, retry_eligible=True)
        log.info(
            "Fraud analytics recorded",
            customer_email=event.customer_email,
            attempted_amount=event.attempted_amount,
            failure_reason=event.failure_reason,
        )
