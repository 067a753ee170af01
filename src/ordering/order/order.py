"""Order aggregate — the consistency boundary for line items and payment.

An order collects line items, derives its total from them, and moves through
a small payment state machine:

    Unpaid --initiate_payment--> Pending --mark_paid--> Paid (terminal)
    Pending --record_payment_failure--> Unpaid (retryable)

Every transition raises a domain event on the aggregate. Events stay queued
on the instance (``pending_events``) until the publisher drains them with
``clear_events()``; they are never persisted by the aggregate itself.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String

from ordering.domain import ordering
from ordering.exceptions import (
    AlreadyPaidError,
    EmptyOrderError,
    InvalidAmountError,
    InvalidCustomerEmailError,
    InvalidItemError,
    InvalidTransactionError,
)
from ordering.order.events import (
    OrderCreated,
    OrderItemAdded,
    PaymentFailed,
    PaymentInitiated,
    PaymentSuccessful,
)

# Flat price applied to every unit until a catalogue lookup exists
UNIT_PRICE = 10.00

_FORBIDDEN_EMAIL_CHARS = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


class PaymentState(Enum):
    UNPAID = "Unpaid"
    PENDING = "Pending"
    PAID = "Paid"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _validate_email(email) -> str:
    """Return the email unchanged if it has a basic address structure."""
    if email is None or not str(email).strip():
        raise InvalidCustomerEmailError("Customer email is required")

    email = str(email)
    problem = None
    if any(ch in email for ch in (" ", "\t", "\n")):
        problem = "must not contain whitespace"
    elif email.count("@") != 1:
        problem = "must contain exactly one @"
    else:
        local_part, domain_part = email.split("@", 1)
        if not local_part or local_part.startswith(".") or local_part.endswith("."):
            problem = "has an invalid local part"
        elif not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
            problem = "has an invalid domain"
        elif "." not in domain_part or ".." in email:
            problem = "has an invalid domain"
        elif any(ch in email for ch in _FORBIDDEN_EMAIL_CHARS):
            problem = "contains forbidden characters"

    if problem:
        raise InvalidCustomerEmailError(
            f"Customer email {problem}",
            customer_email=email,
        )
    return email


@ordering.entity(part_of="Order")
class OrderItem:
    """A product and quantity on an order. Items are only ever appended."""

    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)


@ordering.aggregate
class Order:
    """A customer's order and its payment record.

    ``is_paid`` only ever moves from False to True, and a paid order always
    has a transaction id and a payment date. ``total_amount`` is derived from
    the items unless the payment flow overwrites it with the amount the
    gateway actually processed.
    """

    customer_email = String(required=True, max_length=254)
    items = HasMany(OrderItem)
    is_paid = Boolean(default=False)
    payment_status = String(choices=PaymentState, default=PaymentState.UNPAID.value)
    transaction_id = String(max_length=255)
    payment_date = DateTime()
    total_amount = Float(default=0.0, min_value=0.0)
    active = Boolean(default=True)
    created_at = DateTime(default=_utc_now)
    updated_at = DateTime()

    @invariant.post
    def paid_order_has_payment_record(self):
        if self.is_paid and (not self.transaction_id or self.payment_date is None):
            raise ValidationError({"is_paid": ["A paid order must have a transaction id and a payment date"]})

    @classmethod
    def create(cls, customer_email):
        customer_email = _validate_email(customer_email)

        order = cls(customer_email=customer_email)
        order.raise_(
            OrderCreated(
                order_id=order.id,
                customer_email=order.customer_email,
                item_count=0,
            )
        )
        return order

    @property
    def payment_state(self) -> PaymentState:
        return PaymentState(self.payment_status)

    @property
    def pending_events(self) -> list:
        """Events raised since the last publish, oldest first."""
        return list(self._events)

    def clear_events(self) -> None:
        self._events.clear()

    def _touch(self) -> None:
        self.updated_at = _utc_now()

    def _ensure_unpaid(self, action):
        if self.is_paid:
            raise AlreadyPaidError(
                f"Cannot {action}: order {self.id} is already paid",
                order_id=self.id,
                existing_transaction_id=self.transaction_id,
                payment_date=self.payment_date.isoformat() if self.payment_date else None,
            )

    # ------------------------------------------------------------------
    # Items and totals
    # ------------------------------------------------------------------
    def add_item(self, product_name, quantity):
        reason = None
        if product_name is None or not str(product_name).strip():
            reason = "Product name cannot be empty"
        elif not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            reason = "Quantity must be greater than zero"

        if reason:
            raise InvalidItemError(
                reason,
                order_id=self.id,
                product_name=product_name,
                quantity=quantity,
                validation_reason=reason,
            )

        self.add_items(OrderItem(product_name=product_name, quantity=quantity))
        self._touch()
        self.raise_(
            OrderItemAdded(
                order_id=self.id,
                product_name=product_name,
                quantity=quantity,
                customer_email=self.customer_email,
            )
        )

    def calculate_total_amount(self) -> float:
        if not self.items:
            raise EmptyOrderError(
                "Cannot calculate total for an order without items",
                order_id=self.id,
                calculation_type="total_amount",
            )

        self.total_amount = round(sum(item.quantity * UNIT_PRICE for item in self.items), 2)
        self._touch()
        return self.total_amount

    def set_total_amount(self, amount):
        if amount is None or amount < 0:
            raise InvalidAmountError(
                "Total amount cannot be negative",
                order_id=self.id,
                attempted_amount=amount,
            )

        self.total_amount = round(float(amount), 2)
        self._touch()

    # ------------------------------------------------------------------
    # Payment
    # ------------------------------------------------------------------
    def initiate_payment(self, amount, currency, payment_method):
        self._ensure_unpaid("initiate payment")

        self.payment_status = PaymentState.PENDING.value
        self._touch()
        self.raise_(
            PaymentInitiated(
                order_id=self.id,
                amount=amount,
                currency=currency,
                customer_email=self.customer_email,
                payment_method=payment_method,
            )
        )

    def mark_paid(self, transaction_id, payment_date, processed_amount=None):
        self._ensure_unpaid("mark payment")

        if transaction_id is None or not str(transaction_id).strip():
            raise InvalidTransactionError(
                "Transaction ID cannot be empty",
                order_id=self.id,
            )
        if payment_date is None:
            raise InvalidTransactionError(
                "Payment date is required",
                order_id=self.id,
                transaction_id=transaction_id,
            )

        with atomic_change(self):
            self.is_paid = True
            self.transaction_id = transaction_id
            self.payment_date = payment_date
            self.payment_status = PaymentState.PAID.value
            self.updated_at = _utc_now()

        self.raise_(
            PaymentSuccessful(
                order_id=self.id,
                transaction_id=transaction_id,
                processed_amount=self.total_amount if processed_amount is None else processed_amount,
                payment_date=payment_date,
                customer_email=self.customer_email,
            )
        )

    def record_payment_failure(self, attempted_amount, currency, payment_method, reason):
        self._ensure_unpaid("record a payment failure")

        self.payment_status = PaymentState.UNPAID.value
        self._touch()
        self.raise_(
            PaymentFailed(
                order_id=self.id,
                attempted_amount=attempted_amount,
                currency=currency,
                customer_email=self.customer_email,
                failure_reason=reason,
                payment_method=payment_method,
            )
        )

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------
    def rename(self, customer_email):
        """Replace the customer email. No event is raised."""
        self.customer_email = _validate_email(customer_email)
        self._touch()

    def deactivate(self):
        self.active = False
        self._touch()
