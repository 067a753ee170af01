"""Order payment — application service and result.

Drives one payment attempt for an order end to end:

1. Load the order (it must exist and be active).
2. Refuse a second payment on an order that is already paid.
3. Derive the total from the items if it has not been computed yet.
4. Charge the requested amount, or the order total when none is given.
5. Record the attempt on the order and publish ``PaymentInitiated``.
6. Ask the payment gateway to process the charge.
7. On success, mark the order paid with the processed amount, commit it in
   its own unit of work and only then publish ``PaymentSuccessful``.
8. On anything else, record the failure and publish ``PaymentFailed``.
   Nothing is persisted; the order stays unpaid and can be retried.

The service runs outside any unit of work, so no storage transaction is
held open across the gateway call. Gateway declines come back as a
``PaymentResult``; they are not errors.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.exceptions import DuplicatePaymentError, InvalidCurrencyError, InvalidPaymentMethodError
from ordering.order.order import Order
from ordering.publishing import get_publisher
from payments.gateway import get_gateway
from payments.gateway.port import PaymentRequest, PaymentResponse, PaymentStatus

DEFAULT_CURRENCY = "USD"
DEFAULT_FAILURE_MESSAGE = "Payment processing failed"
MAX_PAYMENT_METHOD_LENGTH = 50


@dataclass(frozen=True)
class PaymentResult:
    status: PaymentStatus
    transaction_id: str = ""
    message: str = ""
    processed_amount: float = 0.0
    processed_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is PaymentStatus.SUCCESS

    @classmethod
    def from_response(cls, response: PaymentResponse) -> "PaymentResult":
        return cls(
            status=response.status,
            transaction_id=response.transaction_id,
            message=response.message,
            processed_amount=response.processed_amount,
            processed_at=response.processed_at,
        )


def _validate_payment_method(payment_method) -> str:
    if payment_method is None or not str(payment_method).strip():
        raise InvalidPaymentMethodError("Payment method is required")
    payment_method = str(payment_method).strip()
    if len(payment_method) > MAX_PAYMENT_METHOD_LENGTH:
        raise InvalidPaymentMethodError(
            f"Payment method cannot exceed {MAX_PAYMENT_METHOD_LENGTH} characters",
            payment_method=payment_method,
        )
    return payment_method


def _validate_currency(currency) -> str:
    currency = currency or DEFAULT_CURRENCY
    if len(currency) > 3:
        raise InvalidCurrencyError("Currency must be a 3-letter code", currency=currency)
    return currency


@ordering.application_service(part_of=Order)
class OrderPaymentService:
    """Charge the customer for an order through the payment gateway.

    An ``amount`` of zero means "charge the order total".
    """

    def process_payment(self, order_id, payment_method, amount=0.0, currency=DEFAULT_CURRENCY) -> PaymentResult:
        payment_method = _validate_payment_method(payment_method)
        currency = _validate_currency(currency)

        log = logger.bind(order_id=str(order_id), payment_method=payment_method)
        log.info("Processing payment", requested_amount=amount, currency=currency)

        repo = current_domain.repository_for(Order)
        order = repo.load(order_id)

        if order.is_paid:
            log.warning(
                "Duplicate payment attempt",
                existing_transaction_id=order.transaction_id,
                payment_date=order.payment_date.isoformat(),
            )
            raise DuplicatePaymentError(
                f"Order {order.id} has already been paid",
                order_id=str(order.id),
                existing_transaction_id=order.transaction_id,
                payment_date=order.payment_date.isoformat(),
            )

        if order.total_amount == 0:
            order.calculate_total_amount()
            log.info("Order total calculated", total_amount=order.total_amount)

        amount = amount if amount and amount > 0 else order.total_amount
        publisher = get_publisher()

        order.initiate_payment(amount, currency, payment_method)
        publisher.publish_all(order)

        response = get_gateway().process_payment(
            PaymentRequest(
                amount=amount,
                currency=currency,
                customer_email=order.customer_email,
                order_reference=f"ORDER_{order.id}",
                payment_method=payment_method,
            )
        )

        if response.success:
            paid_at = response.processed_at or datetime.now(UTC)
            order.mark_paid(response.transaction_id, paid_at, response.processed_amount)
            order.set_total_amount(response.processed_amount)
            publisher.publish_after_commit(order, repo.add)
            log.info(
                "Payment succeeded",
                transaction_id=response.transaction_id,
                processed_amount=response.processed_amount,
            )
        else:
            reason = response.message or DEFAULT_FAILURE_MESSAGE
            order.record_payment_failure(amount, currency, payment_method, reason)
            publisher.publish_all(order)
            log.warning(
                "Payment failed",
                status=response.status.value,
                attempted_amount=amount,
                failure_reason=reason,
            )

        return PaymentResult.from_response(response)
