"""Configurable fake payment gateway for development and testing.

Simulates a payment processor without any external calls. Outcomes follow a
fixed reference policy, checked in this order:

- amount <= 0                        -> Failed, "Invalid payment amount"
- amount > 10000                     -> Failed, "Amount exceeds transaction limit"
- customer email containing "fail"   -> Failed, "Payment method declined"
- anything else                      -> Success with a fresh transaction id

``configure(should_succeed=False)`` forces every charge to fail regardless of
the policy, and every call is recorded in ``calls`` for assertions.
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from payments.gateway.port import PaymentGateway, PaymentRequest, PaymentResponse, PaymentStatus

TRANSACTION_LIMIT = 10000.00


def _transaction_id() -> str:
    return f"TXN_{uuid4().hex}"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, transaction_id_factory=None) -> None:
        self.transaction_id_factory = transaction_id_factory or _transaction_id
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment method declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment method declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _decline_reason(self, request: PaymentRequest) -> str | None:
        if not self.should_succeed:
            return self.failure_reason
        if request.amount <= 0:
            return "Invalid payment amount"
        if request.amount > TRANSACTION_LIMIT:
            return "Amount exceeds transaction limit"
        if "fail" in (request.customer_email or "").lower():
            return "Payment method declined"
        return None

    def process_payment(self, request: PaymentRequest) -> PaymentResponse:
        self.calls.append(
            {
                "method": "process_payment",
                "amount": request.amount,
                "currency": request.currency,
                "customer_email": request.customer_email,
                "order_reference": request.order_reference,
                "payment_method": request.payment_method,
            }
        )

        now = datetime.now(UTC)
        reason = self._decline_reason(request)
        if reason:
            return PaymentResponse(
                status=PaymentStatus.FAILED,
                message=reason,
                processed_amount=request.amount,
                processed_at=now,
            )
        return PaymentResponse(
            status=PaymentStatus.SUCCESS,
            transaction_id=self.transaction_id_factory(),
            message="Payment processed successfully",
            processed_amount=request.amount,
            processed_at=now,
        )

    def refund_payment(self, transaction_id: str, amount: float) -> PaymentResponse:
        self.calls.append({"method": "refund_payment", "transaction_id": transaction_id, "amount": amount})

        if not self.should_succeed:
            return PaymentResponse(status=PaymentStatus.FAILED, message=self.failure_reason)
        return PaymentResponse(
            status=PaymentStatus.SUCCESS,
            transaction_id=f"REF_{uuid4().hex}",
            message="Refund processed successfully",
            processed_amount=amount,
            processed_at=datetime.now(UTC),
        )

    def get_payment_status(self, transaction_id: str) -> PaymentResponse:
        self.calls.append({"method": "get_payment_status", "transaction_id": transaction_id})

        return PaymentResponse(
            status=PaymentStatus.SUCCESS,
            transaction_id=transaction_id,
            message="Transaction found and completed",
            processed_at=datetime.now(UTC) - timedelta(minutes=5),
        )
