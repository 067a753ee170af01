"""Payment gateway port (abstract interface).

Defines the request/response contract every payment processor adapter must
honour. The ordering use cases only ever talk to ``PaymentGateway``, so the
fake processor used in development and tests can be swapped for the HTTP
adapter without touching domain or application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PaymentStatus(Enum):
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class PaymentRequest:
    """A charge the processor is asked to make."""

    amount: float
    currency: str
    customer_email: str
    order_reference: str
    payment_method: str


@dataclass(frozen=True)
class PaymentResponse:
    """What the processor reported back."""

    status: PaymentStatus
    transaction_id: str = ""
    message: str = ""
    processed_amount: float = 0.0
    processed_at: datetime | None = None

    @property
    def success(self) -> bool:
        return self.status is PaymentStatus.SUCCESS


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def process_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Charge the customer."""
        ...

    @abstractmethod
    def refund_payment(self, transaction_id: str, amount: float) -> PaymentResponse:
        """Refund (part of) a previous charge."""
        ...

    @abstractmethod
    def get_payment_status(self, transaction_id: str) -> PaymentResponse:
        """Look up the current state of a previous charge."""
        ...
