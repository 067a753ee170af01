"""Error taxonomy for the ordering context.

Every error raised by the Order aggregate and its use cases is an
``OrderingError``: it carries a stable ``code``, a human readable message,
a context dictionary that callers can enrich on the way up, and the time it
occurred. Each concrete error also inherits from the Protean exception of
its kind, so code that only knows Protean can still catch it:

    NotFound        OrderNotFoundError              ObjectNotFoundError
    Validation      InvalidCustomerEmailError,      ValidationError
                    InvalidItemError, EmptyOrderError,
                    InvalidAmountError, InvalidTransactionError,
                    InvalidSortFieldError, InvalidPaymentMethodError,
                    InvalidCurrencyError
    StateConflict   AlreadyPaidError,               InvalidOperationError
                    DuplicatePaymentError
"""

from datetime import UTC, datetime
from typing import Any

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class OrderingError(Exception):
    """Base for ordering errors. Carries the structured error payload."""

    code: str = "ORDERING_ERROR"
    kind: str = "domain"
    field: str = "_entity"

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context: dict[str, Any] = dict(context)
        self.occurred_at = datetime.now(UTC)
        super().__init__({self.field: [message]})

    def add_context(self, key: str, value: Any) -> "OrderingError":
        self.context[key] = value
        return self

    def log_details(self) -> dict[str, Any]:
        """Flatten the error into keyword arguments for a structlog call."""
        return {
            "error_code": self.code,
            "error_kind": self.kind,
            "error_message": self.message,
            "occurred_at": self.occurred_at.isoformat(),
            **self.context,
        }

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------
class OrderNotFoundError(OrderingError, ObjectNotFoundError):
    code = "ORDER_NOT_FOUND"
    kind = "not_found"
    field = "order_id"

    def __init__(self, order_id: str, **context: Any) -> None:
        super().__init__(f"Order with ID {order_id} was not found", order_id=order_id, **context)


class OrderValidationError(OrderingError, ValidationError):
    code = "ORDER_VALIDATION_ERROR"
    kind = "validation"


class OrderStateConflict(OrderingError, InvalidOperationError):
    code = "ORDER_STATE_CONFLICT"
    kind = "state_conflict"


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------
class InvalidCustomerEmailError(OrderValidationError):
    code = "INVALID_CUSTOMER_EMAIL"
    field = "customer_email"


class InvalidItemError(OrderValidationError):
    code = "INVALID_ORDER_ITEM"
    field = "items"


class EmptyOrderError(OrderValidationError):
    code = "ORDER_CALCULATION_ERROR"
    field = "items"


class InvalidAmountError(OrderValidationError):
    code = "INVALID_ORDER_OPERATION"
    field = "total_amount"


class InvalidTransactionError(OrderValidationError):
    code = "INVALID_PAYMENT"
    field = "transaction_id"


class InvalidSortFieldError(OrderValidationError):
    code = "INVALID_SORT_FIELD"
    field = "sort_by"


class InvalidPaymentMethodError(OrderValidationError):
    code = "INVALID_PAYMENT_METHOD"
    field = "payment_method"


class InvalidCurrencyError(OrderValidationError):
    code = "INVALID_CURRENCY"
    field = "currency"


# ---------------------------------------------------------------------------
# State conflicts
# ---------------------------------------------------------------------------
class AlreadyPaidError(OrderStateConflict):
    code = "INVALID_PAYMENT_STATE"
    field = "is_paid"


class DuplicatePaymentError(OrderStateConflict):
    code = "DUPLICATE_PAYMENT_ATTEMPT"
    field = "is_paid"
