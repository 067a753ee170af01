"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- HttpPaymentGateway when PAYMENT_GATEWAY_URL is set
- FakeGateway otherwise (development and testing)
"""

import os

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.http_adapter import DEFAULT_TIMEOUT_SECONDS, HttpPaymentGateway
from payments.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _default_gateway() -> PaymentGateway:
    base_url = os.getenv("PAYMENT_GATEWAY_URL")
    if base_url:
        timeout = float(os.getenv("PAYMENT_GATEWAY_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))
        return HttpPaymentGateway(base_url, timeout=timeout)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
