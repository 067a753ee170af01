"""Payment gateway adapter for a processor reachable over HTTP/JSON.

Every call is bounded by a timeout. Timeouts, transport errors, non-2xx
replies and unreadable bodies all come back as a ``Failed`` response; the
adapter never raises into the payment use case.
"""

from datetime import datetime

import requests
import structlog

from payments.gateway.port import PaymentGateway, PaymentRequest, PaymentResponse, PaymentStatus

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpPaymentGateway(PaymentGateway):
    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS, session=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def process_payment(self, request: PaymentRequest) -> PaymentResponse:
        payload = {
            "amount": request.amount,
            "currency": request.currency,
            "customerEmail": request.customer_email,
            "orderReference": request.order_reference,
            "paymentMethod": request.payment_method,
        }
        return self._call("POST", "/payments", json=payload)

    def refund_payment(self, transaction_id: str, amount: float) -> PaymentResponse:
        return self._call("POST", f"/payments/{transaction_id}/refunds", json={"amount": amount})

    def get_payment_status(self, transaction_id: str) -> PaymentResponse:
        return self._call("GET", f"/payments/{transaction_id}")

    def _call(self, method: str, path: str, **kwargs) -> PaymentResponse:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            body = response.json()
        except requests.Timeout:
            logger.warning("Payment gateway timed out", url=url, timeout=self.timeout)
            return PaymentResponse(status=PaymentStatus.FAILED, message="Payment gateway timed out")
        except ValueError:
            logger.warning("Payment gateway returned an unreadable body", url=url)
            return PaymentResponse(status=PaymentStatus.FAILED, message="Invalid payment gateway response")
        except requests.RequestException as exc:
            logger.warning("Payment gateway request failed", url=url, error=str(exc))
            return PaymentResponse(status=PaymentStatus.FAILED, message="Payment gateway unavailable")

        return _parse_response(body)


def _parse_response(body: dict) -> PaymentResponse:
    try:
        status = PaymentStatus(body.get("status"))
    except ValueError:
        return PaymentResponse(
            status=PaymentStatus.FAILED,
            message=f"Unknown payment status: {body.get('status')!r}",
        )

    processed_at = body.get("processedAt")
    return PaymentResponse(
        status=status,
        transaction_id=body.get("transactionId") or "",
        message=body.get("message") or "",
        processed_amount=float(body.get("processedAmount") or 0.0),
        processed_at=datetime.fromisoformat(processed_at) if processed_at else None,
    )
