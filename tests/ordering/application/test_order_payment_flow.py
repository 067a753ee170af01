"""Application tests for OrderPaymentService."""

import pytest
from ordering.exceptions import (
    DuplicatePaymentError,
    EmptyOrderError,
    InvalidCurrencyError,
    InvalidPaymentMethodError,
    OrderNotFoundError,
)
from ordering.order.creation import OrderCreationService
from ordering.order.deletion import DeleteOrder
from ordering.order.events import PaymentFailed, PaymentInitiated, PaymentSuccessful
from ordering.order.order import Order, PaymentState
from ordering.order.payment import OrderPaymentService
from ordering.order.repository import OrderRepository
from ordering.publishing import get_publisher
from payments.gateway.port import PaymentGateway, PaymentResponse, PaymentStatus
from protean import UnitOfWork, current_domain, current_uow
from protean.exceptions import IncorrectUsageError


def _create(email="a@b.com", items=(("Widget", 5),)):
    payload = [{"product_name": name, "quantity": qty} for name, qty in items]
    return OrderCreationService().create_order(email, payload)


def _pay(order_id, amount=0.0, currency="USD", payment_method="card"):
    return OrderPaymentService().process_payment(order_id, payment_method, amount=amount, currency=currency)


def _load(order_id):
    return current_domain.repository_for(Order).get(order_id)


class _StaticGateway(PaymentGateway):
    def __init__(self, response):
        self.response = response

    def process_payment(self, request):
        return self.response

    def refund_payment(self, transaction_id, amount):
        raise NotImplementedError

    def get_payment_status(self, transaction_id):
        raise NotImplementedError


class TestSuccessfulPayment:
    def test_pays_the_order(self, gateway):
        order_id = _create()

        result = _pay(order_id, amount=50.0)

        assert result.succeeded
        assert result.status is PaymentStatus.SUCCESS
        assert result.transaction_id.startswith("TXN_")
        assert result.processed_amount == 50.0

        order = _load(order_id)
        assert order.is_paid is True
        assert order.transaction_id == result.transaction_id
        assert order.payment_date is not None
        assert order.total_amount == 50.0
        assert order.payment_state is PaymentState.PAID

    def test_defaults_to_the_order_total(self, gateway):
        order_id = _create(items=[("Widget", 2), ("Gadget", 1)])

        result = _pay(order_id)

        assert result.processed_amount == 30.0
        assert gateway.calls[0]["amount"] == 30.0

    def test_gateway_request(self, gateway):
        order_id = _create(email="buyer@example.com")

        _pay(order_id, amount=50.0, currency="EUR", payment_method="paypal")

        call = gateway.calls[0]
        assert call["order_reference"] == f"ORDER_{order_id}"
        assert call["customer_email"] == "buyer@example.com"
        assert call["currency"] == "EUR"
        assert call["payment_method"] == "paypal"

    def test_total_becomes_the_processed_amount(self, gateway):
        order_id = _create(items=[("Widget", 2)])

        _pay(order_id, amount=35.0)

        assert _load(order_id).total_amount == 35.0

    def test_publishes_initiated_then_successful(self, recorder, gateway):
        order_id = _create()
        recorder.events.clear()

        result = _pay(order_id, amount=50.0)

        assert [type(e) for e in recorder.events] == [PaymentInitiated, PaymentSuccessful]
        successful = recorder.events[1]
        assert successful.transaction_id == result.transaction_id
        assert successful.processed_amount == 50.0

    def test_uses_gateway_timestamp_when_missing(self):
        from payments.gateway import set_gateway

        set_gateway(
            _StaticGateway(PaymentResponse(status=PaymentStatus.SUCCESS, transaction_id="TXN_X", processed_amount=50.0))
        )
        order_id = _create()

        _pay(order_id, amount=50.0)

        order = _load(order_id)
        assert order.transaction_id == "TXN_X"
        assert order.payment_date is not None


class TestFailedPayment:
    def test_declined_email_leaves_order_unpaid(self, recorder, gateway):
        order_id = _create(email="fail@example.com")
        recorder.events.clear()

        result = _pay(order_id, amount=50.0)

        assert result.status is PaymentStatus.FAILED
        assert result.message == "Payment method declined"
        order = _load(order_id)
        assert order.is_paid is False
        assert order.transaction_id is None

        assert [type(e) for e in recorder.events] == [PaymentInitiated, PaymentFailed]
        failed = recorder.events[1]
        assert failed.failure_reason == "Payment method declined"
        assert failed.attempted_amount == 50.0

    def test_amount_over_limit(self, gateway):
        order_id = _create()

        result = _pay(order_id, amount=15000.0)

        assert result.status is PaymentStatus.FAILED
        assert result.message == "Amount exceeds transaction limit"
        assert _load(order_id).is_paid is False

    def test_failure_is_not_persisted(self, gateway):
        order_id = _create()
        gateway.configure(should_succeed=False, failure_reason="Insufficient funds")

        _pay(order_id, amount=50.0)

        order = _load(order_id)
        assert order.payment_state is PaymentState.UNPAID
        assert order.total_amount == 0.0

    def test_default_failure_reason(self, recorder):
        from payments.gateway import set_gateway

        set_gateway(_StaticGateway(PaymentResponse(status=PaymentStatus.CANCELLED)))
        order_id = _create()
        recorder.events.clear()

        result = _pay(order_id, amount=50.0)

        assert result.status is PaymentStatus.CANCELLED
        assert recorder.events[-1].failure_reason == "Payment processing failed"

    def test_failed_payment_can_be_retried(self, gateway):
        order_id = _create()
        gateway.configure(should_succeed=False)
        _pay(order_id, amount=50.0)

        gateway.configure(should_succeed=True)
        result = _pay(order_id, amount=50.0)

        assert result.succeeded
        assert _load(order_id).is_paid is True


class TestRejectedPayment:
    def test_duplicate_payment(self, recorder, gateway):
        order_id = _create()
        first = _pay(order_id, amount=50.0)
        recorder.events.clear()

        with pytest.raises(DuplicatePaymentError) as exc_info:
            _pay(order_id, amount=50.0)

        assert exc_info.value.context["existing_transaction_id"] == first.transaction_id
        assert "payment_date" in exc_info.value.context
        assert len(gateway.calls) == 1
        assert recorder.events == []
        assert _load(order_id).transaction_id == first.transaction_id

    def test_unknown_order(self, gateway):
        with pytest.raises(OrderNotFoundError):
            _pay("does-not-exist", amount=50.0)
        assert gateway.calls == []

    def test_deleted_order(self, gateway):
        order_id = _create()
        current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False)

        with pytest.raises(OrderNotFoundError):
            _pay(order_id, amount=50.0)

    def test_order_without_items(self, gateway):
        order_id = _create(items=())

        with pytest.raises(EmptyOrderError):
            _pay(order_id)
        assert gateway.calls == []


class TestPublishAfterCommit:
    def test_successful_payment_is_published_after_the_order_is_stored(self, gateway):
        order_id = _create()
        seen = []

        def _listener(event):
            if isinstance(event, PaymentSuccessful):
                seen.append((bool(current_uow and current_uow.in_progress), _load(event.order_id).is_paid))

        get_publisher().register(_listener)

        _pay(order_id, amount=50.0)

        assert seen == [(False, True)]

    def test_gateway_is_called_outside_a_unit_of_work(self):
        from payments.gateway import set_gateway

        observed = []

        class _ObservingGateway(_StaticGateway):
            def process_payment(self, request):
                observed.append(bool(current_uow and current_uow.in_progress))
                return super().process_payment(request)

        set_gateway(
            _ObservingGateway(
                PaymentResponse(status=PaymentStatus.SUCCESS, transaction_id="TXN_X", processed_amount=50.0)
            )
        )
        order_id = _create()

        _pay(order_id, amount=50.0)

        assert observed == [False]

    def test_cannot_run_inside_an_open_unit_of_work(self, recorder, gateway):
        order_id = _create()
        recorder.events.clear()

        with pytest.raises(IncorrectUsageError):
            with UnitOfWork():
                _pay(order_id, amount=50.0)

        assert PaymentSuccessful not in [type(e) for e in recorder.events]
        assert _load(order_id).is_paid is False


class TestPaymentInput:
    @pytest.mark.parametrize("payment_method", ["", "   ", None, "x" * 51])
    def test_invalid_payment_method(self, gateway, payment_method):
        order_id = _create()

        with pytest.raises(InvalidPaymentMethodError):
            _pay(order_id, payment_method=payment_method)
        assert gateway.calls == []

    def test_invalid_currency(self, gateway):
        order_id = _create()

        with pytest.raises(InvalidCurrencyError):
            _pay(order_id, currency="DOLLARS")
        assert gateway.calls == []


class TestRepository:
    def test_repository_is_the_custom_one(self):
        assert isinstance(current_domain.repository_for(Order), OrderRepository)
