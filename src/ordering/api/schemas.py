"""Pydantic request/response schemas for the Ordering API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Request Schemas ---


class OrderItemRequest(BaseModel):
    product_name: str = Field(..., max_length=255)
    quantity: int


class CreateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_email": "jane.doe@example.com",
                    "items": [{"product_name": "Widget", "quantity": 2}],
                }
            ]
        }
    }

    customer_email: str = Field(..., max_length=254)
    items: list[OrderItemRequest] = Field(default_factory=list)


class UpdateOrderRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"customer_email": "jane.smith@example.com"}]}}

    customer_email: str = Field(..., max_length=254)


class AddItemRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"product_name": "Gadget", "quantity": 1}]}}

    product_name: str = Field(..., max_length=255)
    quantity: int


class ProcessPaymentRequest(BaseModel):
    model_config = {
        "json_schema_extra": {"examples": [{"amount": 50.0, "currency": "USD", "payment_method": "card"}]}
    }

    amount: float = 0.0
    currency: str = Field("USD", max_length=3)
    payment_method: str = Field(..., max_length=50)


# --- Response Schemas ---


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class OrderItemResponse(BaseModel):
    product_name: str
    quantity: int


class OrderResponse(BaseModel):
    id: str
    customer_email: str
    items: list[OrderItemResponse]
    total_amount: float
    is_paid: bool
    payment_status: str
    transaction_id: str | None = None
    payment_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        return cls(
            id=str(order.id),
            customer_email=order.customer_email,
            items=[OrderItemResponse(product_name=i.product_name, quantity=i.quantity) for i in order.items],
            total_amount=order.total_amount,
            is_paid=order.is_paid,
            payment_status=order.payment_status,
            transaction_id=order.transaction_id,
            payment_date=order.payment_date,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderPageResponse(BaseModel):
    items: list[OrderResponse]
    page_number: int
    page_size: int
    total_count: int
    total_pages: int
    has_previous: bool
    has_next: bool
    sort_by: str
    sort_order: str


class PaymentResultResponse(BaseModel):
    status: str
    transaction_id: str
    message: str
    processed_amount: float
    processed_at: datetime | None = None

    @classmethod
    def from_result(cls, result) -> PaymentResultResponse:
        return cls(
            status=result.status.value,
            transaction_id=result.transaction_id,
            message=result.message,
            processed_amount=result.processed_amount,
            processed_at=result.processed_at,
        )
