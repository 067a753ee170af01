"""FastAPI routes for the Ordering domain."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddItemRequest,
    CreateOrderRequest,
    OrderIdResponse,
    OrderPageResponse,
    OrderResponse,
    PaymentResultResponse,
    ProcessPaymentRequest,
    StatusResponse,
    UpdateOrderRequest,
)
from ordering.exceptions import OrderNotFoundError
from ordering.order.creation import OrderCreationService
from ordering.order.deletion import DeleteOrder
from ordering.order.modification import ChangeCustomerEmail, OrderModificationService
from ordering.order.payment import OrderPaymentService
from ordering.order.queries import DEFAULT_PAGE_SIZE, DEFAULT_SORT_FIELD, OrderListQuery, get_order_by_id, list_orders

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest) -> OrderIdResponse:
    order_id = OrderCreationService().create_order(
        body.customer_email,
        [item.model_dump() for item in body.items],
    )
    return OrderIdResponse(order_id=order_id)


@router.get("", response_model=OrderPageResponse)
async def get_orders(
    customer_email: str | None = None,
    min_total: float | None = None,
    max_total: float | None = None,
    sort_by: str = DEFAULT_SORT_FIELD,
    sort_order: str = "asc",
    page_number: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
) -> OrderPageResponse:
    page = list_orders(
        OrderListQuery(
            customer_email=customer_email,
            min_total=min_total,
            max_total=max_total,
            sort_by=sort_by,
            sort_order=sort_order,
            page_number=page_number,
            page_size=page_size,
        )
    )
    return OrderPageResponse(
        items=[OrderResponse.from_order(order) for order in page.items],
        page_number=page.page_number,
        page_size=page.page_size,
        total_count=page.total_count,
        total_pages=page.total_pages,
        has_previous=page.has_previous,
        has_next=page.has_next,
        sort_by=page.sort_by,
        sort_order=page.sort_order,
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = get_order_by_id(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return OrderResponse.from_order(order)


@router.put("/{order_id}", response_model=StatusResponse)
async def update_order(order_id: str, body: UpdateOrderRequest) -> StatusResponse:
    command = ChangeCustomerEmail(order_id=order_id, customer_email=body.customer_email)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.delete("/{order_id}", status_code=204)
async def delete_order(order_id: str) -> Response:
    current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False)
    return Response(status_code=204)


@router.post("/{order_id}/items", status_code=201, response_model=StatusResponse)
async def add_item(order_id: str, body: AddItemRequest) -> StatusResponse:
    OrderModificationService().add_item(order_id, body.product_name, body.quantity)
    return StatusResponse()


@router.post(
    "/{order_id}/payment",
    response_model=PaymentResultResponse,
    responses={400: {"model": PaymentResultResponse, "description": "The payment gateway did not accept the charge"}},
)
async def process_payment(order_id: str, body: ProcessPaymentRequest) -> JSONResponse:
    result = OrderPaymentService().process_payment(
        order_id,
        body.payment_method,
        amount=body.amount,
        currency=body.currency,
    )
    payload = PaymentResultResponse.from_result(result)
    return JSONResponse(status_code=200 if result.succeeded else 400, content=payload.model_dump(mode="json"))
