"""Read side for orders: lookup by id and filtered, sorted, paged listings.

Only active orders are ever visible. Paging inputs are clamped rather than
rejected: ``page_number`` to at least 1 and ``page_size`` to 1..100. An
unknown sort field is rejected with ``InvalidSortFieldError``.
"""

import math
from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from ordering.exceptions import InvalidSortFieldError
from ordering.order.order import Order

SORTABLE_FIELDS = ("created_at", "customer_email", "total_amount", "is_paid")
DEFAULT_SORT_FIELD = "created_at"
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def get_order_by_id(order_id) -> Order | None:
    return current_domain.repository_for(Order).get_by_id(order_id)


@dataclass
class OrderListQuery:
    customer_email: str | None = None
    min_total: float | None = None
    max_total: float | None = None
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = "asc"
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        self.page_number = max(1, int(self.page_number or 1))
        self.page_size = min(MAX_PAGE_SIZE, max(1, int(self.page_size or DEFAULT_PAGE_SIZE)))
        self.sort_by = (self.sort_by or DEFAULT_SORT_FIELD).lower()
        self.sort_order = "desc" if (self.sort_order or "").lower() == "desc" else "asc"

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


@dataclass
class PaginatedResult:
    items: list = field(default_factory=list)
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_count: int = 0
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = "asc"

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages


def list_orders(query: OrderListQuery) -> PaginatedResult:
    if query.sort_by not in SORTABLE_FIELDS:
        raise InvalidSortFieldError(
            f"Cannot sort orders by '{query.sort_by}'",
            sort_by=query.sort_by,
            allowed=list(SORTABLE_FIELDS),
        )

    queryset = current_domain.repository_for(Order).query()
    if query.customer_email:
        queryset = queryset.filter(customer_email__contains=query.customer_email)
    if query.min_total is not None:
        queryset = queryset.filter(total_amount__gte=query.min_total)
    if query.max_total is not None:
        queryset = queryset.filter(total_amount__lte=query.max_total)

    ordering_key = query.sort_by if query.sort_order == "asc" else f"-{query.sort_by}"
    results = queryset.order_by(ordering_key).offset(query.offset).limit(query.page_size).all()

    return PaginatedResult(
        items=list(results.items),
        page_number=query.page_number,
        page_size=query.page_size,
        total_count=results.total,
        sort_by=query.sort_by,
        sort_order=query.sort_order,
    )
