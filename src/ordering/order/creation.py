"""Order creation — application service.

The order is stored in its own unit of work and ``OrderCreated`` (plus one
``OrderItemAdded`` per initial item) is published once that commit succeeds.
"""

from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.exceptions import InvalidItemError
from ordering.order.order import Order
from ordering.publishing import get_publisher


def _parse_items(items):
    if not items:
        return []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise InvalidItemError("Items must be a list of objects")
    return items


@ordering.application_service(part_of=Order)
class OrderCreationService:
    """Open an order for a customer, optionally with its first line items."""

    def create_order(self, customer_email, items=None) -> str:
        items = _parse_items(items)

        order = Order.create(customer_email)
        for item in items:
            order.add_item(item.get("product_name"), item.get("quantity"))

        get_publisher().publish_after_commit(order, current_domain.repository_for(Order).add)
        return str(order.id)
