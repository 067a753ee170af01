"""Order modification — application service, command and handler.

Items can only be appended; the customer email can be corrected as long as
the order is active. Appending an item raises ``OrderItemAdded``, which is
published after the order is committed.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.publishing import get_publisher


@ordering.application_service(part_of=Order)
class OrderModificationService:
    def add_item(self, order_id, product_name, quantity) -> None:
        """Append a line item to an existing order."""
        repo = current_domain.repository_for(Order)
        order = repo.load(order_id)
        order.add_item(product_name, quantity)
        get_publisher().publish_after_commit(order, repo.add)


@ordering.command(part_of="Order")
class ChangeCustomerEmail:
    """Correct the customer email recorded on an order."""

    order_id = Identifier(required=True)
    customer_email = String(max_length=254)


@ordering.command_handler(part_of=Order)
class ModifyOrderHandler:
    @handle(ChangeCustomerEmail)
    def change_customer_email(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.load(command.order_id)
        order.rename(command.customer_email)
        repo.add(order)
