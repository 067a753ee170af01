"""Repository for the Order aggregate.

Soft-deleted orders stay in storage with ``active=False`` and are invisible
to every lookup here. ``add`` covers both insert and update.
"""

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.exceptions import OrderNotFoundError
from ordering.order.order import Order


@ordering.repository(part_of=Order)
class OrderRepository:
    def get_by_id(self, order_id) -> Order | None:
        """Return the active order with this id, or None."""
        if not order_id:
            return None
        try:
            order = self.get(order_id)
        except ObjectNotFoundError:
            return None
        return order if order.active else None

    def load(self, order_id) -> Order:
        """Like ``get_by_id`` but raises ``OrderNotFoundError`` when absent."""
        order = self.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def soft_delete(self, order):
        order.deactivate()
        return self.add(order)

    def query(self):
        """QuerySet over active orders, ready for further filtering."""
        return self._dao.query.filter(active=True)
