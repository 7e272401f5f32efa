"""Repository for the Order aggregate."""

from checkout.domain import checkout
from checkout.order.order import Order


def _newest_first(orders):
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


@checkout.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number: str) -> Order | None:
        orders = self._dao.query.filter(order_number=order_number).all().items
        return orders[0] if orders else None

    def for_customer(self, customer_id) -> list[Order]:
        """The customer's orders, newest first."""
        return _newest_first(self._dao.query.filter(customer_id=str(customer_id)).all().items)

    def all_orders(self) -> list[Order]:
        """Every order in the ledger, newest first."""
        return _newest_first(self._dao.query.all().items)

    def with_status(self, status: str) -> list[Order]:
        return self._dao.query.filter(status=status).all().items
