"""Order ledger, the only way orders are written or read.

An order and its lines are one aggregate and go to the provider in one unit
of work, so a failed write leaves nothing behind. Order numbers are unique:
the check and the insert share one hold of the storage lock.
"""

import structlog
from protean.utils.globals import current_domain

from checkout.errors import DuplicateOrderNumber
from checkout.order.order import Order
from checkout.order.status import OrderStatus
from checkout.storage import storage_call

logger = structlog.get_logger(__name__)


class OrderLedger:
    def _repo(self):
        return current_domain.repository_for(Order)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def record(self, order: Order) -> Order:
        """Persist a newly placed order together with its lines."""
        with storage_call("record_order"):
            repo = self._repo()
            if repo.find_by_number(order.order_number) is not None:
                raise DuplicateOrderNumber(order.order_number)
            repo.add(order)

        logger.info(
            "ledger.order_recorded",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            total_price=order.total_price,
        )
        return order

    def set_order_status(self, order_id: str, new_status) -> Order:
        """Apply an operator status change.

        Raises InvalidTransition, leaving the stored status untouched, when
        the status machine rejects the change. Re-requesting the current
        status returns the order unchanged.
        """
        with storage_call("set_order_status"):
            repo = self._repo()
            order = repo.get(str(order_id))
            previous = order.status
            changed = order.transition_to(new_status)
            if changed:
                repo.add(order)

        if changed:
            logger.info(
                "ledger.status_changed",
                order_id=str(order.id),
                order_number=order.order_number,
                previous_status=previous,
                new_status=order.status,
            )
        else:
            logger.debug("ledger.status_unchanged", order_id=str(order.id), status=order.status)
        return order

    def mark_failed(self, order_id: str, reason: str) -> Order:
        """Flag an order whose checkout was compensated."""
        with storage_call("mark_order_failed"):
            repo = self._repo()
            order = repo.get(str(order_id))
            order.mark_failed(reason)
            repo.add(order)

        logger.warning(
            "ledger.order_failed",
            order_id=str(order.id),
            order_number=order.order_number,
            reason=order.failure_reason,
        )
        return order

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(self, order_id: str) -> Order:
        with storage_call("get_order"):
            return self._repo().get(str(order_id))

    def find_by_number(self, order_number: str) -> Order | None:
        with storage_call("find_order_by_number"):
            return self._repo().find_by_number(order_number)

    def list_orders(self, customer_id: str) -> list[Order]:
        """A customer's orders with their lines, newest first."""
        with storage_call("list_orders"):
            return self._repo().for_customer(customer_id)

    def list_all_orders(self) -> list[Order]:
        """Every order with its lines, newest first."""
        with storage_call("list_all_orders"):
            return self._repo().all_orders()

    def delivered_orders(self) -> list[Order]:
        with storage_call("delivered_orders"):
            return self._repo().with_status(OrderStatus.DELIVERED.value)
