"""Stock reservation saga for a recorded order.

Each order line takes its units with a conditional decrement at the catalog.
If any line cannot be taken, every decrement already applied is given back
and the order is flagged ``failed``; the original error is then re-raised.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from checkout.catalog.port import CatalogStore
from checkout.errors import CheckoutError, ConcurrencyConflict, StorageFailure
from checkout.order.ledger import OrderLedger
from checkout.order.order import Order

logger = structlog.get_logger(__name__)


class StockReservation:
    def __init__(self, catalog: CatalogStore, ledger: OrderLedger):
        self.catalog = catalog
        self.ledger = ledger

    def reserve(self, order: Order) -> None:
        applied = []
        for line in order.lines:
            product_id = str(line.product_id)
            try:
                taken = self.catalog.conditional_decrement_stock(product_id, line.quantity)
            except (CheckoutError, ValidationError) as exc:
                self.compensate(order, applied, reason=f"Stock reservation for product {product_id} failed: {exc}")
                raise

            if not taken:
                self.compensate(
                    order,
                    applied,
                    reason=f"Stock for product {product_id} was taken by a concurrent order",
                )
                raise ConcurrencyConflict(product_id, line.quantity)

            applied.append((product_id, line.quantity))

        logger.info("checkout.stock_reserved", order_number=order.order_number, lines=len(applied))

    def compensate(self, order: Order, applied, reason: str) -> None:
        """Give back applied decrements and flag the order as failed.

        Every step is attempted even if an earlier one fails. When any step
        fails the order needs manual reconciliation and StorageFailure is
        raised.
        """
        failures = []
        for product_id, quantity in reversed(applied):
            try:
                self.catalog.restore_stock(product_id, quantity)
            except (CheckoutError, ValidationError, ObjectNotFoundError) as exc:
                failures.append(exc)
                logger.error(
                    "checkout.compensation_step_failed",
                    order_number=order.order_number,
                    product_id=product_id,
                    quantity=quantity,
                    error=str(exc),
                )

        try:
            self.ledger.mark_failed(order.id, reason)
        except (CheckoutError, ValidationError, ObjectNotFoundError) as exc:
            failures.append(exc)
            logger.error("checkout.order_not_flagged", order_number=order.order_number, error=str(exc))

        if failures:
            raise StorageFailure(
                "compensate_order",
                f"order {order.order_number} needs reconciliation ({len(failures)} step(s) failed)",
            ) from failures[0]

        logger.warning(
            "checkout.compensated",
            order_number=order.order_number,
            restored_lines=len(applied),
            reason=reason,
        )
