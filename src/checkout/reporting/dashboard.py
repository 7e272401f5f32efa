"""Operator dashboard figures computed from the ledger and the catalog.

No lock is held across a report. Figures may lag an in-flight checkout.
"""

from dataclasses import asdict, dataclass, field

import structlog

from checkout.catalog.port import CatalogStore
from checkout.catalog.store import get_catalog_store
from checkout.config import get_low_stock_threshold
from checkout.order.ledger import OrderLedger
from checkout.order.status import OrderStatus

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DashboardSummary:
    """Figures for the operator dashboard.

    ``total_orders`` leaves out ``failed`` orders; ``orders_by_status`` still
    reports them.
    """

    revenue: float
    total_orders: int
    total_products: int
    low_stock: int
    low_stock_threshold: int
    orders_by_status: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def revenue(ledger: OrderLedger | None = None) -> float:
    """Sum of ``total_price`` over delivered orders."""
    ledger = ledger or OrderLedger()
    return sum(order.total_price for order in ledger.delivered_orders())


def low_stock_count(threshold: int | None = None, catalog: CatalogStore | None = None) -> int:
    """Number of active products with stock at or below ``threshold``."""
    catalog = catalog or get_catalog_store()
    if threshold is None:
        threshold = get_low_stock_threshold()
    return len(catalog.low_stock_products(threshold))


def dashboard_summary(
    threshold: int | None = None,
    ledger: OrderLedger | None = None,
    catalog: CatalogStore | None = None,
) -> DashboardSummary:
    ledger = ledger or OrderLedger()
    catalog = catalog or get_catalog_store()
    if threshold is None:
        threshold = get_low_stock_threshold()

    orders = ledger.list_all_orders()
    products = catalog.list_products()

    by_status = {status.value: 0 for status in OrderStatus}
    for order in orders:
        by_status[order.status] = by_status.get(order.status, 0) + 1

    summary = DashboardSummary(
        revenue=sum(order.total_price for order in orders if order.counts_as_revenue),
        total_orders=len(orders) - by_status[OrderStatus.FAILED.value],
        total_products=len(products),
        low_stock=len(catalog.low_stock_products(threshold)),
        low_stock_threshold=threshold,
        orders_by_status=by_status,
    )
    logger.debug("reporting.dashboard_computed", total_orders=summary.total_orders, revenue=summary.revenue)
    return summary
