"""Checkout bounded context — order placement for the storefront.

Turns a customer's cart into a durable order while keeping product stock
consistent under concurrent buyers. Products and carts are owned by
collaborating stores; the order ledger and its status machine are owned here.
"""

import structlog
from protean.domain import Domain

checkout = Domain(name="checkout")

logger = structlog.get_logger(__name__)
