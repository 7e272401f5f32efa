"""Cart aggregate (CQRS) — one per customer, consumed by checkout.

A line only exists while its quantity is at least one; asking for zero
removes it. Prices are never stored on the cart: checkout always re-reads
them from the catalog.
"""

from datetime import UTC, datetime, timedelta

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from checkout.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from checkout.domain import checkout
from checkout.errors import CheckoutInProgress


@checkout.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@checkout.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()
    # Set while a checkout is turning this cart into an order
    checkout_started_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=str(customer_id), created_at=now, updated_at=now)

    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity=1):
        """Add a product, or increase its quantity if it is already in the cart."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = self.line_for(product_id)
        if existing:
            existing.quantity += quantity
            line_quantity = existing.quantity
        else:
            self.add_lines(CartLine(product_id=product_id, quantity=quantity, added_at=now))
            line_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )

    def update_quantity(self, product_id, quantity):
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            self.remove_item(product_id)
            return

        line = self.line_for(product_id)
        if line is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        previous_quantity = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        line = self.line_for(product_id)
        if line is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
            )
        )

    def clear(self):
        line_count = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)
        self.checkout_started_at = None
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                line_count=line_count,
            )
        )

    # -------------------------------------------------------------------
    # Checkout hold
    # -------------------------------------------------------------------
    def checkout_in_progress(self, ttl_seconds, now=None) -> bool:
        if self.checkout_started_at is None:
            return False
        now = now or datetime.now(UTC)
        started = self.checkout_started_at
        if started.tzinfo is None:
            started = started.replace(tzinfo=UTC)
        return now - started < timedelta(seconds=ttl_seconds)

    def claim_for_checkout(self, ttl_seconds, now=None):
        """Hold the cart for one checkout.

        A hold older than ``ttl_seconds`` is treated as abandoned and can be
        taken over.
        """
        now = now or datetime.now(UTC)
        if self.checkout_in_progress(ttl_seconds, now):
            raise CheckoutInProgress(self.customer_id)
        self.checkout_started_at = now

    def release_checkout(self):
        self.checkout_started_at = None
