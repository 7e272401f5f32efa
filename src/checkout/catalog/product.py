"""Product aggregate (CQRS) — the catalog's view of price and stock.

The catalog itself is maintained by other tooling. Checkout reads price and
stock from here and is the only writer of ``stock_quantity`` and
``units_sold`` during order placement.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from checkout.catalog.events import ProductRepriced, StockRestored, StockSold
from checkout.domain import checkout
from checkout.errors import InsufficientStock


@checkout.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    units_sold = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_counters_must_not_be_negative(self):
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError({"stock_quantity": ["Stock quantity cannot be negative"]})
        if self.units_sold is not None and self.units_sold < 0:
            raise ValidationError({"units_sold": ["Units sold cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, price, stock_quantity=0, is_active=True):
        now = datetime.now(UTC)
        return cls(
            name=name,
            price=price,
            stock_quantity=stock_quantity,
            units_sold=0,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def can_supply(self, quantity):
        return bool(self.is_active) and quantity <= self.stock_quantity

    def record_sale(self, quantity):
        """Take ``quantity`` units out of stock and count them as sold."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if not self.can_supply(quantity):
            available = self.stock_quantity if self.is_active else 0
            raise InsufficientStock(self.id, quantity, available)

        previous_stock = self.stock_quantity
        self.stock_quantity = previous_stock - quantity
        self.units_sold = (self.units_sold or 0) + quantity
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockSold(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous_stock,
                new_stock=self.stock_quantity,
                units_sold=self.units_sold,
                sold_at=now,
            )
        )

    def reverse_sale(self, quantity):
        """Put back units taken by ``record_sale`` for an order that failed."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > (self.units_sold or 0):
            raise ValidationError({"quantity": [f"Cannot restore {quantity} units, only {self.units_sold} sold"]})

        previous_stock = self.stock_quantity
        self.stock_quantity = previous_stock + quantity
        self.units_sold = self.units_sold - quantity
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous_stock,
                new_stock=self.stock_quantity,
                units_sold=self.units_sold,
                restored_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Catalog maintenance
    # -------------------------------------------------------------------
    def change_price(self, new_price):
        if new_price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        previous_price = self.price
        self.price = new_price
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductRepriced(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=new_price,
                repriced_at=now,
            )
        )

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)
