"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer

from checkout.domain import checkout


@checkout.event(part_of="Product")
class StockSold:
    """Units were taken out of stock for an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    units_sold = Integer(required=True)
    sold_at = DateTime(required=True)


@checkout.event(part_of="Product")
class StockRestored:
    """Units taken for an order that did not complete were put back."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    units_sold = Integer(required=True)
    restored_at = DateTime(required=True)


@checkout.event(part_of="Product")
class ProductRepriced:
    """The product's selling price changed. Existing orders keep their snapshot."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
    repriced_at = DateTime(required=True)
