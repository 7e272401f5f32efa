"""Repository for the Cart aggregate."""

from checkout.cart.cart import Cart
from checkout.domain import checkout


@checkout.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id) -> Cart | None:
        """Find the customer's cart, if one was ever started."""
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None
