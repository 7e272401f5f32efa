"""Cart store backed by the domain's Cart and Product repositories."""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from checkout.cart.cart import Cart
from checkout.cart.port import CartLineSnapshot, CartStore
from checkout.catalog.product import Product
from checkout.config import get_checkout_claim_ttl, get_store_adapter
from checkout.storage import storage_call

logger = structlog.get_logger(__name__)

_cart_instance = None


class ProteanCartStore(CartStore):
    """Carts persisted through the configured Protean provider."""

    def _repo(self):
        return current_domain.repository_for(Cart)

    def _existing_cart(self, customer_id) -> Cart:
        cart = self._repo().for_customer(customer_id)
        if cart is None:
            raise ValidationError({"customer_id": [f"No cart found for customer {customer_id}"]})
        return cart

    def _snapshots(self, cart: Cart) -> list[CartLineSnapshot]:
        product_repo = current_domain.repository_for(Product)
        snapshots = []
        for line in cart.lines:
            try:
                product = product_repo.get(str(line.product_id))
            except ObjectNotFoundError:
                snapshots.append(CartLineSnapshot(product_id=str(line.product_id), quantity=line.quantity))
                continue

            snapshots.append(
                CartLineSnapshot(
                    product_id=str(line.product_id),
                    quantity=line.quantity,
                    product_name=product.name,
                    unit_price=product.price,
                    stock_quantity=product.stock_quantity,
                    is_active=bool(product.is_active),
                )
            )
        return snapshots

    def get_cart_lines(self, customer_id: str) -> list[CartLineSnapshot]:
        with storage_call("get_cart_lines"):
            cart = self._repo().for_customer(customer_id)
            if cart is None:
                return []
            return self._snapshots(cart)

    def claim_cart(self, customer_id: str) -> list[CartLineSnapshot]:
        # Read and hold under one lock acquisition so two checkouts of the
        # same cart cannot both see its lines.
        with storage_call("claim_cart"):
            repo = self._repo()
            cart = repo.for_customer(customer_id)
            if cart is None or not cart.lines:
                return []
            cart.claim_for_checkout(get_checkout_claim_ttl())
            repo.add(cart)
            snapshots = self._snapshots(cart)
        logger.debug("cart.claimed", customer_id=str(customer_id), line_count=len(snapshots))
        return snapshots

    def release_cart(self, customer_id: str) -> None:
        with storage_call("release_cart"):
            repo = self._repo()
            cart = repo.for_customer(customer_id)
            if cart is None or cart.checkout_started_at is None:
                return
            cart.release_checkout()
            repo.add(cart)
        logger.debug("cart.released", customer_id=str(customer_id))

    def clear_cart(self, customer_id: str) -> None:
        with storage_call("clear_cart"):
            repo = self._repo()
            cart = repo.for_customer(customer_id)
            if cart is None or not cart.lines:
                return
            line_count = len(cart.lines)
            cart.clear()
            repo.add(cart)
        logger.info("cart.cleared", customer_id=str(customer_id), line_count=line_count)

    def add_item(self, customer_id: str, product_id: str, quantity: int = 1) -> None:
        with storage_call("add_cart_item"):
            repo = self._repo()
            cart = repo.for_customer(customer_id)
            if cart is None:
                cart = Cart.create(customer_id)
            cart.add_item(product_id, quantity)
            repo.add(cart)

    def update_quantity(self, customer_id: str, product_id: str, quantity: int) -> None:
        with storage_call("update_cart_quantity"):
            cart = self._existing_cart(customer_id)
            cart.update_quantity(product_id, quantity)
            self._repo().add(cart)

    def remove_item(self, customer_id: str, product_id: str) -> None:
        with storage_call("remove_cart_item"):
            cart = self._existing_cart(customer_id)
            cart.remove_item(product_id)
            self._repo().add(cart)


def get_cart_store() -> CartStore:
    """Return the configured cart adapter (singleton)."""
    global _cart_instance
    if _cart_instance is None:
        adapter = get_store_adapter()
        if adapter == "protean":
            _cart_instance = ProteanCartStore()
        else:
            raise ValueError(f"Unknown cart store adapter: {adapter}")
    return _cart_instance


def reset_cart_store():
    """Reset the cart singleton (useful for testing)."""
    global _cart_instance
    _cart_instance = None
