"""Cart store port: per-customer cart lines as seen at checkout time."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CartLineSnapshot:
    """A cart line joined with the product's current state.

    Product fields are None when the product no longer exists.
    """

    product_id: str
    quantity: int
    product_name: str | None = None
    unit_price: float | None = None
    stock_quantity: int = 0
    is_active: bool = False

    @property
    def product_exists(self) -> bool:
        return self.product_name is not None


class CartStore(ABC):
    """Abstract interface for cart adapters."""

    @abstractmethod
    def get_cart_lines(self, customer_id: str) -> list[CartLineSnapshot]:
        """Return the customer's cart lines joined with current product state."""
        ...

    @abstractmethod
    def claim_cart(self, customer_id: str) -> list[CartLineSnapshot]:
        """Read the cart lines and hold the cart for one checkout, atomically.

        Returns an empty list, without holding anything, when the cart is
        empty.

        Raises:
            CheckoutInProgress: Another checkout already holds the cart.
        """
        ...

    @abstractmethod
    def release_cart(self, customer_id: str) -> None:
        """Drop a checkout's hold on the cart, leaving its lines as they are."""
        ...

    @abstractmethod
    def clear_cart(self, customer_id: str) -> None:
        """Remove every line from the customer's cart."""
        ...

    @abstractmethod
    def add_item(self, customer_id: str, product_id: str, quantity: int = 1) -> None:
        """Add a product to the cart, increasing the quantity if already present."""
        ...

    @abstractmethod
    def update_quantity(self, customer_id: str, product_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        ...

    @abstractmethod
    def remove_item(self, customer_id: str, product_id: str) -> None:
        """Remove a product from the cart."""
        ...
