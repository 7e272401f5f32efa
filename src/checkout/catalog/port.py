"""Catalog store port: what order placement needs from the product catalog.

The checkout code programs against this port; adapters are swapped via
configuration.
"""

from abc import ABC, abstractmethod


class CatalogStore(ABC):
    """Abstract interface for catalog adapters."""

    @abstractmethod
    def get_product(self, product_id: str):
        """Return the current Product, or None if it does not exist."""
        ...

    @abstractmethod
    def conditional_decrement_stock(self, product_id: str, amount: int) -> bool:
        """Take ``amount`` units from stock only if enough remain at write time.

        The check and the write must be one atomic step. Also adds ``amount``
        to the product's units sold.

        Returns:
            True when the decrement was applied, False when stock was insufficient
            (or the product is gone or inactive) at the moment of the write.
        """
        ...

    @abstractmethod
    def restore_stock(self, product_id: str, amount: int) -> None:
        """Compensate an applied decrement: put ``amount`` units back."""
        ...

    @abstractmethod
    def list_products(self, active_only: bool = False) -> list:
        """Return products in the catalog."""
        ...

    @abstractmethod
    def low_stock_products(self, threshold: int) -> list:
        """Return active products with stock at or below ``threshold``."""
        ...
