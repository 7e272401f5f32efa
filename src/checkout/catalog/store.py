"""Catalog store backed by the domain's Product repository."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from checkout.catalog.port import CatalogStore
from checkout.catalog.product import Product
from checkout.config import get_store_adapter
from checkout.storage import storage_call

logger = structlog.get_logger(__name__)

_catalog_instance = None


class ProteanCatalogStore(CatalogStore):
    """Products persisted through the configured Protean provider."""

    def _repo(self):
        return current_domain.repository_for(Product)

    def add_product(self, product: Product) -> Product:
        with storage_call("add_product"):
            self._repo().add(product)
        return product

    def get_product(self, product_id: str) -> Product | None:
        with storage_call("get_product"):
            try:
                return self._repo().get(str(product_id))
            except ObjectNotFoundError:
                return None

    def conditional_decrement_stock(self, product_id: str, amount: int) -> bool:
        # Check and write happen under one hold of the storage lock: no other
        # writer can change the stock between the two.
        with storage_call("conditional_decrement_stock"):
            repo = self._repo()
            try:
                product = repo.get(str(product_id))
            except ObjectNotFoundError:
                logger.warning("catalog.decrement_missing_product", product_id=str(product_id))
                return False

            if not product.can_supply(amount):
                logger.info(
                    "catalog.decrement_refused",
                    product_id=str(product_id),
                    requested=amount,
                    stock_quantity=product.stock_quantity,
                    is_active=product.is_active,
                )
                return False

            product.record_sale(amount)
            repo.add(product)
            return True

    def restore_stock(self, product_id: str, amount: int) -> None:
        with storage_call("restore_stock"):
            repo = self._repo()
            product = repo.get(str(product_id))
            product.reverse_sale(amount)
            repo.add(product)

    def list_products(self, active_only: bool = False) -> list[Product]:
        with storage_call("list_products"):
            repo = self._repo()
            return repo.active_products() if active_only else repo.all_products()

    def low_stock_products(self, threshold: int) -> list[Product]:
        with storage_call("low_stock_products"):
            return self._repo().low_stock(threshold)


def get_catalog_store() -> CatalogStore:
    """Return the configured catalog adapter (singleton).

    Uses the Protean-backed store by default. Configure via the
    CHECKOUT_STORE_ADAPTER environment variable.
    """
    global _catalog_instance
    if _catalog_instance is None:
        adapter = get_store_adapter()
        if adapter == "protean":
            _catalog_instance = ProteanCatalogStore()
        else:
            raise ValueError(f"Unknown catalog store adapter: {adapter}")
    return _catalog_instance


def reset_catalog_store():
    """Reset the catalog singleton (useful for testing)."""
    global _catalog_instance
    _catalog_instance = None
