"""Repository for the Product aggregate."""

from checkout.catalog.product import Product
from checkout.domain import checkout


@checkout.repository(part_of=Product)
class ProductRepository:
    def all_products(self) -> list[Product]:
        return self._dao.query.all().items

    def active_products(self) -> list[Product]:
        return [p for p in self.all_products() if p.is_active]

    def low_stock(self, threshold: int) -> list[Product]:
        """Active products with stock at or below ``threshold``."""
        return [p for p in self.active_products() if p.stock_quantity <= threshold]
