import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain

from checkout.cart.store import get_cart_store, reset_cart_store
from checkout.catalog.product import Product
from checkout.catalog.store import get_catalog_store, reset_catalog_store
from checkout.order.ledger import OrderLedger
from checkout.placement.orchestrator import OrderPlacement


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()

    reset_catalog_store()
    reset_cart_store()


@pytest.fixture()
def catalog():
    return get_catalog_store()


@pytest.fixture()
def carts():
    return get_cart_store()


@pytest.fixture()
def ledger():
    return OrderLedger()


@pytest.fixture()
def placement(catalog, carts, ledger):
    return OrderPlacement(catalog=catalog, carts=carts, ledger=ledger)


@pytest.fixture()
def stock_product(catalog):
    """Factory: add an active product to the catalog and return it."""

    def _stock(name="Widget", price=10.0, stock_quantity=10, is_active=True):
        product = Product.create(name=name, price=price, stock_quantity=stock_quantity, is_active=is_active)
        return catalog.add_product(product)

    return _stock
