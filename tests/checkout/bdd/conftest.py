"""Shared BDD fixtures and step definitions for the Checkout domain."""

import pytest
from pytest_bdd import given, parsers, then

from checkout.catalog.product import Product

BUYER = "cust-bdd-001"
ADDRESS = "12 Harbour Road"


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def buyer():
    return BUYER


@pytest.fixture()
def products():
    """Product ids by the label used in the feature file."""
    return {}


@pytest.fixture()
def error():
    """Container for the failure raised by a When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{label}" priced {price:f} with {stock:d} in stock'))
def _(catalog, products, label, price, stock):
    product = catalog.add_product(Product.create(name=label, price=price, stock_quantity=stock))
    products[label] = product.id


@given(parsers.cfparse('the buyer has {quantity:d} of "{label}" in the cart'))
def _(carts, products, buyer, label, quantity):
    carts.add_item(buyer, products[label], quantity)


@given("the buyer has placed an order", target_fixture="order")
def _(placement, buyer):
    return placement.place_order(buyer, ADDRESS)


@given("the order has been delivered", target_fixture="order")
def _(ledger, order):
    for status in ("processing", "shipped", "delivered"):
        order = ledger.set_order_status(order.id, status)
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{label}" has {stock:d} in stock'))
def _(catalog, products, label, stock):
    assert catalog.get_product(products[label]).stock_quantity == stock


@then("no order is recorded")
def _(ledger):
    assert ledger.list_all_orders() == []


@then(parsers.cfparse('the recorded order status is "{status}"'))
def _(ledger, order, status):
    assert ledger.get(order.id).status == status
