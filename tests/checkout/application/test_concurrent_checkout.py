"""Concurrent buyers competing for the same stock.

Each buyer runs on its own thread with its own domain context, and a
barrier releases them together so their checkouts overlap.
"""

import threading

import pytest

from checkout.domain import checkout
from checkout.errors import InsufficientStock, InvalidCheckoutRequest
from checkout.placement.orchestrator import OrderPlacement

ADDRESS = "12 Harbour Road, Leith"


def _run_buyers(customers, catalog, carts, ledger):
    """Run one checkout per entry in ``customers``; a customer may repeat."""
    barrier = threading.Barrier(len(customers))
    results = [None] * len(customers)

    def buy(slot, customer_id):
        with checkout.domain_context():
            placement = OrderPlacement(catalog=catalog, carts=carts, ledger=ledger)
            barrier.wait()
            try:
                results[slot] = placement.place_order(customer_id, ADDRESS)
            except (InsufficientStock, InvalidCheckoutRequest) as exc:
                results[slot] = exc

    threads = [threading.Thread(target=buy, args=(slot, customer_id)) for slot, customer_id in enumerate(customers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert not any(thread.is_alive() for thread in threads)
    assert all(result is not None for result in results)
    return results


@pytest.mark.slow
class TestConcurrentCheckout:
    def test_two_buyers_one_wins(self, catalog, carts, ledger, stock_product):
        product = stock_product(stock_quantity=5)
        carts.add_item("buyer-a", product.id, 3)
        carts.add_item("buyer-b", product.id, 3)

        results = _run_buyers(["buyer-a", "buyer-b"], catalog, carts, ledger)

        failures = [r for r in results if isinstance(r, InsufficientStock)]
        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(results) == 2
        assert len(successes) == 1
        assert len(failures) == 1
        assert failures[0].product_id == product.id

        stored = catalog.get_product(product.id)
        assert stored.stock_quantity == 2
        assert stored.units_sold == 3
        assert len([o for o in ledger.list_all_orders() if o.status == "pending"]) == 1

    def test_stock_never_oversold(self, catalog, carts, ledger, stock_product):
        product = stock_product(stock_quantity=5)
        customers = [f"buyer-{i}" for i in range(12)]
        for customer_id in customers:
            carts.add_item(customer_id, product.id, 1)

        results = _run_buyers(customers, catalog, carts, ledger)

        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(results) == len(customers)
        assert len(successes) == 5

        stored = catalog.get_product(product.id)
        assert stored.stock_quantity == 0
        assert stored.units_sold == 5
        placed = [o for o in ledger.list_all_orders() if o.status == "pending"]
        assert len(placed) == 5
        assert all(o.status in ("pending", "failed") for o in ledger.list_all_orders())

    def test_buyers_of_different_products_both_succeed(self, catalog, carts, ledger, stock_product):
        mug = stock_product(name="Mug", stock_quantity=3)
        pot = stock_product(name="Teapot", stock_quantity=3)
        carts.add_item("buyer-a", mug.id, 3)
        carts.add_item("buyer-b", pot.id, 3)

        results = _run_buyers(["buyer-a", "buyer-b"], catalog, carts, ledger)

        assert not any(isinstance(r, Exception) for r in results)
        assert catalog.get_product(mug.id).stock_quantity == 0
        assert catalog.get_product(pot.id).stock_quantity == 0

    def test_same_customer_checking_out_twice_places_one_order(self, catalog, carts, ledger, stock_product):
        product = stock_product(stock_quantity=10)
        carts.add_item("cust-001", product.id, 3)

        results = _run_buyers(["cust-001", "cust-001"], catalog, carts, ledger)

        successes = [r for r in results if not isinstance(r, Exception)]
        rejections = [r for r in results if isinstance(r, InvalidCheckoutRequest)]
        assert len(successes) == 1
        # The loser either found the cart held or, if it came second, empty
        assert len(rejections) == 1

        assert len(ledger.list_all_orders()) == 1
        stored = catalog.get_product(product.id)
        assert stored.stock_quantity == 7
        assert stored.units_sold == 3
        assert carts.get_cart_lines("cust-001") == []

    def test_many_repeated_checkouts_by_one_customer(self, catalog, carts, ledger, stock_product):
        product = stock_product(stock_quantity=10)
        carts.add_item("cust-001", product.id, 2)

        results = _run_buyers(["cust-001"] * 6, catalog, carts, ledger)

        assert len([r for r in results if not isinstance(r, Exception)]) == 1
        assert len(ledger.list_all_orders()) == 1
        assert catalog.get_product(product.id).stock_quantity == 8
