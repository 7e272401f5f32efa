"""Tests for the Order aggregate and its OrderLine entities."""

import pytest
from protean.exceptions import ValidationError

from checkout.cart.port import CartLineSnapshot
from checkout.errors import InvalidTransition
from checkout.order.events import OrderFailed, OrderPlaced, OrderStatusChanged
from checkout.order.order import MAX_REASON_LENGTH, Order
from checkout.order.status import OrderStatus


def _snapshot(product_id="prod-1", quantity=2, name="Widget", price=10.0, stock=10):
    return CartLineSnapshot(
        product_id=product_id,
        quantity=quantity,
        product_name=name,
        unit_price=price,
        stock_quantity=stock,
        is_active=True,
    )


def _place(cart_lines=None, **overrides):
    defaults = {
        "customer_id": "cust-001",
        "order_number": "RG-1700000000000-AB12",
        "shipping_address": "12 Harbour Road",
        "cart_lines": cart_lines or [_snapshot()],
    }
    defaults.update(overrides)
    return Order.place(**defaults)


class TestOrderPlacement:
    def test_new_order_is_pending(self):
        order = _place()
        assert order.status == OrderStatus.PENDING.value
        assert order.failure_reason is None

    def test_lines_snapshot_name_and_price(self):
        order = _place()
        assert len(order.lines) == 1
        line = order.lines[0]
        assert str(line.product_id) == "prod-1"
        assert line.product_name == "Widget"
        assert line.unit_price == 10.0
        assert line.quantity == 2
        assert line.line_total == 20.0

    def test_total_is_sum_of_line_totals(self):
        order = _place(
            cart_lines=[
                _snapshot("prod-1", quantity=3, price=19.99),
                _snapshot("prod-2", quantity=1, name="Gadget", price=0.1),
                _snapshot("prod-3", quantity=7, name="Gizmo", price=0.2),
            ]
        )
        assert order.total_price == order.lines_total()
        assert order.total_price == pytest.approx(3 * 19.99 + 0.1 + 7 * 0.2)

    def test_timestamps_set(self):
        order = _place()
        assert order.created_at is not None
        assert order.updated_at == order.created_at

    def test_raises_order_placed(self):
        order = _place()
        events = [e for e in order._events if isinstance(e, OrderPlaced)]
        assert len(events) == 1
        assert events[0].order_number == "RG-1700000000000-AB12"
        assert events[0].total_price == 20.0
        assert events[0].line_count == 1

    def test_requires_lines(self):
        with pytest.raises(ValidationError) as exc_info:
            Order.place(
                customer_id="cust-001",
                order_number="RG-1-AAAA",
                shipping_address="12 Harbour Road",
                cart_lines=[],
            )
        assert "lines" in exc_info.value.messages

    def test_blank_shipping_address_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            _place(shipping_address="   ")
        assert "shipping_address" in exc_info.value.messages


class TestStatusTransitions:
    def test_transition_changes_status_and_raises_event(self):
        order = _place()
        order._events.clear()

        changed = order.transition_to("processing")

        assert changed is True
        assert order.status == "processing"
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.new_status == "processing"

    def test_same_status_is_idempotent(self):
        order = _place()
        order.transition_to(OrderStatus.PROCESSING)
        order.transition_to(OrderStatus.SHIPPED)
        order.transition_to(OrderStatus.DELIVERED)
        order._events.clear()
        updated_at = order.updated_at

        assert order.transition_to("delivered") is False
        assert order.status == "delivered"
        assert order.updated_at == updated_at
        assert order._events == []

    def test_invalid_transition_leaves_status(self):
        order = _place()
        for status in ("processing", "shipped", "delivered"):
            order.transition_to(status)

        with pytest.raises(InvalidTransition):
            order.transition_to("processing")
        assert order.status == "delivered"

    def test_counts_as_revenue_only_when_delivered(self):
        order = _place()
        assert not order.counts_as_revenue
        for status in ("processing", "shipped", "delivered"):
            order.transition_to(status)
        assert order.counts_as_revenue


class TestMarkFailed:
    def test_pending_order_can_fail(self):
        order = _place()
        order.mark_failed("Stock taken by a concurrent order")

        assert order.status == "failed"
        assert order.failure_reason == "Stock taken by a concurrent order"
        assert any(isinstance(e, OrderFailed) for e in order._events)

    def test_reason_is_truncated(self):
        order = _place()
        order.mark_failed("x" * (MAX_REASON_LENGTH + 50))
        assert len(order.failure_reason) == MAX_REASON_LENGTH

    def test_only_pending_orders_can_fail(self):
        order = _place()
        order.transition_to("processing")
        with pytest.raises(InvalidTransition):
            order.mark_failed("too late")
        assert order.status == "processing"

    def test_failed_is_terminal(self):
        order = _place()
        order.mark_failed("reservation failed")
        with pytest.raises(InvalidTransition):
            order.transition_to("processing")
