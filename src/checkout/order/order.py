"""Order aggregate (CQRS) — the durable record of a placed order.

An order is written once, at checkout, together with its lines. Product
name and unit price are snapshotted onto each line, and the total is
computed from those snapshots, so later catalog changes never alter a
historical order. After creation only the status moves, and only along the
paths allowed by ``checkout.order.status``.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from checkout.domain import checkout
from checkout.errors import InvalidTransition
from checkout.order.events import OrderFailed, OrderPlaced, OrderStatusChanged
from checkout.order.status import INITIAL_STATUS, OrderStatus, check_transition, parse_status

MAX_REASON_LENGTH = 255


@checkout.entity(part_of="Order")
class OrderLine:
    """A line item frozen at order time."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    @property
    def line_total(self):
        return self.unit_price * self.quantity


@checkout.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    customer_id = Identifier(required=True)
    total_price = Float(required=True, min_value=0.0)
    shipping_address = Text(required=True)
    status = String(choices=OrderStatus, default=INITIAL_STATUS.value)
    failure_reason = String(max_length=MAX_REASON_LENGTH)
    lines = HasMany(OrderLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def shipping_address_must_not_be_blank(self):
        if self.shipping_address is not None and not self.shipping_address.strip():
            raise ValidationError({"shipping_address": ["Shipping address cannot be blank"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, order_number, shipping_address, cart_lines):
        """Build a pending order from validated cart lines.

        Args:
            customer_id: The customer placing the order.
            order_number: Human-facing unique number.
            shipping_address: Free-form address, already trimmed.
            cart_lines: ``CartLineSnapshot`` objects carrying the freshly read
                product name and price.
        """
        if not cart_lines:
            raise ValidationError({"lines": ["An order needs at least one line"]})
        if not shipping_address or not shipping_address.strip():
            raise ValidationError({"shipping_address": ["Shipping address cannot be blank"]})

        lines = [
            OrderLine(
                product_id=line.product_id,
                product_name=line.product_name,
                unit_price=line.unit_price,
                quantity=line.quantity,
            )
            for line in cart_lines
        ]
        total_price = sum(line.line_total for line in lines)
        now = datetime.now(UTC)

        order = cls(
            order_number=order_number,
            customer_id=str(customer_id),
            total_price=total_price,
            shipping_address=shipping_address,
            status=INITIAL_STATUS.value,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_lines(line)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                total_price=total_price,
                line_count=len(lines),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def counts_as_revenue(self) -> bool:
        return self.current_status == OrderStatus.DELIVERED

    def lines_total(self):
        return sum(line.line_total for line in self.lines)

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def transition_to(self, new_status) -> bool:
        """Move to ``new_status`` if the status machine allows it.

        Returns True when the status changed, False when the order already
        had that status.
        """
        current = self.current_status
        target = parse_status(new_status, current)
        if not check_transition(current, target):
            return False

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )
        return True

    def mark_failed(self, reason):
        """Flag a pending order whose stock reservation did not complete."""
        current = self.current_status
        if current != OrderStatus.PENDING:
            raise InvalidTransition(current.value, OrderStatus.FAILED.value)

        reason = (reason or "Stock reservation failed")[:MAX_REASON_LENGTH]
        now = datetime.now(UTC)
        self.status = OrderStatus.FAILED.value
        self.failure_reason = reason
        self.updated_at = now

        self.raise_(
            OrderFailed(
                order_id=str(self.id),
                order_number=self.order_number,
                reason=reason,
                failed_at=now,
            )
        )
