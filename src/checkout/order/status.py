"""Order status machine.

    pending → processing → shipped → delivered
    pending | processing | shipped → cancelled
    pending → failed   (checkout compensation only)

``delivered``, ``cancelled`` and ``failed`` are terminal. Asking for the
status an order already has changes nothing, which keeps ``delivered``
idempotent for revenue reporting.
"""

from enum import Enum

from checkout.errors import InvalidTransition


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"


INITIAL_STATUS = OrderStatus.PENDING

# Transitions an operator may request
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.FAILED: set(),  # Terminal
}


def parse_status(value, current=None) -> OrderStatus:
    """Turn a status name into an OrderStatus, rejecting unknown names."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        current_name = current.value if isinstance(current, OrderStatus) else current
        raise InvalidTransition(current_name, value) from None


def allowed_transitions(status: OrderStatus) -> set[OrderStatus]:
    return set(_VALID_TRANSITIONS.get(status, set()))


def check_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Validate an operator-requested transition.

    Returns False when ``target`` is already the current status (nothing to
    do), True when the transition is allowed. Raises InvalidTransition
    otherwise.
    """
    if current == target:
        return False
    if target not in allowed_transitions(current):
        raise InvalidTransition(current.value, target.value)
    return True
