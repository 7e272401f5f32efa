"""Failures raised by order placement and the order ledger.

Input and stock problems are Protean ``ValidationError`` subclasses, so they
carry a ``messages`` dict like every other rejection in the domain. Every
failure is also a ``CheckoutError``, which lets callers handle the whole
family in one place.
"""

from protean.exceptions import ValidationError

RETRY_MESSAGE = "Could not complete order, please retry"


class CheckoutError(Exception):
    """Base class for every failure this subsystem raises."""


class InvalidCheckoutRequest(CheckoutError, ValidationError):
    """The request itself is unusable: blank address, empty cart, incomplete profile."""


class CheckoutInProgress(InvalidCheckoutRequest):
    """Another checkout already holds the customer's cart."""

    def __init__(self, customer_id):
        self.customer_id = str(customer_id)
        super().__init__({"cart": ["A checkout for this cart is already in progress"]})


class InsufficientStock(CheckoutError, ValidationError):
    """A cart line asks for more units than the product can supply."""

    def __init__(self, product_id, requested, available=0, message=None):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        if message is None:
            message = f"Insufficient stock for product {product_id}: {available} available, {requested} requested"
        super().__init__({"product_id": [message]})


class ConcurrencyConflict(InsufficientStock):
    """A conditional stock decrement lost its race after validation had passed."""

    def __init__(self, product_id, requested):
        super().__init__(product_id, requested, available=None, message=RETRY_MESSAGE)


class StorageFailure(CheckoutError):
    """An underlying read or write failed unexpectedly."""

    def __init__(self, operation, detail=None):
        self.operation = operation
        self.detail = detail
        text = f"Storage operation '{operation}' failed"
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text)


class InvalidTransition(CheckoutError, ValidationError):
    """An order status change that the status machine does not allow."""

    def __init__(self, current_status, requested_status):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__({"status": [f"Cannot transition from {current_status} to {requested_status}"]})


class DuplicateOrderNumber(CheckoutError, ValidationError):
    """The ledger already holds an order with this number."""

    def __init__(self, order_number):
        self.order_number = order_number
        super().__init__({"order_number": [f"Order number {order_number} is already in use"]})
