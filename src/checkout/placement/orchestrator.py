"""Order placement — turns a customer's cart into an order.

Flow:
    1. Claim the cart and read it joined with current product state
    2. Validate every line against stock (fail fast, nothing written)
    3. Price the order from the freshly read prices
    4. Allocate a unique order number
    5. Record the order and its line snapshots in the ledger
    6. Reserve stock line by line (saga with compensation on failure)
    7. Clear the cart and return the order

Steps 5 and 6 form one logical unit: when step 6 fails the order is flagged
``failed``, applied decrements are given back and the cart is left as it was
so the buyer can retry.

The claim in step 1 keeps two checkouts of the same cart from both
proceeding. It is dropped when the cart is cleared, and released on every
path that ends without a placed order.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from checkout.cart.port import CartLineSnapshot, CartStore
from checkout.cart.store import get_cart_store
from checkout.catalog.port import CatalogStore
from checkout.catalog.store import get_catalog_store
from checkout.errors import (
    CheckoutError,
    DuplicateOrderNumber,
    InsufficientStock,
    InvalidCheckoutRequest,
    StorageFailure,
)
from checkout.order.ledger import OrderLedger
from checkout.order.numbering import generate_order_number
from checkout.order.order import Order
from checkout.placement.reservation import StockReservation

logger = structlog.get_logger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5


class OrderPlacement:
    def __init__(
        self,
        catalog: CatalogStore | None = None,
        carts: CartStore | None = None,
        ledger: OrderLedger | None = None,
        order_numbers=generate_order_number,
    ):
        self.catalog = catalog or get_catalog_store()
        self.carts = carts or get_cart_store()
        self.ledger = ledger or OrderLedger()
        self.order_numbers = order_numbers
        self.reservation = StockReservation(self.catalog, self.ledger)

    def place_order(self, customer_id, shipping_address, profile_complete=True) -> Order:
        """Place an order for everything in the customer's cart.

        Args:
            customer_id: Authenticated customer.
            shipping_address: Free-form address; surrounding whitespace is ignored.
            profile_complete: The caller's profile gate. Pass False to have the
                request rejected here.

        Raises:
            InvalidCheckoutRequest: Blank address, empty cart or incomplete profile.
            CheckoutInProgress: Another checkout of this cart is under way.
            InsufficientStock: A line cannot be supplied; nothing was written.
            ConcurrencyConflict: Stock was taken by a concurrent order; the
                order is ``failed`` and the cart is intact.
            StorageFailure: The store failed; no partial order is final.
        """
        log = logger.bind(customer_id=str(customer_id))
        log.info("checkout.started")

        try:
            address = self._validate_request(customer_id, shipping_address, profile_complete)
            cart_lines = self.carts.claim_cart(str(customer_id))
            if not cart_lines:
                raise InvalidCheckoutRequest({"cart": ["Cart is empty"]})
        except ValidationError as exc:
            log.info("checkout.rejected", reason=exc.messages)
            raise

        # From here on this call holds the cart. Any exit without a placed
        # order gives it back so the buyer can retry.
        placed = False
        try:
            try:
                self._validate_stock(cart_lines)
            except ValidationError as exc:
                log.info("checkout.rejected", reason=exc.messages)
                raise

            order = self._record_order(customer_id, address, cart_lines, log)
            log = log.bind(order_id=str(order.id), order_number=order.order_number)
            log.info("checkout.order_recorded", total_price=order.total_price, lines=len(cart_lines))

            self.reservation.reserve(order)
            placed = True
        finally:
            if not placed:
                self._release_cart(customer_id, log)

        self._clear_cart(customer_id, log)

        log.info("checkout.completed", total_price=order.total_price)
        return order

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------
    def _validate_request(self, customer_id, shipping_address, profile_complete) -> str:
        if not customer_id or not str(customer_id).strip():
            raise InvalidCheckoutRequest({"customer_id": ["An authenticated customer is required"]})
        if not profile_complete:
            raise InvalidCheckoutRequest({"profile": ["Complete your profile before placing an order"]})

        address = (shipping_address or "").strip()
        if not address:
            raise InvalidCheckoutRequest({"shipping_address": ["Please enter a shipping address"]})
        return address

    def _validate_stock(self, cart_lines: list[CartLineSnapshot]) -> None:
        """Advisory pass: catches the common case before anything is written."""
        for line in cart_lines:
            if not line.product_exists or not line.is_active:
                raise InsufficientStock(line.product_id, line.quantity, 0)
            if line.quantity > line.stock_quantity:
                raise InsufficientStock(line.product_id, line.quantity, line.stock_quantity)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def _record_order(self, customer_id, address, cart_lines, log) -> Order:
        for attempt in range(1, MAX_ORDER_NUMBER_ATTEMPTS + 1):
            order = Order.place(
                customer_id=customer_id,
                order_number=self.order_numbers(),
                shipping_address=address,
                cart_lines=cart_lines,
            )
            try:
                return self.ledger.record(order)
            except DuplicateOrderNumber:
                log.warning("checkout.order_number_collision", attempt=attempt, order_number=order.order_number)

        raise StorageFailure(
            "record_order",
            f"no unique order number after {MAX_ORDER_NUMBER_ATTEMPTS} attempts",
        )

    def _release_cart(self, customer_id, log) -> None:
        # An earlier failure is already propagating. A hold that cannot be
        # released lapses after CHECKOUT_CLAIM_TTL_SECONDS.
        try:
            self.carts.release_cart(str(customer_id))
        except (CheckoutError, ValidationError, ObjectNotFoundError) as exc:
            log.error("checkout.cart_not_released", error=str(exc))

    def _clear_cart(self, customer_id, log) -> None:
        # The order and its stock are final at this point. A cart that could
        # not be cleared must not turn a placed order into a reported failure.
        try:
            self.carts.clear_cart(str(customer_id))
        except (CheckoutError, ValidationError, ObjectNotFoundError) as exc:
            log.error("checkout.cart_not_cleared", error=str(exc))
