"""FastAPI routes for the Checkout domain: carts, orders and the admin views."""

from fastapi import APIRouter, Query

from checkout.api.schemas import (
    AddToCartRequest,
    CartLineSchema,
    CartResponse,
    DashboardResponse,
    OrderLineSchema,
    OrderResponse,
    PlaceOrderRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
)
from checkout.cart.store import get_cart_store
from checkout.order.ledger import OrderLedger
from checkout.order.order import Order
from checkout.placement.orchestrator import OrderPlacement
from checkout.reporting.dashboard import dashboard_summary


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        total_price=order.total_price,
        shipping_address=order.shipping_address,
        status=order.status,
        failure_reason=order.failure_reason,
        created_at=order.created_at,
        updated_at=order.updated_at,
        lines=[
            OrderLineSchema(
                product_id=str(line.product_id),
                product_name=line.product_name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                line_total=line.line_total,
            )
            for line in order.lines
        ],
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{customer_id}", response_model=CartResponse)
async def get_cart(customer_id: str) -> CartResponse:
    lines = get_cart_store().get_cart_lines(customer_id)
    return CartResponse(
        customer_id=customer_id,
        lines=[
            CartLineSchema(
                product_id=line.product_id,
                quantity=line.quantity,
                product_name=line.product_name,
                unit_price=line.unit_price,
                stock_quantity=line.stock_quantity,
                is_active=line.is_active,
            )
            for line in lines
        ],
    )


@cart_router.post("/{customer_id}/items", response_model=StatusResponse)
async def add_cart_item(customer_id: str, body: AddToCartRequest) -> StatusResponse:
    get_cart_store().add_item(customer_id, body.product_id, body.quantity)
    return StatusResponse()


@cart_router.put("/{customer_id}/items/{product_id}", response_model=StatusResponse)
async def update_cart_item(customer_id: str, product_id: str, body: UpdateCartQuantityRequest) -> StatusResponse:
    get_cart_store().update_quantity(customer_id, product_id, body.quantity)
    return StatusResponse()


@cart_router.delete("/{customer_id}/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(customer_id: str, product_id: str) -> StatusResponse:
    get_cart_store().remove_item(customer_id, product_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest) -> OrderResponse:
    """Check out the customer's cart."""
    order = OrderPlacement().place_order(
        customer_id=body.customer_id,
        shipping_address=body.shipping_address,
        profile_complete=body.profile_complete,
    )
    return _order_response(order)


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(customer_id: str = Query(...)) -> list[OrderResponse]:
    return [_order_response(order) for order in OrderLedger().list_orders(customer_id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(OrderLedger().get(order_id))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/orders", response_model=list[OrderResponse])
async def list_all_orders() -> list[OrderResponse]:
    return [_order_response(order) for order in OrderLedger().list_all_orders()]


@admin_router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    order = OrderLedger().set_order_status(order_id, body.status)
    return _order_response(order)


@admin_router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(low_stock_threshold: int | None = Query(default=None, ge=0)) -> DashboardResponse:
    summary = dashboard_summary(threshold=low_stock_threshold)
    return DashboardResponse(**summary.to_dict())
