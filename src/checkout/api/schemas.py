"""Pydantic request/response schemas for the Checkout API.

These are external contracts, separate from the internal aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    # Zero removes the line
    quantity: int = Field(ge=0)


class CartLineSchema(BaseModel):
    product_id: str
    quantity: int
    product_name: str | None = None
    unit_price: float | None = None
    stock_quantity: int = 0
    is_active: bool = False


class CartResponse(BaseModel):
    customer_id: str
    lines: list[CartLineSchema] = []


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    customer_id: str
    shipping_address: str
    profile_complete: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "shipping_address": "12 Harbour Road, Leith",
                    "profile_complete": True,
                }
            ]
        }
    }


class OrderLineSchema(BaseModel):
    product_id: str
    product_name: str
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    line_total: float


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    total_price: float
    shipping_address: str
    status: str
    failure_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    lines: list[OrderLineSchema] = []


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    status: str


class DashboardResponse(BaseModel):
    revenue: float
    total_orders: int
    total_products: int
    low_stock: int
    low_stock_threshold: int
    orders_by_status: dict[str, int]


class StatusResponse(BaseModel):
    status: str = "ok"
