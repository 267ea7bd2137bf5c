"""Order request/response schemas.

Prices and totals are returned as 2-decimal strings (see schemas.common).
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from restaunax.schemas.common import Money

OrderStatus = Literal["pending", "preparing", "ready", "delivered"]
OrderType = Literal["pickup", "delivery"]

# =============================================================================
# Requests
# =============================================================================


class OrderItemCreate(BaseModel):
    """Line item in a POST /orders body."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    quantity: int = Field(ge=1)


class OrderCreate(BaseModel):
    """Request body for POST /orders.

    ``account_id`` is required for service callers and must match the
    caller's own account for session callers (defaults to it when omitted).
    """

    model_config = ConfigDict(extra="forbid")

    account_id: uuid.UUID | None = None
    customer_name: str = Field(min_length=2, max_length=100)
    order_type: OrderType
    items: list[OrderItemCreate] = Field(min_length=1)


class OrderStatusUpdate(BaseModel):
    """Request body for PATCH /orders/{order_id}."""

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


# =============================================================================
# Responses
# =============================================================================


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    price: Money
    quantity: int


class OrderRead(BaseModel):
    """Order with its items."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    account_id: uuid.UUID
    customer_name: str
    order_type: OrderType
    status: OrderStatus
    total: Money
    items: list[OrderItemRead]
    created_at: datetime
    updated_at: datetime


class TimeBucket(BaseModel):
    x: str
    count: int


class OrderTypeCount(BaseModel):
    type: OrderType
    count: int


class ItemQuantity(BaseModel):
    name: str
    quantity: int


class OrderSummary(BaseModel):
    """Response for GET /orders/summary (dashboard aggregates)."""

    time_range: str
    order_count: int
    revenue: Money
    average_order_value: Money
    by_status: dict[str, int]
    granularity: Literal["day", "hour"]
    time_buckets: list[TimeBucket]
    pickup_vs_delivery: list[OrderTypeCount]
    top_items: list[ItemQuantity]
