"""Order endpoints.

Session callers work only with orders of their own account; an order of
another account answers 404. Service callers may act on any account and
must name ``account_id`` when creating an order.
"""

import uuid
from typing import Annotated, Literal

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.api.deps import (
    Caller,
    CurrentCaller,
    DbSession,
    require_account_access,
    session_account_id,
)
from restaunax.core.errors import ValidationError
from restaunax.core.responses import DataResponse, MessageData
from restaunax.repositories.order_repository import NewOrderItem
from restaunax.schemas.order import (
    OrderCreate,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderSummary,
)
from restaunax.services import order_metrics
from restaunax.services.order_service import OrderScope, OrderService

router = APIRouter()


def _scope_for(caller: Caller) -> OrderScope:
    if caller.is_service:
        return OrderScope()
    return OrderScope(account_id=session_account_id(caller))


def _service(db: AsyncSession, caller: Caller) -> OrderService:
    return OrderService(db, scope=_scope_for(caller))


@router.get("")
async def list_orders(
    caller: CurrentCaller,
    db: DbSession,
    status: OrderStatus | None = None,
    account_id: uuid.UUID | None = None,
) -> DataResponse[list[OrderRead]]:
    """Orders with items, newest first."""
    if account_id is not None:
        require_account_access(caller, account_id)
    orders = await _service(db, caller).list_orders(
        account_id=account_id, status=status
    )
    return DataResponse(data=[OrderRead.model_validate(o) for o in orders])


@router.get("/summary")
async def order_summary(
    caller: CurrentCaller,
    db: DbSession,
    time_range: Literal["today", "last7days", "last30days", "all"] = "today",
    statuses: Annotated[list[OrderStatus] | None, Query(alias="status")] = None,
    order_type: Literal["all", "pickup", "delivery"] = "all",
    account_id: uuid.UUID | None = None,
) -> DataResponse[OrderSummary]:
    """Dashboard aggregates over the caller's orders."""
    if account_id is not None:
        require_account_access(caller, account_id)
    orders = await _service(db, caller).list_orders(account_id=account_id)
    summary = order_metrics.build_summary(
        orders,
        time_range=time_range,
        statuses=statuses or (),
        order_type=order_type,
    )
    return DataResponse(data=OrderSummary.model_validate(summary))


@router.get("/{order_id}")
async def get_order(
    order_id: uuid.UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[OrderRead]:
    order = await _service(db, caller).get_order(order_id)
    return DataResponse(data=OrderRead.model_validate(order))


@router.post("", status_code=201)
async def create_order(
    body: OrderCreate,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[OrderRead]:
    """Create a pending order; the total is computed from the items."""
    if caller.is_service:
        if body.account_id is None:
            raise ValidationError(
                "account_id is required",
                details=[{"loc": ["body", "account_id"], "msg": "Field required"}],
            )
        account_id = body.account_id
    else:
        account_id = body.account_id or session_account_id(caller)
        require_account_access(caller, account_id)

    order = await _service(db, caller).create_order(
        account_id=account_id,
        customer_name=body.customer_name,
        order_type=body.order_type,
        items=[
            NewOrderItem(name=item.name, price=item.price, quantity=item.quantity)
            for item in body.items
        ],
    )
    return DataResponse(data=OrderRead.model_validate(order))


@router.patch("/{order_id}")
async def update_order_status(
    order_id: uuid.UUID,
    body: OrderStatusUpdate,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[OrderRead]:
    order = await _service(db, caller).update_status(order_id, body.status)
    return DataResponse(data=OrderRead.model_validate(order))


@router.delete("/{order_id}")
async def delete_order(
    order_id: uuid.UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[MessageData]:
    await _service(db, caller).delete_order(order_id)
    return DataResponse(data=MessageData(message="Order deleted successfully"))
