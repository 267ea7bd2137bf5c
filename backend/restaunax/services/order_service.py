"""Order lifecycle.

Validates order input, computes totals and scopes every lookup to the
caller's account. An order outside the scope is reported as not found so
its existence is never revealed.

Status transitions are not ordered: any of the four statuses may follow
any other.
"""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.core.database import unit_of_work
from restaunax.core.errors import NotFoundError, ValidationError
from restaunax.models.order import ORDER_STATUSES, ORDER_TYPES, Order
from restaunax.repositories.account_repository import AccountRepository
from restaunax.repositories.order_repository import NewOrderItem, OrderRepository

logger = structlog.get_logger()

_CENT = Decimal("0.01")


def to_money(value: Decimal | float | int | str) -> Decimal:
    """Convert to Decimal without float artifacts (19.99 stays 19.99)."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc


def compute_total(items: Iterable[NewOrderItem]) -> Decimal:
    """Sum of price * quantity, rounded half-up to cents."""
    total = sum(
        (to_money(item.price) * item.quantity for item in items), Decimal("0")
    )
    return total.quantize(_CENT, rounding=ROUND_HALF_UP)


def validate_status(status: str) -> str:
    """Return ``status`` or raise ValidationError if it is not a known status."""
    if status not in ORDER_STATUSES:
        raise ValidationError(
            "Invalid order status",
            details=[
                {
                    "loc": ["status"],
                    "msg": f"must be one of: {', '.join(ORDER_STATUSES)}",
                    "type": "enum",
                }
            ],
        )
    return status


def validate_items(items: list[NewOrderItem]) -> None:
    """Reject an empty item list, non-positive prices and quantities below 1.

    Raises:
        ValidationError: With one detail entry per offending field.
    """
    if not items:
        raise ValidationError(
            "Order must contain at least one item",
            details=[{"loc": ["items"], "msg": "at least one item is required"}],
        )

    details: list[dict] = []
    for index, item in enumerate(items):
        if not item.name:
            details.append({"loc": ["items", index, "name"], "msg": "is required"})
        if to_money(item.price) <= 0:
            details.append(
                {"loc": ["items", index, "price"], "msg": "must be greater than 0"}
            )
        if item.quantity < 1:
            details.append(
                {"loc": ["items", index, "quantity"], "msg": "must be at least 1"}
            )
    if details:
        raise ValidationError("Invalid order items", details=details)


@dataclass(frozen=True)
class OrderScope:
    """Restricts order access to one account (None = every account)."""

    account_id: uuid.UUID | None = None

    def allows(self, order: Order) -> bool:
        return self.account_id is None or order.account_id == self.account_id


class OrderService:
    """Order operations over one database session.

    Args:
        db: Async database session.
        scope: Account restriction applied to every lookup.
    """

    def __init__(self, db: AsyncSession, scope: OrderScope | None = None) -> None:
        self._db = db
        self._scope = scope or OrderScope()

    async def list_orders(
        self,
        *,
        account_id: uuid.UUID | None = None,
        status: str | None = None,
    ) -> list[Order]:
        """List orders newest first.

        A scoped service always filters by its own account; ``account_id``
        narrows an unscoped one.
        """
        if status is not None:
            validate_status(status)
        if self._scope.account_id is not None:
            account_id = self._scope.account_id
        return await OrderRepository.list_orders(
            self._db, account_id=account_id, status=status
        )

    async def get_order(self, order_id: uuid.UUID) -> Order:
        """Fetch one order with its items.

        Raises:
            NotFoundError: Order does not exist or is outside the scope.
        """
        order = await OrderRepository.get_by_id(self._db, order_id)
        if order is None or not self._scope.allows(order):
            raise NotFoundError("Order", str(order_id))
        return order

    async def create_order(
        self,
        *,
        account_id: uuid.UUID,
        customer_name: str,
        order_type: str,
        items: list[NewOrderItem],
    ) -> Order:
        """Create a pending order with its items in one unit of work.

        Raises:
            ValidationError: Bad order type or items.
            NotFoundError: Account does not exist or is outside the scope.
        """
        if order_type not in ORDER_TYPES:
            raise ValidationError(
                "Invalid order type",
                details=[
                    {
                        "loc": ["order_type"],
                        "msg": f"must be one of: {', '.join(ORDER_TYPES)}",
                    }
                ],
            )
        validate_items(items)

        if self._scope.account_id is not None and account_id != self._scope.account_id:
            raise NotFoundError("Account", str(account_id))
        if await AccountRepository.get_by_id(self._db, account_id) is None:
            raise NotFoundError("Account", str(account_id))

        async with unit_of_work(self._db):
            order = await OrderRepository.create(
                self._db,
                account_id=account_id,
                customer_name=customer_name,
                order_type=order_type,
                total=compute_total(items),
                items=items,
            )

        logger.info(
            "order_created",
            order_id=str(order.id),
            account_id=str(account_id),
            items=len(items),
        )
        return order

    async def update_status(self, order_id: uuid.UUID, status: str) -> Order:
        """Set an order's status.

        Raises:
            ValidationError: Unknown status.
            NotFoundError: Order does not exist or is outside the scope.
        """
        validate_status(status)
        await self.get_order(order_id)

        async with unit_of_work(self._db):
            order = await OrderRepository.update_status(self._db, order_id, status)
            if order is None:
                raise NotFoundError("Order", str(order_id))
        return order

    async def delete_order(self, order_id: uuid.UUID) -> None:
        """Delete an order and its items.

        Raises:
            NotFoundError: Order does not exist or is outside the scope.
        """
        order = await self.get_order(order_id)
        async with unit_of_work(self._db):
            await OrderRepository.delete(self._db, order)
        logger.info("order_deleted", order_id=str(order_id))
