"""Repository for Order and OrderItem operations.

Provides database access for the orders and order_items tables. Items are
only ever written as children of an order.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.models.base import utcnow
from restaunax.models.order import Order, OrderItem


@dataclass(frozen=True)
class NewOrderItem:
    """Line item to be written with a new order."""

    name: str
    price: Decimal
    quantity: int


class OrderRepository:
    """Stateless repository for orders and their items. Nothing commits."""

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        *,
        account_id: uuid.UUID | None = None,
        status: str | None = None,
    ) -> list[Order]:
        """List orders with their items, newest first.

        Args:
            db: Async database session.
            account_id: Restrict to one account.
            status: Restrict to one status.

        Returns:
            List of Order records (may be empty).
        """
        stmt = select(Order)
        if account_id is not None:
            stmt = stmt.where(Order.account_id == account_id)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc(), Order.id)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(db: AsyncSession, order_id: uuid.UUID) -> Order | None:
        """Fetch an order (with items) by primary key.

        Args:
            db: Async database session.
            order_id: UUID primary key.

        Returns:
            Order if found, None otherwise.
        """
        return await db.get(Order, order_id)

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        account_id: uuid.UUID,
        customer_name: str,
        order_type: str,
        total: Decimal,
        items: list[NewOrderItem],
        status: str = "pending",
        created_at: datetime | None = None,
    ) -> Order:
        """Create an order together with its items in one flush.

        Args:
            db: Async database session.
            account_id: FK to the owning account.
            customer_name: Name the order was placed under.
            order_type: "pickup" or "delivery".
            total: Precomputed order total.
            items: Line items to create.
            status: Initial status.
            created_at: Backdated creation time (demo data only).

        Returns:
            Created Order with items populated.
        """
        order = Order(
            account_id=account_id,
            customer_name=customer_name,
            order_type=order_type,
            status=status,
            total=total,
            items=[
                OrderItem(name=item.name, price=item.price, quantity=item.quantity)
                for item in items
            ],
        )
        if created_at is not None:
            order.created_at = created_at
            order.updated_at = created_at
        db.add(order)
        await db.flush()
        await db.refresh(order)
        return order

    @staticmethod
    async def update_status(
        db: AsyncSession,
        order_id: uuid.UUID,
        status: str,
    ) -> Order | None:
        """Set the status of an order.

        Args:
            db: Async database session.
            order_id: UUID of the order.
            status: New status value.

        Returns:
            Updated Order if found, None if order does not exist.
        """
        order = await db.get(Order, order_id)
        if order is None:
            return None
        order.status = status
        # Touch updated_at even when the status is unchanged
        order.updated_at = utcnow()
        await db.flush()
        await db.refresh(order)
        return order

    @staticmethod
    async def delete(db: AsyncSession, order: Order) -> None:
        """Delete an order; its items go with it (ORM cascade).

        Args:
            db: Async database session.
            order: Loaded Order instance.
        """
        await db.delete(order)
        await db.flush()

    @staticmethod
    async def delete_items_for_account(db: AsyncSession, account_id: uuid.UUID) -> int:
        """Delete every line item of every order under an account.

        Args:
            db: Async database session.
            account_id: UUID of the account.

        Returns:
            Number of deleted rows.
        """
        order_ids = select(Order.id).where(Order.account_id == account_id)
        stmt = (
            delete(OrderItem)
            .where(OrderItem.order_id.in_(order_ids))
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

    @staticmethod
    async def delete_for_account(db: AsyncSession, account_id: uuid.UUID) -> int:
        """Delete every order under an account.

        Callers must delete the items first (delete_items_for_account).

        Args:
            db: Async database session.
            account_id: UUID of the account.

        Returns:
            Number of deleted rows.
        """
        stmt = delete(Order).where(Order.account_id == account_id)
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

    @staticmethod
    async def delete_all(db: AsyncSession) -> int:
        """Delete every order and line item (development reset).

        Returns:
            Number of deleted orders.
        """
        await db.execute(delete(OrderItem))
        result = await db.execute(delete(Order))
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count
