"""Order models - orders and their line items."""

import uuid
from decimal import Decimal
from typing import Final

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restaunax.models.base import Base, TimestampMixin

ORDER_STATUSES: Final = ("pending", "preparing", "ready", "delivered")
ORDER_TYPES: Final = ("pickup", "delivery")

_CASCADE_ALL_DELETE_ORPHAN = "all, delete-orphan"


def _in_list(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Order(Base, TimestampMixin):
    """Customer order placed with an account.

    ``total`` is computed once from the items at creation and is not
    recomputed afterwards.

    Attributes:
        id: UUID primary key.
        account_id: FK to the owning account.
        customer_name: Name the order was placed under.
        order_type: "pickup" or "delivery".
        status: "pending", "preparing", "ready" or "delivered".
        total: Sum of price * quantity over the items, 2 decimals.
        items: Line items (loaded eagerly).
    """

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(_in_list("status", ORDER_STATUSES), name="ck_orders_status"),
        CheckConstraint(
            _in_list("order_type", ORDER_TYPES), name="ck_orders_order_type"
        ),
        CheckConstraint("total >= 0", name="ck_orders_total_nonneg"),
        Index("ix_orders_account_id_created_at", "account_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_name: Mapped[str] = mapped_column(String(100), nullable=False)
    order_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
    )
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Relationships
    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade=_CASCADE_ALL_DELETE_ORPHAN,
        lazy="selectin",
    )


class OrderItem(Base):
    """Line item of an order.

    Attributes:
        id: UUID primary key.
        order_id: FK to the owning order.
        name: Menu item name.
        price: Unit price, positive.
        quantity: Units ordered, at least 1.
    """

    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_order_items_price_pos"),
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_pos"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")
