"""Synthetic order history for development accounts.

Produces 30 days of plausible orders ending today. The random source is
passed in, so a seeded ``random.Random`` reproduces the same data.

Development tooling only: callers must refuse to run it outside the
development environment (see DevResetService).
"""

import random
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Final

from restaunax.models.order import ORDER_STATUSES, ORDER_TYPES
from restaunax.repositories.order_repository import NewOrderItem
from restaunax.services.order_service import compute_total

DAYS: Final = 30
ORDERS_PER_DAY: Final = (1, 5)
ITEMS_PER_ORDER: Final = (1, 4)
QUANTITY_PER_ITEM: Final = (1, 3)
# Orders are placed between 08:00 and 21:59
OPENING_HOUR: Final = 8
CLOSING_HOUR: Final = 22
# Share of yesterday's orders already delivered; the rest are ready
YESTERDAY_DELIVERED_PROBABILITY: Final = 0.8


@dataclass(frozen=True)
class MenuItem:
    name: str
    price: Decimal


MENU: Final = (
    MenuItem("Margherita Pizza", Decimal("15.99")),
    MenuItem("Pepperoni Pizza", Decimal("18.99")),
    MenuItem("Supreme Pizza", Decimal("22.99")),
    MenuItem("Hawaiian Pizza", Decimal("19.99")),
    MenuItem("BBQ Chicken Pizza", Decimal("21.99")),
    MenuItem("Veggie Pizza", Decimal("17.99")),
    MenuItem("Meat Lovers Pizza", Decimal("24.99")),
    MenuItem("Gluten-Free Pizza", Decimal("22.99")),
    MenuItem("Seafood Pizza", Decimal("26.99")),
    MenuItem("Caesar Salad", Decimal("8.99")),
    MenuItem("Greek Salad", Decimal("11.99")),
    MenuItem("Side Salad", Decimal("3.00")),
    MenuItem("Buffalo Wings", Decimal("9.76")),
    MenuItem("Chicken Wings", Decimal("14.98")),
    MenuItem("Mozzarella Sticks", Decimal("10.99")),
    MenuItem("Garlic Bread", Decimal("5.99")),
    MenuItem("Breadsticks", Decimal("1.49")),
    MenuItem("Chicken Alfredo", Decimal("16.99")),
    MenuItem("Shrimp Scampi", Decimal("18.99")),
    MenuItem("Tiramisu", Decimal("6.99")),
    MenuItem("Soda", Decimal("2.99")),
)

CUSTOMER_NAMES: Final = (
    "Alex Johnson",
    "Sarah Chen",
    "Mike Rodriguez",
    "Emily Davis",
    "James Wilson",
    "Lisa Thompson",
    "Robert Brown",
    "Jennifer Lee",
    "Daniel Jackson",
    "Maria Garcia",
    "David Smith",
    "Ashley Miller",
    "Chris Anderson",
    "Jessica Taylor",
    "Kevin Martinez",
    "Amanda White",
    "Brian Clark",
    "Nicole Lewis",
    "Ryan Walker",
    "Stephanie Hall",
)


@dataclass(frozen=True)
class OrderSeed:
    """Order to be written by the seeding step."""

    account_id: uuid.UUID
    customer_name: str
    order_type: str
    status: str
    total: Decimal
    created_at: datetime
    items: tuple[NewOrderItem, ...]


def status_for_day(days_ago: int, rng: random.Random) -> str:
    """Status policy: today is mixed, yesterday mostly delivered, older delivered."""
    if days_ago == 0:
        return rng.choice(ORDER_STATUSES)
    if days_ago == 1:
        return "delivered" if rng.random() < YESTERDAY_DELIVERED_PROBABILITY else "ready"
    return "delivered"


def _random_items(rng: random.Random) -> tuple[NewOrderItem, ...]:
    count = rng.randint(*ITEMS_PER_ORDER)
    items = []
    for _ in range(count):
        menu_item = rng.choice(MENU)
        items.append(
            NewOrderItem(
                name=menu_item.name,
                price=menu_item.price,
                quantity=rng.randint(*QUANTITY_PER_ITEM),
            )
        )
    return tuple(items)


def generate(
    account_id: uuid.UUID,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[OrderSeed]:
    """Generate 30 days of orders for an account, today first.

    Args:
        account_id: Account every order belongs to.
        rng: Random source. A fresh unseeded Random when omitted.
        now: Reference time (UTC). Day 0 is the calendar day of ``now``.

    Returns:
        OrderSeed list covering day 0 through day 29.
    """
    rng = rng or random.Random()  # nosec B311 - demo data, not security
    now = now or datetime.now(UTC)

    seeds: list[OrderSeed] = []
    for days_ago in range(DAYS):
        day = now - timedelta(days=days_ago)
        for _ in range(rng.randint(*ORDERS_PER_DAY)):
            created_at = day.replace(
                hour=rng.randrange(OPENING_HOUR, CLOSING_HOUR),
                minute=rng.randrange(60),
                second=0,
                microsecond=0,
            )
            items = _random_items(rng)
            seeds.append(
                OrderSeed(
                    account_id=account_id,
                    customer_name=rng.choice(CUSTOMER_NAMES),
                    order_type=rng.choice(ORDER_TYPES),
                    status=status_for_day(days_ago, rng),
                    total=compute_total(items),
                    created_at=created_at,
                    items=items,
                )
            )
    return seeds
