"""Dashboard aggregates over a list of orders.

Pure functions, no database access. The orders endpoint loads an account's
orders once and passes them through these reductions.

Time-of-day keys and "today" use UTC calendar days.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Final, Literal

from restaunax.models.base import as_utc
from restaunax.models.order import ORDER_STATUSES, ORDER_TYPES, Order

TimeRange = Literal["today", "last7days", "last30days", "all"]
Granularity = Literal["day", "hour"]

TIME_RANGES: Final = ("today", "last7days", "last30days", "all")
TOP_ITEMS_LIMIT: Final = 10

_CENT = Decimal("0.01")


def in_range(created_at: datetime, time_range: str, now: datetime) -> bool:
    """Whether a timestamp falls inside a dashboard time range.

    "today" starts at UTC midnight; the "last N days" ranges are rolling
    windows ending at ``now``. Unknown ranges match everything.
    """
    created_at = as_utc(created_at)
    if time_range == "today":
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return created_at >= start
    if time_range == "last7days":
        return created_at >= now - timedelta(days=7)
    if time_range == "last30days":
        return created_at >= now - timedelta(days=30)
    return True


def filter_orders(
    orders: Iterable[Order],
    *,
    time_range: str = "all",
    statuses: Sequence[str] = (),
    order_type: str = "all",
    now: datetime | None = None,
) -> list[Order]:
    """Orders inside the time range, with a matching status and type.

    An empty ``statuses`` and ``order_type="all"`` do not filter.
    """
    now = now or datetime.now(UTC)
    return [
        order
        for order in orders
        if in_range(order.created_at, time_range, now)
        and (not statuses or order.status in statuses)
        and (order_type == "all" or order.order_type == order_type)
    ]


def group_by_status(orders: Iterable[Order]) -> dict[str, int]:
    """Order count per status; every status is present."""
    counts = dict.fromkeys(ORDER_STATUSES, 0)
    for order in orders:
        counts[order.status] = counts.get(order.status, 0) + 1
    return counts


def sum_revenue(orders: Iterable[Order]) -> Decimal:
    return sum((Decimal(order.total) for order in orders), Decimal("0.00"))


def average_order_value(orders: Sequence[Order]) -> Decimal:
    """Mean order total rounded to cents, 0 when there are no orders."""
    if not orders:
        return Decimal("0.00")
    average = sum_revenue(orders) / len(orders)
    return average.quantize(_CENT, rounding=ROUND_HALF_UP)


def bucket_key(created_at: datetime, granularity: str) -> str:
    """Chart label: "M/D" per day or "M/D H:00" per hour."""
    created_at = as_utc(created_at)
    key = f"{created_at.month}/{created_at.day}"
    if granularity == "hour":
        key = f"{key} {created_at.hour}:00"
    return key


def time_buckets(orders: Iterable[Order], granularity: str = "day") -> list[dict]:
    """Order counts per time bucket, oldest bucket first."""
    buckets: Counter[str] = Counter()
    for order in sorted(orders, key=lambda o: as_utc(o.created_at)):
        buckets[bucket_key(order.created_at, granularity)] += 1
    return [{"x": key, "count": count} for key, count in buckets.items()]


def pickup_vs_delivery(orders: Iterable[Order]) -> list[dict]:
    counts = Counter(order.order_type for order in orders)
    return [{"type": order_type, "count": counts[order_type]} for order_type in ORDER_TYPES]


def top_items(orders: Iterable[Order], limit: int = TOP_ITEMS_LIMIT) -> list[dict]:
    """Best-selling items by total quantity, highest first."""
    quantities: Counter[str] = Counter()
    for order in orders:
        for item in order.items:
            quantities[item.name] += item.quantity
    return [
        {"name": name, "quantity": quantity}
        for name, quantity in quantities.most_common(limit)
    ]


def build_summary(
    orders: Iterable[Order],
    *,
    time_range: str = "all",
    statuses: Sequence[str] = (),
    order_type: str = "all",
    now: datetime | None = None,
) -> dict:
    """All dashboard aggregates for the filtered orders.

    The time series is hourly for "today" and daily otherwise.
    """
    selected = filter_orders(
        orders,
        time_range=time_range,
        statuses=statuses,
        order_type=order_type,
        now=now,
    )
    granularity: Granularity = "hour" if time_range == "today" else "day"
    return {
        "time_range": time_range,
        "order_count": len(selected),
        "revenue": sum_revenue(selected),
        "average_order_value": average_order_value(selected),
        "by_status": group_by_status(selected),
        "granularity": granularity,
        "time_buckets": time_buckets(selected, granularity),
        "pickup_vs_delivery": pickup_vs_delivery(selected),
        "top_items": top_items(selected),
    }
