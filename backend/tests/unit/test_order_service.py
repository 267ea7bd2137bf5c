"""Tests for OrderService and its validation helpers.

Covers total computation, item validation, account scoping (orders of
another account look like missing orders) and status updates.
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.core.errors import NotFoundError, ValidationError
from restaunax.models import Order
from restaunax.repositories.order_repository import NewOrderItem
from restaunax.services.order_service import (
    OrderScope,
    OrderService,
    compute_total,
    to_money,
    validate_items,
    validate_status,
)
from tests.conftest import ACCOUNT_B_ID, TEST_ACCOUNT_ID

_MISSING_UUID = uuid.UUID("99999999-9999-9999-9999-999999999999")


def _item(name: str = "Pasta Carbonara", price: str = "14.99", quantity: int = 1):
    return NewOrderItem(name=name, price=Decimal(price), quantity=quantity)


class TestComputeTotal:
    def test_sums_price_times_quantity(self):
        items = [_item(price="12.99", quantity=2), _item(price="8.99", quantity=1)]
        assert compute_total(items) == Decimal("34.97")

    def test_rounds_half_up_to_cents(self):
        items = [NewOrderItem(name="Tea", price=Decimal("0.005"), quantity=1)]
        assert compute_total(items) == Decimal("0.01")

    def test_float_prices_keep_exact_cents(self):
        assert to_money(19.99) == Decimal("19.99")


class TestValidateStatus:
    @pytest.mark.parametrize("status", ["pending", "preparing", "ready", "delivered"])
    def test_accepts_known_statuses(self, status):
        assert validate_status(status) == status

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_status("cancelled")
        assert exc_info.value.details[0]["loc"] == ["status"]


class TestValidateItems:
    def test_rejects_empty_list(self):
        with pytest.raises(ValidationError, match="at least one item"):
            validate_items([])

    def test_reports_each_bad_field(self):
        items = [_item(), _item(price="0"), _item(quantity=0)]
        with pytest.raises(ValidationError) as exc_info:
            validate_items(items)
        locs = [d["loc"] for d in exc_info.value.details]
        assert locs == [["items", 1, "price"], ["items", 2, "quantity"]]


class TestOrderScope:
    def test_unscoped_allows_every_account(self):
        assert OrderScope().allows(Order(account_id=ACCOUNT_B_ID)) is True

    def test_scoped_allows_only_its_account(self):
        scope = OrderScope(account_id=TEST_ACCOUNT_ID)
        assert scope.allows(Order(account_id=TEST_ACCOUNT_ID)) is True
        assert scope.allows(Order(account_id=ACCOUNT_B_ID)) is False


class TestCreateOrder:
    """Test OrderService.create_order()."""

    async def test_creates_pending_order_with_total(
        self, db_session: AsyncSession, test_account
    ):
        order = await OrderService(db_session).create_order(
            account_id=test_account.id,
            customer_name="John Smith",
            order_type="delivery",
            items=[_item("Margherita Pizza", "12.99", 2), _item("Caesar Salad", "8.99")],
        )

        assert order.status == "pending"
        assert order.order_type == "delivery"
        assert order.total == Decimal("34.97")
        assert len(order.items) == 2

    async def test_rejects_unknown_order_type(self, db_session: AsyncSession, test_account):
        with pytest.raises(ValidationError, match="Invalid order type"):
            await OrderService(db_session).create_order(
                account_id=test_account.id,
                customer_name="John Smith",
                order_type="dine-in",
                items=[_item()],
            )

    async def test_rejects_invalid_items(self, db_session: AsyncSession, test_account):
        with pytest.raises(ValidationError):
            await OrderService(db_session).create_order(
                account_id=test_account.id,
                customer_name="John Smith",
                order_type="pickup",
                items=[_item(price="-1.00")],
            )

    async def test_unknown_account_is_not_found(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await OrderService(db_session).create_order(
                account_id=_MISSING_UUID,
                customer_name="John Smith",
                order_type="pickup",
                items=[_item()],
            )

    async def test_scoped_service_refuses_other_account(
        self, db_session: AsyncSession, test_account, user_b
    ):
        service = OrderService(db_session, OrderScope(account_id=TEST_ACCOUNT_ID))
        with pytest.raises(NotFoundError):
            await service.create_order(
                account_id=ACCOUNT_B_ID,
                customer_name="John Smith",
                order_type="pickup",
                items=[_item()],
            )


class TestScopedAccess:
    """Orders of another account are indistinguishable from missing ones."""

    async def _order_for_b(self, db_session: AsyncSession):
        return await OrderService(db_session).create_order(
            account_id=ACCOUNT_B_ID,
            customer_name="Maria Garcia",
            order_type="pickup",
            items=[_item()],
        )

    async def test_get_other_account_order_is_not_found(
        self, db_session: AsyncSession, test_account, user_b
    ):
        order = await self._order_for_b(db_session)
        service = OrderService(db_session, OrderScope(account_id=TEST_ACCOUNT_ID))

        with pytest.raises(NotFoundError):
            await service.get_order(order.id)
        with pytest.raises(NotFoundError):
            await service.update_status(order.id, "ready")
        with pytest.raises(NotFoundError):
            await service.delete_order(order.id)

    async def test_list_is_forced_to_scope(
        self, db_session: AsyncSession, test_account, user_b
    ):
        await self._order_for_b(db_session)
        service = OrderService(db_session, OrderScope(account_id=TEST_ACCOUNT_ID))

        assert await service.list_orders(account_id=ACCOUNT_B_ID) == []

    async def test_unscoped_list_filters_by_account(
        self, db_session: AsyncSession, test_account, user_b
    ):
        order = await self._order_for_b(db_session)
        orders = await OrderService(db_session).list_orders(account_id=ACCOUNT_B_ID)
        assert [o.id for o in orders] == [order.id]

    async def test_list_rejects_unknown_status(self, db_session: AsyncSession):
        with pytest.raises(ValidationError):
            await OrderService(db_session).list_orders(status="lost")


class TestUpdateStatus:
    async def test_any_status_may_follow_any_other(
        self, db_session: AsyncSession, test_account
    ):
        service = OrderService(db_session)
        order = await service.create_order(
            account_id=test_account.id,
            customer_name="John Smith",
            order_type="pickup",
            items=[_item()],
        )

        delivered = await service.update_status(order.id, "delivered")
        assert delivered.status == "delivered"
        back = await service.update_status(order.id, "pending")
        assert back.status == "pending"

    async def test_missing_order_is_not_found(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await OrderService(db_session).update_status(_MISSING_UUID, "ready")


class TestDeleteOrder:
    async def test_deleted_order_is_gone(self, db_session: AsyncSession, test_account):
        service = OrderService(db_session)
        order = await service.create_order(
            account_id=test_account.id,
            customer_name="John Smith",
            order_type="pickup",
            items=[_item()],
        )

        await service.delete_order(order.id)

        with pytest.raises(NotFoundError):
            await service.get_order(order.id)
