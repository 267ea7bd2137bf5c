"""Tests for GET /api/v1/dev/reset-db."""

from httpx import AsyncClient
from sqlalchemy import func, select

from restaunax.core.config import settings
from restaunax.models import Order, User
from tests.conftest import TEST_ACCOUNT_ID, TEST_USER_ID

_RESET_URL = "/api/v1/dev/reset-db"


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return (
            await session.execute(select(func.count()).select_from(model))
        ).scalar_one()


class TestResetDb:
    async def test_seed_account(
        self, unauthenticated_client: AsyncClient, session_factory, test_user
    ):
        response = await unauthenticated_client.get(
            _RESET_URL, params={"account_id": str(TEST_ACCOUNT_ID)}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["mode"] == "seed"
        assert data["orders_created"] == await _count(session_factory, Order)
        assert data["date_range"]["from"] < data["date_range"]["to"]

    async def test_keep_user(
        self, unauthenticated_client: AsyncClient, session_factory, test_user, user_b
    ):
        response = await unauthenticated_client.get(
            _RESET_URL, params={"user_id": str(TEST_USER_ID)}
        )

        assert response.status_code == 200
        assert response.json()["data"]["mode"] == "keep_user"
        assert await _count(session_factory, User) == 1

    async def test_wipe(
        self, unauthenticated_client: AsyncClient, session_factory, test_user
    ):
        response = await unauthenticated_client.get(_RESET_URL)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "message": "Database reset successfully",
            "mode": "wipe",
        }
        assert await _count(session_factory, User) == 0

    async def test_both_ids(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.get(
            _RESET_URL,
            params={"account_id": str(TEST_ACCOUNT_ID), "user_id": str(TEST_USER_ID)},
        )
        assert response.status_code == 400

    async def test_forbidden_outside_development(
        self, unauthenticated_client: AsyncClient, session_factory, test_user
    ):
        settings.environment = "production"

        response = await unauthenticated_client.get(_RESET_URL)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
        assert await _count(session_factory, User) == 1
