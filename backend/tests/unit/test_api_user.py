"""Tests for the user endpoints.

Profile read/update and password change. Session callers reach only
their own user.
"""

from unittest.mock import AsyncMock

from httpx import AsyncClient

from tests.conftest import TEST_PASSWORD, TEST_USER_ID, USER_B_ID

_CHANGE_PASSWORD_URL = "/api/v1/user/change-password"


class TestGetUser:
    """GET /api/v1/user/{user_id}."""

    async def test_profile_with_account(self, client: AsyncClient):
        response = await client.get(f"/api/v1/user/{TEST_USER_ID}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "ana@example.com"
        assert data["account"]["name"] == "Ana's Restaurant"
        assert [m["email"] for m in data["members"]] == ["ana@example.com"]
        assert "password_hash" not in data["user"]

    async def test_other_user_is_forbidden(self, client: AsyncClient, user_b):
        response = await client.get(f"/api/v1/user/{USER_B_ID}")
        assert response.status_code == 403

    async def test_service_caller_reads_any_user(
        self, service_client: AsyncClient, user_b
    ):
        response = await service_client.get(f"/api/v1/user/{USER_B_ID}")

        assert response.status_code == 200
        assert response.json()["data"]["user"]["name"] == "Bruno"


class TestUpdateUser:
    """PATCH /api/v1/user/{user_id}."""

    async def test_rename(self, client: AsyncClient):
        response = await client.patch(
            f"/api/v1/user/{TEST_USER_ID}", json={"name": "Ana Maria"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["name"] == "Ana Maria"
        assert data["message"] == "Profile updated successfully"

    async def test_email_change_requires_verification(
        self, client: AsyncClient, email_outbox: AsyncMock
    ):
        response = await client.patch(
            f"/api/v1/user/{TEST_USER_ID}", json={"email": "ana.new@example.com"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "ana.new@example.com"
        assert data["user"]["email_verified"] is None
        assert data["message"] == "Profile updated. Please verify your new email address."
        assert email_outbox.call_args.kwargs["to_email"] == "ana.new@example.com"

    async def test_email_of_other_user(self, client: AsyncClient, user_b):
        response = await client.patch(
            f"/api/v1/user/{TEST_USER_ID}", json={"email": "bruno@example.com"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE_EMAIL"

    async def test_empty_body(self, client: AsyncClient):
        response = await client.patch(f"/api/v1/user/{TEST_USER_ID}", json={})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_other_user_is_forbidden(self, client: AsyncClient, user_b):
        response = await client.patch(
            f"/api/v1/user/{USER_B_ID}", json={"name": "Hijacked"}
        )
        assert response.status_code == 403


class TestChangePassword:
    """POST /api/v1/user/change-password."""

    async def test_session_user_changes_own_password(
        self, client: AsyncClient, unauthenticated_client: AsyncClient
    ):
        response = await client.post(
            _CHANGE_PASSWORD_URL,
            json={"current_password": TEST_PASSWORD, "new_password": "brand-new"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["message"] == "Password updated successfully"

        sign_in = await unauthenticated_client.post(
            "/api/v1/auth/check-credentials",
            json={"email": "ana@example.com", "password": "brand-new"},
        )
        assert sign_in.status_code == 200

    async def test_wrong_current_password(self, client: AsyncClient):
        response = await client.post(
            _CHANGE_PASSWORD_URL,
            json={"current_password": "wrong", "new_password": "brand-new"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    async def test_short_new_password(self, client: AsyncClient):
        response = await client.post(
            _CHANGE_PASSWORD_URL,
            json={"current_password": TEST_PASSWORD, "new_password": "123"},
        )
        assert response.status_code == 400

    async def test_new_password_over_72_bytes(self, client: AsyncClient):
        response = await client.post(
            _CHANGE_PASSWORD_URL,
            json={"current_password": TEST_PASSWORD, "new_password": "p" * 100},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["loc"] == ["body", "new_password"]

    async def test_service_caller_must_name_user(self, service_client: AsyncClient):
        response = await service_client.post(
            _CHANGE_PASSWORD_URL,
            json={"current_password": TEST_PASSWORD, "new_password": "brand-new"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["loc"] == ["body", "user_id"]

    async def test_service_caller_with_user_id(
        self, service_client: AsyncClient, user_b
    ):
        response = await service_client.post(
            _CHANGE_PASSWORD_URL,
            json={
                "user_id": str(USER_B_ID),
                "current_password": TEST_PASSWORD,
                "new_password": "brand-new",
            },
        )
        assert response.status_code == 200
