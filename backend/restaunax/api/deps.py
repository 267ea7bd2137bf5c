"""Shared dependencies for API endpoints.

Authentication strategies and the authorization policy applied before any
business operation runs.

Two kinds of caller:
- service: holds the shared secret sent in the ``x-api-key`` header; may act
  on any account or user.
- session: presents a session token (``Authorization: Bearer`` header or the
  session cookie); may act only on its own account and user.
"""

import secrets
import uuid
from dataclasses import dataclass
from typing import Annotated, Literal

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.core.auth import validate_session_token
from restaunax.core.config import settings
from restaunax.core.database import get_db
from restaunax.core.errors import ForbiddenError, UnauthorizedError
from restaunax.models import Account
from restaunax.repositories.user_repository import UserRepository

API_KEY_HEADER = "x-api-key"
_BEARER_PREFIX = "bearer "

DbSession = Annotated[AsyncSession, Depends(get_db)]


@dataclass(frozen=True)
class Caller:
    """Authenticated caller of an endpoint.

    Attributes:
        kind: "session" or "service".
        user_id: Session user (None for service callers).
        account_id: Session user's account (None for service callers).
        email: Session user's email (None for service callers).
    """

    kind: Literal["session", "service"]
    user_id: uuid.UUID | None = None
    account_id: uuid.UUID | None = None
    email: str | None = None

    @property
    def is_service(self) -> bool:
        return self.kind == "service"


SERVICE_CALLER = Caller(kind="service")


def _api_key_matches(presented: str) -> bool:
    expected = settings.api_key.get_secret_value()
    if not expected:
        # No key configured: the shared-secret strategy is disabled
        return False
    return secrets.compare_digest(presented.encode(), expected.encode())


def _session_token_from(request: Request) -> str | None:
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith(_BEARER_PREFIX):
        return authorization[len(_BEARER_PREFIX) :].strip() or None
    return request.cookies.get(settings.auth_cookie_name)


async def get_caller(request: Request, db: DbSession) -> Caller:
    """Authenticate the request.

    Strategies, in order:
    1. Shared secret in ``x-api-key`` -> service caller.
    2. Session token from the Bearer header or cookie -> session caller,
       provided the user still exists.

    Raises:
        UnauthorizedError: Wrong API key or no credentials at all.
        InvalidTokenError / ExpiredTokenError: Bad session token.
    """
    api_key = request.headers.get(API_KEY_HEADER)
    if api_key is not None:
        if not _api_key_matches(api_key):
            raise UnauthorizedError("Invalid API key")
        return SERVICE_CALLER

    token = _session_token_from(request)
    if not token:
        raise UnauthorizedError()

    claims = validate_session_token(token)
    user = await UserRepository.get_by_id(db, claims.user_id)
    if user is None:
        raise UnauthorizedError()

    # The stored membership wins over the claim: it changes on dev reset
    return Caller(
        kind="session",
        user_id=user.id,
        account_id=user.account_id,
        email=user.email,
    )


CurrentCaller = Annotated[Caller, Depends(get_caller)]


# =============================================================================
# Policy helpers
# =============================================================================


def require_account_access(caller: Caller, account_id: uuid.UUID) -> None:
    """Session callers may only reach their own account."""
    if caller.is_service:
        return
    if caller.account_id != account_id:
        raise ForbiddenError("You do not have access to this account")


def require_user_access(caller: Caller, user_id: uuid.UUID) -> None:
    """Session callers may only reach their own user."""
    if caller.is_service:
        return
    if caller.user_id != user_id:
        raise ForbiddenError("You do not have access to this user")


def require_account_owner(caller: Caller, account: Account) -> None:
    """Session callers must own the account (rename, delete)."""
    if caller.is_service:
        return
    if caller.account_id != account.id or caller.user_id != account.owner_id:
        raise ForbiddenError("Only the account owner can do this")


def session_account_id(caller: Caller) -> uuid.UUID:
    """Account of a session caller; ForbiddenError if the user has none."""
    if caller.account_id is None:
        raise ForbiddenError("User is not a member of any account")
    return caller.account_id
