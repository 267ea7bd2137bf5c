"""Account schemas and the composite views that embed an account."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from restaunax.schemas.user import MemberRead, UserRead


class AccountUpdate(BaseModel):
    """Request body for PATCH /account/{account_id}."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=2, max_length=100)


class AccountRead(BaseModel):
    """Account as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str | None
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class AccountWithMembers(AccountRead):
    """Response for GET /account/{account_id}."""

    members: list[MemberRead] = []


class RegisterResponse(BaseModel):
    """Response for POST /auth/register.

    Attributes:
        user: The new, unverified user.
        account: The account the user owns.
        message: Next step for the user.
        warnings: Non-fatal problems, e.g. VERIFICATION_EMAIL_NOT_SENT.
    """

    user: UserRead
    account: AccountRead
    message: str
    warnings: list[str] = []


class SignInResponse(BaseModel):
    """Response for POST /auth/check-credentials."""

    token: str
    user: UserRead
    account: AccountRead | None


class ProfileResponse(BaseModel):
    """Response for GET /user/{user_id}."""

    user: UserRead
    account: AccountRead | None
    members: list[MemberRead] = []


class ProfileUpdateResponse(BaseModel):
    """Response for PATCH /user/{user_id}."""

    user: UserRead
    message: str
    warnings: list[str] = []
