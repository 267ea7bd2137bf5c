"""User and authentication schemas.

Request bodies for the auth and user endpoints, and the user views returned
by them. No response model carries the password hash.
"""

import uuid
from datetime import datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from restaunax.core.auth import PASSWORD_MAX_BYTES


def _check_password_bytes(v: str) -> str:
    if len(v.encode()) > PASSWORD_MAX_BYTES:
        msg = f"Password must be at most {PASSWORD_MAX_BYTES} bytes"
        raise ValueError(msg)
    return v


# =============================================================================
# Requests
# =============================================================================


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        """Reject passwords bcrypt cannot hash (over 72 UTF-8 bytes)."""
        return _check_password_bytes(v)


class CredentialsRequest(BaseModel):
    """Request body for POST /auth/check-credentials and /auth/check-user."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class ResendVerificationRequest(BaseModel):
    """Request body for POST /auth/resend-verification."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class UserProfileUpdate(BaseModel):
    """Request body for PATCH /user/{user_id}. At least one field is required."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=2, max_length=50)
    email: EmailStr | None = None

    @model_validator(mode="after")
    def check_not_empty(self) -> "UserProfileUpdate":
        if self.name is None and self.email is None:
            raise ValueError("At least one field must be provided")
        return self


class ChangePasswordRequest(BaseModel):
    """Request body for POST /user/change-password.

    Session callers change their own password; service callers name the
    user with ``user_id``.
    """

    model_config = ConfigDict(extra="forbid")

    user_id: uuid.UUID | None = None
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=6, max_length=128)

    @field_validator("new_password")
    @classmethod
    def new_password_fits_bcrypt(cls, v: str) -> str:
        return _check_password_bytes(v)


# =============================================================================
# Responses
# =============================================================================


class UserRead(BaseModel):
    """User as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    email_verified: datetime | None
    account_id: uuid.UUID | None
    created_at: datetime
    updated_at: datetime


class MemberRead(BaseModel):
    """Account member as listed on account and profile views."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str


class CheckUserResponse(BaseModel):
    """Response for POST /auth/check-user."""

    unverified: bool
