"""Pydantic request/response schemas for API endpoints."""

from restaunax.schemas.account import (
    AccountRead,
    AccountUpdate,
    AccountWithMembers,
    ProfileResponse,
    ProfileUpdateResponse,
    RegisterResponse,
    SignInResponse,
)
from restaunax.schemas.order import (
    OrderCreate,
    OrderItemCreate,
    OrderItemRead,
    OrderRead,
    OrderStatusUpdate,
    OrderSummary,
)
from restaunax.schemas.user import (
    ChangePasswordRequest,
    CheckUserResponse,
    CredentialsRequest,
    MemberRead,
    RegisterRequest,
    ResendVerificationRequest,
    UserProfileUpdate,
    UserRead,
)

__all__ = [
    # Accounts
    "AccountRead",
    "AccountUpdate",
    "AccountWithMembers",
    "ProfileResponse",
    "ProfileUpdateResponse",
    "RegisterResponse",
    "SignInResponse",
    # Orders
    "OrderCreate",
    "OrderItemCreate",
    "OrderItemRead",
    "OrderRead",
    "OrderStatusUpdate",
    "OrderSummary",
    # Users / auth
    "ChangePasswordRequest",
    "CheckUserResponse",
    "CredentialsRequest",
    "MemberRead",
    "RegisterRequest",
    "ResendVerificationRequest",
    "UserProfileUpdate",
    "UserRead",
]
