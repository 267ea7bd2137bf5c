"""SQLAlchemy ORM models for RestaunaX.

All models are exported from this module for convenient imports:
    from restaunax.models import User, Account, Order, ...

Models are organized by domain:
- user.py: User
- account.py: Account (circular FK with users via owner_id)
- order.py: Order, OrderItem
- verification_token.py: VerificationToken (keyed by token hash, no FK)
"""

from restaunax.models.account import Account
from restaunax.models.base import Base, TimestampMixin
from restaunax.models.order import ORDER_STATUSES, ORDER_TYPES, Order, OrderItem
from restaunax.models.user import User
from restaunax.models.verification_token import VerificationToken

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Tenancy
    "Account",
    "User",
    "VerificationToken",
    # Orders
    "Order",
    "OrderItem",
    "ORDER_STATUSES",
    "ORDER_TYPES",
]
