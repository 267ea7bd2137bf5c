"""User model - authentication and account membership."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from restaunax.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Person who signs in and works inside an account.

    Attributes:
        id: UUID primary key.
        name: Display name given at registration.
        email: Unique email address (stored lower-case).
        password_hash: bcrypt hash. Never serialized outward.
        email_verified: Timestamp when email was verified. NULL = unverified.
        account_id: FK to accounts. NULL only while registration is linking
            the new user to the account it owns.
        created_at: Creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email_verified: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )
    account_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    @property
    def is_verified(self) -> bool:
        """Whether the email address has been verified."""
        return self.email_verified is not None
