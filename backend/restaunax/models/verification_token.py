"""Verification token model - email verification links.

Single-use, time-limited. Only the SHA-256 hash of the plain token is
stored; the plain value exists solely in the emailed link.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from restaunax.models.base import Base


class VerificationToken(Base):
    """Email verification token.

    Loosely coupled to users by email (no FK). At most one active token
    per identifier.

    Attributes:
        token: SHA-256 hex digest of the plain token (primary key).
        identifier: Email address the token verifies.
        expires: Token expiry timestamp.
    """

    __tablename__ = "verification_tokens"

    token: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    identifier: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    expires: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
