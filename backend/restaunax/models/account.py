"""Account model - the restaurant tenant.

An account owns its users and orders. ``owner_id`` and ``users.account_id``
reference each other; the owner FK is created after both tables exist
(use_alter) to break the cycle.
"""

import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from restaunax.models.base import Base, TimestampMixin


class Account(Base, TimestampMixin):
    """Restaurant account.

    Invariant: the owner is also a member (owner.account_id == id).

    Attributes:
        id: UUID primary key.
        name: Display name (e.g., "Ana's Restaurant").
        owner_id: FK to the user who owns the account.
    """

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey(
            "users.id",
            use_alter=True,
            name="fk_accounts_owner_id_users",
        ),
        nullable=False,
        index=True,
    )
