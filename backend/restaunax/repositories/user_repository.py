"""Data access for the users table.

Emails are stored and compared in normalized (trimmed, lower-case) form.
Nothing here commits; callers own the transaction.
"""

import uuid
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.models.user import User

# Columns UserRepository.update() may touch. Keys and timestamps are excluded.
_UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"name", "email", "email_verified", "password_hash", "account_id"}
)


def normalize_email(email: str) -> str:
    """Canonical form used for storage and comparison."""
    return email.strip().lower()


def _rowcount(result: CursorResult) -> int:  # type: ignore[type-arg]
    count: int = result.rowcount
    return count


class UserRepository:
    """Stateless repository for User rows."""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Look a user up by email, ignoring case and surrounding spaces."""
        result = await db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_account(db: AsyncSession, account_id: uuid.UUID) -> list[User]:
        """Members of an account in join order."""
        result = await db.execute(
            select(User)
            .where(User.account_id == account_id)
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        name: str,
        email: str,
        password_hash: str,
        email_verified: datetime | None = None,
        account_id: uuid.UUID | None = None,
    ) -> User:
        """Insert a user and flush so its id and timestamps are populated.

        Args:
            db: Async database session.
            name: Display name.
            email: Address; normalized before storage.
            password_hash: bcrypt hash, never the plain password.
            email_verified: Verification time, None while unverified.
            account_id: Owning account, None during registration.

        Returns:
            The new User.

        Raises:
            sqlalchemy.exc.IntegrityError: The email is already taken.
        """
        user = User(
            name=name,
            email=normalize_email(email),
            password_hash=password_hash,
            email_verified=email_verified,
            account_id=account_id,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def update(
        db: AsyncSession,
        user_id: uuid.UUID,
        **fields: str | datetime | uuid.UUID | None,
    ) -> User | None:
        """Set columns on one user.

        Returns:
            The refreshed User, or None if no user has this id.

        Raises:
            ValueError: A field outside _UPDATABLE_FIELDS was passed.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")

        user = await db.get(User, user_id)
        if user is None:
            return None

        if isinstance(fields.get("email"), str):
            fields["email"] = normalize_email(fields["email"])  # type: ignore[arg-type]
        for name, value in fields.items():
            setattr(user, name, value)

        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def delete(db: AsyncSession, user_id: uuid.UUID) -> int:
        return _rowcount(await db.execute(delete(User).where(User.id == user_id)))

    # --- account teardown ---------------------------------------------------

    @staticmethod
    async def detach_from_account(db: AsyncSession, account_id: uuid.UUID) -> None:
        """Null out account_id for every member of an account."""
        await db.execute(
            update(User).where(User.account_id == account_id).values(account_id=None)
        )

    @staticmethod
    async def delete_members_except(
        db: AsyncSession,
        account_id: uuid.UUID,
        *,
        keep_user_id: uuid.UUID,
    ) -> int:
        """Delete an account's members other than ``keep_user_id``.

        Returns:
            Number of deleted users.
        """
        return _rowcount(
            await db.execute(
                delete(User).where(
                    User.account_id == account_id, User.id != keep_user_id
                )
            )
        )

    # --- development reset --------------------------------------------------

    @staticmethod
    async def detach_all_except(db: AsyncSession, keep_user_id: uuid.UUID) -> None:
        await db.execute(
            update(User).where(User.id != keep_user_id).values(account_id=None)
        )

    @staticmethod
    async def delete_all_except(db: AsyncSession, keep_user_id: uuid.UUID) -> int:
        return _rowcount(await db.execute(delete(User).where(User.id != keep_user_id)))

    @staticmethod
    async def detach_all(db: AsyncSession) -> None:
        await db.execute(update(User).values(account_id=None))

    @staticmethod
    async def delete_all(db: AsyncSession) -> int:
        """Delete every user. Accounts must already be gone."""
        return _rowcount(await db.execute(delete(User)))
