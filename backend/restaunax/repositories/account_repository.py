"""Data access for the accounts table.

An account's owner is always one of its members; the service layer keeps
that invariant, this module only reads and writes rows.
"""

import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.models.account import Account


class AccountRepository:
    """Stateless repository for Account rows. Callers own the transaction."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        owner_id: uuid.UUID,
        name: str | None = None,
    ) -> Account:
        """Insert an account for an existing user and flush it."""
        account = Account(owner_id=owner_id, name=name)
        db.add(account)
        await db.flush()
        await db.refresh(account)
        return account

    @staticmethod
    async def get_by_id(db: AsyncSession, account_id: uuid.UUID) -> Account | None:
        return await db.get(Account, account_id)

    @staticmethod
    async def get_for_update(
        db: AsyncSession, account_id: uuid.UUID
    ) -> Account | None:
        """Load an account with its row locked until commit or rollback.

        Concurrent rename and delete of one account run one after the
        other. SQLite has no row locks and ignores FOR UPDATE.

        Args:
            db: Async database session.
            account_id: Account primary key.

        Returns:
            The freshly loaded Account, or None.
        """
        result = await db.execute(
            select(Account)
            .where(Account.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def update_name(
        db: AsyncSession, account_id: uuid.UUID, name: str
    ) -> Account | None:
        """Rename under a row lock. Returns None for an unknown id."""
        account = await AccountRepository.get_for_update(db, account_id)
        if account is None:
            return None
        account.name = name
        await db.flush()
        await db.refresh(account)
        return account

    @staticmethod
    async def set_owner(
        db: AsyncSession, account_id: uuid.UUID, owner_id: uuid.UUID
    ) -> None:
        """Hand ownership to another member. No-op for an unknown account."""
        account = await db.get(Account, account_id)
        if account is None:
            return
        account.owner_id = owner_id
        await db.flush()

    @staticmethod
    async def delete(db: AsyncSession, account_id: uuid.UUID) -> int:
        """Delete one account. Orders must be gone and members detached.

        Returns:
            1 if the account existed, else 0.
        """
        result = await db.execute(delete(Account).where(Account.id == account_id))
        count: int = result.rowcount  # type: ignore[attr-defined]
        return count

    @staticmethod
    async def delete_all_except(db: AsyncSession, keep_account_id: uuid.UUID) -> int:
        result = await db.execute(
            delete(Account).where(Account.id != keep_account_id)
        )
        count: int = result.rowcount  # type: ignore[attr-defined]
        return count

    @staticmethod
    async def delete_all(db: AsyncSession) -> int:
        result = await db.execute(delete(Account))
        count: int = result.rowcount  # type: ignore[attr-defined]
        return count
