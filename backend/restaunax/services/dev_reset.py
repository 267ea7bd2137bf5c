"""Development database reset and demo seeding.

Three mutually exclusive modes, chosen by which id is supplied:

- account_id: replace that account's orders with generated demo orders.
- user_id: delete every account and user except this user and its account,
  plus all orders and verification tokens.
- neither: wipe orders, accounts, users and verification tokens.

Every mode is refused outside the development environment. Each runs in
one unit of work, deleting children before parents.
"""

import random
import uuid
from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.core.config import settings
from restaunax.core.database import unit_of_work
from restaunax.core.errors import ForbiddenError, NotFoundError, ValidationError
from restaunax.repositories.account_repository import AccountRepository
from restaunax.repositories.order_repository import OrderRepository
from restaunax.repositories.user_repository import UserRepository
from restaunax.repositories.verification_token_repository import (
    VerificationTokenRepository,
)
from restaunax.services import demo_data

logger = structlog.get_logger()


@dataclass(frozen=True)
class ResetResult:
    """What a reset did.

    Attributes:
        mode: "seed", "keep_user" or "wipe".
        message: Human-readable summary.
        orders_created: Demo orders inserted (seed mode only).
        date_from: Oldest seeded order time (seed mode only).
        date_to: Newest seeded order time (seed mode only).
    """

    mode: str
    message: str
    orders_created: int = 0
    date_from: datetime | None = None
    date_to: datetime | None = None


def ensure_development() -> None:
    """Raise ForbiddenError unless running in the development environment."""
    if not settings.is_development:
        raise ForbiddenError("Database reset is only available in development")


class DevResetService:
    """Reset/seed operations over one database session.

    Args:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def reset(
        self,
        *,
        account_id: uuid.UUID | None = None,
        user_id: uuid.UUID | None = None,
        rng: random.Random | None = None,
    ) -> ResetResult:
        """Dispatch to the mode selected by the supplied ids.

        Raises:
            ForbiddenError: Not running in development.
            ValidationError: Both ids supplied.
            NotFoundError: The referenced account or user does not exist.
        """
        ensure_development()
        if account_id is not None and user_id is not None:
            raise ValidationError("Supply either account_id or user_id, not both")

        if account_id is not None:
            return await self.seed_account(account_id, rng=rng)
        if user_id is not None:
            return await self.keep_only_user(user_id)
        return await self.wipe()

    async def seed_account(
        self,
        account_id: uuid.UUID,
        *,
        rng: random.Random | None = None,
    ) -> ResetResult:
        """Replace an account's orders with 30 days of generated ones."""
        ensure_development()
        account = await AccountRepository.get_by_id(self._db, account_id)
        if account is None:
            raise NotFoundError("Account", str(account_id))

        seeds = demo_data.generate(account_id, rng=rng)
        async with unit_of_work(self._db):
            await OrderRepository.delete_items_for_account(self._db, account_id)
            await OrderRepository.delete_for_account(self._db, account_id)
            for seed in seeds:
                await OrderRepository.create(
                    self._db,
                    account_id=seed.account_id,
                    customer_name=seed.customer_name,
                    order_type=seed.order_type,
                    total=seed.total,
                    items=list(seed.items),
                    status=seed.status,
                    created_at=seed.created_at,
                )

        created = [seed.created_at for seed in seeds]
        logger.info(
            "dev_reset",
            mode="seed",
            account_id=str(account_id),
            orders_created=len(seeds),
        )
        return ResetResult(
            mode="seed",
            message=f"Seeded {len(seeds)} demo orders",
            orders_created=len(seeds),
            date_from=min(created),
            date_to=max(created),
        )

    async def keep_only_user(self, user_id: uuid.UUID) -> ResetResult:
        """Delete everything except one user and the account it belongs to.

        The kept user becomes the owner of its account if it was a plain
        member, so the account keeps a valid owner. A user without an
        account is kept alone and every account is deleted.
        """
        ensure_development()
        user = await UserRepository.get_by_id(self._db, user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        keep_account_id = user.account_id

        async with unit_of_work(self._db):
            if keep_account_id is not None:
                account = await AccountRepository.get_for_update(
                    self._db, keep_account_id
                )
                if account is None:
                    raise NotFoundError("Account", str(keep_account_id))
                if account.owner_id != user_id:
                    await AccountRepository.set_owner(self._db, keep_account_id, user_id)

            await VerificationTokenRepository.delete_all(self._db)
            await OrderRepository.delete_all(self._db)
            if keep_account_id is None:
                await UserRepository.detach_all(self._db)
                accounts = await AccountRepository.delete_all(self._db)
            else:
                await UserRepository.detach_all_except(self._db, user_id)
                accounts = await AccountRepository.delete_all_except(
                    self._db, keep_account_id
                )
            users = await UserRepository.delete_all_except(self._db, user_id)

        logger.info(
            "dev_reset",
            mode="keep_user",
            user_id=str(user_id),
            accounts_deleted=accounts,
            users_deleted=users,
        )
        return ResetResult(
            mode="keep_user",
            message="Database reset, kept the specified user and account",
        )

    async def wipe(self) -> ResetResult:
        """Delete all orders, accounts, users and verification tokens."""
        ensure_development()
        async with unit_of_work(self._db):
            await VerificationTokenRepository.delete_all(self._db)
            orders = await OrderRepository.delete_all(self._db)
            await UserRepository.detach_all(self._db)
            accounts = await AccountRepository.delete_all(self._db)
            users = await UserRepository.delete_all(self._db)

        logger.info(
            "dev_reset",
            mode="wipe",
            orders_deleted=orders,
            accounts_deleted=accounts,
            users_deleted=users,
        )
        return ResetResult(mode="wipe", message="Database reset successfully")
