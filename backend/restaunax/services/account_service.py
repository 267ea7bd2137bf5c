"""Account and user lifecycle.

Registration, email verification, sign-in checks, profile and password
changes, and transactional account deletion. Every composite mutation runs
inside one unit of work so a failure at any step leaves the database as it
was before the call.

Outbound email is sent only after the unit of work commits. A failed send
is reported back to the caller (``email_sent=False``) and logged; it never
undoes the committed change.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.core.auth import (
    DUMMY_HASH,
    SessionClaims,
    hash_password,
    issue_session_token,
    verify_password,
)
from restaunax.core.database import unit_of_work
from restaunax.core.email import send_verification_email
from restaunax.core.errors import (
    AlreadyVerifiedError,
    DuplicateEmailError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from restaunax.models import Account, User
from restaunax.repositories.account_repository import AccountRepository
from restaunax.repositories.order_repository import OrderRepository
from restaunax.repositories.user_repository import UserRepository, normalize_email
from restaunax.services.verification_token_store import VerificationTokenStore

logger = structlog.get_logger()

VERIFICATION_EMAIL_NOT_SENT = "VERIFICATION_EMAIL_NOT_SENT"


def default_account_name(user_name: str) -> str:
    """Name given to the account created at registration."""
    return f"{user_name}'s Restaurant"


@dataclass
class RegistrationResult:
    """Outcome of a successful registration.

    Attributes:
        user: The new (unverified) user.
        account: The account the user owns.
        email_sent: Whether the verification email was accepted.
    """

    user: User
    account: Account
    email_sent: bool

    @property
    def warnings(self) -> list[str]:
        return [] if self.email_sent else [VERIFICATION_EMAIL_NOT_SENT]


@dataclass
class SignInResult:
    """Verified user plus the session token issued for them."""

    user: User
    account: Account | None
    token: str


@dataclass
class AccountView:
    """Account with its member users."""

    account: Account
    members: list[User] = field(default_factory=list)


@dataclass
class ProfileView:
    """User profile with the account it belongs to."""

    user: User
    account: Account | None
    members: list[User] = field(default_factory=list)


@dataclass
class ProfileUpdateResult:
    """Outcome of a profile update.

    Attributes:
        user: The updated user.
        email_changed: True when the email moved and must be re-verified.
        email_sent: Whether a new verification email was accepted. Always
            True when the email did not change.
    """

    user: User
    email_changed: bool
    email_sent: bool = True

    @property
    def warnings(self) -> list[str]:
        return [] if self.email_sent else [VERIFICATION_EMAIL_NOT_SENT]


class AccountService:
    """Account/user operations over one database session.

    Args:
        db: Async database session. Each public method commits its own
            unit of work.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db
        self._tokens = VerificationTokenStore(db)

    # =========================================================================
    # Registration and verification
    # =========================================================================

    async def register(self, *, name: str, email: str, password: str) -> RegistrationResult:
        """Create a user, the account it owns and a verification token.

        The user, the account, the user's account link and the token are
        written in one unit of work.

        Raises:
            DuplicateEmailError: Email already belongs to a user, including
                a concurrent registration that won the unique constraint.
        """
        if await UserRepository.get_by_email(self._db, email) is not None:
            raise DuplicateEmailError()

        password_hash = hash_password(password)
        try:
            async with unit_of_work(self._db):
                user = await UserRepository.create(
                    self._db,
                    name=name,
                    email=email,
                    password_hash=password_hash,
                )
                account = await AccountRepository.create(
                    self._db,
                    owner_id=user.id,
                    name=default_account_name(name),
                )
                user = await UserRepository.update(
                    self._db, user.id, account_id=account.id
                )
                issued = await self._tokens.issue(user.email)
        except IntegrityError as exc:
            raise DuplicateEmailError() from exc

        logger.info(
            "account_registered",
            user_id=str(user.id),
            account_id=str(account.id),
        )

        email_sent = await send_verification_email(
            to_email=user.email, name=user.name, token=issued.token
        )
        if not email_sent:
            logger.warning("verification_email_not_sent", user_id=str(user.id))

        return RegistrationResult(user=user, account=account, email_sent=email_sent)

    async def verify_email(self, token: str) -> User:
        """Consume a verification token and mark its user verified.

        Raises:
            InvalidVerificationTokenError: Unknown or already-used token.
            VerificationTokenExpiredError: Token expired (and was purged).
            NotFoundError: No user holds the token's email.
        """
        async with unit_of_work(self._db):
            identifier = await self._tokens.consume(token)
            user = await UserRepository.get_by_email(self._db, identifier)
            if user is None:
                raise NotFoundError("User")
            user = await UserRepository.update(
                self._db, user.id, email_verified=datetime.now(UTC)
            )

        logger.info("email_verified", user_id=str(user.id))
        return user

    async def resend_verification(self, email: str) -> bool:
        """Re-issue a verification token and email it.

        Returns:
            Whether the verification email was accepted.

        Raises:
            NotFoundError: No user with this email.
            AlreadyVerifiedError: The email is already verified.
        """
        user = await UserRepository.get_by_email(self._db, email)
        if user is None:
            raise NotFoundError("User")
        if user.is_verified:
            raise AlreadyVerifiedError()

        async with unit_of_work(self._db):
            issued = await self._tokens.issue(user.email)

        email_sent = await send_verification_email(
            to_email=user.email, name=user.name, token=issued.token
        )
        if not email_sent:
            logger.warning("verification_email_not_sent", user_id=str(user.id))
        return email_sent

    # =========================================================================
    # Sign-in
    # =========================================================================

    async def _check_password(self, email: str, password: str) -> User:
        user = await UserRepository.get_by_email(self._db, email)
        if user is None:
            # Security: keep response time independent of user existence
            verify_password(password, DUMMY_HASH)
            raise InvalidCredentialsError("Invalid email or password")
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid email or password")
        return user

    async def authenticate(self, *, email: str, password: str) -> SignInResult:
        """Check credentials and issue a session token.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password.
            EmailNotVerifiedError: Credentials are valid but the email is
                not verified yet.
        """
        user = await self._check_password(email, password)
        if not user.is_verified:
            raise EmailNotVerifiedError()

        token = issue_session_token(
            SessionClaims(user_id=user.id, email=user.email, account_id=user.account_id)
        )
        account = None
        if user.account_id is not None:
            account = await AccountRepository.get_by_id(self._db, user.account_id)
        return SignInResult(user=user, account=account, token=token)

    async def check_user(self, *, email: str, password: str) -> bool:
        """Whether a valid email/password pair belongs to an unverified user.

        Returns False for unknown emails and wrong passwords alike so the
        answer never reveals whether an address is registered.
        """
        try:
            user = await self._check_password(email, password)
        except InvalidCredentialsError:
            return False
        return not user.is_verified

    # =========================================================================
    # Accounts
    # =========================================================================

    async def get_account(self, account_id: uuid.UUID) -> AccountView:
        """Fetch an account with its members.

        Raises:
            NotFoundError: Account does not exist.
        """
        account = await AccountRepository.get_by_id(self._db, account_id)
        if account is None:
            raise NotFoundError("Account", str(account_id))
        members = await UserRepository.list_by_account(self._db, account_id)
        return AccountView(account=account, members=members)

    async def update_account_name(self, account_id: uuid.UUID, name: str) -> Account:
        """Rename an account.

        Raises:
            NotFoundError: Account does not exist.
        """
        async with unit_of_work(self._db):
            account = await AccountRepository.update_name(self._db, account_id, name)
            if account is None:
                raise NotFoundError("Account", str(account_id))
        return account

    async def delete_account(self, account_id: uuid.UUID) -> None:
        """Delete an account with all its users, orders and order items.

        Runs child-to-parent under a row lock on the account: items, orders,
        non-owner members, then the owner is detached, the account removed
        and finally the owner deleted. Any failure rolls back every step.

        Raises:
            NotFoundError: Account does not exist.
        """
        async with unit_of_work(self._db):
            account = await AccountRepository.get_for_update(self._db, account_id)
            if account is None:
                raise NotFoundError("Account", str(account_id))
            owner_id = account.owner_id

            items = await OrderRepository.delete_items_for_account(self._db, account_id)
            orders = await OrderRepository.delete_for_account(self._db, account_id)
            members = await UserRepository.delete_members_except(
                self._db, account_id, keep_user_id=owner_id
            )
            await UserRepository.detach_from_account(self._db, account_id)
            await AccountRepository.delete(self._db, account_id)
            await UserRepository.delete(self._db, owner_id)

        logger.info(
            "account_deleted",
            account_id=str(account_id),
            orders=orders,
            order_items=items,
            users=members + 1,
        )

    # =========================================================================
    # Users
    # =========================================================================

    async def get_profile(self, user_id: uuid.UUID) -> ProfileView:
        """Fetch a user with its account and the account's members.

        Raises:
            NotFoundError: User does not exist.
        """
        user = await UserRepository.get_by_id(self._db, user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        if user.account_id is None:
            return ProfileView(user=user, account=None)
        account = await AccountRepository.get_by_id(self._db, user.account_id)
        members = await UserRepository.list_by_account(self._db, user.account_id)
        return ProfileView(user=user, account=account, members=members)

    async def update_user_profile(
        self,
        user_id: uuid.UUID,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> ProfileUpdateResult:
        """Update a user's name and/or email.

        Moving to a new email clears ``email_verified`` and issues a fresh
        verification token for the new address.

        Raises:
            ValidationError: Neither field given.
            NotFoundError: User does not exist.
            DuplicateEmailError: Email belongs to another user.
        """
        if name is None and email is None:
            raise ValidationError("At least one field must be provided")

        user = await UserRepository.get_by_id(self._db, user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))

        changes: dict[str, str | datetime | None] = {}
        if name is not None:
            changes["name"] = name

        email_changed = email is not None and normalize_email(email) != user.email
        if email_changed:
            existing = await UserRepository.get_by_email(self._db, email)
            if existing is not None and existing.id != user.id:
                raise DuplicateEmailError()
            changes["email"] = email
            changes["email_verified"] = None

        issued = None
        try:
            async with unit_of_work(self._db):
                user = await UserRepository.update(self._db, user_id, **changes)
                if email_changed:
                    issued = await self._tokens.issue(user.email)
        except IntegrityError as exc:
            raise DuplicateEmailError() from exc

        if issued is None:
            return ProfileUpdateResult(user=user, email_changed=False)

        logger.info("user_email_changed", user_id=str(user.id))
        email_sent = await send_verification_email(
            to_email=user.email, name=user.name, token=issued.token
        )
        if not email_sent:
            logger.warning("verification_email_not_sent", user_id=str(user.id))
        return ProfileUpdateResult(user=user, email_changed=True, email_sent=email_sent)

    async def change_password(
        self,
        user_id: uuid.UUID,
        *,
        current_password: str,
        new_password: str,
    ) -> None:
        """Replace a user's password after checking the current one.

        Raises:
            NotFoundError: User does not exist.
            InvalidCredentialsError: Current password does not match.
        """
        user = await UserRepository.get_by_id(self._db, user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        async with unit_of_work(self._db):
            await UserRepository.update(
                self._db, user_id, password_hash=hash_password(new_password)
            )
        logger.info("password_changed", user_id=str(user_id))
