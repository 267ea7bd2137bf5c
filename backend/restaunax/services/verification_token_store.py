"""Single-use email verification tokens.

Issues and consumes the tokens emailed at registration, on resend and on
email change. Plain tokens carry 256 bits of entropy and are never stored;
rows hold their SHA-256 digest.

Invariants:
- At most one active token per email: issuing deletes the previous ones.
- Exactly-once consumption: a consumed token is deleted, so a second
  consume of the same token fails as unknown.
- Expired tokens are purged on the first access after expiry, and the
  purge is committed even though the call fails.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.core.config import settings
from restaunax.core.errors import (
    InvalidVerificationTokenError,
    VerificationTokenExpiredError,
)
from restaunax.models.base import as_utc
from restaunax.repositories.user_repository import normalize_email
from restaunax.repositories.verification_token_repository import (
    VerificationTokenRepository,
)

logger = structlog.get_logger()

# 32 random bytes = 256 bits of entropy
_TOKEN_BYTES = 32


def hash_token(token: str) -> str:
    """SHA-256 hex digest under which a plain token is stored."""
    return hashlib.sha256(token.encode()).hexdigest()


@dataclass(frozen=True)
class IssuedToken:
    """Freshly issued token.

    Attributes:
        token: Plain token for the emailed link. Not persisted.
        expires: Absolute expiry.
    """

    token: str
    expires: datetime


class VerificationTokenStore:
    """Issue and consume verification tokens through the caller's session.

    Args:
        db: Async database session. Writes are flushed, not committed,
            except for the expired-token purge in consume().
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def issue(self, email: str) -> IssuedToken:
        """Replace any tokens for an email with a new one.

        Args:
            email: Address the token will verify.

        Returns:
            IssuedToken with the plain token and its expiry.
        """
        identifier = normalize_email(email)
        await VerificationTokenRepository.delete_for_identifier(self._db, identifier)

        plain_token = secrets.token_urlsafe(_TOKEN_BYTES)
        expires = datetime.now(UTC) + timedelta(
            hours=settings.verification_token_ttl_hours
        )
        await VerificationTokenRepository.create(
            self._db,
            identifier=identifier,
            token_hash=hash_token(plain_token),
            expires=expires,
        )
        return IssuedToken(token=plain_token, expires=expires)

    async def consume(self, token: str) -> str:
        """Use a token once and return the email it verifies.

        Args:
            token: Plain token from the verification link.

        Returns:
            The stored identifier (email address).

        Raises:
            InvalidVerificationTokenError: No row matches the token.
            VerificationTokenExpiredError: The token is past its expiry; the
                row has been deleted and committed.
        """
        token_hash = hash_token(token)
        vt = await VerificationTokenRepository.get_by_hash(self._db, token_hash)
        if vt is None:
            raise InvalidVerificationTokenError()

        if as_utc(vt.expires) < datetime.now(UTC):
            await VerificationTokenRepository.delete_by_hash(self._db, token_hash)
            await self._db.commit()
            logger.info("verification_token_expired_purged")
            raise VerificationTokenExpiredError()

        identifier = vt.identifier
        # A concurrent consume may have deleted the row since the read
        if not await VerificationTokenRepository.delete_by_hash(self._db, token_hash):
            raise InvalidVerificationTokenError()
        return identifier
