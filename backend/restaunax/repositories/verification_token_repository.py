"""Repository for the verification_tokens table.

Rows are keyed by the token's SHA-256 digest and grouped by identifier
(the email address). Callers own the transaction; nothing here commits.
"""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.models.verification_token import VerificationToken


class VerificationTokenRepository:
    """Stateless data access for VerificationToken rows."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        identifier: str,
        token_hash: str,
        expires: datetime,
    ) -> VerificationToken:
        """Insert a token row and flush it.

        Args:
            db: Async database session.
            identifier: Normalized email address.
            token_hash: Digest of the plain token.
            expires: Absolute expiry (timezone-aware).

        Returns:
            The new VerificationToken.
        """
        row = VerificationToken(
            token=token_hash,
            identifier=identifier,
            expires=expires,
        )
        db.add(row)
        await db.flush()
        return row

    @staticmethod
    async def get_by_hash(
        db: AsyncSession, token_hash: str
    ) -> VerificationToken | None:
        """Fetch the row stored under a digest, or None."""
        result = await db.execute(
            select(VerificationToken).where(VerificationToken.token == token_hash)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def delete_by_hash(db: AsyncSession, token_hash: str) -> bool:
        """Remove one token row.

        Returns:
            True if a row was deleted.
        """
        result = await db.execute(
            delete(VerificationToken).where(VerificationToken.token == token_hash)
        )
        return bool(result.rowcount)  # type: ignore[attr-defined]

    @staticmethod
    async def delete_for_identifier(db: AsyncSession, identifier: str) -> int:
        """Remove every token issued to an email.

        Returns:
            Number of deleted rows.
        """
        result = await db.execute(
            delete(VerificationToken).where(
                VerificationToken.identifier == identifier
            )
        )
        count: int = result.rowcount  # type: ignore[attr-defined]
        return count

    @staticmethod
    async def delete_all(db: AsyncSession) -> int:
        """Remove every token row (development reset)."""
        result = await db.execute(delete(VerificationToken))
        count: int = result.rowcount  # type: ignore[attr-defined]
        return count
