"""Credential helpers: password hashing and session tokens.

Shared utilities used by the auth endpoints and the auth dependencies.

Pipeline:
- hash_password / verify_password: bcrypt with adaptive cost factor
- issue_session_token / validate_session_token: signed HS256 JWT carrying
  the user id, email and account id
- set_session_cookie / clear_session_cookie: httpOnly cookie transport
- DUMMY_HASH: Timing-safe constant for user enumeration defense
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt
from fastapi import Response

from restaunax.core.config import settings
from restaunax.core.errors import ExpiredTokenError, InvalidTokenError, ValidationError

logger = logging.getLogger(__name__)

_JWT_ALGORITHM = "HS256"

# bcrypt only reads the first 72 bytes; bcrypt>=5 raises past that
PASSWORD_MAX_BYTES = 72

# Pre-computed bcrypt hash for timing-safe comparison on user-not-found.
# Security: prevents user enumeration via response time differences.
# Pre-generated to avoid ~300ms bcrypt computation on every app startup.
DUMMY_HASH = "$2b$12$ZP2PVB8yI35X.mkRqcUPUuSzJA1CNRt4dZ7X3cyrfJu.2S3w.Qen2"


@dataclass(frozen=True)
class SessionClaims:
    """Identity carried by a session token.

    Attributes:
        user_id: Authenticated user.
        email: User email at issuance time.
        account_id: Account the user belongs to (None while account-less).
    """

    user_id: uuid.UUID
    email: str
    account_id: uuid.UUID | None


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Args:
        password: Plain-text password.

    Returns:
        bcrypt hash as a string (salt embedded).

    Raises:
        ValidationError: If the password is empty or longer than
            PASSWORD_MAX_BYTES once UTF-8 encoded.
    """
    if not password:
        raise ValidationError("Password must not be empty")
    if len(password.encode()) > PASSWORD_MAX_BYTES:
        raise ValidationError(
            f"Password must be at most {PASSWORD_MAX_BYTES} bytes",
            details=[{"loc": ["password"], "msg": "too long", "type": "too_long"}],
        )
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    ).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.

    Never raises for mismatched or malformed input; returns False instead.

    Args:
        password: Plain-text password to check.
        password_hash: Stored bcrypt hash.

    Returns:
        True if the password matches.
    """
    if not password or not password_hash:
        return False
    if len(password.encode()) > PASSWORD_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed hash (e.g., a row written by another tool)
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def _secret(secret: str | None) -> str:
    return secret if secret is not None else settings.auth_secret.get_secret_value()


def issue_session_token(
    claims: SessionClaims,
    *,
    secret: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed session token.

    Args:
        claims: Identity to encode.
        secret: HMAC signing secret. Defaults to settings.auth_secret.
        expires_delta: Validity window. Defaults to SESSION_TOKEN_TTL_DAYS.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(UTC)
    lifetime = expires_delta or timedelta(days=settings.session_token_ttl_days)
    payload = {
        "sub": str(claims.user_id),
        "email": claims.email,
        "account_id": str(claims.account_id) if claims.account_id else None,
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": now + lifetime,
        "iat": now,
    }
    return jwt.encode(payload, _secret(secret), algorithm=_JWT_ALGORITHM)


def validate_session_token(token: str, *, secret: str | None = None) -> SessionClaims:
    """Verify a session token and return its claims.

    Args:
        token: Encoded JWT string.
        secret: HMAC signing secret. Defaults to settings.auth_secret.

    Returns:
        Decoded SessionClaims.

    Raises:
        ExpiredTokenError: Signature is valid but the token is past exp.
        InvalidTokenError: Any other decoding or claim failure.
    """
    try:
        payload = jwt.decode(
            token,
            _secret(secret),
            algorithms=[_JWT_ALGORITHM],
            audience=settings.auth_audience,
            issuer=settings.auth_issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
        account_id = payload.get("account_id")
        return SessionClaims(
            user_id=uuid.UUID(payload["sub"]),
            email=payload["email"],
            account_id=uuid.UUID(account_id) if account_id else None,
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredTokenError() from exc
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError) as exc:
        raise InvalidTokenError() from exc


def set_session_cookie(response: Response, token: str) -> None:
    """Set httpOnly session cookie on response.

    Security: httpOnly prevents XSS cookie theft. Secure flag and SameSite
    are configured via settings for environment-appropriate security.

    Args:
        response: FastAPI response object.
        token: Session token string.
    """
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
        path="/",
        max_age=settings.session_token_ttl_days * 24 * 60 * 60,
    )


def clear_session_cookie(response: Response) -> None:
    """Remove the session cookie (logout, account deletion)."""
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        secure=settings.auth_cookie_secure,
        httponly=True,
        samesite=settings.auth_cookie_samesite,
    )
