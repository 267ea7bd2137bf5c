"""Email sending via Resend API.

Simple HTTP POST to Resend for verification emails. Delivery is best
effort: callers learn whether the send succeeded but a failure never
raises, so committed data is never rolled back because of email.
"""

import logging
from urllib.parse import quote, urlencode

import httpx

from restaunax.core.config import settings

logger = logging.getLogger(__name__)

_RESEND_API_URL = "https://api.resend.com/emails"
_RESEND_TIMEOUT = 10.0


def build_verification_url(token: str) -> str:
    """Link the user follows to verify their email address."""
    params = urlencode({"token": token}, quote_via=quote)
    return f"{settings.frontend_url}/auth/verify-email?{params}"


async def send_verification_email(*, to_email: str, name: str, token: str) -> bool:
    """Send an email-verification link via Resend.

    Args:
        to_email: Recipient email address.
        name: Recipient display name used in the greeting.
        token: Plain (unhashed) verification token.

    Returns:
        True if the provider accepted the message, False otherwise.
    """
    api_key = settings.resend_api_key.get_secret_value()
    if not api_key:
        logger.warning("Email transport not configured; verification email not sent")
        return False

    verify_url = build_verification_url(token)
    ttl_hours = settings.verification_token_ttl_hours

    try:
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                _RESEND_API_URL,
                headers={"Authorization": f"Bearer {api_key}"},
                json={
                    "from": settings.email_from,
                    "to": to_email,
                    "subject": "Verify your RestaunaX account",
                    "text": (
                        f"Welcome to RestaunaX, {name}!\n\n"
                        "Please verify your email address by opening this link:\n\n"
                        f"{verify_url}\n\n"
                        f"This link expires in {ttl_hours} hours. "
                        "If you didn't create this account, you can ignore this email."
                    ),
                },
                timeout=_RESEND_TIMEOUT,
            )
            resp.raise_for_status()
    except httpx.HTTPError:
        logger.warning("Failed to send verification email", exc_info=True)
        return False

    return True
