"""Domain errors rendered as the ``{"error": {...}}`` envelope.

Services and dependencies raise these; the handlers in ``restaunax.main``
turn them into JSON with the matching HTTP status. Clients branch on
``error.code``, never on the message text.
"""

from typing import Any


class APIError(Exception):
    """Base class for every error the API reports deliberately.

    Attributes:
        code: Stable machine-readable code, e.g. "NOT_FOUND".
        message: Human-readable description.
        status_code: HTTP status for the response.
        details: Optional per-field information.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


# --- 400 ---------------------------------------------------------------------


class ValidationError(APIError):
    """Input failed a rule the schemas cannot express (400)."""

    def __init__(
        self, message: str, details: list[dict[str, Any]] | None = None
    ) -> None:
        super().__init__("VALIDATION_ERROR", message, 400, details)


class DuplicateEmailError(APIError):
    """Email is taken by another user (400)."""

    def __init__(self, message: str = "A user with this email already exists") -> None:
        super().__init__("DUPLICATE_EMAIL", message, 400)


class InvalidVerificationTokenError(APIError):
    """No stored token matches; it never existed or was already used (400)."""

    def __init__(self) -> None:
        super().__init__(
            "INVALID_VERIFICATION_TOKEN", "Invalid verification token", 400
        )


class VerificationTokenExpiredError(APIError):
    """Token is past its expiry and has been purged (400)."""

    def __init__(self) -> None:
        super().__init__(
            "VERIFICATION_TOKEN_EXPIRED",
            "Verification token has expired. Please request a new verification email.",
            400,
        )


class AlreadyVerifiedError(APIError):
    """Resend requested for an address that is already verified (400)."""

    def __init__(self) -> None:
        super().__init__("ALREADY_VERIFIED", "Email is already verified", 400)


# --- 401 ---------------------------------------------------------------------


class UnauthorizedError(APIError):
    """Missing or unusable credentials (401)."""

    def __init__(
        self, message: str = "Authentication required", code: str = "UNAUTHORIZED"
    ) -> None:
        super().__init__(code, message, 401)


class InvalidCredentialsError(UnauthorizedError):
    """Wrong email/password pair or wrong current password."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message, "INVALID_CREDENTIALS")


class InvalidTokenError(UnauthorizedError):
    """Session token is malformed or its signature does not verify."""

    def __init__(self) -> None:
        super().__init__("Invalid session token", "INVALID_TOKEN")


class ExpiredTokenError(UnauthorizedError):
    """Session token is past its ``exp`` claim."""

    def __init__(self) -> None:
        super().__init__("Session token expired", "TOKEN_EXPIRED")


# --- 403 ---------------------------------------------------------------------


class ForbiddenError(APIError):
    """Authenticated, but not allowed to do this (403)."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__("FORBIDDEN", message, 403)


class EmailNotVerifiedError(APIError):
    """Sign-in refused until the address is verified (403)."""

    def __init__(self) -> None:
        super().__init__(
            "EMAIL_NOT_VERIFIED",
            "Email not verified. Please check your email and verify your account.",
            403,
        )


# --- 404 / 500 ---------------------------------------------------------------


class NotFoundError(APIError):
    """Resource is missing, or belongs to another account (404).

    Orders of other accounts are reported as missing rather than forbidden.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        message = (
            f"{resource} with id '{resource_id}' not found"
            if resource_id
            else f"{resource} not found"
        )
        super().__init__("NOT_FOUND", message, 404)


class InternalError(APIError):
    """Unexpected server failure (500). Carries no internal detail."""

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__("INTERNAL_ERROR", message, 500)
