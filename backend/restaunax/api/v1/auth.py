"""Authentication endpoints.

register, check-credentials (sign-in), check-user, verify-email,
resend-verification and logout.

Security considerations:
- check-credentials / check-user: DUMMY_HASH comparison for unknown emails
  prevents user enumeration via response time
- register / resend: verification email is best effort; a failed send is
  reported as a warning, never as a failed request
- All unauthenticated endpoints that check passwords or send email are
  rate-limited per client address
"""

from fastapi import APIRouter, Query, Request, Response

from restaunax.api.deps import DbSession
from restaunax.core.auth import clear_session_cookie, set_session_cookie
from restaunax.core.config import settings
from restaunax.core.rate_limiting import limiter
from restaunax.core.responses import DataResponse, MessageData
from restaunax.schemas.account import AccountRead, RegisterResponse, SignInResponse
from restaunax.schemas.user import (
    CheckUserResponse,
    CredentialsRequest,
    RegisterRequest,
    ResendVerificationRequest,
    UserRead,
)
from restaunax.services.account_service import AccountService

router = APIRouter()

_REGISTERED_MSG = (
    "Registration successful. Please check your email to verify your account."
)

# ===================================================================
# POST /auth/register
# ===================================================================


@router.post("/register", status_code=201)
@limiter.limit(settings.rate_limit_register)
async def register(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RegisterRequest,
    db: DbSession,
) -> DataResponse[RegisterResponse]:
    """Register a user and the account it owns.

    Unauthenticated. The new user is unverified; a verification link is
    emailed after the data is committed.
    """
    result = await AccountService(db).register(
        name=body.name, email=body.email, password=body.password
    )
    return DataResponse(
        data=RegisterResponse(
            user=UserRead.model_validate(result.user),
            account=AccountRead.model_validate(result.account),
            message=_REGISTERED_MSG,
            warnings=result.warnings,
        )
    )


# ===================================================================
# POST /auth/check-credentials
# ===================================================================


@router.post("/check-credentials")
@limiter.limit(settings.rate_limit_auth)
async def check_credentials(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: CredentialsRequest,
    response: Response,
    db: DbSession,
) -> DataResponse[SignInResponse]:
    """Sign in with email + password.

    Returns the session token in the body and sets it as an httpOnly
    cookie. Unverified users get 403 EMAIL_NOT_VERIFIED.
    """
    result = await AccountService(db).authenticate(
        email=body.email, password=body.password
    )
    set_session_cookie(response, result.token)
    return DataResponse(
        data=SignInResponse(
            token=result.token,
            user=UserRead.model_validate(result.user),
            account=(
                AccountRead.model_validate(result.account) if result.account else None
            ),
        )
    )


# ===================================================================
# POST /auth/check-user
# ===================================================================


@router.post("/check-user")
@limiter.limit(settings.rate_limit_auth)
async def check_user(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: CredentialsRequest,
    db: DbSession,
) -> DataResponse[CheckUserResponse]:
    """Tell the sign-in page whether to offer a verification resend.

    ``unverified`` is true only for a correct password on an unverified
    account, so the answer never reveals whether an email is registered.
    """
    unverified = await AccountService(db).check_user(
        email=body.email, password=body.password
    )
    return DataResponse(data=CheckUserResponse(unverified=unverified))


# ===================================================================
# GET /auth/verify-email
# ===================================================================


@router.get("/verify-email")
async def verify_email(
    db: DbSession,
    token: str = Query(min_length=1, max_length=256),
) -> DataResponse[MessageData]:
    """Consume a verification token from the emailed link."""
    await AccountService(db).verify_email(token)
    return DataResponse(data=MessageData(message="Email verified successfully"))


# ===================================================================
# POST /auth/resend-verification
# ===================================================================


@router.post("/resend-verification")
@limiter.limit(settings.rate_limit_resend)
async def resend_verification(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: ResendVerificationRequest,
    db: DbSession,
) -> DataResponse[dict]:
    """Issue a new verification token, replacing any previous one."""
    email_sent = await AccountService(db).resend_verification(body.email)
    data: dict = {"message": "Verification email sent"}
    if not email_sent:
        data = {
            "message": "Verification token issued but the email could not be sent",
            "warnings": ["VERIFICATION_EMAIL_NOT_SENT"],
        }
    return DataResponse(data=data)


# ===================================================================
# POST /auth/logout
# ===================================================================


@router.post("/logout")
async def logout(response: Response) -> DataResponse[MessageData]:
    """Clear the session cookie."""
    clear_session_cookie(response)
    return DataResponse(data=MessageData(message="Logged out"))
