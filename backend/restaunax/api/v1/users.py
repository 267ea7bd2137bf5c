"""User endpoints.

GET/PATCH /user/{user_id} and POST /user/change-password. Session callers
reach only their own user.
"""

import uuid

from fastapi import APIRouter

from restaunax.api.deps import CurrentCaller, DbSession, require_user_access
from restaunax.core.errors import ValidationError
from restaunax.core.responses import DataResponse, MessageData
from restaunax.schemas.account import (
    AccountRead,
    ProfileResponse,
    ProfileUpdateResponse,
)
from restaunax.schemas.user import (
    ChangePasswordRequest,
    MemberRead,
    UserProfileUpdate,
    UserRead,
)
from restaunax.services.account_service import AccountService

router = APIRouter()


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[MessageData]:
    """Change a password after checking the current one.

    Session callers change their own password. Service callers must name
    the user in ``user_id``.
    """
    user_id = body.user_id if caller.is_service else caller.user_id
    if user_id is None:
        raise ValidationError(
            "user_id is required",
            details=[{"loc": ["body", "user_id"], "msg": "Field required"}],
        )
    require_user_access(caller, user_id)

    await AccountService(db).change_password(
        user_id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    return DataResponse(data=MessageData(message="Password updated successfully"))


@router.get("/{user_id}")
async def get_user(
    user_id: uuid.UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[ProfileResponse]:
    """User profile with its account and the account's members."""
    require_user_access(caller, user_id)
    view = await AccountService(db).get_profile(user_id)
    return DataResponse(
        data=ProfileResponse(
            user=UserRead.model_validate(view.user),
            account=AccountRead.model_validate(view.account) if view.account else None,
            members=[MemberRead.model_validate(m) for m in view.members],
        )
    )


@router.patch("/{user_id}")
async def update_user(
    user_id: uuid.UUID,
    body: UserProfileUpdate,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[ProfileUpdateResponse]:
    """Update name and/or email.

    An email change clears verification and sends a new verification link.
    """
    require_user_access(caller, user_id)
    result = await AccountService(db).update_user_profile(
        user_id, name=body.name, email=body.email
    )
    message = "Profile updated successfully"
    if result.email_changed:
        message = "Profile updated. Please verify your new email address."
    return DataResponse(
        data=ProfileUpdateResponse(
            user=UserRead.model_validate(result.user),
            message=message,
            warnings=result.warnings,
        )
    )
