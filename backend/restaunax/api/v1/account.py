"""Account endpoints.

GET, PATCH and DELETE /account/{account_id}. Session callers reach only
their own account; renaming and deleting additionally require ownership.
"""

import uuid

from fastapi import APIRouter, Response
from sqlalchemy.ext.asyncio import AsyncSession

from restaunax.api.deps import (
    Caller,
    CurrentCaller,
    DbSession,
    require_account_access,
    require_account_owner,
)
from restaunax.core.auth import clear_session_cookie
from restaunax.core.errors import NotFoundError
from restaunax.core.responses import DataResponse, MessageData
from restaunax.repositories.account_repository import AccountRepository
from restaunax.schemas.account import AccountRead, AccountUpdate, AccountWithMembers
from restaunax.schemas.user import MemberRead
from restaunax.services.account_service import AccountService

router = APIRouter()


async def _require_owner(
    db: AsyncSession, caller: Caller, account_id: uuid.UUID
) -> None:
    require_account_access(caller, account_id)
    account = await AccountRepository.get_by_id(db, account_id)
    if account is None:
        raise NotFoundError("Account", str(account_id))
    require_account_owner(caller, account)


@router.get("/{account_id}")
async def get_account(
    account_id: uuid.UUID,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[AccountWithMembers]:
    """Account with its members."""
    require_account_access(caller, account_id)
    view = await AccountService(db).get_account(account_id)
    return DataResponse(
        data=AccountWithMembers(
            **AccountRead.model_validate(view.account).model_dump(),
            members=[MemberRead.model_validate(m) for m in view.members],
        )
    )


@router.patch("/{account_id}")
async def update_account(
    account_id: uuid.UUID,
    body: AccountUpdate,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[AccountRead]:
    """Rename an account (owner only for session callers)."""
    await _require_owner(db, caller, account_id)
    account = await AccountService(db).update_account_name(account_id, body.name)
    return DataResponse(data=AccountRead.model_validate(account))


@router.delete("/{account_id}")
async def delete_account(
    account_id: uuid.UUID,
    response: Response,
    caller: CurrentCaller,
    db: DbSession,
) -> DataResponse[MessageData]:
    """Delete an account with its users and orders (owner only for session callers).

    The session cookie is cleared: the caller's user no longer exists.
    """
    await _require_owner(db, caller, account_id)
    await AccountService(db).delete_account(account_id)
    if not caller.is_service:
        clear_session_cookie(response)
    return DataResponse(data=MessageData(message="Account deleted successfully"))
