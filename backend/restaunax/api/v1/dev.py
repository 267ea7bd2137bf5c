"""Development-only endpoints.

GET /dev/reset-db resets or seeds the database. Refused with 403 outside
the development environment, before any other check.
"""

import uuid

from fastapi import APIRouter

from restaunax.api.deps import DbSession
from restaunax.core.responses import DataResponse
from restaunax.services.dev_reset import DevResetService, ensure_development

router = APIRouter()


@router.get("/reset-db")
async def reset_db(
    db: DbSession,
    account_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
) -> DataResponse[dict]:
    """Reset or seed the database.

    - account_id: replace that account's orders with 30 days of demo orders
    - user_id: keep only that user and its account
    - neither: wipe everything
    """
    ensure_development()
    result = await DevResetService(db).reset(account_id=account_id, user_id=user_id)

    data: dict = {"message": result.message, "mode": result.mode}
    if result.mode == "seed":
        data["orders_created"] = result.orders_created
        data["date_range"] = {
            "from": result.date_from.isoformat() if result.date_from else None,
            "to": result.date_to.isoformat() if result.date_to else None,
        }
    return DataResponse(data=data)
