"""API v1 router aggregator.

All v1 endpoint routers are included here and mounted at /api/v1.
"""

from fastapi import APIRouter

from restaunax.api.v1 import account, auth, dev, orders, users

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])

# =============================================================================
# Core Resource Routers
# =============================================================================

router.include_router(account.router, prefix="/account", tags=["account"])
router.include_router(users.router, prefix="/user", tags=["user"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])

# =============================================================================
# Development tooling (refuses outside ENVIRONMENT=development)
# =============================================================================

router.include_router(dev.router, prefix="/dev", tags=["dev"])
