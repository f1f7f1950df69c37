"""API router aggregator.

All endpoint routers are included here and mounted under /api.
"""

from fastapi import APIRouter

from app.api.routes import auth, health

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])

# =============================================================================
# Operations
# =============================================================================

router.include_router(health.router, tags=["health"])
