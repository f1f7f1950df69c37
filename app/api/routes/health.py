"""Health check endpoint for monitoring."""

from datetime import UTC, datetime

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter()


@router.get("/health")
def health_check() -> dict:
    """Report that the API process is up.

    Returns:
        {"status": "OK", ...} while the service is running.
    """
    return {
        "status": "OK",
        "message": f"{settings.site_name} backend API is running",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": "2.0.0",
    }
